"""
User, Role and Classroom Models
Read-only here: accounts, role grants and rosters are managed elsewhere
"""
from bilgen.extensions import db
from bilgen.utils.helpers import now_utc


user_roles = db.Table(
    'user_roles',
    db.Column('user_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('role_id', db.Integer, db.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
)

classroom_students = db.Table(
    'classroom_students',
    db.Column('classroom_id', db.Integer, db.ForeignKey('classrooms.id', ondelete='CASCADE'), primary_key=True),
    db.Column('student_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)


class Role(db.Model):
    """Role model (STUDENT, TEACHER, ADMIN)"""
    __tablename__ = 'roles'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)

    def __repr__(self):
        return f'<Role {self.name}>'


class User(db.Model):
    """User model"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(150))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    roles = db.relationship('Role', secondary=user_roles, lazy='selectin')

    def __repr__(self):
        return f'<User {self.email}>'

    @property
    def role_names(self):
        return {role.name for role in self.roles}

    @property
    def display_name(self):
        return self.name or self.email

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}


class Classroom(db.Model):
    """Classroom model: owning teacher plus student roster"""
    __tablename__ = 'classrooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    grade = db.Column(db.Integer)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    teacher = db.relationship('User', foreign_keys=[teacher_id])
    students = db.relationship('User', secondary=classroom_students, lazy='selectin')

    def __repr__(self):
        return f'<Classroom {self.name}>'

    @property
    def student_ids(self):
        return [student.id for student in self.students]
