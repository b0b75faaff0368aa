"""
Exam Model
Ordered question set with a derived point total and a publication status
"""
import enum

from bilgen.extensions import db
from bilgen.models.question import decode_questions, encode_questions, total_points
from bilgen.utils.helpers import isoformat, now_utc


class ExamStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Exam(db.Model):
    """Exam model"""
    __tablename__ = 'exams'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    grade = db.Column(db.Integer, nullable=False)
    subject_name = db.Column(db.String(100), nullable=False)
    topic = db.Column(db.String(200))

    # JSON-encoded question list, see bilgen.models.question
    questions_json = db.Column('questions', db.Text, nullable=False)
    total_points = db.Column(db.Float, nullable=False, default=0)

    duration = db.Column(db.Integer)  # minutes
    difficulty = db.Column(
        db.Enum(Difficulty, native_enum=False, length=10),
        nullable=False,
        default=Difficulty.MEDIUM,
    )
    status = db.Column(
        db.Enum(ExamStatus, native_enum=False, length=20),
        nullable=False,
        default=ExamStatus.DRAFT,
    )

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    created_by = db.relationship('User', foreign_keys=[created_by_id])
    homeworks = db.relationship(
        'Homework',
        back_populates='exam',
        cascade='all, delete-orphan',
        passive_deletes=True,
        lazy=True,
    )

    def __repr__(self):
        return f'<Exam {self.title}>'

    @property
    def questions(self):
        return decode_questions(self.questions_json)

    @questions.setter
    def questions(self, questions):
        """Replacing the question set always recomputes the total"""
        self.questions_json = encode_questions(questions)
        self.total_points = total_points(questions)

    def to_dict(self, questions=None):
        """Serialize for API responses; ``questions`` may be a redacted list"""
        if questions is None:
            questions = [q.to_dict() for q in self.questions]
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'grade': self.grade,
            'subjectName': self.subject_name,
            'topic': self.topic,
            'questions': questions,
            'totalPoints': self.total_points,
            'duration': self.duration,
            'difficulty': self.difficulty.value if self.difficulty else None,
            'status': self.status.value if self.status else None,
            'createdById': self.created_by_id,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def to_summary(self):
        return {
            'id': self.id,
            'title': self.title,
            'grade': self.grade,
            'subjectName': self.subject_name,
            'topic': self.topic,
            'totalPoints': self.total_points,
            'duration': self.duration,
        }
