"""
Homework Model
One student's tracked assignment of one exam
"""
import enum

from bilgen.extensions import db
from bilgen.models.question import decode_answers, encode_answers
from bilgen.utils.helpers import isoformat, now_utc


class HomeworkStatus(str, enum.Enum):
    ASSIGNED = "ASSIGNED"
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"


class Homework(db.Model):
    """Homework model"""
    __tablename__ = 'homeworks'

    id = db.Column(db.Integer, primary_key=True)
    exam_id = db.Column(
        db.Integer, db.ForeignKey('exams.id', ondelete='CASCADE'), nullable=False, index=True
    )
    student_id = db.Column(
        db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True
    )
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    due_date = db.Column(db.DateTime(timezone=True))
    status = db.Column(
        db.Enum(HomeworkStatus, native_enum=False, length=20),
        nullable=False,
        default=HomeworkStatus.ASSIGNED,
        index=True,
    )

    # JSON-encoded answer list, NULL until submission
    answers_json = db.Column('student_answers', db.Text)
    score = db.Column(db.Float)
    feedback = db.Column(db.Text)

    submitted_at = db.Column(db.DateTime(timezone=True))
    graded_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    exam = db.relationship('Exam', back_populates='homeworks')
    student = db.relationship('User', foreign_keys=[student_id])
    teacher = db.relationship('User', foreign_keys=[teacher_id])

    __table_args__ = (
        db.UniqueConstraint(
            'exam_id', 'student_id',
            name='unique_homework_per_student'
        ),
    )

    def __repr__(self):
        return f'<Homework exam={self.exam_id} student={self.student_id} {self.status}>'

    @property
    def student_answers(self):
        return decode_answers(self.answers_json)

    @student_answers.setter
    def student_answers(self, answers):
        self.answers_json = encode_answers(answers)

    def to_dict(self):
        answers = self.student_answers
        return {
            'id': self.id,
            'examId': self.exam_id,
            'studentId': self.student_id,
            'teacherId': self.teacher_id,
            'dueDate': isoformat(self.due_date),
            'status': self.status.value if self.status else None,
            'studentAnswers': [a.to_dict() for a in answers] if answers is not None else None,
            'score': self.score,
            'feedback': self.feedback,
            'submittedAt': isoformat(self.submitted_at),
            'gradedAt': isoformat(self.graded_at),
            'createdAt': isoformat(self.created_at),
        }
