"""
SQLAlchemy Store
The persistence boundary handed to every service.

Conditional writes (submission, publication) are single UPDATE statements
guarded by the expected current status, and homework uniqueness is left to
the database constraint, so concurrent requests cannot both win.
"""
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from bilgen.models import Classroom, Exam, ExamStatus, Homework, HomeworkStatus, Role, User
from bilgen.models.question import encode_answers
from bilgen.utils.helpers import STUDENT


class DuplicateAssignment(Exception):
    """The (exam, student) pair already has a homework"""


class SqlAlchemyStore:
    """Store backed by a SQLAlchemy session"""

    def __init__(self, session):
        self.session = session

    # ================= EXAMS =================

    def get_exam(self, exam_id):
        return self.session.get(Exam, exam_id)

    def add_exam(self, exam):
        self.session.add(exam)
        self.session.commit()
        return exam

    def save_exam(self, exam):
        self.session.commit()
        return exam

    def delete_exam(self, exam):
        self.session.delete(exam)
        self.session.commit()

    def list_exams(self, created_by_id=None, status=None):
        query = self.session.query(Exam)
        if created_by_id is not None:
            query = query.filter(Exam.created_by_id == created_by_id)
        if status is not None:
            query = query.filter(Exam.status == status)
        return query.order_by(Exam.created_at.desc(), Exam.id.desc()).all()

    def assigned_counts(self, exam_ids):
        """Homework count per exam id"""
        if not exam_ids:
            return {}
        rows = self.session.query(
            Homework.exam_id, func.count(Homework.id)
        ).filter(Homework.exam_id.in_(exam_ids)).group_by(Homework.exam_id).all()
        return {exam_id: count for exam_id, count in rows}

    def publish_exam(self, exam_id):
        """DRAFT -> PUBLISHED; False if the exam was already published"""
        result = self.session.execute(
            update(Exam)
            .where(Exam.id == exam_id, Exam.status == ExamStatus.DRAFT)
            .values({Exam.status: ExamStatus.PUBLISHED})
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    # ================= USERS & ROSTERS =================

    def get_classroom(self, classroom_id):
        return self.session.get(Classroom, classroom_id)

    def find_students(self, user_ids):
        """Users among ``user_ids`` that hold the STUDENT role"""
        if not user_ids:
            return []
        return self.session.query(User).filter(
            User.id.in_(user_ids),
            User.roles.any(Role.name == STUDENT),
        ).order_by(User.id).all()

    def list_students(self):
        return self.session.query(User).filter(
            User.roles.any(Role.name == STUDENT)
        ).order_by(User.name).all()

    # ================= HOMEWORK =================

    def get_homework(self, homework_id):
        return self.session.get(Homework, homework_id)

    def find_homework(self, exam_id, student_id):
        return self.session.query(Homework).filter_by(exam_id=exam_id, student_id=student_id).first()

    def list_homeworks(self, teacher_id=None, student_id=None, exam_id=None, status=None):
        query = self.session.query(Homework)
        if teacher_id is not None:
            query = query.filter(Homework.teacher_id == teacher_id)
        if student_id is not None:
            query = query.filter(Homework.student_id == student_id)
        if exam_id is not None:
            query = query.filter(Homework.exam_id == exam_id)
        if status is not None:
            query = query.filter(Homework.status == status)

        if student_id is not None:
            # ASSIGNED first, then nearest due date
            return query.order_by(Homework.status.asc(), Homework.due_date.asc()).all()
        return query.order_by(Homework.created_at.desc(), Homework.id.desc()).all()

    def create_homework(self, exam_id, student_id, teacher_id, due_date=None):
        """Insert one homework; the unique constraint decides duplicates"""
        homework = Homework(
            exam_id=exam_id,
            student_id=student_id,
            teacher_id=teacher_id,
            due_date=due_date,
            status=HomeworkStatus.ASSIGNED,
        )
        self.session.add(homework)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateAssignment(f"exam={exam_id} student={student_id}")
        return homework

    def record_submission(self, homework_id, answers, status, score, submitted_at):
        """Write answers only if the homework is still ASSIGNED"""
        result = self.session.execute(
            update(Homework)
            .where(Homework.id == homework_id, Homework.status == HomeworkStatus.ASSIGNED)
            .values({
                Homework.answers_json: encode_answers(answers),
                Homework.status: status,
                Homework.score: score,
                Homework.submitted_at: submitted_at,
            })
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return False
        self.session.commit()
        return True

    def record_grades(self, homework, answers, score, feedback, graded_at):
        homework.student_answers = answers
        homework.score = score
        homework.status = HomeworkStatus.GRADED
        homework.feedback = feedback
        homework.graded_at = graded_at
        self.session.commit()
        return homework
