"""
Exam Service
Exam creation, update, deletion and the read paths that serve questions
"""
import logging

from bilgen.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bilgen.models import Difficulty, Exam, ExamStatus
from bilgen.models.question import normalize_questions
from bilgen.services.visibility import questions_for_viewer
from bilgen.utils.helpers import to_id

logger = logging.getLogger(__name__)

MIN_GRADE = 1
MAX_GRADE = 8


def parse_grade(raw):
    grade = to_id(raw, "grade")
    if grade < MIN_GRADE or grade > MAX_GRADE:
        raise ValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE}")
    return grade


def parse_difficulty(raw):
    try:
        return Difficulty(str(raw or Difficulty.MEDIUM.value).upper())
    except ValueError:
        raise ValidationError(
            "Invalid difficulty. Valid options: "
            + ", ".join(d.value for d in Difficulty)
        )


def parse_duration(raw):
    if raw in (None, ""):
        return None
    duration = to_id(raw, "duration")
    if duration < 0:
        raise ValidationError("Duration must not be negative")
    return duration


def parse_exam_status(raw):
    if raw in (None, ""):
        return None
    try:
        return ExamStatus(str(raw).upper())
    except ValueError:
        raise ValidationError(f"Invalid exam status: {raw}")


class ExamService:
    """Exam store operations"""

    def __init__(self, store, default_points=10):
        self.store = store
        self.default_points = default_points

    def _get_owned(self, actor, exam_id, action):
        exam = self.store.get_exam(to_id(exam_id, "exam id"))
        if exam is None:
            raise NotFoundError("Exam not found")
        if not actor.can_manage(exam.created_by_id):
            raise ForbiddenError(f"You are not allowed to {action} this exam")
        return exam

    def create(self, actor, payload):
        title = payload.get('title')
        subject_name = payload.get('subjectName')
        if not title or payload.get('grade') in (None, "") or not subject_name \
                or payload.get('questions') is None:
            raise ValidationError("Title, grade, subject and questions are required")

        exam = Exam(
            title=title,
            description=payload.get('description'),
            grade=parse_grade(payload['grade']),
            subject_name=subject_name,
            topic=payload.get('topic') or None,
            duration=parse_duration(payload.get('duration')),
            difficulty=parse_difficulty(payload.get('difficulty')),
            status=ExamStatus.DRAFT,
            created_by_id=actor.id,
        )
        exam.questions = normalize_questions(payload['questions'], self.default_points)
        self.store.add_exam(exam)

        logger.info("Exam %s created by user %s (%s points)", exam.id, actor.id, exam.total_points)
        return exam

    def update(self, actor, exam_id, payload):
        exam = self._get_owned(actor, exam_id, "edit")

        if payload.get('status') not in (None, "") and \
                parse_exam_status(payload['status']) != exam.status:
            raise ValidationError("Exam status changes only through homework assignment")

        if payload.get('title'):
            exam.title = payload['title']
        if 'description' in payload:
            exam.description = payload['description']
        if 'duration' in payload:
            exam.duration = parse_duration(payload['duration'])
        if payload.get('difficulty'):
            exam.difficulty = parse_difficulty(payload['difficulty'])
        if payload.get('questions') is not None:
            exam.questions = normalize_questions(payload['questions'], self.default_points)

        self.store.save_exam(exam)
        logger.info("Exam %s updated by user %s", exam.id, actor.id)
        return exam

    def delete(self, actor, exam_id):
        exam = self._get_owned(actor, exam_id, "delete")

        assigned = self.store.assigned_counts([exam.id]).get(exam.id, 0)
        if assigned:
            raise ConflictError(
                f"This exam is assigned to {assigned} student(s). Remove the assignments first."
            )

        self.store.delete_exam(exam)
        logger.info("Exam %s deleted by user %s", exam_id, actor.id)

    def list_for(self, actor, status=None):
        """Teachers list their own exams, admins every exam"""
        exams = self.store.list_exams(
            created_by_id=None if actor.is_admin else actor.id,
            status=parse_exam_status(status),
        )
        counts = self.store.assigned_counts([exam.id for exam in exams])

        data = []
        for exam in exams:
            item = exam.to_dict()
            item['assignedCount'] = counts.get(exam.id, 0)
            data.append(item)
        return data

    def get_for_viewer(self, actor, exam_id):
        """Exam detail; students see answer keys only after submitting"""
        exam = self.store.get_exam(to_id(exam_id, "exam id"))
        if exam is None:
            raise NotFoundError("Exam not found")

        homework = None
        if not actor.is_staff:
            homework = self.store.find_homework(exam.id, actor.id)

        data = exam.to_dict(questions_for_viewer(exam.questions, actor, homework))
        if homework is not None:
            data['homework'] = {'id': homework.id, 'status': homework.status.value}
        return data
