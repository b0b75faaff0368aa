"""
Submission Service
Validates a student's answers and runs automatic grading
"""
import logging
from dataclasses import dataclass

from bilgen.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bilgen.models import HomeworkStatus
from bilgen.models.question import parse_answers
from bilgen.services.grading_service import auto_grade
from bilgen.utils.helpers import as_utc, now_utc

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    homework: object
    auto_score: float
    pending: bool


class SubmissionService:
    """Student submission: validation, auto-grading and a guarded write"""

    def __init__(self, store, clock=now_utc):
        self.store = store
        self.clock = clock

    def validate(self, actor, homework_id, raw_answers, now):
        """
        Check every precondition without touching stored state.
        Returns ``(homework, exam, answers)``.
        """
        if not isinstance(raw_answers, list):
            raise ValidationError("Answers must be a list")

        homework = self.store.get_homework(homework_id)
        if homework is None:
            raise NotFoundError("Homework not found")

        if not actor.owns(homework.student_id):
            raise ForbiddenError("This homework does not belong to you")

        if homework.status != HomeworkStatus.ASSIGNED:
            raise ConflictError("This homework has already been submitted")

        due_date = as_utc(homework.due_date)
        if due_date is not None and now > due_date:
            raise ConflictError("The due date for this homework has passed")

        answers = parse_answers(raw_answers)

        exam = self.store.get_exam(homework.exam_id)
        if exam is None:
            raise NotFoundError("Exam not found")
        return homework, exam, answers

    def submit(self, actor, homework_id, raw_answers):
        now = self.clock()
        homework, exam, answers = self.validate(actor, homework_id, raw_answers, now)

        # Unmatched answers are rejected here, before anything is written
        result = auto_grade(exam.questions, answers)

        written = self.store.record_submission(
            homework.id, result.answers, result.status, result.score, now
        )
        if not written:
            raise ConflictError("This homework has already been submitted")

        logger.info(
            "Homework %s submitted by student %s: status=%s auto_score=%s",
            homework.id, actor.id, result.status.value, result.auto_score,
        )
        return SubmissionOutcome(
            homework=self.store.get_homework(homework.id),
            auto_score=result.auto_score,
            pending=result.pending,
        )
