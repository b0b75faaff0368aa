"""
Grading Service
Automatic multiple-choice scoring and manual grade merging
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional

from bilgen.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bilgen.models import HomeworkStatus
from bilgen.models.question import MULTIPLE_CHOICE, is_number, question_key
from bilgen.utils.helpers import now_utc

logger = logging.getLogger(__name__)


def resolve_question(questions, answer, index):
    """
    Find the question an answer refers to.

    Looks up by id first and falls back to the answer's position whenever
    the id lookup fails.
    """
    key = question_key(answer.question_id)
    if key is not None:
        for question in questions:
            if question_key(question.id) == key:
                return question
    if 0 <= index < len(questions):
        return questions[index]
    return None


@dataclass
class AutoGradeResult:
    answers: list
    status: HomeworkStatus
    score: Optional[float]
    auto_score: float

    @property
    def pending(self):
        return self.status == HomeworkStatus.SUBMITTED


def auto_grade(questions, answers):
    """
    Score every multiple-choice answer; leave open-ended ones pending.

    Multiple-choice answers are compared to the answer key with exact,
    case-sensitive equality. Each graded answer carries the id of the
    question it was matched to; a question may be answered only once.
    """
    graded = []
    answered = set()
    auto_score = 0
    pending = False

    for index, answer in enumerate(answers):
        question = resolve_question(questions, answer, index)
        if question is None:
            raise ValidationError(
                f"answers[{index}]: no matching question for id {answer.question_id!r}"
            )

        key = question_key(question.id)
        if key in answered:
            raise ValidationError(f"answers[{index}]: question {question.id!r} is answered twice")
        answered.add(key)

        if question.type == MULTIPLE_CHOICE:
            is_correct = answer.answer == question.correct_answer
            points = question.points if is_correct else 0
            auto_score += points
            graded.append(replace(
                answer, question_id=question.id, is_correct=is_correct, points=points
            ))
        else:
            pending = True
            graded.append(replace(
                answer, question_id=question.id, is_correct=None, points=None
            ))

    if pending:
        return AutoGradeResult(graded, HomeworkStatus.SUBMITTED, None, auto_score)
    return AutoGradeResult(graded, HomeworkStatus.GRADED, auto_score, auto_score)


@dataclass(frozen=True)
class ManualGrade:
    question_id: object
    points: float
    comment: Optional[str] = None


def parse_grades(raw_grades):
    """Shape-check teacher grades: ``[{questionId, points, comment?}]``"""
    if not isinstance(raw_grades, list):
        raise ValidationError("Grades are required")

    grades = []
    for index, raw in enumerate(raw_grades):
        if not isinstance(raw, dict):
            raise ValidationError(f"grades[{index}]: each grade must be an object")
        if question_key(raw.get("questionId")) is None:
            raise ValidationError(f"grades[{index}]: questionId is required")
        points = raw.get("points")
        if points is None:
            points = 0
        if not is_number(points) or points < 0:
            raise ValidationError(f"grades[{index}]: points must be a non-negative number")
        grades.append(ManualGrade(raw["questionId"], points, raw.get("comment")))
    return grades


def merge_manual_grades(answers, grades):
    """
    Apply teacher grades on top of the stored answers.

    A supplied grade overwrites points and comment, and awarding more than
    zero points marks the answer correct. Answers without a grade keep
    their earlier score; still-pending ones count as zero.

    Returns ``(merged_answers, total_score)``.
    """
    by_question = {question_key(g.question_id): g for g in grades}

    merged = []
    total = 0
    for answer in answers:
        grade = by_question.get(question_key(answer.question_id))
        if grade is not None:
            answer = replace(
                answer,
                points=grade.points,
                is_correct=grade.points > 0,
                teacher_comment=grade.comment,
            )
        if answer.points is not None:
            total += answer.points
        merged.append(answer)
    return merged, total


class GradingService:
    """Manual grading of submitted homework"""

    def __init__(self, store, clock=now_utc):
        self.store = store
        self.clock = clock

    def grade(self, actor, homework_id, raw_grades, feedback=None):
        grades = parse_grades(raw_grades)

        homework = self.store.get_homework(homework_id)
        if homework is None:
            raise NotFoundError("Homework not found")

        if not actor.can_manage(homework.teacher_id):
            raise ForbiddenError("You are not allowed to grade this homework")

        if homework.status == HomeworkStatus.ASSIGNED:
            raise ConflictError("The student has not submitted answers yet")

        regrade = homework.status == HomeworkStatus.GRADED
        merged, total = merge_manual_grades(homework.student_answers or [], grades)
        homework = self.store.record_grades(homework, merged, total, feedback, self.clock())

        logger.info(
            "Homework %s %s by user %s: score=%s",
            homework.id, "re-graded" if regrade else "graded", actor.id, total,
        )
        return homework
