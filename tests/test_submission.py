"""Tests for student submission"""
from datetime import datetime, timedelta, timezone

import pytest

from bilgen.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bilgen.models import HomeworkStatus
from bilgen.services import SubmissionService
from bilgen.utils import Actor, STUDENT
from tests.conftest import MC_QUESTIONS, make_exam

NOW = datetime(2026, 4, 10, 9, 0, tzinfo=timezone.utc)

MIXED_ANSWERS = [
    {"questionId": 1, "answer": "A"},
    {"questionId": 2, "answer": "Sunlight is scattered by air molecules."},
]


@pytest.fixture
def service(store):
    return SubmissionService(store, clock=lambda: NOW)


@pytest.fixture
def homework(store, teacher):
    exam = make_exam(store, teacher.id)
    return store.create_homework(exam.id, 10, teacher.id, due_date=NOW + timedelta(days=1))


class TestSubmit:
    def test_mixed_exam_waits_for_teacher(self, service, student, homework):
        outcome = service.submit(student, homework.id, MIXED_ANSWERS)

        assert outcome.pending
        assert outcome.auto_score == 60
        assert outcome.homework.status == HomeworkStatus.SUBMITTED
        assert outcome.homework.score is None
        assert outcome.homework.submitted_at == NOW
        stored = outcome.homework.student_answers
        assert stored[0].points == 60
        assert stored[1].points is None

    def test_multiple_choice_exam_is_graded(self, service, store, teacher, student):
        exam = make_exam(store, teacher.id, MC_QUESTIONS)
        homework = store.create_homework(exam.id, 10, teacher.id)

        outcome = service.submit(student, homework.id, [
            {"questionId": 1, "answer": "B"},
            {"questionId": 2, "answer": "C"},
        ])

        assert not outcome.pending
        assert outcome.homework.status == HomeworkStatus.GRADED
        assert outcome.homework.score == 100

    def test_second_submission_conflicts(self, service, student, homework):
        service.submit(student, homework.id, MIXED_ANSWERS)
        with pytest.raises(ConflictError):
            service.submit(student, homework.id, MIXED_ANSWERS)

    def test_other_student_forbidden(self, service, homework):
        intruder = Actor(id=11, roles=frozenset({STUDENT}))
        with pytest.raises(ForbiddenError):
            service.submit(intruder, homework.id, MIXED_ANSWERS)
        assert homework.status == HomeworkStatus.ASSIGNED

    def test_past_due_date(self, store, student, homework):
        late = SubmissionService(store, clock=lambda: NOW + timedelta(days=2))
        with pytest.raises(ConflictError, match="due date"):
            late.submit(student, homework.id, MIXED_ANSWERS)
        assert homework.student_answers is None

    def test_no_due_date_never_expires(self, store, teacher, student):
        exam = make_exam(store, teacher.id)
        homework = store.create_homework(exam.id, 10, teacher.id)
        later = SubmissionService(store, clock=lambda: NOW + timedelta(days=365))
        assert later.submit(student, homework.id, MIXED_ANSWERS).pending

    def test_naive_due_date_read_as_utc(self, store, teacher, student):
        exam = make_exam(store, teacher.id)
        homework = store.create_homework(
            exam.id, 10, teacher.id, due_date=datetime(2026, 4, 10, 8, 0)
        )
        with pytest.raises(ConflictError):
            SubmissionService(store, clock=lambda: NOW).submit(student, homework.id, MIXED_ANSWERS)

    def test_missing_homework(self, service, student):
        with pytest.raises(NotFoundError):
            service.submit(student, 999, MIXED_ANSWERS)

    def test_empty_answers(self, service, student, homework):
        with pytest.raises(ValidationError):
            service.submit(student, homework.id, [])

    def test_unmatched_answer_leaves_homework_untouched(self, service, student, homework):
        answers = MIXED_ANSWERS + [{"questionId": 77, "answer": "extra"}]
        with pytest.raises(ValidationError):
            service.submit(student, homework.id, answers)
        assert homework.status == HomeworkStatus.ASSIGNED
        assert homework.student_answers is None

    def test_lost_race_reports_conflict(self, service, store, student, homework):
        store.lose_next_submission = True
        with pytest.raises(ConflictError):
            service.submit(student, homework.id, MIXED_ANSWERS)
        assert homework.student_answers is None
        assert homework.score is None

    def test_empty_resubmission_conflicts(self, service, store, teacher, student):
        exam = make_exam(store, teacher.id, MC_QUESTIONS)
        homework = store.create_homework(exam.id, 10, teacher.id)
        service.submit(student, homework.id, [{"questionId": 1, "answer": "B"}])

        with pytest.raises(ConflictError):
            service.submit(student, homework.id, [])
        assert homework.score == 50

    def test_answers_must_be_a_list(self, service, student):
        with pytest.raises(ValidationError, match="list"):
            service.submit(student, 999, {"questionId": 1, "answer": "A"})

    def test_repeated_answers_rejected(self, service, store, teacher, student):
        exam = make_exam(store, teacher.id, MC_QUESTIONS)
        homework = store.create_homework(exam.id, 10, teacher.id)

        with pytest.raises(ValidationError, match="answered twice"):
            service.submit(student, homework.id, [{"questionId": 1, "answer": "B"}] * 3)
        assert homework.status == HomeworkStatus.ASSIGNED
        assert homework.score is None
