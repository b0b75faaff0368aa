"""
Question Schema
Tagged question variants, student answers and their JSON encoding.

Exams and homework keep these as JSON text columns; everything above the
model layer works with the dataclasses below, never with the raw text.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from bilgen.errors import ValidationError

MULTIPLE_CHOICE = "multiple_choice"
OPEN_ENDED = "open_ended"
QUESTION_TYPES = (MULTIPLE_CHOICE, OPEN_ENDED)

# Fields a student may not see before submitting
ANSWER_KEY_FIELDS = ("correctAnswer", "expectedAnswer", "explanation")


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    """Objectively checkable question, graded at submission time"""

    type: ClassVar[str] = MULTIPLE_CHOICE

    id: Any
    question: str
    options: list
    correct_answer: Any
    points: float
    explanation: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "points": self.points,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class OpenEndedQuestion:
    """Free-text question, graded manually by the teacher"""

    type: ClassVar[str] = OPEN_ENDED

    id: Any
    question: str
    expected_answer: str
    rubric: str
    points: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "expectedAnswer": self.expected_answer,
            "rubric": self.rubric,
            "points": self.points,
        }


Question = Union[MultipleChoiceQuestion, OpenEndedQuestion]


@dataclass
class StudentAnswer:
    """One element of a homework's answer sequence"""

    question_id: Any
    answer: Any
    is_correct: Optional[bool] = None
    points: Optional[float] = None
    teacher_comment: Optional[str] = None
    extra: dict = field(default_factory=dict, repr=False)

    @property
    def is_pending(self) -> bool:
        """Open-ended answers stay unscored until a teacher grades them"""
        return self.points is None

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data.update({
            "questionId": self.question_id,
            "answer": self.answer,
            "isCorrect": self.is_correct,
            "points": self.points,
        })
        if self.teacher_comment is not None:
            data["teacherComment"] = self.teacher_comment
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "StudentAnswer":
        known = {"questionId", "answer", "isCorrect", "points", "teacherComment"}
        return cls(
            question_id=data.get("questionId"),
            answer=data.get("answer"),
            is_correct=data.get("isCorrect"),
            points=data.get("points"),
            teacher_comment=data.get("teacherComment"),
            extra={k: v for k, v in data.items() if k not in known},
        )


def question_key(question_id) -> Optional[str]:
    """Ids arrive as ints or strings depending on the client"""
    if question_id is None or question_id == "":
        return None
    return str(question_id)


def is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_question(raw: Any, index: int, default_points: float = 0) -> Question:
    """
    Validate one untrusted question dict and build its variant.

    Missing fields are defaulted: id -> position + 1, type -> multiple_choice,
    points -> ``default_points``.
    """
    prefix = f"questions[{index}]"
    if not isinstance(raw, dict):
        raise ValidationError(f"{prefix}: each question must be an object")

    qtype = raw.get("type") or MULTIPLE_CHOICE
    if qtype not in QUESTION_TYPES:
        raise ValidationError(
            f"{prefix}: invalid question type '{qtype}'. "
            f"Valid types: {', '.join(QUESTION_TYPES)}"
        )

    qid = raw.get("id")
    if question_key(qid) is None:
        qid = index + 1

    points = raw.get("points")
    if points is None:
        points = default_points
    if not is_number(points) or points < 0:
        raise ValidationError(f"{prefix}: points must be a non-negative number")

    text = raw.get("question")
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(f"{prefix}: question text is required")

    if qtype == MULTIPLE_CHOICE:
        options = raw.get("options") or []
        if not isinstance(options, list):
            raise ValidationError(f"{prefix}: options must be a list")
        correct = raw.get("correctAnswer")
        if correct is None or correct == "":
            raise ValidationError(f"{prefix}: correctAnswer is required")
        return MultipleChoiceQuestion(
            id=qid,
            question=text,
            options=options,
            correct_answer=correct,
            points=points,
            explanation=raw.get("explanation") or "",
        )

    return OpenEndedQuestion(
        id=qid,
        question=text,
        expected_answer=raw.get("expectedAnswer") or "",
        rubric=raw.get("rubric") or "",
        points=points,
    )


def normalize_questions(raw_questions: Any, default_points: float = 0) -> list:
    """Validate a whole question set, authored or generated"""
    if not isinstance(raw_questions, list) or not raw_questions:
        raise ValidationError("At least one question is required")

    questions = [
        parse_question(raw, index, default_points)
        for index, raw in enumerate(raw_questions)
    ]

    seen = set()
    for q in questions:
        key = question_key(q.id)
        if key in seen:
            raise ValidationError(f"Duplicate question id: {q.id}")
        seen.add(key)
    return questions


def total_points(questions) -> float:
    """Sum of all question point values"""
    return sum(q.points for q in questions)


def parse_answers(raw_answers: Any) -> list:
    """Shape-check a submitted answer list"""
    if not isinstance(raw_answers, list) or not raw_answers:
        raise ValidationError("Answers are required")

    answers = []
    for index, raw in enumerate(raw_answers):
        if not isinstance(raw, dict):
            raise ValidationError(f"answers[{index}]: each answer must be an object")
        answers.append(StudentAnswer(
            question_id=raw.get("questionId"),
            answer=raw.get("answer"),
        ))
    return answers


# ---------------------------------------------------------------------------
# Storage encoding
# ---------------------------------------------------------------------------

def encode_questions(questions) -> str:
    return json.dumps([q.to_dict() for q in questions], ensure_ascii=False)


def decode_questions(text: Optional[str]) -> list:
    if not text:
        return []
    return [parse_question(raw, i) for i, raw in enumerate(json.loads(text))]


def encode_answers(answers) -> Optional[str]:
    if answers is None:
        return None
    return json.dumps([a.to_dict() for a in answers], ensure_ascii=False)


def decode_answers(text: Optional[str]) -> Optional[list]:
    if text is None:
        return None
    return [StudentAnswer.from_dict(raw) for raw in json.loads(text)]
