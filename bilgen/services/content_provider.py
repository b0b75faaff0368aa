"""
Content Provider
AI-assisted exam question generation.

Provider output is untrusted: it goes through the same question
normalization as hand-authored exams, and any failure surfaces as an
UpstreamError carrying the provider's message.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

import google.generativeai as genai
from flask import current_app

from bilgen.errors import UpstreamError, ValidationError
from bilgen.extensions import CONTENT_PROVIDER_KEY
from bilgen.models.question import MULTIPLE_CHOICE, OPEN_ENDED, normalize_questions, total_points
from bilgen.services.exam_service import parse_grade
from bilgen.utils.helpers import to_id

logger = logging.getLogger(__name__)

MIXED = "mixed"
QUESTION_TYPE_CHOICES = (MULTIPLE_CHOICE, OPEN_ENDED, MIXED)
OPTION_TAGS = ("A", "B", "C", "D")

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class GenerationRequest:
    subject: str
    grade: int
    topic: Optional[str] = None
    question_count: int = 5
    question_type: str = MIXED

    @classmethod
    def from_payload(cls, payload, max_questions=20):
        subject = payload.get('subject')
        if not subject or payload.get('grade') in (None, ""):
            raise ValidationError("Subject and grade are required")

        grade = parse_grade(payload['grade'])

        count = to_id(payload.get('questionCount', 5), "question count")
        if count < 1 or count > max_questions:
            raise ValidationError(f"Question count must be between 1 and {max_questions}")

        question_type = payload.get('questionType') or MIXED
        if question_type not in QUESTION_TYPE_CHOICES:
            raise ValidationError(
                "Invalid question type. Valid types: " + ", ".join(QUESTION_TYPE_CHOICES)
            )

        return cls(
            subject=subject,
            grade=grade,
            topic=payload.get('topic') or None,
            question_count=count,
            question_type=question_type,
        )


class ContentProvider:
    """Returns a raw exam dict: ``{title, description, questions}``"""

    def generate(self, request):
        raise NotImplementedError


class MockContentProvider(ContentProvider):
    """Offline provider used in development and tests"""

    def generate(self, request):
        topic = request.topic or "general"
        per_question = 100 // request.question_count
        questions = []

        for i in range(1, request.question_count + 1):
            multiple_choice = request.question_type == MULTIPLE_CHOICE or (
                request.question_type == MIXED and i % 2 == 1
            )
            prompt = f"{request.subject}, grade {request.grade}, {topic} - sample question {i}"
            if multiple_choice:
                questions.append({
                    'id': i,
                    'type': MULTIPLE_CHOICE,
                    'question': f"{prompt}: choose the correct option.",
                    'options': [f"{tag}) Option {n}" for n, tag in enumerate(OPTION_TAGS, 1)],
                    'correctAnswer': OPTION_TAGS[(i - 1) % len(OPTION_TAGS)],
                    'points': per_question,
                    'explanation': "The marked option is the correct one.",
                })
            else:
                questions.append({
                    'id': i,
                    'type': OPEN_ENDED,
                    'question': f"{prompt}: explain the topic in your own words.",
                    'expectedAnswer': "The student explains the topic in their own words.",
                    'rubric': "Correct concepts: 10, clear explanation: 5, example: 5",
                    'points': per_question,
                })

        # Last question absorbs the rounding so the total is 100
        questions[-1]['points'] += 100 - per_question * request.question_count

        return {
            'title': f"Grade {request.grade} {request.subject} Exam",
            'description': f"Assessment covering {request.topic or 'the general curriculum'}",
            'questions': questions,
        }


class GeminiContentProvider(ContentProvider):
    """Google Gemini backed provider"""

    def __init__(self, api_key, model_name="gemini-2.0-flash"):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name=model_name)

    def generate(self, request):
        response = self.model.generate_content(build_exam_prompt(request))
        return parse_exam_response(response.text)


def build_exam_prompt(request):
    if request.question_type == MULTIPLE_CHOICE:
        type_text = "multiple choice only"
    elif request.question_type == OPEN_ENDED:
        type_text = "open-ended only"
    else:
        type_text = "a mix of multiple choice and open-ended"

    topic_text = f"Topic: {request.topic}" if request.topic else "General curriculum topics"

    return f"""You are an education expert preparing exam questions for primary school.

Parameters:
- Subject: {request.subject}
- Grade: {request.grade}
- {topic_text}
- Number of questions: {request.question_count}
- Question type: {type_text}

Reply with JSON in exactly this shape:

{{
  "title": "Exam title",
  "description": "Exam description",
  "questions": [
    {{
      "id": 1,
      "type": "multiple_choice",
      "question": "Question text",
      "options": ["A) Option 1", "B) Option 2", "C) Option 3", "D) Option 4"],
      "correctAnswer": "A",
      "points": 10,
      "explanation": "Why the answer is correct"
    }},
    {{
      "id": 2,
      "type": "open_ended",
      "question": "Open-ended question text",
      "expectedAnswer": "What a good answer contains",
      "rubric": "Grading criteria",
      "points": 20
    }}
  ]
}}

Rules:
1. Questions must suit grade {request.grade} students
2. Multiple choice questions have 4 options (A, B, C, D)
3. Every question has a point value
4. Points add up to 100
5. Reply with valid JSON only, no other text"""


def parse_exam_response(text):
    """Pull the first JSON object out of a model reply"""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise UpstreamError("AI response could not be processed: no JSON found")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise UpstreamError(f"AI response could not be processed: {exc}")
    if not isinstance(data, dict) or not isinstance(data.get('questions'), list):
        raise UpstreamError("AI response could not be processed: questions missing")
    return data


def generate_exam(provider, request, default_points=10):
    """Run the provider and normalize what it returns"""
    try:
        data = provider.generate(request)
    except UpstreamError:
        raise
    except Exception as exc:
        logger.exception("Content provider failed")
        raise UpstreamError(f"Exam generation failed: {exc}") from exc

    try:
        questions = normalize_questions((data or {}).get('questions'), default_points)
    except ValidationError as exc:
        raise UpstreamError(f"AI response could not be processed: {exc.message}") from exc

    return {
        'title': data.get('title') or f"Grade {request.grade} {request.subject} Exam",
        'description': data.get('description') or "",
        'grade': request.grade,
        'subjectName': request.subject,
        'topic': request.topic,
        'questions': [q.to_dict() for q in questions],
        'totalPoints': total_points(questions),
    }


def build_content_provider(config):
    """Gemini when an API key is configured, the mock otherwise"""
    if config.get('USE_MOCK_CONTENT') or not config.get('GOOGLE_API_KEY'):
        logger.info("Using mock exam generation")
        return MockContentProvider()
    return GeminiContentProvider(
        config['GOOGLE_API_KEY'], config.get('GEMINI_MODEL') or "gemini-2.0-flash"
    )


def get_content_provider():
    return current_app.extensions[CONTENT_PROVIDER_KEY]
