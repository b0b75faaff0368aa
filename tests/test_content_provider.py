"""Tests for exam generation"""
import pytest

from bilgen.errors import UpstreamError, ValidationError
from bilgen.models.question import MULTIPLE_CHOICE, OPEN_ENDED
from bilgen.services.content_provider import (
    ContentProvider,
    GenerationRequest,
    MockContentProvider,
    build_content_provider,
    build_exam_prompt,
    generate_exam,
    parse_exam_response,
)


class StaticProvider(ContentProvider):
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error

    def generate(self, request):
        if self.error:
            raise self.error
        return self.data


def _request(**overrides):
    payload = {"subject": "Math", "grade": 4, "questionCount": 5}
    payload.update(overrides)
    return GenerationRequest.from_payload(payload)


class TestGenerationRequest:
    def test_defaults(self):
        request = GenerationRequest.from_payload({"subject": "Math", "grade": "3"})
        assert request.grade == 3
        assert request.question_count == 5
        assert request.question_type == "mixed"

    @pytest.mark.parametrize("payload", [
        {"grade": 4},
        {"subject": "Math"},
        {"subject": "Math", "grade": 9},
        {"subject": "Math", "grade": 4, "questionCount": 0},
        {"subject": "Math", "grade": 4, "questionCount": 21},
        {"subject": "Math", "grade": 4, "questionType": "essay"},
    ])
    def test_invalid(self, payload):
        with pytest.raises(ValidationError):
            GenerationRequest.from_payload(payload, max_questions=20)


class TestMockProvider:
    def test_mixed_exam_totals_100(self):
        data = generate_exam(MockContentProvider(), _request(questionCount=3))

        assert data['totalPoints'] == 100
        assert [q['type'] for q in data['questions']] == [MULTIPLE_CHOICE, OPEN_ENDED, MULTIPLE_CHOICE]
        assert data['subjectName'] == "Math"
        assert data['grade'] == 4

    def test_single_type(self):
        data = generate_exam(MockContentProvider(), _request(questionType=OPEN_ENDED))
        assert {q['type'] for q in data['questions']} == {OPEN_ENDED}


class TestGenerateExam:
    def test_defaults_filled(self):
        provider = StaticProvider({"questions": [{"question": "Pick", "correctAnswer": "A"}]})
        data = generate_exam(provider, _request(), default_points=10)

        question = data['questions'][0]
        assert question['id'] == 1
        assert question['type'] == MULTIPLE_CHOICE
        assert question['points'] == 10
        assert data['title'] == "Grade 4 Math Exam"

    def test_provider_failure(self):
        with pytest.raises(UpstreamError, match="quota exceeded"):
            generate_exam(StaticProvider(error=RuntimeError("quota exceeded")), _request())

    def test_invalid_questions(self):
        provider = StaticProvider({"questions": [{"type": "essay", "question": "x"}]})
        with pytest.raises(UpstreamError, match="could not be processed"):
            generate_exam(provider, _request())


class TestParseResponse:
    def test_json_inside_prose(self):
        text = 'Here you go:\n```json\n{"title": "T", "questions": []}\n```'
        assert parse_exam_response(text)["title"] == "T"

    @pytest.mark.parametrize("text", ["no json here", "{not json}", '{"title": "T"}', None])
    def test_unusable(self, text):
        with pytest.raises(UpstreamError):
            parse_exam_response(text)

    def test_prompt_mentions_parameters(self):
        prompt = build_exam_prompt(_request(topic="Fractions"))
        assert "Grade: 4" in prompt
        assert "Topic: Fractions" in prompt


def test_mock_without_api_key():
    provider = build_content_provider({"USE_MOCK_CONTENT": False, "GOOGLE_API_KEY": None})
    assert isinstance(provider, MockContentProvider)
