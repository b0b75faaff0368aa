"""Shared test fixtures for the Bilgen backend."""
from types import SimpleNamespace

import pytest

from bilgen import create_app
from bilgen.extensions import db
from bilgen.models import Classroom, Role, User
from bilgen.services import ExamService
from bilgen.utils import ADMIN, STUDENT, TEACHER, Actor
from tests.fakes import InMemoryStore

# One multiple-choice question (60 points) and one open-ended question (40 points)
MIXED_QUESTIONS = [
    {
        "id": 1,
        "type": "multiple_choice",
        "question": "What is 2 + 2?",
        "options": ["A) 4", "B) 5", "C) 6", "D) 22"],
        "correctAnswer": "A",
        "points": 60,
        "explanation": "Two plus two is four.",
    },
    {
        "id": 2,
        "type": "open_ended",
        "question": "Explain why the sky is blue.",
        "expectedAnswer": "Rayleigh scattering of sunlight.",
        "rubric": "Mentions scattering and wavelength",
        "points": 40,
    },
]

MC_QUESTIONS = [
    {
        "id": 1,
        "type": "multiple_choice",
        "question": "Capital of Turkey?",
        "options": ["A) Istanbul", "B) Ankara", "C) Izmir", "D) Bursa"],
        "correctAnswer": "B",
        "points": 50,
        "explanation": "Ankara has been the capital since 1923.",
    },
    {
        "id": 2,
        "type": "multiple_choice",
        "question": "How many legs does a spider have?",
        "options": ["A) 6", "B) 4", "C) 8", "D) 10"],
        "correctAnswer": "C",
        "points": 50,
        "explanation": "Spiders are arachnids with eight legs.",
    },
]


# ---------------------------------------------------------------------------
# In-memory store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    """Store seeded with a teacher, an admin, three students and classrooms."""
    s = InMemoryStore()
    s.add_user(1, "teacher", TEACHER)
    s.add_user(2, "other-teacher", TEACHER)
    s.add_user(3, "admin", ADMIN)
    s.add_user(10, "ayse", STUDENT)
    s.add_user(11, "mehmet", STUDENT)
    s.add_user(12, "zeynep", STUDENT)
    s.add_classroom(100, teacher_id=1, student_ids=[10, 11, 12])
    s.add_classroom(101, teacher_id=1, student_ids=[])
    return s


@pytest.fixture
def teacher():
    return Actor(id=1, roles=frozenset({TEACHER}))


@pytest.fixture
def other_teacher():
    return Actor(id=2, roles=frozenset({TEACHER}))


@pytest.fixture
def admin():
    return Actor(id=3, roles=frozenset({ADMIN}))


@pytest.fixture
def student():
    return Actor(id=10, roles=frozenset({STUDENT}))


# ---------------------------------------------------------------------------
# Flask / database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def people(app):
    """Users and classrooms in the database; returns their ids."""
    roles = {name: Role(name=name) for name in (STUDENT, TEACHER, ADMIN)}
    db.session.add_all(roles.values())

    def user(email, name, *role_names):
        u = User(email=email, name=name, roles=[roles[r] for r in role_names])
        db.session.add(u)
        return u

    teacher_user = user("teacher@school.test", "Teacher", TEACHER)
    other_user = user("other@school.test", "Other Teacher", TEACHER)
    admin_user = user("admin@school.test", "Admin", ADMIN)
    students = [
        user(f"student{i}@school.test", f"Student {i}", STUDENT) for i in range(1, 4)
    ]
    db.session.flush()

    classroom = Classroom(name="5-A", grade=5, teacher_id=teacher_user.id, students=students)
    empty = Classroom(name="5-B", grade=5, teacher_id=teacher_user.id)
    db.session.add_all([classroom, empty])
    db.session.commit()

    return SimpleNamespace(
        teacher=teacher_user.id,
        other_teacher=other_user.id,
        admin=admin_user.id,
        students=[s.id for s in students],
        classroom=classroom.id,
        empty_classroom=empty.id,
    )


@pytest.fixture
def login(client):
    """Put an identity into the client's session, as the auth service would."""
    def _login(user_id, *roles):
        with client.session_transaction() as sess:
            sess['user_id'] = user_id
            sess['roles'] = list(roles)
    return _login


def make_exam(store, owner_id, questions=None, **fields):
    """Create an exam through the service, as a teacher would"""
    payload = {"title": "Quiz", "grade": 5, "subjectName": "Science"}
    payload.update(fields)
    payload["questions"] = questions if questions is not None else MIXED_QUESTIONS
    actor = Actor(id=owner_id, roles=frozenset({TEACHER}))
    return ExamService(store).create(actor, payload)
