"""
Visibility Filter
Hides answer keys from students who have not submitted yet
"""
from bilgen.models import HomeworkStatus
from bilgen.models.question import ANSWER_KEY_FIELDS


def can_see_answer_key(actor, homework=None):
    """Staff always; students only once their homework left ASSIGNED"""
    if actor.is_staff:
        return True
    return homework is not None and homework.status != HomeworkStatus.ASSIGNED


def redact_question(data):
    return {key: value for key, value in data.items() if key not in ANSWER_KEY_FIELDS}


def questions_for_viewer(questions, actor, homework=None):
    """Serialize ``questions`` for ``actor``, redacted when required"""
    serialized = [q.to_dict() for q in questions]
    if can_see_answer_key(actor, homework):
        return serialized
    return [redact_question(q) for q in serialized]
