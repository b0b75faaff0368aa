"""
Utils Package
"""
from bilgen.utils.helpers import (
    ADMIN,
    STUDENT,
    TEACHER,
    Actor,
    as_utc,
    get_current_actor,
    isoformat,
    now_utc,
    parse_due_date,
    require_roles,
    school_timezone,
    to_id,
)

__all__ = [
    'ADMIN',
    'STUDENT',
    'TEACHER',
    'Actor',
    'as_utc',
    'get_current_actor',
    'isoformat',
    'now_utc',
    'parse_due_date',
    'require_roles',
    'school_timezone',
    'to_id',
]
