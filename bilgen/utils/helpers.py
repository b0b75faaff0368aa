"""
Helper Functions
Time handling, the request actor and role decorators
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps

import pytz
from flask import current_app, session

from bilgen.errors import AuthenticationError, ForbiddenError, ValidationError

STUDENT = "STUDENT"
TEACHER = "TEACHER"
ADMIN = "ADMIN"


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def as_utc(value):
    """Attach UTC to datetimes read back without tzinfo (SQLite drops it)"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_due_date(raw, tz_name="UTC"):
    """
    Parse an ISO-8601 due date into an aware UTC datetime.
    Naive values are interpreted in the school's local zone.
    """
    if raw in (None, ""):
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid due date: {raw}")

    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name).localize(parsed)
    return parsed.astimezone(timezone.utc)


def isoformat(value):
    value = as_utc(value)
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Actor:
    """Authenticated caller, as supplied by the identity provider"""
    id: int
    roles: frozenset = field(default_factory=frozenset)

    def has_capability(self, role):
        return role in self.roles

    @property
    def is_admin(self):
        return self.has_capability(ADMIN)

    @property
    def is_staff(self):
        """Teachers and admins see unredacted content"""
        return self.has_capability(TEACHER) or self.is_admin

    @property
    def is_student(self):
        return self.has_capability(STUDENT)

    def owns(self, owner_id):
        return owner_id is not None and owner_id == self.id

    def can_manage(self, owner_id):
        """Owner of the resource or elevated privilege"""
        return self.is_admin or self.owns(owner_id)


def get_current_actor():
    """Build the actor from the signed session; None when anonymous"""
    user_id = session.get("user_id")
    if user_id is None:
        return None

    roles = session.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Actor(id=int(user_id), roles=frozenset(str(r).upper() for r in roles))


def require_roles(*roles):
    """
    Decorator to require at least one of the given roles.
    Passes the actor to the view as its first argument.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            actor = get_current_actor()
            if actor is None:
                raise AuthenticationError("Authentication required")
            if not any(actor.has_capability(role) for role in roles):
                raise ForbiddenError("You are not allowed to perform this action")
            return f(actor, *args, **kwargs)
        return decorated_function
    return decorator


def school_timezone():
    return current_app.config.get("TIMEZONE", "UTC")


def to_id(value, label):
    """Coerce a request value to an integer id"""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value}")
