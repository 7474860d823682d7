from .user import User  # noqa: F401
from .user_action import UserAction  # noqa: F401
from .incident import Incident, INCIDENT_TYPES  # noqa: F401
from .journal import JournalEntry, MOODS  # noqa: F401
from .achievement import Achievement, UserAchievement  # noqa: F401
from .idempotency_key import IdempotencyKey  # noqa: F401
