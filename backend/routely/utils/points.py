"""Point balance and activity counters of a user.

Mutations only touch the in-session ``User``; they are committed by the
surrounding transaction (see ``routely.utils.transactions``).
"""

from __future__ import annotations

from datetime import datetime

from routely.models import User

COUNTER_JOURNAL = "journal_entries_count"
COUNTER_INCIDENT = "incidents_reported_count"

_LAST_ACTION_FIELDS = {
    COUNTER_JOURNAL: "last_journal_entry_at",
    COUNTER_INCIDENT: "last_incident_reported_at",
}


def award(u: User, amount: int, counter: str | None = None, now: datetime | None = None) -> int:
    """Add ``amount`` points. With ``counter`` the action also counts as activity,
    even when ``amount`` is 0. Without it the points are a pure bonus."""
    amt = int(amount or 0)
    if amt < 0:
        raise ValueError("award amount must be >= 0")
    u.points = int(u.points or 0) + amt
    if counter:
        if counter not in _LAST_ACTION_FIELDS:
            raise ValueError(f"unknown counter: {counter}")
        setattr(u, counter, int(getattr(u, counter) or 0) + 1)
        setattr(u, _LAST_ACTION_FIELDS[counter], now or datetime.utcnow())
    return u.points


def refund(u: User, amount: int, counter: str) -> int:
    """Take back ``amount`` points and one activity, clamped at zero."""
    if counter not in _LAST_ACTION_FIELDS:
        raise ValueError(f"unknown counter: {counter}")
    u.points = max(0, int(u.points or 0) - int(amount or 0))
    setattr(u, counter, max(0, int(getattr(u, counter) or 0) - 1))
    return u.points


def should_refund(owner_id: int | None, deleter_id: int | None, points_awarded: int) -> bool:
    if owner_id is None or deleter_id is None:
        return False
    return int(owner_id) == int(deleter_id) and int(points_awarded or 0) > 0
