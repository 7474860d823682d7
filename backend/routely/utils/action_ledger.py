"""Sliding per-user log of content-creation actions."""

from __future__ import annotations

from datetime import datetime, timedelta

from routely.models import User, UserAction

ACTION_JOURNAL = "journal"
ACTION_INCIDENT = "incident"
ACTION_TYPES = (ACTION_JOURNAL, ACTION_INCIDENT)

WINDOW_SECONDS = 60 * 60


def record_and_count(u: User, action: str, window_seconds: int = WINDOW_SECONDS, now: datetime | None = None) -> int:
    """Append ``action`` at ``now``, evict entries at or before ``now - window``,
    then count the surviving entries of ``action`` (the new one included).

    Eviction happens before counting so evicted entries are never counted.
    """
    if action not in ACTION_TYPES:
        raise ValueError(f"unknown action type: {action}")
    now = now or datetime.utcnow()
    cutoff = now - timedelta(seconds=int(window_seconds))

    u.actions.append(UserAction(action=action, timestamp=now))
    # Removing from the collection deletes the orphaned rows on flush
    u.actions = [a for a in u.actions if a.timestamp > cutoff]

    return sum(1 for a in u.actions if a.action == action)


def recent_count(u: User, action: str, window_seconds: int = WINDOW_SECONDS, now: datetime | None = None) -> int:
    """Read-only count of ``action`` entries inside the trailing window."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(seconds=int(window_seconds))
    return sum(1 for a in u.actions if a.action == action and a.timestamp > cutoff)
