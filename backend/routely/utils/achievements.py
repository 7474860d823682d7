"""Achievement catalog and unlock evaluation.

The catalog is fixed configuration (``DEFAULT_ACHIEVEMENTS``) materialised
into the ``achievements`` table by id. Evaluation compares a user's stats
against every locked achievement; every requirement on an achievement has to
hold for it to unlock, and an unlock is never taken back.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from routely.extensions import db
from routely.models import Achievement, Incident, JournalEntry, User, UserAchievement
from routely.utils import points
from routely.utils.streaks import LOOKBACK_DAYS, consecutive_days
from routely.utils.transactions import run_in_transaction


class Requirement(str, enum.Enum):
    JOURNAL_ENTRIES = "journalEntries"
    INCIDENTS_REPORTED = "incidentsReported"
    POLLUTION_INCIDENTS = "pollutionIncidents"
    TRAFFIC_INCIDENTS = "trafficIncidents"
    SAFETY_INCIDENTS = "safetyIncidents"
    TOTAL_POINTS = "totalPoints"
    CONSECUTIVE_DAYS = "consecutiveDays"


POLLUTION_TYPES = ("Air Pollution",)
TRAFFIC_TYPES = ("Road Block", "Accident")
SAFETY_TYPES = ("Accident",)


@dataclass(frozen=True)
class UserStats:
    journal_entries: int = 0
    incidents_reported: int = 0
    pollution_incidents: int = 0
    traffic_incidents: int = 0
    safety_incidents: int = 0
    total_points: int = 0
    consecutive_days: int = 0

    def to_dict(self) -> dict:
        return {req.value: _RESOLVERS[req](self) for req in Requirement}


_RESOLVERS = {
    Requirement.JOURNAL_ENTRIES: lambda s: s.journal_entries,
    Requirement.INCIDENTS_REPORTED: lambda s: s.incidents_reported,
    Requirement.POLLUTION_INCIDENTS: lambda s: s.pollution_incidents,
    Requirement.TRAFFIC_INCIDENTS: lambda s: s.traffic_incidents,
    Requirement.SAFETY_INCIDENTS: lambda s: s.safety_incidents,
    Requirement.TOTAL_POINTS: lambda s: s.total_points,
    Requirement.CONSECUTIVE_DAYS: lambda s: s.consecutive_days,
}

_unresolved = set(Requirement) - set(_RESOLVERS)
if _unresolved:
    raise RuntimeError(f"requirements without a stat resolver: {sorted(r.value for r in _unresolved)}")


DEFAULT_ACHIEVEMENTS = [
    {
        "id": "first_journal",
        "name": "First Journey",
        "description": "Logged your first journey entry",
        "icon": "\U0001F4DD",
        "category": "journal",
        "requirements": {"journalEntries": 1},
        "points_reward": 10,
    },
    {
        "id": "journal_enthusiast",
        "name": "Journal Enthusiast",
        "description": "Logged 10 journey entries",
        "icon": "\U0001F4D6",
        "category": "journal",
        "requirements": {"journalEntries": 10},
        "points_reward": 50,
    },
    {
        "id": "first_incident",
        "name": "Community Helper",
        "description": "Reported your first incident",
        "icon": "\U0001F6A8",
        "category": "incident",
        "requirements": {"incidentsReported": 1},
        "points_reward": 20,
    },
    {
        "id": "incident_reporter",
        "name": "Active Reporter",
        "description": "Reported 10 incidents",
        "icon": "\U0001F4E2",
        "category": "incident",
        "requirements": {"incidentsReported": 10},
        "points_reward": 100,
    },
    {
        "id": "pollution_warrior",
        "name": "Pollution Warrior",
        "description": "Reported 5 air pollution incidents",
        "icon": "\U0001F32C️",
        "category": "pollution",
        "requirements": {"pollutionIncidents": 5},
        "points_reward": 75,
    },
    {
        "id": "traffic_spotter",
        "name": "Traffic Spotter",
        "description": "Reported 5 traffic incidents",
        "icon": "\U0001F697",
        "category": "traffic",
        "requirements": {"trafficIncidents": 5},
        "points_reward": 75,
    },
    {
        "id": "safety_guardian",
        "name": "Safety Guardian",
        "description": "Reported 5 safety-related incidents",
        "icon": "\U0001F6E1️",
        "category": "safety",
        "requirements": {"safetyIncidents": 5},
        "points_reward": 75,
    },
    {
        "id": "community_champion",
        "name": "Community Champion",
        "description": "Earned 500 points",
        "icon": "\U0001F451",
        "category": "community",
        "requirements": {"totalPoints": 500},
        "points_reward": 150,
    },
    {
        "id": "weekly_logger",
        "name": "Consistent Logger",
        "description": "Logged entries for 7 consecutive days",
        "icon": "\U0001F4C5",
        "category": "journal",
        "requirements": {"consecutiveDays": 7},
        "points_reward": 100,
    },
]

_CATALOG_FIELDS = ("name", "description", "icon", "category", "requirements", "points_reward")


def seed_default_achievements() -> int:
    """Upsert the default catalog by id. Returns how many rows were written."""
    written = 0
    for entry in DEFAULT_ACHIEVEMENTS:
        row = db.session.get(Achievement, entry["id"])
        if row is None:
            row = Achievement(id=entry["id"])
            db.session.add(row)
        elif all(getattr(row, f) == entry[f] for f in _CATALOG_FIELDS):
            continue
        for f in _CATALOG_FIELDS:
            setattr(row, f, entry[f])
        row.updated_at = datetime.utcnow()
        written += 1

    if not written:
        return 0
    try:
        db.session.commit()
    except IntegrityError:
        # another worker seeded the same ids first
        db.session.rollback()
        return 0
    current_app.logger.info("achievement catalog seeded (%s rows written)", written)
    return written


def load_catalog() -> list[Achievement]:
    return Achievement.query.order_by(Achievement.id.asc()).all()


def _count_incidents(user_id: int, types: tuple[str, ...]) -> int:
    return int(
        db.session.query(db.func.count(Incident.id))
        .filter(Incident.user_id == int(user_id), Incident.type.in_(types))
        .scalar()
        or 0
    )


def journal_streak(user_id: int, now: datetime | None = None) -> int:
    now = now or datetime.utcnow()
    today = now.date()  # naive UTC calendar day, matching stored created_at values
    since = datetime(today.year, today.month, today.day) - timedelta(days=LOOKBACK_DAYS - 1)
    rows = (
        db.session.query(JournalEntry.created_at)
        .filter(JournalEntry.user_id == int(user_id), JournalEntry.created_at >= since)
        .all()
    )
    return consecutive_days([r[0] for r in rows], today)


def gather_stats(u: User, now: datetime | None = None) -> UserStats:
    """Fresh stat snapshot; incident breakdowns are re-queried every time."""
    return UserStats(
        journal_entries=int(u.journal_entries_count or 0),
        incidents_reported=int(u.incidents_reported_count or 0),
        pollution_incidents=_count_incidents(u.id, POLLUTION_TYPES),
        traffic_incidents=_count_incidents(u.id, TRAFFIC_TYPES),
        safety_incidents=_count_incidents(u.id, SAFETY_TYPES),
        total_points=int(u.points or 0),
        consecutive_days=journal_streak(u.id, now),
    )


def requirements_met(requirements: dict | None, stats: UserStats) -> bool:
    if not requirements:
        return False
    for key, threshold in requirements.items():
        try:
            req = Requirement(key)
        except ValueError:
            current_app.logger.warning("unknown achievement requirement %r; achievement stays locked", key)
            return False
        if _RESOLVERS[req](stats) < int(threshold):
            return False
    return True


def evaluate(u: User, catalog: list[Achievement], stats: UserStats, now: datetime | None = None) -> list[str]:
    """Unlock every satisfied, still-locked achievement on ``u``.

    Rewards are bonus points (no activity counter). ``totalPoints`` follows the
    balance as rewards land, the other stats stay as snapshotted.
    """
    now = now or datetime.utcnow()
    unlocked = []
    for a in catalog:
        if u.has_achievement(a.id):
            continue
        if not requirements_met(a.requirements, stats):
            continue
        u.achievements.append(UserAchievement(achievement_id=a.id, unlocked_at=now))
        reward = int(a.points_reward or 0)
        if reward > 0:
            points.award(u, reward)
            stats = replace(stats, total_points=int(u.points))
        unlocked.append(a.id)
    return unlocked


def check_and_award(user_id: int, now: datetime | None = None) -> list[str]:
    """Evaluate and persist unlocks for one user.

    Runs after the triggering write has committed. Failures are logged and
    return no unlocks; they never undo the points that triggered them.
    """
    try:
        seed_default_achievements()

        def _cycle(u: User) -> list[str]:
            return evaluate(u, load_catalog(), gather_stats(u, now), now)

        unlocked = run_in_transaction(user_id, _cycle)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("achievement evaluation failed for user %s", user_id)
        return []

    for achievement_id in unlocked:
        current_app.logger.info("user %s unlocked achievement %s", user_id, achievement_id)
    return unlocked


def achievements_with_status(u: User) -> list[dict]:
    unlocked_at = {a.achievement_id: a.unlocked_at for a in u.achievements}
    out = []
    for a in Achievement.query.order_by(Achievement.category.asc(), Achievement.points_reward.desc()).all():
        data = a.to_dict()
        when = unlocked_at.get(a.id)
        data["unlocked"] = when is not None
        data["unlocked_at"] = when.isoformat() if when else None
        out.append(data)
    return out
