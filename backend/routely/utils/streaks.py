from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

# Streaks are not credited beyond this many days
LOOKBACK_DAYS = 30


def consecutive_days(timestamps: Iterable[datetime], today: date | datetime) -> int:
    """Count consecutive calendar days, ending ``today``, with at least one entry."""
    # days are naive UTC dates; callers pass utcnow()-based values
    if isinstance(today, datetime):
        today = today.date()
    days = {ts.date() for ts in timestamps if ts is not None}
    if not days:
        return 0

    streak = 0
    for offset in range(LOOKBACK_DAYS):
        if today - timedelta(days=offset) in days:
            streak += 1
        else:
            break
    return streak
