"""Point rankings, always computed from current balances.

``top`` numbers rows by position (offset + index + 1) so tied users get
different ranks; ``my_rank`` counts strictly higher balances so tied users
share one. Both numbering schemes are part of the public API.
"""

from __future__ import annotations

from routely.extensions import db
from routely.models import User


def total_users() -> int:
    return int(db.session.query(db.func.count(User.id)).scalar() or 0)


def top(limit: int = 50, offset: int = 0) -> list[dict]:
    limit = max(1, int(limit))
    offset = max(0, int(offset))
    rows = (
        User.query
        .order_by(User.points.desc(), User.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    out = []
    for position, u in enumerate(rows):
        entry = u.summary()
        entry["rank"] = offset + position + 1
        out.append(entry)
    return out


def my_rank(u: User) -> dict:
    pts = int(u.points or 0)
    higher = int(db.session.query(db.func.count(User.id)).filter(User.points > pts).scalar() or 0)
    return {"rank": higher + 1, "points": pts, "total_users": total_users()}
