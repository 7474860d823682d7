from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from routely.errors import NotFound, RateLimitExceeded, ValidationError
from routely.extensions import db
from routely.models import JournalEntry, MOODS, User
from routely.utils import action_ledger, points, rate_limits
from routely.utils.achievements import check_and_award
from routely.utils.idempotency import lookup_response, reserve_key, store_response
from routely.utils.transactions import run_in_transaction

journal_bp = Blueprint("journal_bp", __name__, url_prefix="/api/journal")

ROUTE_CREATE = "journal.create"
MAX_TITLE = 200
MAX_TAGS = 20


def _parse_location(raw) -> dict:
    if raw in (None, {}):
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("location must be an object")
    out = {"location_name": (raw.get("name") or None)}
    for key, col in (("lat", "location_lat"), ("lng", "location_lng")):
        v = raw.get(key)
        if v is None:
            continue
        if not isinstance(v, (int, float)) or isinstance(v, bool):
            raise ValidationError(f"location.{key} must be a number")
        out[col] = float(v)
    return out


def _parse_entry(payload: dict) -> dict:
    title = payload.get("title")
    content = payload.get("content")
    if not isinstance(title, str) or not isinstance(content, str) or not title.strip() or not content.strip():
        raise ValidationError("Title and content are required")
    if len(title.strip()) > MAX_TITLE:
        raise ValidationError(f"Title must be at most {MAX_TITLE} characters")

    tags = payload.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("tags must be a list of strings")
    tags = [t.strip() for t in tags if t.strip()][:MAX_TAGS]

    mood = payload.get("mood") or None
    if mood is not None and mood not in MOODS:
        raise ValidationError(f"Invalid mood. Must be one of: {', '.join(MOODS)}")

    fields = {"title": title.strip(), "content": content, "tags": tags, "mood": mood}
    fields.update(_parse_location(payload.get("location")))
    return fields


def _page_args(default_limit: int = 50, max_limit: int = 100) -> tuple[int, int]:
    try:
        page = int(request.args.get("page") or 1)
    except ValueError:
        page = 1
    try:
        limit = int(request.args.get("limit") or default_limit)
    except ValueError:
        limit = default_limit
    return max(1, page), max(1, min(max_limit, limit))


@journal_bp.post("")
@login_required
def create_entry():
    payload = request.get_json(silent=True) or {}
    fields = _parse_entry(payload)
    uid = int(current_user.id)

    replay = lookup_response(uid, ROUTE_CREATE, payload)
    if replay:
        body, code = replay
        return jsonify(body), code

    now = datetime.utcnow()

    def _cycle(u: User) -> JournalEntry:
        reserve_key(u.id, ROUTE_CREATE, payload)
        recent = action_ledger.record_and_count(u, action_ledger.ACTION_JOURNAL, now=now) - 1
        pts = rate_limits.enforce(action_ledger.ACTION_JOURNAL, recent)
        row = JournalEntry(user_id=u.id, points_awarded=pts, created_at=now, **fields)
        db.session.add(row)
        points.award(u, pts, points.COUNTER_JOURNAL, now=now)
        return row

    try:
        entry = run_in_transaction(uid, _cycle)
    except RateLimitExceeded:
        current_app.logger.warning("journal rate limit hit by user %s", uid)
        raise

    body = {
        "ok": True,
        "message": "Journal entry created successfully",
        "entry": entry.to_dict(),
        "points_awarded": int(entry.points_awarded or 0),
        "new_achievements": check_and_award(uid, now),
    }
    store_response(ROUTE_CREATE, body, 201)
    return jsonify(body), 201


@journal_bp.get("")
@login_required
def list_entries():
    page, limit = _page_args()
    q = JournalEntry.query.filter_by(user_id=int(current_user.id))
    total = q.count()
    rows = (
        q.order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify({
        "ok": True,
        "count": len(rows),
        "total": total,
        "page": page,
        "limit": limit,
        "items": [r.to_dict() for r in rows],
    }), 200


@journal_bp.get("/<int:entry_id>")
@login_required
def get_entry(entry_id: int):
    row = JournalEntry.query.filter_by(id=entry_id, user_id=int(current_user.id)).first()
    if not row:
        raise NotFound("Journal entry not found")
    return jsonify({"ok": True, "entry": row.to_dict()}), 200


@journal_bp.delete("/<int:entry_id>")
@login_required
def delete_entry(entry_id: int):
    uid = int(current_user.id)
    if not JournalEntry.query.filter_by(id=entry_id, user_id=uid).first():
        raise NotFound("Journal entry not found")

    def _cycle(u: User) -> int:
        row = JournalEntry.query.filter_by(id=entry_id, user_id=u.id).first()
        if not row:
            raise NotFound("Journal entry not found")
        refunded = int(row.points_awarded or 0)
        db.session.delete(row)
        if points.should_refund(row.user_id, u.id, refunded):
            points.refund(u, refunded, points.COUNTER_JOURNAL)
        else:
            refunded = 0
        return refunded

    refunded = run_in_transaction(uid, _cycle)
    return jsonify({"ok": True, "message": "Journal entry deleted successfully", "points_refunded": refunded}), 200
