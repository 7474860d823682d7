from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from routely.errors import NotFound, PersistenceError, RateLimitExceeded, ValidationError
from routely.extensions import db
from routely.models import Incident, INCIDENT_TYPES, User
from routely.utils import action_ledger, points, rate_limits
from routely.utils.achievements import check_and_award
from routely.utils.idempotency import lookup_response, reserve_key, store_response
from routely.utils.transactions import run_in_transaction

incidents_bp = Blueprint("incidents_bp", __name__, url_prefix="/api/incidents")

ROUTE_CREATE = "incidents.create"
DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500


def parse_datetime(raw, field: str) -> datetime:
    """ISO-8601 string to naive UTC."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError(f"{field} must be an ISO-8601 date")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _parse_incident(payload: dict) -> dict:
    itype = payload.get("type")
    lat = payload.get("lat")
    lng = payload.get("lng")
    if not itype or lat is None or lng is None:
        raise ValidationError("Type, latitude, and longitude are required")
    if itype not in INCIDENT_TYPES:
        raise ValidationError(f"Invalid incident type. Must be one of: {', '.join(INCIDENT_TYPES)}")
    if not _is_number(lat) or not _is_number(lng):
        raise ValidationError("Latitude and longitude must be numbers")
    if lat < -90 or lat > 90 or lng < -180 or lng > 180:
        raise ValidationError("Invalid coordinates. Lat must be between -90 and 90, Lng must be between -180 and 180")

    description = payload.get("description") or ""
    if not isinstance(description, str):
        raise ValidationError("description must be a string")

    ts = payload.get("timestamp")
    return {
        "type": itype,
        "lat": float(lat),
        "lng": float(lng),
        "description": description.strip(),
        "timestamp": parse_datetime(ts, "timestamp") if ts else datetime.utcnow(),
    }


@incidents_bp.post("")
def create_incident():
    payload = request.get_json(silent=True) or {}
    fields = _parse_incident(payload)
    uid = int(current_user.id) if current_user.is_authenticated else None

    replay = lookup_response(uid, ROUTE_CREATE, payload)
    if replay:
        body, code = replay
        return jsonify(body), code

    now = datetime.utcnow()
    new_achievements: list[str] = []

    if uid is None:
        # Anonymous reports skip rate limiting and never earn points
        incident = Incident(user_id=None, points_awarded=0, **fields)
        try:
            reserve_key(None, ROUTE_CREATE, payload)
            db.session.add(incident)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e
    else:
        def _cycle(u: User) -> Incident:
            reserve_key(u.id, ROUTE_CREATE, payload)
            recent = action_ledger.record_and_count(u, action_ledger.ACTION_INCIDENT, now=now) - 1
            pts = rate_limits.enforce(action_ledger.ACTION_INCIDENT, recent)
            row = Incident(user_id=u.id, points_awarded=pts, **fields)
            db.session.add(row)
            points.award(u, pts, points.COUNTER_INCIDENT, now=now)
            return row

        try:
            incident = run_in_transaction(uid, _cycle)
        except RateLimitExceeded:
            current_app.logger.warning("incident rate limit hit by user %s", uid)
            raise
        new_achievements = check_and_award(uid, now)

    body = {
        "ok": True,
        "message": "Incident reported successfully",
        "incident": incident.to_dict(),
        "points_awarded": int(incident.points_awarded or 0),
        "new_achievements": new_achievements,
    }
    store_response(ROUTE_CREATE, body, 201)
    return jsonify(body), 201


@incidents_bp.get("")
def list_incidents():
    q = Incident.query

    itype = (request.args.get("type") or "").strip()
    if itype in INCIDENT_TYPES:
        q = q.filter(Incident.type == itype)

    start = request.args.get("startDate")
    end = request.args.get("endDate")
    if start:
        q = q.filter(Incident.timestamp >= parse_datetime(start, "startDate"))
    if end:
        q = q.filter(Incident.timestamp <= parse_datetime(end, "endDate"))

    raw_limit = (request.args.get("limit") or "").strip()
    try:
        limit = int(raw_limit) if raw_limit else DEFAULT_LIST_LIMIT
    except ValueError:
        limit = DEFAULT_LIST_LIMIT
    limit = max(1, min(MAX_LIST_LIMIT, limit))

    rows = q.order_by(Incident.timestamp.desc(), Incident.id.desc()).limit(limit).all()
    return jsonify({"ok": True, "count": len(rows), "items": [r.to_dict() for r in rows]}), 200


@incidents_bp.delete("/<int:incident_id>")
@login_required
def delete_incident(incident_id: int):
    uid = int(current_user.id)
    incident = db.session.get(Incident, incident_id)
    if not incident:
        raise NotFound("Incident not found")
    snapshot = incident.to_dict()

    # Foreign and anonymous reports are removed without touching anyone's balance
    if points.should_refund(incident.user_id, uid, incident.points_awarded):
        def _cycle(u: User) -> int:
            row = db.session.get(Incident, incident_id)
            if not row:
                raise NotFound("Incident not found")
            refunded = int(row.points_awarded or 0)
            db.session.delete(row)
            points.refund(u, refunded, points.COUNTER_INCIDENT)
            return refunded

        refunded = run_in_transaction(uid, _cycle)
    else:
        refunded = 0
        try:
            db.session.delete(incident)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError() from e

    return jsonify({
        "ok": True,
        "message": "Incident deleted successfully",
        "incident": snapshot,
        "points_refunded": refunded,
    }), 200
