"""Opt-in request deduplication via the ``Idempotency-Key`` header.

The key row is written in the same transaction as the content it guards, so
a retried request either sees the finished response or a conflict, never a
second award. Requests without the header are not deduplicated.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from flask import current_app, request
from sqlalchemy.exc import SQLAlchemyError

from routely.errors import Conflict
from routely.extensions import db
from routely.models import IdempotencyKey


def _hash_request(payload: Any) -> str:
    try:
        raw = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    except (TypeError, ValueError):
        raw = str(payload).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def get_idempotency_key() -> str | None:
    k = request.headers.get("Idempotency-Key") or request.headers.get("X-Idempotency-Key")
    if not k or not k.strip():
        return None
    return k.strip()[:128]


def _check_owner_and_payload(row: IdempotencyKey, user_id: int | None, payload: Any) -> None:
    owner = int(row.user_id) if row.user_id is not None else None
    caller = int(user_id) if user_id is not None else None
    # anonymous callers are their own identity; they never share keys with a user
    if owner != caller:
        raise Conflict("Idempotency key belongs to another user")
    if row.request_hash and row.request_hash != _hash_request(payload):
        raise Conflict("Idempotency key reuse with different payload")


def lookup_response(user_id: int | None, route: str, payload: Any) -> tuple[dict, int] | None:
    """Stored ``(body, status)`` for a replayed key, else None."""
    k = get_idempotency_key()
    if not k:
        return None
    row = IdempotencyKey.query.filter_by(key=k, route=route).first()
    if not row:
        return None
    _check_owner_and_payload(row, user_id, payload)
    if not row.response_json:
        raise Conflict("A request with this Idempotency-Key is still being processed")
    try:
        return json.loads(row.response_json), int(row.status_code or 200)
    except ValueError:
        return {"ok": True}, int(row.status_code or 200)


def reserve_key(user_id: int | None, route: str, payload: Any) -> None:
    """Add the key row to the current transaction (no commit)."""
    k = get_idempotency_key()
    if not k:
        return
    row = IdempotencyKey.query.filter_by(key=k, route=route).first()
    if row:
        _check_owner_and_payload(row, user_id, payload)
        raise Conflict("A request with this Idempotency-Key was already processed")
    db.session.add(IdempotencyKey(
        key=k,
        user_id=int(user_id) if user_id is not None else None,
        route=route,
        request_hash=_hash_request(payload),
    ))


def store_response(route: str, body: Any, status_code: int) -> None:
    k = get_idempotency_key()
    if not k:
        return
    row = IdempotencyKey.query.filter_by(key=k, route=route).first()
    if not row:
        return
    row.response_json = json.dumps(body, default=str)
    row.status_code = int(status_code)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        # the guarded write already committed; a replay now gets a 409 instead of the body
        db.session.rollback()
        current_app.logger.warning("could not store idempotent response for %s: %s", route, e)
