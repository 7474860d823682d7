from __future__ import annotations

import math

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from routely.utils import leaderboard

leaderboard_bp = Blueprint("leaderboard_bp", __name__, url_prefix="/api/leaderboard")

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


@leaderboard_bp.get("")
def top_users():
    raw_limit = (request.args.get("limit") or "").strip()
    raw_page = (request.args.get("page") or "").strip()
    try:
        limit = int(raw_limit) if raw_limit else DEFAULT_LIMIT
    except ValueError:
        limit = DEFAULT_LIMIT
    try:
        page = int(raw_page) if raw_page else 1
    except ValueError:
        page = 1
    limit = max(1, min(MAX_LIMIT, limit))
    page = max(1, page)

    items = leaderboard.top(limit=limit, offset=(page - 1) * limit)
    total = leaderboard.total_users()
    return jsonify({
        "ok": True,
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }), 200


@leaderboard_bp.get("/me")
@login_required
def my_rank():
    return jsonify({"ok": True, **leaderboard.my_rank(current_user)}), 200
