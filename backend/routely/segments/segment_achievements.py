from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from routely.models import Achievement
from routely.utils.achievements import achievements_with_status, seed_default_achievements

achievements_bp = Blueprint("achievements_bp", __name__, url_prefix="/api/achievements")


@achievements_bp.get("")
def list_achievements():
    seed_default_achievements()
    rows = Achievement.query.order_by(Achievement.category.asc(), Achievement.points_reward.desc()).all()
    return jsonify({"ok": True, "count": len(rows), "items": [a.to_dict() for a in rows]}), 200


@achievements_bp.get("/my")
@login_required
def my_achievements():
    seed_default_achievements()
    items = achievements_with_status(current_user)
    return jsonify({
        "ok": True,
        "items": items,
        "unlocked_count": sum(1 for a in items if a["unlocked"]),
        "total_count": len(items),
    }), 200
