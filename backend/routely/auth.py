from __future__ import annotations

from flask import jsonify

from routely.extensions import db, login_manager
from routely.models import User
from routely.utils.jwt_utils import get_bearer_token, user_id_from_token


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve ``current_user`` from a Bearer token.

    A missing or bad token leaves the request anonymous, which is what the
    optional-auth endpoints (incident reports) rely on.
    """
    token = get_bearer_token(req.headers.get("Authorization", ""))
    if not token:
        return None
    user_id = user_id_from_token(token)
    if user_id is None:
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"ok": False, "message": "Unauthorized"}), 401
