from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError

from routely.errors import Conflict, PersistenceError, ValidationError
from routely.extensions import db
from routely.models import User
from routely.utils.achievements import gather_stats
from routely.utils.jwt_utils import create_access_token

auth_bp = Blueprint("auth_bp", __name__, url_prefix="/api/auth")
users_bp = Blueprint("users_bp", __name__, url_prefix="/api/users")

MIN_PASSWORD_LENGTH = 6


def _create_user(*, name: str, email: str, phone: str | None, password: str) -> User:
    if not name or not email or not password:
        raise ValidationError("Please provide name, email, and password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if User.query.filter_by(email=email).first():
        raise Conflict("User already exists with this email")

    u = User(name=name, email=email, phone=phone, points=0)
    u.set_password(password)
    try:
        db.session.add(u)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("User already exists with this email")
    except Exception as e:
        db.session.rollback()
        raise PersistenceError() from e
    return u


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    phone = (data.get("phone") or "").strip() or None
    password = data.get("password") or ""

    u = _create_user(name=name, email=email, phone=phone, password=password)
    token = create_access_token(u.id)
    return jsonify({"ok": True, "user": u.to_dict(), "token": token}), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        raise ValidationError("Please provide email and password")

    u = User.query.filter_by(email=email).first()
    if not u or not u.check_password(password):
        return jsonify({"ok": False, "message": "Invalid credentials"}), 401

    token = create_access_token(u.id)
    return jsonify({"ok": True, "user": u.to_dict(), "token": token}), 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify({"ok": True, "user": current_user.to_dict()}), 200


@users_bp.get("/me/stats")
@login_required
def my_stats():
    """The numbers achievements are judged on, for progress bars."""
    stats = gather_stats(current_user)
    return jsonify({"ok": True, "stats": stats.to_dict()}), 200
