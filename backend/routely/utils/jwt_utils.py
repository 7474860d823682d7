"""HS256 bearer tokens. The signing key and lifetime come from app config."""

import time
from typing import Optional, Dict, Any

import jwt
from flask import current_app

TOKEN_TYPE_ACCESS = "access"
DEFAULT_TTL_SECONDS = 60 * 60 * 24 * 30


def _signing_key() -> str:
    key = current_app.config.get("JWT_SECRET") or current_app.config.get("SECRET_KEY")
    if not key:
        raise RuntimeError("JWT_SECRET or SECRET_KEY must be configured")
    return key


def create_access_token(user_id: int, ttl_seconds: int | None = None) -> str:
    ttl = int(ttl_seconds or current_app.config.get("JWT_EXPIRE_SECONDS") or DEFAULT_TTL_SECONDS)
    issued = int(time.time())
    claims = {
        "sub": str(int(user_id)),
        "iat": issued,
        "exp": issued + ttl,
        "type": TOKEN_TYPE_ACCESS,
    }
    return jwt.encode(claims, _signing_key(), algorithm="HS256")


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for an expired, tampered or malformed token."""
    try:
        return jwt.decode(token, _signing_key(), algorithms=["HS256"])
    except jwt.PyJWTError:
        return None


def user_id_from_token(token: str) -> Optional[int]:
    claims = decode_token(token)
    if not claims or claims.get("type") != TOKEN_TYPE_ACCESS:
        return None
    try:
        return int(claims.get("sub"))
    except (TypeError, ValueError):
        return None


def get_bearer_token(auth_header: str) -> Optional[str]:
    scheme, _, token = (auth_header or "").strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token
