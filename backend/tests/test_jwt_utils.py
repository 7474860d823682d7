import jwt

from routely.utils.jwt_utils import (
    create_access_token,
    decode_token,
    get_bearer_token,
    user_id_from_token,
)


def test_access_token_resolves_to_user_id(ctx):
    token = create_access_token(42)
    assert user_id_from_token(token) == 42
    assert decode_token(token)["type"] == "access"


def test_expired_or_foreign_tokens_are_rejected(ctx):
    assert user_id_from_token(create_access_token(1, ttl_seconds=-10)) is None
    forged = jwt.encode({"sub": "1", "type": "access"}, "some-other-key", algorithm="HS256")
    assert user_id_from_token(forged) is None


def test_non_access_tokens_are_rejected(ctx):
    key = ctx.config["JWT_SECRET"]
    assert user_id_from_token(jwt.encode({"sub": "1", "type": "refresh"}, key, algorithm="HS256")) is None
    assert user_id_from_token(jwt.encode({"sub": "abc", "type": "access"}, key, algorithm="HS256")) is None


def test_bearer_header_parsing():
    assert get_bearer_token("Bearer abc.def") == "abc.def"
    assert get_bearer_token("bearer  abc.def ") == "abc.def"
    assert get_bearer_token("Basic abc") is None
    assert get_bearer_token("Bearer") is None
    assert get_bearer_token("") is None
    assert get_bearer_token(None) is None
