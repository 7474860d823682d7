import pytest

from routely import create_app
from routely.config import TestConfig
from routely.extensions import db
from routely.models import User
from routely.utils.jwt_utils import create_access_token


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """App context for tests that call the engine directly."""
    with app.app_context():
        yield app


def make_user(name="Traveller", email=None, password="secret123", **fields):
    u = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com", **fields)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def user_factory(app):
    def _make(name="Traveller", **fields):
        with app.app_context():
            u = make_user(name=name, **fields)
            return int(u.id)
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id, **extra):
        with app.app_context():
            token = create_access_token(int(user_id))
        headers = {"Authorization": f"Bearer {token}"}
        headers.update(extra)
        return headers
    return _headers


def reload_user(user_id):
    db.session.expire_all()
    return db.session.get(User, int(user_id))
