import os


def _normalize_database_url(url: str) -> str:
    # Render/Heroku sometimes provide postgres:// which SQLAlchemy expects as postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    # Base directory of the backend (one level above this `routely` package)
    BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BACKEND_DIR, "instance")

    ENV = (os.getenv("ROUTELY_ENV", "dev") or "dev").strip().lower()
    TESTING = False

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRE_SECONDS = _int_env("JWT_EXPIRE_SECONDS", 60 * 60 * 24 * 30)

    _default_sqlite_path = os.path.join(INSTANCE_DIR, "routely.db").replace("\\", "/")
    _db_url = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL") or ""
    DATABASE_URL_SET = bool(_db_url)
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(_db_url or f"sqlite:///{_default_sqlite_path}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS: comma-separated origins for web builds (e.g. https://routely.app,http://localhost:3000)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    # Whole read-evaluate-write cycles retried on a user version conflict
    POINTS_TXN_RETRIES = _int_env("POINTS_TXN_RETRIES", 3)


class TestConfig(Config):
    ENV = "test"
    TESTING = True
    SECRET_KEY = "test-secret-key-routely"
    JWT_SECRET = "test-secret-key-routely"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DATABASE_URL_SET = True
    CORS_ORIGINS = ""
