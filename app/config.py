import os
from dotenv import dotenv_values

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")
    WTF_CSRF_SECRET_KEY = SECRET_KEY
    WTF_CSRF_TIME_LIMIT = None  # the tagging form can stay open for a whole shift

    # Database (env in prod; dev/test may use default)
    _ENV_FALLBACK = dotenv_values(".env")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///qa_tagger.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    SITE_NAME = os.getenv("SITE_NAME", "Feedback System")

    # Cookies: secure-by-default
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Flask-Limiter default: off globally; the gate has its own per-route limits
    RATELIMIT_DEFAULT = None

    # --- Password gate ---
    # Prefer GATE_PASSWORD_HASH (werkzeug format); GATE_PASSWORD is for local dev only.
    GATE_PASSWORD = os.getenv("GATE_PASSWORD")
    GATE_PASSWORD_HASH = os.getenv("GATE_PASSWORD_HASH")
    GATE_TOKEN_SALT = os.getenv("GATE_TOKEN_SALT", "gate-token-v1")
    GATE_SESSION_TTL_SECONDS = int(os.getenv("GATE_SESSION_TTL_SECONDS", str(12 * 60 * 60)))

    # --- Question rotation ---
    # "global": a question retires once anyone tags it; "per_user": each user walks the full list
    ROTATION_POLICY = os.getenv("ROTATION_POLICY", "global").lower()
    PERSIST_SKIPS = (os.getenv("PERSIST_SKIPS", "false").lower() == "true")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SESSION_COOKIE_SECURE = False
    GATE_PASSWORD = os.getenv("GATE_PASSWORD", "password123")

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    # REQUIRE env vars in production (fail fast if missing)
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SESSION_COOKIE_SECURE = True
    # allow override if you need "Strict" for purely internal apps
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    GATE_PASSWORD = "letmein"
    GATE_PASSWORD_HASH = None
    ROTATION_POLICY = "global"
    PERSIST_SKIPS = False

_ENV_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "staging": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
