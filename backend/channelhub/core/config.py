"""Settings classes selected by ``APP_ENV``.

Values come from the process environment; a ``.env`` file next to the working
directory is loaded first when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"
_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """``True`` when ``name`` holds a truthy word such as ``1`` or ``yes``.

    Unset variables yield ``default``.
    """
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_seconds(name: str, default: int) -> timedelta:
    """Lifetime from an integer number of seconds.

    Parameters
    ----------
    name:
        Variable holding the seconds, e.g. ``ACCESS_TOKEN_EXPIRY``.
    default:
        Seconds used when the variable is unset, unparsable or not positive.
    """
    try:
        seconds = int(os.getenv(name, default))
    except ValueError:
        seconds = default
    return timedelta(seconds=seconds if seconds > 0 else default)


class BaseConfig:
    """Settings shared by every environment.

    Token settings
    --------------
    ``ACCESS_TOKEN_SECRET`` and ``REFRESH_TOKEN_SECRET`` sign the two token
    kinds and must differ. ``JWT_SECRET_KEY`` is not set here: the app factory
    copies the final ``ACCESS_TOKEN_SECRET`` into it so the ``flask-jwt-extended``
    guards verify the access tokens we mint.

    Session policies
    ----------------
    ``REFRESH_REQUIRES_ACCESS_TOKEN``
        Refresh additionally demands a valid access token.
    ``REVOKE_SESSIONS_ON_PASSWORD_CHANGE``
        A password change clears the stored refresh token.

    Infrastructure
    --------------
    ``REDIS_URL`` enables the shared access-token denylist (in-process
    otherwise). ``MEDIA_BACKEND`` is ``"cloudinary"`` or ``"memory"``.
    """

    API_BASE_PREFIX = "/api"
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Tokens
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "CHANGE_ME_ACCESS")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "CHANGE_ME_REFRESH")
    ACCESS_TOKEN_EXPIRES = env_seconds("ACCESS_TOKEN_EXPIRY", 24 * 3600)
    REFRESH_TOKEN_EXPIRES = env_seconds("REFRESH_TOKEN_EXPIRY", 10 * 24 * 3600)

    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "accessToken"
    JWT_REFRESH_COOKIE_NAME = "refreshToken"
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_SECURE = env_bool("JWT_COOKIE_SECURE", True)

    REFRESH_REQUIRES_ACCESS_TOKEN = env_bool("REFRESH_REQUIRES_ACCESS_TOKEN", False)
    REVOKE_SESSIONS_ON_PASSWORD_CHANGE = env_bool("REVOKE_SESSIONS_ON_PASSWORD_CHANGE", False)

    # Storage
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Media
    MEDIA_BACKEND = os.getenv("MEDIA_BACKEND", "cloudinary").strip().lower()
    MEDIA_FOLDER = os.getenv("MEDIA_FOLDER", "channelhub")
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
    ALLOWED_IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # Flask-Limiter
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")

    # HTTP surface
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Debug on; cookies allowed over plain HTTP."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_COOKIE_SECURE = env_bool("JWT_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """In-memory SQLite, in-memory media host, fixed secrets, no rate limits.

    ``TEST_DATABASE_URL`` points the suite at another database.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False

    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    JWT_COOKIE_SECURE = False

    REDIS_URL = None
    MEDIA_BACKEND = "memory"
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    JWT_COOKIE_SECURE = True
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Settings class named by ``APP_ENV``; development when unset or unknown."""
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "development").strip().lower(), DevelopmentConfig)
