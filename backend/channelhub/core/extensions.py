"""Global Flask extension instances and the adapters wired behind the ports."""

from __future__ import annotations

import logging
from typing import Any

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

# Stable constraint names so Alembic diffs stay deterministic.
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None

TOKEN_SERVICE_KEY = "channelhub.token_service"
DENYLIST_KEY = "channelhub.denylist_store"
MEDIA_HOST_KEY = "channelhub.media_host"


def init_app(app: Flask) -> None:
    """Bind the extensions and place the port adapters in ``app.extensions``.

    Importing :mod:`channelhub.models` here completes the metadata before
    Flask-Migrate inspects it. Views reach the token service, denylist store
    and media host through the ``get_*`` helpers below.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from channelhub import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    _init_redis(app)
    _init_token_service(app)
    _init_denylist(app)
    _init_account_lookup()
    _init_media_host(app)


def _init_redis(app: Flask) -> None:
    """Connect the denylist Redis when ``REDIS_URL`` is set; fail fast if unreachable."""
    global redis_client
    url = app.config.get("REDIS_URL")
    redis_client = redis.Redis.from_url(url) if url else None
    if redis_client is None:
        return
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis unreachable at {url!r}") from exc


def _init_token_service(app: Flask) -> None:
    """Build the token service and point the flask-jwt-extended guards at the same key.

    Runs after every config source (class, subclass, instance file) has been
    applied, so the guards always verify with the secret tokens are signed with.
    """
    from channelhub.infra.jwt.jwt_token_service import JWTTokenService

    cfg = app.config
    algorithm = cfg.get("JWT_ALGORITHM") or "HS256"
    cfg["JWT_SECRET_KEY"] = cfg["ACCESS_TOKEN_SECRET"]
    cfg["JWT_ALGORITHM"] = algorithm
    cfg["JWT_ACCESS_TOKEN_EXPIRES"] = cfg["ACCESS_TOKEN_EXPIRES"]
    cfg["JWT_REFRESH_TOKEN_EXPIRES"] = cfg["REFRESH_TOKEN_EXPIRES"]

    app.extensions[TOKEN_SERVICE_KEY] = JWTTokenService(
        access_secret=cfg["ACCESS_TOKEN_SECRET"],
        refresh_secret=cfg["REFRESH_TOKEN_SECRET"],
        access_ttl=cfg["ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=cfg["REFRESH_TOKEN_EXPIRES"],
        algorithm=algorithm,
    )


def _init_denylist(app: Flask) -> None:
    from channelhub.services._shared.ports import InMemoryDenylistStore

    store: Any
    if redis_client is not None:
        from channelhub.infra.redis.redis_denylist_store import RedisDenylistStore

        store = RedisDenylistStore(redis_client)
    else:
        store = InMemoryDenylistStore()
    app.extensions[DENYLIST_KEY] = store

    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict, jwt_payload: dict) -> bool:
        # jwt is shared by every app; the store belongs to the one serving the request.
        jti = jwt_payload.get("jti")
        return bool(jti) and get_denylist_store().is_revoked(jti)


def _init_account_lookup() -> None:
    from channelhub.models.account import Account

    @jwt.user_lookup_loader
    def _load_account(jwt_header: dict, jwt_payload: dict) -> Account | None:
        # A valid token for a deleted account is rejected as invalid.
        try:
            account_id = int(jwt_payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return db.session.get(Account, account_id)


def _init_media_host(app: Flask) -> None:
    backend = (app.config.get("MEDIA_BACKEND") or "cloudinary").lower()
    if backend == "memory":
        from channelhub.services._shared.ports import InMemoryMediaHost

        app.extensions[MEDIA_HOST_KEY] = InMemoryMediaHost()
        return
    if backend != "cloudinary":
        raise RuntimeError(f"Unknown MEDIA_BACKEND {backend!r}")

    from channelhub.infra.media.cloudinary_media_host import CloudinaryMediaHost

    app.extensions[MEDIA_HOST_KEY] = CloudinaryMediaHost(
        cloud_name=app.config.get("CLOUDINARY_CLOUD_NAME"),
        api_key=app.config.get("CLOUDINARY_API_KEY"),
        api_secret=app.config.get("CLOUDINARY_API_SECRET"),
    )
    log.info("Media host configured", extra={"event": "media_host.cloudinary"})


def get_token_service():
    """Return the token service bound to the current app."""
    return current_app.extensions[TOKEN_SERVICE_KEY]


def get_denylist_store():
    """Return the access-token denylist bound to the current app."""
    return current_app.extensions[DENYLIST_KEY]


def get_media_host():
    """Return the media host adapter bound to the current app."""
    return current_app.extensions[MEDIA_HOST_KEY]
