"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from channelhub.api.deps import api_response, timing
from channelhub.core import extensions
from channelhub.core.extensions import db

bp = Blueprint("health", __name__)


def _redis_status() -> str:
    if extensions.redis_client is None:
        return "disabled"
    try:
        extensions.redis_client.ping()
    except RedisError:  # pragma: no cover - needs a live Redis
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Report build metadata plus database and Redis reachability."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    redis_status = _redis_status()
    payload = {
        "db": db_status,
        "redis": redis_status,
        "media": current_app.config.get("MEDIA_BACKEND"),
        "version": current_app.config.get("APP_VERSION", "dev"),
        "commit": current_app.config.get("APP_COMMIT", "unknown"),
    }
    healthy = db_status == "ok" and redis_status != "fail"
    return api_response(payload, "OK" if healthy else "Degraded")
