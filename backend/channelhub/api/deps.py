"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import (
    get_jwt,
    get_jwt_identity,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
    verify_jwt_in_request,
)

from channelhub.core.extensions import get_denylist_store, get_media_host, get_token_service
from channelhub.core.logger import ensure_request_id
from channelhub.services._shared.base import ServiceContext
from channelhub.services.accounts.dto import MediaPolicy, UploadIn
from channelhub.services.accounts.service import AccountService
from channelhub.services.sessions.service import SessionService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------- Auth -------------------------------------


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token (header or cookie)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_account_id() -> int | None:
    """Identity of the verified access token, if any."""
    identity = get_jwt_identity()
    return int(identity) if identity is not None else None


def access_token_expiry() -> tuple[str | None, datetime | None]:
    """Return ``(jti, expires_at)`` of the verified access token."""
    claims = get_jwt() or {}
    exp = claims.get("exp")
    return claims.get("jti"), datetime.fromtimestamp(int(exp), tz=UTC) if exp else None


# ----------------------------- Services -----------------------------------


def service_context() -> ServiceContext:
    """Build the request-scoped context handed to services."""
    try:
        actor_id = current_account_id()
    except RuntimeError:
        # No JWT was verified for this request.
        actor_id = None
    return ServiceContext(actor_id=actor_id, request_id=ensure_request_id())


def session_service() -> SessionService:
    return SessionService(
        token_service=get_token_service(),
        denylist_store=get_denylist_store(),
        revoke_on_password_change=bool(current_app.config.get("REVOKE_SESSIONS_ON_PASSWORD_CHANGE")),
        ctx=service_context(),
    )


def account_service() -> AccountService:
    policy = MediaPolicy(
        folder=current_app.config.get("MEDIA_FOLDER"),
        allowed_extensions=frozenset(current_app.config.get("ALLOWED_IMAGE_EXTENSIONS", ())),
    )
    return AccountService(media_host=get_media_host(), media_policy=policy, ctx=service_context())


# ----------------------------- Request/response ----------------------------


def upload_from_request(field: str) -> UploadIn | None:
    """Adapt a multipart file part to :class:`UploadIn` (``None`` when absent)."""
    storage = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    return UploadIn(stream=storage.stream, filename=storage.filename)


def form_or_json() -> dict[str, Any]:
    """Request fields from a JSON body or, failing that, form data."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def api_response(data: Any = None, message: str = "Success", *, status: int = 200) -> Response:
    """Return the success envelope ``{status, data, message, success}``."""

    response = jsonify(
        {
            "status": status,
            "data": data if data is not None else {},
            "message": message,
            "success": status < 400,
        }
    )
    response.status_code = status
    return response


def set_session_cookies(response: Response, access_token: str, refresh_token: str) -> Response:
    """Attach both tokens as HTTP-only cookies."""
    set_access_cookies(response, access_token)
    set_refresh_cookies(response, refresh_token)
    return response


def clear_session_cookies(response: Response) -> Response:
    unset_jwt_cookies(response)
    return response


def refresh_token_from_request(body_token: str | None) -> str | None:
    """Refresh token from the cookie, falling back to the request body."""
    cookie_name = current_app.config.get("JWT_REFRESH_COOKIE_NAME", "refreshToken")
    return request.cookies.get(cookie_name) or body_token


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
