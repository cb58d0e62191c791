"""Failure envelopes and the Flask error handlers that emit them.

Every error leaves the API as::

    {"status": 409, "message": "...", "success": false,
     "errors": [...], "code": "conflict", "request_id": "..."}
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from flask_jwt_extended import JWTManager
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from channelhub.core.logger import ensure_request_id

log = logging.getLogger(__name__)

_CODES = {
    HTTPStatus.BAD_REQUEST: "bad_request",
    HTTPStatus.UNAUTHORIZED: "unauthorized",
    HTTPStatus.FORBIDDEN: "forbidden",
    HTTPStatus.NOT_FOUND: "not_found",
    HTTPStatus.METHOD_NOT_ALLOWED: "method_not_allowed",
    HTTPStatus.CONFLICT: "conflict",
    HTTPStatus.REQUEST_ENTITY_TOO_LARGE: "payload_too_large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "unsupported_media_type",
    HTTPStatus.UNPROCESSABLE_ENTITY: "unprocessable_entity",
    HTTPStatus.TOO_MANY_REQUESTS: "too_many_requests",
    HTTPStatus.INTERNAL_SERVER_ERROR: "internal_server_error",
    HTTPStatus.SERVICE_UNAVAILABLE: "service_unavailable",
}


def _code_for(status: int) -> str:
    return _CODES.get(status, "error")


def _flatten_messages(messages: Any, prefix: str = "") -> list[dict[str, str]]:
    """marshmallow's nested ``messages`` as a flat ``[{field, message}]`` list."""
    if isinstance(messages, dict):
        return [
            item
            for key, nested in messages.items()
            for item in _flatten_messages(nested, f"{prefix}.{key}" if prefix else str(key))
        ]
    if isinstance(messages, list | tuple):
        return [item for nested in messages for item in _flatten_messages(nested, prefix)]
    return [{"field": prefix or "_schema", "message": str(messages)}]


def failure_envelope(
    *,
    status: int,
    message: str,
    code: str | None = None,
    errors: list[Any] | None = None,
) -> dict[str, Any]:
    """
    Body of every error response.

    :param status: HTTP status, repeated in the body.
    :param message: Client-safe summary.
    :param code: Stable snake_case identifier; derived from ``status`` when omitted.
    :param errors: Structured details such as field validation messages.
    """
    return {
        "status": int(status),
        "message": message,
        "success": False,
        "errors": list(errors or []),
        "code": code or _code_for(int(status)),
        "request_id": ensure_request_id(),
    }


def _respond(
    status: int,
    message: str,
    *,
    code: str | None = None,
    errors: list[Any] | None = None,
    exc_info: bool = False,
) -> tuple[Response, int]:
    envelope = failure_envelope(status=status, message=message, code=code, errors=errors)
    log.log(
        logging.ERROR if status >= 500 else logging.WARNING,
        "request failed: status=%s code=%s message=%s",
        envelope["status"],
        envelope["code"],
        message,
        exc_info=exc_info,
    )
    return jsonify(envelope), envelope["status"]


class APIError(Exception):
    """
    Error carrying its own HTTP rendering.

    Subclasses pin ``status_code``, ``code`` and ``default_message``; callers
    usually pass only a message.

    Parameters
    ----------
    message : str, optional
        Client-facing text. Falls back to ``default_message``.
    errors : list, optional
        Structured details placed in the envelope's ``errors``.
    status_code, code : optional
        Override the class defaults.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code = "bad_request"
    default_message = "Bad request"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[Any] | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.status_code = int(status_code or self.status_code)
        self.code = code or self.code
        self.errors = list(errors or [])

    def to_envelope(self) -> dict[str, Any]:
        return failure_envelope(
            status=self.status_code, message=self.message, code=self.code, errors=self.errors
        )


class BadRequest(APIError):
    pass


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized request"


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Conflict"


class InternalError(APIError):
    """Media host or token signing failures."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_server_error"
    default_message = "Something went wrong"


def _register_jwt_loaders(jwt: JWTManager) -> None:
    """Render flask-jwt-extended rejections as 401 envelopes."""

    def reject(message: str) -> tuple[Response, int]:
        return _respond(HTTPStatus.UNAUTHORIZED, message)

    jwt.unauthorized_loader(lambda reason: reject("Unauthorized request"))
    jwt.invalid_token_loader(lambda reason: reject("Invalid access token"))
    jwt.expired_token_loader(lambda header, data: reject("Access token expired"))
    jwt.revoked_token_loader(lambda header, data: reject("Access token has been revoked"))
    # Token is valid but its account no longer exists.
    jwt.user_lookup_error_loader(lambda header, data: reject("Invalid access token"))


def init_app(app: Flask) -> None:
    """
    Install the JSON error handlers.

    Service errors go through :meth:`BaseService.translate_exceptions`;
    database and unexpected errors never expose driver details.
    """
    from channelhub.core.extensions import jwt
    from channelhub.services._shared.base import BaseService
    from channelhub.services._shared.errors import ServiceError

    _register_jwt_loaders(jwt)

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _respond(
            err.status_code,
            err.message,
            code=err.code,
            errors=err.errors,
            exc_info=err.status_code >= 500,
        )

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService().translate_exceptions(err)
        if isinstance(translated, APIError):
            return handle_api_error(translated)
        return handle_unexpected_error(err)  # pragma: no cover - every ServiceError maps

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or _code_for(status).replace("_", " ").capitalize()).strip()
        return _respond(status, message)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return _respond(
            HTTPStatus.BAD_REQUEST,
            "Validation failed",
            code="validation_error",
            errors=_flatten_messages(err.messages),
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        return _respond(HTTPStatus.CONFLICT, "Resource conflict", exc_info=True)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        return _respond(
            HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable", exc_info=True
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return _respond(HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error", exc_info=True)
