"""Unit tests for logging setup and error translation."""

from __future__ import annotations

import json
import logging

import pytest

from channelhub.core import errors as api_errors
from channelhub.core.logger import JSONFormatter, configure_logging
from channelhub.services._shared.base import BaseService
from channelhub.services._shared.errors import (
    BadCredentialError,
    ConflictError,
    InvalidRequestError,
    MediaUploadError,
    NotFoundError,
    TokenIssueError,
    UnknownAccountError,
    ValidationFailedError,
)


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""
    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("WARNING")


def test_json_formatter_includes_extra_keys() -> None:
    record = logging.LogRecord("channelhub.services", logging.INFO, __file__, 1, "session.login", None, None)
    record.event = "session.login"
    record.account_id = 42

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "session.login"
    assert payload["event"] == "session.login"
    assert payload["account_id"] == 42


@pytest.mark.parametrize(
    ("exc", "expected", "status", "message"),
    [
        (UnknownAccountError("Account", "ghost", detail="User does not exist"), api_errors.Unauthorized, 401, "User does not exist"),
        (BadCredentialError(), api_errors.Unauthorized, 401, "Incorrect password"),
        (NotFoundError("Account", "x", detail="Channel does not exist"), api_errors.NotFound, 404, "Channel does not exist"),
        (ConflictError("Account", "Email is already in use"), api_errors.Conflict, 409, "Email is already in use"),
        (ValidationFailedError(), api_errors.BadRequest, 400, "All fields are required"),
        (InvalidRequestError("New password must be different"), api_errors.BadRequest, 400, None),
        (MediaUploadError(), api_errors.InternalError, 500, "Error while uploading file"),
        (TokenIssueError(), api_errors.InternalError, 500, None),
    ],
)
def test_translate_exceptions(exc, expected, status, message) -> None:
    translated = BaseService().translate_exceptions(exc)

    assert isinstance(translated, expected)
    assert translated.status_code == status
    if message is not None:
        assert translated.message == message


def test_non_service_errors_are_left_untouched() -> None:
    err = RuntimeError("boom")
    assert BaseService().translate_exceptions(err) is err


def test_flatten_marshmallow_messages() -> None:
    flat = api_errors._flatten_messages({"email": ["Not a valid email."], "owner": {"name": ["Missing."]}})

    assert {"field": "email", "message": "Not a valid email."} in flat
    assert {"field": "owner.name", "message": "Missing."} in flat


def test_failure_envelope_shape(app) -> None:
    with app.test_request_context("/"):
        envelope = api_errors.failure_envelope(status=409, message="Conflict")

    assert envelope["success"] is False
    assert envelope["code"] == "conflict"
    assert envelope["errors"] == []
    assert envelope["request_id"]
