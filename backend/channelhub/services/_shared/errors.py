"""
Errors raised by channelhub services, repositories and adapters.

Nothing here knows about Flask or HTTP status codes; the web layer maps these
onto failure envelopes through ``BaseService.translate_exceptions``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *names: str) -> bool:
    """
    ``True`` when the driver message of ``exc`` names any of ``names``.

    PostgreSQL reports the constraint (``uq_accounts_email``) while SQLite
    reports the column (``accounts.email``), so callers usually pass both.
    """
    text = str(exc.orig or "").lower()
    return any(name.lower() in text for name in names)


class ServiceError(Exception):
    """Root of every error a service may raise; carries a client-safe message."""

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    ``entity`` identified by ``key`` does not exist.

    :param detail: Client-facing text; defaults to ``"<entity> not found: <key>"``.
    """

    entity: str
    key: str | int
    detail: str | None = None

    def __str__(self) -> str:
        return self.detail or f"{self.entity} not found: {self.key}"


class UnknownAccountError(NotFoundError):
    """Login identifier matches no account (reported as 401, not 404)."""


@dataclass(slots=True)
class ConflictError(ServiceError):
    """A username or email is already taken by another ``entity`` row."""

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


class ValidationFailedError(ServiceError):
    """Required input is missing or blank."""

    default_message = "All fields are required"


class InvalidRequestError(ServiceError):
    """Input is present but not acceptable (e.g. new password equals old)."""

    default_message = "Invalid request"


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class UnauthorizedError(ServiceError):
    """Caller is not authenticated for the requested operation."""

    default_message = "Unauthorized request"


class BadCredentialError(UnauthorizedError):
    """Supplied password does not match the stored verifier."""

    default_message = "Incorrect password"


class InvalidTokenError(UnauthorizedError):
    """
    Token is malformed, badly signed, expired or of the wrong type.

    The cause is deliberately not distinguished in the message.
    """

    default_message = "Invalid token"


# --------------------------------------------------------------------------- #
# External dependencies
# --------------------------------------------------------------------------- #


class MediaUploadError(ServiceError):
    """The media host rejected or failed an upload."""

    default_message = "Error while uploading file"


class TokenIssueError(ServiceError):
    """Issuing or persisting a token pair failed."""

    default_message = "Something went wrong while generating refresh and access token"
