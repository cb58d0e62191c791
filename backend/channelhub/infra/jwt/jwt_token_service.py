# channelhub/infra/jwt/jwt_token_service.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from channelhub.services._shared.errors import InvalidTokenError
from channelhub.services._shared.ports import TokenKind, TokenPair, TokenService

# Claims owned by the service; callers cannot override them.
_RESERVED_CLAIMS = frozenset({"sub", "type", "jti", "iat", "nbf", "exp", "fresh"})


@dataclass(slots=True)
class JWTTokenService(TokenService):
    """
    HS256 access/refresh tokens signed with two independent secrets.

    The claim layout matches Flask-JWT-Extended (string ``sub``, ``type``,
    ``jti``, ``fresh``), so access tokens issued here pass its
    ``verify_jwt_in_request`` guard when ``JWT_SECRET_KEY`` equals
    ``access_secret``.
    """

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(days=1)
    refresh_ttl: timedelta = timedelta(days=10)
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both token secrets must be configured.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh secrets must differ.")

    # ------------------------------------------------------------------ #

    def issue(self, account_id: int, claims: dict[str, Any] | None = None) -> TokenPair:
        """
        Sign a new access/refresh pair for ``account_id``.

        :param account_id: Subject of both tokens.
        :param claims: Extra public claims for the access token only.
        """
        now = datetime.now(UTC)
        extra = {k: v for k, v in (claims or {}).items() if k not in _RESERVED_CLAIMS}
        access = self._encode(account_id, "access", now, self.access_ttl, extra)
        refresh = self._encode(account_id, "refresh", now, self.refresh_ttl, {})
        return TokenPair(access_token=access, refresh_token=refresh)

    def verify(self, token: str, kind: TokenKind) -> int:
        """
        Return the account id carried by a valid token of ``kind``.

        :raises InvalidTokenError: Malformed, badly signed, expired or wrong type.
        """
        payload = self.decode(token, kind)
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError() from None

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """Verify ``token`` and return its claims."""
        if not token or not isinstance(token, str):
            raise InvalidTokenError()
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub", "type", "jti"]},
            )
        except jwt.PyJWTError:
            raise InvalidTokenError() from None
        if payload.get("type") != kind:
            raise InvalidTokenError()
        return payload

    # ------------------------------------------------------------------ #

    def _secret(self, kind: TokenKind) -> str:
        return self.access_secret if kind == "access" else self.refresh_secret

    def _encode(
        self,
        account_id: int,
        kind: TokenKind,
        now: datetime,
        ttl: timedelta,
        extra: dict[str, Any],
    ) -> str:
        payload: dict[str, Any] = {
            **extra,
            "sub": str(account_id),
            "type": kind,
            "jti": uuid4().hex,
            "iat": now,
            "nbf": now,
            "exp": now + ttl,
        }
        if kind == "access":
            payload["fresh"] = False
        return jwt.encode(payload, self._secret(kind), algorithm=self.algorithm)
