from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of **access tokens** keyed by ``jti``.

    Methods are expected to be idempotent.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...


class InMemoryDenylistStore(TokenDenylistStore):
    """Process-local denylist used when no Redis is configured."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            expires_at = self._revoked.get(jti)
            if expires_at is None:
                return False
            if expires_at <= datetime.now(UTC):
                # The token has expired on its own; forget it.
                del self._revoked[jti]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._revoked)

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        """Remember ``jti`` until ``expires_at``; lapsed entries are swept here."""
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        now = datetime.now(UTC)
        with self._lock:
            for lapsed in [k for k, exp in self._revoked.items() if exp <= now]:
                del self._revoked[lapsed]
            if expires_at > now:
                self._revoked[jti] = expires_at
