from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]


class RedisDenylistStore:
    """
    Denylist for **access tokens** by jti; entries expire with the token.
    """

    prefix = "channelhub:deny:at:"

    def __init__(self, r: redis.Redis):
        self.r = r

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        ttl = int(expires_at.timestamp() - datetime.now(UTC).timestamp())
        if ttl <= 0:
            # Already expired; nothing left to deny.
            return
        self.r.set(self._k(jti), "1", ex=ttl)
