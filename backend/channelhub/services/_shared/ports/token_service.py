from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol

TokenKind = Literal["access", "refresh"]


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Freshly issued access/refresh tokens.

    :param access_token: Short-lived bearer token.
    :param refresh_token: Long-lived token exchanged for a new pair.
    """

    access_token: str
    refresh_token: str


class TokenService(Protocol):
    """Port for issuing and verifying signed session tokens."""

    def issue(self, account_id: int, claims: dict[str, Any] | None = None) -> TokenPair: ...

    def verify(self, token: str, kind: TokenKind) -> int: ...

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]: ...
