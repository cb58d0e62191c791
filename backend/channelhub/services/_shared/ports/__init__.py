"""
channelhub.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) the services depend on.

Modules
-------
- :mod:`token_service`:
    Defines :class:`~.TokenService` and :class:`~.TokenPair` — signing and
    verification of access/refresh tokens.

- :mod:`denylist_store`:
    Defines :class:`~.TokenDenylistStore` — revocation of access tokens by
    ``jti`` until they expire.

- :mod:`media_host`:
    Defines :class:`~.MediaHost` and :class:`~.MediaAsset` — the external
    image host used for avatars and cover images.

Concrete adapters live under ``channelhub.infra``; the in-memory doubles here
back local runs and tests.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .media_host import InMemoryMediaHost, MediaAsset, MediaHost
from .token_service import TokenKind, TokenPair, TokenService

__all__ = [
    "TokenService",
    "TokenPair",
    "TokenKind",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "MediaHost",
    "MediaAsset",
    "InMemoryMediaHost",
]
