"""Convenience exports for application schemas."""

from __future__ import annotations

from .account import (
    AccountSchema,
    ChannelProfileSchema,
    LoginResultSchema,
    MediaSchema,
    RegisterSchema,
    UpdateDetailsSchema,
    WatchedVideoSchema,
)
from .auth import ChangePasswordSchema, LoginSchema, RefreshSchema, TokenPairSchema

__all__ = [
    "AccountSchema",
    "ChannelProfileSchema",
    "LoginResultSchema",
    "MediaSchema",
    "RegisterSchema",
    "UpdateDetailsSchema",
    "WatchedVideoSchema",
    "ChangePasswordSchema",
    "LoginSchema",
    "RefreshSchema",
    "TokenPairSchema",
]
