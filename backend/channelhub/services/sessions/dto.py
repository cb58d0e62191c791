# channelhub/services/sessions/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from channelhub.services.accounts.dto import AccountOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param identifier: Username or email (case-insensitive).
    :type identifier: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    identifier: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT (``None`` when the client sent none).
    :type refresh_token: str | None
    :param expected_account_id: When set, the refresh token must belong to this
        account (used when the caller also presented an access token).
    :type expected_account_id: int | None
    """

    refresh_token: str | None
    expected_account_id: int | None = None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param account_id: Account whose session ends.
    :type account_id: int
    :param access_jti: ``jti`` of the presented access token, denylisted until expiry.
    :type access_jti: str | None
    :param access_expires_at: Expiry of that access token.
    :type access_expires_at: datetime | None
    """

    account_id: int
    access_jti: str | None = None
    access_expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for a password change.

    :param account_id: Authenticated account.
    :type account_id: int
    :param old_password: Current password.
    :type old_password: str
    :param new_password: Replacement password.
    :type new_password: str
    """

    account_id: int
    old_password: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Result of a successful login: the public account plus a new token pair.
    """

    account: AccountOut
    access_token: str
    refresh_token: str
