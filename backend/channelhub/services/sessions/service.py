# channelhub/services/sessions/service.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import OperationalError

from channelhub.models.account import Account
from channelhub.repositories.account import AccountRepository
from channelhub.services._shared.base import BaseService, ServiceContext
from channelhub.services._shared.errors import (
    BadCredentialError,
    InvalidRequestError,
    InvalidTokenError,
    TokenIssueError,
    UnauthorizedError,
    UnknownAccountError,
    ValidationFailedError,
)
from channelhub.services._shared.ports import TokenDenylistStore, TokenPair, TokenService
from channelhub.services.accounts.dto import AccountOut
from channelhub.services.sessions.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    PasswordChangeIn,
    RefreshIn,
    TokenPairOut,
)


class SessionService(BaseService):
    """
    Session lifecycle: login, logout, refresh rotation and password change.

    Each account holds at most one refresh token. Login and refresh replace
    it, logout clears it, and a refresh token is honoured only while it equals
    the stored value, which makes every refresh token single-use.
    """

    def __init__(
        self,
        *,
        token_service: TokenService,
        denylist_store: TokenDenylistStore | None = None,
        revoke_on_password_change: bool = False,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_service: Adapter issuing/verifying access and refresh tokens.
        :param denylist_store: Optional denylist for access tokens presented at logout.
        :param revoke_on_password_change: Clear the stored refresh token after a
            successful password change.
        :param ctx: Request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_service
        self.denylist = denylist_store
        self.revoke_on_password_change = revoke_on_password_change

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and start a session.

        :param dto: Login input.
        :returns: Public account view with a fresh token pair.
        :raises ValidationFailedError: If identifier or password is blank.
        :raises UnknownAccountError: If no account matches the identifier.
        :raises BadCredentialError: If the password is wrong (stored refresh
            token left untouched).
        :raises TokenIssueError: If issuing or persisting the pair fails.
        """
        if not (dto.identifier or "").strip():
            raise ValidationFailedError("Username or email is required")
        if not dto.password:
            raise ValidationFailedError("Password is required")

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.find_by_username_or_email(dto.identifier)
            if account is None:
                self.emit("session.login_unknown_account", logging.WARNING)
                raise UnknownAccountError("Account", dto.identifier, detail="User does not exist")
            if not account.verify_password(dto.password):
                self.emit("session.login_bad_password", logging.WARNING, account_id=account.id)
                raise BadCredentialError("Incorrect password")

            pair = self._issue_and_store(repo, account)
            out = LoginOut(
                account=AccountOut.from_model(account),
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
            )

        self.emit("session.login", account_id=out.account.id)
        return out

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        End the account's session. Idempotent.

        Clears the stored refresh token and, when the presented access token's
        ``jti`` is known, denylists it until its natural expiry.
        """
        with self.rw_uow() as uow:
            account = uow.accounts.get(dto.account_id)
            if account is not None:
                account.refresh_token = None
                uow.accounts.flush()

        if self.denylist is not None and dto.access_jti and dto.access_expires_at:
            self.denylist.revoke_jti(jti=dto.access_jti, expires_at=dto.access_expires_at)

        self.emit("session.logout", account_id=dto.account_id)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh_session(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange the current refresh token for a brand-new pair.

        The compare-and-replace runs in one read-write unit of work on a
        row-locked account, so two concurrent refreshes with the same token
        cannot both succeed.

        :raises UnauthorizedError: No token supplied, or it is no longer the
            stored one ("Refresh token is expired or used").
        :raises InvalidTokenError: Token fails verification or names an
            unknown account.
        """
        token = (dto.refresh_token or "").strip()
        if not token:
            raise UnauthorizedError("Unauthorized request")

        try:
            account_id = self.tokens.verify(token, "refresh")
        except InvalidTokenError:
            self.emit("session.refresh_rejected", logging.WARNING, reason="invalid")
            raise InvalidTokenError("Invalid refresh token") from None

        if dto.expected_account_id is not None and dto.expected_account_id != account_id:
            raise InvalidTokenError("Invalid refresh token")

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_for_update(account_id)
            if account is None:
                raise InvalidTokenError("Invalid refresh token")
            if account.refresh_token != token:
                self.emit("session.refresh_rejected", logging.WARNING, account_id=account_id, reason="stale")
                raise UnauthorizedError("Refresh token is expired or used")

            pair = self._issue_and_store(repo, account)

        self.emit("session.refresh", account_id=account_id)
        return TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token)

    # ------------------------------------------------------------------ #
    # Password change
    # ------------------------------------------------------------------ #

    def change_password(self, dto: PasswordChangeIn) -> None:
        """
        Replace the password after checking the current one.

        :raises ValidationFailedError: If either password is blank.
        :raises InvalidRequestError: If the new password equals the old one
            (checked before any lookup).
        :raises BadCredentialError: If the old password is wrong.
        """
        if not dto.old_password or not dto.new_password:
            raise ValidationFailedError("Old and new password are required")
        if dto.old_password == dto.new_password:
            raise InvalidRequestError("New password must be different from the old password")

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_or_raise(dto.account_id)
            if not account.verify_password(dto.old_password):
                self.emit("session.password_change_rejected", logging.WARNING, account_id=account.id)
                raise BadCredentialError("Wrong password")
            repo.set_password(account.id, dto.new_password)
            if self.revoke_on_password_change:
                repo.set_refresh_token(account.id, None)

        self.emit("session.password_changed", account_id=dto.account_id)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_and_store(self, repo: AccountRepository, account: Account) -> TokenPair:
        """Issue a pair for ``account`` and persist its refresh token."""
        claims: dict[str, Any] = {
            "username": account.username,
            "email": account.email,
            "full_name": account.full_name,
        }
        try:
            pair = self.tokens.issue(account.id, claims)
            repo.set_refresh_token(account.id, pair.refresh_token)
        except OperationalError:
            raise
        except Exception as exc:
            self.log.error("Token issuance failed", exc_info=True, extra={"account_id": account.id})
            raise TokenIssueError() from exc
        return pair
