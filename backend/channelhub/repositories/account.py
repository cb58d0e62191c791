"""Account repository: credential store and profile persistence."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, or_, select

from channelhub.models.account import Account
from channelhub.repositories.base import BaseRepository
from channelhub.services._shared.errors import NotFoundError


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    Owns lookups by handle, the stored refresh token and the password
    verifier. It never issues tokens and never commits.
    """

    model = Account

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        return {
            "id": Account.id,
            "email": Account.email,
            "username": Account.username,
        }

    def _updatable_fields(self):
        """Profile fields; password and refresh token have dedicated methods."""
        return {
            "full_name",
            "email",
            "avatar_url",
            "avatar_public_id",
            "cover_image_url",
            "cover_image_public_id",
        }

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_username_or_email(self, identifier: str) -> Account | None:
        """Fetch an account whose username or email equals ``identifier``.

        :param identifier: Username or email; normalized to lower-case.
        :type identifier: str
        :returns: Account instance or ``None`` when not found.
        :rtype: Account | None
        """
        needle = identifier.strip().lower()
        stmt = select(Account).where(or_(Account.username == needle, Account.email == needle))
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def find_by_username(self, username: str) -> Account | None:
        """Fetch an account by its (case-insensitive) username."""
        stmt = select(Account).where(Account.username == username.strip().lower())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def exists_username_or_email(self, username: str, email: str) -> bool:
        """Return ``True`` when either handle is already registered."""
        stmt = select(Account.id).where(
            or_(
                Account.username == username.strip().lower(),
                Account.email == email.strip().lower(),
            )
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def email_taken_by_other(self, email: str, account_id: int) -> bool:
        """Return ``True`` when ``email`` belongs to an account other than ``account_id``."""
        stmt = select(func.count(Account.id)).where(
            Account.email == email.strip().lower(),
            Account.id != account_id,
        )
        return int(self.session.execute(stmt).scalar_one()) > 0

    def get_or_raise(self, account_id: int, *, for_update: bool = False) -> Account:
        """Return the account or raise :class:`NotFoundError`."""
        account = self.get_for_update(account_id) if for_update else self.get(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    # ---------------------------- Session slot ----------------------------

    def set_refresh_token(self, account_id: int, token: str | None) -> Account:
        """Replace (or clear, with ``None``) the stored refresh token.

        :param account_id: Identifier of the account.
        :param token: New refresh token, or ``None`` to end the session.
        :returns: The updated account.
        :raises NotFoundError: If the account does not exist.
        """
        account = self.get_or_raise(account_id)
        account.refresh_token = token
        self.flush()
        return account

    # ---------------------------- Password ops ----------------------------

    def set_password(self, account_id: int, new_password: str) -> Account:
        """Hash and store a new password through the model setter.

        :param account_id: Identifier of the account.
        :param new_password: Raw password; the model handles hashing.
        :raises NotFoundError: If the account does not exist.
        """
        account = self.get_or_raise(account_id)
        account.password = new_password
        self.flush()
        return account
