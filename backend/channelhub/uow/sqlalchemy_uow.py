"""Units of Work over the Flask-scoped SQLAlchemy session."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from channelhub.core.extensions import db
from channelhub.repositories import (
    AccountRepository,
    SubscriptionRepository,
    WatchHistoryRepository,
)
from channelhub.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

_MUTATING_VERBS = frozenset(
    {"insert", "update", "delete", "merge", "alter", "drop", "truncate", "create", "replace"}
)


class _Repositories:
    """Repositories bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.accounts = AccountRepository(session=session)
        self.subscriptions = SubscriptionRepository(session=session)
        self.watch_history = WatchHistoryRepository(session=session)


class _WriteGuard:
    """Event hooks that make a session and its connection refuse writes."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._bind: Any = None

    def _on_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes).")

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        verb = (statement or "").lstrip().split(None, 1)
        if verb and verb[0].lower() in _MUTATING_VERBS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb[0].upper()}")

    def arm(self, bind: Any) -> None:
        self._bind = bind
        event.listen(self.session, "before_flush", self._on_flush)
        event.listen(bind, "before_cursor_execute", self._on_execute)

    def disarm(self) -> None:
        if self._bind is None:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._on_flush)
        with suppress(InvalidRequestError):
            event.remove(self._bind, "before_cursor_execute", self._on_execute)
        self._bind = None


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """Read-write scope: commit on clean exit, roll back on error.

    Repositories only flush, so this is the one place a transaction commits.
    """

    def __init__(self) -> None:
        super().__init__(db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-only scope over the same session.

    Writes are refused at two levels for every dialect: an ORM flush with
    pending changes, and raw DML reaching the cursor. On PostgreSQL and MySQL
    the transaction is also marked ``READ ONLY`` when this scope opened it.
    The scope always rolls back on exit.

    Parameters
    ----------
    isolation_level:
        ``SET TRANSACTION ISOLATION LEVEL`` value, or ``None`` to skip it.
    enforce_db_readonly:
        Emit ``SET TRANSACTION READ ONLY`` where supported.
    """

    transaction_directive_dialects = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._guard = _WriteGuard(self.session)
        self._owned_txn: SessionTransaction | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # A running transaction (request autobegin or a test SAVEPOINT) is
        # joined as-is; directives only apply to a transaction opened here.
        try:
            self._owned_txn = self.session.begin()
        except InvalidRequestError:
            self._owned_txn = None

        conn = self.session.connection()
        self._guard.arm(conn)
        if self._owned_txn is not None and conn.dialect.name in self.transaction_directive_dialects:
            self._set_transaction_characteristics()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned_txn is not None:
                self._owned_txn.rollback()
        finally:
            self._owned_txn = None
            self._guard.disarm()

    def commit(self) -> None:
        """:raises RuntimeError: always; this scope never writes."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _set_transaction_characteristics(self) -> None:
        statements = []
        if self.isolation_level:
            statements.append(f"SET TRANSACTION ISOLATION LEVEL {self.isolation_level.strip().upper()}")
        if self.enforce_db_readonly:
            statements.append("SET TRANSACTION READ ONLY")
        try:
            for sql in statements:
                self.session.execute(text(sql))
        except SQLAlchemyError as exc:
            logger.warning("transaction directives rejected, relying on guards: %s", exc)
