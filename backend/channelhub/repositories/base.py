"""Shared persistence helpers for the channelhub repositories.

Repositories stage and flush; the Unit of Work owns commit and rollback.
Lookups and updates go through per-repository whitelists so request data can
never reach columns such as ``password_hash`` or ``refresh_token``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from channelhub.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Persistence-only access to one mapped model.

    Subclasses set ``model`` and override ``_filterable_fields`` /
    ``_updatable_fields`` to open columns for lookups and updates.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared by the enclosing Unit of Work; the
            Flask-scoped session is used when omitted.
        """
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    # ----------------------------- Whitelists --------------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Columns usable in :meth:`find_one` / :meth:`exists`, keyed by name."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Attribute names :meth:`update` may assign."""
        return set()

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
        columns = self._filterable_fields()
        rejected = sorted(set(filters) - set(columns))
        if rejected:
            raise ValueError(f"Fields not filterable on {self.model.__name__}: {rejected}")
        if not filters:
            return stmt
        return stmt.where(and_(*(columns[name] == value for name, value in filters.items())))

    def _by_pk(self, entity_id: Any) -> Select[Any]:
        pk = self._pk_attr()
        if pk is None:
            raise RuntimeError(f"{type(self).__name__} has no single-column primary key.")
        return select(self.model).where(pk == entity_id)

    # ------------------------------- Reads -----------------------------------

    def get(self, entity_id: Any) -> E | None:
        """Entity by primary key, or ``None``."""
        return cast(E | None, self.session.execute(self._by_pk(entity_id)).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Entity by primary key under ``SELECT ... FOR UPDATE``.

        SQLite renders a plain ``SELECT``. ``populate_existing`` overwrites an
        instance already in the identity map with the locked row's state.
        """
        stmt = (
            self._by_pk(entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        stmt = self._where(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        pk = self._pk_attr()
        stmt = self._where(select(pk if pk is not None else self.model), filters)
        return self.session.execute(stmt.limit(1)).first() is not None

    # ------------------------------- Writes ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted attributes and flush.

        Assignment goes through ``setattr`` so model ``@validates`` hooks run
        and may raise ``ValueError``.

        :raises ValueError: If a field is not updatable.
        """
        allowed = self._updatable_fields()
        rejected = sorted(set(fields) - allowed)
        if rejected:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {rejected}")
        for name, value in fields.items():
            setattr(instance, name, value)
        self.flush()
        return instance
