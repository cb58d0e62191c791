"""factory_boy models bound to the per-test transactional session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Slot filled by the autouse ``_factories_session`` fixture."""

    current = None

    @classmethod
    def set(cls, session) -> None:
        cls.current = session

    @classmethod
    def get(cls):
        if cls.current is None:
            raise RuntimeError("No test session registered; request the 'session' fixture.")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Rows are flushed, never committed; the test rollback discards them."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
