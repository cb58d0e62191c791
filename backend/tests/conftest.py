"""Shared fixtures: one testing app, one SQLite connection, a SAVEPOINT per test.

Units of Work commit against the per-test SAVEPOINT, so committed rows stay
visible until the test ends and vanish with the outer rollback.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from channelhub.core.config import TestingConfig
from channelhub.core.extensions import MEDIA_HOST_KEY, TOKEN_SERVICE_KEY
from channelhub.core.extensions import db as _db
from channelhub.factory import create_app


@pytest.fixture(scope="session")
def app():
    for var in ("DATABASE_URL", "REDIS_URL"):
        os.environ.pop(var, None)
    application = create_app(TestingConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture(scope="session")
def db(app):
    """Schema created once; the app context stays pushed for the whole run."""
    ctx = app.app_context()
    ctx.push()
    _db.create_all()
    try:
        yield _db
    finally:
        _db.session.remove()
        _db.drop_all()
        ctx.pop()


@pytest.fixture(scope="session")
def connection(db):
    with db.engine.connect() as conn:
        yield conn


@pytest.fixture()
def session(db, connection):
    """Scoped session on ``connection``, installed as ``db.session``.

    Yields
    ------
    sqlalchemy.orm.scoped_session
        Rolled back, together with everything it committed, after the test.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, autoflush=False))
    connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            connection.begin_nested()

    app_session = db.session
    app_session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = app_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _factories_session(session):
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
    SQLAlchemySession.set(None)


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker` for reproducible data."""
    from faker import Faker

    Faker.seed(1337)
    return Faker()


@pytest.fixture()
def client(app):
    """Test client; keeps cookies across requests."""
    return app.test_client()


@pytest.fixture()
def media_host(app):
    return app.extensions[MEDIA_HOST_KEY]


@pytest.fixture()
def token_service(app):
    return app.extensions[TOKEN_SERVICE_KEY]
