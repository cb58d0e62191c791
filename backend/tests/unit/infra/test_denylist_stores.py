"""
Unit tests for the access-token denylist adapters.

The Redis adapter runs against fakeredis so the suite stays in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from freezegun import freeze_time

from channelhub.infra.redis.redis_denylist_store import RedisDenylistStore
from channelhub.services._shared.ports import InMemoryDenylistStore


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def redis_store(fake_redis):
    return RedisDenylistStore(r=fake_redis)


class TestRedisDenylistStore:
    def test_revoked_jti_is_reported(self, redis_store):
        redis_store.revoke_jti(jti="jti-1", expires_at=_now() + timedelta(minutes=5))

        assert redis_store.is_revoked("jti-1") is True
        assert redis_store.is_revoked("jti-2") is False

    def test_entry_ttl_follows_token_expiry(self, redis_store, fake_redis):
        redis_store.revoke_jti(jti="jti-ttl", expires_at=_now() + timedelta(seconds=120))

        ttl = fake_redis.ttl(f"{RedisDenylistStore.prefix}jti-ttl")
        assert 0 < ttl <= 120

    def test_already_expired_token_is_not_stored(self, redis_store, fake_redis):
        redis_store.revoke_jti(jti="old", expires_at=_now() - timedelta(seconds=1))

        assert redis_store.is_revoked("old") is False
        assert fake_redis.keys("*") == []

    def test_naive_expiry_is_treated_as_utc(self, redis_store):
        naive = datetime.now(UTC).replace(tzinfo=None) + timedelta(minutes=1)
        redis_store.revoke_jti(jti="naive", expires_at=naive)

        assert redis_store.is_revoked("naive") is True

    def test_revoke_is_idempotent(self, redis_store):
        exp = _now() + timedelta(minutes=1)
        redis_store.revoke_jti(jti="twice", expires_at=exp)
        redis_store.revoke_jti(jti="twice", expires_at=exp)

        assert redis_store.is_revoked("twice") is True


class TestInMemoryDenylistStore:
    def test_revoked_until_expiry(self):
        store = InMemoryDenylistStore()
        with freeze_time("2025-06-01 10:00:00"):
            store.revoke_jti(jti="a", expires_at=_now() + timedelta(minutes=1))
            assert store.is_revoked("a") is True

        with freeze_time("2025-06-01 10:02:00"):
            assert store.is_revoked("a") is False

    def test_unknown_jti_is_not_revoked(self):
        assert InMemoryDenylistStore().is_revoked("missing") is False

    def test_already_expired_token_is_not_stored(self):
        store = InMemoryDenylistStore()

        for n in range(50):
            store.revoke_jti(jti=f"past-{n}", expires_at=_now() - timedelta(seconds=1))

        assert len(store) == 0

    def test_revoke_sweeps_lapsed_entries(self):
        store = InMemoryDenylistStore()
        with freeze_time("2025-06-01 10:00:00"):
            for n in range(20):
                store.revoke_jti(jti=f"short-{n}", expires_at=_now() + timedelta(minutes=1))
            assert len(store) == 20

        with freeze_time("2025-06-01 10:05:00"):
            store.revoke_jti(jti="fresh", expires_at=_now() + timedelta(minutes=1))

            assert len(store) == 1
            assert store.is_revoked("fresh") is True
