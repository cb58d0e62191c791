"""Tests for the demo seed data and the ``flask seed`` command group."""

from __future__ import annotations

from channelhub.cli.seed import seed_cli
from channelhub.models import Account
from channelhub.repositories.subscription import SubscriptionRepository
from channelhub.seeds import seed_data


def test_run_all_is_idempotent(db, session):
    first = seed_data.run_all(db)
    second = seed_data.run_all(db)

    assert first["accounts"] == {"created": 3, "existing": 0}
    assert first["subscriptions"]["created"] == len(seed_data.SUBSCRIPTION_FIXTURES)
    assert second["accounts"] == {"created": 0, "existing": 3}
    assert all(counters["created"] == 0 for counters in second.values())


def test_seeded_accounts_can_authenticate_and_have_stats(db, session):
    seed_data.run_all(db)

    alice = session.query(Account).filter_by(username="alice").one()
    chen = session.query(Account).filter_by(username="chen").one()
    assert alice.verify_password("s3cretPass!")
    assert alice.avatar_url.startswith("https://")

    stats = SubscriptionRepository().channel_stats(chen.id, alice.id)
    assert stats.subscribers_count == 2
    assert stats.is_subscribed is True


def test_seed_run_command(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(seed_cli, ["run"])

    assert result.exit_code == 0, result.output
    assert "Seed summary:" in result.output
    assert "accounts" in result.output
