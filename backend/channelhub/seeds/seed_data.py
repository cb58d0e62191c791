"""Idempotent demo data: accounts, videos, subscriptions and watch history."""

from __future__ import annotations

import logging
from typing import Any, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from channelhub.models.account import Account
from channelhub.models.subscription import Subscription
from channelhub.models.video import Video, WatchHistoryEntry
from channelhub.repositories.watch_history import WatchHistoryRepository

LOGGER = logging.getLogger(__name__)

DEMO_MEDIA = "https://res.cloudinary.com/demo/image/upload"

ACCOUNT_FIXTURES: list[dict[str, str]] = [
    {
        "username": "alice",
        "email": "alice@example.com",
        "full_name": "Alice Moreau",
        "password": "s3cretPass!",
    },
    {
        "username": "bruno",
        "email": "bruno@example.com",
        "full_name": "Bruno Silva",
        "password": "brunoStream42",
    },
    {
        "username": "chen",
        "email": "chen@example.com",
        "full_name": "Chen Wei",
        "password": "chenVideos2024",
    },
]

VIDEO_FIXTURES: list[dict[str, Any]] = [
    {"owner": "bruno", "title": "Street food tour: Porto", "duration_s": 754},
    {"owner": "bruno", "title": "Ten-minute espresso guide", "duration_s": 611},
    {"owner": "chen", "title": "Mechanical keyboard build", "duration_s": 1322},
]

# (channel, subscriber)
SUBSCRIPTION_FIXTURES: list[tuple[str, str]] = [
    ("bruno", "alice"),
    ("chen", "alice"),
    ("chen", "bruno"),
]

# account -> video titles in watch order
HISTORY_FIXTURES: dict[str, list[str]] = {
    "alice": ["Ten-minute espresso guide", "Mechanical keyboard build"],
    "bruno": ["Mechanical keyboard build"],
}


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    entry["created" if created else "existing"] += 1


def seed_accounts(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create demo accounts with placeholder avatars."""
    if verbose:
        LOGGER.info("Seeding accounts...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        for fixture in ACCOUNT_FIXTURES:
            account = session.execute(
                select(Account).filter_by(username=fixture["username"])
            ).scalar_one_or_none()
            created = account is None
            if account is None:
                account = Account(
                    username=fixture["username"],
                    email=fixture["email"],
                    full_name=fixture["full_name"],
                    avatar_url=f"{DEMO_MEDIA}/avatars/{fixture['username']}.png",
                    avatar_public_id=f"seed/avatars/{fixture['username']}",
                )
                account.password = fixture["password"]
                session.add(account)
            else:
                account.full_name = fixture["full_name"]
            session.flush()
            _touch(summary, "accounts", created)

    return summary


def seed_channels(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create videos, subscription edges and watch history between demo accounts."""
    if verbose:
        LOGGER.info("Seeding videos, subscriptions and watch history...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    history = WatchHistoryRepository(session=session)

    with session.begin():
        accounts = {
            a.username: a
            for a in session.execute(
                select(Account).where(Account.username.in_([f["username"] for f in ACCOUNT_FIXTURES]))
            ).scalars()
        }

        videos: dict[str, Video] = {}
        for fixture in VIDEO_FIXTURES:
            owner = accounts[fixture["owner"]]
            video = session.execute(
                select(Video).filter_by(owner_id=owner.id, title=fixture["title"])
            ).scalar_one_or_none()
            created = video is None
            if video is None:
                video = Video(
                    owner_id=owner.id,
                    title=fixture["title"],
                    duration_s=fixture["duration_s"],
                    thumbnail_url=f"{DEMO_MEDIA}/thumbnails/{len(videos) + 1}.jpg",
                )
                session.add(video)
                session.flush()
            videos[video.title] = video
            _touch(summary, "videos", created)

        for channel_name, subscriber_name in SUBSCRIPTION_FIXTURES:
            channel, subscriber = accounts[channel_name], accounts[subscriber_name]
            existing = session.execute(
                select(Subscription.id).filter_by(channel_id=channel.id, subscriber_id=subscriber.id)
            ).first()
            if existing is None:
                session.add(Subscription(channel_id=channel.id, subscriber_id=subscriber.id))
            _touch(summary, "subscriptions", existing is None)

        for username, titles in HISTORY_FIXTURES.items():
            account = accounts[username]
            count = session.execute(
                select(func.count()).select_from(WatchHistoryEntry).filter_by(account_id=account.id)
            ).scalar_one()
            created = count == 0
            if created:
                for title in titles:
                    history.append(account.id, videos[title].id)
            _touch(summary, "watch_history", created)

    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order."""
    combined: dict[str, dict[str, int]] = {}
    for seeder in (seed_accounts, seed_channels):
        for table, counters in seeder(database, verbose=verbose).items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["seed_accounts", "seed_channels", "run_all"]
