"""Unit tests for subscription aggregates and watch history queries."""

import pytest

from channelhub.repositories.subscription import SubscriptionRepository
from channelhub.repositories.watch_history import WatchHistoryRepository
from tests.factories.account import AccountFactory
from tests.factories.subscription import SubscriptionFactory
from tests.factories.video import VideoFactory, WatchHistoryEntryFactory


class TestSubscriptionRepository:
    @pytest.fixture()
    def repo(self):
        return SubscriptionRepository()

    def test_channel_stats_counts_both_directions(self, repo, session):
        channel = AccountFactory()
        fans = [AccountFactory() for _ in range(3)]
        followed = AccountFactory()
        for fan in fans:
            SubscriptionFactory(channel=channel, subscriber=fan)
        SubscriptionFactory(channel=followed, subscriber=channel)
        session.commit()

        stats = repo.channel_stats(channel.id, fans[0].id)

        assert stats.subscribers_count == 3
        assert stats.channels_subscribed_to_count == 1
        assert stats.is_subscribed is True

    def test_duplicate_edges_are_counted(self, repo, session):
        channel = AccountFactory()
        fan = AccountFactory()
        SubscriptionFactory(channel=channel, subscriber=fan)
        SubscriptionFactory(channel=channel, subscriber=fan)
        session.commit()

        assert repo.channel_stats(channel.id, fan.id).subscribers_count == 2

    def test_viewer_without_edge_or_anonymous(self, repo, session):
        channel = AccountFactory()
        stranger = AccountFactory()
        session.commit()

        stats = repo.channel_stats(channel.id, stranger.id)
        assert stats.subscribers_count == 0
        assert stats.channels_subscribed_to_count == 0
        assert stats.is_subscribed is False
        assert repo.channel_stats(channel.id, None).is_subscribed is False


class TestWatchHistoryRepository:
    @pytest.fixture()
    def repo(self):
        return WatchHistoryRepository()

    def test_list_for_returns_entries_in_position_order(self, repo, session):
        viewer = AccountFactory()
        first, second = VideoFactory(title="First"), VideoFactory(title="Second")
        WatchHistoryEntryFactory(account=viewer, video=second, position=1)
        WatchHistoryEntryFactory(account=viewer, video=first, position=0)
        session.commit()

        entries = repo.list_for(viewer.id)

        assert [e.video.title for e in entries] == ["First", "Second"]
        assert entries[0].video.owner.username == first.owner.username

    def test_append_places_video_last(self, repo, session):
        viewer = AccountFactory()
        videos = [VideoFactory() for _ in range(2)]
        session.commit()

        repo.append(viewer.id, videos[0].id)
        repo.append(viewer.id, videos[1].id)
        repo.append(viewer.id, videos[0].id)
        session.commit()

        entries = repo.list_for(viewer.id)
        assert [e.position for e in entries] == [0, 1, 2]
        assert [e.video_id for e in entries] == [videos[0].id, videos[1].id, videos[0].id]

    def test_empty_history(self, repo, session):
        viewer = AccountFactory()
        session.commit()

        assert repo.list_for(viewer.id) == []
