"""Read-side queries over subscription edges."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import exists, func, select

from channelhub.models.subscription import Subscription
from channelhub.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class ChannelStats:
    """
    Subscription aggregates for one channel, as seen by one viewer.

    :param subscribers_count: Edges where the account is the channel.
    :param channels_subscribed_to_count: Edges where the account is the subscriber.
    :param is_subscribed: Whether the viewer has an edge to the channel.
    """

    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


class SubscriptionRepository(BaseRepository[Subscription]):
    """Aggregations over :class:`Subscription`; edges are counted as stored."""

    model = Subscription

    def _filterable_fields(self):
        return {
            "channel_id": Subscription.channel_id,
            "subscriber_id": Subscription.subscriber_id,
        }

    def channel_stats(self, channel_id: int, viewer_id: int | None) -> ChannelStats:
        """Compute all channel aggregates in a single round trip.

        :param channel_id: Account whose profile is viewed.
        :param viewer_id: Authenticated viewer (``None`` yields ``is_subscribed=False``).
        """
        subscribers = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == channel_id)
            .scalar_subquery()
        )
        subscribed_to = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == channel_id)
            .scalar_subquery()
        )
        viewer_edge = exists().where(
            Subscription.channel_id == channel_id,
            Subscription.subscriber_id == viewer_id,
        )
        row = self.session.execute(select(subscribers, subscribed_to, viewer_edge)).one()
        return ChannelStats(
            subscribers_count=int(row[0] or 0),
            channels_subscribed_to_count=int(row[1] or 0),
            is_subscribed=bool(row[2]) if viewer_id is not None else False,
        )
