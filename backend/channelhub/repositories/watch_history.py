"""Watch history persistence."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import joinedload

from channelhub.models.video import Video, WatchHistoryEntry
from channelhub.repositories.base import BaseRepository


class WatchHistoryRepository(BaseRepository[WatchHistoryEntry]):
    """Ordered watch history entries with their videos and owners."""

    model = WatchHistoryEntry

    def _pk_attr(self):
        return None

    def list_for(self, account_id: int) -> list[WatchHistoryEntry]:
        """Return the account's history ordered by position, owners eager-loaded."""
        stmt = (
            select(WatchHistoryEntry)
            .where(WatchHistoryEntry.account_id == account_id)
            .options(joinedload(WatchHistoryEntry.video).joinedload(Video.owner))
            .order_by(WatchHistoryEntry.position.asc())
        )
        return list(self.session.execute(stmt).unique().scalars().all())

    def append(self, account_id: int, video_id: int) -> WatchHistoryEntry:
        """Add ``video_id`` at the end of the account's history."""
        last = self.session.execute(
            select(func.max(WatchHistoryEntry.position)).where(
                WatchHistoryEntry.account_id == account_id
            )
        ).scalar()
        entry = WatchHistoryEntry(
            account_id=account_id,
            video_id=video_id,
            position=0 if last is None else int(last) + 1,
        )
        return self.add(entry)
