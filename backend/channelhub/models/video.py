"""Video records and the per-account watch history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from channelhub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .account import Account


class Video(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Uploaded video, reduced to the fields shown in watch history.

    Fields
    ------
    owner_id : int
        Account that published the video.
    title : str
        Display title.
    thumbnail_url : str | None
        Preview image on the media host.
    duration_s : int
        Length in seconds.
    """

    __tablename__ = "videos"
    __repr_fields__ = ("id", "title")

    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    duration_s: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    owner: Mapped[Account] = relationship("Account", back_populates="videos")

    __table_args__ = (
        CheckConstraint("duration_s >= 0", name="duration_non_negative"),
        Index("ix_videos_owner_id", "owner_id"),
    )


class WatchHistoryEntry(ReprMixin, db.Model):
    """One slot of an account's watch history; ``position`` orders the list."""

    __tablename__ = "watch_history"
    __repr_fields__ = ("account_id", "position", "video_id")

    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    video_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )

    account: Mapped[Account] = relationship("Account", back_populates="watch_history")
    video: Mapped[Video] = relationship("Video", lazy="joined")
