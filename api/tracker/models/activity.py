"""Per-user watch activity: seen events, playback progress and ratings."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base_class import Base
from tracker.utils.datetime import utcnow


class Seen(Base):
    """A user watched a movie/show (no episode) or one episode.

    ``date`` is nullable: the user saw it but does not know when.
    """
    __tablename__ = "seen"
    __table_args__ = (CheckConstraint("duration >= 0", name="duration_nonnegative"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    media_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    episode_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("episodes.id", ondelete="CASCADE"), index=True
    )
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    duration: Mapped[int | None] = mapped_column(Integer)


class Progress(Base):
    """Resumable playback position for a movie/show or one episode."""
    __tablename__ = "progress"
    __table_args__ = (
        UniqueConstraint("user_id", "media_item_id", "episode_id", name="uq_progress_target"),
        CheckConstraint("progress >= 0 AND progress <= 1", name="progress_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    media_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    episode_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("episodes.id", ondelete="CASCADE"))
    progress: Mapped[float] = mapped_column(Float, nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class UserRating(Base):
    """Rating or review of exactly one of a show/movie, season or episode."""
    __tablename__ = "user_ratings"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 10)", name="rating_range"),
        CheckConstraint("season_id IS NULL OR episode_id IS NULL", name="single_target"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    media_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    season_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("seasons.id", ondelete="CASCADE"))
    episode_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("episodes.id", ondelete="CASCADE"))
    rating: Mapped[int | None] = mapped_column(Integer)
    review: Mapped[str | None] = mapped_column(Text)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
