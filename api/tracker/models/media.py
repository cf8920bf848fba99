"""Media catalog models: items, seasons and episodes."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    and_,
    or_,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker.db.base_class import Base
from tracker.utils.datetime import utcnow

JSON_COMPATIBLE = JSON().with_variant(JSONB, "postgresql")

# Multiplier for the combined season/episode ordering key.
EPISODE_ORDER_MULTIPLIER = 1000


def episode_order_key(season_number: int, episode_number: int) -> int:
    """Return the single integer used to order episodes across seasons."""
    return season_number * EPISODE_ORDER_MULTIPLIER + episode_number


class MediaType(str, enum.Enum):
    """Supported media categories for catalog items."""
    MOVIE = "movie"
    TV = "tv"


class MediaItem(Base):
    """Canonical movie or show record."""
    __tablename__ = "media_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Persist the enum values (lowercase) instead of names (uppercase) so they match the DB enum
    media_type: Mapped[MediaType] = mapped_column(
        Enum(MediaType, name="media_type", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    original_title: Mapped[str | None] = mapped_column(String(500))
    overview: Mapped[str | None] = mapped_column(Text)
    release_date: Mapped[date | None] = mapped_column(Date, index=True)
    runtime: Mapped[int | None] = mapped_column(Integer)
    status: Mapped[str | None] = mapped_column(String(64))
    network: Mapped[str | None] = mapped_column(String(255))
    genres: Mapped[list[str] | None] = mapped_column(JSON_COMPATIBLE)
    tmdb_id: Mapped[int | None] = mapped_column(Integer, index=True)
    imdb_id: Mapped[str | None] = mapped_column(String(32))
    tvdb_id: Mapped[int | None] = mapped_column(Integer)
    trakt_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    seasons: Mapped[list["Season"]] = relationship(
        back_populates="tv_show", cascade="all, delete-orphan", order_by="Season.season_number"
    )
    episodes: Mapped[list["Episode"]] = relationship(
        back_populates="tv_show", cascade="all, delete-orphan", order_by="Episode.season_and_episode_number"
    )


class Season(Base):
    """Season of a show; its release date is the earliest episode release."""
    __tablename__ = "seasons"
    __table_args__ = (UniqueConstraint("tv_show_id", "season_number", name="uq_season_number"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tv_show_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text)
    release_date: Mapped[date | None] = mapped_column(Date)
    is_special_season: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tmdb_id: Mapped[int | None] = mapped_column(Integer)
    tvdb_id: Mapped[int | None] = mapped_column(Integer)
    trakt_id: Mapped[int | None] = mapped_column(Integer)

    tv_show: Mapped[MediaItem] = relationship(back_populates="seasons")
    episodes: Mapped[list["Episode"]] = relationship(
        back_populates="season", order_by="Episode.season_and_episode_number"
    )


class Episode(Base):
    """Single episode; specials are excluded from every aired aggregate."""
    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint("tv_show_id", "season_and_episode_number", name="uq_episode_order"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tv_show_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    season_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("seasons.id", ondelete="SET NULL"), index=True
    )
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    season_and_episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text)
    release_date: Mapped[date | None] = mapped_column(Date, index=True)
    runtime: Mapped[int | None] = mapped_column(Integer)
    is_special_episode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tmdb_id: Mapped[int | None] = mapped_column(Integer)
    imdb_id: Mapped[str | None] = mapped_column(String(32))
    tvdb_id: Mapped[int | None] = mapped_column(Integer)
    trakt_id: Mapped[int | None] = mapped_column(Integer)

    tv_show: Mapped[MediaItem] = relationship(back_populates="episodes")
    season: Mapped[Season | None] = relationship(back_populates="episodes")

    def __init__(self, **kwargs) -> None:
        if "season_and_episode_number" not in kwargs and {"season_number", "episode_number"} <= kwargs.keys():
            kwargs["season_and_episode_number"] = episode_order_key(
                kwargs["season_number"], kwargs["episode_number"]
            )
        super().__init__(**kwargs)


def season_episode_condition(season=Season):
    """Match episodes to ``season``: by ``season_id``, or by show and number when unlinked."""
    return or_(
        Episode.season_id == season.id,
        and_(
            Episode.season_id.is_(None),
            Episode.tv_show_id == season.tv_show_id,
            Episode.season_number == season.season_number,
        ),
    )
