"""Per-user view schemas at show, season and episode granularity."""

from __future__ import annotations

from datetime import date, datetime
from typing import Generic, Literal, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tracker.models.media import MediaType
from tracker.schema.base import ORMModel


class UserRatingRead(ORMModel):
    """Rating row at the exact granularity of the view it belongs to."""
    media_item_id: UUID
    season_id: UUID | None = None
    episode_id: UUID | None = None
    rating: int | None = None
    review: str | None = None
    date: datetime | None = None


class ExternalIds(ORMModel):
    """Identifiers in third-party catalogs."""
    tmdb_id: int | None = None
    imdb_id: str | None = None
    tvdb_id: int | None = None
    trakt_id: int | None = None


class EpisodeSummary(ORMModel):
    """Raw episode fields embedded in show and season views."""
    id: UUID
    tv_show_id: UUID
    season_id: UUID | None = None
    season_number: int
    episode_number: int
    season_and_episode_number: int
    title: str | None = None
    description: str | None = None
    release_date: date | None = None
    runtime: int | None = None
    is_special_episode: bool = False
    tmdb_id: int | None = None
    imdb_id: str | None = None
    tvdb_id: int | None = None
    trakt_id: int | None = None


class EpisodeView(EpisodeSummary):
    """Episode with the requesting user's state."""
    seen: bool = False
    last_seen_at: datetime | None = None
    progress: float | None = None
    user_rating: UserRatingRead | None = None
    on_watchlist: bool = False


class SeasonView(ORMModel):
    """Season with its aggregate family scoped to the season."""
    id: UUID
    tv_show_id: UUID
    season_number: int
    title: str | None = None
    description: str | None = None
    release_date: date | None = None
    is_special_season: bool = False
    tmdb_id: int | None = None
    tvdb_id: int | None = None
    trakt_id: int | None = None
    seen: bool = False
    aired_episodes_count: int | None = None
    seen_episodes_count: int = 0
    unseen_episodes_count: int | None = None
    total_runtime: int | None = None
    last_seen_at: datetime | None = None
    user_rating: UserRatingRead | None = None
    on_watchlist: bool = False
    first_unwatched_episode: EpisodeSummary | None = None
    last_aired_episode: EpisodeSummary | None = None
    upcoming_episode: EpisodeSummary | None = None


class ShowView(ORMModel):
    """Movie or show with the requesting user's aggregated state."""
    id: UUID
    media_type: MediaType
    title: str
    original_title: str | None = None
    overview: str | None = None
    release_date: date | None = None
    runtime: int | None = None
    status: str | None = None
    network: str | None = None
    genres: list[str] = Field(default_factory=list)
    tmdb_id: int | None = None
    imdb_id: str | None = None
    tvdb_id: int | None = None
    trakt_id: int | None = None
    seen: bool = False
    progress: float | None = None
    user_rating: UserRatingRead | None = None
    on_watchlist: bool = False
    last_seen_at: datetime | None = None
    total_runtime: int | None = None
    aired_episodes_count: int | None = None
    seen_episodes_count: int | None = None
    unseen_episodes_count: int | None = None
    first_unwatched_episode: EpisodeSummary | None = None
    last_aired_episode: EpisodeSummary | None = None
    upcoming_episode: EpisodeSummary | None = None

    @field_validator("genres", mode="before")
    @classmethod
    def _genres_default(cls, value: list[str] | None) -> list[str]:
        return value or []


class ListItemView(ORMModel):
    """One list membership: the parent item plus at most one nested view."""
    id: UUID
    listed_at: datetime | None = None
    type: Literal["movie", "tv", "season", "episode"]
    media_item: ShowView
    season: SeasonView | None = None
    episode: EpisodeView | None = None


class SeasonDetails(SeasonView):
    """Season view with every episode expanded."""
    episodes: list[EpisodeView] = Field(default_factory=list)


class ItemDetails(ShowView):
    """Fully expanded single item: show view, seasons and episodes."""
    seasons: list[SeasonDetails] = Field(default_factory=list)


ItemT = TypeVar("ItemT")


class Page(BaseModel, Generic[ItemT]):
    """One page of an ordered result set with offset metadata."""
    data: list[ItemT]
    page: int
    total_pages: int
    from_: int = Field(serialization_alias="from")
    to: int
    total: int

    model_config = {"populate_by_name": True}


class CalendarMediaItem(ORMModel):
    """Media item summary on a calendar entry."""
    id: UUID
    title: str
    media_type: MediaType
    release_date: date | None = None
    tmdb_id: int | None = None
    seen: bool | None = None


class CalendarEpisode(ORMModel):
    """Episode summary on a calendar entry."""
    id: UUID
    title: str | None = None
    season_number: int
    episode_number: int
    release_date: date | None = None
    is_special_episode: bool = False
    seen: bool | None = None


class CalendarEntry(ORMModel):
    """One dated row of the calendar timeline."""
    release_date: date
    media_item: CalendarMediaItem
    episode: CalendarEpisode | None = None
