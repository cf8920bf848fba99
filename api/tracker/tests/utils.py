"""Shared helpers for service and API tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.security import create_access_token
from tracker.models.activity import Progress, Seen, UserRating
from tracker.models.lists import ListItem, ListPrivacy, UserList
from tracker.models.media import Episode, MediaItem, MediaType, Season
from tracker.models.user import User

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@dataclass(slots=True)
class ShowFixture:
    """A show with its seasons keyed by number and episodes keyed by (season, episode)."""

    item: MediaItem
    seasons: dict[int, Season] = field(default_factory=dict)
    episodes: dict[tuple[int, int], Episode] = field(default_factory=dict)

    @property
    def id(self) -> uuid.UUID:
        return self.item.id


async def add_user(session: AsyncSession, *, prefix: str = "user") -> User:
    suffix = uuid.uuid4().hex[:8]
    user = User(email=f"{prefix}_{suffix}@example.com", display_name=f"{prefix.title()} {suffix}")
    session.add(user)
    await session.flush()
    return user


async def add_list(
    session: AsyncSession,
    user: User,
    *,
    name: str = "Favourites",
    is_watchlist: bool = False,
    privacy: ListPrivacy = ListPrivacy.PRIVATE,
) -> UserList:
    user_list = UserList(user_id=user.id, name=name, is_watchlist=is_watchlist, privacy=privacy)
    session.add(user_list)
    await session.flush()
    return user_list


async def add_movie(
    session: AsyncSession,
    title: str,
    *,
    release_date: date | None = date(2020, 1, 1),
    runtime: int | None = 100,
) -> MediaItem:
    movie = MediaItem(media_type=MediaType.MOVIE, title=title, release_date=release_date, runtime=runtime)
    session.add(movie)
    await session.flush()
    return movie


async def add_show(
    session: AsyncSession,
    title: str,
    episodes: list[tuple[int, int, date | None]],
    *,
    runtime: int | None = 30,
    episode_runtime: int | None = None,
    release_date: date | None = date(2020, 1, 1),
) -> ShowFixture:
    """Create a show with one season per distinct season number; season 0 is special."""
    show = MediaItem(media_type=MediaType.TV, title=title, release_date=release_date, runtime=runtime)
    session.add(show)
    await session.flush()
    fixture = ShowFixture(item=show)
    for season_number in sorted({season for season, _, _ in episodes}):
        season = Season(
            tv_show_id=show.id,
            season_number=season_number,
            title=f"Season {season_number}",
            is_special_season=season_number == 0,
        )
        session.add(season)
        fixture.seasons[season_number] = season
    await session.flush()
    for season_number, episode_number, released in episodes:
        episode = Episode(
            tv_show_id=show.id,
            season_id=fixture.seasons[season_number].id,
            season_number=season_number,
            episode_number=episode_number,
            title=f"S{season_number:02d}E{episode_number:02d}",
            release_date=released,
            runtime=episode_runtime,
            is_special_episode=season_number == 0,
        )
        session.add(episode)
        fixture.episodes[(season_number, episode_number)] = episode
    await session.flush()
    return fixture


async def add_unlinked_episode(
    session: AsyncSession,
    show: ShowFixture,
    season_number: int,
    episode_number: int,
    release_date: date | None,
) -> Episode:
    """Add an episode that only knows its season by number (``season_id`` is NULL)."""
    episode = Episode(
        tv_show_id=show.id,
        season_number=season_number,
        episode_number=episode_number,
        title=f"S{season_number:02d}E{episode_number:02d}",
        release_date=release_date,
        is_special_episode=season_number == 0,
    )
    session.add(episode)
    await session.flush()
    show.episodes[(season_number, episode_number)] = episode
    return episode


async def add_list_item(
    session: AsyncSession,
    user_list: UserList,
    item: MediaItem,
    *,
    season: Season | None = None,
    episode: Episode | None = None,
    added_at: datetime | None = None,
) -> ListItem:
    list_item = ListItem(
        list_id=user_list.id,
        media_item_id=item.id,
        season_id=season.id if season is not None else None,
        episode_id=episode.id if episode is not None else None,
    )
    if added_at is not None:
        list_item.added_at = added_at
    session.add(list_item)
    await session.flush()
    return list_item


async def mark_seen(
    session: AsyncSession,
    user: User,
    item: MediaItem,
    *,
    episode: Episode | None = None,
    seen_at: datetime | None = NOW,
) -> Seen:
    seen = Seen(user_id=user.id, media_item_id=item.id, episode_id=episode.id if episode else None, date=seen_at)
    session.add(seen)
    await session.flush()
    return seen


async def add_rating(
    session: AsyncSession,
    user: User,
    item: MediaItem,
    rating: int,
    *,
    season: Season | None = None,
    episode: Episode | None = None,
) -> UserRating:
    row = UserRating(
        user_id=user.id,
        media_item_id=item.id,
        season_id=season.id if season else None,
        episode_id=episode.id if episode else None,
        rating=rating,
    )
    session.add(row)
    await session.flush()
    return row


async def add_progress(
    session: AsyncSession,
    user: User,
    item: MediaItem,
    progress: float,
    *,
    episode: Episode | None = None,
) -> Progress:
    row = Progress(
        user_id=user.id,
        media_item_id=item.id,
        episode_id=episode.id if episode else None,
        progress=progress,
    )
    session.add(row)
    await session.flush()
    return row


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for a user, as the auth collaborator would issue it."""
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}
