"""Batched per-target aggregates over the fact store.

Every aggregate kind is one grouped query over the whole batch of target
ids, so resolving a page of N items costs a fixed number of round trips
rather than N. All date logic is relative to an explicit ``now``.

Invariants:
- Aired means non-special with a release date on or before ``now``'s date;
  upcoming means non-special with a release date after it.
- Seen counts are distinct episodes, never seen events.
- Ratings, progress and watchlist membership only match at the exact
  granularity of the target (no parent/child inheritance).
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.domain.targets import (
    EpisodeTarget,
    Granularity,
    SeasonTarget,
    ShowTarget,
    Target,
    resolve_target,
    split_targets,
)
from tracker.models.activity import Progress, Seen, UserRating
from tracker.models.lists import ListItem
from tracker.models.media import Episode, MediaItem, Season, season_episode_condition
from tracker.services.list_service import get_watchlist_id


@dataclass
class TargetAggregates:
    """Resolved aggregate family for one target."""
    aired_episodes_count: int | None = None
    seen_episodes_count: int | None = None
    total_runtime: int | None = None
    first_unwatched_episode: Episode | None = None
    last_aired_episode: Episode | None = None
    upcoming_episode: Episode | None = None
    last_seen_at: datetime | None = None
    has_seen_event: bool = False
    progress: Progress | None = None
    user_rating: UserRating | None = None
    on_watchlist: bool = False


def _scope_column(scope: Granularity):
    if scope == Granularity.SEASON:
        return Season.id
    return Episode.tv_show_id


def _scoped(query, scope: Granularity):
    """Join seasons for season scope; unlinked episodes match their season by number."""
    if scope == Granularity.SEASON:
        return query.join(Season, season_episode_condition())
    return query


def aired_condition(now: datetime):
    """SQL predicate for aired, non-special episodes."""
    return and_(
        Episode.is_special_episode.is_(False),
        Episode.release_date.is_not(None),
        Episode.release_date <= now.date(),
    )


def upcoming_condition(now: datetime):
    """SQL predicate for non-special episodes releasing after today."""
    return and_(
        Episode.is_special_episode.is_(False),
        Episode.release_date.is_not(None),
        Episode.release_date > now.date(),
    )


async def aired_episode_counts(
    session: AsyncSession, scope: Granularity, ids: set[uuid.UUID], *, now: datetime
) -> dict[uuid.UUID, int]:
    """Count aired, non-special episodes per show or season."""
    if not ids:
        return {}
    column = _scope_column(scope)
    query = _scoped(select(column, func.count(Episode.id)).select_from(Episode), scope)
    result = await session.execute(query.where(column.in_(ids), aired_condition(now)).group_by(column))
    return {row[0]: int(row[1]) for row in result.all()}


async def seen_episode_counts(
    session: AsyncSession,
    user_id: uuid.UUID,
    scope: Granularity,
    ids: set[uuid.UUID],
    *,
    now: datetime,
) -> dict[uuid.UUID, int]:
    """Count distinct aired, non-special episodes the user has seen."""
    if not ids:
        return {}
    column = _scope_column(scope)
    query = _scoped(
        select(column, func.count(Episode.id.distinct()))
        .select_from(Episode)
        .join(Seen, and_(Seen.episode_id == Episode.id, Seen.user_id == user_id)),
        scope,
    )
    result = await session.execute(query.where(column.in_(ids), aired_condition(now)).group_by(column))
    return {row[0]: int(row[1]) for row in result.all()}


async def total_runtimes(
    session: AsyncSession, scope: Granularity, ids: set[uuid.UUID], *, now: datetime
) -> dict[uuid.UUID, int]:
    """Sum aired episode runtimes, falling back to the show's flat runtime."""
    if not ids:
        return {}
    column = _scope_column(scope)
    query = _scoped(
        select(column, func.sum(func.coalesce(Episode.runtime, MediaItem.runtime)))
        .select_from(Episode)
        .join(MediaItem, MediaItem.id == Episode.tv_show_id),
        scope,
    )
    result = await session.execute(query.where(column.in_(ids), aired_condition(now)).group_by(column))
    return {row[0]: int(row[1]) for row in result.all() if row[1] is not None}


def _unseen_by_user(user_id: uuid.UUID):
    return ~exists().where(Seen.episode_id == Episode.id, Seen.user_id == user_id)


async def _episode_keys(
    session: AsyncSession,
    scope: Granularity,
    ids: set[uuid.UUID],
    *,
    condition,
    pick_max: bool = False,
) -> dict[uuid.UUID, int]:
    column = _scope_column(scope)
    aggregate = func.max if pick_max else func.min
    query = _scoped(select(column, aggregate(Episode.season_and_episode_number)).select_from(Episode), scope)
    result = await session.execute(query.where(column.in_(ids), condition).group_by(column))
    return {row[0]: int(row[1]) for row in result.all() if row[1] is not None}


async def _episodes_for_keys(
    session: AsyncSession, scope: Granularity, keys: dict[uuid.UUID, int]
) -> dict[uuid.UUID, Episode]:
    """Load the episodes identified by (scope id, ordering key) pairs in one query."""
    if not keys:
        return {}
    column = _scope_column(scope)
    query = _scoped(select(column, Episode).select_from(Episode), scope)
    result = await session.execute(
        query.where(
            column.in_(list(keys)),
            Episode.season_and_episode_number.in_(set(keys.values())),
        )
    )
    episodes: dict[uuid.UUID, Episode] = {}
    for scope_id, episode in result.all():
        if keys.get(scope_id) == episode.season_and_episode_number:
            episodes[scope_id] = episode
    return episodes


async def first_unwatched_episodes(
    session: AsyncSession,
    user_id: uuid.UUID,
    scope: Granularity,
    ids: set[uuid.UUID],
    *,
    now: datetime,
) -> dict[uuid.UUID, Episode]:
    """Lowest-ordered aired, non-special episode the user has not seen."""
    if not ids:
        return {}
    keys = await _episode_keys(
        session, scope, ids, condition=and_(aired_condition(now), _unseen_by_user(user_id))
    )
    return await _episodes_for_keys(session, scope, keys)


async def last_aired_episodes(
    session: AsyncSession, scope: Granularity, ids: set[uuid.UUID], *, now: datetime
) -> dict[uuid.UUID, Episode]:
    """Highest-ordered aired, non-special episode."""
    if not ids:
        return {}
    keys = await _episode_keys(session, scope, ids, condition=aired_condition(now), pick_max=True)
    return await _episodes_for_keys(session, scope, keys)


async def upcoming_episodes(
    session: AsyncSession, scope: Granularity, ids: set[uuid.UUID], *, now: datetime
) -> dict[uuid.UUID, Episode]:
    """Lowest-ordered non-special episode that has not aired yet."""
    if not ids:
        return {}
    keys = await _episode_keys(session, scope, ids, condition=upcoming_condition(now))
    return await _episodes_for_keys(session, scope, keys)


async def last_seen_dates(
    session: AsyncSession, user_id: uuid.UUID, scope: Granularity, ids: set[uuid.UUID]
) -> dict[uuid.UUID, datetime]:
    """Most recent seen timestamp within each show, season or episode."""
    if not ids:
        return {}
    if scope == Granularity.SHOW:
        column = Seen.media_item_id
        query = select(column, func.max(Seen.date))
    elif scope == Granularity.SEASON:
        column = Season.id
        query = (
            select(column, func.max(Seen.date))
            .select_from(Seen)
            .join(Episode, Episode.id == Seen.episode_id)
            .join(Season, season_episode_condition())
        )
    else:
        column = Seen.episode_id
        query = select(column, func.max(Seen.date))
    result = await session.execute(
        query.where(Seen.user_id == user_id, column.in_(ids)).group_by(column)
    )
    return {row[0]: row[1] for row in result.all() if row[1] is not None}


async def seen_media_item_ids(
    session: AsyncSession, user_id: uuid.UUID, media_item_ids: set[uuid.UUID]
) -> set[uuid.UUID]:
    """Items with at least one item-level (episode-less) seen event."""
    if not media_item_ids:
        return set()
    result = await session.execute(
        select(Seen.media_item_id)
        .where(
            Seen.user_id == user_id,
            Seen.media_item_id.in_(media_item_ids),
            Seen.episode_id.is_(None),
        )
        .distinct()
    )
    return set(result.scalars().all())


async def seen_episode_ids(
    session: AsyncSession, user_id: uuid.UUID, episode_ids: set[uuid.UUID]
) -> set[uuid.UUID]:
    """Episodes with at least one seen event."""
    if not episode_ids:
        return set()
    result = await session.execute(
        select(Seen.episode_id).where(Seen.user_id == user_id, Seen.episode_id.in_(episode_ids)).distinct()
    )
    return set(result.scalars().all())


async def watchlist_targets(
    session: AsyncSession, user_id: uuid.UUID, media_item_ids: set[uuid.UUID]
) -> set[Target]:
    """Targets present on the user's watchlist, keyed at their own granularity."""
    if not media_item_ids:
        return set()
    watchlist_id = await get_watchlist_id(session, user_id)
    if watchlist_id is None:
        return set()
    result = await session.execute(
        select(ListItem.media_item_id, ListItem.season_id, ListItem.episode_id).where(
            ListItem.list_id == watchlist_id,
            ListItem.media_item_id.in_(media_item_ids),
        )
    )
    return {resolve_target(*row) for row in result.all()}


async def user_ratings(
    session: AsyncSession, user_id: uuid.UUID, media_item_ids: set[uuid.UUID]
) -> dict[Target, UserRating]:
    """Ratings (or reviews) keyed by their exact target."""
    if not media_item_ids:
        return {}
    result = await session.execute(
        select(UserRating)
        .where(
            UserRating.user_id == user_id,
            UserRating.media_item_id.in_(media_item_ids),
            or_(UserRating.rating.is_not(None), UserRating.review.is_not(None)),
        )
        .order_by(UserRating.date.asc().nulls_first(), UserRating.id)
    )
    ratings: dict[Target, UserRating] = {}
    for rating in result.scalars().all():
        # Later rows overwrite earlier ones: the latest dated rating wins over undated ones.
        ratings[resolve_target(rating.media_item_id, rating.season_id, rating.episode_id)] = rating
    return ratings


async def progress_rows(
    session: AsyncSession, user_id: uuid.UUID, media_item_ids: set[uuid.UUID]
) -> dict[Target, Progress]:
    """Playback progress keyed by item-level or episode-level target."""
    if not media_item_ids:
        return {}
    result = await session.execute(
        select(Progress).where(Progress.user_id == user_id, Progress.media_item_id.in_(media_item_ids))
    )
    return {
        resolve_target(progress.media_item_id, None, progress.episode_id): progress
        for progress in result.scalars().all()
    }


async def resolve_aggregates(
    session: AsyncSession,
    user_id: uuid.UUID,
    targets: Iterable[Target],
    *,
    tv_show_ids: set[uuid.UUID],
    now: datetime,
) -> dict[Target, TargetAggregates]:
    """Resolve the full aggregate family for a batch of mixed-granularity targets.

    ``tv_show_ids`` marks which show targets are TV shows; the remaining show
    targets are leaves (movies) whose seen state comes from item-level events.
    """
    targets = list(dict.fromkeys(targets))
    if not targets:
        return {}
    show_ids, season_ids, episode_ids = split_targets(targets)
    shows = show_ids & tv_show_ids
    movies = show_ids - tv_show_ids
    media_item_ids = {target.media_item_id for target in targets}

    aired = defaultdict(dict)
    seen_counts = defaultdict(dict)
    runtimes = defaultdict(dict)
    first_unwatched = defaultdict(dict)
    last_aired = defaultdict(dict)
    upcoming = defaultdict(dict)
    for scope, ids in ((Granularity.SHOW, shows), (Granularity.SEASON, season_ids)):
        aired[scope] = await aired_episode_counts(session, scope, ids, now=now)
        seen_counts[scope] = await seen_episode_counts(session, user_id, scope, ids, now=now)
        runtimes[scope] = await total_runtimes(session, scope, ids, now=now)
        first_unwatched[scope] = await first_unwatched_episodes(session, user_id, scope, ids, now=now)
        last_aired[scope] = await last_aired_episodes(session, scope, ids, now=now)
        upcoming[scope] = await upcoming_episodes(session, scope, ids, now=now)

    last_seen = {
        Granularity.SHOW: await last_seen_dates(session, user_id, Granularity.SHOW, show_ids),
        Granularity.SEASON: await last_seen_dates(session, user_id, Granularity.SEASON, season_ids),
        Granularity.EPISODE: await last_seen_dates(session, user_id, Granularity.EPISODE, episode_ids),
    }
    seen_movies = await seen_media_item_ids(session, user_id, movies)
    seen_episodes = await seen_episode_ids(session, user_id, episode_ids)
    on_watchlist = await watchlist_targets(session, user_id, media_item_ids)
    ratings = await user_ratings(session, user_id, media_item_ids)
    progress = await progress_rows(session, user_id, media_item_ids)

    resolved: dict[Target, TargetAggregates] = {}
    for target in targets:
        aggregates = TargetAggregates(
            user_rating=ratings.get(target),
            on_watchlist=target in on_watchlist,
        )
        if isinstance(target, EpisodeTarget):
            aggregates.last_seen_at = last_seen[Granularity.EPISODE].get(target.episode_id)
            aggregates.has_seen_event = target.episode_id in seen_episodes
            aggregates.progress = progress.get(target)
        else:
            if isinstance(target, SeasonTarget):
                scope, scope_id = Granularity.SEASON, target.season_id
            else:
                scope, scope_id = Granularity.SHOW, target.media_item_id
                aggregates.progress = progress.get(ShowTarget(target.media_item_id))
            aggregates.last_seen_at = last_seen[scope].get(scope_id)
            if scope == Granularity.SEASON or scope_id in shows:
                aggregates.aired_episodes_count = aired[scope].get(scope_id)
                aggregates.seen_episodes_count = seen_counts[scope].get(scope_id, 0)
                aggregates.total_runtime = runtimes[scope].get(scope_id)
                aggregates.first_unwatched_episode = first_unwatched[scope].get(scope_id)
                aggregates.last_aired_episode = last_aired[scope].get(scope_id)
                aggregates.upcoming_episode = upcoming[scope].get(scope_id)
            else:
                aggregates.has_seen_event = scope_id in seen_movies
        resolved[target] = aggregates
    return resolved
