"""Release calendar for the items on a user's watchlist or all of their lists.

Invariants:
- Both bounds are inclusive.
- Detailed mode compares release dates (UTC midnight) against the full
  start/end instants and lists each episode once, however many list items
  reach it.
- Simple mode compares dates only and orders by title, season and episode.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.db.session import begin_read_snapshot
from tracker.domain.targets import EpisodeTarget, SeasonTarget, resolve_target
from tracker.models.activity import Seen
from tracker.models.lists import ListItem, UserList
from tracker.models.media import (
    Episode,
    MediaItem,
    MediaType,
    Season,
    episode_order_key,
    season_episode_condition,
)
from tracker.schema.views import CalendarEntry, CalendarEpisode, CalendarMediaItem
from tracker.services.aggregate_resolvers import seen_episode_ids
from tracker.utils.datetime import date_bounds_for_instants, ensure_aware

logger = logging.getLogger("tracker.services.calendar")


async def _listed_items(
    session: AsyncSession, user_id: uuid.UUID, include_all_lists: bool
) -> list[tuple[ListItem, MediaItem]]:
    query = (
        select(ListItem, MediaItem)
        .select_from(ListItem)
        .join(UserList, UserList.id == ListItem.list_id)
        .join(MediaItem, MediaItem.id == ListItem.media_item_id)
        .where(UserList.user_id == user_id)
        .order_by(ListItem.added_at, ListItem.id)
    )
    if not include_all_lists:
        query = query.where(UserList.is_watchlist.is_(True))
    result = await session.execute(query)
    return [(list_item, item) for list_item, item in result.all()]


def _in_range(value: date | None, first: date, last: date) -> bool:
    return value is not None and first <= value <= last


def _sort_key(entry: CalendarEntry) -> tuple:
    episode = entry.episode
    order_key = -1 if episode is None else episode_order_key(episode.season_number, episode.episode_number)
    return entry.release_date, order_key, entry.media_item.title.casefold(), str(entry.media_item.id)


async def _items_with_seen_events(
    session: AsyncSession, user_id: uuid.UUID, media_item_ids: set[uuid.UUID]
) -> set[uuid.UUID]:
    if not media_item_ids:
        return set()
    result = await session.execute(
        select(Seen.media_item_id).where(Seen.user_id == user_id, Seen.media_item_id.in_(media_item_ids)).distinct()
    )
    return set(result.scalars().all())


async def calendar_items(
    session: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
    *,
    include_all_lists: bool = False,
) -> list[CalendarEntry]:
    """Detailed calendar: every reachable episode once, ordered by date then episode."""
    first, last = date_bounds_for_instants(start, end)
    await begin_read_snapshot(session)
    listed = await _listed_items(session, user_id, include_all_lists)
    if first > last or not listed:
        return []

    show_ids: set[uuid.UUID] = set()
    season_ids: set[uuid.UUID] = set()
    episode_ids: set[uuid.UUID] = set()
    for list_item, item in listed:
        target = resolve_target(list_item.media_item_id, list_item.season_id, list_item.episode_id)
        if isinstance(target, EpisodeTarget):
            episode_ids.add(target.episode_id)
        elif isinstance(target, SeasonTarget):
            season_ids.add(target.season_id)
        elif item.media_type == MediaType.TV:
            show_ids.add(item.id)

    in_range = and_(
        Episode.release_date.is_not(None),
        Episode.release_date >= first,
        Episode.release_date <= last,
    )
    episodes: list[Episode] = []
    if show_ids or episode_ids:
        result = await session.execute(
            select(Episode)
            .where(in_range, or_(Episode.tv_show_id.in_(show_ids), Episode.id.in_(episode_ids)))
            .order_by(Episode.season_and_episode_number)
        )
        episodes = list(result.scalars().all())
    season_rows = []
    if season_ids:
        result = await session.execute(
            select(Season.id, Episode)
            .select_from(Episode)
            .join(Season, season_episode_condition())
            .where(in_range, Season.id.in_(season_ids))
            .order_by(Episode.season_and_episode_number)
        )
        season_rows = result.all()

    by_show: dict[uuid.UUID, list[Episode]] = {}
    by_season: dict[uuid.UUID, list[Episode]] = {}
    by_id: dict[uuid.UUID, Episode] = {}
    for episode in episodes:
        by_show.setdefault(episode.tv_show_id, []).append(episode)
        by_id[episode.id] = episode
    for season_id, episode in season_rows:
        by_season.setdefault(season_id, []).append(episode)
        by_id[episode.id] = episode

    seen_episodes = await seen_episode_ids(session, user_id, set(by_id))
    show_level_ids = {
        item.id for list_item, item in listed if list_item.season_id is None and list_item.episode_id is None
    }
    seen_items = await _items_with_seen_events(session, user_id, show_level_ids)

    entries: list[CalendarEntry] = []
    emitted_episodes: set[uuid.UUID] = set()
    emitted_items: set[uuid.UUID] = set()
    for list_item, item in listed:
        target = resolve_target(list_item.media_item_id, list_item.season_id, list_item.episode_id)
        media_item = CalendarMediaItem(
            id=item.id,
            title=item.title,
            media_type=item.media_type,
            release_date=item.release_date,
            tmdb_id=item.tmdb_id,
            seen=item.id in seen_items if item.id in show_level_ids else False,
        )
        if isinstance(target, EpisodeTarget):
            reachable = [by_id[target.episode_id]] if target.episode_id in by_id else []
        elif isinstance(target, SeasonTarget):
            reachable = by_season.get(target.season_id, [])
        elif item.media_type == MediaType.TV:
            reachable = by_show.get(item.id, [])
        else:
            if _in_range(item.release_date, first, last) and item.id not in emitted_items:
                emitted_items.add(item.id)
                entries.append(CalendarEntry(release_date=item.release_date, media_item=media_item))
            continue

        for episode in reachable:
            if episode.id in emitted_episodes:
                continue
            emitted_episodes.add(episode.id)
            entries.append(
                CalendarEntry(
                    release_date=episode.release_date,
                    media_item=media_item,
                    episode=CalendarEpisode(
                        id=episode.id,
                        title=episode.title,
                        season_number=episode.season_number,
                        episode_number=episode.episode_number,
                        release_date=episode.release_date,
                        is_special_episode=episode.is_special_episode,
                        seen=episode.id in seen_episodes,
                    ),
                )
            )

    entries.sort(key=_sort_key)
    logger.debug("Calendar for user %s between %s and %s: %s entries", user_id, first, last, len(entries))
    return entries


async def simple_calendar_items(
    session: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
    *,
    include_all_lists: bool = False,
) -> list[CalendarEntry]:
    """Simple calendar: date-only bounds, every listed show's episodes, ordered by title."""
    first = ensure_aware(start).date()
    last = ensure_aware(end).date()
    await begin_read_snapshot(session)
    listed = await _listed_items(session, user_id, include_all_lists)
    items: dict[uuid.UUID, MediaItem] = {}
    for _, item in listed:
        items.setdefault(item.id, item)
    if first > last or not items:
        return []

    tv_ids = {item_id for item_id, item in items.items() if item.media_type == MediaType.TV}
    episodes: list[Episode] = []
    if tv_ids:
        result = await session.execute(
            select(Episode).where(
                Episode.tv_show_id.in_(tv_ids),
                Episode.release_date.is_not(None),
                Episode.release_date >= first,
                Episode.release_date <= last,
            )
        )
        episodes = list(result.scalars().all())

    entries: list[CalendarEntry] = []
    for item in items.values():
        if item.media_type != MediaType.TV and _in_range(item.release_date, first, last):
            entries.append(
                CalendarEntry(release_date=item.release_date, media_item=CalendarMediaItem.model_validate(item))
            )
    for episode in episodes:
        item = items[episode.tv_show_id]
        entries.append(
            CalendarEntry(
                release_date=episode.release_date,
                media_item=CalendarMediaItem.model_validate(item),
                episode=CalendarEpisode.model_validate(episode),
            )
        )

    entries.sort(
        key=lambda entry: (
            entry.media_item.title.casefold(),
            str(entry.media_item.id),
            entry.episode.season_number if entry.episode else -1,
            entry.episode.episode_number if entry.episode else -1,
        )
    )
    return entries


async def calendar(
    session: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
    *,
    include_all_lists: bool = False,
    simple: bool = False,
) -> list[CalendarEntry]:
    """Dispatch to the detailed or simple calendar."""
    if simple:
        return await simple_calendar_items(session, user_id, start, end, include_all_lists=include_all_lists)
    return await calendar_items(session, user_id, start, end, include_all_lists=include_all_lists)
