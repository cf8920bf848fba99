"""Scoped base-row selection for list and library listings.

Stored-column filters are applied in SQL here. Watch-state filters need
resolved aggregates, so they run on assembled views via
``apply_view_filters``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import and_, exists, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from tracker.models.activity import Progress, Seen, UserRating
from tracker.models.lists import ListItem, UserList
from tracker.models.media import Episode, MediaItem, Season
from tracker.schema.items import ItemFilters
from tracker.schema.views import ListItemView
from tracker.services.view_assembler import BaseRow


@dataclass(frozen=True)
class ListScope:
    """Items on one list."""
    list_id: uuid.UUID


@dataclass(frozen=True)
class LibraryScope:
    """Every item the user has listed, seen, rated or started."""


Scope = Union[ListScope, LibraryScope]


def _target_match(fact, media_item_id, season_id=None, episode_id=None):
    """Match a fact row to a base row at exactly the base row's granularity.

    ``season_id``/``episode_id`` are the base row's columns, or None for
    show-level scopes. Episode wins over season when both are populated.
    """
    fact_season = getattr(fact, "season_id", None)
    show_level = and_(fact.media_item_id == media_item_id, fact.episode_id.is_(None))
    if fact_season is not None:
        show_level = and_(show_level, fact_season.is_(None))
    if episode_id is None:
        return show_level

    episode_level = and_(episode_id.is_not(None), fact.episode_id == episode_id)
    if fact_season is not None:
        season_level = and_(
            episode_id.is_(None),
            season_id.is_not(None),
            fact_season == season_id,
            fact.episode_id.is_(None),
        )
    else:
        season_level = false()
    return or_(
        episode_level,
        season_level,
        and_(episode_id.is_(None), season_id.is_(None), show_level),
    )


def _stored_filters(
    user_id: uuid.UUID,
    filters: ItemFilters,
    *,
    now: datetime,
    media_item_id,
    season_id=None,
    episode_id=None,
) -> list:
    conditions = []
    if filters.media_type is not None:
        conditions.append(MediaItem.media_type == filters.media_type)
    if not filters.include_unreleased_items:
        conditions.append(or_(MediaItem.release_date.is_(None), MediaItem.release_date <= now.date()))
    if filters.only_on_watchlist:
        watchlist_item = aliased(ListItem)
        conditions.append(
            exists()
            .where(
                UserList.id == watchlist_item.list_id,
                UserList.user_id == user_id,
                UserList.is_watchlist.is_(True),
                _target_match(watchlist_item, media_item_id, season_id, episode_id),
            )
        )
    if filters.only_with_user_rating or filters.only_without_user_rating:
        rated = exists().where(
            UserRating.user_id == user_id,
            or_(UserRating.rating.is_not(None), UserRating.review.is_not(None)),
            _target_match(UserRating, media_item_id, season_id, episode_id),
        )
        if filters.only_with_user_rating:
            conditions.append(rated)
        if filters.only_without_user_rating:
            conditions.append(~rated)
    if filters.only_with_progress:
        conditions.append(
            exists().where(
                Progress.user_id == user_id,
                _target_match(Progress, media_item_id, season_id, episode_id),
            )
        )
    return conditions


async def list_base_rows(
    session: AsyncSession,
    user_id: uuid.UUID,
    list_id: uuid.UUID,
    filters: ItemFilters,
    *,
    now: datetime,
) -> list[BaseRow]:
    """One row per list membership, with its season or episode loaded."""
    query = (
        select(ListItem, MediaItem, Season, Episode)
        .select_from(ListItem)
        .join(MediaItem, MediaItem.id == ListItem.media_item_id)
        .outerjoin(Episode, Episode.id == ListItem.episode_id)
        .outerjoin(Season, and_(Season.id == ListItem.season_id, ListItem.episode_id.is_(None)))
        .where(ListItem.list_id == list_id)
        .where(
            *_stored_filters(
                user_id,
                filters,
                now=now,
                media_item_id=ListItem.media_item_id,
                season_id=ListItem.season_id,
                episode_id=ListItem.episode_id,
            )
        )
    )
    result = await session.execute(query)
    return [
        BaseRow(id=list_item.id, media_item=item, season=season, episode=episode, listed_at=list_item.added_at)
        for list_item, item, season, episode in result.all()
    ]


async def library_base_rows(
    session: AsyncSession,
    user_id: uuid.UUID,
    filters: ItemFilters,
    *,
    now: datetime,
) -> list[BaseRow]:
    """One show-level row per item in the user's library.

    ``listed_at`` is the latest time the item was added to any of the
    user's lists, or None when it is only known through activity.
    """
    user_list_items = (
        select(ListItem.media_item_id)
        .join(UserList, UserList.id == ListItem.list_id)
        .where(UserList.user_id == user_id)
    )
    listed_at = (
        select(func.max(ListItem.added_at))
        .select_from(ListItem)
        .join(UserList, UserList.id == ListItem.list_id)
        .where(UserList.user_id == user_id, ListItem.media_item_id == MediaItem.id)
        .correlate(MediaItem)
        .scalar_subquery()
    )
    query = (
        select(MediaItem, listed_at.label("listed_at"))
        .where(
            or_(
                MediaItem.id.in_(user_list_items),
                MediaItem.id.in_(select(Seen.media_item_id).where(Seen.user_id == user_id)),
                MediaItem.id.in_(
                    select(UserRating.media_item_id).where(
                        UserRating.user_id == user_id,
                        or_(UserRating.rating.is_not(None), UserRating.review.is_not(None)),
                    )
                ),
                MediaItem.id.in_(select(Progress.media_item_id).where(Progress.user_id == user_id)),
            )
        )
        .where(*_stored_filters(user_id, filters, now=now, media_item_id=MediaItem.id))
    )
    result = await session.execute(query)
    return [BaseRow(id=item.id, media_item=item, listed_at=added_at) for item, added_at in result.all()]


async def load_base_rows(
    session: AsyncSession,
    user_id: uuid.UUID,
    scope: Scope,
    filters: ItemFilters,
    *,
    now: datetime,
) -> list[BaseRow]:
    """Select the scoped base rows with stored-column filters applied."""
    if isinstance(scope, ListScope):
        return await list_base_rows(session, user_id, scope.list_id, filters, now=now)
    return await library_base_rows(session, user_id, filters, now=now)


def _focus(view: ListItemView):
    """The view at the row's own granularity."""
    return view.episode or view.season or view.media_item


def view_matches(view: ListItemView, filters: ItemFilters) -> bool:
    """Evaluate the watch-state filters against an assembled view."""
    focus = _focus(view)
    if filters.only_seen_items and not focus.seen:
        return False
    if filters.only_unseen_items and focus.seen:
        return False
    if filters.only_with_next_airing and getattr(focus, "upcoming_episode", None) is None:
        return False
    if filters.only_with_next_episodes_to_watch:
        started = (getattr(focus, "seen_episodes_count", None) or 0) > 0
        if not started or getattr(focus, "first_unwatched_episode", None) is None:
            return False
    return True


def apply_view_filters(
    pairs: list[tuple[BaseRow, ListItemView]], filters: ItemFilters
) -> list[tuple[BaseRow, ListItemView]]:
    """Keep the (row, view) pairs whose view passes every watch-state filter."""
    return [(row, view) for row, view in pairs if view_matches(view, filters)]
