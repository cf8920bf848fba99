"""List lookups with visibility rules and list-level runtime totals."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.errors import Forbidden, NotFound
from tracker.models.lists import ListItem, ListPrivacy, UserList
from tracker.models.media import Episode, MediaItem, MediaType, Season, season_episode_condition
from tracker.models.user import User
from tracker.schema.lists import ListDetails, ListOwner


async def get_watchlist_id(session: AsyncSession, user_id: uuid.UUID) -> uuid.UUID | None:
    """Return the id of the user's watchlist, if they have one."""
    result = await session.execute(
        select(UserList.id).where(UserList.user_id == user_id, UserList.is_watchlist.is_(True))
    )
    return result.scalar_one_or_none()


async def get_readable_list(session: AsyncSession, list_id: uuid.UUID, user_id: uuid.UUID) -> UserList:
    """Fetch a list the user may read: their own, or anyone's public list."""
    user_list = await session.get(UserList, list_id)
    if user_list is None:
        raise NotFound("List not found")
    if user_list.user_id != user_id and user_list.privacy != ListPrivacy.PUBLIC:
        raise Forbidden()
    return user_list


async def get_list_details(
    session: AsyncSession,
    list_id: uuid.UUID,
    user_id: uuid.UUID,
    *,
    now: datetime,
) -> ListDetails:
    """Return list header data with the summed runtime of everything on it."""
    user_list = await get_readable_list(session, list_id, user_id)
    owner = await session.get(User, user_list.user_id)
    total_runtime = await list_total_runtime(session, list_id, now=now)
    items_count = await session.scalar(select(func.count(ListItem.id)).where(ListItem.list_id == list_id))
    return ListDetails(
        id=user_list.id,
        name=user_list.name,
        description=user_list.description,
        privacy=user_list.privacy,
        is_watchlist=user_list.is_watchlist,
        created_at=user_list.created_at,
        updated_at=user_list.updated_at,
        items_count=items_count or 0,
        total_runtime=total_runtime,
        owner=ListOwner(id=user_list.user_id, display_name=owner.display_name if owner else None),
    )


async def list_total_runtime(session: AsyncSession, list_id: uuid.UUID, *, now: datetime) -> int:
    """Sum runtime across list items at each item's own granularity.

    Episode items count their own runtime (falling back to the show runtime),
    season and show items count their aired non-special episodes, movies
    count their runtime.
    """
    today = now.date()
    episode_runtime = func.coalesce(Episode.runtime, MediaItem.runtime, 0)
    aired = and_(
        Episode.is_special_episode.is_(False),
        Episode.release_date.is_not(None),
        Episode.release_date <= today,
    )

    direct = await session.execute(
        select(func.sum(episode_runtime))
        .select_from(ListItem)
        .join(Episode, Episode.id == ListItem.episode_id)
        .join(MediaItem, MediaItem.id == Episode.tv_show_id)
        .where(ListItem.list_id == list_id)
    )
    season_sum = await session.execute(
        select(func.sum(episode_runtime))
        .select_from(ListItem)
        .join(Season, Season.id == ListItem.season_id)
        .join(Episode, season_episode_condition())
        .join(MediaItem, MediaItem.id == Episode.tv_show_id)
        .where(ListItem.list_id == list_id, ListItem.episode_id.is_(None), aired)
    )
    show_sum = await session.execute(
        select(
            func.sum(
                case(
                    (MediaItem.media_type == MediaType.TV, episode_runtime),
                    else_=func.coalesce(MediaItem.runtime, 0),
                )
            )
        )
        .select_from(ListItem)
        .join(MediaItem, MediaItem.id == ListItem.media_item_id)
        .outerjoin(Episode, and_(Episode.tv_show_id == MediaItem.id, aired))
        .where(
            ListItem.list_id == list_id,
            ListItem.season_id.is_(None),
            ListItem.episode_id.is_(None),
        )
        .where((MediaItem.media_type != MediaType.TV) | Episode.id.is_not(None))
    )
    return sum(int(value or 0) for value in (direct.scalar(), season_sum.scalar(), show_sum.scalar()))
