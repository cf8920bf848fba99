"""Single fully-expanded item: show view, season views and episode views."""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.errors import NotFound
from tracker.db.session import begin_read_snapshot
from tracker.domain.targets import EpisodeTarget, SeasonTarget, ShowTarget
from tracker.models.media import Episode, MediaItem, MediaType, Season
from tracker.schema.views import ItemDetails, SeasonDetails
from tracker.services.aggregate_resolvers import resolve_aggregates
from tracker.services.view_assembler import build_episode_view, build_season_view, build_show_view
from tracker.utils.datetime import utcnow


async def item_details(
    session: AsyncSession,
    user_id: uuid.UUID,
    media_item_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> ItemDetails:
    """Return the item with every season and episode view expanded."""
    now = now or utcnow()
    await begin_read_snapshot(session)
    item = await session.get(MediaItem, media_item_id)
    if item is None:
        raise NotFound("Media item not found")

    seasons: list[Season] = []
    episodes: list[Episode] = []
    if item.media_type == MediaType.TV:
        seasons = list(
            (
                await session.execute(
                    select(Season).where(Season.tv_show_id == item.id).order_by(Season.season_number)
                )
            ).scalars()
        )
        episodes = list(
            (
                await session.execute(
                    select(Episode)
                    .where(Episode.tv_show_id == item.id)
                    .order_by(Episode.season_and_episode_number)
                )
            ).scalars()
        )

    targets = [ShowTarget(item.id)]
    targets.extend(SeasonTarget(item.id, season.id) for season in seasons)
    targets.extend(EpisodeTarget(item.id, episode.id) for episode in episodes)
    tv_show_ids = {item.id} if item.media_type == MediaType.TV else set()
    aggregates = await resolve_aggregates(session, user_id, targets, tv_show_ids=tv_show_ids, now=now)

    # Episodes without a season row are matched to a season by number.
    season_by_number = {season.season_number: season.id for season in seasons}
    episodes_by_season: dict[uuid.UUID, list[Episode]] = defaultdict(list)
    for episode in episodes:
        season_id = episode.season_id or season_by_number.get(episode.season_number)
        if season_id is not None:
            episodes_by_season[season_id].append(episode)

    season_details = []
    for season in seasons:
        season_view = await build_season_view(season, aggregates[SeasonTarget(item.id, season.id)])
        season_details.append(
            SeasonDetails(
                **season_view.model_dump(),
                episodes=[
                    build_episode_view(episode, aggregates[EpisodeTarget(item.id, episode.id)])
                    for episode in episodes_by_season[season.id]
                ],
            )
        )

    show_view = await build_show_view(item, aggregates[ShowTarget(item.id)])
    return ItemDetails(**show_view.model_dump(), seasons=season_details)
