"""Nest resolved aggregates into show, season and episode views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tracker.domain.targets import EpisodeTarget, SeasonTarget, ShowTarget, Target, resolve_target
from tracker.models.media import Episode, MediaItem, MediaType, Season
from tracker.schema.views import (
    EpisodeSummary,
    EpisodeView,
    ListItemView,
    SeasonView,
    ShowView,
    UserRatingRead,
)
from tracker.services.aggregate_monitor import InconsistentAggregate, aggregate_monitor
from tracker.services.aggregate_resolvers import TargetAggregates


@dataclass
class BaseRow:
    """One row of a scoped result set before aggregation.

    ``season`` and ``episode`` are only populated for list memberships at
    that granularity; library rows are always show level.
    """
    id: Any
    media_item: MediaItem
    season: Season | None = None
    episode: Episode | None = None
    listed_at: datetime | None = None

    @property
    def target(self) -> Target:
        return resolve_target(
            self.media_item.id,
            self.season.id if self.season is not None else None,
            self.episode.id if self.episode is not None else None,
        )

    @property
    def show_target(self) -> ShowTarget:
        return ShowTarget(self.media_item.id)


def _summary(episode: Episode | None) -> EpisodeSummary | None:
    if episode is None:
        return None
    return EpisodeSummary.model_validate(episode)


def _rating(aggregates: TargetAggregates) -> UserRatingRead | None:
    if aggregates.user_rating is None:
        return None
    return UserRatingRead.model_validate(aggregates.user_rating)


async def clamp_episode_counts(
    aired: int | None,
    seen: int | None,
    *,
    target: str,
    target_id: Any,
) -> tuple[int, int | None]:
    """Return ``(seen, unseen)`` with ``seen <= aired`` enforced.

    ``unseen`` is ``None`` when the aired count is unknown or zero. A
    negative unseen count is clamped to zero and recorded, never raised.
    """
    aired_count = aired or 0
    seen_count = seen or 0
    if seen_count > aired_count:
        await aggregate_monitor.record(
            InconsistentAggregate(
                kind="negative_unseen_episodes_count",
                target=target,
                target_id=str(target_id),
                observed=aired_count - seen_count,
                clamped_to=0,
            ),
            context={"aired_episodes_count": aired_count, "seen_episodes_count": seen_count},
        )
        seen_count = aired_count
    if not aired:
        return seen_count, None
    return seen_count, aired_count - seen_count


def build_episode_view(episode: Episode, aggregates: TargetAggregates) -> EpisodeView:
    """Raw episode fields plus the user's state on exactly this episode."""
    view = EpisodeView.model_validate(episode)
    view.last_seen_at = aggregates.last_seen_at
    view.seen = aggregates.last_seen_at is not None or aggregates.has_seen_event
    view.progress = aggregates.progress.progress if aggregates.progress is not None else None
    view.user_rating = _rating(aggregates)
    view.on_watchlist = aggregates.on_watchlist
    return view


async def build_season_view(season: Season, aggregates: TargetAggregates) -> SeasonView:
    """Season fields plus the aggregate family scoped to its episodes."""
    seen_count, unseen_count = await clamp_episode_counts(
        aggregates.aired_episodes_count,
        aggregates.seen_episodes_count,
        target="season",
        target_id=season.id,
    )
    view = SeasonView.model_validate(season)
    view.aired_episodes_count = aggregates.aired_episodes_count
    view.seen_episodes_count = seen_count
    view.unseen_episodes_count = unseen_count
    view.seen = (aggregates.aired_episodes_count or 0) - seen_count == 0
    view.total_runtime = aggregates.total_runtime
    view.last_seen_at = aggregates.last_seen_at
    view.user_rating = _rating(aggregates)
    view.on_watchlist = aggregates.on_watchlist
    view.first_unwatched_episode = _summary(aggregates.first_unwatched_episode)
    view.last_aired_episode = _summary(aggregates.last_aired_episode)
    view.upcoming_episode = _summary(aggregates.upcoming_episode)
    return view


async def build_show_view(item: MediaItem, aggregates: TargetAggregates) -> ShowView:
    """Movie or show fields plus the user's aggregated state.

    Movies are leaves: seen comes from item-level seen events and total
    runtime is the movie's own runtime.
    """
    view = ShowView.model_validate(item)
    view.progress = aggregates.progress.progress if aggregates.progress is not None else None
    view.user_rating = _rating(aggregates)
    view.on_watchlist = aggregates.on_watchlist
    view.last_seen_at = aggregates.last_seen_at
    if item.media_type != MediaType.TV:
        view.seen = aggregates.has_seen_event
        view.total_runtime = item.runtime
        return view

    seen_count, unseen_count = await clamp_episode_counts(
        aggregates.aired_episodes_count,
        aggregates.seen_episodes_count,
        target="show",
        target_id=item.id,
    )
    view.aired_episodes_count = aggregates.aired_episodes_count
    view.seen_episodes_count = seen_count
    view.unseen_episodes_count = unseen_count
    view.seen = (aggregates.aired_episodes_count or 0) - seen_count == 0
    view.total_runtime = aggregates.total_runtime
    view.first_unwatched_episode = _summary(aggregates.first_unwatched_episode)
    view.last_aired_episode = _summary(aggregates.last_aired_episode)
    view.upcoming_episode = _summary(aggregates.upcoming_episode)
    return view


async def build_list_item_view(row: BaseRow, aggregates: dict[Target, TargetAggregates]) -> ListItemView:
    """Parent item view plus exactly one nested view at the row's granularity."""
    media_item = await build_show_view(row.media_item, aggregates[row.show_target])
    target = row.target
    season_view = None
    episode_view = None
    if isinstance(target, EpisodeTarget):
        episode_view = build_episode_view(row.episode, aggregates[target])
        kind = "episode"
    elif isinstance(target, SeasonTarget):
        season_view = await build_season_view(row.season, aggregates[target])
        kind = "season"
    else:
        kind = row.media_item.media_type.value
    return ListItemView(
        id=row.id,
        listed_at=row.listed_at,
        type=kind,
        media_item=media_item,
        season=season_view,
        episode=episode_view,
    )
