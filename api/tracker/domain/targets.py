"""Granularity targets: the show, season or episode a fact or view applies to.

A list item, rating or seen event always names a media item and optionally
a season or an episode. Resolving it into one of these variants up front
means downstream code never has to re-derive the level from null checks.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Union


class Granularity(str, enum.Enum):
    """Level a fact or view applies to."""
    SHOW = "show"
    SEASON = "season"
    EPISODE = "episode"


@dataclass(frozen=True, slots=True)
class ShowTarget:
    """A movie or a whole show."""
    media_item_id: uuid.UUID

    @property
    def granularity(self) -> Granularity:
        return Granularity.SHOW


@dataclass(frozen=True, slots=True)
class SeasonTarget:
    """One season of a show."""
    media_item_id: uuid.UUID
    season_id: uuid.UUID

    @property
    def granularity(self) -> Granularity:
        return Granularity.SEASON


@dataclass(frozen=True, slots=True)
class EpisodeTarget:
    """One episode of a show."""
    media_item_id: uuid.UUID
    episode_id: uuid.UUID

    @property
    def granularity(self) -> Granularity:
        return Granularity.EPISODE


Target = Union[ShowTarget, SeasonTarget, EpisodeTarget]


def resolve_target(
    media_item_id: uuid.UUID,
    season_id: uuid.UUID | None = None,
    episode_id: uuid.UUID | None = None,
) -> Target:
    """Pick the most specific target; episode wins over season over show."""
    if episode_id is not None:
        return EpisodeTarget(media_item_id=media_item_id, episode_id=episode_id)
    if season_id is not None:
        return SeasonTarget(media_item_id=media_item_id, season_id=season_id)
    return ShowTarget(media_item_id=media_item_id)


def split_targets(
    targets: list[Target],
) -> tuple[set[uuid.UUID], set[uuid.UUID], set[uuid.UUID]]:
    """Return the distinct show, season and episode ids referenced by targets."""
    show_ids: set[uuid.UUID] = set()
    season_ids: set[uuid.UUID] = set()
    episode_ids: set[uuid.UUID] = set()
    for target in targets:
        if isinstance(target, EpisodeTarget):
            episode_ids.add(target.episode_id)
        elif isinstance(target, SeasonTarget):
            season_ids.add(target.season_id)
        else:
            show_ids.add(target.media_item_id)
    return show_ids, season_ids, episode_ids
