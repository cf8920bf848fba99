"""Request-side schemas for item listings: filters and sort options."""

from __future__ import annotations

import enum

from pydantic import BaseModel

from tracker.models.media import MediaType


class SortBy(str, enum.Enum):
    TITLE = "title"
    RELEASE_DATE = "release_date"
    LISTED_AT = "listed_at"
    RANDOM = "random"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class ItemSort(BaseModel):
    """Primary sort key and direction; ties always fall back to title then id."""
    sort_by: SortBy = SortBy.TITLE
    sort_order: SortOrder = SortOrder.ASC


class ItemFilters(BaseModel):
    """Filters for list and library listings.

    The first group maps onto stored columns and is applied in SQL; the
    watch-state group depends on resolved aggregates and runs afterwards.
    """
    media_type: MediaType | None = None
    only_on_watchlist: bool = False
    only_with_user_rating: bool = False
    only_without_user_rating: bool = False
    only_with_progress: bool = False
    include_unreleased_items: bool = False

    only_seen_items: bool = False
    only_unseen_items: bool = False
    only_with_next_airing: bool = False
    only_with_next_episodes_to_watch: bool = False

    @property
    def needs_resolution(self) -> bool:
        """True when any filter can only be evaluated on assembled views."""
        return any(
            (
                self.only_seen_items,
                self.only_unseen_items,
                self.only_with_next_airing,
                self.only_with_next_episodes_to_watch,
            )
        )
