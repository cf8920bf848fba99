"""Total ordering and offset pagination over scoped rows."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

from tracker.core.errors import InvalidPage
from tracker.schema.items import ItemSort, SortBy, SortOrder
from tracker.services.view_assembler import BaseRow

T = TypeVar("T")


@dataclass(frozen=True)
class PageWindow:
    """Offsets for one page of a result set of ``total`` rows."""
    page: int
    items_per_page: int
    total: int

    @property
    def start(self) -> int:
        return self.items_per_page * (self.page - 1)

    @property
    def end(self) -> int:
        return min(self.total, self.items_per_page * self.page)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.items_per_page)


def page_window(page: int, items_per_page: int, total: int) -> PageWindow:
    """Validate a 1-indexed page against the total and return its offsets."""
    if page <= 0:
        raise InvalidPage()
    window = PageWindow(page=page, items_per_page=items_per_page, total=total)
    if window.start > total:
        raise InvalidPage()
    return window


def _title_key(row: BaseRow) -> str:
    return (row.media_item.title or "").casefold()


def _primary_value(row: BaseRow, sort_by: SortBy) -> Any:
    if sort_by == SortBy.RELEASE_DATE:
        return row.media_item.release_date
    if sort_by == SortBy.LISTED_AT:
        return row.listed_at
    return _title_key(row)


def order_rows(
    items: Sequence[T],
    sort: ItemSort,
    *,
    row_of: Callable[[T], BaseRow] = lambda item: item,
) -> list[T]:
    """Sort by the requested key with ties ascending by title, then id.

    The direction applies to the primary key only; rows missing the
    primary value always go last. ``random`` has no stable order.
    """
    if sort.sort_by == SortBy.RANDOM:
        return random.sample(list(items), len(items))

    ordered = sorted(items, key=lambda item: (_title_key(row_of(item)), str(row_of(item).id)))
    present = [item for item in ordered if _primary_value(row_of(item), sort.sort_by) is not None]
    missing = [item for item in ordered if _primary_value(row_of(item), sort.sort_by) is None]
    present.sort(
        key=lambda item: _primary_value(row_of(item), sort.sort_by),
        reverse=sort.sort_order == SortOrder.DESC,
    )
    return present + missing
