"""Sort keys, tie-breaking and page windows."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest

from tracker.core.errors import InvalidPage
from tracker.models.media import MediaItem, MediaType
from tracker.schema.items import ItemSort, SortBy, SortOrder
from tracker.services.ordering import order_rows, page_window
from tracker.services.view_assembler import BaseRow


def _row(title: str, *, release_date: date | None = None, listed_at: datetime | None = None) -> BaseRow:
    item = MediaItem(id=uuid.uuid4(), media_type=MediaType.MOVIE, title=title, release_date=release_date)
    return BaseRow(id=uuid.uuid4(), media_item=item, listed_at=listed_at)


def _titles(rows: list[BaseRow]) -> list[str]:
    return [row.media_item.title for row in rows]


def test_page_window_for_thirty_seven_items():
    first = page_window(1, 15, 37)
    last = page_window(3, 15, 37)

    assert (first.start, first.end, first.total_pages) == (0, 15, 3)
    assert (last.start, last.end, last.total_pages) == (30, 37, 3)


@pytest.mark.parametrize("page", [0, -1, 4])
def test_page_window_rejects_out_of_range_pages(page):
    with pytest.raises(InvalidPage) as excinfo:
        page_window(page, 15, 37)
    assert excinfo.value.status_code == 400


def test_empty_result_set_still_has_a_first_page():
    window = page_window(1, 15, 0)
    assert (window.start, window.end, window.total_pages) == (0, 0, 0)


def test_title_sort_is_case_insensitive():
    rows = [_row("banana"), _row("Apple"), _row("cherry")]
    assert _titles(order_rows(rows, ItemSort())) == ["Apple", "banana", "cherry"]
    assert _titles(order_rows(rows, ItemSort(sort_order=SortOrder.DESC))) == ["cherry", "banana", "Apple"]


def test_release_date_ties_break_by_title_and_missing_dates_go_last():
    rows = [
        _row("Undated"),
        _row("Beta", release_date=date(2021, 1, 1)),
        _row("Alpha", release_date=date(2021, 1, 1)),
        _row("Older", release_date=date(2019, 1, 1)),
    ]

    ascending = order_rows(rows, ItemSort(sort_by=SortBy.RELEASE_DATE))
    descending = order_rows(rows, ItemSort(sort_by=SortBy.RELEASE_DATE, sort_order=SortOrder.DESC))

    assert _titles(ascending) == ["Older", "Alpha", "Beta", "Undated"]
    assert _titles(descending) == ["Alpha", "Beta", "Older", "Undated"]


def test_listed_at_sort_uses_membership_time():
    early = datetime(2024, 1, 1, tzinfo=timezone.utc)
    late = datetime(2024, 2, 1, tzinfo=timezone.utc)
    rows = [_row("Late", listed_at=late), _row("Early", listed_at=early), _row("Also early", listed_at=early)]

    assert _titles(order_rows(rows, ItemSort(sort_by=SortBy.LISTED_AT))) == ["Also early", "Early", "Late"]


def test_identical_titles_fall_back_to_a_stable_id_order():
    rows = [_row("Same") for _ in range(5)]
    once = order_rows(rows, ItemSort())
    again = order_rows(list(reversed(rows)), ItemSort())

    assert [row.id for row in once] == [row.id for row in again]


def test_random_sort_keeps_every_row():
    rows = [_row(f"Item {index}") for index in range(10)]
    shuffled = order_rows(rows, ItemSort(sort_by=SortBy.RANDOM))
    assert sorted(row.id for row in shuffled) == sorted(row.id for row in rows)
