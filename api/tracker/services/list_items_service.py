"""List and library listings: compose, resolve, assemble, order and page.

Implementation notes:
- The base rows are read once inside a single snapshot; ``total`` and the
  page slice both come from that one list so they cannot disagree.
- Without watch-state filters only the requested page is resolved.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.config import settings
from tracker.core.errors import InvalidPage
from tracker.db.session import begin_read_snapshot
from tracker.models.media import MediaType
from tracker.schema.items import ItemFilters, ItemSort
from tracker.schema.views import ListItemView, Page
from tracker.services.aggregate_resolvers import resolve_aggregates
from tracker.services.list_service import get_readable_list
from tracker.services.ordering import order_rows, page_window
from tracker.services.query_composer import ListScope, Scope, apply_view_filters, load_base_rows
from tracker.services.view_assembler import BaseRow, build_list_item_view
from tracker.utils.datetime import utcnow

logger = logging.getLogger("tracker.services.list_items")


async def assemble_rows(
    session: AsyncSession,
    user_id: uuid.UUID,
    rows: list[BaseRow],
    *,
    now: datetime,
) -> list[ListItemView]:
    """Resolve aggregates for a batch of rows and build their views in order."""
    targets = []
    for row in rows:
        targets.append(row.show_target)
        targets.append(row.target)
    tv_show_ids = {row.media_item.id for row in rows if row.media_item.media_type == MediaType.TV}
    aggregates = await resolve_aggregates(session, user_id, targets, tv_show_ids=tv_show_ids, now=now)
    return [await build_list_item_view(row, aggregates) for row in rows]


async def list_items(
    session: AsyncSession,
    user_id: uuid.UUID,
    scope: Scope,
    filters: ItemFilters | None = None,
    sort: ItemSort | None = None,
    *,
    page: int | None = None,
    items_per_page: int | None = None,
    now: datetime | None = None,
) -> Page[ListItemView] | list[ListItemView]:
    """Return the user's views for a scope, paginated when ``page`` is given."""
    filters = filters or ItemFilters()
    sort = sort or ItemSort()
    now = now or utcnow()
    items_per_page = items_per_page or settings.default_items_per_page
    if page is not None and page <= 0:
        raise InvalidPage()

    await begin_read_snapshot(session)
    if isinstance(scope, ListScope):
        await get_readable_list(session, scope.list_id, user_id)
    rows = await load_base_rows(session, user_id, scope, filters, now=now)

    if filters.needs_resolution:
        views = await assemble_rows(session, user_id, rows, now=now)
        pairs = apply_view_filters(list(zip(rows, views)), filters)
        ordered = [view for _, view in order_rows(pairs, sort, row_of=lambda pair: pair[0])]
        if page is None:
            return ordered
        window = page_window(page, items_per_page, len(ordered))
        data = ordered[window.start:window.end]
    else:
        ordered_rows = order_rows(rows, sort)
        if page is None:
            return await assemble_rows(session, user_id, ordered_rows, now=now)
        window = page_window(page, items_per_page, len(ordered_rows))
        data = await assemble_rows(session, user_id, ordered_rows[window.start:window.end], now=now)

    logger.debug(
        "Paged %s rows for user %s: page=%s from=%s to=%s", window.total, user_id, page, window.start, window.end
    )
    return Page[ListItemView](
        data=data,
        page=window.page,
        total_pages=window.total_pages,
        from_=window.start,
        to=window.end,
        total=window.total,
    )
