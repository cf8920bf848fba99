"""List detail and list item endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.api.deps import get_current_user, get_db
from tracker.core.config import settings
from tracker.models.user import User
from tracker.schema.items import ItemFilters, ItemSort
from tracker.schema.lists import ListDetails
from tracker.schema.views import ListItemView, Page
from tracker.services import list_items_service, list_service
from tracker.services.query_composer import ListScope
from tracker.utils.datetime import utcnow

router = APIRouter()


@router.get("/{list_id}", response_model=ListDetails)
async def get_list(
    list_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ListDetails:
    """Return list metadata with its owner and total runtime."""
    return await list_service.get_list_details(session, list_id, current_user.id, now=utcnow())


@router.get("/{list_id}/items", response_model=Page[ListItemView] | list[ListItemView])
async def get_list_items(
    list_id: uuid.UUID,
    page: int | None = Query(None),
    items_per_page: int | None = Query(None, ge=1, le=settings.max_items_per_page),
    filters: ItemFilters = Depends(),
    sort: ItemSort = Depends(),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Page[ListItemView] | list[ListItemView]:
    """Return the list's items; paginated when ``page`` is given."""
    return await list_items_service.list_items(
        session,
        current_user.id,
        ListScope(list_id),
        filters,
        sort,
        page=page,
        items_per_page=items_per_page,
    )
