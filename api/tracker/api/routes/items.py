"""Library listing and single-item detail endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.api.deps import get_current_user, get_db
from tracker.core.config import settings
from tracker.models.user import User
from tracker.schema.items import ItemFilters, ItemSort
from tracker.schema.views import ItemDetails, ListItemView, Page
from tracker.services import item_details_service, list_items_service
from tracker.services.query_composer import LibraryScope

router = APIRouter()


@router.get("/items", response_model=list[ListItemView])
async def list_library_items(
    filters: ItemFilters = Depends(),
    sort: ItemSort = Depends(),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ListItemView]:
    """Return every item in the user's library, unpaginated."""
    return await list_items_service.list_items(session, current_user.id, LibraryScope(), filters, sort)


@router.get("/items/paginated", response_model=Page[ListItemView])
async def list_library_items_paginated(
    page: int = Query(1),
    items_per_page: int | None = Query(None, ge=1, le=settings.max_items_per_page),
    filters: ItemFilters = Depends(),
    sort: ItemSort = Depends(),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Page[ListItemView]:
    """Return one page of the user's library."""
    return await list_items_service.list_items(
        session,
        current_user.id,
        LibraryScope(),
        filters,
        sort,
        page=page,
        items_per_page=items_per_page,
    )


@router.get("/details/{media_item_id}", response_model=ItemDetails)
async def get_item_details(
    media_item_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ItemDetails:
    """Return one item with all of its seasons and episodes expanded."""
    return await item_details_service.item_details(session, current_user.id, media_item_id)
