"""List header schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from tracker.models.lists import ListPrivacy
from tracker.schema.base import ORMModel


class ListOwner(ORMModel):
    """Public identity of a list owner."""
    id: UUID
    display_name: str | None = None


class ListDetails(ORMModel):
    """List header with ownership and runtime totals."""
    id: UUID
    name: str
    description: str | None = None
    privacy: ListPrivacy
    is_watchlist: bool
    created_at: datetime
    updated_at: datetime
    items_count: int = 0
    total_runtime: int = 0
    owner: ListOwner
