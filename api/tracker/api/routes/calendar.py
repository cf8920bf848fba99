"""Release calendar endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.api.deps import get_current_user, get_db
from tracker.models.user import User
from tracker.schema.views import CalendarEntry
from tracker.services import calendar_service
from tracker.utils.datetime import parse_timestamp

router = APIRouter()


@router.get("", response_model=list[CalendarEntry])
async def get_calendar(
    start: str = Query(..., description="ISO 8601 date or timestamp, inclusive"),
    end: str = Query(..., description="ISO 8601 date or timestamp, inclusive"),
    include_all_lists: bool = Query(False),
    simple: bool = Query(False),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[CalendarEntry]:
    """Return dated releases for items on the watchlist, or on every list."""
    try:
        start_at = parse_timestamp(start)
        end_at = parse_timestamp(end)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid start or end date"
        ) from None
    return await calendar_service.calendar(
        session,
        current_user.id,
        start_at,
        end_at,
        include_all_lists=include_all_lists,
        simple=simple,
    )
