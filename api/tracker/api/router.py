"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import calendar, items, lists

api_router = APIRouter()
api_router.include_router(items.router, tags=["items"])
api_router.include_router(lists.router, prefix="/lists", tags=["lists"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
