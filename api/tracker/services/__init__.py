from . import (
    aggregate_resolvers,
    calendar_service,
    item_details_service,
    list_items_service,
    list_service,
)

__all__ = [
    "aggregate_resolvers",
    "calendar_service",
    "item_details_service",
    "list_items_service",
    "list_service",
]
"""Service-layer helpers for API operations."""
