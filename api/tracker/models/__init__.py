"""SQLAlchemy ORM models for the tracker fact store."""

from tracker.models.activity import Progress, Seen, UserRating
from tracker.models.lists import ListItem, ListPrivacy, UserList
from tracker.models.media import (
    EPISODE_ORDER_MULTIPLIER,
    Episode,
    MediaItem,
    MediaType,
    Season,
    episode_order_key,
    season_episode_condition,
)
from tracker.models.user import User

__all__ = [
    "EPISODE_ORDER_MULTIPLIER",
    "Episode",
    "ListItem",
    "ListPrivacy",
    "MediaItem",
    "MediaType",
    "Progress",
    "Season",
    "Seen",
    "User",
    "UserList",
    "UserRating",
    "episode_order_key",
    "season_episode_condition",
]
