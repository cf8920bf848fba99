"""Import all models here for Alembic autogenerate."""

from tracker.db.base_class import Base
from tracker.models import activity, lists, media, user  # noqa: F401

__all__ = ["Base"]
