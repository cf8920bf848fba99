"""User lists and their show/season/episode memberships."""

from __future__ import annotations

import enum
import typing
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker.db.base_class import Base
from tracker.utils.datetime import utcnow

if typing.TYPE_CHECKING:  # pragma: no cover
    from tracker.models.user import User


class ListPrivacy(str, enum.Enum):
    """Visibility of a list to users other than its owner."""
    PRIVATE = "private"
    PUBLIC = "public"


class UserList(Base):
    """Named list owned by a user; one per user is the watchlist."""
    __tablename__ = "lists"
    __table_args__ = (
        Index(
            "uq_lists_one_watchlist_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_watchlist"),
            sqlite_where=text("is_watchlist"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    privacy: Mapped[ListPrivacy] = mapped_column(
        Enum(ListPrivacy, name="list_privacy", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        default=ListPrivacy.PRIVATE,
        nullable=False,
    )
    is_watchlist: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner: Mapped["User"] = relationship(back_populates="lists")
    items: Mapped[list["ListItem"]] = relationship(back_populates="user_list", cascade="all, delete-orphan")


class ListItem(Base):
    """Membership of a show, season or episode in a list.

    ``media_item_id`` is always set. When ``episode_id`` is set the row is an
    episode membership regardless of ``season_id``.
    """
    __tablename__ = "list_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    list_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("lists.id", ondelete="CASCADE"), index=True)
    media_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    season_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("seasons.id", ondelete="CASCADE"))
    episode_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("episodes.id", ondelete="CASCADE"))
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user_list: Mapped[UserList] = relationship(back_populates="items")
