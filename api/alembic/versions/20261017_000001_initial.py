"""initial schema

Revision ID: 20261017_000001
Revises: 
Create Date: 2026-10-17 00:00:01.000000
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_000001"
down_revision = None
branch_labels = None
depends_on = None


media_type_enum = postgresql.ENUM("movie", "tv", name="media_type", create_type=False)
list_privacy_enum = postgresql.ENUM("private", "public", name="list_privacy", create_type=False)


def upgrade() -> None:
    """Create catalog, list and activity tables."""
    media_type_enum.create(op.get_bind(), checkfirst=True)
    list_privacy_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "media_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("media_type", media_type_enum, nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("original_title", sa.String(length=500), nullable=True),
        sa.Column("overview", sa.Text(), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("runtime", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=64), nullable=True),
        sa.Column("network", sa.String(length=255), nullable=True),
        sa.Column("genres", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("imdb_id", sa.String(length=32), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_media_items_media_type", "media_items", ["media_type"], unique=False)
    op.create_index("ix_media_items_title", "media_items", ["title"], unique=False)
    op.create_index("ix_media_items_release_date", "media_items", ["release_date"], unique=False)
    op.create_index("ix_media_items_tmdb_id", "media_items", ["tmdb_id"], unique=False)

    op.create_table(
        "seasons",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "tv_show_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("season_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("is_special_season", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.UniqueConstraint("tv_show_id", "season_number", name="uq_season_number"),
    )
    op.create_index("ix_seasons_tv_show_id", "seasons", ["tv_show_id"], unique=False)

    op.create_table(
        "episodes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "tv_show_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "season_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("seasons.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("season_number", sa.Integer(), nullable=False),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("season_and_episode_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("runtime", sa.Integer(), nullable=True),
        sa.Column("is_special_episode", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("imdb_id", sa.String(length=32), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.UniqueConstraint("tv_show_id", "season_and_episode_number", name="uq_episode_order"),
    )
    op.create_index("ix_episodes_tv_show_id", "episodes", ["tv_show_id"], unique=False)
    op.create_index("ix_episodes_season_id", "episodes", ["season_id"], unique=False)
    op.create_index("ix_episodes_release_date", "episodes", ["release_date"], unique=False)

    op.create_table(
        "lists",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("privacy", list_privacy_enum, nullable=False, server_default="private"),
        sa.Column("is_watchlist", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_lists_user_id", "lists", ["user_id"], unique=False)
    op.create_index(
        "uq_lists_one_watchlist_per_user",
        "lists",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_watchlist"),
    )

    op.create_table(
        "list_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("list_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("lists.id", ondelete="CASCADE")),
        sa.Column(
            "media_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("season_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("seasons.id", ondelete="CASCADE")),
        sa.Column("episode_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("episodes.id", ondelete="CASCADE")),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_list_items_list_id", "list_items", ["list_id"], unique=False)
    op.create_index("ix_list_items_media_item_id", "list_items", ["media_item_id"], unique=False)

    op.create_table(
        "seen",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column(
            "media_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("episode_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("episodes.id", ondelete="CASCADE")),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.CheckConstraint("duration >= 0", name="ck_seen_duration_nonnegative"),
    )
    op.create_index("ix_seen_user_id", "seen", ["user_id"], unique=False)
    op.create_index("ix_seen_media_item_id", "seen", ["media_item_id"], unique=False)
    op.create_index("ix_seen_episode_id", "seen", ["episode_id"], unique=False)

    op.create_table(
        "progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column(
            "media_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("episode_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("episodes.id", ondelete="CASCADE")),
        sa.Column("progress", sa.Float(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "media_item_id", "episode_id", name="uq_progress_target"),
        sa.CheckConstraint("progress >= 0 AND progress <= 1", name="ck_progress_progress_range"),
    )
    op.create_index("ix_progress_user_id", "progress", ["user_id"], unique=False)
    op.create_index("ix_progress_media_item_id", "progress", ["media_item_id"], unique=False)

    op.create_table(
        "user_ratings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column(
            "media_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("media_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("season_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("seasons.id", ondelete="CASCADE")),
        sa.Column("episode_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("episodes.id", ondelete="CASCADE")),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("review", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "rating IS NULL OR (rating >= 0 AND rating <= 10)", name="ck_user_ratings_rating_range"
        ),
        sa.CheckConstraint("season_id IS NULL OR episode_id IS NULL", name="ck_user_ratings_single_target"),
    )
    op.create_index("ix_user_ratings_user_id", "user_ratings", ["user_id"], unique=False)
    op.create_index("ix_user_ratings_media_item_id", "user_ratings", ["media_item_id"], unique=False)


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table("user_ratings")
    op.drop_table("progress")
    op.drop_table("seen")
    op.drop_table("list_items")
    op.drop_index("uq_lists_one_watchlist_per_user", table_name="lists")
    op.drop_table("lists")
    op.drop_table("episodes")
    op.drop_table("seasons")
    op.drop_table("media_items")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    list_privacy_enum.drop(op.get_bind(), checkfirst=True)
    media_type_enum.drop(op.get_bind(), checkfirst=True)
