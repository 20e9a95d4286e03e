"""
Add bookmarks and user_data tables.

Revision ID: 5c1f0e7a2b94
Revises:
Create Date: 2026-10-12 09:14:27.118402
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5c1f0e7a2b94"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _bookmark_id_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
        server_default="{}",
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bookmarks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "user_id",
            sa.String(length=255),
            nullable=False,
            comment="Subject of the access token that created the bookmark",
        ),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_html", sa.Text(), nullable=True),
        sa.Column(
            "tags", postgresql.ARRAY(sa.String(length=100)), server_default="{}", nullable=False,
        ),
        sa.Column("public", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=True),
        sa.Column("published_on", sa.Date(), nullable=True),
        sa.Column("source_code_url", sa.Text(), nullable=True),
        sa.Column("youtube_video_id", sa.String(length=50), nullable=True),
        sa.Column("stackoverflow_question_id", sa.String(length=50), nullable=True),
        sa.Column("like_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "owner_visit_count", sa.Integer(), server_default=sa.text("0"), nullable=False,
        ),
        sa.Column(
            "last_accessed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "location", name="uq_bookmarks_user_location"),
    )
    op.create_index(op.f("ix_bookmarks_user_id"), "bookmarks", ["user_id"], unique=False)
    op.create_index(op.f("ix_bookmarks_public"), "bookmarks", ["public"], unique=False)
    op.create_index(
        op.f("ix_bookmarks_last_accessed_at"), "bookmarks", ["last_accessed_at"], unique=False,
    )
    op.create_index(op.f("ix_bookmarks_created_at"), "bookmarks", ["created_at"], unique=False)
    op.create_index(
        "uq_bookmarks_public_location",
        "bookmarks",
        ["location"],
        unique=True,
        postgresql_where=sa.text("public"),
    )
    op.create_index(
        "ix_bookmarks_tags_gin",
        "bookmarks",
        ["tags"],
        unique=False,
        postgresql_using="gin",
    )

    op.create_table(
        "user_data",
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "searches",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="[]",
            nullable=False,
            comment="Saved searches, each with at least a 'text' key",
        ),
        sa.Column(
            "watched_tags",
            postgresql.ARRAY(sa.String(length=100)),
            server_default="{}",
            nullable=False,
        ),
        _bookmark_id_array("read_later"),
        _bookmark_id_array("likes"),
        _bookmark_id_array("pinned"),
        _bookmark_id_array("favorites"),
        _bookmark_id_array("history"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index(op.f("ix_user_data_created_at"), "user_data", ["created_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_user_data_created_at"), table_name="user_data")
    op.drop_table("user_data")
    op.drop_index("ix_bookmarks_tags_gin", table_name="bookmarks")
    op.drop_index("uq_bookmarks_public_location", table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_created_at"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_last_accessed_at"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_public"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_user_id"), table_name="bookmarks")
    op.drop_table("bookmarks")
