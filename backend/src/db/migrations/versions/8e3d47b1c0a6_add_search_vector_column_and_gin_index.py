"""
Add generated search_vector column and GIN index to bookmarks.

Revision ID: 8e3d47b1c0a6
Revises: 5c1f0e7a2b94
Create Date: 2026-10-12 11:02:53.604118
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "8e3d47b1c0a6"
down_revision: str | Sequence[str] | None = "5c1f0e7a2b94"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Must stay identical to models.bookmark.TAGS_TEXT_FUNCTION_DDL and SEARCH_VECTOR_EXPRESSION
TAGS_TEXT_FUNCTION_DDL = (
    "CREATE OR REPLACE FUNCTION bookmark_tags_text(tags varchar[]) RETURNS text "
    "LANGUAGE sql IMMUTABLE PARALLEL SAFE "
    "AS $$ SELECT array_to_string(tags, ' ') $$"
)

SEARCH_VECTOR_EXPRESSION = (
    "setweight(to_tsvector('simple', coalesce(name, '')), 'A') || "
    "setweight(to_tsvector('simple', coalesce(location, '')), 'A') || "
    "setweight(to_tsvector('simple', coalesce(bookmark_tags_text(tags), '')), 'B') || "
    "setweight(to_tsvector('simple', coalesce(source_code_url, '')), 'B') || "
    "setweight(to_tsvector('simple', coalesce(description, '')), 'C')"
)


def upgrade() -> None:
    """Add a stored generated tsvector column; existing rows are computed on add."""
    op.execute(TAGS_TEXT_FUNCTION_DDL)
    op.add_column(
        "bookmarks",
        sa.Column(
            "search_vector",
            postgresql.TSVECTOR(),
            sa.Computed(SEARCH_VECTOR_EXPRESSION, persisted=True),
            nullable=True,
        ),
    )
    op.create_index(
        "ix_bookmarks_search_vector_gin",
        "bookmarks",
        ["search_vector"],
        unique=False,
        postgresql_using="gin",
    )


def downgrade() -> None:
    """Remove search_vector column and its index."""
    op.drop_index("ix_bookmarks_search_vector_gin", table_name="bookmarks")
    op.drop_column("bookmarks", "search_vector")
    op.execute("DROP FUNCTION IF EXISTS bookmark_tags_text(varchar[])")
