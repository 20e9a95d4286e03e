"""Bookmark model for storing personal and public bookmarks."""
from datetime import date, datetime

from sqlalchemy import (
    DDL,
    Boolean,
    Computed,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, TSVECTOR
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin

# array_to_string is only STABLE, and generated columns accept IMMUTABLE functions only.
# Joining an array of strings does not depend on any setting, so the wrapper is safe.
TAGS_TEXT_FUNCTION_DDL = (
    "CREATE OR REPLACE FUNCTION bookmark_tags_text(tags varchar[]) RETURNS text "
    "LANGUAGE sql IMMUTABLE PARALLEL SAFE "
    "AS $$ SELECT array_to_string(tags, ' ') $$"
)

# Weighted full-text document. The 'simple' configuration does no stemming and has no
# stop words, so bookmarks in any language are indexed the same way.
SEARCH_VECTOR_EXPRESSION = (
    "setweight(to_tsvector('simple', coalesce(name, '')), 'A') || "
    "setweight(to_tsvector('simple', coalesce(location, '')), 'A') || "
    "setweight(to_tsvector('simple', coalesce(bookmark_tags_text(tags), '')), 'B') || "
    "setweight(to_tsvector('simple', coalesce(source_code_url, '')), 'B') || "
    "setweight(to_tsvector('simple', coalesce(description, '')), 'C')"
)


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """Bookmark model - stores a location with its metadata, tags and usage counters."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "location", name="uq_bookmarks_user_location"),
        # At most one public bookmark may exist per location
        Index(
            "uq_bookmarks_public_location",
            "location",
            unique=True,
            postgresql_where=text("public"),
        ),
        Index("ix_bookmarks_tags_gin", "tags", postgresql_using="gin"),
        Index("ix_bookmarks_search_vector_gin", "search_vector", postgresql_using="gin"),
    )

    # id provided by UUIDv7Mixin
    user_id: Mapped[str] = mapped_column(
        String(255),
        index=True,
        comment="Subject of the access token that created the bookmark",
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String(100)), server_default="{}")
    public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"), index=True,
    )
    language: Mapped[str | None] = mapped_column(String(10), nullable=True)
    published_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    source_code_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    youtube_video_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    stackoverflow_question_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    like_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    owner_visit_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        server_default=func.clock_timestamp(),
    )

    search_vector: Mapped[str | None] = mapped_column(
        TSVECTOR,
        Computed(SEARCH_VECTOR_EXPRESSION, persisted=True),
        deferred=True,
    )


event.listen(Bookmark.__table__, "before_create", DDL(TAGS_TEXT_FUNCTION_DDL))
