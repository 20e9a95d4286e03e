"""Pydantic schemas for bookmark endpoints."""
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import validate_and_normalize_tags

BookmarkOrderBy = Literal["LAST_ACCESSED", "MOST_LIKES", "LAST_CREATED", "MOST_USED"]
PublicOrderBy = Literal["STARS", "LATEST"]


class BookmarkInput(BaseModel):
    """
    Schema for creating or fully replacing a bookmark (POST and PUT).

    Required attributes are optional here on purpose: the bookmark validation service
    reports every missing attribute together with the other business rule violations
    in a single 400 response.
    """

    name: str | None = None
    location: str | None = None
    description: str | None = None
    description_html: str | None = Field(
        default=None,
        description="Rendered description. When omitted it is generated from the "
                    "markdown in `description`.",
    )
    tags: list[str] = []
    public: bool = False
    language: str | None = Field(default=None, max_length=10)
    published_on: date | None = None
    source_code_url: str | None = None
    youtube_video_id: str | None = Field(default=None, max_length=50)
    stackoverflow_question_id: str | None = Field(default=None, max_length=50)
    user_id: str | None = Field(
        default=None,
        description="Owner of the bookmark. Must match the user id in the path.",
    )
    last_accessed_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)

    @field_validator("language", mode="before")
    @classmethod
    def normalize_language(cls, v: str | None) -> str | None:
        """Store language codes lower-cased, as `lang:` search filters are."""
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("name", "location", mode="before")
    @classmethod
    def strip_required_text(cls, v: str | None) -> str | None:
        """Treat whitespace-only values as missing."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    name: str
    location: str
    description: str | None
    description_html: str | None
    tags: list[str]
    public: bool
    language: str | None
    published_on: date | None
    source_code_url: str | None
    youtube_video_id: str | None
    stackoverflow_question_id: str | None
    like_count: int
    owner_visit_count: int
    last_accessed_at: datetime
    created_at: datetime
    updated_at: datetime
