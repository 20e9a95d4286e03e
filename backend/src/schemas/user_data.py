"""Pydantic schemas for user data endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.validators import validate_and_normalize_tags


class SavedSearch(BaseModel):
    """
    A search saved by the user.

    `text` is optional in the schema so that a missing text is reported by the
    user data validation together with the other problems (400, not 422).
    """

    model_config = ConfigDict(extra="allow")

    text: str | None = None
    search_domain: str | None = None
    created_at: datetime | None = None
    last_executed_at: datetime | None = None
    count: int = 0


class UserDataInput(BaseModel):
    """Schema for creating or replacing a user's data document."""

    user_id: str | None = None
    searches: list[SavedSearch] = []
    read_later: list[UUID] = []
    likes: list[UUID] = []
    watched_tags: list[str] = []
    pinned: list[UUID] = []
    favorites: list[UUID] = []
    history: list[UUID] = []

    @field_validator("watched_tags", mode="before")
    @classmethod
    def normalize_watched_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize watched tags the same way bookmark tags are normalized."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)


class UserDataResponse(BaseModel):
    """Schema for user data responses."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    searches: list[dict[str, Any]]
    read_later: list[UUID]
    likes: list[UUID]
    watched_tags: list[str]
    pinned: list[UUID]
    favorites: list[UUID]
    history: list[UUID]
    created_at: datetime
    updated_at: datetime


class RatingRequest(BaseModel):
    """Schema for liking or unliking a bookmark."""

    rating_user_id: str | None = None
    action: str | None = None
