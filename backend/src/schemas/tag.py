"""Pydantic schemas for tag endpoints."""
from pydantic import BaseModel


class TagCount(BaseModel):
    """Schema for a tag with its usage count."""

    name: str
    count: int


class TagListResponse(BaseModel):
    """Schema for the tags list response (sorted by count desc, then name asc)."""

    tags: list[TagCount]


class SuggestedTagsResponse(BaseModel):
    """Schema for tag suggestions shown while editing a bookmark."""

    tags: list[str]
