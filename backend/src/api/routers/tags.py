"""Public tag endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.tag import TagListResponse
from services.tag_service import get_public_tags_with_counts

router = APIRouter(prefix="/api/public/tags", tags=["tags"])


@router.get("", response_model=TagListResponse)
async def list_public_tags(
    limit: int | None = Query(default=None, ge=1, description="Only the most used tags"),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """
    Get the tags of public bookmarks with their usage counts.

    Tags are sorted by count (most used first), then alphabetically.
    """
    tags = await get_public_tags_with_counts(db, limit=limit)
    return TagListResponse(tags=tags)
