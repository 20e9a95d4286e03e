"""Public bookmark endpoints (no authentication required)."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from api.helpers import resolve_limit, to_bookmark_list
from core.config import Settings
from schemas.bookmark import BookmarkResponse, PublicOrderBy
from services import public_bookmark_service, search_service

router = APIRouter(prefix="/api/public/bookmarks", tags=["public-bookmarks"])


@router.get("", response_model=list[BookmarkResponse] | BookmarkResponse)
async def get_public_bookmarks(
    q: str | None = Query(
        default=None,
        description="Search text. Supports [tag], site:host and lang:xx filters.",
    ),
    location: str | None = Query(default=None, description="Exact bookmark location"),
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[BookmarkResponse] | BookmarkResponse:
    """
    Search, look up or list public bookmarks.

    - **q**: search public bookmarks (best match first)
    - **location**: the public bookmark for this location (404 when there is none)
    - neither: the latest public bookmarks
    """
    if q:
        bookmarks = await search_service.find_bookmarks(
            db,
            q,
            resolve_limit(limit, settings, default=settings.default_search_limit),
            domain="public",
        )
        return to_bookmark_list(bookmarks)
    if location:
        bookmark = await public_bookmark_service.get_public_bookmark_by_location(db, location)
        return BookmarkResponse.model_validate(bookmark)
    bookmarks = await public_bookmark_service.get_latest_public_bookmarks(
        db, resolve_limit(limit, settings),
    )
    return to_bookmark_list(bookmarks)


@router.get("/tagged/{tag}", response_model=list[BookmarkResponse])
async def get_public_bookmarks_for_tag(
    tag: str,
    order_by: PublicOrderBy = Query(default="LATEST", description="STARS for most liked first"),
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[BookmarkResponse]:
    """Public bookmarks carrying a tag."""
    bookmarks = await public_bookmark_service.get_public_bookmarks_for_tag(
        db, tag, order_by, resolve_limit(limit, settings),
    )
    return to_bookmark_list(bookmarks)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_public_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a public bookmark by id."""
    bookmark = await public_bookmark_service.get_public_bookmark(db, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)
