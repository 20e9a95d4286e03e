"""Admin endpoints for bookmarks of all users (admin role required)."""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import CurrentUser, get_async_session, get_settings, require_admin
from api.helpers import resolve_limit, to_bookmark_list
from core.config import Settings
from schemas.bookmark import BookmarkInput, BookmarkResponse
from schemas.tag import TagListResponse
from services import admin_service
from services.tag_service import get_public_tags_with_counts

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/bookmarks", response_model=list[BookmarkResponse])
async def get_bookmarks(  # noqa: PLR0913
    public: bool | None = Query(default=None),
    location: str | None = Query(default=None),
    user_id: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[BookmarkResponse]:
    """Bookmarks of all users, newest first, optionally filtered."""
    bookmarks = await admin_service.get_bookmarks_with_filter(
        db, public=public, location=location, user_id=user_id,
        limit=resolve_limit(limit, settings),
    )
    return to_bookmark_list(bookmarks)


@router.get("/bookmarks/latest-entries", response_model=list[BookmarkResponse])
async def get_latest_entries(
    since: datetime | None = Query(default=None),
    to: datetime | None = Query(default=None),
    days: int = Query(default=admin_service.DEFAULT_DAYS_BACK, ge=1),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    Public bookmarks created recently.

    - **since** (and optionally **to**): created in that range
    - otherwise: created in the last **days** days (default 7)
    """
    if since is not None:
        bookmarks = await admin_service.get_latest_bookmarks_between_dates(db, since, to)
    else:
        bookmarks = await admin_service.get_latest_bookmarks_with_days_back(db, days)
    return to_bookmark_list(bookmarks)


@router.post("/bookmarks", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkInput,
    response: Response,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """Create a bookmark for the user given in the body."""
    bookmark = await admin_service.create_bookmark(db, data, settings)
    response.headers["Location"] = (
        f"{settings.api_url.rstrip('/')}/admin/bookmarks/{bookmark.id}"
    )
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/bookmarks", status_code=204)
async def delete_bookmarks(
    location: str | None = Query(default=None),
    user_id: str | None = Query(default=None),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete all bookmarks with a location, or all bookmarks of a user."""
    if location:
        await admin_service.delete_bookmarks_by_location(db, location)
    elif user_id:
        await admin_service.delete_bookmarks_by_user_id(db, user_id)
    else:
        raise HTTPException(
            status_code=400,
            detail="You can either delete bookmarks by location or userId - "
                   "at least one of them mandatory",
        )


@router.get("/bookmarks/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get any bookmark by id."""
    bookmark = await admin_service.get_bookmark_by_id(db, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.put("/bookmarks/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkInput,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """Replace any bookmark."""
    bookmark = await admin_service.update_bookmark(db, bookmark_id, data, settings)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/bookmarks/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete any bookmark by id."""
    await admin_service.delete_bookmark(db, bookmark_id)


@router.get("/tags", response_model=TagListResponse)
async def get_tags(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """Tags of public bookmarks with their usage counts."""
    return TagListResponse(tags=await get_public_tags_with_counts(db))
