"""Personal bookmark endpoints, scoped to the user in the path."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import CurrentUser, get_async_session, get_current_user, get_settings
from api.helpers import resolve_limit, to_bookmark_list
from core.auth import ensure_user_matches, ensure_user_matches_or_admin
from core.config import Settings
from schemas.bookmark import BookmarkInput, BookmarkOrderBy, BookmarkResponse
from schemas.tag import SuggestedTagsResponse, TagListResponse
from schemas.user_data import RatingRequest
from services import bookmark_service, search_service, tag_service, user_data_service

router = APIRouter(prefix="/api/personal/users/{user_id}/bookmarks", tags=["personal-bookmarks"])


@router.post("", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    user_id: str,
    data: BookmarkInput,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """Create a bookmark. The `Location` header points to the new bookmark."""
    ensure_user_matches(user_id, current_user)
    bookmark = await bookmark_service.create_bookmark(db, user_id, data, settings)
    response.headers["Location"] = (
        f"{settings.api_url.rstrip('/')}/personal/users/{user_id}/bookmarks/{bookmark.id}"
    )
    return BookmarkResponse.model_validate(bookmark)


@router.get("", response_model=list[BookmarkResponse] | BookmarkResponse)
async def get_bookmarks(  # noqa: PLR0913
    user_id: str,
    q: str | None = Query(
        default=None,
        description="Search text. Supports [tag], site:host and lang:xx filters.",
    ),
    include_public: bool = Query(
        default=False,
        description="Also search public bookmarks of other users",
    ),
    location: str | None = Query(default=None, description="Exact bookmark location"),
    order_by: BookmarkOrderBy = Query(default="LAST_ACCESSED"),
    limit: int | None = Query(default=None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[BookmarkResponse] | BookmarkResponse:
    """
    Search, look up or list the user's bookmarks.

    - **q**: search (best match first); **include_public** adds public bookmarks of
      other users whose location the user has not bookmarked
    - **location**: the user's bookmark for this location (404 when there is none)
    - neither: all bookmarks ordered by **order_by**
    """
    ensure_user_matches(user_id, current_user)
    if q:
        bookmarks = await search_service.find_bookmarks(
            db,
            q,
            resolve_limit(limit, settings, default=settings.default_search_limit),
            domain="personal",
            user_id=user_id,
            include_public=include_public,
        )
        return to_bookmark_list(bookmarks)
    if location:
        bookmark = await bookmark_service.get_bookmark_by_location(db, user_id, location)
        return BookmarkResponse.model_validate(bookmark)
    bookmarks = await bookmark_service.list_bookmarks(
        db, user_id, order_by, resolve_limit(limit, settings),
    )
    return to_bookmark_list(bookmarks)


@router.delete("", status_code=204)
async def delete_bookmarks(
    user_id: str,
    location: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    type: str | None = Query(default=None, description="Must be 'private' with tag"),  # noqa: A002
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete the bookmark for a location, or all private bookmarks with a tag."""
    ensure_user_matches(user_id, current_user)
    if location:
        await bookmark_service.delete_bookmark_by_location(db, user_id, location)
    elif tag and type == "private":
        await bookmark_service.delete_private_bookmarks_by_tag(db, user_id, tag)
    else:
        raise HTTPException(
            status_code=400,
            detail="You need to provide location or tag to delete personal bookmarks",
        )


@router.get("/tags", response_model=TagListResponse)
async def get_user_tags(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """The user's tags with usage counts, most used first."""
    ensure_user_matches(user_id, current_user)
    tags = await tag_service.get_user_tags_with_counts(db, user_id)
    return TagListResponse(tags=tags)


@router.get("/suggested-tags", response_model=SuggestedTagsResponse)
async def get_suggested_tags(
    user_id: str,
    limit: int | None = Query(default=None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> SuggestedTagsResponse:
    """Tag suggestions: the user's tags first, then popular public tags."""
    ensure_user_matches(user_id, current_user)
    tags = await tag_service.get_suggested_tags(db, user_id, resolve_limit(limit, settings))
    return SuggestedTagsResponse(tags=tags)


@router.patch("/likes/{bookmark_id}", response_model=BookmarkResponse)
async def rate_bookmark(
    user_id: str,
    bookmark_id: UUID,
    rating: RatingRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Like or unlike a bookmark (`action` is LIKE or UNLIKE)."""
    ensure_user_matches(user_id, current_user)
    bookmark = await user_data_service.rate_bookmark(db, user_id, bookmark_id, rating)
    return BookmarkResponse.model_validate(bookmark)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    user_id: str,
    bookmark_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get one of the user's bookmarks."""
    ensure_user_matches(user_id, current_user)
    bookmark = await bookmark_service.get_bookmark(db, user_id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(  # noqa: PLR0913
    user_id: str,
    bookmark_id: UUID,
    data: BookmarkInput,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """Replace a bookmark. Admins may replace bookmarks of any user."""
    ensure_user_matches_or_admin(user_id, current_user)
    bookmark = await bookmark_service.update_bookmark(
        db, user_id, bookmark_id, data, settings, is_admin=current_user.is_admin,
    )
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    user_id: str,
    bookmark_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark. Admins may delete bookmarks of any user."""
    ensure_user_matches_or_admin(user_id, current_user)
    await bookmark_service.delete_bookmark(db, user_id, bookmark_id)


@router.post("/{bookmark_id}/owner-visits/inc", response_model=BookmarkResponse)
async def increase_owner_visit_count(
    user_id: str,
    bookmark_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Count a visit of the owner."""
    ensure_user_matches(user_id, current_user)
    bookmark = await bookmark_service.increase_owner_visit_count(db, user_id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)
