"""User data endpoints: saved searches, watched tags and bookmark lists."""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import CurrentUser, get_async_session, get_current_user, get_settings
from api.helpers import resolve_limit, to_bookmark_list
from core.auth import ensure_user_matches
from core.config import Settings
from schemas.bookmark import BookmarkResponse
from schemas.user_data import UserDataInput, UserDataResponse
from services import user_data_service


router = APIRouter(prefix="/api/personal/users/{user_id}", tags=["users"])


@router.post("", response_model=UserDataResponse, status_code=201)
async def create_user_data(
    user_id: str,
    data: UserDataInput,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> UserDataResponse:
    """Create the user's data document."""
    ensure_user_matches(user_id, current_user)
    user_data = await user_data_service.create_user_data(db, user_id, data, settings)
    response.headers["Location"] = f"{settings.api_url.rstrip('/')}/personal/users/{user_id}"
    return UserDataResponse.model_validate(user_data)


@router.get("", response_model=UserDataResponse)
async def get_user_data(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> UserDataResponse:
    """Get the user's data document."""
    ensure_user_matches(user_id, current_user)
    user_data = await user_data_service.get_user_data(db, user_id)
    return UserDataResponse.model_validate(user_data)


@router.put("", response_model=UserDataResponse)
async def update_user_data(
    user_id: str,
    data: UserDataInput,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> UserDataResponse:
    """Replace the user's data document (created when missing)."""
    ensure_user_matches(user_id, current_user)
    user_data = await user_data_service.update_user_data(db, user_id, data, settings)
    return UserDataResponse.model_validate(user_data)


@router.delete("", status_code=204)
async def delete_user_data(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete the user's data document."""
    ensure_user_matches(user_id, current_user)
    await user_data_service.delete_user_data(db, user_id)


@router.get("/later-reads", response_model=list[BookmarkResponse])
async def get_read_later_bookmarks(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Bookmarks saved to read later."""
    ensure_user_matches(user_id, current_user)
    return to_bookmark_list(await user_data_service.get_read_later_bookmarks(db, user_id))


@router.get("/likes", response_model=list[BookmarkResponse])
async def get_liked_bookmarks(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Bookmarks the user liked."""
    ensure_user_matches(user_id, current_user)
    return to_bookmark_list(await user_data_service.get_liked_bookmarks(db, user_id))


@router.get("/watched-tags", response_model=list[BookmarkResponse])
async def get_watched_tags_bookmarks(
    user_id: str,
    limit: int | None = Query(default=None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> list[BookmarkResponse]:
    """Latest public bookmarks tagged with any of the user's watched tags."""
    ensure_user_matches(user_id, current_user)
    bookmarks = await user_data_service.get_watched_tags_bookmarks(
        db, user_id, resolve_limit(limit, settings),
    )
    return to_bookmark_list(bookmarks)


@router.get("/pinned", response_model=list[BookmarkResponse])
async def get_pinned_bookmarks(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Pinned bookmarks in the user's order."""
    ensure_user_matches(user_id, current_user)
    return to_bookmark_list(await user_data_service.get_pinned_bookmarks(db, user_id))


@router.get("/favorites", response_model=list[BookmarkResponse])
async def get_favorite_bookmarks(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Favorite bookmarks in the user's order."""
    ensure_user_matches(user_id, current_user)
    return to_bookmark_list(await user_data_service.get_favorite_bookmarks(db, user_id))


@router.get("/history", response_model=list[BookmarkResponse])
async def get_history_bookmarks(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Recently visited bookmarks, most recent first."""
    ensure_user_matches(user_id, current_user)
    return to_bookmark_list(await user_data_service.get_history_bookmarks(db, user_id))
