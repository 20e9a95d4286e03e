"""Service layer for personal bookmark CRUD operations."""
import logging
from collections.abc import Sequence
from typing import Literal
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.bookmark import Bookmark
from models.user_data import BOOKMARK_ID_LIST_FIELDS, UserData
from schemas.bookmark import BookmarkInput
from services.bookmark_validation import resolve_description_html, validate_bookmark_input
from services.exceptions import (
    DuplicateLocationError,
    NotFoundError,
    PublicBookmarkExistsError,
)

logger = logging.getLogger(__name__)

ORDER_COLUMNS = {
    "LAST_ACCESSED": Bookmark.last_accessed_at,
    "MOST_LIKES": Bookmark.like_count,
    "LAST_CREATED": Bookmark.created_at,
    "MOST_USED": Bookmark.owner_visit_count,
}


async def _ensure_public_location_free(
    db: AsyncSession,
    location: str,
    exclude_id: UUID | None = None,
) -> None:
    """Raise PublicBookmarkExistsError if another public bookmark has the location."""
    query = select(Bookmark.id).where(
        Bookmark.public.is_(True),
        Bookmark.location == location,
    )
    if exclude_id is not None:
        query = query.where(Bookmark.id != exclude_id)
    result = await db.execute(query.limit(1))
    if result.first() is not None:
        raise PublicBookmarkExistsError(location)


async def _ensure_user_location_free(
    db: AsyncSession,
    user_id: str,
    location: str,
    exclude_id: UUID | None = None,
) -> None:
    """Raise DuplicateLocationError if the user already bookmarked the location."""
    query = select(Bookmark.id).where(
        Bookmark.user_id == user_id,
        Bookmark.location == location,
    )
    if exclude_id is not None:
        query = query.where(Bookmark.id != exclude_id)
    result = await db.execute(query.limit(1))
    if result.first() is not None:
        raise DuplicateLocationError(location)


def _conflict_from_integrity_error(e: IntegrityError, data: BookmarkInput) -> Exception:
    """Map a unique constraint violation to the matching domain error."""
    message = str(e)
    if "uq_bookmarks_public_location" in message:
        return PublicBookmarkExistsError(data.location)
    if "uq_bookmarks_user_location" in message:
        return DuplicateLocationError(data.location)
    return e


def _bookmark_values(data: BookmarkInput) -> dict:
    """Column values taken from a validated bookmark input."""
    values = {
        "user_id": data.user_id,
        "name": data.name,
        "location": data.location,
        "description": data.description,
        "description_html": resolve_description_html(data),
        "tags": data.tags,
        "public": data.public,
        "language": data.language,
        "published_on": data.published_on,
        "source_code_url": data.source_code_url,
        "youtube_video_id": data.youtube_video_id,
        "stackoverflow_question_id": data.stackoverflow_question_id,
    }
    if data.last_accessed_at is not None:
        values["last_accessed_at"] = data.last_accessed_at
    return values


async def insert_bookmark(db: AsyncSession, data: BookmarkInput) -> Bookmark:
    """
    Insert an already validated bookmark.

    Shared by the personal and the admin create operations.

    Raises:
        PublicBookmarkExistsError: If the bookmark is public and the location is taken.
        DuplicateLocationError: If the owner already has a bookmark with the location.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if data.public:
        await _ensure_public_location_free(db, data.location)
    await _ensure_user_location_free(db, data.user_id, data.location)

    bookmark = Bookmark(**_bookmark_values(data))
    db.add(bookmark)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Fallback for a concurrent insert between the checks above and the flush
        raise _conflict_from_integrity_error(e, data) from e
    await db.refresh(bookmark)

    if data.last_accessed_at is None:
        # A bookmark that was never opened counts as accessed when created
        bookmark.last_accessed_at = bookmark.created_at
        await db.flush()
        await db.refresh(bookmark)

    logger.info(
        "Created bookmark %s for user %s (public=%s)",
        bookmark.id, bookmark.user_id, bookmark.public,
    )
    return bookmark


async def create_bookmark(
    db: AsyncSession,
    user_id: str,
    data: BookmarkInput,
    settings: Settings,
) -> Bookmark:
    """
    Create a new personal bookmark.

    Args:
        db: Database session.
        user_id: User id from the request path; the bookmark must belong to it.
        data: Submitted bookmark.
        settings: Validation limits.

    Returns:
        The created bookmark.

    Raises:
        ValidationError: If the bookmark breaks any input rule.
        PublicBookmarkExistsError: If the bookmark is public and the location is taken.
        DuplicateLocationError: If the user already has a bookmark with the location.
    """
    validate_bookmark_input(data, settings, expected_user_id=user_id)
    return await insert_bookmark(db, data)


async def get_bookmark(db: AsyncSession, user_id: str, bookmark_id: UUID) -> Bookmark:
    """
    Get a bookmark by id, scoped to its owner.

    Raises:
        NotFoundError: If the user has no bookmark with this id.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise NotFoundError(f"Bookmark with id {bookmark_id} not found for user {user_id}")
    return bookmark


async def get_bookmark_by_location(db: AsyncSession, user_id: str, location: str) -> Bookmark:
    """
    Get the user's bookmark for a location.

    Raises:
        NotFoundError: If the user has not bookmarked the location.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.location == location,
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise NotFoundError(f"Bookmark with location {location} not found for user {user_id}")
    return bookmark


async def list_bookmarks(
    db: AsyncSession,
    user_id: str,
    order_by: Literal["LAST_ACCESSED", "MOST_LIKES", "LAST_CREATED", "MOST_USED"] = "LAST_ACCESSED",
    limit: int = 100,
) -> list[Bookmark]:
    """
    List the user's bookmarks.

    Args:
        db: Database session.
        user_id: Owner of the bookmarks.
        order_by:
            - "LAST_ACCESSED": most recently opened first (default).
            - "MOST_LIKES": most liked first.
            - "LAST_CREATED": newest first.
            - "MOST_USED": most visited by the owner first.
        limit: Maximum number of bookmarks returned.
    """
    sort_column = ORDER_COLUMNS[order_by]
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .order_by(sort_column.desc(), Bookmark.created_at.desc(), Bookmark.id.desc())
        .limit(limit),
    )
    return list(result.scalars().all())


async def replace_bookmark(db: AsyncSession, bookmark: Bookmark, data: BookmarkInput) -> Bookmark:
    """
    Replace every editable field of an already validated bookmark.

    Counters (likes, owner visits) are kept.

    Raises:
        PublicBookmarkExistsError: If the bookmark becomes public on a taken location.
        DuplicateLocationError: If the owner has another bookmark with the location.
    """
    if data.public:
        await _ensure_public_location_free(db, data.location, exclude_id=bookmark.id)
    await _ensure_user_location_free(db, data.user_id, data.location, exclude_id=bookmark.id)

    for field, value in _bookmark_values(data).items():
        setattr(bookmark, field, value)
    bookmark.updated_at = func.clock_timestamp()
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise _conflict_from_integrity_error(e, data) from e
    await db.refresh(bookmark)
    logger.info("Updated bookmark %s of user %s", bookmark.id, bookmark.user_id)
    return bookmark


async def update_bookmark(  # noqa: PLR0913
    db: AsyncSession,
    user_id: str,
    bookmark_id: UUID,
    data: BookmarkInput,
    settings: Settings,
    is_admin: bool = False,
) -> Bookmark:
    """
    Fully replace a personal bookmark (PUT semantics).

    Args:
        db: Database session.
        user_id: Owner from the request path.
        bookmark_id: Bookmark to replace.
        data: The new bookmark content.
        settings: Validation limits.
        is_admin: Admins may replace bookmarks of other users, so the user id check is skipped.

    Raises:
        ValidationError: If the bookmark breaks any input rule.
        NotFoundError: If the user has no bookmark with this id.
        PublicBookmarkExistsError: If the bookmark becomes public on a taken location.
        DuplicateLocationError: If the owner has another bookmark with the location.
    """
    validate_bookmark_input(data, settings, expected_user_id=None if is_admin else user_id)
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    return await replace_bookmark(db, bookmark, data)


async def increase_owner_visit_count(
    db: AsyncSession,
    user_id: str,
    bookmark_id: UUID,
) -> Bookmark:
    """
    Count a visit of the owner and mark the bookmark as just accessed.

    Raises:
        NotFoundError: If the user has no bookmark with this id.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    # SQL expressions so concurrent visits are not lost
    bookmark.owner_visit_count = Bookmark.owner_visit_count + 1
    bookmark.last_accessed_at = func.clock_timestamp()
    await db.flush()
    await db.refresh(bookmark)
    return bookmark


async def remove_from_user_lists(db: AsyncSession, bookmark_ids: Sequence[UUID]) -> None:
    """
    Remove deleted bookmark ids from every user's read later, likes, pinned,
    favorites and history lists.
    """
    removed = set(bookmark_ids)
    result = await db.execute(
        select(UserData).where(
            or_(*(
                getattr(UserData, field).overlap(list(removed))
                for field in BOOKMARK_ID_LIST_FIELDS
            )),
        ),
    )
    for user_data in result.scalars():
        for field in BOOKMARK_ID_LIST_FIELDS:
            ids = getattr(user_data, field)
            if removed.intersection(ids):
                setattr(user_data, field, [i for i in ids if i not in removed])
    await db.flush()


async def delete_bookmark(db: AsyncSession, user_id: str, bookmark_id: UUID) -> None:
    """
    Delete one of the user's bookmarks.

    Raises:
        NotFoundError: If the user has no bookmark with this id.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    await db.delete(bookmark)
    await db.flush()
    await remove_from_user_lists(db, [bookmark_id])
    logger.info("Deleted bookmark %s of user %s", bookmark_id, user_id)


async def delete_bookmark_by_location(db: AsyncSession, user_id: str, location: str) -> None:
    """
    Delete the user's bookmark for a location.

    Raises:
        NotFoundError: If the user has not bookmarked the location.
    """
    bookmark = await get_bookmark_by_location(db, user_id, location)
    bookmark_id = bookmark.id
    await db.delete(bookmark)
    await db.flush()
    await remove_from_user_lists(db, [bookmark_id])
    logger.info("Deleted bookmark %s of user %s by location", bookmark_id, user_id)


async def delete_bookmarks_where(db: AsyncSession, *criteria) -> int:
    """
    Delete all bookmarks matching the criteria and clean up user lists.

    Returns:
        Number of deleted bookmarks.
    """
    result = await db.execute(select(Bookmark.id).where(*criteria))
    bookmark_ids = list(result.scalars().all())
    if not bookmark_ids:
        return 0
    await db.execute(
        delete(Bookmark)
        .where(Bookmark.id.in_(bookmark_ids))
        .execution_options(synchronize_session="fetch"),
    )
    await remove_from_user_lists(db, bookmark_ids)
    return len(bookmark_ids)


async def delete_private_bookmarks_by_tag(db: AsyncSession, user_id: str, tag: str) -> int:
    """
    Delete the user's private bookmarks carrying a tag. Public ones are kept.

    Returns:
        Number of deleted bookmarks.
    """
    deleted = await delete_bookmarks_where(
        db,
        Bookmark.user_id == user_id,
        Bookmark.public.is_(False),
        Bookmark.tags.contains([tag.strip().lower()]),
    )
    logger.info("Deleted %d private bookmarks tagged %r of user %s", deleted, tag, user_id)
    return deleted
