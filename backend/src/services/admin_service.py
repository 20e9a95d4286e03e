"""Service layer for admin bookmark operations across all users."""
import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.bookmark import Bookmark
from schemas.bookmark import BookmarkInput
from services.bookmark_service import (
    delete_bookmarks_where,
    insert_bookmark,
    remove_from_user_lists,
    replace_bookmark,
)
from services.bookmark_validation import validate_bookmark_input
from services.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BACK = 7


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes from query parameters as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


async def get_bookmarks_with_filter(
    db: AsyncSession,
    public: bool | None = None,
    location: str | None = None,
    user_id: str | None = None,
    limit: int = 100,
) -> list[Bookmark]:
    """
    List bookmarks of all users, newest first.

    Args:
        db: Database session.
        public: Only public (True) or only private (False) bookmarks when given.
        location: Exact location when given.
        user_id: Owner when given.
        limit: Maximum number of bookmarks returned.
    """
    query = select(Bookmark)
    if public is not None:
        query = query.where(Bookmark.public.is_(public))
    if location:
        query = query.where(Bookmark.location == location)
    if user_id:
        query = query.where(Bookmark.user_id == user_id)
    result = await db.execute(
        query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc()).limit(limit),
    )
    return list(result.scalars().all())


async def get_latest_bookmarks_between_dates(
    db: AsyncSession,
    since: datetime,
    to: datetime | None = None,
) -> list[Bookmark]:
    """
    Public bookmarks created between two instants, newest first.

    Args:
        db: Database session.
        since: Inclusive lower bound.
        to: Inclusive upper bound; defaults to now.

    Raises:
        ValidationError: If `since` is after `to`.
    """
    since = _as_utc(since)
    to = _as_utc(to) if to is not None else datetime.now(UTC)
    if since > to:
        message = "<since> param value must be before <to> parameter value"
        raise ValidationError(message, [message])
    result = await db.execute(
        select(Bookmark)
        .where(
            Bookmark.public.is_(True),
            Bookmark.created_at >= since,
            Bookmark.created_at <= to,
        )
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc()),
    )
    return list(result.scalars().all())


async def get_latest_bookmarks_with_days_back(
    db: AsyncSession,
    days: int = DEFAULT_DAYS_BACK,
) -> list[Bookmark]:
    """Public bookmarks created in the last `days` days."""
    since = datetime.now(UTC) - timedelta(days=days)
    return await get_latest_bookmarks_between_dates(db, since)


async def get_bookmark_by_id(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Get any bookmark by id.

    Raises:
        NotFoundError: If the bookmark does not exist.
    """
    bookmark = await db.get(Bookmark, bookmark_id)
    if bookmark is None:
        raise NotFoundError(f"Bookmark with id {bookmark_id} not found")
    return bookmark


async def create_bookmark(db: AsyncSession, data: BookmarkInput, settings: Settings) -> Bookmark:
    """
    Create a bookmark on behalf of any user (the owner is the body's user id).

    Raises:
        ValidationError: If the bookmark breaks any input rule.
        PublicBookmarkExistsError: If the bookmark is public and the location is taken.
        DuplicateLocationError: If the owner already has a bookmark with the location.
    """
    validate_bookmark_input(data, settings)
    return await insert_bookmark(db, data)


async def update_bookmark(
    db: AsyncSession,
    bookmark_id: UUID,
    data: BookmarkInput,
    settings: Settings,
) -> Bookmark:
    """
    Fully replace any bookmark.

    Raises:
        ValidationError: If the bookmark breaks any input rule.
        NotFoundError: If the bookmark does not exist.
    """
    validate_bookmark_input(data, settings)
    bookmark = await get_bookmark_by_id(db, bookmark_id)
    return await replace_bookmark(db, bookmark, data)


async def delete_bookmark(db: AsyncSession, bookmark_id: UUID) -> None:
    """
    Delete any bookmark by id.

    Raises:
        NotFoundError: If the bookmark does not exist.
    """
    bookmark = await get_bookmark_by_id(db, bookmark_id)
    await db.delete(bookmark)
    await db.flush()
    await remove_from_user_lists(db, [bookmark_id])
    logger.info("Admin deleted bookmark %s", bookmark_id)


async def delete_bookmarks_by_location(db: AsyncSession, location: str) -> int:
    """Delete the bookmarks of all users for a location. Returns the number deleted."""
    deleted = await delete_bookmarks_where(db, Bookmark.location == location)
    logger.info("Admin deleted %d bookmarks with location %s", deleted, location)
    return deleted


async def delete_bookmarks_by_user_id(db: AsyncSession, user_id: str) -> int:
    """Delete all bookmarks of a user. Returns the number deleted."""
    deleted = await delete_bookmarks_where(db, Bookmark.user_id == user_id)
    logger.info("Admin deleted %d bookmarks of user %s", deleted, user_id)
    return deleted
