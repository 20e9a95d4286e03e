"""Read-only access to public bookmarks."""
from typing import Literal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from services.exceptions import NotFoundError


async def get_latest_public_bookmarks(db: AsyncSession, limit: int) -> list[Bookmark]:
    """Get the most recently created public bookmarks."""
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.public.is_(True))
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .limit(limit),
    )
    return list(result.scalars().all())


async def get_public_bookmark_by_location(db: AsyncSession, location: str) -> Bookmark:
    """
    Get the public bookmark for a location.

    Raises:
        NotFoundError: If no public bookmark has the location.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.public.is_(True),
            Bookmark.location == location,
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise NotFoundError(f"Public bookmark with location {location} not found")
    return bookmark


async def get_public_bookmark(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Get a public bookmark by id. Private bookmarks are reported as missing.

    Raises:
        NotFoundError: If there is no public bookmark with this id.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.public.is_(True),
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise NotFoundError(f"Public bookmark with id {bookmark_id} not found")
    return bookmark


async def get_public_bookmarks_for_tag(
    db: AsyncSession,
    tag: str,
    order_by: Literal["STARS", "LATEST"] = "LATEST",
    limit: int = 100,
) -> list[Bookmark]:
    """
    Get public bookmarks carrying a tag.

    Args:
        db: Database session.
        tag: Tag to filter on (matched lower-cased).
        order_by: "STARS" for most liked first, "LATEST" for newest first.
        limit: Maximum number of bookmarks returned.
    """
    query = select(Bookmark).where(
        Bookmark.public.is_(True),
        Bookmark.tags.contains([tag.strip().lower()]),
    )
    if order_by == "STARS":
        query = query.order_by(Bookmark.like_count.desc(), Bookmark.created_at.desc())
    else:
        query = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    result = await db.execute(query.limit(limit))
    return list(result.scalars().all())
