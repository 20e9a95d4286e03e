"""Service layer for tag frequency aggregation."""
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.tag import TagCount


async def _count_tags(db: AsyncSession, *criteria, limit: int | None = None) -> list[TagCount]:
    """
    Count tag usage over the bookmarks matching the criteria.

    Tags are unnested from the array column, so a bookmark contributes one to each of
    its tags.
    """
    tags = (
        select(func.unnest(Bookmark.tags).label("name"))
        .where(*criteria)
        .subquery()
    )
    query = (
        select(tags.c.name, func.count().label("count"))
        .group_by(tags.c.name)
        .order_by(func.count().desc(), tags.c.name.asc())
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return [TagCount(name=row.name, count=row.count) for row in result]


async def get_user_tags_with_counts(db: AsyncSession, user_id: str) -> list[TagCount]:
    """
    Get all tags used by a user with their usage counts.

    Args:
        db: Database session.
        user_id: Owner of the bookmarks.

    Returns:
        List of TagCount objects sorted by count desc, then name asc.
    """
    return await _count_tags(db, Bookmark.user_id == user_id)


async def get_public_tags_with_counts(
    db: AsyncSession,
    limit: int | None = None,
) -> list[TagCount]:
    """
    Get the tags of public bookmarks with their usage counts.

    Args:
        db: Database session.
        limit: Only return the most used tags when given.

    Returns:
        List of TagCount objects sorted by count desc, then name asc.
    """
    return await _count_tags(db, Bookmark.public.is_(True), limit=limit)


def merge_tag_counts(
    user_tags: Iterable[TagCount],
    public_tags: Iterable[TagCount],
    limit: int | None = None,
) -> list[str]:
    """
    Merge the user's tags with public tags into a suggestion list.

    The user's own tags come first (in the given order), followed by public tags the
    user has not used yet.
    """
    suggestions: list[str] = []
    seen: set[str] = set()
    for tag in [*user_tags, *public_tags]:
        if tag.name in seen:
            continue
        seen.add(tag.name)
        suggestions.append(tag.name)
        if limit is not None and len(suggestions) >= limit:
            break
    return suggestions


async def get_suggested_tags(db: AsyncSession, user_id: str, limit: int = 100) -> list[str]:
    """Suggest tags while editing a bookmark: the user's tags first, then popular public ones."""
    user_tags = await get_user_tags_with_counts(db, user_id)
    public_tags = await get_public_tags_with_counts(db, limit=limit)
    return merge_tag_counts(user_tags, public_tags, limit=limit)
