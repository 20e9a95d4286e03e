"""Service layer for per-user data: saved searches, watched tags and bookmark lists."""
import logging
from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.bookmark import Bookmark
from models.user_data import UserData
from schemas.user_data import RatingRequest, UserDataInput
from services.exceptions import NotFoundError, UserDataExistsError, ValidationError

logger = logging.getLogger(__name__)

USER_DATA_NOT_VALID = "Submitted user data is not valid"
RATING_NOT_VALID = "Rating bookmark input is not valid"
RATING_ACTIONS = ("LIKE", "UNLIKE")

# Lists whose length is capped by `max_user_list_length`
CAPPED_LIST_FIELDS = ("pinned", "history")


def collect_user_data_errors(user_id: str, data: UserDataInput) -> list[str]:
    """Return the messages of every failed user data check."""
    errors: list[str] = []
    if not data.user_id or data.user_id != user_id:
        errors.append("Missing or invalid userId in the request body")
    if any(not (search.text and search.text.strip()) for search in data.searches):
        errors.append("Searches are not valid - search text is required")
    return errors


def validate_user_data(user_id: str, data: UserDataInput) -> None:
    """
    Validate a submitted user data document.

    Raises:
        ValidationError: With all failed checks, if any.
    """
    errors = collect_user_data_errors(user_id, data)
    if errors:
        raise ValidationError(USER_DATA_NOT_VALID, errors)


def collect_rating_errors(user_id: str, rating: RatingRequest) -> list[str]:
    """Return the messages of every failed rating check."""
    errors: list[str] = []
    if rating.rating_user_id != user_id:
        errors.append(
            "The ratingUserId in the request.body must be the same as the userId request parameter",
        )
    if not rating.action:
        errors.append("Missing required attributes - action")
    elif rating.action not in RATING_ACTIONS:
        errors.append("Invalid value - rating action should be LIKE or UNLIKE")
    return errors


def order_by_ids(bookmarks: Iterable[Bookmark], ids: Sequence[UUID]) -> list[Bookmark]:
    """
    Order bookmarks as their ids appear in a stored list.

    Ids without a matching bookmark (deleted since they were stored) are skipped.
    """
    by_id = {bookmark.id: bookmark for bookmark in bookmarks}
    return [by_id[bookmark_id] for bookmark_id in ids if bookmark_id in by_id]


def _apply_user_data(user_data: UserData, data: UserDataInput, settings: Settings) -> None:
    """Copy a validated input onto the model, capping the pinned and history lists."""
    user_data.searches = [
        search.model_dump(mode="json", exclude_none=True) for search in data.searches
    ]
    user_data.watched_tags = data.watched_tags
    user_data.read_later = data.read_later
    user_data.likes = data.likes
    user_data.favorites = data.favorites
    for field in CAPPED_LIST_FIELDS:
        setattr(user_data, field, getattr(data, field)[:settings.max_user_list_length])


async def _find_user_data(db: AsyncSession, user_id: str) -> UserData | None:
    result = await db.execute(select(UserData).where(UserData.user_id == user_id))
    return result.scalar_one_or_none()


async def _flush_user_data(db: AsyncSession, user_id: str) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Another request created the row between the lookup and the flush
        if "user_data_pkey" in str(e):
            raise UserDataExistsError(user_id) from e
        raise


async def get_user_data(db: AsyncSession, user_id: str) -> UserData:
    """
    Get the user's data document.

    Raises:
        NotFoundError: If the user has no data yet.
    """
    user_data = await _find_user_data(db, user_id)
    if user_data is None:
        raise NotFoundError(f"User data not found for userId {user_id}")
    return user_data


async def create_user_data(
    db: AsyncSession,
    user_id: str,
    data: UserDataInput,
    settings: Settings,
) -> UserData:
    """
    Create the user's data document.

    Raises:
        ValidationError: If the body user id is missing/different or a search has no text.
        UserDataExistsError: If the user already has data.
    """
    validate_user_data(user_id, data)
    if await _find_user_data(db, user_id) is not None:
        raise UserDataExistsError(user_id)

    user_data = UserData(user_id=user_id)
    _apply_user_data(user_data, data, settings)
    db.add(user_data)
    await _flush_user_data(db, user_id)
    await db.refresh(user_data)
    logger.info("Created user data for user %s", user_id)
    return user_data


async def update_user_data(
    db: AsyncSession,
    user_id: str,
    data: UserDataInput,
    settings: Settings,
) -> UserData:
    """
    Replace the user's data document, creating it when missing.

    Raises:
        ValidationError: If the body user id is missing/different or a search has no text.
        UserDataExistsError: If a concurrent request created the document first.
    """
    validate_user_data(user_id, data)
    user_data = await _find_user_data(db, user_id)
    if user_data is None:
        user_data = UserData(user_id=user_id)
        db.add(user_data)
    else:
        user_data.updated_at = func.clock_timestamp()
    _apply_user_data(user_data, data, settings)
    await _flush_user_data(db, user_id)
    await db.refresh(user_data)
    return user_data


async def delete_user_data(db: AsyncSession, user_id: str) -> None:
    """
    Delete the user's data document. The user's bookmarks are kept.

    Raises:
        NotFoundError: If the user has no data.
    """
    user_data = await get_user_data(db, user_id)
    await db.delete(user_data)
    await db.flush()
    logger.info("Deleted user data for user %s", user_id)


async def _get_visible_bookmarks(
    db: AsyncSession,
    user_id: str,
    bookmark_ids: Sequence[UUID],
) -> list[Bookmark]:
    """Load the listed bookmarks the user may see (own or public), in list order."""
    if not bookmark_ids:
        return []
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id.in_(bookmark_ids),
            or_(Bookmark.user_id == user_id, Bookmark.public.is_(True)),
        ),
    )
    return order_by_ids(result.scalars().all(), bookmark_ids)


async def get_read_later_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """Bookmarks the user saved to read later."""
    user_data = await get_user_data(db, user_id)
    return await _get_visible_bookmarks(db, user_id, user_data.read_later)


async def get_liked_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """Bookmarks the user liked."""
    user_data = await get_user_data(db, user_id)
    return await _get_visible_bookmarks(db, user_id, user_data.likes)


async def get_pinned_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """Pinned bookmarks in the order the user arranged them."""
    user_data = await get_user_data(db, user_id)
    return await _get_visible_bookmarks(db, user_id, user_data.pinned)


async def get_favorite_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """Favorite bookmarks in the order the user arranged them."""
    user_data = await get_user_data(db, user_id)
    return await _get_visible_bookmarks(db, user_id, user_data.favorites)


async def get_history_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """Recently visited bookmarks, most recent first."""
    user_data = await get_user_data(db, user_id)
    return await _get_visible_bookmarks(db, user_id, user_data.history)


async def get_watched_tags_bookmarks(
    db: AsyncSession,
    user_id: str,
    limit: int = 100,
) -> list[Bookmark]:
    """
    Public bookmarks carrying any of the user's watched tags, newest first.

    Raises:
        NotFoundError: If the user has no data.
    """
    user_data = await get_user_data(db, user_id)
    if not user_data.watched_tags:
        return []
    result = await db.execute(
        select(Bookmark)
        .where(
            Bookmark.public.is_(True),
            Bookmark.tags.overlap(user_data.watched_tags),
        )
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .limit(limit),
    )
    return list(result.scalars().all())


async def rate_bookmark(
    db: AsyncSession,
    user_id: str,
    bookmark_id: UUID,
    rating: RatingRequest,
) -> Bookmark:
    """
    Like or unlike a bookmark.

    Args:
        db: Database session.
        user_id: The rating user, from the request path.
        bookmark_id: Bookmark to rate. Must be public or owned by the user.
        rating: Rating user id (must equal `user_id`) and action (LIKE or UNLIKE).

    Returns:
        The bookmark with its updated like count.

    Raises:
        ValidationError: If the input is invalid, or the bookmark is already liked
            (LIKE) or not liked (UNLIKE).
        NotFoundError: If the user has no data or the bookmark does not exist.
    """
    errors = collect_rating_errors(user_id, rating)
    if errors:
        raise ValidationError(RATING_NOT_VALID, errors)

    user_data = await get_user_data(db, user_id)
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            or_(Bookmark.user_id == user_id, Bookmark.public.is_(True)),
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise NotFoundError(f"Bookmark with id {bookmark_id} not found")

    likes = list(user_data.likes)
    if rating.action == "LIKE":
        if bookmark_id in likes:
            message = "You already starred this bookmark"
            raise ValidationError(message, [message])
        user_data.likes = [*likes, bookmark_id]
        bookmark.like_count = Bookmark.like_count + 1
    else:
        if bookmark_id not in likes:
            message = "You did not like this bookmark"
            raise ValidationError(message, [message])
        user_data.likes = [liked for liked in likes if liked != bookmark_id]
        bookmark.like_count = Bookmark.like_count - 1
    user_data.updated_at = func.clock_timestamp()

    await db.flush()
    await db.refresh(bookmark)
    await db.refresh(user_data)
    logger.info("User %s %sd bookmark %s", user_id, rating.action.lower(), bookmark_id)
    return bookmark
