"""Response conversion helpers."""
from collections.abc import Iterable

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkResponse


def to_bookmark_list(bookmarks: Iterable[Bookmark]) -> list[BookmarkResponse]:
    """Convert bookmark models to response schemas, keeping their order."""
    return [BookmarkResponse.model_validate(bookmark) for bookmark in bookmarks]
