"""UserData model for per-user searches, watched tags and ordered bookmark lists."""
from typing import Any
from uuid import UUID

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin

# Lists of bookmark ids kept on the user document. Order is meaningful for
# pinned, favorites and history (most recent first).
BOOKMARK_ID_LIST_FIELDS = ("read_later", "likes", "pinned", "favorites", "history")


def _bookmark_id_array() -> Mapped[list[UUID]]:
    return mapped_column(
        ARRAY(PG_UUID(as_uuid=True)),
        nullable=False,
        default=list,
        server_default="{}",
    )


class UserData(Base, TimestampMixin):
    """
    UserData model - one row per user, keyed by the access token subject.

    Bookmark ids are stored denormalized in arrays rather than in junction tables,
    so a user's ordering is preserved exactly as submitted.
    """

    __tablename__ = "user_data"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    searches: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default="[]",
        comment="Saved searches, each with at least a 'text' key",
    )
    watched_tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)),
        nullable=False,
        default=list,
        server_default="{}",
    )
    read_later: Mapped[list[UUID]] = _bookmark_id_array()
    likes: Mapped[list[UUID]] = _bookmark_id_array()
    pinned: Mapped[list[UUID]] = _bookmark_id_array()
    favorites: Mapped[list[UUID]] = _bookmark_id_array()
    history: Mapped[list[UUID]] = _bookmark_id_array()
