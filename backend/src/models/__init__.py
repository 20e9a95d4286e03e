"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import Bookmark
from models.user_data import UserData

__all__ = [
    "Base",
    "Bookmark",
    "TimestampMixin",
    "UUIDv7Mixin",
    "UserData",
]
