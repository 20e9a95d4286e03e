"""FastAPI dependencies for injection."""
from core.auth import CurrentUser, get_current_user, require_admin
from core.config import get_settings
from db.session import get_async_session

__all__ = [
    "CurrentUser",
    "get_async_session",
    "get_current_user",
    "get_settings",
    "require_admin",
]
