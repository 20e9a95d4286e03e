"""API helper utilities."""
from api.helpers.limits import resolve_limit
from api.helpers.responses import to_bookmark_list

__all__ = [
    "resolve_limit",
    "to_bookmark_list",
]
