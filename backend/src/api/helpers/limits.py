"""Result size handling shared by list and search endpoints."""
from core.config import Settings


def resolve_limit(limit: int | None, settings: Settings, default: int | None = None) -> int:
    """
    Resolve the requested result size.

    Args:
        limit: The `limit` query parameter, if any.
        settings: Provides the `max_results` cap.
        default: Used when no limit was requested; defaults to `max_results`.

    Returns:
        The requested size, capped at `max_results`.
    """
    if limit is None:
        limit = default if default is not None else settings.max_results
    return min(limit, settings.max_results)
