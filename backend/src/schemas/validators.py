"""
Shared validation functions for Pydantic schemas.

Business rules that produce a list of messages (missing fields, blocked tags, ...)
live in services.bookmark_validation; these helpers only normalize input shape.
"""
import re

MAX_TAG_LENGTH = 100

# Square brackets delimit tags in search text and commas separate tags in clients,
# so neither may appear inside a tag. Spaces are allowed ("machine learning").
TAG_PATTERN = re.compile(r"^[^\[\],]+$")


def validate_and_normalize_tag(tag: str) -> str:
    """
    Normalize and validate a single tag.

    Args:
        tag: The tag string to validate.

    Returns:
        The normalized tag (lowercase, trimmed, inner whitespace collapsed).

    Raises:
        ValueError: If tag is empty, too long or has invalid characters.
    """
    normalized = re.sub(r"\s+", " ", tag).strip().lower()
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if len(normalized) > MAX_TAG_LENGTH:
        raise ValueError(f"Tag '{normalized}' exceeds {MAX_TAG_LENGTH} characters")
    if not TAG_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid tag format: '{normalized}'. Tags may not contain '[', ']' or ','.",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of tags.

    Empty strings are dropped and duplicates (after normalization) are removed,
    keeping the first occurrence so the submitted order is preserved.

    Raises:
        ValueError: If any tag has invalid format.
    """
    normalized: list[str] = []
    for tag in tags:
        if not tag or not tag.strip():
            continue
        value = validate_and_normalize_tag(tag)
        if value not in normalized:
            normalized.append(value)
    return normalized
