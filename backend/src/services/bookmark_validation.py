"""Business validation of submitted bookmarks and description rendering."""
import markdown

from core.config import Settings
from schemas.bookmark import BookmarkInput
from services.exceptions import ValidationError

BOOKMARK_NOT_VALID = "The bookmark you submitted is not valid"

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def collect_bookmark_errors(
    data: BookmarkInput,
    settings: Settings,
    expected_user_id: str | None = None,
) -> list[str]:
    """
    Run every bookmark rule and return the messages of the failed ones.

    Args:
        data: The submitted bookmark.
        settings: Limits (max tags, blocked tag prefix, description size).
        expected_user_id:
            User id from the request path. When given, the bookmark's user id must
            match it. Admin routes pass None to skip the check.

    Returns:
        Human readable messages, empty when the bookmark is valid.
    """
    errors: list[str] = []

    if not data.user_id:
        errors.append("Missing required attribute - userId")
    if not data.name:
        errors.append("Missing required attribute - name")
    if not data.location:
        errors.append("Missing required attribute - location")
    if not data.tags:
        errors.append("Missing required attribute - tags")
    elif len(data.tags) > settings.max_tags:
        errors.append(f"Too many tags have been submitted - max allowed {settings.max_tags}")

    prefix = settings.blocked_tag_prefix.lower()
    if prefix:
        blocked = [tag for tag in data.tags if tag.startswith(prefix)]
        if blocked:
            errors.append("The following tags are blocked: " + " ".join(blocked))

    if data.description:
        if len(data.description) > settings.max_description_length:
            errors.append(
                "The description is too long. Only "
                f"{settings.max_description_length} allowed",
            )
        line_count = len(data.description.split("\n"))
        if line_count > settings.max_description_lines:
            errors.append(
                "The description has too many lines. Only "
                f"{settings.max_description_lines} allowed",
            )

    if expected_user_id is not None and data.user_id and data.user_id != expected_user_id:
        errors.append("The userId of the bookmark does not match the userId parameter")

    return errors


def validate_bookmark_input(
    data: BookmarkInput,
    settings: Settings,
    expected_user_id: str | None = None,
) -> None:
    """
    Validate a submitted bookmark.

    Raises:
        ValidationError: With all failed checks, if any.
    """
    errors = collect_bookmark_errors(data, settings, expected_user_id)
    if errors:
        raise ValidationError(BOOKMARK_NOT_VALID, errors)


def render_description_html(description: str | None) -> str | None:
    """Render a markdown description to HTML. Returns None for an empty description."""
    if not description:
        return None
    return markdown.markdown(description, extensions=MARKDOWN_EXTENSIONS)


def resolve_description_html(data: BookmarkInput) -> str | None:
    """Use the submitted HTML when present, otherwise render the markdown description."""
    if data.description_html:
        return data.description_html
    return render_description_html(data.description)
