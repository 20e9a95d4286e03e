"""Tests for bookmark business validation and description rendering."""
import pytest

from core.config import Settings
from schemas.bookmark import BookmarkInput
from services.bookmark_validation import (
    BOOKMARK_NOT_VALID,
    collect_bookmark_errors,
    render_description_html,
    resolve_description_html,
    validate_bookmark_input,
)
from services.exceptions import ValidationError


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="postgresql://test")


def make_input(**overrides: object) -> BookmarkInput:
    values = {
        "user_id": "user-1",
        "name": "Bookmarks.dev",
        "location": "https://www.bookmarks.dev",
        "tags": ["bookmarks", "dev"],
    }
    values.update(overrides)
    return BookmarkInput(**values)


class TestCollectBookmarkErrors:
    """Tests for the individual bookmark rules."""

    def test__collect_bookmark_errors__valid(self, settings: Settings) -> None:
        assert collect_bookmark_errors(make_input(), settings, "user-1") == []

    def test__collect_bookmark_errors__missing_attributes(self, settings: Settings) -> None:
        errors = collect_bookmark_errors(BookmarkInput(), settings)
        assert errors == [
            "Missing required attribute - userId",
            "Missing required attribute - name",
            "Missing required attribute - location",
            "Missing required attribute - tags",
        ]

    def test__collect_bookmark_errors__max_tags_is_allowed(self, settings: Settings) -> None:
        tags = [f"tag{i}" for i in range(settings.max_tags)]
        assert collect_bookmark_errors(make_input(tags=tags), settings) == []

    def test__collect_bookmark_errors__too_many_tags(self, settings: Settings) -> None:
        tags = [f"tag{i}" for i in range(settings.max_tags + 1)]
        assert collect_bookmark_errors(make_input(tags=tags), settings) == [
            "Too many tags have been submitted - max allowed 8",
        ]

    def test__collect_bookmark_errors__blocked_tags(self, settings: Settings) -> None:
        errors = collect_bookmark_errors(
            make_input(tags=["Awesome-Lists", "python"]), settings,
        )
        assert errors == ["The following tags are blocked: awesome-lists"]

    def test__collect_bookmark_errors__blocked_prefix_can_be_disabled(self) -> None:
        settings = Settings(
            _env_file=None, database_url="postgresql://test", BLOCKED_TAG_PREFIX="",
        )
        assert collect_bookmark_errors(make_input(tags=["awesome"]), settings) == []

    def test__collect_bookmark_errors__description_too_long(self, settings: Settings) -> None:
        errors = collect_bookmark_errors(make_input(description="a" * 1501), settings)
        assert errors == ["The description is too long. Only 1500 allowed"]

    def test__collect_bookmark_errors__description_too_many_lines(
        self,
        settings: Settings,
    ) -> None:
        errors = collect_bookmark_errors(make_input(description="a\n" * 101), settings)
        assert errors == ["The description has too many lines. Only 100 allowed"]

    def test__collect_bookmark_errors__trailing_newline_counts_as_a_line(
        self,
        settings: Settings,
    ) -> None:
        errors = collect_bookmark_errors(make_input(description="line\n" * 100), settings)
        assert errors == ["The description has too many lines. Only 100 allowed"]

    def test__collect_bookmark_errors__max_lines_allowed(self, settings: Settings) -> None:
        description = "\n".join(["line"] * 100)
        assert collect_bookmark_errors(make_input(description=description), settings) == []

    def test__collect_bookmark_errors__user_id_mismatch(self, settings: Settings) -> None:
        errors = collect_bookmark_errors(make_input(), settings, expected_user_id="user-2")
        assert errors == ["The userId of the bookmark does not match the userId parameter"]

    def test__collect_bookmark_errors__user_id_not_checked_without_expected(
        self,
        settings: Settings,
    ) -> None:
        assert collect_bookmark_errors(make_input(user_id="anyone"), settings) == []


class TestValidateBookmarkInput:
    """Tests for raising on invalid bookmarks."""

    def test__validate_bookmark_input__raises_with_all_errors(self, settings: Settings) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_bookmark_input(make_input(name=None, tags=[]), settings)
        assert exc_info.value.message == BOOKMARK_NOT_VALID
        assert exc_info.value.validation_errors == [
            "Missing required attribute - name",
            "Missing required attribute - tags",
        ]

    def test__validate_bookmark_input__valid(self, settings: Settings) -> None:
        validate_bookmark_input(make_input(), settings, "user-1")


class TestDescriptionHtml:
    """Tests for rendering markdown descriptions."""

    def test__render_description_html__markdown(self) -> None:
        html = render_description_html("# Title\n\n- one\n- two")
        assert "<h1>Title</h1>" in html
        assert "<li>one</li>" in html

    def test__render_description_html__fenced_code(self) -> None:
        html = render_description_html("```\nprint('hi')\n```")
        assert "<pre><code>" in html

    @pytest.mark.parametrize("description", [None, ""])
    def test__render_description_html__empty(self, description: str | None) -> None:
        assert render_description_html(description) is None

    def test__resolve_description_html__submitted_html_wins(self) -> None:
        data = make_input(description="**bold**", description_html="<b>kept</b>")
        assert resolve_description_html(data) == "<b>kept</b>"

    def test__resolve_description_html__rendered_when_missing(self) -> None:
        data = make_input(description="**bold**")
        assert resolve_description_html(data) == "<p><strong>bold</strong></p>"
