"""Tests for token claim handling and path user checks."""
import pytest
from fastapi import HTTPException

from core.auth import (
    CurrentUser,
    ensure_user_matches,
    ensure_user_matches_or_admin,
    require_admin,
    user_from_claims,
)
from core.config import Settings
from services.exceptions import UserIdMismatchError


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="postgresql://test", ADMIN_ROLE="ROLE_ADMIN")


class TestUserFromClaims:
    """Tests for building the current user from decoded claims."""

    def test__user_from_claims__roles_from_realm_access(self, settings: Settings) -> None:
        user = user_from_claims(
            {"sub": "user-1", "realm_access": {"roles": ["ROLE_USER", "ROLE_ADMIN"]}},
            settings,
        )
        assert user.user_id == "user-1"
        assert user.roles == frozenset({"ROLE_USER", "ROLE_ADMIN"})
        assert user.is_admin is True

    def test__user_from_claims__no_realm_access(self, settings: Settings) -> None:
        user = user_from_claims({"sub": "user-1"}, settings)
        assert user.roles == frozenset()
        assert user.is_admin is False

    def test__user_from_claims__missing_sub(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            user_from_claims({"realm_access": {"roles": []}}, settings)
        assert exc_info.value.status_code == 401

    def test__user_from_claims__custom_admin_role(self) -> None:
        settings = Settings(
            _env_file=None, database_url="postgresql://test", ADMIN_ROLE="bookmarks-admin",
        )
        user = user_from_claims(
            {"sub": "user-1", "realm_access": {"roles": ["ROLE_ADMIN"]}}, settings,
        )
        assert user.is_admin is False


class TestPathUserChecks:
    """Tests for matching the path user id against the caller."""

    def test__ensure_user_matches__same_user(self) -> None:
        ensure_user_matches("user-1", CurrentUser(user_id="user-1"))

    def test__ensure_user_matches__other_user(self) -> None:
        with pytest.raises(UserIdMismatchError):
            ensure_user_matches("user-2", CurrentUser(user_id="user-1"))

    def test__ensure_user_matches__admin_is_not_exempt(self) -> None:
        admin = CurrentUser(user_id="admin", roles=frozenset({"ROLE_ADMIN"}))
        with pytest.raises(UserIdMismatchError):
            ensure_user_matches("user-2", admin)

    def test__ensure_user_matches_or_admin(self) -> None:
        admin = CurrentUser(user_id="admin", roles=frozenset({"ROLE_ADMIN"}))
        ensure_user_matches_or_admin("user-2", admin)
        with pytest.raises(UserIdMismatchError):
            ensure_user_matches_or_admin("user-2", CurrentUser(user_id="user-1"))


class TestRequireAdmin:
    """Tests for the admin dependency."""

    async def test__require_admin__admin(self) -> None:
        admin = CurrentUser(user_id="admin", roles=frozenset({"ROLE_ADMIN"}))
        assert await require_admin(admin) is admin

    async def test__require_admin__regular_user(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(CurrentUser(user_id="user-1"))
        assert exc_info.value.status_code == 403
