"""Tests for user data validation, list resolution and rating."""
from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.bookmark import Bookmark
from models.user_data import UserData
from schemas.bookmark import BookmarkInput
from schemas.user_data import RatingRequest, SavedSearch, UserDataInput
from services.bookmark_service import delete_bookmark, delete_bookmarks_where, insert_bookmark
from services.exceptions import NotFoundError, UserDataExistsError, ValidationError
from services.user_data_service import (
    collect_rating_errors,
    collect_user_data_errors,
    create_user_data,
    get_pinned_bookmarks,
    get_user_data,
    order_by_ids,
    rate_bookmark,
    update_user_data,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="postgresql://test", MAX_USER_LIST_LENGTH="3")


class TestCollectUserDataErrors:
    """Tests for user data validation messages."""

    def test__collect_user_data_errors__valid(self) -> None:
        data = UserDataInput(user_id="user-1", searches=[SavedSearch(text="python")])
        assert collect_user_data_errors("user-1", data) == []

    def test__collect_user_data_errors__user_id_mismatch(self) -> None:
        data = UserDataInput(user_id="user-2")
        assert collect_user_data_errors("user-1", data) == [
            "Missing or invalid userId in the request body",
        ]

    def test__collect_user_data_errors__blank_search_text(self) -> None:
        data = UserDataInput(user_id="user-1", searches=[SavedSearch(text="  ")])
        assert collect_user_data_errors("user-1", data) == [
            "Searches are not valid - search text is required",
        ]


class TestCollectRatingErrors:
    """Tests for rating input validation messages."""

    def test__collect_rating_errors__valid(self) -> None:
        rating = RatingRequest(rating_user_id="user-1", action="UNLIKE")
        assert collect_rating_errors("user-1", rating) == []

    def test__collect_rating_errors__missing_action(self) -> None:
        rating = RatingRequest(rating_user_id="user-1")
        assert collect_rating_errors("user-1", rating) == ["Missing required attributes - action"]

    def test__collect_rating_errors__wrong_user_and_action(self) -> None:
        rating = RatingRequest(rating_user_id="user-2", action="like")
        assert collect_rating_errors("user-1", rating) == [
            "The ratingUserId in the request.body must be the same as the userId request parameter",
            "Invalid value - rating action should be LIKE or UNLIKE",
        ]


class TestOrderByIds:
    """Tests for ordering loaded bookmarks by a stored id list."""

    def test__order_by_ids__follows_list_and_skips_missing(self) -> None:
        a = Bookmark(id=UUID(int=1), name="a", location="https://a.example.com")
        b = Bookmark(id=UUID(int=2), name="b", location="https://b.example.com")
        ordered = order_by_ids([a, b], [UUID(int=2), UUID(int=3), UUID(int=1)])
        assert ordered == [b, a]

    def test__order_by_ids__empty(self) -> None:
        assert order_by_ids([], []) == []


async def add_bookmark(
    db_session: AsyncSession,
    location: str,
    user_id: str = "user-1",
    public: bool = False,
) -> Bookmark:
    return await insert_bookmark(
        db_session,
        BookmarkInput(
            user_id=user_id, name="Listed", location=location, tags=["list"], public=public,
        ),
    )


class TestUserDataDocument:
    """Tests for storing user data."""

    async def test__create_user_data__twice(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        await create_user_data(db_session, "user-1", UserDataInput(user_id="user-1"), settings)
        with pytest.raises(UserDataExistsError):
            await create_user_data(
                db_session, "user-1", UserDataInput(user_id="user-1"), settings,
            )

    async def test__create_user_data__row_created_concurrently(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        """A row inserted after the existence check surfaces as UserDataExistsError."""
        await db_session.execute(insert(UserData).values(user_id="user-1"))
        with (
            patch(
                "services.user_data_service._find_user_data", AsyncMock(return_value=None),
            ),
            pytest.raises(UserDataExistsError),
        ):
            await create_user_data(
                db_session, "user-1", UserDataInput(user_id="user-1"), settings,
            )

    async def test__update_user_data__row_created_concurrently(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        await db_session.execute(insert(UserData).values(user_id="user-1"))
        with (
            patch(
                "services.user_data_service._find_user_data", AsyncMock(return_value=None),
            ),
            pytest.raises(UserDataExistsError),
        ):
            await update_user_data(
                db_session, "user-1", UserDataInput(user_id="user-1"), settings,
            )

    async def test__update_user_data__caps_pinned_and_history_only(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        ids = [UUID(int=i) for i in range(1, 6)]
        user_data = await update_user_data(
            db_session,
            "user-1",
            UserDataInput(user_id="user-1", pinned=ids, history=ids, favorites=ids),
            settings,
        )
        assert user_data.pinned == ids[:3]
        assert user_data.history == ids[:3]
        assert user_data.favorites == ids

    async def test__update_user_data__saved_search_extra_fields_kept(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        data = UserDataInput.model_validate(
            {"user_id": "user-1", "searches": [{"text": "[go]", "pinned_by_client": True}]},
        )
        user_data = await update_user_data(db_session, "user-1", data, settings)
        assert user_data.searches == [{"text": "[go]", "count": 0, "pinned_by_client": True}]

    async def test__get_user_data__missing(self, db_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await get_user_data(db_session, "nobody")

    async def test__get_pinned_bookmarks__hides_private_bookmarks_of_others(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        own = await add_bookmark(db_session, "https://a.example.com")
        foreign_private = await add_bookmark(db_session, "https://b.example.com", "user-2")
        foreign_public = await add_bookmark(
            db_session, "https://c.example.com", "user-2", public=True,
        )
        await update_user_data(
            db_session,
            "user-1",
            UserDataInput(
                user_id="user-1",
                pinned=[foreign_public.id, foreign_private.id, own.id],
            ),
            settings,
        )

        pinned = await get_pinned_bookmarks(db_session, "user-1")
        assert [b.id for b in pinned] == [foreign_public.id, own.id]

    async def test__delete_bookmark__removes_id_from_every_users_lists(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        shared = await add_bookmark(db_session, "https://a.example.com", public=True)
        kept = await add_bookmark(db_session, "https://b.example.com", public=True)
        for user_id in ("user-1", "user-2"):
            await update_user_data(
                db_session,
                user_id,
                UserDataInput(
                    user_id=user_id,
                    read_later=[shared.id, kept.id],
                    likes=[shared.id],
                    favorites=[kept.id, shared.id],
                ),
                settings,
            )

        await delete_bookmark(db_session, "user-1", shared.id)

        for user_id in ("user-1", "user-2"):
            user_data = await get_user_data(db_session, user_id)
            assert user_data.read_later == [kept.id]
            assert user_data.likes == []
            assert user_data.favorites == [kept.id]

    async def test__delete_bookmarks_where__removes_all_ids_keeping_order(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        first = await add_bookmark(db_session, "https://a.example.com")
        kept = await add_bookmark(db_session, "https://b.example.com", user_id="user-2")
        second = await add_bookmark(db_session, "https://c.example.com")
        await update_user_data(
            db_session,
            "user-2",
            UserDataInput(
                user_id="user-2",
                history=[first.id, kept.id, second.id],
                pinned=[second.id],
            ),
            settings,
        )

        deleted = await delete_bookmarks_where(db_session, Bookmark.user_id == "user-1")

        assert deleted == 2
        user_data = await get_user_data(db_session, "user-2")
        assert user_data.history == [kept.id]
        assert user_data.pinned == []


class TestRateBookmark:
    """Tests for liking and unliking bookmarks."""

    async def test__rate_bookmark__like_then_unlike(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        bookmark = await add_bookmark(db_session, "https://a.example.com", "user-2", public=True)
        await create_user_data(db_session, "user-1", UserDataInput(user_id="user-1"), settings)

        liked = await rate_bookmark(
            db_session, "user-1", bookmark.id, RatingRequest(rating_user_id="user-1", action="LIKE"),
        )
        assert liked.like_count == 1
        assert (await get_user_data(db_session, "user-1")).likes == [bookmark.id]

        unliked = await rate_bookmark(
            db_session, "user-1", bookmark.id,
            RatingRequest(rating_user_id="user-1", action="UNLIKE"),
        )
        assert unliked.like_count == 0
        assert (await get_user_data(db_session, "user-1")).likes == []

    async def test__rate_bookmark__private_bookmark_of_other_user(
        self,
        db_session: AsyncSession,
        settings: Settings,
    ) -> None:
        bookmark = await add_bookmark(db_session, "https://a.example.com", "user-2")
        await create_user_data(db_session, "user-1", UserDataInput(user_id="user-1"), settings)

        with pytest.raises(NotFoundError):
            await rate_bookmark(
                db_session, "user-1", bookmark.id,
                RatingRequest(rating_user_id="user-1", action="LIKE"),
            )

    async def test__rate_bookmark__without_user_data(self, db_session: AsyncSession) -> None:
        bookmark = await add_bookmark(db_session, "https://a.example.com", public=True)
        with pytest.raises(NotFoundError):
            await rate_bookmark(
                db_session, "user-1", bookmark.id,
                RatingRequest(rating_user_id="user-1", action="LIKE"),
            )

    async def test__rate_bookmark__invalid_input(self, db_session: AsyncSession) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await rate_bookmark(
                db_session, "user-1", UUID(int=1), RatingRequest(rating_user_id="user-1"),
            )
        assert exc_info.value.message == "Rating bookmark input is not valid"
