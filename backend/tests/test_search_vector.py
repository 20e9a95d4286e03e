"""Tests for the generated search_vector column."""
import importlib.util
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import SEARCH_VECTOR_EXPRESSION, TAGS_TEXT_FUNCTION_DDL, Bookmark
from schemas.bookmark import BookmarkInput
from services.bookmark_service import insert_bookmark, replace_bookmark

MIGRATION_PATH = (
    Path(__file__).parents[1]
    / 'src/db/migrations/versions/8e3d47b1c0a6_add_search_vector_column_and_gin_index.py'
)


async def matches(db_session: AsyncSession, bookmark: Bookmark, query: str) -> bool:
    """Check the stored vector (deferred on the model) against a websearch query."""
    result = await db_session.execute(
        text(
            "SELECT search_vector @@ websearch_to_tsquery('simple', :query) "
            'FROM bookmarks WHERE id = :id',
        ),
        {'query': query, 'id': bookmark.id},
    )
    return bool(result.scalar_one())


async def test__search_vector__covers_all_searchable_fields(
    db_session: AsyncSession,
) -> None:
    """Name, location, tags, description and source code URL are all searchable."""
    bookmark = await insert_bookmark(db_session, BookmarkInput(
        user_id='user-1',
        name='Asyncio cookbook',
        location='https://docs.example.org/asyncio',
        description='Recipes for structured concurrency',
        source_code_url='https://github.com/example/recipes',
        tags=['python'],
    ))

    assert await matches(db_session, bookmark, 'asyncio')
    assert await matches(db_session, bookmark, 'docs.example.org')
    assert await matches(db_session, bookmark, 'concurrency')
    assert await matches(db_session, bookmark, 'github.com')
    assert await matches(db_session, bookmark, 'python')
    assert not await matches(db_session, bookmark, 'kotlin')


async def test__search_vector__multi_word_tags_and_exclusion(db_session: AsyncSession) -> None:
    """Tag words take part in websearch matching, including excluded words."""
    bookmark = await insert_bookmark(db_session, BookmarkInput(
        user_id='user-1',
        name='Python web',
        location='https://a.example.com',
        tags=['python', 'spring boot'],
    ))

    assert await matches(db_session, bookmark, 'boot')
    assert await matches(db_session, bookmark, '"spring boot"')
    assert not await matches(db_session, bookmark, 'python -web')


async def test__search_vector__recomputed_on_update(db_session: AsyncSession) -> None:
    """The generated column follows updates of its source columns."""
    data = BookmarkInput(
        user_id='user-1', name='Old title', location='https://a.example.com', tags=['misc'],
    )
    bookmark = await insert_bookmark(db_session, data)
    assert await matches(db_session, bookmark, 'old')

    await replace_bookmark(db_session, bookmark, data.model_copy(update={'name': 'Fresh title'}))

    assert await matches(db_session, bookmark, 'fresh')
    assert not await matches(db_session, bookmark, 'old')


def test__search_vector__migration_matches_model() -> None:
    """The migration creates the column with the expression the model declares."""
    spec = importlib.util.spec_from_file_location('search_vector_migration', MIGRATION_PATH)
    migration = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(migration)
    assert migration.SEARCH_VECTOR_EXPRESSION == SEARCH_VECTOR_EXPRESSION
    assert migration.TAGS_TEXT_FUNCTION_DDL == TAGS_TEXT_FUNCTION_DDL
