"""Seed script to populate the local dev database with the initial public bookmarks.

Usage:
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate --force
    PYTHONPATH=backend/src python backend/scripts/seed_data.py clear
"""

import argparse
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings
from models import Bookmark
from schemas.bookmark import BookmarkInput
from services.bookmark_service import delete_bookmarks_where, insert_bookmark

# Owner of the initial public bookmarks
SEED_USER_ID = '39108679-04a7-451e-aff3-207eb40c3263'

SEED_BOOKMARKS = [
    {
        'name': 'Share coding knowledge – CodepediaOrg',
        'location': 'https://www.codepedia.org/',
        'description': (
            'Coding knowledge hub, providing free educational content for professionals '
            'involved in software development. The website covers different topics and '
            'technologies with posts whose difficulty levels range from beginner to '
            '“hard-core” programming.'
        ),
        'tags': ['programming', 'blog'],
    },
    {
        'name': 'Bookmarks Manager for Developers & Co',
        'location': 'https://www.bookmarks.dev/',
        'description': 'Bookmarks Manager for Developers & Co',
        'tags': ['programming', 'blog', 'resources'],
        'source_code_url': 'https://github.com/CodepediaOrg/bookmarks.dev',
    },
    {
        'name': 'Collection of public dev bookmarks, shared with from www.bookmarks.dev',
        'location': 'https://github.com/CodepediaOrg/bookmarks#readme',
        'description': (
            ':bookmark: :star: Collection of public dev bookmarks, shared with :heart: '
            'from www.bookmarks.dev - CodepediaOrg/bookmarks'
        ),
        'tags': ['programming', 'resource', 'blog', 'open-source'],
        'source_code_url': 'https://github.com/CodepediaOrg/bookmarks',
    },
]


def seed_inputs() -> list[BookmarkInput]:
    """The seed bookmarks as (public, English) bookmark inputs of the seed user."""
    return [
        BookmarkInput(user_id=SEED_USER_ID, public=True, language='en', **data)
        for data in SEED_BOOKMARKS
    ]


async def create_seed_bookmarks(session: AsyncSession) -> list[Bookmark]:
    """Insert the seed bookmarks. Does not commit."""
    bookmarks = [await insert_bookmark(session, data) for data in seed_inputs()]
    print(f'  Created {len(bookmarks)} public bookmarks')
    return bookmarks


async def clear_data(session: AsyncSession) -> int:
    """Delete the seed user's bookmarks. Does not commit."""
    deleted = await delete_bookmarks_where(session, Bookmark.user_id == SEED_USER_ID)
    print(f'  Deleted {deleted} bookmarks')
    return deleted


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            existing = (await session.execute(
                select(Bookmark.id).where(Bookmark.user_id == SEED_USER_ID).limit(1),
            )).first()

            if existing is not None:
                if force:
                    print('Existing data found, clearing first (--force)...')
                    await clear_data(session)
                    await session.flush()
                else:
                    print('Seed bookmarks already exist. Use --force to clear and re-seed.')
                    return

            print('Populating seed data...')
            await create_seed_bookmarks(session)
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Remove the seed bookmarks."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            print(f'Clearing bookmarks of seed user {SEED_USER_ID}...')
            await clear_data(session)
            await session.commit()
            print('Clear complete.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.dev_mode:
        print(
            "ERROR: Seed script requires DEV_MODE=true.\n"
            "This script modifies data directly and must only run against a local dev database."
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Seed the dev database with public bookmarks.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Insert the initial public bookmarks')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing seed bookmarks before populating',
    )

    subparsers.add_parser('clear', help='Remove the seed bookmarks')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
