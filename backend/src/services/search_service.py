"""
Search over bookmarks: full-text terms combined with structured filters.

Search text understands a small query language on top of plain words:

    [machine learning]  only bookmarks tagged "machine learning" (all bracketed tags must match)
    site:github.com     location contains "github.com"
    lang:en             bookmark language is "en"

Everything else is matched with PostgreSQL full-text search (websearch syntax, so
quoted phrases, `or` and `-excluded` words work). Tags are part of the searched
document, and a search word equal to a tag only raises the rank.
"""
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from sqlalchemy import String, case, func, literal, select
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from services.utils import escape_ilike

logger = logging.getLogger(__name__)

TEXT_SEARCH_CONFIG = "simple"

TAG_TOKEN_PATTERN = re.compile(r"\[([^\[\]]*)\]")
SITE_PREFIX = "site:"
LANGUAGE_PREFIX = "lang:"

# Added to ts_rank when one of the search words is a tag of the bookmark
TAG_MATCH_SCORE = 0.5


@dataclass
class SearchQuery:
    """Search text split into full-text terms and structured filters."""

    terms: str = ""
    tags: list[str] = field(default_factory=list)
    site: str | None = None
    language: str | None = None

    @property
    def has_filters(self) -> bool:
        return bool(self.tags or self.site or self.language)

    def term_words(self) -> list[str]:
        """
        Lower-cased words of the terms, used to match tags.

        Websearch operators (quotes, leading '-', the word 'or') are not tag candidates.
        The whole terms phrase is included too so multi-word tags can match.
        """
        words: list[str] = []
        for token in self.terms.replace('"', " ").split():
            word = token.lower()
            if word == "or" or word.startswith("-"):
                continue
            if word not in words:
                words.append(word)
        phrase = " ".join(words)
        if len(words) > 1 and phrase not in words:
            words.append(phrase)
        return words


def parse_search_text(text: str) -> SearchQuery:
    """
    Parse search text into terms, tag filters, a site filter and a language filter.

    Examples:
        >>> parse_search_text("[java] [spring boot] site:baeldung.com lang:en testing")
        SearchQuery(terms='testing', tags=['java', 'spring boot'], site='baeldung.com', language='en')
    """
    tags: list[str] = []
    for raw_tag in TAG_TOKEN_PATTERN.findall(text):
        tag = " ".join(raw_tag.split()).lower()
        if tag and tag not in tags:
            tags.append(tag)

    remainder = TAG_TOKEN_PATTERN.sub(" ", text)
    terms: list[str] = []
    site = None
    language = None
    for token in remainder.split():
        lower = token.lower()
        if lower.startswith(SITE_PREFIX) and len(token) > len(SITE_PREFIX):
            site = token[len(SITE_PREFIX):]
        elif lower.startswith(LANGUAGE_PREFIX) and len(token) > len(LANGUAGE_PREFIX):
            language = lower[len(LANGUAGE_PREFIX):]
        else:
            terms.append(token)

    return SearchQuery(terms=" ".join(terms), tags=tags, site=site, language=language)


def dedupe_by_location(
    own_bookmarks: Iterable[Bookmark],
    other_bookmarks: Iterable[Bookmark],
) -> list[Bookmark]:
    """
    Append other bookmarks to the user's own, dropping locations already present.

    The user's own copy of a location always wins over a public copy of another user.
    Order within each group is preserved.
    """
    merged: list[Bookmark] = []
    seen_locations: set[str] = set()
    for bookmark in [*own_bookmarks, *other_bookmarks]:
        if bookmark.location in seen_locations:
            continue
        seen_locations.add(bookmark.location)
        merged.append(bookmark)
    return merged


async def _is_empty_tsquery(db: AsyncSession, terms: str) -> bool:
    """True when the terms produce no lexemes at all (e.g. only punctuation)."""
    tsquery_text = await db.scalar(
        select(func.cast(func.websearch_to_tsquery(TEXT_SEARCH_CONFIG, terms), String)),
    )
    return not (tsquery_text and tsquery_text.strip())


async def _search(
    db: AsyncSession,
    search_query: SearchQuery,
    limit: int,
    *criteria,
) -> list[Bookmark]:
    """Run one search over the bookmarks matching the scoping criteria."""
    query = select(Bookmark).where(*criteria)

    if search_query.tags:
        query = query.where(Bookmark.tags.contains(search_query.tags))
    if search_query.site:
        query = query.where(
            Bookmark.location.ilike(f"%{escape_ilike(search_query.site)}%"),
        )
    if search_query.language:
        query = query.where(Bookmark.language == search_query.language)

    if not search_query.terms:
        query = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    else:
        tsquery = func.websearch_to_tsquery(TEXT_SEARCH_CONFIG, search_query.terms)
        query = query.where(Bookmark.search_vector.bool_op("@@")(tsquery))
        words = search_query.term_words()
        if words:
            tag_match = Bookmark.tags.overlap(literal(words, ARRAY(String)))
            tag_score = case((tag_match, TAG_MATCH_SCORE), else_=0)
        else:
            tag_score = literal(0)
        rank = func.coalesce(func.ts_rank(Bookmark.search_vector, tsquery), 0) + tag_score
        query = query.order_by(rank.desc(), Bookmark.created_at.desc(), Bookmark.id.desc())

    result = await db.execute(query.limit(limit))
    return list(result.scalars().all())


async def find_bookmarks(  # noqa: PLR0913
    db: AsyncSession,
    text: str,
    limit: int,
    domain: Literal["public", "personal"],
    user_id: str | None = None,
    include_public: bool = False,
) -> list[Bookmark]:
    """
    Search bookmarks with text that may contain tag, site and language filters.

    Args:
        db: Database session.
        text: Raw search text (see module docstring for the syntax).
        limit: Maximum number of results.
        domain:
            - "public": search public bookmarks only.
            - "personal": search the bookmarks of `user_id`.
        user_id: Required for the personal domain.
        include_public:
            Personal domain only. Append public bookmarks of other users, skipping
            locations the user already bookmarked.

    Returns:
        Matching bookmarks, best match first (newest first when there are no terms).
    """
    if domain == "personal" and not user_id:
        raise ValueError("user_id is required to search personal bookmarks")

    search_query = parse_search_text(text)
    if not search_query.terms and not search_query.has_filters:
        return []
    if search_query.terms and await _is_empty_tsquery(db, search_query.terms):
        return []

    if domain == "public":
        return await _search(db, search_query, limit, Bookmark.public.is_(True))

    own = await _search(db, search_query, limit, Bookmark.user_id == user_id)
    if not include_public or len(own) >= limit:
        return own

    public = await _search(
        db, search_query, limit,
        Bookmark.public.is_(True),
        Bookmark.user_id != user_id,
    )
    merged = dedupe_by_location(own, public)
    logger.debug(
        "Personal search for %s: %d own and %d public results", user_id, len(own), len(public),
    )
    return merged[:limit]
