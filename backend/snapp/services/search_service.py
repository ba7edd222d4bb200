"""
SNApp Backend: Note Search Service
====================================

What:  Substring search across a user's notes with context snippets.
How:   The database narrows candidates with a case-insensitive LIKE; the
       pure helpers below compute the snippet, first-match line and match
       count for each candidate in Python, and results are ranked by match
       count.
Who:   Called by GET /api/search.

Helpers (pure, case-insensitive, a blank query counts as empty):
    generate_snippet()  → up to `size` visible characters around the first
                          match, "..." marking each truncated side
    find_line_number()  → 1-based line of the first match (1 if none)
    count_matches()     → non-overlapping occurrences (0 for empty query)
"""

import logging
import math
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snapp.config import settings
from snapp.exceptions import DatabaseError, ValidationError
from snapp.models.note import Note
from snapp.schemas.search import SearchResponse, SearchResultItem
from snapp.services.selection import note_url

logger = logging.getLogger(__name__)

# Fixed snippet budget; the deployed value comes from settings.snippet_size
SNIPPET_SIZE = 80
# Characters of context kept on each side of the match before the budget cut
SNIPPET_CONTEXT = 50
ELLIPSIS = "..."


def _head(content: str, size: int) -> str:
    return content[:size] + (ELLIPSIS if len(content) > size else "")


def generate_snippet(content: str, query: str, size: int = SNIPPET_SIZE) -> str:
    """
    Return the context around the first case-insensitive match of `query`.

    Example:
        >>> generate_snippet("Hooks are great in react apps", "react")
        'Hooks are great in react apps'
    """
    if not query.strip():
        return _head(content, size)

    match_index = content.lower().find(query.lower())
    if match_index == -1:
        return _head(content, size)

    start = max(0, match_index - SNIPPET_CONTEXT)
    end = min(len(content), match_index + len(query) + SNIPPET_CONTEXT)
    end = min(end, start + size)

    snippet = content[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS
    return snippet


def find_line_number(content: str, query: str) -> int:
    """1-based line number of the first case-insensitive match, or 1."""
    if not query.strip():
        return 1

    match_index = content.lower().find(query.lower())
    if match_index == -1:
        return 1
    return content.count("\n", 0, match_index) + 1


def count_matches(content: str, query: str) -> int:
    """
    Count case-insensitive occurrences, advancing past each hit.

    "aaaa" contains "aa" twice, not three times.
    """
    if not query.strip():
        return 0

    haystack = content.lower()
    needle = query.lower()
    count = 0
    pos = haystack.find(needle)
    while pos != -1:
        count += 1
        pos = haystack.find(needle, pos + len(needle))
    return count


class SearchService:
    """Paginated substring search over the current user's notes."""

    async def search_notes(
        self,
        db: AsyncSession,
        user_id: str,
        query: str,
        page: int = 1,
    ) -> SearchResponse:
        """
        Search the user's notes for `query`.

        Ranking is by number of matches (descending), ties broken by note id.

        Raises:
            ValidationError: blank query
            DatabaseError: the candidate query failed
        """
        if not query.strip():
            raise ValidationError(message="Search query is required", field="q")

        per_page = settings.search_results_per_page

        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .where(Note.content.is_not(None))
                .where(Note.content.icontains(query, autoescape=True))
            )
            candidates = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error searching notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        scored = []
        for note in candidates:
            content = note.content or ""
            matches = count_matches(content, query)
            # LIKE and str.lower() disagree on some non-ASCII case folds
            if matches:
                scored.append((matches, note))
        scored.sort(key=lambda item: (-item[0], item[1].note_id))

        total_results = len(scored)
        total_pages = math.ceil(total_results / per_page)
        offset = (page - 1) * per_page

        results: List[SearchResultItem] = []
        for matches, note in scored[offset:offset + per_page]:
            content = note.content or ""
            line_number = find_line_number(content, query)
            results.append(
                SearchResultItem(
                    note_id=note.note_id,
                    note_name=note.name,
                    content_snippet=generate_snippet(content, query, settings.snippet_size),
                    line_number=line_number,
                    total_matches=matches,
                    url=note_url(note.note_id, line_number),
                )
            )

        logger.info(
            "Search by %s: %d result(s), page %d/%d",
            user_id,
            total_results,
            page,
            total_pages,
        )
        return SearchResponse(
            results=results,
            total_results=total_results,
            current_page=page,
            total_pages=total_pages,
        )


search_service = SearchService()
