"""
SNApp Backend: Search Route Handler
=====================================

What:  GET /api/search?q=<query>&page=<n>
How:   Delegates to SearchService; results are ranked by number of
       case-insensitive substring matches and paginated server-side.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from snapp.auth import get_current_user_id
from snapp.database import get_db_session
from snapp.schemas.note import ErrorResponse
from snapp.schemas.search import SearchResponse
from snapp.services.search_service import search_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        400: {"description": "Blank query", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Search the current user's notes",
)
async def search_notes(
    q: str = Query(default="", max_length=500, description="Text to look for (case-insensitive)"),
    page: int = Query(default=1, ge=1, description="1-based results page"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SearchResponse:
    """
    Each result carries a snippet around the first match, that match's line
    number, the total match count and the URL that opens the note there.
    """
    return await search_service.search_notes(db=db, user_id=user_id, query=q, page=page)
