"""
SNApp Backend: Live Outline Route
===================================

What:  POST /api/outline returns the headings of unsaved editor content.
Why:   The outline panel follows the editor as the user types, before the
       note is saved, so it cannot read the stored content.
How:   Runs the posted content through the memoized header extractor;
       repeated requests with unchanged content are served from the cache.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from snapp.auth import get_current_user_id
from snapp.schemas.note import ErrorResponse
from snapp.schemas.outline import OutlineRequest, OutlineResponse
from snapp.services.outline_service import build_outline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Outline"])


@router.post(
    "/outline",
    response_model=OutlineResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
    summary="Extract the header outline of Markdown content",
)
async def extract_outline(
    payload: OutlineRequest,
    note_id: Optional[int] = Query(
        default=None,
        ge=1,
        description="Note being edited; when given, headings carry navigation URLs",
    ),
    tree: bool = Query(default=False, description="Include headings nested by level"),
    user_id: str = Depends(get_current_user_id),
) -> OutlineResponse:
    return build_outline(payload.content, note_id=note_id, tree=tree)
