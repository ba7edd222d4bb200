"""
SNApp Backend: Notes Route Handlers
=====================================

What:  CRUD endpoints for the note tree plus the outline of a stored note.
How:   Handlers extract path/query/body data and the authenticated user id,
       delegate to NoteService and set response headers.

Routes:
    GET    /api/notes                     list (X-Total-Count header)
    POST   /api/notes                     create → 201
    GET    /api/notes/{note_id}           fetch
    PATCH  /api/notes/{note_id}           rename and/or save content
    DELETE /api/notes/{note_id}           delete → 204
    GET    /api/notes/{note_id}/outline   headings with navigation URLs

Caching:
    Notes change on every save, so responses are marked no-store.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from snapp.auth import get_current_user_id
from snapp.database import get_db_session
from snapp.schemas.note import (
    ErrorResponse,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from snapp.schemas.outline import OutlineResponse
from snapp.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

NO_STORE = "no-store"


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the current user's notes",
)
async def list_notes(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    """Notes in tree order (oldest first). Untouched notes carry the welcome text."""
    result = await note_service.list_notes(db=db, user_id=user_id)
    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = NO_STORE
    return result


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a note",
    description=(
        "Creates an empty note. The requested name is sanitized and, when already "
        "in use, suffixed with the next free counter ('New Note 1', 'New Note 2', ...)."
    ),
)
async def create_note(
    payload: Optional[NoteCreate] = None,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    payload = payload or NoteCreate()
    return await note_service.create_note(db=db, user_id=user_id, base_name=payload.name)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single note",
)
async def get_note(
    response: Response,
    note_id: int = Path(ge=1),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    result = await note_service.get_note(db=db, user_id=user_id, note_id=note_id)
    response.headers["Cache-Control"] = NO_STORE
    return result


@router.patch(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Nothing to update or invalid name", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Rename a note or save its content",
)
async def update_note(
    payload: NoteUpdate,
    note_id: int = Path(ge=1),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    """
    Partial update. Clients send this when the user saves a dirty note or
    renames it in the tree; a successful response clears the dirty flag.
    """
    return await note_service.update_note(
        db=db,
        user_id=user_id,
        note_id=note_id,
        name=payload.name,
        content=payload.content,
    )


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: int = Path(ge=1),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db=db, user_id=user_id, note_id=note_id)
    return Response(status_code=204)


@router.get(
    "/notes/{note_id}/outline",
    response_model=OutlineResponse,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Get the header outline of a note",
    description=(
        "Returns the note's ATX headings in document order with 1-based line numbers "
        "and the URL that opens the note scrolled to each heading. Headings inside "
        "fenced code blocks are ignored. Pass tree=true to also get them nested by level."
    ),
)
async def get_outline(
    note_id: int = Path(ge=1),
    tree: bool = Query(default=False, description="Include headings nested by level"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> OutlineResponse:
    return await note_service.get_outline(db=db, user_id=user_id, note_id=note_id, tree=tree)
