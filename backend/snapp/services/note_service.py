"""
SNApp Backend: Note Service
=============================

What:  Business logic for the note tree: list, fetch, create, rename/edit,
       delete, and the outline of a stored note.
How:   Stateless methods that receive the request's AsyncSession and the
       authenticated user id. Every query is scoped to that user.
Who:   Called by the /api/notes route handlers.

Creation rules:
    - Names are sanitized (forbidden filename characters and control
      characters removed, whitespace collapsed, 255 characters max) and
      fall back to "New Note" when nothing is left.
    - A name already in use gets the next counter: "New Note",
      "New Note 1", "New Note 2", ...
    - note_id is max(note_id) + 1 for the user. Two concurrent creates can
      race for the same id; the loser hits the primary key, rolls back and
      retries with tenacity.

Reading rules:
    - NULL content (a note never edited) is served as the welcome document.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from snapp.config import settings
from snapp.exceptions import DatabaseError, NotFoundError, ValidationError
from snapp.models.note import Note
from snapp.schemas.note import NoteListResponse, NoteResponse
from snapp.schemas.outline import OutlineResponse
from snapp.services.outline_service import build_outline
from snapp.services.welcome_service import welcome_service

logger = logging.getLogger(__name__)

DEFAULT_NOTE_NAME = "New Note"
MAX_NAME_LENGTH = 255

_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_note_name(name: str) -> str:
    """
    Make a user-supplied name safe for display and storage.

    >>> sanitize_note_name('  My <invalid>   note?  ')
    'My invalid note'
    """
    cleaned = _INVALID_NAME_CHARS.sub("", name.strip())
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned).strip()
    return cleaned[:MAX_NAME_LENGTH]


def next_available_name(base_name: str, existing_names: Iterable[str]) -> str:
    """
    Pick the name for a new note given the user's names starting with `base_name`.

    The bare base counts as counter 0 and "base N" as counter N; names that
    merely start with the base ("New Notebook") are ignored. When a counter
    is taken the result is "base <highest + 1>".
    """
    pattern = re.compile(rf"^{re.escape(base_name)}\s(\d+)$")
    counters = []
    for name in existing_names:
        if name == base_name:
            counters.append(0)
            continue
        match = pattern.match(name)
        if match:
            counters.append(int(match.group(1)))

    if not counters:
        return base_name

    candidate = f"{base_name} {max(counters) + 1}"
    if len(candidate) > MAX_NAME_LENGTH:
        # Keep the counter; shorten the base instead
        suffix = f" {max(counters) + 1}"
        candidate = base_name[:MAX_NAME_LENGTH - len(suffix)].rstrip() + suffix
    return candidate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoteService:
    """
    Note operations for a single authenticated user.

    Error Handling:
        NotFoundError and ValidationError propagate unchanged.
        SQLAlchemy failures are logged and wrapped in DatabaseError.
    """

    async def _to_response(self, note: Note) -> NoteResponse:
        content = note.content
        if content is None:
            content = await welcome_service.get_content()
        return NoteResponse(
            id=note.note_id,
            name=note.name,
            content=content,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )

    async def _load(self, db: AsyncSession, user_id: str, note_id: int) -> Note:
        result = await db.execute(
            select(Note).where(Note.user_id == user_id, Note.note_id == note_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def list_notes(self, db: AsyncSession, user_id: str) -> NoteListResponse:
        """Every note of the user, oldest first."""
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(Note.created_at.asc(), Note.note_id.asc())
            )
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        items = [await self._to_response(note) for note in notes]
        return NoteListResponse(notes=items, total_count=len(items))

    async def get_note(self, db: AsyncSession, user_id: str, note_id: int) -> NoteResponse:
        """
        Fetch one note.

        Raises:
            NotFoundError: no such note for this user (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            note = await self._load(db, user_id, note_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )
        return await self._to_response(note)

    async def create_note(
        self,
        db: AsyncSession,
        user_id: str,
        base_name: str = DEFAULT_NOTE_NAME,
    ) -> NoteResponse:
        """
        Create an empty note with a unique name and the next per-user id.

        Raises:
            DatabaseError: insert failed, including when every retry lost
                the note id race.
        """
        base = sanitize_note_name(base_name) or DEFAULT_NOTE_NAME

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(IntegrityError),
                stop=stop_after_attempt(settings.note_create_max_attempts),
                wait=wait_exponential(multiplier=0.05, max=0.5) + wait_random(0, 0.05),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    note = await self._insert_note(db, user_id, base)
        except SQLAlchemyError as e:
            logger.error("Database error creating note for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create note. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Note %d created for %s: '%s'", note.note_id, user_id, note.name)
        return await self._to_response(note)

    async def _insert_note(self, db: AsyncSession, user_id: str, base: str) -> Note:
        max_result = await db.execute(
            select(func.max(Note.note_id)).where(Note.user_id == user_id)
        )
        next_note_id = (max_result.scalar() or 0) + 1

        names_result = await db.execute(
            select(Note.name).where(
                Note.user_id == user_id,
                Note.name.startswith(base, autoescape=True),
            )
        )
        name = next_available_name(base, names_result.scalars().all())

        now = _utcnow()
        note = Note(
            note_id=next_note_id,
            user_id=user_id,
            name=name,
            content="",
            created_at=now,
            updated_at=now,
        )
        db.add(note)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Note id %d for %s was taken concurrently", next_note_id, user_id)
            raise
        return note

    async def update_note(
        self,
        db: AsyncSession,
        user_id: str,
        note_id: int,
        name: Optional[str] = None,
        content: Optional[str] = None,
    ) -> NoteResponse:
        """
        Rename and/or replace the content of a note.

        Raises:
            ValidationError: nothing to update, or the name sanitizes to ""
            NotFoundError: no such note for this user
            DatabaseError: update failed
        """
        if name is None and content is None:
            raise ValidationError(message="Nothing to update: provide a name or content")

        clean_name = None
        if name is not None:
            clean_name = sanitize_note_name(name)
            if not clean_name:
                raise ValidationError(message="Note name must contain visible characters", field="name")

        try:
            note = await self._load(db, user_id, note_id)
            if clean_name is not None:
                note.name = clean_name
            if content is not None:
                note.content = content
            note.updated_at = _utcnow()
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to update note. Please try again.",
                context={"note_id": note_id},
            )

        logger.info(
            "Note %d updated for %s (name=%s, content=%s)",
            note_id,
            user_id,
            clean_name is not None,
            content is not None,
        )
        return await self._to_response(note)

    async def delete_note(self, db: AsyncSession, user_id: str, note_id: int) -> None:
        """
        Permanently delete a note.

        Raises:
            NotFoundError: no such note for this user
            DatabaseError: delete failed
        """
        try:
            note = await self._load(db, user_id, note_id)
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to delete note. Please try again.",
                context={"note_id": note_id},
            )
        logger.info("Note %d deleted for %s", note_id, user_id)

    async def get_outline(
        self,
        db: AsyncSession,
        user_id: str,
        note_id: int,
        tree: bool = False,
    ) -> OutlineResponse:
        """Headings of a stored note, each linking back to its line."""
        note = await self.get_note(db, user_id, note_id)
        return build_outline(note.content, note_id=note.id, tree=tree)


note_service = NoteService()
