"""
SNApp Backend: Note SQLAlchemy Model
======================================

What:  ORM model for the `note` table.
Who:   Used by NoteService and SearchService; read by Alembic.

Table Design:
    - (note_id, user_id) composite primary key: note ids are sequential per
      user, so every account starts at note 1 and URLs stay short
      (/note/3). The application allocates note_id (max + 1).
    - content is nullable: NULL marks a note that was never edited and is
      served with the welcome document instead.
    - user_id index: every query is scoped to a single user.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from snapp.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single Markdown note owned by one user.

    Lifecycle:
        1. Created with a sanitized, de-duplicated name and content ""
        2. Updated on every save (name and/or content, updated_at refreshed)
        3. Deleted permanently on request
    """

    __tablename__ = "note"

    note_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        comment="Per-user sequential note id",
    )

    # Opaque id issued by the upstream auth provider
    user_id: Mapped[str] = mapped_column(
        String(191),
        primary_key=True,
        comment="Owner id from the auth provider",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Sanitized display name, unique per user by counter suffix",
    )

    content: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Markdown body; NULL means the untouched welcome note",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Last save (UTC)",
    )

    __table_args__ = (
        Index("note_user_id_idx", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(note_id={self.note_id}, user_id='{self.user_id}', "
            f"name='{self.name}')>"
        )
