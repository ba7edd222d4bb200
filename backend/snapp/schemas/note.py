"""
SNApp Backend: Note Request/Response Schemas
==============================================

What:  Pydantic models forming the API contract for notes, errors and health.
How:   FastAPI validates request bodies against these models, serializes
       responses through them and builds the OpenAPI document from them.

Schemas are separate from the SQLAlchemy model: the API never exposes
user_id, and it reports `id` where the table says `note_id`.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Upper bound on note bodies accepted from clients (characters)
MAX_CONTENT_LENGTH = 500_000


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /api/notes. The name is sanitized and de-duplicated server-side."""
    name: str = Field(default="New Note", max_length=1000, description="Requested note name")


class NoteUpdate(BaseModel):
    """
    Body of PATCH /api/notes/{id}.

    Either field may be omitted; at least one must be present. Content may
    be an empty string (a cleared note) but not null.
    """
    name: Optional[str] = Field(default=None, max_length=1000, description="New note name")
    content: Optional[str] = Field(
        default=None,
        max_length=MAX_CONTENT_LENGTH,
        description="New Markdown content",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Note name must not be blank")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    Full representation of a note.

    `content` is never null in responses: untouched notes carry the welcome
    document.
    """
    id: int = Field(description="Per-user note id")
    name: str = Field(description="Display name")
    content: str = Field(description="Markdown content")
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last save time (UTC ISO 8601)")


class NoteListResponse(BaseModel):
    """Every note of the current user, oldest first (the tree order)."""
    notes: List[NoteResponse] = Field(description="The user's notes")
    total_count: int = Field(description="Number of notes")


class ErrorResponse(BaseModel):
    """
    Standard error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "note with ID '7' was not found",
            "request_id": "1f3a9c2e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health of the service and its database."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
