"""
SNApp Backend: Outline Schemas
================================

What:  Heading records produced by the Markdown header extractor and the
       request/response models of the outline endpoints.

Heading ids look like `header-<sequence>-<level>`. They are unique within
one extraction and are recomputed on every parse, so clients must not
persist them.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from snapp.schemas.note import MAX_CONTENT_LENGTH


class Heading(BaseModel):
    """One ATX heading found in a note."""
    id: str = Field(description="header-<sequence>-<level>, unique per extraction")
    text: str = Field(description="Heading text without the leading # run, stripped")
    content: str = Field(description="Original heading line, trailing whitespace removed")
    line: int = Field(ge=1, description="1-based line number in the note")
    level: int = Field(ge=1, description="Number of leading # characters (not clamped)")

    model_config = {"frozen": True}


class HeadingNode(BaseModel):
    """A heading with the headings nested below it."""
    id: str
    text: str
    content: str
    line: int
    level: int
    children: List["HeadingNode"] = Field(default_factory=list)


HeadingNode.model_rebuild()


class OutlineEntry(Heading):
    """A heading plus the editor URL that scrolls to it."""
    url: Optional[str] = Field(default=None, description="Navigation URL, e.g. /note/3?line=12")


class OutlineRequest(BaseModel):
    """Body of POST /api/outline; content of the editor as typed."""
    content: Optional[str] = Field(
        default=None,
        max_length=MAX_CONTENT_LENGTH,
        description="Markdown content",
    )


class OutlineResponse(BaseModel):
    """Headings of a note in document order, optionally nested."""
    note_id: Optional[int] = Field(default=None, description="Note the outline belongs to")
    headings: List[OutlineEntry] = Field(description="Headings in document order")
    tree: Optional[List[HeadingNode]] = Field(
        default=None,
        description="Headings nested by level (only when requested)",
    )
