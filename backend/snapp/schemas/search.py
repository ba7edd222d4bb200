"""
SNApp Backend: Search Schemas
===============================

What:  Response models for GET /api/search.
"""

from typing import List

from pydantic import BaseModel, Field


class SearchResultItem(BaseModel):
    """One matching note with the context of its first match."""
    note_id: int = Field(description="Per-user note id")
    note_name: str = Field(description="Note display name")
    content_snippet: str = Field(description="Context around the first match, ellipsized")
    line_number: int = Field(ge=1, description="1-based line of the first match")
    total_matches: int = Field(ge=0, description="Case-insensitive occurrences of the query")
    url: str = Field(description="Editor URL scrolled to the first match")


class SearchResponse(BaseModel):
    """A page of search results."""
    results: List[SearchResultItem] = Field(description="Results on this page")
    total_results: int = Field(description="Matching notes across all pages")
    current_page: int = Field(description="1-based page number")
    total_pages: int = Field(description="Number of pages (0 when nothing matched)")
