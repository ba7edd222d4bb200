"""
SNApp Backend
=============

Markdown note-taking service: a per-user tree of notes, a live outline of
each note's headings and paginated full-text search.

Layers:
    ┌─────────────────────────────────────┐
    │        Routes (API layer)           │  HTTP concerns only
    ├─────────────────────────────────────┤
    │        Services (domain logic)      │  outline, search, notes,
    │                                     │  selection, shortcuts
    ├─────────────────────────────────────┤
    │   Models & Schemas (data shapes)    │  SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (async sessions)         │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
