"""
SNApp Backend: Services Layer
===============================

Service inventory:
    - outline_service: Markdown header extraction, nesting and memoization
    - search_service:  match counting, snippets and ranked paginated search
    - note_service:    note CRUD with unique naming per user
    - welcome_service: default content for notes that were never edited
    - selection:       client-side note tree state (selection, dirty flags)
    - shortcuts:       keyboard shortcut normalization and dispatch

The pure functions in outline_service, search_service, selection and
shortcuts don't touch the database and are tested without it.
"""
