"""
SNApp Backend: API Routes
===========================

Route inventory:
    - notes.py:   /api/notes, /api/notes/{id}, /api/notes/{id}/outline
    - outline.py: POST /api/outline   (outline of unsaved editor content)
    - search.py:  GET  /api/search
    - health.py:  GET  /health

Handlers stay thin: read the request, call a service, shape the response.
"""
