"""
SNApp Backend: Welcome Content Service
========================================

What:  Supplies the Markdown shown for notes whose content is NULL.
How:   Reads WELCOME_CONTENT_PATH once with async file I/O and keeps the text
       in memory. A missing or unreadable file is logged and replaced by a
       short built-in document; the request never fails because of it.
Who:   NoteService.list_notes() and NoteService.get_note().
"""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from snapp.config import settings

logger = logging.getLogger(__name__)

FALLBACK_WELCOME = "# Welcome to SNApp\n\nStart writing your note..."


class WelcomeContentService:
    """Cached loader for the welcome document."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.welcome_content_path)
        self._content: Optional[str] = None

    async def get_content(self) -> str:
        if self._content is not None:
            return self._content

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                self._content = await f.read()
            logger.info("Welcome content loaded from %s (%d chars)", self.path, len(self._content))
        except OSError as e:
            logger.error("Failed to read welcome content %s: %s", self.path, str(e))
            self._content = FALLBACK_WELCOME
        return self._content

    def reset(self) -> None:
        """Forget the cached text so the next call reads the file again."""
        self._content = None


welcome_service = WelcomeContentService()
