"""
SNApp Backend: Markdown Outline Service
=========================================

What:  Extracts ATX headings from note content for the outline panel and
       in-note navigation.
How:   One top-to-bottom pass over the lines, tracking whether the scanner
       is inside a fenced code block.
Who:   NoteService (stored notes) and the POST /api/outline route (live
       editor content).
When:  On every outline request; the editor asks after each change, so
       results are memoized per content string in `header_cache`.

Heading rules:
    - A heading starts at column 0 with one or more '#' characters and has
      at least one character after the whole '#' run:
          "# Title"  → level 1, text "Title"
          "#Title"   → level 1, text "Title"
          "#   "     → level 1, text ""
          "#", "##"  → not a heading
          "  # x"    → not a heading (indented)
    - The level is the length of the '#' run; seven or more is allowed.
    - A line whose stripped form starts with ``` toggles the fence state and
      is never a heading itself. Fences do not nest.
    - "\\r\\n" and lone "\\r" are normalized to "\\n" before splitting.
"""

import logging
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple

from snapp.config import settings
from snapp.schemas.outline import Heading, HeadingNode, OutlineEntry, OutlineResponse
from snapp.services.selection import note_url

logger = logging.getLogger(__name__)

FENCE_MARKER = "```"
HEADING_MARKER = "#"


def _split_lines(content: str) -> List[str]:
    return content.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def extract_headers(content: Optional[str]) -> List[Heading]:
    """
    Extract headings from Markdown content in document order.

    Args:
        content: Full note text; None and "" yield an empty list.

    Returns:
        Headings with ids `header-<sequence>-<level>`, the sequence counting
        from 1 within this call.

    Example:
        >>> [h.id for h in extract_headers("# A\\n## B")]
        ['header-1-1', 'header-2-2']
    """
    if not content:
        return []

    headings: List[Heading] = []
    in_fence = False
    sequence = 0

    for line_number, line in enumerate(_split_lines(content), start=1):
        if line.strip().startswith(FENCE_MARKER):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        level = len(line) - len(line.lstrip(HEADING_MARKER))
        # Needs a '#' run at column 0 and something after it
        if level == 0 or level == len(line):
            continue

        sequence += 1
        headings.append(
            Heading(
                id=f"header-{sequence}-{level}",
                text=line[level:].strip(),
                content=line.rstrip(),
                line=line_number,
                level=level,
            )
        )

    return headings


def build_header_tree(headings: Iterable[Heading]) -> List[HeadingNode]:
    """
    Nest headings by level.

    Each heading becomes a child of the closest preceding heading with a
    lower level, or a root when there is none. Skipped levels are allowed
    ("#" followed directly by "###" nests the latter under the former).
    """
    roots: List[HeadingNode] = []
    stack: List[HeadingNode] = []

    for heading in headings:
        while stack and stack[-1].level >= heading.level:
            stack.pop()

        node = HeadingNode(
            id=heading.id,
            text=heading.text,
            content=heading.content,
            line=heading.line,
            level=heading.level,
        )
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


class HeaderCache:
    """
    Memoizes `extract_headers` by content string.

    With maxsize=1 this is a "same input as last time" cache; larger sizes
    keep the most recently used contents (LRU). Cached headings are frozen
    and every call returns a new list, so callers cannot corrupt the cache.
    """

    def __init__(self, maxsize: int = 128):
        if maxsize < 1:
            raise ValueError("HeaderCache maxsize must be at least 1")
        self.maxsize = maxsize
        self._entries: "OrderedDict[str, Tuple[Heading, ...]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, content: Optional[str]) -> List[Heading]:
        key = content or ""
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            return list(cached)

        self.misses += 1
        headings = tuple(extract_headers(key))
        self._entries[key] = headings
        if len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        return list(headings)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


def build_outline(
    content: Optional[str],
    note_id: Optional[int] = None,
    tree: bool = False,
    cache: Optional["HeaderCache"] = None,
) -> OutlineResponse:
    """
    Build the outline response for a piece of content.

    When `note_id` is given every heading carries the URL that opens the
    note scrolled to the heading's line.
    """
    headings = (cache if cache is not None else header_cache).get(content)
    entries = [
        OutlineEntry(
            **heading.model_dump(),
            url=note_url(note_id, heading.line) if note_id is not None else None,
        )
        for heading in headings
    ]
    logger.debug("Outline built: note=%s headings=%d", note_id, len(entries))
    return OutlineResponse(
        note_id=note_id,
        headings=entries,
        tree=build_header_tree(headings) if tree else None,
    )


header_cache = HeaderCache(maxsize=settings.outline_cache_size)
