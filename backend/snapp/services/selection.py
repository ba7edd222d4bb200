"""
SNApp Backend: Note Tree Selection State
==========================================

What:  In-memory bookkeeping for the note tree: the flat list of nodes, the
       single selected note and per-note unsaved-changes ("dirty") flags.
How:   Every update replaces the affected nodes with new frozen instances;
       untouched nodes keep their identity so consumers can compare by
       reference to find what changed.

Node lifecycle:
    add_note()            → dirty=False
    update_note_content() → dirty=True (every keystroke)
    mark_saved()          → dirty=False after a successful save
    remove_note()         → gone (selection cleared if it was selected)

Selection is exclusive: selecting B deselects A in the same update.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Literal, Mapping, Optional, Tuple

SaveStatus = Literal["idle", "saving", "saved", "error"]

SAVE_STATUSES = ("idle", "saving", "saved", "error")


def note_url(note_id: int, line: Optional[int] = None) -> str:
    """Editor URL for a note, optionally scrolled to a 1-based line."""
    if line is None:
        return f"/note/{note_id}"
    return f"/note/{note_id}?line={line}"


@dataclass(frozen=True)
class NoteNode:
    id: int
    name: str
    content: Optional[str] = None
    dirty: bool = False
    selected: bool = False


class NoteSelection:
    """
    Selection and dirty-flag reducer over a flat collection of notes.

    Example:
        state = NoteSelection([NoteNode(1, "A"), NoteNode(2, "B")])
        state.update_selection(2)
        state.update_note_content(2, "# Draft")
        state.get_selected_note().dirty   # True
    """

    def __init__(
        self,
        initial_notes: Iterable[NoteNode] = (),
        initial_selected_id: Optional[int] = None,
    ):
        self.notes: Tuple[NoteNode, ...] = tuple(initial_notes)
        self.selected_note_id: Optional[int] = None
        self.save_status: SaveStatus = "idle"
        if initial_selected_id is not None:
            self.update_selection(initial_selected_id)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, object]],
        selected_id: Optional[int] = None,
    ) -> "NoteSelection":
        """Build state from persistence records (dicts with id, name, content)."""
        nodes = [
            NoteNode(
                id=int(record["id"]),
                name=str(record["name"]),
                content=record.get("content"),
            )
            for record in records
        ]
        return cls(nodes, selected_id)

    def _map(self, note_id: int, **changes) -> None:
        self.notes = tuple(
            replace(node, **changes) if node.id == note_id else node
            for node in self.notes
        )

    def update_selection(self, note_id: Optional[int]) -> None:
        # An id with no matching note clears the selection
        if note_id is not None and self.get_note(note_id) is None:
            note_id = None
        updated = []
        for node in self.notes:
            if node.selected and node.id != note_id:
                node = replace(node, selected=False)
            elif node.id == note_id and not node.selected:
                node = replace(node, selected=True)
            updated.append(node)
        self.notes = tuple(updated)
        self.selected_note_id = note_id

    def update_dirty_flag(self, note_id: int, dirty: bool) -> None:
        self._map(note_id, dirty=dirty)

    def update_note_content(self, note_id: int, content: str) -> None:
        self._map(note_id, content=content, dirty=True)

    def update_note_name(self, note_id: int, name: str) -> None:
        self._map(note_id, name=name)

    def mark_saved(self, note_id: int) -> None:
        self._map(note_id, dirty=False)
        self.save_status = "saved"

    def set_save_status(self, status: SaveStatus) -> None:
        if status not in SAVE_STATUSES:
            raise ValueError(f"Invalid save status '{status}'. Must be one of: {SAVE_STATUSES}")
        self.save_status = status

    def add_note(self, node: NoteNode) -> None:
        if self.get_note(node.id) is not None:
            raise ValueError(f"Note {node.id} is already in the tree")
        self.notes = self.notes + (replace(node, dirty=False, selected=False),)

    def remove_note(self, note_id: int) -> None:
        self.notes = tuple(node for node in self.notes if node.id != note_id)
        if self.selected_note_id == note_id:
            self.selected_note_id = None

    def get_note(self, note_id: int) -> Optional[NoteNode]:
        for node in self.notes:
            if node.id == note_id:
                return node
        return None

    def get_selected_note(self) -> Optional[NoteNode]:
        if self.selected_note_id is None:
            return None
        return self.get_note(self.selected_note_id)

    @property
    def dirty_note_ids(self) -> Tuple[int, ...]:
        return tuple(node.id for node in self.notes if node.dirty)
