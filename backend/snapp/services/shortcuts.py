"""
SNApp Backend: Keyboard Shortcut Registry
===========================================

What:  Maps normalized key combos ("CTRL+SHIFT+F") to callbacks and owns
       the single subscription to the underlying key event source.
How:   The registry is an ordinary object handed to whoever needs it. It
       attaches its dispatcher to the event source when the first shortcut
       is registered and detaches it when the last one is removed.

Combo format:
    Modifiers in the order CTRL, META, SHIFT, ALT, then the key, joined by
    '+', all uppercase: "S", "CTRL+S", "CTRL+SHIFT+F", "META+K".
    A space pressed with modifiers is spelled SPACEBAR ("CTRL+SPACEBAR").
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Protocol, Set, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], None]

# Legacy key names (old browsers report these) mapped to their modern names
KEY_ALIASES: Dict[str, str] = {
    "SPACEBAR": " ",
    "UP": "ArrowUP",
    "DOWN": "ArrowDown",
    "LEFT": "ArrowLeft",
    "RIGHT": "ArrowRight",
    "DEL": "Delete",
    "MULTIPLY": "*",
    "DIVIDE": "/",
    "SUBTRACT": "-",
    "ADD": "+",
}


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False


class EventSource(Protocol):
    def attach(self, handler: Callable[[KeyEvent], bool]) -> None: ...

    def detach(self, handler: Callable[[KeyEvent], bool]) -> None: ...


def normalize_key_event(event: KeyEvent) -> str:
    """Turn a key event into the combo string shortcuts are registered under."""
    if not event.key:
        return ""

    upper = event.key.upper()
    key = KEY_ALIASES.get(upper, upper).upper()
    if key == "CONTROL":
        return "CTRL"

    combo: List[str] = []
    if event.ctrl:
        combo.append("CTRL")
    if event.meta and key != "META":
        combo.append("META")
    if event.shift and key != "SHIFT":
        combo.append("SHIFT")
    if event.alt and key != "ALT":
        combo.append("ALT")

    if combo and key == " ":
        combo.append("SPACEBAR")
    else:
        combo.append(key)
    return "+".join(combo)


class ShortcutRegistry:
    """
    Shortcut → callbacks table with reference-counted attachment.

    Example:
        registry = ShortcutRegistry(source)
        unregister = registry.register(["CTRL+S", "META+S"], save)
        ...
        unregister()   # detaches from `source` if nothing else is registered
    """

    def __init__(self, source: EventSource):
        self._source = source
        self._callbacks: Dict[str, Set[Callback]] = {}
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def shortcuts(self) -> Set[str]:
        return set(self._callbacks)

    def register(
        self,
        shortcut: Union[str, Iterable[str]],
        callback: Callback,
    ) -> Callable[[], None]:
        """
        Register `callback` for one or more shortcuts.

        Returns a function that unregisters exactly this registration.
        """
        shortcuts = [shortcut] if isinstance(shortcut, str) else list(shortcut)

        if not self._attached:
            self._source.attach(self.dispatch)
            self._attached = True

        for combo in shortcuts:
            self._callbacks.setdefault(combo, set()).add(callback)

        def unregister() -> None:
            self._unregister(shortcuts, callback)

        return unregister

    def _unregister(self, shortcuts: List[str], callback: Callback) -> None:
        for combo in shortcuts:
            callbacks = self._callbacks.get(combo)
            if callbacks is None:
                continue
            callbacks.discard(callback)
            if not callbacks:
                del self._callbacks[combo]

        if not self._callbacks and self._attached:
            self._source.detach(self.dispatch)
            self._attached = False

    def dispatch(self, event: KeyEvent) -> bool:
        """
        Run every callback registered for the event's combo.

        Returns True when something ran; the caller should then suppress the
        default handling of the key press.
        """
        combo = normalize_key_event(event)
        callbacks = self._callbacks.get(combo)
        if not callbacks:
            return False

        logger.debug("Shortcut %s → %d callback(s)", combo, len(callbacks))
        for callback in list(callbacks):
            callback()
        return True
