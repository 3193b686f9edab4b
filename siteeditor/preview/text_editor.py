"""In-place text editing of a single element."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, Tuple

from bs4 import Tag

from .dom import add_class, remove_class, set_text, visible_text
from .tagger import BaselineCache

logger = logging.getLogger(__name__)

EDITING_CLASS = "editing-active"

TextChangeCallback = Callable[[str, str], None]


class EditorState(enum.Enum):
    IDLE = "idle"
    EDITING = "editing"


class InlineTextEditor:
    """``idle -> editing -> idle`` for one element at a time.

    While editing, the element's text in the tree is the live buffer and
    ``selection`` is a ``(start, end)`` range into it. Entering the edit
    selects everything, so the first keystrokes replace the whole text.
    """

    def __init__(self, cache: BaselineCache, on_text_change: TextChangeCallback) -> None:
        self.cache = cache
        self.on_text_change = on_text_change
        self.state = EditorState.IDLE
        self.element: Optional[Tag] = None
        self.identity: Optional[str] = None
        self.selection: Tuple[int, int] = (0, 0)

    @property
    def editing(self) -> bool:
        return self.state is EditorState.EDITING

    @property
    def text(self) -> str:
        return visible_text(self.element) if self.element is not None else ""

    @property
    def baseline(self) -> str:
        if self.identity is None:
            return ""
        return self.cache.get(self.identity) or ""

    def begin(self, identity: str, el: Tag) -> None:
        if self.editing:
            if self.element is el:
                return
            self.blur()
        self.cache.setdefault(identity, visible_text(el))
        self.identity = identity
        self.element = el
        self.state = EditorState.EDITING
        self._attach(el)
        self.selection = (0, len(self.text))
        logger.debug("Editing %s", identity)

    def _attach(self, el: Tag) -> None:
        el["contenteditable"] = "true"
        add_class(el, EDITING_CLASS)

    def _detach(self, el: Tag) -> None:
        if el.has_attr("contenteditable"):
            del el["contenteditable"]
        remove_class(el, EDITING_CLASS)

    def rebind(self, el: Tag) -> None:
        """Follow the edit onto a re-rendered copy of the same element."""
        if not self.editing or self.element is None:
            return
        buffer = self.text
        self.element = el
        set_text(el, buffer)
        self._attach(el)

    def select(self, start: int, end: Optional[int] = None) -> None:
        length = len(self.text)
        start = max(0, min(start, length))
        end = start if end is None else max(start, min(end, length))
        self.selection = (start, end)

    def type(self, text: str) -> None:
        """Insert ``text`` over the current selection."""
        if not self.editing or self.element is None:
            return
        current = self.text
        start, end = self.selection
        updated = current[:start] + text + current[end:]
        set_text(self.element, updated)
        cursor = start + len(text)
        self.selection = (cursor, cursor)

    def key(self, key: str, shift: bool = False) -> None:
        if not self.editing or self.element is None:
            return
        if key == "Enter" and not shift:
            self.blur()
        elif key == "Escape":
            self.cancel()

    def cancel(self) -> None:
        """Discard the typed text and leave editing without committing."""
        if not self.editing or self.element is None:
            return
        set_text(self.element, self.baseline)
        self.blur()

    def blur(self) -> Optional[Tuple[str, str]]:
        """Leave editing; returns ``(original, new)`` when a change was committed."""
        if not self.editing or self.element is None:
            return None
        el = self.element
        original = self.baseline
        new_text = self.text
        self._detach(el)
        self.state = EditorState.IDLE
        self.element = None
        self.identity = None
        self.selection = (0, 0)

        if new_text and new_text != original:
            logger.info("Text changed: %r -> %r", original, new_text)
            self.on_text_change(original, new_text)
            return original, new_text
        if not new_text:
            set_text(el, original)
        return None
