"""Floating style panel for a single button in the preview."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from bs4 import Tag

from ..core.models import ButtonStyle
from ..core.styles import normalize_hex
from .dom import is_descendant
from .tagger import apply_button_style, clear_button_style

logger = logging.getLogger(__name__)

BACKGROUND_SWATCHES = (
    "#1e293b", "#334155", "#0f172a",
    "#f97316", "#ea580c", "#c2410c",
    "#2563eb", "#1d4ed8", "#3b82f6",
    "#059669", "#047857", "#10b981",
    "#7c3aed", "#6d28d9", "#8b5cf6",
    "#dc2626", "#b91c1c", "#ef4444",
    "#d97706", "#b45309", "#f59e0b",
    "#0d9488", "#0f766e", "#14b8a6",
)
TEXT_COLORS: Dict[str, str] = {
    "white": "#ffffff",
    "black": "#000000",
    "dark": "#1e293b",
}
RADII: Dict[str, str] = {
    "sharp": "0px",
    "slight": "6px",
    "round": "12px",
    "pill": "9999px",
}

# Clicks arriving this soon after opening belong to the opening click.
CLOSE_GRACE_SECONDS = 0.1

ButtonChangeCallback = Callable[[str, Optional[dict]], None]


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Position:
    left: float
    top: float

    def in_viewport(self, container: Rect) -> Position:
        """Translate back to viewport coordinates using the container's offset."""
        return Position(left=container.left + self.left, top=container.top + self.top)


def _choice(value: str, choices: Dict[str, str], what: str) -> str:
    if value in choices:
        return choices[value]
    if value in choices.values():
        return value
    raise ValueError(f"Unknown {what}: {value!r} (expected one of {', '.join(choices)})")


class ButtonStylePopover:
    def __init__(
        self,
        on_button_change: ButtonChangeCallback,
        clock: Callable[[], float] = time.monotonic,
        width: float = 260,
        height: float = 190,
        gap: float = 8,
    ) -> None:
        self.on_button_change = on_button_change
        self.clock = clock
        self.width = width
        self.height = height
        self.gap = gap
        self.identity: Optional[str] = None
        self.element: Optional[Tag] = None
        self.style = ButtonStyle()
        self.position: Optional[Position] = None
        self._opened_at = 0.0

    @property
    def is_open(self) -> bool:
        return self.identity is not None

    def place(self, anchor: Rect, container: Rect) -> Position:
        """Position above ``anchor`` in the container's coordinate space."""
        left = anchor.left - container.left
        top = anchor.top - container.top - self.gap - self.height
        left = max(0.0, min(left, container.width - self.width))
        top = max(0.0, top)
        return Position(left=left, top=top)

    def open(
        self,
        identity: str,
        el: Tag,
        style: Optional[ButtonStyle] = None,
        anchor: Optional[Rect] = None,
        container: Optional[Rect] = None,
    ) -> None:
        self.identity = identity
        self.element = el
        self.style = replace(style) if style is not None else ButtonStyle()
        self.position = self.place(anchor, container) if anchor and container else None
        self._opened_at = self.clock()
        logger.debug("Button popover opened for %s", identity)

    def close(self) -> None:
        self.identity = None
        self.element = None
        self.style = ButtonStyle()
        self.position = None

    def rebind(self, el: Tag) -> None:
        if self.is_open:
            self.element = el

    def click(self, target: Optional[Tag], inside_popover: bool = False) -> bool:
        """Handle a document click; returns True when it closed the popover."""
        if not self.is_open:
            return False
        if self.clock() - self._opened_at < CLOSE_GRACE_SECONDS:
            return False
        if inside_popover:
            return False
        if target is not None and self.element is not None and is_descendant(target, self.element):
            return False
        self.close()
        return True

    # ---------------------------------------------------------------- axes --
    def _commit(self) -> None:
        if self.identity is None or self.element is None:
            return
        apply_button_style(self.element, self.style)
        self.on_button_change(self.identity, self.style.to_dict())

    def set_background(self, color: str) -> None:
        self.style = replace(self.style, bg_color=normalize_hex(color))
        self._commit()

    def set_text_color(self, choice: str) -> None:
        self.style = replace(self.style, text_color=_choice(choice, TEXT_COLORS, "text colour"))
        self._commit()

    def set_radius(self, choice: str) -> None:
        self.style = replace(self.style, radius=_choice(choice, RADII, "radius"))
        self._commit()

    def reset(self) -> None:
        """Drop the override: template styling comes back, host gets ``None``."""
        if self.identity is None or self.element is None:
            return
        clear_button_style(self.element)
        self.style = ButtonStyle()
        logger.info("Button %s reset to original", self.identity)
        self.on_button_change(self.identity, None)
