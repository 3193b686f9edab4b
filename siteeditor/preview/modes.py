"""The single editing mode of a preview session.

Only one affordance can be active at a time: a text edit, the button
style popover, or an image replacement waiting for its file. Every mode
change goes through :func:`transition`, which also reports the mode that
has to be torn down.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class Mode(enum.Enum):
    IDLE = "idle"
    EDITING_TEXT = "editingText"
    EDITING_BUTTON = "editingButton"
    UPLOADING_IMAGE = "uploadingImage"


@dataclass(frozen=True)
class EditMode:
    kind: Mode = Mode.IDLE
    identity: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.kind is Mode.IDLE) != (self.identity is None):
            raise ValueError(f"{self.kind.value} mode needs {'no' if self.kind is Mode.IDLE else 'an'} identity")

    @property
    def idle(self) -> bool:
        return self.kind is Mode.IDLE

    @classmethod
    def editing_text(cls, identity: str) -> "EditMode":
        return cls(Mode.EDITING_TEXT, identity)

    @classmethod
    def editing_button(cls, identity: str) -> "EditMode":
        return cls(Mode.EDITING_BUTTON, identity)

    @classmethod
    def uploading_image(cls, identity: str) -> "EditMode":
        return cls(Mode.UPLOADING_IMAGE, identity)

    def __str__(self) -> str:
        return self.kind.value if self.idle else f"{self.kind.value}({self.identity})"


IDLE = EditMode()


def transition(current: EditMode, requested: EditMode) -> Tuple[EditMode, Optional[EditMode]]:
    """Return ``(next_mode, interrupted)``.

    ``interrupted`` is the previously active mode when entering
    ``requested`` displaces it, otherwise ``None``. Requesting the mode
    that is already active is a no-op. Requesting ``IDLE`` ends the current
    mode normally, so nothing is reported as interrupted.
    """
    if requested == current:
        return current, None
    if requested.idle or current.idle:
        return requested, None
    return requested, current
