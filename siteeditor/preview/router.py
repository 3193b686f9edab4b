"""Capture-phase click classification for the preview container."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from bs4 import Tag

from .dom import closest
from .selectors import (
    find_background_image_element,
    find_button,
    find_editable_text_element,
    is_control,
    is_text_element,
)


class ActionKind(enum.Enum):
    NONE = "none"
    CONTROL = "control"
    REPLACE_IMAGE = "replaceImage"
    EDIT_TEXT = "editText"
    STYLE_BUTTON = "styleButton"
    REPLACE_BACKGROUND = "replaceBackground"


@dataclass
class ClickEvent:
    target: Tag
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    element: Optional[Tag] = None


NO_ACTION = Action(ActionKind.NONE)


def _claim(event: ClickEvent, kind: ActionKind, el: Tag) -> Action:
    event.prevent_default()
    event.stop_propagation()
    return Action(kind, el)


def route(event: ClickEvent, root: Optional[Tag] = None, active_text: Optional[Tag] = None) -> Action:
    """Classify a click; the first matching branch wins.

    Text is tested before buttons so copy inside a button-styled container
    stays editable on its own.
    """
    target = event.target

    control = closest(target, is_control)
    if control is not None:
        return Action(ActionKind.CONTROL, control)

    # Preview only: links never navigate.
    link = closest(target, lambda node: node.name == "a" and node is not root)
    if link is not None:
        event.prevent_default()
        img_in_link = link.find("img")
        if img_in_link is not None:
            return _claim(event, ActionKind.REPLACE_IMAGE, img_in_link)

    img = closest(target, lambda node: node.name == "img")
    if img is not None:
        return _claim(event, ActionKind.REPLACE_IMAGE, img)

    text_el = find_editable_text_element(target)
    if text_el is not None:
        if text_el is active_text:
            # Caret placement inside the element already being edited.
            return NO_ACTION
        return _claim(event, ActionKind.EDIT_TEXT, text_el)

    button = find_button(target, root)
    if button is not None:
        return _claim(event, ActionKind.STYLE_BUTTON, button)

    bg = find_background_image_element(target)
    if bg is not None and bg is not root and not is_text_element(target):
        return _claim(event, ActionKind.REPLACE_BACKGROUND, bg)

    return NO_ACTION
