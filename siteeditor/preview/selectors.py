"""Element classification used by the tagger and the click router."""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from ..core.styles import BUTTON_SELECTORS
from .dom import background_image_url, closest, has_class, iter_elements, visible_text

TEXT_TAGS = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote", "span",
    "figcaption", "dt", "dd", "label", "td", "th",
})
SKIP_CLASSES = ("material-symbols-outlined", "icon", "sr-only")
SKIP_TAGS = frozenset({"script", "style", "svg", "path", "input", "textarea", "select", "img"})
MIN_TEXT_LENGTH = 2

BUTTON_SELECTOR = ", ".join(BUTTON_SELECTORS)
CONTROL_ATTRS = ("data-add-btn", "data-remove-btn")

# How far up the tree a click may bubble before it stops counting.
TEXT_SEARCH_DEPTH = 5
BACKGROUND_SEARCH_DEPTH = 3


def is_skipped(el: Tag) -> bool:
    return el.name in SKIP_TAGS


def is_text_element(el: Tag) -> bool:
    return el.name in TEXT_TAGS and len(visible_text(el)) >= MIN_TEXT_LENGTH


def has_editable_children(el: Tag) -> bool:
    """True when a nested text element would be edited instead of ``el``."""
    for child in iter_elements(el, is_skipped):
        if is_text_element(child):
            return True
    return False


def is_button(el: Tag) -> bool:
    return el.name in ("a", "button") and el.css.match(BUTTON_SELECTOR)


def is_control(el: Tag) -> bool:
    return any(el.has_attr(attr) for attr in CONTROL_ATTRS)


def _in_button_or_nav(el: Tag) -> bool:
    return closest(
        el,
        lambda node: node.name in ("button", "nav") or node.get("role") == "navigation",
    ) is not None


def find_editable_text_element(target: Tag) -> Optional[Tag]:
    """Return the text element a click on ``target`` should edit, if any."""
    current: Optional[Tag] = target
    for _ in range(TEXT_SEARCH_DEPTH):
        if not isinstance(current, Tag) or current.name == "[document]":
            return None
        if is_skipped(current):
            return None
        if any(has_class(current, name) for name in SKIP_CLASSES):
            return None
        if _in_button_or_nav(current):
            return None
        if is_text_element(current) and not has_editable_children(current):
            return current
        current = current.parent
    return None


def find_button(target: Tag, root: Optional[Tag] = None) -> Optional[Tag]:
    return closest(target, lambda node: node is not root and is_button(node))


def find_background_image_element(target: Tag) -> Optional[Tag]:
    return closest(target, lambda node: background_image_url(node) is not None, limit=BACKGROUND_SEARCH_DEPTH)
