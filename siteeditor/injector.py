"""Apply saved overrides to the published page.

Same identities as the editor preview, but no baselines, no controls and no
editor chrome. Text overrides are matched by value, tolerating quote marks
around either side (generated copy is often quoted).
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from bs4 import Tag

from .core.models import OverrideSet
from .preview.dom import parse_html, set_style, set_text, visible_text
from .preview.selectors import MIN_TEXT_LENGTH, has_editable_children
from .preview.tagger import apply_button_style, iter_backgrounds, iter_buttons, iter_images, iter_text_elements

logger = logging.getLogger(__name__)

_QUOTES = "\"'“”‘’«»„‟‹›"
_EDGE_QUOTES_RE = re.compile(f"^[\\s{_QUOTES}]+|[\\s{_QUOTES}]+$")


def strip_quotes(text: str) -> str:
    return _EDGE_QUOTES_RE.sub("", text)


def _text_lookup(texts: Dict[str, str]) -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for original, replacement in texts.items():
        for variant in (original, original.strip(), strip_quotes(original)):
            lookup.setdefault(variant, replacement)
    return lookup


def _find_replacement(lookup: Dict[str, str], text: str) -> Optional[str]:
    return lookup.get(text) or lookup.get(strip_quotes(text))


def apply_published_overrides(container: Tag, overrides: OverrideSet) -> int:
    """Mutate ``container`` in place; returns the number of elements touched."""
    touched = 0
    for index, img in enumerate(iter_images(container)):
        replacement = overrides.images.get(f"image-{index}")
        if replacement:
            img["src"] = replacement
            touched += 1

    for index, btn in enumerate(iter_buttons(container)):
        style = overrides.buttons.get(f"button-{index}")
        if style is not None and not style.is_empty():
            apply_button_style(btn, style)
            touched += 1

    for index, el in enumerate(iter_backgrounds(container)):
        replacement = overrides.images.get(f"bg-{index}")
        if replacement:
            set_style(el, "background-image", f"url({replacement})")
            touched += 1

    if overrides.texts:
        lookup = _text_lookup(overrides.texts)
        for el in iter_text_elements(container):
            text = visible_text(el)
            if len(text) < MIN_TEXT_LENGTH or has_editable_children(el):
                continue
            replacement = _find_replacement(lookup, text)
            if replacement:
                set_text(el, replacement)
                touched += 1
    return touched


def inject_overrides(html: str, overrides: OverrideSet) -> str:
    if overrides.is_empty():
        return html
    soup = parse_html(html)
    touched = apply_published_overrides(soup, overrides)
    logger.debug("Applied %d overrides to published page", touched)
    return str(soup)
