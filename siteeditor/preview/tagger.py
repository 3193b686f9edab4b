"""Identity tagging and override application for one render pass.

Every pass walks the freshly rendered tree and assigns positional
identities: ``image-<i>``, ``button-<i>``, ``bg-<i>`` and ``text-<i>``.
The first-seen value of each image, background and text element is kept in a
:class:`BaselineCache` keyed by those identities. The cache outlives
individual passes, so a re-render of the same content keeps its baselines.
Positions are only stable while the set and order of matching elements
stay the same between renders.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from bs4 import Tag

from ..core.models import ButtonStyle, OverrideSet
from .dom import (
    add_class,
    background_image_url,
    has_class,
    iter_elements,
    remove_style,
    set_style,
    set_text,
    visible_text,
)
from .selectors import BUTTON_SELECTOR, SKIP_CLASSES, TEXT_TAGS, is_control, is_skipped, has_editable_children

logger = logging.getLogger(__name__)

HOVER_ATTRS = ("onmouseenter", "onmouseleave")
HOVER_LOCK_ATTR = "data-hover-lock"


class BaselineCache:
    """Pre-edit values per identity."""

    def __init__(self) -> None:
        self._baselines: Dict[str, str] = {}

    def get(self, identity: str) -> Optional[str]:
        return self._baselines.get(identity)

    def set(self, identity: str, value: str) -> None:
        self._baselines[identity] = value

    def setdefault(self, identity: str, value: str) -> str:
        return self._baselines.setdefault(identity, value)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._baselines)


class ElementRegistry:
    """Identity <-> element lookup for the tree of the current pass."""

    def __init__(self) -> None:
        self._elements: Dict[str, Tag] = {}
        self._identities: Dict[int, str] = {}

    def add(self, identity: str, el: Tag) -> None:
        self._elements[identity] = el
        self._identities[id(el)] = identity

    def element(self, identity: str) -> Optional[Tag]:
        return self._elements.get(identity)

    def identity_of(self, el: Tag) -> Optional[str]:
        return self._identities.get(id(el))

    def identities(self, prefix: str = "") -> List[str]:
        return [identity for identity in self._elements if identity.startswith(prefix)]

    def items(self, prefix: str = "") -> Iterator[Tuple[str, Tag]]:
        for identity, el in self._elements.items():
            if identity.startswith(prefix):
                yield identity, el


# ------------------------------------------------------------------ buttons --
def apply_button_style(el: Tag, style: ButtonStyle) -> None:
    """Write a button override inline with ``!important`` precedence."""
    if style.bg_color:
        set_style(el, "background-color", style.bg_color, important=True)
        lock_hover_background(el, style.bg_color)
    if style.text_color:
        set_style(el, "color", style.text_color, important=True)
    if style.radius:
        set_style(el, "border-radius", style.radius, important=True)


def lock_hover_background(el: Tag, color: str) -> None:
    # Template hover handlers would otherwise reset the colour on mouse over.
    script = f"this.style.setProperty('background-color', {json.dumps(color)}, 'important')"
    for attr in HOVER_ATTRS:
        el[attr] = script
    el[HOVER_LOCK_ATTR] = color


def clear_button_style(el: Tag) -> None:
    remove_style(el, "background-color", "color", "border-radius")
    for attr in HOVER_ATTRS + (HOVER_LOCK_ATTR,):
        if el.has_attr(attr):
            del el[attr]


# ------------------------------------------------------------------ queries --
def iter_images(container: Tag) -> Iterator[Tag]:
    for el in container.find_all("img"):
        if not is_control(el):
            yield el


def iter_buttons(container: Tag) -> Iterator[Tag]:
    for el in container.select(BUTTON_SELECTOR):
        if not is_control(el):
            yield el


def iter_backgrounds(container: Tag) -> Iterator[Tag]:
    for el in container.find_all(True):
        if background_image_url(el) is not None and not is_control(el):
            yield el


def iter_text_elements(container: Tag) -> Iterator[Tag]:
    for el in iter_elements(container, lambda node: is_skipped(node) or is_control(node)):
        if el.name not in TEXT_TAGS:
            continue
        if any(has_class(el, name) for name in SKIP_CLASSES):
            continue
        yield el


# ------------------------------------------------------------------- tagger --
class Tagger:
    """Runs the tag/apply pass over a rendered container."""

    def __init__(self, cache: Optional[BaselineCache] = None) -> None:
        self.cache = cache if cache is not None else BaselineCache()

    def run(self, container: Tag, overrides: OverrideSet, editing: Optional[str] = None) -> ElementRegistry:
        registry = ElementRegistry()
        self._images(container, overrides, registry)
        self._buttons(container, overrides, registry)
        self._backgrounds(container, overrides, registry)
        self._texts(container, overrides, registry, editing)
        self._reveal(container, registry.element(editing) if editing else None)
        return registry

    def _images(self, container: Tag, overrides: OverrideSet, registry: ElementRegistry) -> None:
        for index, img in enumerate(iter_images(container)):
            identity = f"image-{index}"
            registry.add(identity, img)
            self.cache.setdefault(identity, img.get("src", ""))
            replacement = overrides.images.get(identity)
            if replacement:
                img["src"] = replacement

    def _buttons(self, container: Tag, overrides: OverrideSet, registry: ElementRegistry) -> None:
        for index, btn in enumerate(iter_buttons(container)):
            identity = f"button-{index}"
            registry.add(identity, btn)
            style = overrides.buttons.get(identity)
            if style is not None and not style.is_empty():
                apply_button_style(btn, style)

    def _backgrounds(self, container: Tag, overrides: OverrideSet, registry: ElementRegistry) -> None:
        for index, el in enumerate(iter_backgrounds(container)):
            identity = f"bg-{index}"
            registry.add(identity, el)
            self.cache.setdefault(identity, background_image_url(el) or "")
            replacement = overrides.images.get(identity)
            if replacement:
                set_style(el, "background-image", f"url({replacement})")

    def _texts(
        self,
        container: Tag,
        overrides: OverrideSet,
        registry: ElementRegistry,
        editing: Optional[str],
    ) -> None:
        reverse = overrides.reverse_texts()
        for index, el in enumerate(iter_text_elements(container)):
            identity = f"text-{index}"
            registry.add(identity, el)
            if identity == editing:
                continue
            text = visible_text(el)
            if not text:
                continue

            stored = self.cache.get(identity)
            if stored is None:
                self.cache.set(identity, text)
            elif text != stored and text not in reverse:
                # The source text changed underneath us: it is the new baseline.
                logger.debug("Re-basing %s: %r -> %r", identity, stored, text)
                self.cache.set(identity, text)

            original = self.cache.get(identity) or text
            replacement = overrides.texts.get(original)
            if replacement and text != replacement and not has_editable_children(el):
                set_text(el, replacement)

    def _reveal(self, container: Tag, editing_el: Optional[Tag]) -> None:
        for el in container.select(".reveal"):
            if el is editing_el or has_class(el, "editing-active"):
                continue
            add_class(el, "revealed")
