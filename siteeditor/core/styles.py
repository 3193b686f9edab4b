"""Global style overrides rendered as a deterministic stylesheet.

Each overridable slot maps to a fixed list of rules. A rule is a group of
selectors plus the CSS property the slot value is written to. Rules are
scoped to a container class so the same slots drive both the editor
preview (``.editable-preview``) and the published page (``.site-content``).
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CUSTOM_STYLES

EDITOR_SCOPE = ".editable-preview"
PUBLISHED_SCOPE = ".site-content"

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

BUTTON_SELECTORS: Tuple[str, ...] = (
    'a[class*="bg-"]',
    'a[class*="btn"]',
    'a[class*="rounded"][class*="bg-"]',
    'a[style*="background"]',
    'button[class*="bg-"]:not([class*="bg-white"]):not([class*="bg-slate"]):not([class*="bg-gray"])',
    'button[style*="background"]',
)


def normalize_hex(color: str) -> str:
    """Return ``color`` as ``#xxxxxx`` (lowercase) or raise ``ValueError``."""
    if not isinstance(color, str):
        raise ValueError(f"Not a colour: {color!r}")
    value = color.strip()
    if value and not value.startswith("#"):
        value = "#" + value
    if not _HEX_RE.match(value):
        raise ValueError(f"Not a hex colour: {color!r}")
    return value.lower()


class StyleSlot(str, enum.Enum):
    PRIMARY_COLOR = "primaryColor"
    HEADING_COLOR = "headingColor"
    BODY_COLOR = "bodyColor"
    BUTTON_COLOR = "buttonColor"
    BUTTON_TEXT_COLOR = "buttonTextColor"
    BUTTON_RADIUS = "buttonRadius"


@dataclass(frozen=True)
class StyleRule:
    selectors: Tuple[str, ...]
    declarations: Tuple[Tuple[str, str], ...]
    important: bool = True

    def scoped(self, scope: str) -> "StyleRule":
        return StyleRule(
            selectors=tuple(f"{scope} {sel}" if scope else sel for sel in self.selectors),
            declarations=self.declarations,
            important=self.important,
        )

    def render(self) -> str:
        suffix = " !important" if self.important else ""
        body = " ".join(f"{prop}: {value}{suffix};" for prop, value in self.declarations)
        return f"{', '.join(self.selectors)} {{ {body} }}"


@dataclass(frozen=True)
class Stylesheet:
    rules: Tuple[StyleRule, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.rules)

    def __add__(self, other: "Stylesheet") -> "Stylesheet":
        return Stylesheet(self.rules + other.rules)

    def render(self) -> str:
        return "\n".join(rule.render() for rule in self.rules)


_PRIMARY_TEXT = (
    ".text-primary",
    '[class*="text-teal"]',
    '[class*="text-emerald"]',
    '[class*="text-green"]',
    '[class*="text-blue"]',
    '[class*="text-indigo"]',
    '[class*="text-violet"]',
    '[class*="text-purple"]',
)
_PRIMARY_BG = (
    ".bg-primary",
    '[class*="bg-teal-6"]', '[class*="bg-teal-7"]', '[class*="bg-teal-8"]',
    '[class*="bg-emerald-6"]', '[class*="bg-emerald-7"]', '[class*="bg-emerald-8"]',
    '[class*="bg-green-6"]', '[class*="bg-green-7"]',
    '[class*="bg-blue-6"]', '[class*="bg-blue-7"]',
    '[class*="bg-indigo-6"]', '[class*="bg-indigo-7"]',
)
_PRIMARY_BORDER = (
    '[class*="border-teal"]',
    '[class*="border-emerald"]',
    '[class*="border-green"]',
    '[class*="border-blue"]',
    '[class*="border-indigo"]',
)
_HEADINGS = ("h1", "h2", "h3", "h4")
_BODY_TEXT = ("p", "li", "dd", "td", "span:not(.material-symbols-outlined)")

# slot -> [(selectors, css property)]
SLOT_TARGETS: Dict[StyleSlot, List[Tuple[Tuple[str, ...], str]]] = {
    StyleSlot.PRIMARY_COLOR: [
        (("a:not(nav a)",), "color"),
        (_PRIMARY_TEXT, "color"),
        (_PRIMARY_BG, "background-color"),
        (_PRIMARY_BORDER, "border-color"),
    ],
    StyleSlot.HEADING_COLOR: [(_HEADINGS, "color")],
    StyleSlot.BODY_COLOR: [(_BODY_TEXT, "color")],
    StyleSlot.BUTTON_COLOR: [(BUTTON_SELECTORS, "background-color")],
    StyleSlot.BUTTON_TEXT_COLOR: [(BUTTON_SELECTORS, "color")],
    StyleSlot.BUTTON_RADIUS: [(BUTTON_SELECTORS, "border-radius")],
}


def rules_for(slot: StyleSlot, value: str) -> List[StyleRule]:
    return [
        StyleRule(selectors=selectors, declarations=((prop, value),))
        for selectors, prop in SLOT_TARGETS[slot]
    ]


def build_stylesheet(custom_styles: Optional[Mapping[str, str]], scope: str = EDITOR_SCOPE) -> Stylesheet:
    """Build the global override stylesheet for ``custom_styles``.

    Unknown keys and empty values are ignored. Output order follows the
    slot declaration order, not the mapping order.
    """
    custom_styles = custom_styles or {}
    rules: List[StyleRule] = []
    for slot in StyleSlot:
        value = custom_styles.get(slot.value)
        if not value:
            continue
        rules.extend(rule.scoped(scope) for rule in rules_for(slot, value))
    return Stylesheet(tuple(rules))


def stylesheet_for_generated(generated: Optional[dict], scope: str = EDITOR_SCOPE) -> Stylesheet:
    return build_stylesheet((generated or {}).get(CUSTOM_STYLES), scope)


def editor_chrome(disable_image_upload: bool = False, scope: str = EDITOR_SCOPE) -> Stylesheet:
    """Hover/editing affordances shown only inside the editor preview."""
    text_tags = ("h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote",
                 "figcaption", "dt", "dd", "td", "th")
    image_outline = "#94a3b8" if disable_image_upload else "#f97316"
    image_hover: List[Tuple[str, str]] = [("outline", f"3px solid {image_outline}"), ("outline-offset", "2px")]
    if not disable_image_upload:
        image_hover.append(("filter", "brightness(0.92)"))
    rules: Iterable[StyleRule] = (
        StyleRule(("img",), (("cursor", "not-allowed" if disable_image_upload else "pointer"),
                             ("transition", "all 0.2s ease"))),
        StyleRule(("img:hover",), tuple(image_hover)),
        StyleRule(text_tags, (("transition", "outline 0.15s ease, background-color 0.15s ease"),)),
        StyleRule(tuple(f"{tag}:hover" for tag in text_tags),
                  (("outline", "2px dashed #94a3b8"), ("outline-offset", "2px"), ("cursor", "text"))),
        StyleRule((".editing-active",), (("outline", "2px solid #f97316"), ("outline-offset", "2px"),
                                         ("background-color", "rgba(249, 115, 22, 0.05)"), ("cursor", "text"))),
        StyleRule((".editing-active",), (("min-height", "1em"),), important=False),
        StyleRule(("a", "a img"), (("cursor", "pointer"),)),
        StyleRule((".material-symbols-outlined",), (("pointer-events", "none"),), important=False),
        StyleRule(("[data-add-btn]", "[data-remove-btn]"), (("pointer-events", "auto"),)),
        StyleRule(("[data-item-host]:hover > [data-remove-btn]",), (("opacity", "1"),)),
    )
    return Stylesheet(tuple(rule.scoped(scope) for rule in rules))
