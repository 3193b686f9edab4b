"""Data models for the site editor: the content document and its overrides."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional

CUSTOM_IMAGES = "customImages"
CUSTOM_TEXTS = "customTexts"
CUSTOM_BUTTONS = "customButtons"
CUSTOM_STYLES = "customStyles"

# Sections whose items can be added/removed from the preview: the key inside
# generated_content, the list key within it (None for a bare list) and a
# placeholder for new items.
REPEATABLE_SECTIONS: Dict[str, tuple[str, Optional[str], Dict[str, str]]] = {
    "diensten": ("diensten", "items", {"naam": "Nieuwe dienst", "beschrijving": "Beschrijf hier uw dienst."}),
    "faq": ("faq", "items", {"vraag": "Nieuwe vraag?", "antwoord": "Het antwoord op deze vraag."}),
    "werkervaring": ("werkervaring", None, {"functie": "Functie", "werkgever": "Werkgever"}),
    "voorwie": ("voorWie", "doelgroepen", {"titel": "Nieuwe doelgroep", "tekst": "Omschrijving van deze doelgroep."}),
}


def section_items(generated: Optional[dict], section: str) -> List[dict]:
    """Return the live item list of a repeatable section (empty if absent)."""
    key, items_key, _ = REPEATABLE_SECTIONS[section]
    container = (generated or {}).get(key)
    if items_key is None:
        return container if isinstance(container, list) else []
    if isinstance(container, dict):
        items = container.get(items_key)
        if isinstance(items, list):
            return items
    return []


@dataclass
class ButtonStyle:
    """Per-button style override. Empty fields mean "template default"."""

    bg_color: Optional[str] = None
    text_color: Optional[str] = None
    radius: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.bg_color or self.text_color or self.radius)

    def to_dict(self) -> dict:
        data: Dict[str, str] = {}
        if self.bg_color:
            data["bgColor"] = self.bg_color
        if self.text_color:
            data["textColor"] = self.text_color
        if self.radius:
            data["radius"] = self.radius
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ButtonStyle":
        data = data or {}
        return cls(
            bg_color=data.get("bgColor") or None,
            text_color=data.get("textColor") or None,
            radius=data.get("radius") or None,
        )


@dataclass
class OverrideSet:
    """The four sparse override maps stored in the generated content."""

    images: Dict[str, str] = field(default_factory=dict)
    texts: Dict[str, str] = field(default_factory=dict)
    buttons: Dict[str, ButtonStyle] = field(default_factory=dict)
    styles: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.images or self.texts or self.buttons or self.styles)

    def reverse_texts(self) -> Dict[str, str]:
        """Map each override value back to the original text it replaced."""
        return {replacement: original for original, replacement in self.texts.items()}

    @classmethod
    def from_generated(cls, generated: Optional[dict]) -> "OverrideSet":
        generated = generated or {}
        buttons: Dict[str, ButtonStyle] = {}
        for key, value in (generated.get(CUSTOM_BUTTONS) or {}).items():
            if isinstance(value, dict):
                style = ButtonStyle.from_dict(value)
                if not style.is_empty():
                    buttons[key] = style
        return cls(
            images=dict(generated.get(CUSTOM_IMAGES) or {}),
            texts=dict(generated.get(CUSTOM_TEXTS) or {}),
            buttons=buttons,
            styles={k: v for k, v in (generated.get(CUSTOM_STYLES) or {}).items() if v},
        )


@dataclass
class Site:
    """A freelancer's site: profile content plus generated marketing copy."""

    id: str
    user_id: str
    subdomain: str
    template_id: str = "classic"
    beroep: str = ""
    content: dict = field(default_factory=dict)
    generated_content: dict = field(default_factory=dict)
    published: bool = False

    # ------------------------------------------------------------ overrides --
    @property
    def overrides(self) -> OverrideSet:
        return OverrideSet.from_generated(self.generated_content)

    def _section(self, key: str) -> dict:
        section = self.generated_content.get(key)
        if not isinstance(section, dict):
            section = {}
            self.generated_content[key] = section
        return section

    def _prune(self, key: str) -> None:
        if not self.generated_content.get(key):
            self.generated_content.pop(key, None)

    def replace_image(self, identity: str, url: str) -> None:
        self._section(CUSTOM_IMAGES)[identity] = url

    def change_text(self, original: str, new_text: str) -> None:
        texts = self._section(CUSTOM_TEXTS)
        if new_text == original:
            texts.pop(original, None)
        else:
            texts[original] = new_text
        self._prune(CUSTOM_TEXTS)

    def change_button(self, identity: str, style: Optional[dict]) -> None:
        buttons = self._section(CUSTOM_BUTTONS)
        parsed = ButtonStyle.from_dict(style) if style is not None else None
        if parsed is None or parsed.is_empty():
            buttons.pop(identity, None)
        else:
            buttons[identity] = parsed.to_dict()
        self._prune(CUSTOM_BUTTONS)

    def set_style(self, slot: str, value: Optional[str]) -> None:
        styles = self._section(CUSTOM_STYLES)
        if value:
            styles[slot] = value
        else:
            styles.pop(slot, None)
        self._prune(CUSTOM_STYLES)

    def switch_template(self, template_id: str) -> None:
        if template_id == self.template_id:
            return
        self.template_id = template_id
        # Positional identities do not carry over to another layout.
        self.generated_content.pop(CUSTOM_IMAGES, None)
        self.generated_content.pop(CUSTOM_BUTTONS, None)

    # ---------------------------------------------------------- repeatables --
    def section_items(self, section: str) -> List[dict]:
        return section_items(self.generated_content, section)

    def add_item(self, section: str) -> None:
        key, items_key, placeholder = REPEATABLE_SECTIONS[section]
        container = self.generated_content.get(key)
        if items_key is None:
            if not isinstance(container, list):
                container = []
                self.generated_content[key] = container
            container.append(dict(placeholder))
            return
        if not isinstance(container, dict):
            container = {}
            self.generated_content[key] = container
        items = container.get(items_key)
        if not isinstance(items, list):
            items = []
            container[items_key] = items
        items.append(dict(placeholder))

    def remove_item(self, section: str, index: int) -> bool:
        items = self.section_items(section)
        if len(items) <= 1 or not (0 <= index < len(items)):
            return False
        del items[index]
        return True

    # -------------------------------------------------------------- persist --
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "subdomain": self.subdomain,
            "template_id": self.template_id,
            "beroep": self.beroep,
            "content": copy.deepcopy(self.content),
            "generated_content": copy.deepcopy(self.generated_content),
            "published": self.published,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Site":
        return cls(
            id=str(data.get("id", "")),
            user_id=str(data.get("user_id", "")),
            subdomain=data.get("subdomain", ""),
            template_id=data.get("template_id", "classic"),
            beroep=data.get("beroep", ""),
            content=dict(data.get("content") or {}),
            generated_content=dict(data.get("generated_content") or {}),
            published=bool(data.get("published", False)),
        )
