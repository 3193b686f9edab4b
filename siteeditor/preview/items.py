"""Per-section "+ add" and "x remove" controls for repeating items."""

from __future__ import annotations

from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .dom import get_style, set_style

ADD_BUTTON_SECTIONS: Tuple[Tuple[str, str], ...] = (
    ("diensten", "+ Dienst toevoegen"),
    ("faq", "+ Vraag toevoegen"),
    ("werkervaring", "+ Werkervaring toevoegen"),
    ("voorwie", "+ Doelgroep toevoegen"),
)

ITEM_CONTAINER_SELECTOR = '.grid, [class*="space-y"], [class*="divide-y"], [class*="flex-col"], [class*="pl-8"]'
ITEM_TAGS = frozenset({"div", "article", "a", "section", "button"})
ITEM_HOST_ATTR = "data-item-host"

ADD_BUTTON_STYLE = (
    "display: block; width: 100%; max-width: 280px; margin: 20px auto 0; padding: 10px 20px; "
    "background: rgba(249, 115, 22, 0.06); color: #ea580c; border: 2px dashed rgba(249, 115, 22, 0.3); "
    "border-radius: 10px; font-size: 13px; font-weight: 600; cursor: pointer"
)
REMOVE_BUTTON_STYLE = (
    "position: absolute; top: 6px; right: 6px; width: 24px; height: 24px; border-radius: 50%; "
    "background: #ef4444; color: white; border: 2px solid white; font-size: 14px; font-weight: 700; "
    "cursor: pointer; z-index: 40; opacity: 0"
)


def _is_item(el: Tag) -> bool:
    return el.name in ITEM_TAGS and not el.has_attr("data-add-btn") and not el.has_attr("data-remove-btn")


def _item_children(container: Tag) -> List[Tag]:
    return [child for child in container.find_all(recursive=False) if _is_item(child)]


def find_items_in_section(section_el: Tag) -> Optional[Tuple[Tag, List[Tag]]]:
    """Pick the container with the most block-level children (at least two)."""
    best: Optional[Tag] = None
    best_count = 1
    for candidate in section_el.select(ITEM_CONTAINER_SELECTOR):
        count = len(_item_children(candidate))
        if count > best_count:
            best = candidate
            best_count = count
    if best is None:
        return None
    return best, _item_children(best)


def _content_area(section_el: Tag) -> Tag:
    return (
        section_el.select_one('[class*="max-w-"]')
        or section_el.select_one("section > div")
        or section_el.select_one("section")
        or section_el
    )


def remove_item_controls(root: Tag) -> None:
    for el in root.select("[data-add-btn], [data-remove-btn]"):
        el.decompose()
    for el in root.select(f"[{ITEM_HOST_ATTR}]"):
        del el[ITEM_HOST_ATTR]


def inject_item_controls(soup: BeautifulSoup, root: Tag, add: bool = True, remove: bool = True) -> None:
    remove_item_controls(root)
    if not (add or remove):
        return
    for section, label in ADD_BUTTON_SECTIONS:
        section_el = root.select_one(f'[data-section="{section}"]')
        if section_el is None:
            continue
        found = find_items_in_section(section_el)

        if remove and found is not None and len(found[1]) > 1:
            for index, item in enumerate(found[1]):
                position = get_style(item, "position")
                if not position or position == "static":
                    set_style(item, "position", "relative")
                item[ITEM_HOST_ATTR] = ""
                x_btn = soup.new_tag("button", attrs={
                    "type": "button",
                    "data-remove-btn": f"{section}-{index}",
                    "style": REMOVE_BUTTON_STYLE,
                })
                x_btn.string = "×"
                item.append(x_btn)

        if add:
            btn = soup.new_tag("button", attrs={
                "type": "button",
                "data-add-btn": section,
                "style": ADD_BUTTON_STYLE,
            })
            btn.string = label
            _content_area(section_el).append(btn)


def parse_remove_target(value: str) -> Tuple[str, int]:
    """``"faq-2"`` -> ``("faq", 2)``."""
    section, _, index = value.rpartition("-")
    return section, int(index)
