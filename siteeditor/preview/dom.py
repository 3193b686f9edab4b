"""Small helpers over BeautifulSoup trees that mirror what the preview needs
from a browser DOM: visible text, inline styles, ancestry and classes."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterator, Optional

from bs4 import BeautifulSoup, Tag

_URL_RE = re.compile(r"url\(\s*(['\"]?)(.*?)\1\s*\)", re.IGNORECASE)
_ARBITRARY_BG_RE = re.compile(r"^bg-\[url\((['\"]?)(.*?)\1\)\]$")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def visible_text(el: Tag) -> str:
    """Approximate ``innerText.trim()``: whitespace-collapsed text content."""
    return " ".join(el.get_text().split())


def set_text(el: Tag, text: str) -> None:
    """Replace all children of ``el`` with a single text node."""
    el.clear()
    el.append(text)


def classes(el: Tag) -> list[str]:
    value = el.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def has_class(el: Tag, name: str) -> bool:
    return name in classes(el)


def add_class(el: Tag, name: str) -> None:
    current = classes(el)
    if name not in current:
        current.append(name)
        el["class"] = current


def remove_class(el: Tag, name: str) -> None:
    current = [c for c in classes(el) if c != name]
    if current:
        el["class"] = current
    elif el.has_attr("class"):
        del el["class"]


def closest(el: Optional[Tag], predicate: Callable[[Tag], bool], limit: Optional[int] = None) -> Optional[Tag]:
    """Walk from ``el`` up through its ancestors (self included)."""
    steps = 0
    current = el
    while isinstance(current, Tag) and current.name != "[document]":
        if limit is not None and steps >= limit:
            return None
        if predicate(current):
            return current
        current = current.parent
        steps += 1
    return None


def is_descendant(el: Tag, ancestor: Tag) -> bool:
    return closest(el, lambda node: node is ancestor) is not None


# ------------------------------------------------------------ inline styles --
def parse_style(value: Optional[str]) -> Dict[str, str]:
    """Parse an inline ``style`` attribute into an ordered property map."""
    result: Dict[str, str] = {}
    if not value:
        return result
    # Split on semicolons that are not inside parentheses (url(...), rgba(...)).
    depth = 0
    start = 0
    chunks = []
    for index, char in enumerate(value):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif char == ";" and depth == 0:
            chunks.append(value[start:index])
            start = index + 1
    chunks.append(value[start:])
    for chunk in chunks:
        if ":" not in chunk:
            continue
        prop, _, val = chunk.partition(":")
        prop = prop.strip().lower()
        val = val.strip()
        if prop and val:
            result[prop] = val
    return result


def format_style(props: Dict[str, str]) -> str:
    return "; ".join(f"{prop}: {val}" for prop, val in props.items())


def get_style(el: Tag, prop: str) -> Optional[str]:
    value = parse_style(el.get("style")).get(prop)
    if value is None:
        return None
    return value.replace("!important", "").strip()


def set_style(el: Tag, prop: str, value: str, important: bool = False) -> None:
    props = parse_style(el.get("style"))
    props[prop] = f"{value} !important" if important else value
    el["style"] = format_style(props)


def remove_style(el: Tag, *props: str) -> None:
    current = parse_style(el.get("style"))
    for prop in props:
        current.pop(prop, None)
    if current:
        el["style"] = format_style(current)
    elif el.has_attr("style"):
        del el["style"]


def background_image_url(el: Tag) -> Optional[str]:
    """Return the url of an inline or arbitrary-class background image."""
    props = parse_style(el.get("style"))
    for prop in ("background-image", "background"):
        value = props.get(prop)
        if value:
            match = _URL_RE.search(value)
            if match:
                return match.group(2)
    for name in classes(el):
        match = _ARBITRARY_BG_RE.match(name)
        if match:
            return match.group(2)
    return None


def iter_elements(root: Tag, skip: Callable[[Tag], bool]) -> Iterator[Tag]:
    """Depth-first pre-order walk over element descendants of ``root``.

    Subtrees whose root satisfies ``skip`` are not entered.
    """
    stack = [child for child in reversed(list(root.children)) if isinstance(child, Tag)]
    while stack:
        node = stack.pop()
        if skip(node):
            continue
        yield node
        stack.extend(child for child in reversed(list(node.children)) if isinstance(child, Tag))
