from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.styles import (
    PUBLISHED_SCOPE,
    StyleSlot,
    build_stylesheet,
    editor_chrome,
    normalize_hex,
    stylesheet_for_generated,
)


def test_normalize_hex() -> None:
    assert normalize_hex("2563EB") == "#2563eb"
    assert normalize_hex(" #FFF ") == "#fff"
    with pytest.raises(ValueError):
        normalize_hex("blue")
    with pytest.raises(ValueError):
        normalize_hex("#12345")


def test_heading_slot_is_scoped_and_important() -> None:
    css = build_stylesheet({"headingColor": "#111111"}).render()
    assert css == (
        ".editable-preview h1, .editable-preview h2, .editable-preview h3, .editable-preview h4 "
        "{ color: #111111 !important; }"
    )


def test_stylesheet_is_deterministic_and_ignores_unknown_keys() -> None:
    a = build_stylesheet({"buttonRadius": "12px", "primaryColor": "#0d9488", "shadow": "big"})
    b = build_stylesheet({"primaryColor": "#0d9488", "buttonRadius": "12px"})
    assert a.render() == b.render()
    assert a.render().index("#0d9488") < a.render().index("12px")


def test_empty_styles_give_an_empty_stylesheet() -> None:
    assert not build_stylesheet({})
    assert not stylesheet_for_generated({"customStyles": {"bodyColor": ""}})


def test_published_scope_and_button_slots() -> None:
    css = stylesheet_for_generated({"customStyles": {StyleSlot.BUTTON_COLOR.value: "#2563eb"}}, PUBLISHED_SCOPE).render()
    assert '.site-content a[class*="bg-"]' in css
    assert "background-color: #2563eb !important" in css
    assert ".editable-preview" not in css


def test_editor_chrome_reflects_disabled_uploads() -> None:
    assert "cursor: pointer" in editor_chrome().render()
    disabled = editor_chrome(disable_image_upload=True).render()
    assert ".editable-preview img { cursor: not-allowed !important;" in disabled
    assert "brightness" not in disabled
