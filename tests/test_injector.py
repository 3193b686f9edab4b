from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.models import ButtonStyle, OverrideSet
from siteeditor.injector import inject_overrides, strip_quotes

HTML = (
    '<div class="site-body">'
    '<p>“Zorg die bij u past”</p>'
    "<h2>Diensten</h2>"
    '<img src="foto.jpg">'
    '<a class="bg-teal-600" href="#contact">Bel mij</a>'
    "</div>"
)


def test_strip_quotes() -> None:
    assert strip_quotes('  "Hallo"  ') == "Hallo"
    assert strip_quotes("«Zorg»") == "Zorg"
    assert strip_quotes("Geen 'quotes' binnenin") == "Geen 'quotes' binnenin"


def test_no_overrides_leaves_html_untouched() -> None:
    assert inject_overrides(HTML, OverrideSet()) == HTML


def test_text_match_tolerates_quotes() -> None:
    html = inject_overrides(HTML, OverrideSet(texts={"Zorg die bij u past": "Zorg op maat", '"Diensten"': "Aanbod"}))
    assert "<p>Zorg op maat</p>" in html
    assert "<h2>Aanbod</h2>" in html


def test_images_and_buttons_by_identity() -> None:
    html = inject_overrides(
        HTML,
        OverrideSet(
            images={"image-0": "https://cdn.example/nieuw.jpg"},
            buttons={"button-0": ButtonStyle(text_color="#000000")},
        ),
    )
    assert 'src="https://cdn.example/nieuw.jpg"' in html
    assert "color: #000000 !important" in html
    assert "onmouseenter" not in html
