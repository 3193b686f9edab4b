from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.preview.dom import parse_html
from siteeditor.preview.router import ActionKind, ClickEvent, route

PAGE = """
<div class="editable-preview">
  <nav role="navigation"><a href="#over">Over mij</a></nav>
  <a class="logo" href="/"><img src="logo.png"></a>
  <img class="foto" src="foto.jpg">
  <a class="px-6 rounded-lg bg-teal-600" href="#contact"><span>Maak een afspraak</span></a>
  <section class="sfeer" style="background-image: url('sfeer.jpg')">
    <div class="inner"><div class="deeper"><p>Over mijn praktijk</p></div></div>
  </section>
  <div class="grid"><div class="item"><button data-remove-btn="faq-0">×</button></div></div>
  <div class="empty"></div>
</div>
"""


def setup():
    soup = parse_html(PAGE)
    return soup, soup.find("div", class_="editable-preview")


def click(target, root):
    event = ClickEvent(target)
    return event, route(event, root)


def test_image_inside_link_wins() -> None:
    soup, root = setup()
    link = soup.find("a", class_="logo")
    event, action = click(link, root)
    assert action.kind is ActionKind.REPLACE_IMAGE
    assert action.element is link.img
    assert event.default_prevented and event.propagation_stopped


def test_plain_image() -> None:
    soup, root = setup()
    img = soup.find("img", class_="foto")
    _, action = click(img, root)
    assert action.kind is ActionKind.REPLACE_IMAGE
    assert action.element is img


def test_text_inside_button_is_edited_not_styled() -> None:
    soup, root = setup()
    span = soup.find("span")
    _, action = click(span, root)
    assert action.kind is ActionKind.EDIT_TEXT
    assert action.element is span


def test_button_padding_opens_style_popover() -> None:
    soup, root = setup()
    button = soup.find("a", class_="bg-teal-600")
    event, action = click(button, root)
    assert action.kind is ActionKind.STYLE_BUTTON
    assert action.element is button
    assert event.default_prevented


def test_nav_link_is_blocked_but_not_editable() -> None:
    soup, root = setup()
    event, action = click(soup.nav.a, root)
    assert action.kind is ActionKind.NONE
    assert event.default_prevented
    assert not event.propagation_stopped


def test_background_image_within_three_levels() -> None:
    soup, root = setup()
    section = soup.find("section")
    _, action = click(soup.find("div", class_="inner"), root)
    assert action.kind is ActionKind.REPLACE_BACKGROUND
    assert action.element is section

    # Text on top of a background stays text.
    _, action = click(section.p, root)
    assert action.kind is ActionKind.EDIT_TEXT


def test_background_too_far_up_is_ignored() -> None:
    soup, root = setup()
    deep = parse_html("<b></b>").b
    soup.find("div", class_="deeper").append(deep)
    _, action = click(deep, root)
    assert action.kind is ActionKind.NONE


def test_controls_bypass_classification() -> None:
    soup, root = setup()
    control = soup.find("button")
    _, action = click(control, root)
    assert action.kind is ActionKind.CONTROL
    assert action.element is control


def test_empty_space_is_a_silent_no_op() -> None:
    soup, root = setup()
    event, action = click(soup.find("div", class_="empty"), root)
    assert action.kind is ActionKind.NONE
    assert not event.default_prevented
