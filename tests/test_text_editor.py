from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.preview.dom import parse_html, visible_text
from siteeditor.preview.tagger import BaselineCache
from siteeditor.preview.text_editor import EDITING_CLASS, InlineTextEditor


def setup(recorder):
    soup = parse_html("<div><p>Welkom bij mijn praktijk</p><h2>Diensten</h2></div>")
    changes = recorder()
    return soup, InlineTextEditor(BaselineCache(), changes), changes


def test_enter_commits_once(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    assert soup.p["contenteditable"] == "true"
    assert EDITING_CLASS in soup.p["class"]

    editor.type("Welkom op mijn website")
    editor.key("Enter")

    assert changes.calls == [("Welkom bij mijn praktijk", "Welkom op mijn website")]
    assert not editor.editing
    assert not soup.p.has_attr("contenteditable")
    assert not soup.p.has_attr("class")


def test_shift_enter_does_not_commit(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.key("Enter", shift=True)
    assert editor.editing
    assert changes.calls == []


def test_empty_commit_restores_baseline(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.type("")
    assert visible_text(soup.p) == ""
    assert editor.blur() is None
    assert visible_text(soup.p) == "Welkom bij mijn praktijk"
    assert changes.calls == []


def test_escape_discards(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.type("Iets anders")
    editor.key("Escape")
    assert visible_text(soup.p) == "Welkom bij mijn praktijk"
    assert changes.calls == []
    assert not editor.editing


def test_unchanged_text_is_not_reported(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.blur()
    assert changes.calls == []


def test_typing_at_a_caret(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-1", soup.h2)
    editor.select(len("Diensten"))
    editor.type(" en tarieven")
    editor.blur()
    assert changes.calls == [("Diensten", "Diensten en tarieven")]


def test_editing_another_element_commits_the_first(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.type("Nieuw")
    editor.begin("text-1", soup.h2)
    assert changes.calls == [("Welkom bij mijn praktijk", "Nieuw")]
    assert editor.element is soup.h2


def test_baseline_comes_from_the_cache(recorder) -> None:
    soup = parse_html("<p>Bewerkt</p>")
    cache = BaselineCache()
    cache.set("text-0", "Origineel")
    changes = recorder()
    editor = InlineTextEditor(cache, changes)
    editor.begin("text-0", soup.p)
    editor.type("Opnieuw")
    editor.blur()
    assert changes.calls == [("Origineel", "Opnieuw")]


def test_rebind_keeps_the_typed_buffer(recorder) -> None:
    soup, editor, changes = setup(recorder)
    editor.begin("text-0", soup.p)
    editor.type("Half getypt")
    fresh = parse_html("<p>Welkom bij mijn praktijk</p>").p
    editor.rebind(fresh)
    assert visible_text(fresh) == "Half getypt"
    assert fresh["contenteditable"] == "true"
    editor.key("Enter")
    assert changes.calls == [("Welkom bij mijn praktijk", "Half getypt")]
