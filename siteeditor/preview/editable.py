"""The editable preview session.

``EditablePreview`` owns one rendered copy of a site and turns host input
(clicks, keys, picked files, popover choices) into in-place edits. Edits
are reported through the host callbacks and never written into the site
itself; the host folds them into its content and calls :meth:`render`.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from ..core.generator import render_body, render_page
from ..core.models import Site
from ..core.styles import Stylesheet, editor_chrome, stylesheet_for_generated
from .dom import is_descendant, parse_html
from .items import inject_item_controls, parse_remove_target
from .modes import IDLE, EditMode, Mode, transition
from .popover import ButtonChangeCallback, ButtonStylePopover, Rect
from .router import NO_ACTION, Action, ActionKind, ClickEvent, route
from .tagger import BaselineCache, ElementRegistry, Tagger
from .text_editor import InlineTextEditor, TextChangeCallback
from .uploads import (
    MSG_UPLOAD_DISABLED,
    ImageReplaceCallback,
    ImageReplacementFlow,
    ImageUploader,
    LoggingNotifier,
    Notifier,
    SelectedFile,
)

logger = logging.getLogger(__name__)

PREVIEW_CLASS = "editable-preview"


class EditablePreview:
    def __init__(
        self,
        site: Site,
        on_image_replace: ImageReplaceCallback,
        on_text_change: TextChangeCallback,
        on_button_change: ButtonChangeCallback,
        on_add_item: Optional[Callable[[str], None]] = None,
        on_remove_item: Optional[Callable[[str, int], None]] = None,
        uploader: Optional[ImageUploader] = None,
        notifier: Optional[Notifier] = None,
        disable_image_upload: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.site = site
        self.on_image_replace = on_image_replace
        self.on_text_change = on_text_change
        self.on_button_change = on_button_change
        self.on_add_item = on_add_item
        self.on_remove_item = on_remove_item
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.disable_image_upload = disable_image_upload

        self.cache = BaselineCache()
        self.tagger = Tagger(self.cache)
        self.editor = InlineTextEditor(self.cache, self._text_committed)
        self.popover = ButtonStylePopover(on_button_change, clock=clock)
        self.uploads: Optional[ImageReplacementFlow] = None
        if uploader is not None:
            self.uploads = ImageReplacementFlow(uploader, self.notifier, self._image_replaced)

        self.mode: EditMode = IDLE
        self.soup: BeautifulSoup = BeautifulSoup("", "html.parser")
        self.container: Tag = self.soup
        self.registry = ElementRegistry()
        self.render()

    # ---------------------------------------------------------------- render --
    def render(self, site: Optional[Site] = None) -> Tag:
        """Re-render from the site and re-run the tag/apply pass.

        An element that is mid-edit (text, popover or pending upload) is
        followed onto its re-rendered copy.
        """
        if site is not None:
            self.site = site
        body = render_body(self.site)
        self.soup = parse_html(f'<div class="{PREVIEW_CLASS}">{body}</div>')
        self.container = self.soup.find("div", class_=PREVIEW_CLASS)
        editing = self.mode.identity if self.mode.kind is Mode.EDITING_TEXT else None
        self.registry = self.tagger.run(self.container, self.site.overrides, editing)
        self._rebind()
        if self.on_add_item is not None or self.on_remove_item is not None:
            inject_item_controls(
                self.soup,
                self.container,
                add=self.on_add_item is not None,
                remove=self.on_remove_item is not None,
            )
        return self.container

    def _rebind(self) -> None:
        if self.mode.idle:
            return
        el = self.registry.element(self.mode.identity)
        if el is None:
            logger.debug("%s vanished on re-render", self.mode)
            self._tear_down(self.mode, commit=False)
            self.mode = IDLE
            return
        if self.mode.kind is Mode.EDITING_TEXT:
            self.editor.rebind(el)
        elif self.mode.kind is Mode.EDITING_BUTTON:
            self.popover.rebind(el)
        elif self.uploads is not None:
            self.uploads.rebind(el)

    def stylesheet(self) -> Stylesheet:
        return editor_chrome(self.disable_image_upload) + stylesheet_for_generated(self.site.generated_content)

    def html(self) -> str:
        return str(self.container)

    def page_html(self) -> str:
        return render_page(self.site, self.html(), stylesheet=self.stylesheet().render())

    def element(self, identity: str) -> Optional[Tag]:
        return self.registry.element(identity)

    def identity_of(self, el: Tag) -> Optional[str]:
        return self.registry.identity_of(el)

    # ----------------------------------------------------------------- modes --
    def _enter(self, requested: EditMode) -> None:
        next_mode, interrupted = transition(self.mode, requested)
        if interrupted is not None:
            logger.debug("%s interrupted by %s", interrupted, requested)
            self._tear_down(interrupted)
        self.mode = next_mode

    def _tear_down(self, mode: EditMode, commit: bool = True) -> None:
        if mode.kind is Mode.EDITING_TEXT:
            if commit:
                self.editor.blur()
            else:
                self.editor.cancel()
        elif mode.kind is Mode.EDITING_BUTTON:
            self.popover.close()
        elif mode.kind is Mode.UPLOADING_IMAGE and self.uploads is not None:
            self.uploads.disarm()

    def end_current(self) -> None:
        """Finish whatever mode is active the normal way and go idle."""
        current = self.mode
        self.mode = IDLE
        self._tear_down(current)

    def _sync_text_mode(self) -> None:
        if self.mode.kind is Mode.EDITING_TEXT and not self.editor.editing:
            self.mode = IDLE

    def _text_committed(self, original: str, new_text: str) -> None:
        if self.mode.kind is Mode.EDITING_TEXT:
            self.mode = IDLE
        self.on_text_change(original, new_text)

    def _image_replaced(self, identity: str, url: str) -> None:
        if self.mode.kind is Mode.UPLOADING_IMAGE:
            self.mode = IDLE
        self.on_image_replace(identity, url)

    # ---------------------------------------------------------------- clicks --
    def click(
        self,
        target: Tag,
        anchor: Optional[Rect] = None,
        container_rect: Optional[Rect] = None,
        inside_popover: bool = False,
    ) -> Action:
        """Dispatch a click on ``target`` inside the preview."""
        if inside_popover:
            return NO_ACTION
        if self.editor.editing and self.editor.element is not None and is_descendant(target, self.editor.element):
            # Caret placement inside the element being edited.
            return NO_ACTION

        event = ClickEvent(target)
        action = route(event, self.container)

        if action.kind is ActionKind.NONE:
            # Plain clicks reach the document: blur the editor, close the popover.
            if self.mode.kind is Mode.EDITING_TEXT:
                self.end_current()
            elif self.mode.kind is Mode.EDITING_BUTTON and self.popover.click(target):
                self.mode = IDLE
            return action

        if action.kind is ActionKind.CONTROL:
            self._control(action.element)
            return action

        identity = self.registry.identity_of(action.element)
        if identity is None:
            logger.debug("Click on untagged <%s> ignored", action.element.name)
            return NO_ACTION

        if action.kind in (ActionKind.REPLACE_IMAGE, ActionKind.REPLACE_BACKGROUND):
            self._image_click(identity)
        elif action.kind is ActionKind.EDIT_TEXT:
            self._enter(EditMode.editing_text(identity))
            el = self.registry.element(identity)
            if el is not None and self.mode.kind is Mode.EDITING_TEXT:
                self.editor.begin(identity, el)
        elif action.kind is ActionKind.STYLE_BUTTON:
            self._enter(EditMode.editing_button(identity))
            el = self.registry.element(identity)
            if el is not None:
                self.popover.open(
                    identity,
                    el,
                    self.site.overrides.buttons.get(identity),
                    anchor=anchor,
                    container=container_rect,
                )
        return action

    def _image_click(self, identity: str) -> None:
        if self.disable_image_upload or self.uploads is None:
            self.end_current()
            self.notifier.notice(MSG_UPLOAD_DISABLED)
            return
        self._enter(EditMode.uploading_image(identity))
        el = self.registry.element(identity)
        if el is not None:
            self.uploads.arm(identity, el)

    def _control(self, el: Tag) -> None:
        self.end_current()
        if el.has_attr("data-add-btn"):
            section = el["data-add-btn"]
            logger.info("Add item to %s", section)
            if self.on_add_item is not None:
                self.on_add_item(section)
        elif el.has_attr("data-remove-btn"):
            section, index = parse_remove_target(el["data-remove-btn"])
            logger.info("Remove item %d from %s", index, section)
            if self.on_remove_item is not None:
                self.on_remove_item(section, index)

    # ------------------------------------------------------------------ text --
    def select_text(self, start: int, end: Optional[int] = None) -> None:
        self.editor.select(start, end)

    def type_text(self, text: str) -> None:
        self.editor.type(text)

    def press_key(self, key: str, shift: bool = False) -> None:
        self.editor.key(key, shift)
        self._sync_text_mode()

    def blur(self) -> None:
        self.editor.blur()
        self._sync_text_mode()

    # --------------------------------------------------------------- buttons --
    def set_button_background(self, color: str) -> None:
        self.popover.set_background(color)

    def set_button_text_color(self, choice: str) -> None:
        self.popover.set_text_color(choice)

    def set_button_radius(self, choice: str) -> None:
        self.popover.set_radius(choice)

    def reset_button(self) -> None:
        self.popover.reset()

    def close_popover(self) -> None:
        if self.mode.kind is Mode.EDITING_BUTTON:
            self.end_current()

    # ---------------------------------------------------------------- images --
    def file_selected(self, file: Optional[SelectedFile]) -> Optional[str]:
        if self.mode.kind is not Mode.UPLOADING_IMAGE or self.uploads is None:
            return None
        try:
            return self.uploads.file_selected(file)
        finally:
            if self.mode.kind is Mode.UPLOADING_IMAGE:
                self.mode = IDLE

    def file_picker_cancelled(self) -> None:
        if self.mode.kind is Mode.UPLOADING_IMAGE:
            self.end_current()
