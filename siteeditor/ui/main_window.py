"""Main application window for the site editor."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import List, Optional

from bs4 import Tag
from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtWebEngineCore import QWebEnginePage
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..core import generator, storage
from ..core.backend import BackendClient
from ..core.models import Site
from ..core.settings import SettingsManager
from ..core.styles import StyleSlot, normalize_hex
from ..preview.editable import PREVIEW_CLASS, EditablePreview
from ..preview.modes import Mode
from ..preview.popover import BACKGROUND_SWATCHES, RADII, TEXT_COLORS, Rect
from ..preview.router import ActionKind
from ..preview.uploads import ImageField, ImageUploader, SelectedFile

logger = logging.getLogger(__name__)

APP_TITLE = "Site Editor"
SITE_FILTER = "Site (*.site.json *.json)"
IMAGE_FILTER = "Afbeeldingen (*.png *.jpg *.jpeg *.gif *.webp *.svg)"
MESSAGE_PREFIX = "siteeditor:"

# Reports every click inside the preview as a child-index path from the
# preview container, plus the geometry needed to place the popover.
CLICK_BRIDGE_JS = """
<script>
(function () {
  var root = document.querySelector('.%(root)s');
  if (!root) return;
  window.scrollTo(0, %(scroll)d);
  root.addEventListener('click', function (e) {
    e.preventDefault();
    e.stopPropagation();
    var path = [];
    var node = e.target;
    while (node && node !== root) {
      var parent = node.parentElement;
      if (!parent) return;
      path.unshift(Array.prototype.indexOf.call(parent.children, node));
      node = parent;
    }
    var r = e.target.getBoundingClientRect();
    var c = root.getBoundingClientRect();
    console.log('%(prefix)s' + JSON.stringify({
      path: path,
      scroll: window.scrollY,
      anchor: [r.left, r.top, r.width, r.height],
      container: [c.left, c.top, c.width, c.height]
    }));
  }, true);
})();
</script>
"""


def _element_children(el: Tag) -> List[Tag]:
    return [child for child in el.children if isinstance(child, Tag)]


def resolve_path(root: Tag, path: List[int]) -> Optional[Tag]:
    node = root
    for index in path:
        children = _element_children(node)
        if not 0 <= index < len(children):
            return None
        node = children[index]
    return node


class ColorButton(QtWidgets.QPushButton):
    """Small helper button that opens a color dialog and shows the current color."""

    colorChanged = QtCore.pyqtSignal(str)

    def __init__(self, color: str = "", parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._color = color
        self.setMinimumWidth(80)
        self.clicked.connect(self._choose_color)
        self._update_style()

    def color(self) -> str:
        return self._color

    def setColor(self, color: str, emit: bool = True) -> None:  # noqa: N802 (Qt naming)
        if color == self._color:
            return
        self._color = color
        self._update_style()
        if emit:
            self.colorChanged.emit(color)

    def _choose_color(self) -> None:
        dialog_color = QtWidgets.QColorDialog.getColor(QtGui.QColor(self._color or "#ffffff"), self.window())
        if dialog_color.isValid():
            self.setColor(dialog_color.name())

    def _update_style(self) -> None:
        if not self._color:
            self.setText("Standaard")
            self.setStyleSheet("")
            return
        self.setText(self._color.upper())
        fg = "#000000" if QtGui.QColor(self._color).lightness() > 140 else "#ffffff"
        self.setStyleSheet(f"background:{self._color}; color:{fg}; border:1px solid #94a3b8; padding:4px;")


class QtNotifier:
    """Alerts as message boxes, the busy state as a wait cursor."""

    def __init__(self, window: QtWidgets.QMainWindow) -> None:
        self.window = window

    def alert(self, message: str) -> None:
        QtWidgets.QMessageBox.warning(self.window, APP_TITLE, message)

    def busy(self, active: bool) -> None:
        if active:
            QtWidgets.QApplication.setOverrideCursor(QtCore.Qt.CursorShape.WaitCursor)
        else:
            QtWidgets.QApplication.restoreOverrideCursor()

    def notice(self, message: str) -> None:
        status = self.window.statusBar()
        if status is not None:
            status.showMessage(message, 3000)


class PreviewPage(QWebEnginePage):
    clicked = QtCore.pyqtSignal(dict)

    def javaScriptConsoleMessage(self, level, message, line, source):  # noqa: N802 (Qt override)
        if message.startswith(MESSAGE_PREFIX):
            try:
                self.clicked.emit(json.loads(message[len(MESSAGE_PREFIX):]))
            except ValueError:
                logger.debug("Malformed preview message: %s", message)
            return
        super().javaScriptConsoleMessage(level, message, line, source)

    def acceptNavigationRequest(self, url, nav_type, is_main_frame):  # noqa: N802 (Qt override)
        # Preview only: links never navigate.
        if nav_type == QWebEnginePage.NavigationType.NavigationTypeLinkClicked:
            return False
        return super().acceptNavigationRequest(url, nav_type, is_main_frame)


class ButtonStyleDialog(QtWidgets.QDialog):
    """Qt rendition of the button popover; every choice is committed live."""

    def __init__(self, session: EditablePreview, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent, QtCore.Qt.WindowType.Popup)
        self.session = session
        layout = QtWidgets.QVBoxLayout(self)

        layout.addWidget(QtWidgets.QLabel("Achtergrond", self))
        grid = QtWidgets.QGridLayout()
        for index, color in enumerate(BACKGROUND_SWATCHES):
            swatch = QtWidgets.QPushButton(self)
            swatch.setFixedSize(22, 22)
            swatch.setToolTip(color)
            swatch.setStyleSheet(f"background:{color}; border-radius:4px;")
            swatch.clicked.connect(lambda _=False, c=color: self._background(c))
            grid.addWidget(swatch, index // 6, index % 6)
        layout.addLayout(grid)
        self.custom_color = ColorButton(session.popover.style.bg_color or "", self)
        self.custom_color.colorChanged.connect(self._background)
        layout.addWidget(self.custom_color)

        layout.addWidget(QtWidgets.QLabel("Tekstkleur", self))
        text_row = QtWidgets.QHBoxLayout()
        for name, color in TEXT_COLORS.items():
            btn = QtWidgets.QPushButton(name, self)
            btn.setStyleSheet(f"color:{color};")
            btn.clicked.connect(lambda _=False, n=name: self.session.set_button_text_color(n))
            text_row.addWidget(btn)
        layout.addLayout(text_row)

        layout.addWidget(QtWidgets.QLabel("Hoeken", self))
        radius_row = QtWidgets.QHBoxLayout()
        for name in RADII:
            btn = QtWidgets.QPushButton(name, self)
            btn.clicked.connect(lambda _=False, n=name: self.session.set_button_radius(n))
            radius_row.addWidget(btn)
        layout.addLayout(radius_row)

        reset = QtWidgets.QPushButton("Herstel origineel", self)
        reset.clicked.connect(self._reset)
        layout.addWidget(reset)

    def _background(self, color: str) -> None:
        try:
            self.session.set_button_background(color)
        except ValueError as exc:
            QtWidgets.QMessageBox.warning(self, APP_TITLE, str(exc))

    def _reset(self) -> None:
        self.session.reset_button()
        self.custom_color.setColor("", emit=False)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, site_path: Optional[Path] = None, settings: Optional[SettingsManager] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1280, 820)

        self.settings = settings or SettingsManager()
        self.site: Site = self._default_site()
        self.site_path: Optional[Path] = None
        self.dirty = False
        self._scroll = 0
        self.notifier = QtNotifier(self)
        self.backend = self._make_backend()
        self.uploader = (
            ImageUploader(
                self.backend,
                max_bytes=self.settings.max_upload_bytes,
                cache_control=self.settings.get("cache_control", "3600"),
            )
            if self.backend is not None
            else None
        )

        self._build_ui()
        self._build_menu()
        self._bind_events()

        if site_path is not None:
            self.open_site(site_path)
        else:
            self._start_session()

    def _make_backend(self) -> Optional[BackendClient]:
        if not self.settings.get("backend_url"):
            logger.info("No backend configured; image upload disabled")
            return None
        return BackendClient.from_settings(self.settings)

    # ------------------------------------------------------------------ UI --
    def _build_ui(self) -> None:
        splitter = QtWidgets.QSplitter(self)
        splitter.setOrientation(QtCore.Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        side = QtWidgets.QWidget(self)
        form = QtWidgets.QFormLayout(side)
        form.setContentsMargins(8, 8, 8, 8)

        self.template_combo = QtWidgets.QComboBox(side)
        self.template_combo.addItems(["classic", "modern", "warm"])
        form.addRow("Template", self.template_combo)

        self.style_buttons = {}
        labels = {
            StyleSlot.PRIMARY_COLOR: "Hoofdkleur",
            StyleSlot.HEADING_COLOR: "Koppen",
            StyleSlot.BODY_COLOR: "Tekst",
            StyleSlot.BUTTON_COLOR: "Knoppen",
            StyleSlot.BUTTON_TEXT_COLOR: "Knoptekst",
        }
        for slot, label in labels.items():
            button = ColorButton("", side)
            self.style_buttons[slot] = button
            form.addRow(label, button)

        self.radius_combo = QtWidgets.QComboBox(side)
        self.radius_combo.addItem("Standaard", "")
        for name, value in RADII.items():
            self.radius_combo.addItem(name, value)
        form.addRow("Knophoeken", self.radius_combo)

        self.btn_reset_styles = QtWidgets.QPushButton("Stijlen herstellen", side)
        form.addRow(self.btn_reset_styles)

        self.btn_photo = QtWidgets.QPushButton("Profielfoto kiezen…", side)
        self.btn_photo_remove = QtWidgets.QPushButton("Verwijderen", side)
        photo_row = QtWidgets.QHBoxLayout()
        photo_row.addWidget(self.btn_photo)
        photo_row.addWidget(self.btn_photo_remove)
        form.addRow("Foto", photo_row)
        self.photo_error = QtWidgets.QLabel("", side)
        self.photo_error.setStyleSheet("color:#dc2626;")
        form.addRow(self.photo_error)

        self.preview = QWebEngineView(self)
        self.preview_page = PreviewPage(self.preview)
        self.preview.setPage(self.preview_page)

        splitter.addWidget(side)
        splitter.addWidget(self.preview)
        splitter.setSizes([300, 980])

        self.status = self.statusBar()

    def _build_menu(self) -> None:
        bar = self.menuBar()
        if bar is None:
            bar = QtWidgets.QMenuBar(self)
            self.setMenuBar(bar)

        file_menu = bar.addMenu("&File")
        self.act_open = QtGui.QAction("Open Site…", self)
        self.act_save = QtGui.QAction("Save", self)
        self.act_save_as = QtGui.QAction("Save As…", self)
        self.act_export = QtGui.QAction("Export Site…", self)
        self.act_quit = QtGui.QAction("Quit", self)
        if file_menu is not None:
            file_menu.addAction(self.act_open)
            file_menu.addSeparator()
            file_menu.addActions([self.act_save, self.act_save_as])
            file_menu.addSeparator()
            file_menu.addAction(self.act_export)
            file_menu.addSeparator()
            file_menu.addAction(self.act_quit)

        help_menu = bar.addMenu("&Help")
        self.act_about = QtGui.QAction("About", self)
        if help_menu is not None:
            help_menu.addAction(self.act_about)

    def _bind_events(self) -> None:
        self.preview_page.clicked.connect(self._on_preview_click)
        self.template_combo.currentTextChanged.connect(self._on_template_changed)
        for slot, button in self.style_buttons.items():
            button.colorChanged.connect(lambda color, s=slot: self._on_style_changed(s, color))
        self.radius_combo.currentIndexChanged.connect(
            lambda _: self._on_style_changed(StyleSlot.BUTTON_RADIUS, self.radius_combo.currentData())
        )
        self.btn_reset_styles.clicked.connect(self._reset_styles)
        self.btn_photo.clicked.connect(self._choose_photo)
        self.btn_photo_remove.clicked.connect(self._remove_photo)

        self.act_open.triggered.connect(self.open_site_dialog)
        self.act_save.triggered.connect(self.save_site)
        self.act_save_as.triggered.connect(self.save_site_as)
        self.act_export.triggered.connect(self.export_site)
        self.act_quit.triggered.connect(self.close)
        self.act_about.triggered.connect(self.show_about)

    # ------------------------------------------------------------- Session --
    def _start_session(self) -> None:
        self.session = EditablePreview(
            self.site,
            on_image_replace=self._on_image_replace,
            on_text_change=self._on_text_change,
            on_button_change=self._on_button_change,
            on_add_item=self._on_add_item,
            on_remove_item=self._on_remove_item,
            uploader=self.uploader,
            notifier=self.notifier,
            disable_image_upload=self.uploader is None,
        )
        self.photo_field = ImageField(self.uploader, self._on_photo_changed, self.site.content.get("foto")) if self.uploader else None
        self.btn_photo.setEnabled(self.photo_field is not None)
        self.btn_photo_remove.setEnabled(self.photo_field is not None)
        self._load_sidebar()
        self.update_window_title()
        self.update_preview()

    def _changed(self) -> None:
        self.dirty = True
        self.session.render(self.site)
        self.update_window_title()
        self.update_preview()

    def _on_image_replace(self, identity: str, url: str) -> None:
        self.site.replace_image(identity, url)
        self._changed()

    def _on_text_change(self, original: str, new_text: str) -> None:
        self.site.change_text(original, new_text)
        self._changed()

    def _on_button_change(self, identity: str, style: Optional[dict]) -> None:
        self.site.change_button(identity, style)
        self._changed()

    def _on_add_item(self, section: str) -> None:
        self.site.add_item(section)
        self._changed()

    def _on_remove_item(self, section: str, index: int) -> None:
        if self.site.remove_item(section, index):
            self._changed()

    def _on_preview_click(self, message: dict) -> None:
        self._scroll = int(message.get("scroll") or 0)
        target = resolve_path(self.session.container, message.get("path") or [])
        if target is None:
            logger.debug("Click path %s not found in preview tree", message.get("path"))
            return
        anchor = Rect(*message["anchor"]) if message.get("anchor") else None
        container = Rect(*message["container"]) if message.get("container") else None
        action = self.session.click(target, anchor=anchor, container_rect=container)

        if action.kind is ActionKind.EDIT_TEXT:
            self._edit_text()
        elif action.kind is ActionKind.STYLE_BUTTON:
            self._style_button(container)
        elif action.kind in (ActionKind.REPLACE_IMAGE, ActionKind.REPLACE_BACKGROUND):
            if self.session.mode.kind is Mode.UPLOADING_IMAGE:
                self._pick_image()

    def _edit_text(self) -> None:
        current = self.session.editor.text
        text, ok = QtWidgets.QInputDialog.getMultiLineText(self, "Tekst bewerken", "Tekst:", current)
        if not ok:
            self.session.press_key("Escape")
            return
        self.session.select_text(0, len(current))
        self.session.type_text(" ".join(text.split()))
        self.session.press_key("Enter")

    def _style_button(self, container: Optional[Rect]) -> None:
        dialog = ButtonStyleDialog(self.session, self)
        position = self.session.popover.position
        if position is not None and container is not None:
            # Popover positions are container-relative; the container moves with scrolling.
            point = position.in_viewport(container)
            dialog.move(self.preview.mapToGlobal(QtCore.QPoint(int(point.left), int(point.top))))
        dialog.exec()
        self.session.close_popover()

    def _pick_image(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Afbeelding kiezen", "", IMAGE_FILTER)
        if not path:
            self.session.file_picker_cancelled()
            return
        try:
            file = SelectedFile.from_path(path)
        except OSError as exc:
            self.session.file_picker_cancelled()
            QtWidgets.QMessageBox.warning(self, APP_TITLE, str(exc))
            return
        self.session.file_selected(file)

    # ------------------------------------------------------------- Sidebar --
    def _load_sidebar(self) -> None:
        styles = self.site.overrides.styles
        self.template_combo.blockSignals(True)
        self.template_combo.setCurrentText(self.site.template_id)
        self.template_combo.blockSignals(False)
        for slot, button in self.style_buttons.items():
            button.setColor(styles.get(slot.value, ""), emit=False)
        self.radius_combo.blockSignals(True)
        index = self.radius_combo.findData(styles.get(StyleSlot.BUTTON_RADIUS.value, ""))
        self.radius_combo.setCurrentIndex(max(index, 0))
        self.radius_combo.blockSignals(False)
        self.photo_error.clear()

    def _on_template_changed(self, template_id: str) -> None:
        if template_id and template_id != self.site.template_id:
            self.site.switch_template(template_id)
            self._changed()

    def _on_style_changed(self, slot: StyleSlot, value: Optional[str]) -> None:
        if value and slot is not StyleSlot.BUTTON_RADIUS:
            try:
                value = normalize_hex(value)
            except ValueError as exc:
                QtWidgets.QMessageBox.warning(self, APP_TITLE, str(exc))
                return
        self.site.set_style(slot.value, value or None)
        self._changed()

    def _reset_styles(self) -> None:
        for slot in StyleSlot:
            self.site.set_style(slot.value, None)
        self._load_sidebar()
        self._changed()

    def _choose_photo(self) -> None:
        if self.photo_field is None:
            return
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Profielfoto kiezen", "", IMAGE_FILTER)
        if not path:
            return
        self.notifier.busy(True)
        try:
            self.photo_field.handle_file(SelectedFile.from_path(path))
        finally:
            self.notifier.busy(False)
        self.photo_error.setText(self.photo_field.error)

    def _remove_photo(self) -> None:
        if self.photo_field is not None:
            self.photo_field.remove(delete_from_storage=True)
            self.photo_error.clear()

    def _on_photo_changed(self, url: Optional[str]) -> None:
        if url:
            self.site.content["foto"] = url
        else:
            self.site.content.pop("foto", None)
        self._changed()

    # ----------------------------------------------------------- Site Ops --
    def open_site_dialog(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Open Site", "", SITE_FILTER)
        if path:
            self.open_site(Path(path))

    def open_site(self, path: Path) -> None:
        try:
            self.site = storage.load_site(path)
        except (OSError, ValueError) as exc:
            logger.error("Could not open %s: %s", path, exc)
            QtWidgets.QMessageBox.critical(self, APP_TITLE, f"Kon {path} niet openen:\n{exc}")
            return
        self.site_path = Path(path)
        self.dirty = False
        self._start_session()
        if self.status is not None:
            self.status.showMessage(f"Opened {os.path.basename(path)}", 4000)

    def save_site(self) -> None:
        if not self.site_path:
            self.save_site_as()
            return
        storage.save_site(self.site_path, self.site)
        self.dirty = False
        self.update_window_title()
        if self.status is not None:
            self.status.showMessage("Site saved", 2500)

    def save_site_as(self) -> None:
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save Site As", "", SITE_FILTER)
        if not path:
            return
        path = path if path.endswith(".json") else f"{path}.site.json"
        self.site_path = Path(path)
        self.save_site()

    def export_site(self) -> None:
        out_dir = QtWidgets.QFileDialog.getExistingDirectory(self, "Export Site To…")
        if not out_dir:
            return
        generator.export_site(self.site, out_dir)
        if self.status is not None:
            self.status.showMessage(f"Exported site to {out_dir}", 5000)
        QtWidgets.QMessageBox.information(self, "Export complete", f"Your site was exported to:\n{out_dir}")

    # ----------------------------------------------------------- Preview --
    def update_preview(self) -> None:
        html = self.session.page_html()
        bridge = CLICK_BRIDGE_JS % {"root": PREVIEW_CLASS, "prefix": MESSAGE_PREFIX, "scroll": self._scroll}
        html = html.replace("</body>", bridge + "</body>")
        self.preview.setHtml(html, QtCore.QUrl("about:blank"))

    # ---------------------------------------------------------------- Misc --
    def show_about(self) -> None:
        QtWidgets.QMessageBox.information(
            self,
            "About",
            f"{APP_TITLE}\n\nClick any text, button or image in the preview to edit it in place.",
        )

    def update_window_title(self) -> None:
        name = self.site.content.get("naam") or self.site.subdomain or "Untitled"
        suffix = f" — {self.site_path.name}" if self.site_path else ""
        marker = " *" if self.dirty else ""
        self.setWindowTitle(f"{APP_TITLE} — {name}{suffix}{marker}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 (Qt override)
        if self.dirty:
            answer = QtWidgets.QMessageBox.question(
                self,
                APP_TITLE,
                "Er zijn niet-opgeslagen wijzigingen. Toch afsluiten?",
            )
            if answer != QtWidgets.QMessageBox.StandardButton.Yes:
                event.ignore()
                return
        if self.backend is not None:
            self.backend.close()
        super().closeEvent(event)

    # ------------------------------------------------------------ Defaults --
    def _default_site(self) -> Site:
        return Site(
            id=str(uuid.uuid4()),
            user_id="",
            subdomain="mijn-praktijk",
            beroep="Fysiotherapeut",
            content={
                "naam": "Sanne de Vries",
                "tagline": "Persoonlijke zorg, dichtbij huis",
                "email": "sanne@example.nl",
                "werkgebied": ["Utrecht", "Zeist"],
            },
            generated_content={
                "hero": {"titel": "Welkom bij mijn praktijk", "subtitel": "Fysiotherapie op maat"},
                "overMij": {"intro": "Al meer dan tien jaar help ik mensen weer in beweging."},
                "diensten": {
                    "titel": "Diensten",
                    "items": [
                        {"naam": "Sportrevalidatie", "beschrijving": "Sterker terug na een blessure.", "icon": "sports"},
                        {"naam": "Manuele therapie", "beschrijving": "Gerichte behandeling van gewrichten.", "icon": "healing"},
                    ],
                },
                "faq": {
                    "items": [
                        {"vraag": "Heb ik een verwijzing nodig?", "antwoord": "Nee, u kunt direct een afspraak maken."},
                        {"vraag": "Wordt het vergoed?", "antwoord": "Dat hangt af van uw aanvullende verzekering."},
                    ],
                },
                "cta": {"knop": "Maak een afspraak"},
                "contact": {"titel": "Contact", "intro": "Bel of mail gerust."},
            },
        )
