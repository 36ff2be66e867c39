"""Main application window for composing, previewing and exporting forms."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QFileDialog,
    QFormLayout,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QScrollArea,
    QSplitter,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from formbuilder.config import Settings, get_settings
from formbuilder.export.pdf_writer import PdfWriteError, write_definition_pdf
from formbuilder.export.serializer import (
    DefinitionFileError,
    InvalidDefinitionError,
    load_definition,
    save_definition,
)
from formbuilder.model.definition import FormDefinition, incomplete_fields
from formbuilder.model.kinds import FieldKind
from formbuilder.state.session import AuthoringSession
from formbuilder.ui.properties_panel import PropertiesPanel
from formbuilder.ui.sidebar import ComponentSidebar
from formbuilder.viewer.canvas import FormCanvas
from formbuilder.viewer.preview import FormPreview
from formbuilder.viewer.services import AddressLookup

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: Settings | None = None,
        address_lookup: AddressLookup | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or get_settings()
        self.setWindowTitle("Form Builder")
        self.resize(self._settings.window_width, self._settings.window_height)

        self._session = AuthoringSession(self._blank_definition())
        self._current_path: Path | None = None

        self.sidebar = ComponentSidebar()
        self.sidebar.kind_chosen.connect(self.add_field)

        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Form title")
        self.title_edit.textEdited.connect(self._on_title_edited)
        self.description_edit = QLineEdit()
        self.description_edit.setPlaceholderText("Form description")
        self.description_edit.textEdited.connect(self._on_description_edited)

        self.canvas = FormCanvas()
        self.canvas.field_clicked.connect(self.select_field)
        self.canvas.background_clicked.connect(self.deselect_field)
        self.canvas.remove_requested.connect(self.remove_field)
        self.canvas.field_dropped.connect(self._on_field_dropped)
        self.canvas.properties_toggle_requested.connect(self.toggle_properties)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setWidget(self.canvas)

        builder = QWidget()
        builder_layout = QVBoxLayout(builder)
        header = QFormLayout()
        header.addRow("Title", self.title_edit)
        header.addRow("Description", self.description_edit)
        builder_layout.addLayout(header)
        builder_layout.addWidget(self.scroll_area, 1)

        self.properties_panel = PropertiesPanel()
        self.properties_panel.field_updated.connect(self._on_field_updated)
        self.properties_panel.kind_changed.connect(self._on_kind_changed)
        self.properties_panel.close_requested.connect(self.hide_properties)

        splitter = QSplitter()
        splitter.addWidget(self.sidebar)
        splitter.addWidget(builder)
        splitter.addWidget(self.properties_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 4)
        splitter.setStretchFactor(2, 1)

        self.preview = FormPreview(address_lookup=address_lookup, settings=self._settings)
        self.preview.submitted.connect(self._on_preview_submitted)
        self.preview.button_pressed.connect(
            lambda field_id: self.statusBar().showMessage(f"Button pressed: {field_id}")
        )

        self.tabs = QTabWidget()
        self.tabs.addTab(splitter, "Builder")
        self.tabs.addTab(self.preview, "Preview")
        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.setCentralWidget(self.tabs)

        self._build_toolbar()
        self._refresh()
        self.statusBar().showMessage("Ready")

    @property
    def session(self) -> AuthoringSession:
        return self._session

    def _build_toolbar(self) -> None:
        toolbar = self.addToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.toolbar = toolbar

        new_action = QAction("New", self)
        new_action.setShortcut("Ctrl+N")
        new_action.triggered.connect(self.new_form)
        toolbar.addAction(new_action)

        open_action = QAction("Open JSON", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self.open_json)
        toolbar.addAction(open_action)

        export_action = QAction("Export JSON", self)
        export_action.setShortcut("Ctrl+S")
        export_action.triggered.connect(self.export_json)
        toolbar.addAction(export_action)

        pdf_action = QAction("Export PDF", self)
        pdf_action.triggered.connect(self.export_pdf)
        toolbar.addAction(pdf_action)

        toolbar.addSeparator()

        delete_action = QAction("Delete Field", self)
        delete_action.triggered.connect(self.delete_selected_field)
        toolbar.addAction(delete_action)

        copy_action = QAction("Copy Field", self)
        copy_action.setShortcut("Ctrl+D")
        copy_action.triggered.connect(self.copy_selected_field)
        toolbar.addAction(copy_action)

        toolbar.addSeparator()

        self.properties_action = QAction("Show Properties", self)
        self.properties_action.triggered.connect(self.toggle_properties)
        toolbar.addAction(self.properties_action)

    def new_form(self) -> None:
        self._session.load_definition(self._blank_definition())
        self._current_path = None
        self._refresh()
        self.statusBar().showMessage("New form")

    def open_json(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Open Form Definition",
            str(Path.home()),
            "JSON Files (*.json)",
        )
        if file_path:
            self.open_definition(file_path)

    def open_definition(self, path: str | Path) -> bool:
        try:
            definition = load_definition(path)
        except (DefinitionFileError, InvalidDefinitionError) as exc:
            logger.error("Failed to open %s: %s", path, exc)
            QMessageBox.critical(self, "Open Failed", str(exc))
            return False

        self._session.load_definition(definition)
        self._current_path = Path(path)
        self._refresh()
        self.statusBar().showMessage(
            f"Loaded: {path} ({len(definition.fields)} field(s))"
        )
        return True

    def export_json(self) -> None:
        if not self._confirm_incomplete():
            return

        default_path = self._current_path or Path.home() / self._settings.export_filename
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Form Definition",
            str(default_path),
            "JSON Files (*.json)",
        )
        if not output_path:
            return

        try:
            save_definition(self._session.snapshot(), output_path)
        except DefinitionFileError as exc:
            logger.error("Failed to export %s: %s", output_path, exc)
            QMessageBox.critical(self, "Export Failed", str(exc))
            return
        self._current_path = Path(output_path)
        self.statusBar().showMessage(f"Exported: {output_path}")

    def export_pdf(self) -> None:
        if not self._session.fields:
            QMessageBox.information(self, "Empty Form", "Add some fields first.")
            return

        stem = self._current_path.stem if self._current_path else "form"
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Fillable PDF",
            str(Path.home() / f"{stem}_fillable.pdf"),
            "PDF Files (*.pdf)",
        )
        if not output_path:
            return

        try:
            write_definition_pdf(
                self._session.snapshot(),
                output_path,
                values=self._session.preview_values.as_dict(),
            )
        except PdfWriteError as exc:
            logger.error("Failed to write %s: %s", output_path, exc)
            QMessageBox.critical(self, "Export Failed", str(exc))
            return
        self.statusBar().showMessage(f"Saved: {output_path}")

    def add_field(self, kind: FieldKind) -> None:
        new_field = self._session.add_field(kind)
        self._refresh_canvas()
        self._refresh_preview()
        self.statusBar().showMessage(
            f"Added {new_field.label}. {len(self._session.fields)} field(s)"
        )

    def select_field(self, field_id: str) -> None:
        # Cards are restyled, not rebuilt: the pressed card may be starting a drag.
        if self._session.select_field(field_id):
            self.canvas.set_selected(field_id)
            self._refresh_panel()

    def deselect_field(self) -> None:
        if self._session.selected_field_id is None and not self._session.properties_visible:
            return
        self._session.deselect()
        self.canvas.set_selected(None)
        self._refresh_panel()

    def remove_field(self, field_id: str) -> None:
        if self._session.remove_field(field_id):
            self._refresh()
            self.statusBar().showMessage(
                f"Deleted field. {len(self._session.fields)} field(s)"
            )

    def delete_selected_field(self) -> None:
        selected = self._session.selected_field_id
        if selected is None:
            self.statusBar().showMessage("No selected field to delete.")
            return
        self.remove_field(selected)

    def copy_selected_field(self) -> None:
        selected = self._session.selected_field_id
        duplicate = self._session.duplicate_field(selected) if selected else None
        if duplicate is None:
            self.statusBar().showMessage("No selected field to copy.")
            return
        self._refresh_canvas()
        self._refresh_preview()
        self.statusBar().showMessage(
            f"Copied field. {len(self._session.fields)} field(s)"
        )

    def toggle_properties(self) -> None:
        self._session.toggle_properties()
        self._refresh_panel()

    def hide_properties(self) -> None:
        self._session.hide_properties()
        self._refresh_panel()

    def enter_preview_mode(self) -> None:
        """Switch to data collection only, hiding the authoring surface."""
        self.tabs.setCurrentWidget(self.preview)
        self.tabs.setTabVisible(0, False)
        self.tabs.tabBar().setVisible(False)
        self.toolbar.setVisible(False)

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Delete and self.tabs.currentIndex() == 0:
            self.delete_selected_field()
            event.accept()
            return
        super().keyPressEvent(event)

    def _confirm_incomplete(self) -> bool:
        missing = incomplete_fields(self._session.definition)
        if not missing:
            return True
        labels = ", ".join(item.label or item.id for item in missing)
        answer = QMessageBox.question(
            self,
            "Incomplete Fields",
            f"These fields have no options yet: {labels}\n\nExport anyway?",
        )
        return answer == QMessageBox.StandardButton.Yes

    def _blank_definition(self) -> FormDefinition:
        return FormDefinition(
            title=self._settings.default_title,
            description=self._settings.default_description,
        )

    def _refresh(self) -> None:
        definition = self._session.definition
        if self.title_edit.text() != definition.title:
            self.title_edit.setText(definition.title)
        if self.description_edit.text() != definition.description:
            self.description_edit.setText(definition.description)
        self._refresh_canvas()
        self._refresh_panel()
        self._refresh_preview()

    def _refresh_canvas(self) -> None:
        self.canvas.set_fields(
            self._session.fields,
            self._session.selected_field_id,
            self._session.preview_values,
        )

    def _refresh_panel(self) -> None:
        visible = self._session.properties_visible
        self.properties_panel.setVisible(visible)
        self.properties_action.setText("Hide Properties" if visible else "Show Properties")
        if self.properties_panel.field is not self._session.selected_field:
            self.properties_panel.set_field(self._session.selected_field)

    def _refresh_preview(self) -> None:
        if self.tabs.currentWidget() is self.preview:
            self.preview.set_definition(self._session.definition, self._session.preview_values)

    def _on_tab_changed(self, index: int) -> None:
        del index
        self._refresh_preview()

    def _on_title_edited(self, text: str) -> None:
        self._session.set_title(text)

    def _on_description_edited(self, text: str) -> None:
        self._session.set_description(text)

    def _on_field_dropped(self, source_id: str, target_id: str) -> None:
        if self._session.move_field_to(source_id, target_id):
            self.canvas.reorder(self._session.definition.field_ids())
            self._refresh_preview()

    def _on_field_updated(self, field_id: str, patch: dict[str, Any]) -> None:
        if self._session.update_field(field_id, patch):
            self._refresh_canvas()

    def _on_kind_changed(self, field_id: str, kind: FieldKind) -> None:
        replacement = self._session.replace_kind(field_id, kind)
        if replacement is None:
            return
        self._refresh()
        self.statusBar().showMessage(f"Changed field type to {kind.value}")

    def _on_preview_submitted(self, values: dict[str, Any]) -> None:
        logger.info("Form submitted with %d value(s)", len(values))
        text = json.dumps(values, indent=2, default=lambda item: getattr(item, "name", str(item)))
        QMessageBox.information(self, "Form Submitted", text)
        self.statusBar().showMessage("Form submitted")
