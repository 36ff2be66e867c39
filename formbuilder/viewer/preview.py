"""Live preview / data-collection view of a form definition."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QPushButton, QScrollArea, QVBoxLayout, QWidget

from formbuilder.config import Settings
from formbuilder.model.definition import FormDefinition
from formbuilder.state.values import FormValues
from formbuilder.viewer.renderer import FormView, RenderMode, render_form
from formbuilder.viewer.services import AddressLookup


class FormPreview(QWidget):
    submitted = Signal(object)
    button_pressed = Signal(str)

    def __init__(
        self,
        address_lookup: AddressLookup | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__()
        self._address_lookup = address_lookup
        self._settings = settings
        self._values: FormValues | None = None
        self.form_view: FormView | None = None

        layout = QVBoxLayout(self)
        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-size: 16px; font-weight: 600")
        layout.addWidget(self.title_label)
        self.description_label = QLabel()
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        layout.addWidget(self.scroll_area, 1)

        self.empty_label = QLabel("No Preview Available\nAdd some fields to see the form preview")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.empty_label)

        self.submit_button = QPushButton("Submit Form")
        self.submit_button.clicked.connect(self.submit)
        layout.addWidget(self.submit_button, 0, Qt.AlignmentFlag.AlignHCenter)

        self.set_definition(FormDefinition(), None)

    def set_definition(self, definition: FormDefinition, values: FormValues | None) -> None:
        self._values = values if values is not None else FormValues(definition)
        self.title_label.setText(definition.title or "Preview Form")
        self.description_label.setText(definition.description)
        self.description_label.setVisible(bool(definition.description))

        has_fields = bool(definition.fields)
        self.empty_label.setVisible(not has_fields)
        self.scroll_area.setVisible(has_fields)
        self.submit_button.setVisible(has_fields)

        self.form_view = render_form(
            definition,
            self._values,
            RenderMode.INTERACTIVE,
            on_event=self.button_pressed.emit,
            address_lookup=self._address_lookup,
            settings=self._settings,
        )
        self.scroll_area.setWidget(self.form_view)

    def values(self) -> dict[str, Any]:
        return self._values.as_dict() if self._values is not None else {}

    def submit(self) -> None:
        self.submitted.emit(self.values())
