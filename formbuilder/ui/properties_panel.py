"""Side panel editing the attributes of the selected field."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, palette, resolve_kind
from formbuilder.state.properties import (
    add_option,
    adopt_metadata_options,
    current_options,
    editable_properties,
    field_info,
    remove_option,
    update_option,
)


class PropertiesPanel(QWidget):
    field_updated = Signal(str, object)
    kind_changed = Signal(str, object)
    close_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self._field: FormField | None = None
        self.setFixedWidth(320)

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        title = QLabel("Field Properties")
        title.setStyleSheet("font-size: 15px; font-weight: 600")
        header.addWidget(title)
        header.addStretch(1)
        close_button = QPushButton("✕")
        close_button.setFixedWidth(28)
        close_button.clicked.connect(self.close_requested)
        header.addWidget(close_button)
        layout.addLayout(header)

        self.stack = QStackedWidget()
        layout.addWidget(self.stack, 1)

        empty = QLabel("No Field Selected\n\nSelect a field from the canvas to edit its properties")
        empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        empty.setWordWrap(True)
        self.stack.addWidget(empty)

        editor = QWidget()
        form = QFormLayout(editor)

        self.type_combo = QComboBox()
        for spec in palette():
            self.type_combo.addItem(spec.title, spec.kind.value)
        self.type_combo.activated.connect(self._on_type_activated)
        form.addRow("Field Type", self.type_combo)

        self.label_edit = QLineEdit()
        self.label_edit.setPlaceholderText("Enter field label...")
        self.label_edit.textEdited.connect(lambda text: self._emit({"label": text}))
        form.addRow("Field Label", self.label_edit)

        self.placeholder_label = QLabel("Placeholder")
        self.placeholder_edit = QLineEdit()
        self.placeholder_edit.setPlaceholderText("Enter placeholder text...")
        self.placeholder_edit.textEdited.connect(lambda text: self._emit({"placeholder": text}))
        form.addRow(self.placeholder_label, self.placeholder_edit)

        self.options_label = QLabel("Options")
        self.options_box = QWidget()
        options_layout = QVBoxLayout(self.options_box)
        options_layout.setContentsMargins(0, 0, 0, 0)
        self._option_rows = QVBoxLayout()
        options_layout.addLayout(self._option_rows)
        new_row = QHBoxLayout()
        self.new_option_edit = QLineEdit()
        self.new_option_edit.setPlaceholderText("Add new option...")
        self.new_option_edit.returnPressed.connect(self.commit_new_option)
        new_row.addWidget(self.new_option_edit)
        add_button = QPushButton("+")
        add_button.setFixedWidth(28)
        add_button.clicked.connect(self.commit_new_option)
        new_row.addWidget(add_button)
        options_layout.addLayout(new_row)
        form.addRow(self.options_label, self.options_box)

        self.required_check = QCheckBox("Required field")
        self.required_check.toggled.connect(lambda checked: self._emit({"required": checked}))
        form.addRow(self.required_check)

        self.info_label = QLabel()
        self.info_label.setStyleSheet("background: #eef4fb; padding: 8px; border-radius: 6px")
        self.info_label.setTextFormat(Qt.TextFormat.PlainText)
        form.addRow(self.info_label)
        self.stack.addWidget(editor)

        self.option_edits: list[QLineEdit] = []
        self.set_field(None)

    @property
    def field(self) -> FormField | None:
        return self._field

    def set_field(self, field: FormField | None) -> None:
        self._field = field
        if field is None:
            self.stack.setCurrentIndex(0)
            return

        patch = adopt_metadata_options(field)
        if patch is not None:
            self.field_updated.emit(field.id, patch)

        properties = editable_properties(field)
        self._set_quietly(self.type_combo, lambda: self._select_type(field))
        self._set_quietly(self.label_edit, lambda: self.label_edit.setText(field.label))
        self._set_quietly(
            self.placeholder_edit, lambda: self.placeholder_edit.setText(field.placeholder)
        )
        self._set_quietly(
            self.required_check, lambda: self.required_check.setChecked(field.required)
        )
        self.placeholder_label.setVisible(properties.placeholder)
        self.placeholder_edit.setVisible(properties.placeholder)
        self.options_label.setVisible(properties.options)
        self.options_box.setVisible(properties.options)
        self.required_check.setVisible(properties.required)
        self.new_option_edit.clear()
        self._rebuild_options()
        self.refresh_info()
        self.stack.setCurrentIndex(1)

    def refresh_info(self) -> None:
        if self._field is None:
            return
        self.info_label.setText(
            "\n".join(f"{name}: {value}" for name, value in field_info(self._field))
        )

    def commit_new_option(self) -> None:
        if self._field is None:
            return
        patch = add_option(self._field, self.new_option_edit.text())
        if patch is None:
            return
        self.new_option_edit.clear()
        self._emit(patch)
        self._rebuild_options()

    def remove_option_at(self, index: int) -> None:
        if self._field is None:
            return
        patch = remove_option(self._field, index)
        if patch is not None:
            self._emit(patch)
            self._rebuild_options()

    def edit_option(self, index: int, text: str) -> None:
        if self._field is None:
            return
        patch = update_option(self._field, index, text)
        if patch is not None:
            self._emit(patch)

    def _emit(self, patch: dict[str, Any]) -> None:
        if self._field is not None:
            self.field_updated.emit(self._field.id, patch)
            self.refresh_info()

    def _on_type_activated(self, index: int) -> None:
        if self._field is None:
            return
        kind = resolve_kind(self.type_combo.itemData(index))
        if kind is not self._field.kind:
            self.kind_changed.emit(self._field.id, kind)

    def _select_type(self, field: FormField) -> None:
        index = self.type_combo.findData(field.kind.value)
        if field.kind is FieldKind.UNKNOWN:
            if index < 0:
                self.type_combo.addItem(field.type_name, FieldKind.UNKNOWN.value)
                index = self.type_combo.count() - 1
            else:
                self.type_combo.setItemText(index, field.type_name)
        self.type_combo.setCurrentIndex(index)

    def _rebuild_options(self) -> None:
        while self._option_rows.count():
            item = self._option_rows.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self.option_edits = []
        if self._field is None:
            return

        for index, option in enumerate(current_options(self._field)):
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(0, 0, 0, 0)
            edit = QLineEdit(_option_text(option))
            edit.setPlaceholderText("Option text...")
            edit.textEdited.connect(lambda value, index=index: self.edit_option(index, value))
            row_layout.addWidget(edit)
            remove = QPushButton("✕")
            remove.setFixedWidth(28)
            remove.clicked.connect(lambda _checked=False, index=index: self.remove_option_at(index))
            row_layout.addWidget(remove)
            self._option_rows.addWidget(row)
            self.option_edits.append(edit)

    @staticmethod
    def _set_quietly(widget: QWidget, apply) -> None:
        widget.blockSignals(True)
        try:
            apply()
        finally:
            widget.blockSignals(False)


def _option_text(option: Any) -> str:
    if isinstance(option, dict):
        return str(option.get("label", option.get("value", "")))
    return option if isinstance(option, str) else ""
