"""Field interpreter: turns one field definition plus a value into a live widget.

Every builder receives a :class:`RenderContext` and returns the control for
that field. Edits are reported through ``on_change`` with a value already in
the field's shape (see :mod:`formbuilder.model.values`); the renderer never
stores values itself and never performs I/O.

Three modes are supported:

``interactive``
    Controls are live and every edit is reported immediately.
``authoring-disabled``
    Controls are shown disabled to preview layout on the authoring canvas.
    Clicking a checkbox toggles the properties panel instead of changing the
    value.
``read-only``
    Controls are shown disabled and nothing is reported.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
import logging
import mimetypes
from typing import Any

from PySide6.QtCore import QDate, QRegularExpression, Qt
from PySide6.QtGui import QRegularExpressionValidator
from PySide6.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)
from shiboken6 import isValid

from formbuilder.config import Settings, get_settings
from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, ValueShape, choices_for
from formbuilder.model.values import (
    ImageRef,
    address_from_place,
    button_group_add,
    button_group_remove,
    button_group_set,
    coerce_value,
    merge_date_range,
    offers_remove,
    queue_images,
    remove_image,
    set_option_checked,
    shape_of,
    toggle_multi_select,
)
from formbuilder.state.values import FormValues
from formbuilder.viewer.services import AddressLookup

logger = logging.getLogger(__name__)

OnChange = Callable[[Any], None]

EMPTY_DATE = QDate(1900, 1, 1)
NUMBER_PATTERN = QRegularExpression(r"^-?\d*(\.\d*)?$")


class RenderMode(str, Enum):
    AUTHORING = "authoring-disabled"
    INTERACTIVE = "interactive"
    READ_ONLY = "read-only"


@dataclass(slots=True)
class RenderContext:
    field: FormField
    value: Any
    on_change: OnChange
    mode: RenderMode
    on_toggle_properties: Callable[[], None] | None = None
    address_lookup: AddressLookup | None = None
    settings: Settings | None = None

    @property
    def editable(self) -> bool:
        return self.mode is RenderMode.INTERACTIVE

    def emit(self, value: Any) -> None:
        if self.editable:
            self.on_change(value)

    def placeholder(self) -> str:
        if self.field.placeholder:
            return self.field.placeholder
        return f"Enter {self.field.label.lower()}" if self.field.label else ""


_warned_kinds: set[str] = set()


def render_field(
    field: FormField,
    value: Any,
    on_change: OnChange,
    mode: RenderMode = RenderMode.INTERACTIVE,
    *,
    on_toggle_properties: Callable[[], None] | None = None,
    address_lookup: AddressLookup | None = None,
    settings: Settings | None = None,
) -> QWidget | None:
    builder = _BUILDERS.get(field.kind)
    if builder is None:
        if field.type_name not in _warned_kinds:
            _warned_kinds.add(field.type_name)
            logger.warning("No renderer for field kind %r (field %s)", field.type_name, field.id)
        return None

    context = RenderContext(
        field=field,
        value=coerce_value(field, value),
        on_change=on_change,
        mode=RenderMode(mode),
        on_toggle_properties=on_toggle_properties,
        address_lookup=address_lookup,
        settings=settings,
    )
    widget = builder(context)
    widget.setObjectName(f"field-{field.id}")
    return widget


def _date_edit(text: str, enabled: bool) -> QDateEdit:
    edit = QDateEdit()
    edit.setCalendarPopup(True)
    edit.setDisplayFormat("yyyy-MM-dd")
    edit.setMinimumDate(EMPTY_DATE)
    # The minimum date doubles as "no date" and is shown blank.
    edit.setSpecialValueText(" ")
    parsed = QDate.fromString(text, Qt.DateFormat.ISODate) if text else QDate()
    edit.setDate(parsed if parsed.isValid() else EMPTY_DATE)
    edit.setEnabled(enabled)
    return edit


def date_text(date: QDate) -> str:
    if not date.isValid() or date == EMPTY_DATE:
        return ""
    return date.toString(Qt.DateFormat.ISODate)


def _build_line(context: RenderContext) -> QWidget:
    edit = QLineEdit(context.value)
    edit.setPlaceholderText(context.placeholder())
    if context.field.kind is FieldKind.NUMBER:
        edit.setValidator(QRegularExpressionValidator(NUMBER_PATTERN, edit))
    edit.setEnabled(context.editable)
    edit.textEdited.connect(lambda text: context.emit(text))
    return edit


def _build_textarea(context: RenderContext) -> QWidget:
    edit = QPlainTextEdit(context.value)
    edit.setPlaceholderText(context.placeholder())
    edit.setFixedHeight(72)
    edit.setEnabled(context.editable)
    edit.textChanged.connect(lambda: context.emit(edit.toPlainText()))
    return edit


def _build_date(context: RenderContext) -> QWidget:
    edit = _date_edit(context.value, context.editable)
    edit.dateChanged.connect(lambda date: context.emit(date_text(date)))
    return edit


def _build_select(context: RenderContext) -> QWidget:
    combo = QComboBox()
    combo.setPlaceholderText(context.field.placeholder or "Select an option...")
    for choice in choices_for(context.field):
        combo.addItem(choice.label, choice.value)
    combo.setCurrentIndex(combo.findData(context.value) if context.value else -1)
    combo.setEnabled(context.editable)

    def changed(index: int) -> None:
        context.emit(combo.itemData(index) if index >= 0 else "")

    combo.currentIndexChanged.connect(changed)
    return combo


def _build_checkbox(context: RenderContext) -> QWidget:
    container = QWidget()
    layout = QVBoxLayout(container)
    layout.setContentsMargins(0, 0, 0, 0)
    option_map = shape_of(context.field) is ValueShape.OPTION_MAP
    state = {"value": context.value}

    def bind(box: QCheckBox, option: str | None) -> None:
        if context.mode is RenderMode.AUTHORING:
            box.clicked.connect(lambda checked: _authoring_click(box, checked, context))
            return
        if option is None:
            box.toggled.connect(lambda checked: context.emit(checked))
            return

        def toggled(checked: bool) -> None:
            state["value"] = set_option_checked(state["value"], option, checked)
            context.emit(dict(state["value"]))

        box.toggled.connect(toggled)

    if option_map:
        for choice in choices_for(context.field):
            box = QCheckBox(choice.label)
            box.setChecked(bool(context.value.get(choice.value)))
            box.setEnabled(context.mode is not RenderMode.READ_ONLY)
            bind(box, choice.value)
            layout.addWidget(box)
    else:
        box = QCheckBox(context.field.label)
        box.setChecked(bool(context.value))
        box.setEnabled(context.mode is not RenderMode.READ_ONLY)
        bind(box, None)
        layout.addWidget(box)
    return container


def _authoring_click(box: QCheckBox, checked: bool, context: RenderContext) -> None:
    # On the canvas a checkbox click opens/closes the properties panel;
    # the previewed value stays as it was.
    box.blockSignals(True)
    box.setChecked(not checked)
    box.blockSignals(False)
    if context.on_toggle_properties is not None:
        context.on_toggle_properties()


def _build_radio(context: RenderContext) -> QWidget:
    container = QWidget()
    layout = QVBoxLayout(container)
    layout.setContentsMargins(0, 0, 0, 0)
    group = QButtonGroup(container)
    group.setExclusive(True)
    for choice in choices_for(context.field):
        button = QRadioButton(choice.label)
        button.setChecked(choice.value == context.value)
        button.setEnabled(context.editable)
        group.addButton(button)
        button.toggled.connect(
            lambda checked, value=choice.value: context.emit(value) if checked else None
        )
        layout.addWidget(button)
    return container


def _build_toggle(context: RenderContext) -> QWidget:
    button = QPushButton(context.field.label or "Toggle")
    button.setCheckable(True)
    button.setChecked(bool(context.value))
    button.setEnabled(context.editable)
    button.toggled.connect(lambda checked: context.emit(checked))
    return button


def _build_button(context: RenderContext) -> QWidget:
    button = QPushButton(context.field.label or "Button")
    button.setEnabled(context.editable)
    # Buttons carry no value: a click reports the field id as an event.
    button.clicked.connect(lambda: context.emit(context.field.id))
    return button


def _build_multi_select(context: RenderContext) -> QWidget:
    widget = QListWidget()
    allowed = [choice.value for choice in choices_for(context.field)]
    for choice in choices_for(context.field):
        item = QListWidgetItem(choice.label)
        item.setData(Qt.ItemDataRole.UserRole, choice.value)
        item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
        checked = choice.value in context.value
        item.setCheckState(Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked)
        widget.addItem(item)
    widget.setEnabled(context.editable)
    state = {"value": list(context.value)}

    def changed(item: QListWidgetItem) -> None:
        checked = item.checkState() == Qt.CheckState.Checked
        option = item.data(Qt.ItemDataRole.UserRole)
        state["value"] = toggle_multi_select(state["value"], option, checked, allowed)
        context.emit(list(state["value"]))

    widget.itemChanged.connect(changed)
    return widget


def _build_date_range(context: RenderContext) -> QWidget:
    container = QWidget()
    layout = QHBoxLayout(container)
    layout.setContentsMargins(0, 0, 0, 0)
    state = {"value": dict(context.value)}

    for key, title in (("startDate", "Start Date"), ("endDate", "End Date")):
        column = QVBoxLayout()
        column.addWidget(QLabel(title))
        edit = _date_edit(context.value[key], context.editable)
        edit.setObjectName(key)

        def changed(date: QDate, key: str = key) -> None:
            state["value"] = merge_date_range(state["value"], key, date_text(date))
            context.emit(dict(state["value"]))

        edit.dateChanged.connect(changed)
        column.addWidget(edit)
        layout.addLayout(column)
    return container


class ButtonGroupEditor(QWidget):
    """A growable list of text slots that never drops below one slot."""

    def __init__(
        self,
        values: list[str],
        placeholder: str,
        on_change: OnChange,
        editable: bool,
    ) -> None:
        super().__init__()
        self._values = list(values)
        self._placeholder = placeholder
        self._on_change = on_change
        self._editable = editable
        self.slot_edits: list[QLineEdit] = []
        self.remove_buttons: dict[int, QPushButton] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._rows = QVBoxLayout()
        layout.addLayout(self._rows)

        self.add_button = QPushButton("+ Add More")
        self.add_button.setEnabled(editable)
        self.add_button.clicked.connect(self.add_slot)
        layout.addWidget(self.add_button)

        self._rebuild()

    def values(self) -> list[str]:
        return list(self._values)

    def add_slot(self) -> None:
        self._commit(button_group_add(self._values))
        self._rebuild()

    def remove_slot(self, index: int) -> bool:
        if len(self._values) <= 1 or not 0 <= index < len(self._values):
            return False
        self._commit(button_group_remove(self._values, index))
        self._rebuild()
        return True

    def set_slot(self, index: int, text: str) -> None:
        self._commit(button_group_set(self._values, index, text))

    def _commit(self, values: list[str]) -> None:
        self._values = values
        if self._editable:
            self._on_change(list(values))

    def _rebuild(self) -> None:
        while self._rows.count():
            item = self._rows.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self.slot_edits = []
        self.remove_buttons = {}

        for index, text in enumerate(self._values):
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(0, 0, 0, 0)
            edit = QLineEdit(text)
            edit.setPlaceholderText(self._placeholder)
            edit.setEnabled(self._editable)
            edit.textEdited.connect(lambda value, index=index: self.set_slot(index, value))
            row_layout.addWidget(edit)
            self.slot_edits.append(edit)
            if offers_remove(index):
                remove = QPushButton("✕")
                remove.setToolTip("Remove field")
                remove.setEnabled(self._editable)
                remove.clicked.connect(lambda _checked=False, index=index: self.remove_slot(index))
                row_layout.addWidget(remove)
                self.remove_buttons[index] = remove
            self._rows.addWidget(row)


def _build_button_group(context: RenderContext) -> QWidget:
    return ButtonGroupEditor(
        context.value, context.placeholder(), context.emit, context.editable
    )


class AddressEditor(QWidget):
    """Address search box; the lookup itself belongs to an external service."""

    def __init__(
        self,
        value: dict[str, Any] | None,
        placeholder: str,
        on_change: OnChange,
        editable: bool,
        lookup: AddressLookup | None,
    ) -> None:
        super().__init__()
        self._on_change = on_change
        self._editable = editable
        self._lookup = lookup

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        row = QHBoxLayout()
        self.query_edit = QLineEdit()
        self.query_edit.setPlaceholderText(placeholder or "Search for a place")
        self.query_edit.setEnabled(editable)
        self.query_edit.returnPressed.connect(self.search)
        row.addWidget(self.query_edit)
        self.search_button = QPushButton("Search")
        self.search_button.setEnabled(editable)
        self.search_button.clicked.connect(self.search)
        row.addWidget(self.search_button)
        layout.addLayout(row)

        self.result_label = QLabel()
        self.result_label.setWordWrap(True)
        layout.addWidget(self.result_label)
        self._show(value)

    def search(self) -> None:
        query = self.query_edit.text().strip()
        if not query or not self._editable:
            return
        if self._lookup is None:
            self.apply_place({"formattedAddress": query})
            return
        self._lookup.search(query, self.apply_place)

    def apply_place(self, place: dict[str, Any]) -> None:
        address = address_from_place(place)
        if self._editable:
            self._on_change(address)
        # A late answer may arrive after this widget was torn down.
        if isValid(self):
            self._show(address)

    def _show(self, address: dict[str, Any] | None) -> None:
        text = address.get("formattedAddress", "") if isinstance(address, dict) else ""
        self.result_label.setText(text or "No address selected")


def _build_address(context: RenderContext) -> QWidget:
    return AddressEditor(
        context.value,
        context.field.placeholder,
        context.emit,
        context.editable,
        context.address_lookup,
    )


def _file_filter(formats: Iterable[str]) -> str:
    patterns: list[str] = []
    for fmt in formats:
        for extension in mimetypes.guess_all_extensions(fmt):
            pattern = f"*{extension}"
            if pattern not in patterns:
                patterns.append(pattern)
    return f"Images ({' '.join(patterns)})" if patterns else "All Files (*)"


class ImageUploadEditor(QWidget):
    """Queue of images: existing ones by URL, new picks kept local until upload."""

    def __init__(
        self,
        images: list[ImageRef],
        on_change: OnChange,
        editable: bool,
        settings: Settings,
    ) -> None:
        super().__init__()
        self._images = list(images)
        self._on_change = on_change
        self._editable = editable
        self._settings = settings

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.list_widget = QListWidget()
        self.list_widget.setEnabled(editable)
        layout.addWidget(self.list_widget)

        buttons = QHBoxLayout()
        self.add_button = QPushButton("Add Images")
        self.add_button.setEnabled(editable)
        self.add_button.clicked.connect(self._choose_files)
        buttons.addWidget(self.add_button)
        self.remove_button = QPushButton("Remove")
        self.remove_button.setEnabled(editable)
        self.remove_button.clicked.connect(self._remove_selected)
        buttons.addWidget(self.remove_button)
        layout.addLayout(buttons)

        self.error_label = QLabel()
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #c62828")
        layout.addWidget(self.error_label)
        self._refresh()

    def images(self) -> list[ImageRef]:
        return list(self._images)

    def add_files(self, paths: Iterable[str]) -> list[str]:
        images, errors = queue_images(
            self._images,
            paths,
            self._settings.accepted_image_formats,
            self._settings.max_image_size_mb,
            self._settings.max_image_files,
        )
        self.error_label.setText("\n".join(errors))
        if images != self._images:
            self._commit(images)
        return errors

    def remove_at(self, index: int) -> None:
        images = remove_image(self._images, index)
        if images != self._images:
            self._commit(images)

    def _commit(self, images: list[ImageRef]) -> None:
        self._images = images
        if self._editable:
            self._on_change(list(images))
        self._refresh()

    def _choose_files(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(
            self,
            "Select Images",
            "",
            _file_filter(self._settings.accepted_image_formats),
        )
        if paths:
            self.add_files(paths)

    def _remove_selected(self) -> None:
        row = self.list_widget.currentRow()
        if row >= 0:
            self.remove_at(row)

    def _refresh(self) -> None:
        self.list_widget.clear()
        for image in self._images:
            suffix = " (pending upload)" if image.pending else ""
            self.list_widget.addItem(f"{image.name}{suffix}")


def _build_images(context: RenderContext) -> QWidget:
    return ImageUploadEditor(
        context.value,
        context.emit,
        context.editable,
        context.settings or get_settings(),
    )


_BUILDERS: dict[FieldKind, Callable[[RenderContext], QWidget]] = {
    FieldKind.TEXT: _build_line,
    FieldKind.EMAIL: _build_line,
    FieldKind.NUMBER: _build_line,
    FieldKind.DATE: _build_date,
    FieldKind.TEXTAREA: _build_textarea,
    FieldKind.SELECT: _build_select,
    FieldKind.DROPDOWN: _build_select,
    FieldKind.CHECKBOX: _build_checkbox,
    FieldKind.RADIO: _build_radio,
    FieldKind.TOGGLE: _build_toggle,
    FieldKind.BUTTON: _build_button,
    FieldKind.BUTTON_GROUP: _build_button_group,
    FieldKind.MULTI_SELECT: _build_multi_select,
    FieldKind.DATE_RANGE: _build_date_range,
    FieldKind.ADDRESS: _build_address,
    FieldKind.MULTI_IMAGE_UPLOAD: _build_images,
}

# These kinds show their own label inside the control.
INLINE_LABEL_KINDS = frozenset({FieldKind.TOGGLE, FieldKind.BUTTON})


def field_caption(field: FormField) -> str:
    return f"{field.label} *" if field.required else field.label


class FormView(QWidget):
    """A whole definition rendered as a label/control form."""

    def __init__(self) -> None:
        super().__init__()
        self.controls: dict[str, QWidget] = {}
        self.form_layout = QFormLayout(self)


def _value_sink(values: FormValues, field_id: str) -> OnChange:
    def sink(value: Any) -> None:
        values.set(field_id, value)

    return sink


def _event_sink(on_event: Callable[[str], None] | None) -> OnChange:
    def sink(field_id: Any) -> None:
        if on_event is not None:
            on_event(field_id)

    return sink


def render_form(
    definition: FormDefinition,
    values: FormValues,
    mode: RenderMode = RenderMode.INTERACTIVE,
    *,
    on_event: Callable[[str], None] | None = None,
    address_lookup: AddressLookup | None = None,
    settings: Settings | None = None,
) -> FormView:
    view = FormView()
    for field in definition.fields:
        if field.kind is FieldKind.BUTTON:
            sink = _event_sink(on_event)
        else:
            sink = _value_sink(values, field.id)

        control = render_field(
            field,
            values.get(field.id),
            sink,
            mode,
            address_lookup=address_lookup,
            settings=settings,
        )
        if control is None:
            continue
        view.controls[field.id] = control
        is_plain_checkbox = (
            field.kind is FieldKind.CHECKBOX and shape_of(field) is not ValueShape.OPTION_MAP
        )
        if field.kind in INLINE_LABEL_KINDS or is_plain_checkbox:
            view.form_layout.addRow(control)
        else:
            view.form_layout.addRow(field_caption(field), control)
    return view
