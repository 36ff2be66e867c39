"""Authoring canvas: field cards with selection, removal and drag reordering."""

from __future__ import annotations

from PySide6.QtCore import QMimeData, QPoint, Qt, Signal
from PySide6.QtGui import QDrag
from PySide6.QtWidgets import (
    QApplication,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from formbuilder.model.field import FormField
from formbuilder.state.values import FormValues
from formbuilder.viewer.renderer import RenderMode, field_caption, render_field

FIELD_MIME_TYPE = "application/x-formbuilder-field"

SELECTED_STYLE = "FieldCard { border: 2px solid #c62828; border-radius: 6px; background: white; }"
IDLE_STYLE = "FieldCard { border: 1px solid #dedde2; border-radius: 6px; background: white; }"
DROP_STYLE = "FieldCard { border: 2px dashed #1565c0; border-radius: 6px; background: #eef4fb; }"


class FieldCard(QFrame):
    clicked = Signal(str)
    remove_requested = Signal(str)
    dropped = Signal(str, str)
    properties_toggle_requested = Signal()

    def __init__(self, field: FormField, selected: bool, values: FormValues) -> None:
        super().__init__()
        self.field_id = field.id
        self._selected = selected
        self._press_pos: QPoint | None = None
        self.setAcceptDrops(True)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        self.caption = QLabel(field_caption(field))
        self.caption.setStyleSheet("font-weight: 600")
        header.addWidget(self.caption)
        header.addStretch(1)
        self.badge = QLabel("Selected")
        self.badge.setStyleSheet(
            "background: #c62828; color: white; padding: 1px 6px; border-radius: 4px"
        )
        header.addWidget(self.badge)
        self.remove_button = QPushButton("Delete")
        self.remove_button.setToolTip("Remove field")
        self.remove_button.clicked.connect(lambda: self.remove_requested.emit(self.field_id))
        header.addWidget(self.remove_button)
        layout.addLayout(header)

        self.control = render_field(
            field,
            values.get(field.id),
            lambda value: values.set(field.id, value),
            RenderMode.AUTHORING,
            on_toggle_properties=self.properties_toggle_requested.emit,
        )
        if self.control is not None:
            layout.addWidget(self.control)
        else:
            unknown = QLabel(f"Unsupported field type: {field.type_name}")
            unknown.setStyleSheet("color: #757575; font-style: italic")
            layout.addWidget(unknown)
        self.set_selected(selected)

    @property
    def selected(self) -> bool:
        return self._selected

    def set_selected(self, selected: bool) -> None:
        self._selected = selected
        self.badge.setVisible(selected)
        self.setStyleSheet(SELECTED_STYLE if selected else IDLE_STYLE)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return
        self._press_pos = event.position().toPoint()
        self.clicked.emit(self.field_id)
        event.accept()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._press_pos is None:
            return
        distance = (event.position().toPoint() - self._press_pos).manhattanLength()
        if distance < QApplication.startDragDistance():
            return
        self._press_pos = None
        mime = QMimeData()
        mime.setData(FIELD_MIME_TYPE, self.field_id.encode("utf-8"))
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec(Qt.DropAction.MoveAction)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        del event
        self._press_pos = None

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(FIELD_MIME_TYPE):
            self.setStyleSheet(DROP_STYLE)
            event.acceptProposedAction()

    def dragLeaveEvent(self, event) -> None:  # type: ignore[override]
        del event
        self.setStyleSheet(SELECTED_STYLE if self._selected else IDLE_STYLE)

    def dropEvent(self, event) -> None:  # type: ignore[override]
        self.setStyleSheet(SELECTED_STYLE if self._selected else IDLE_STYLE)
        source_id = bytes(event.mimeData().data(FIELD_MIME_TYPE)).decode("utf-8")
        if source_id and source_id != self.field_id:
            self.dropped.emit(source_id, self.field_id)
        event.acceptProposedAction()


class FormCanvas(QWidget):
    field_clicked = Signal(str)
    background_clicked = Signal()
    remove_requested = Signal(str)
    field_dropped = Signal(str, str)
    properties_toggle_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self.cards: dict[str, FieldCard] = {}
        self._layout = QVBoxLayout(self)
        self._layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        self._empty_label = QLabel(
            "Start Building Your Form\nPick a field type on the left to get started"
        )
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("color: #757575; padding: 80px")
        self._layout.addWidget(self._empty_label)
        self.setMinimumSize(500, 400)

    def set_fields(
        self,
        fields: list[FormField],
        selected_id: str | None,
        values: FormValues,
    ) -> None:
        self.clear()
        self._empty_label.setVisible(not fields)
        for field in fields:
            card = FieldCard(field, field.id == selected_id, values)
            card.clicked.connect(self.field_clicked)
            card.remove_requested.connect(self.remove_requested)
            card.dropped.connect(self.field_dropped)
            card.properties_toggle_requested.connect(self.properties_toggle_requested)
            self._layout.addWidget(card)
            self.cards[field.id] = card

    def set_selected(self, selected_id: str | None) -> None:
        for field_id, card in self.cards.items():
            if card.selected != (field_id == selected_id):
                card.set_selected(field_id == selected_id)

    def reorder(self, field_ids: list[str]) -> None:
        """Re-lay the existing cards in ``field_ids`` order without rebuilding them.

        Cards are moved, never deleted, so a drag still running from one of
        them keeps a live source widget.
        """
        ordered = [self.cards[field_id] for field_id in field_ids if field_id in self.cards]
        for card in ordered:
            self._layout.removeWidget(card)
        for card in ordered:
            self._layout.addWidget(card)
        self.cards = {card.field_id: card for card in ordered}

    def clear(self) -> None:
        for card in self.cards.values():
            self._layout.removeWidget(card)
            card.deleteLater()
        self.cards = {}
        self._empty_label.setVisible(True)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        # Only clicks that no card consumed land here.
        if event.button() == Qt.MouseButton.LeftButton:
            self.background_clicked.emit()
