"""Palette of field kinds the author can add."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from formbuilder.model.kinds import palette, resolve_kind


class ComponentSidebar(QWidget):
    kind_chosen = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        layout = QVBoxLayout(self)
        heading = QLabel("Field Types")
        heading.setStyleSheet("font-size: 15px; font-weight: 600")
        layout.addWidget(heading)

        self.list_widget = QListWidget()
        for spec in palette():
            item = QListWidgetItem(spec.title)
            item.setData(Qt.ItemDataRole.UserRole, spec.kind.value)
            item.setToolTip(f"Add a {spec.title.lower()} field")
            self.list_widget.addItem(item)
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self.list_widget)
        self.setFixedWidth(220)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        self.kind_chosen.emit(resolve_kind(item.data(Qt.ItemDataRole.UserRole)))
