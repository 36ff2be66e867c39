"""In-memory authoring state for the form being composed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any

from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import EDITABLE_ATTRIBUTES, FormField, create_field
from formbuilder.model.kinds import FieldKind
from formbuilder.state.values import FormValues

logger = logging.getLogger(__name__)

FIELD_ID_PREFIX = "field_"


class SessionState(str, Enum):
    IDLE = "idle"
    FIELD_SELECTED = "field-selected"
    FIELD_SELECTED_PANEL_HIDDEN = "field-selected-panel-hidden"


@dataclass(slots=True)
class AuthoringSession:
    definition: FormDefinition = field(default_factory=FormDefinition)
    selected_field_id: str | None = None
    properties_visible: bool = False
    preview_values: FormValues = field(init=False)
    _field_counter: int = 1

    def __post_init__(self) -> None:
        self.preview_values = FormValues(self.definition)
        self._sync_field_counter()

    @property
    def fields(self) -> list[FormField]:
        return self.definition.fields

    @property
    def selected_field(self) -> FormField | None:
        return self.definition.get_field(self.selected_field_id)

    @property
    def state(self) -> SessionState:
        if self.selected_field_id is None:
            return SessionState.IDLE
        if self.properties_visible:
            return SessionState.FIELD_SELECTED
        return SessionState.FIELD_SELECTED_PANEL_HIDDEN

    def select_field(self, field_id: str) -> bool:
        if self.definition.get_field(field_id) is None:
            logger.debug("select_field: no field %s", field_id)
            return False
        self.selected_field_id = field_id
        self.properties_visible = True
        return True

    def deselect(self) -> None:
        self.selected_field_id = None
        self.properties_visible = False

    def toggle_properties(self) -> bool:
        self.properties_visible = not self.properties_visible
        return self.properties_visible

    def show_properties(self) -> None:
        self.properties_visible = True

    def hide_properties(self) -> None:
        self.properties_visible = False

    def add_field(
        self,
        kind: FieldKind,
        label: str | None = None,
        placeholder: str | None = None,
        options: list[Any] | None = None,
        metadata: dict[str, Any] | None = None,
        validation: dict[str, Any] | None = None,
    ) -> FormField:
        new_field = create_field(
            kind,
            self._next_field_id(),
            label=label,
            placeholder=placeholder,
            options=options,
            metadata=metadata,
            validation=validation,
        )
        self.definition.fields.append(new_field)
        return new_field

    def remove_field(self, field_id: str) -> bool:
        index = self.definition.index_of(field_id)
        if index is None:
            logger.debug("remove_field: no field %s", field_id)
            return False
        self.definition.fields.pop(index)
        self.preview_values.discard(field_id)
        if self.selected_field_id == field_id:
            self.deselect()
        return True

    def reorder_field(self, field_id: str, new_index: int) -> bool:
        index = self.definition.index_of(field_id)
        if index is None:
            return False
        moved = self.definition.fields.pop(index)
        target = max(0, min(new_index, len(self.definition.fields)))
        self.definition.fields.insert(target, moved)
        return target != index

    def move_field_to(self, field_id: str, target_field_id: str) -> bool:
        """Drag-and-drop adapter: move ``field_id`` into the slot ``target_field_id`` holds.

        Dragging upwards lands the field before the target; dragging
        downwards lands it after, as the target shifts up to fill the gap.
        """
        if field_id == target_field_id:
            return False
        target_index = self.definition.index_of(target_field_id)
        if target_index is None:
            return False
        return self.reorder_field(field_id, target_index)

    def update_field(self, field_id: str, patch: dict[str, Any]) -> bool:
        target = self.definition.get_field(field_id)
        if target is None:
            logger.debug("update_field: no field %s", field_id)
            return False
        for key, value in patch.items():
            if key not in EDITABLE_ATTRIBUTES:
                logger.debug("update_field: ignoring attribute %s", key)
                continue
            if key == "required":
                value = bool(value)
            elif key == "options":
                value = list(value) if value else []
            elif key in ("metadata", "validation"):
                value = dict(value) if value else {}
            elif value is None:
                value = ""
            setattr(target, key, value)
        return True

    def replace_kind(self, field_id: str, kind: FieldKind) -> FormField | None:
        """Change a field's kind by recreating it in place under a fresh id."""
        index = self.definition.index_of(field_id)
        if index is None:
            return None
        old = self.definition.fields[index]
        if old.kind is kind:
            return old
        replacement = create_field(
            kind,
            self._next_field_id(),
            label=old.label,
            required=old.required,
            metadata=old.metadata,
        )
        self.definition.fields[index] = replacement
        self.preview_values.discard(field_id)
        if self.selected_field_id == field_id:
            self.selected_field_id = replacement.id
        return replacement

    def duplicate_field(self, field_id: str) -> FormField | None:
        index = self.definition.index_of(field_id)
        if index is None:
            return None
        duplicate = self.definition.fields[index].copy(self._next_field_id())
        self.definition.fields.insert(index + 1, duplicate)
        return duplicate

    def set_title(self, title: str) -> None:
        self.definition.title = title

    def set_description(self, description: str) -> None:
        self.definition.description = description

    def load_definition(self, definition: FormDefinition) -> None:
        self.definition = definition
        self.preview_values = FormValues(definition)
        self.deselect()
        self._sync_field_counter()

    def snapshot(self) -> FormDefinition:
        return self.definition.clone()

    def _next_field_id(self) -> str:
        existing = set(self.definition.field_ids())
        while True:
            field_id = f"{FIELD_ID_PREFIX}{self._field_counter}"
            self._field_counter += 1
            if field_id not in existing:
                return field_id

    def _sync_field_counter(self) -> None:
        highest = 0
        for item in self.definition.fields:
            parts = item.id.rsplit("_", maxsplit=1)
            if len(parts) != 2:
                continue
            try:
                value = int(parts[1])
            except ValueError:
                continue
            highest = max(highest, value)
        self._field_counter = max(self._field_counter, highest + 1)
