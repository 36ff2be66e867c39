"""Value bag holding what the user entered, keyed by field id."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from formbuilder.model.definition import FormDefinition
from formbuilder.model.values import ImageRef, coerce_value

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FormValues:
    definition: FormDefinition
    _values: dict[str, Any] = field(default_factory=dict)

    def get(self, field_id: str) -> Any:
        form_field = self.definition.get_field(field_id)
        if form_field is None:
            return None
        return coerce_value(form_field, self._values.get(field_id))

    def set(self, field_id: str, value: Any) -> bool:
        # Late results (address lookup, image picking) may arrive after the
        # field was removed; those writes are dropped.
        if self.definition.get_field(field_id) is None:
            logger.debug("Ignoring value for missing field %s", field_id)
            return False
        self._values[field_id] = value
        return True

    def discard(self, field_id: str) -> None:
        self._values.pop(field_id, None)

    def clear(self) -> None:
        self._values.clear()

    def as_dict(self) -> dict[str, Any]:
        return {item.id: self.get(item.id) for item in self.definition.fields}

    def pending_uploads(self) -> list[tuple[str, ImageRef]]:
        pending: list[tuple[str, ImageRef]] = []
        for field_id, value in self.as_dict().items():
            if not isinstance(value, list):
                continue
            pending.extend((field_id, image) for image in value if isinstance(image, ImageRef) and image.pending)
        return pending
