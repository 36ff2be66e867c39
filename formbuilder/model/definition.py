"""Form definition aggregate: title, description and ordered fields."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field

from formbuilder.model.field import FormField
from formbuilder.model.kinds import CHOICE_KINDS, FieldKind, choices_for


@dataclass(slots=True)
class FormDefinition:
    title: str = ""
    description: str = ""
    fields: list[FormField] = field(default_factory=list)

    def field_ids(self) -> list[str]:
        return [item.id for item in self.fields]

    def index_of(self, field_id: str) -> int | None:
        for index, item in enumerate(self.fields):
            if item.id == field_id:
                return index
        return None

    def get_field(self, field_id: str | None) -> FormField | None:
        if field_id is None:
            return None
        index = self.index_of(field_id)
        return self.fields[index] if index is not None else None

    def clone(self) -> FormDefinition:
        return deepcopy(self)


def incomplete_fields(definition: FormDefinition) -> list[FormField]:
    """Choice-shaped fields that have nothing to choose from yet.

    A checkbox is only a choice field when it carries options, so a bare
    checkbox is never reported.
    """
    missing: list[FormField] = []
    for item in definition.fields:
        if item.kind not in CHOICE_KINDS or item.kind is FieldKind.CHECKBOX:
            continue
        if not choices_for(item):
            missing.append(item)
    return missing
