"""Form field model definitions."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from formbuilder.model.kinds import FieldKind, spec_for


@dataclass(slots=True)
class FormField:
    id: str
    kind: FieldKind
    label: str = ""
    placeholder: str = ""
    required: bool = False
    options: list[Any] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    validation: dict[str, Any] = field(default_factory=dict)
    # Wire tag as read; keeps unrecognised kinds intact through a round trip.
    type_tag: str = ""

    def __post_init__(self) -> None:
        if not self.type_tag:
            self.type_tag = self.kind.value

    @property
    def type_name(self) -> str:
        if self.kind is FieldKind.UNKNOWN:
            return self.type_tag
        return self.kind.value

    def copy(self, new_id: str) -> FormField:
        duplicate = deepcopy(self)
        duplicate.id = new_id
        return duplicate


EDITABLE_ATTRIBUTES = ("label", "placeholder", "required", "options", "metadata", "validation")


def default_placeholder(kind: FieldKind, label: str) -> str:
    if not spec_for(kind).has_placeholder or not label:
        return ""
    return f"Enter {label.lower()}..."


def create_field(
    kind: FieldKind,
    field_id: str,
    label: str | None = None,
    placeholder: str | None = None,
    required: bool = False,
    options: list[Any] | None = None,
    metadata: dict[str, Any] | None = None,
    validation: dict[str, Any] | None = None,
) -> FormField:
    spec = spec_for(kind)
    resolved_label = spec.title if label is None else label
    return FormField(
        id=field_id,
        kind=kind,
        label=resolved_label,
        placeholder=(
            default_placeholder(kind, resolved_label) if placeholder is None else placeholder
        ),
        required=required,
        options=list(options) if options else [],
        metadata=deepcopy(metadata) if metadata else {},
        validation=deepcopy(validation) if validation else {},
    )
