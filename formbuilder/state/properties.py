"""Properties editor glue: which attributes are editable and the patches edits produce."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, option_source, spec_for

OPTION_EDITOR_KINDS = frozenset(
    {
        FieldKind.SELECT,
        FieldKind.DROPDOWN,
        FieldKind.RADIO,
        FieldKind.CHECKBOX,
        FieldKind.MULTI_SELECT,
    }
)


@dataclass(frozen=True, slots=True)
class PropertySet:
    label: bool = True
    placeholder: bool = False
    options: bool = False
    required: bool = True


def editable_properties(field: FormField) -> PropertySet:
    if field.kind is FieldKind.UNKNOWN:
        return PropertySet(required=False)
    return PropertySet(
        placeholder=spec_for(field.kind).has_placeholder,
        options=field.kind in OPTION_EDITOR_KINDS,
    )


def current_options(field: FormField) -> list[Any]:
    return list(option_source(field))


def adopt_metadata_options(field: FormField) -> dict[str, Any] | None:
    """Patch copying ``metadata['options']`` into ``options`` when the latter is empty."""
    if field.options:
        return None
    meta_options = field.metadata.get("options")
    if not isinstance(meta_options, list) or not meta_options:
        return None
    return {"options": list(meta_options)}


def _options_patch(field: FormField, options: list[Any]) -> dict[str, Any]:
    patch: dict[str, Any] = {"options": options}
    # Inbound definitions keep their choices in metadata; keep both in step.
    if isinstance(field.metadata.get("options"), list):
        metadata = dict(field.metadata)
        metadata["options"] = list(options)
        patch["metadata"] = metadata
    return patch


def add_option(field: FormField, text: str) -> dict[str, Any] | None:
    option = text.strip()
    if not option:
        return None
    return _options_patch(field, [*current_options(field), option])


def remove_option(field: FormField, index: int) -> dict[str, Any] | None:
    options = current_options(field)
    if not 0 <= index < len(options):
        return None
    del options[index]
    return _options_patch(field, options)


def update_option(field: FormField, index: int, text: str) -> dict[str, Any] | None:
    options = current_options(field)
    if not 0 <= index < len(options):
        return None
    entry = options[index]
    # Object options keep their stored value; only the shown label changes.
    options[index] = {**entry, "label": text} if isinstance(entry, dict) else text
    return _options_patch(field, options)


def field_info(field: FormField) -> list[tuple[str, str]]:
    info = [("Field ID", field.id), ("Type", field.type_name)]
    if field.kind in OPTION_EDITOR_KINDS:
        info.append(("Options", str(len(current_options(field)))))
    return info
