"""JSON serialization of form definitions."""

from __future__ import annotations

from copy import deepcopy
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, resolve_kind

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class InvalidDefinitionError(RuntimeError):
    """Raised when a document is not a valid form definition."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Invalid form definition at '{key}': {reason}")
        self.key = key
        self.reason = reason


class DefinitionFileError(RuntimeError):
    """Raised when a definition file cannot be read or written."""


def serialize_field(field: FormField) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": field.id,
        "type": field.type_name,
        "label": field.label,
        "placeholder": field.placeholder,
        "required": field.required,
        "options": deepcopy(field.options),
        "metadata": deepcopy(field.metadata),
    }
    if field.validation:
        data["validation"] = deepcopy(field.validation)
    return data


def serialize(definition: FormDefinition) -> dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        "title": definition.title,
        "description": definition.description,
        "fields": [serialize_field(field) for field in definition.fields],
    }


def dumps(definition: FormDefinition, indent: int | None = 2) -> str:
    return json.dumps(serialize(definition), indent=indent, ensure_ascii=False)


class FieldDocument(BaseModel):
    """One field record as it appears on the wire."""

    id: StrictStr
    # Authored files tag the kind as "type"; older exports used "kind".
    type: Any = Field(validation_alias=AliasChoices("type", "kind"))
    # Server-side records name the field instead of labelling it.
    label: StrictStr | None = Field(default=None, validation_alias=AliasChoices("label", "name"))
    placeholder: StrictStr | None = None
    required: StrictBool = False
    options: list[Any] | None = None
    metadata: dict[str, Any] | None = None
    validation: dict[str, Any] | None = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("missing or blank field id")
        return value

    def to_field(self) -> FormField:
        tag = self.type
        return FormField(
            id=self.id,
            kind=resolve_kind(tag),
            label=self.label or "",
            placeholder=self.placeholder or "",
            required=self.required,
            options=deepcopy(self.options or []),
            metadata=deepcopy(self.metadata or {}),
            validation=deepcopy(self.validation or {}),
            type_tag=tag if isinstance(tag, str) else FieldKind.UNKNOWN.value,
        )


class DefinitionDocument(BaseModel):
    """A whole form definition as it appears on the wire."""

    schema_version: StrictInt = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    # Definitions attached to a category carry a ``name`` instead of a title.
    title: StrictStr | None = Field(validation_alias=AliasChoices("title", "name"))
    description: StrictStr | None = None
    fields: list[FieldDocument]

    def to_definition(self) -> FormDefinition:
        if self.schema_version > SCHEMA_VERSION:
            logger.warning(
                "Definition schema version %s is newer than supported version %s",
                self.schema_version,
                SCHEMA_VERSION,
            )
        seen: set[str] = set()
        for position, record in enumerate(self.fields):
            if record.id in seen:
                raise InvalidDefinitionError(
                    f"fields[{position}].id", f"duplicate id '{record.id}'"
                )
            seen.add(record.id)
        return FormDefinition(
            title=self.title or "",
            description=self.description or "",
            fields=[record.to_field() for record in self.fields],
        )


def _error_key(loc: tuple[Any, ...]) -> str:
    key = ""
    for part in loc:
        if isinstance(part, int):
            key += f"[{part}]"
        else:
            key += f".{part}" if key else str(part)
    return key or "$"


def _invalid(exc: ValidationError) -> InvalidDefinitionError:
    first = exc.errors()[0]
    return InvalidDefinitionError(_error_key(tuple(first["loc"])), first["msg"])


def deserialize(document: Any) -> FormDefinition:
    if isinstance(document, (str, bytes, bytearray)):
        return loads(document)
    try:
        parsed = DefinitionDocument.model_validate(document)
    except ValidationError as exc:
        raise _invalid(exc) from exc
    return parsed.to_definition()


def loads(text: str | bytes | bytearray) -> FormDefinition:
    try:
        parsed = DefinitionDocument.model_validate_json(text)
    except ValidationError as exc:
        raise _invalid(exc) from exc
    return parsed.to_definition()


def save_definition(definition: FormDefinition, path: str | Path) -> Path:
    target = Path(path)
    try:
        target.write_text(dumps(definition), encoding="utf-8")
    except OSError as exc:
        raise DefinitionFileError(f"Failed to write definition: {target}") from exc
    return target


def load_definition(path: str | Path) -> FormDefinition:
    source = Path(path)
    if not source.exists():
        raise DefinitionFileError(f"File not found: {source}")
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DefinitionFileError(f"Failed to read definition: {source}") from exc
    return loads(text)
