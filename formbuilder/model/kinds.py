"""Field kind registry: value shapes, defaults and option rules per kind."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formbuilder.model.field import FormField

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    TEXTAREA = "textarea"
    SELECT = "select"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TOGGLE = "toggle"
    BUTTON = "button"
    BUTTON_GROUP = "button-group"
    MULTI_SELECT = "multi-select"
    DATE_RANGE = "date-range"
    ADDRESS = "Address"
    MULTI_IMAGE_UPLOAD = "MultiImageUpload"
    UNKNOWN = "unknown"


class ValueShape(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    STRING_LIST = "string-list"
    OPTION_MAP = "option-map"
    DATE_RANGE = "date-range"
    ADDRESS = "address"
    IMAGE_LIST = "image-list"
    EVENT = "event"
    NONE = "none"


class OptionsRule(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    CONDITIONAL = "conditional"


@dataclass(frozen=True, slots=True)
class KindSpec:
    kind: FieldKind
    title: str
    shape: ValueShape
    default: Callable[[], Any]
    options: OptionsRule = OptionsRule.NEVER
    has_placeholder: bool = False

    @property
    def needs_options(self) -> bool:
        return self.options is OptionsRule.ALWAYS

    @property
    def value_bearing(self) -> bool:
        return self.shape not in (ValueShape.EVENT, ValueShape.NONE)


@dataclass(frozen=True, slots=True)
class Choice:
    label: str
    value: str


def _empty_string() -> str:
    return ""


def _false() -> bool:
    return False


def _none() -> None:
    return None


def _empty_list() -> list:
    return []


def _single_slot() -> list[str]:
    return [""]


def _empty_range() -> dict[str, str]:
    return {"startDate": "", "endDate": ""}


_SPECS: dict[FieldKind, KindSpec] = {
    spec.kind: spec
    for spec in (
        KindSpec(FieldKind.TEXT, "Text Input", ValueShape.STRING, _empty_string, has_placeholder=True),
        KindSpec(FieldKind.EMAIL, "Email", ValueShape.STRING, _empty_string, has_placeholder=True),
        KindSpec(FieldKind.NUMBER, "Number", ValueShape.STRING, _empty_string, has_placeholder=True),
        KindSpec(FieldKind.TEXTAREA, "Text Area", ValueShape.STRING, _empty_string, has_placeholder=True),
        KindSpec(FieldKind.DATE, "Date", ValueShape.STRING, _empty_string, has_placeholder=True),
        KindSpec(
            FieldKind.SELECT, "Dropdown", ValueShape.STRING, _empty_string, OptionsRule.ALWAYS
        ),
        KindSpec(
            FieldKind.DROPDOWN, "Dropdown List", ValueShape.STRING, _empty_string, OptionsRule.ALWAYS
        ),
        KindSpec(
            FieldKind.RADIO, "Radio Buttons", ValueShape.STRING, _empty_string, OptionsRule.ALWAYS
        ),
        KindSpec(
            FieldKind.CHECKBOX, "Checkbox", ValueShape.BOOLEAN, _false, OptionsRule.CONDITIONAL
        ),
        KindSpec(FieldKind.TOGGLE, "Toggle", ValueShape.BOOLEAN, _false),
        KindSpec(FieldKind.BUTTON, "Button", ValueShape.EVENT, _none, has_placeholder=True),
        KindSpec(
            FieldKind.BUTTON_GROUP,
            "Button Group",
            ValueShape.STRING_LIST,
            _single_slot,
            has_placeholder=True,
        ),
        KindSpec(
            FieldKind.MULTI_SELECT,
            "Multi Select",
            ValueShape.STRING_LIST,
            _empty_list,
            OptionsRule.ALWAYS,
        ),
        KindSpec(
            FieldKind.DATE_RANGE,
            "Date Range",
            ValueShape.DATE_RANGE,
            _empty_range,
            has_placeholder=True,
        ),
        KindSpec(FieldKind.ADDRESS, "Address", ValueShape.ADDRESS, _none, has_placeholder=True),
        KindSpec(
            FieldKind.MULTI_IMAGE_UPLOAD,
            "Multi Image Upload",
            ValueShape.IMAGE_LIST,
            _empty_list,
            has_placeholder=True,
        ),
        KindSpec(FieldKind.UNKNOWN, "Unknown", ValueShape.NONE, _none),
    )
}

CHOICE_KINDS = frozenset(
    {
        FieldKind.SELECT,
        FieldKind.DROPDOWN,
        FieldKind.RADIO,
        FieldKind.CHECKBOX,
        FieldKind.MULTI_SELECT,
    }
)

_warned_tags: set[str] = set()


def resolve_kind(tag: Any) -> FieldKind:
    if isinstance(tag, FieldKind):
        return tag
    if isinstance(tag, str):
        try:
            kind = FieldKind(tag)
        except ValueError:
            kind = FieldKind.UNKNOWN
        if kind is not FieldKind.UNKNOWN:
            return kind
    key = repr(tag)
    if key not in _warned_tags:
        _warned_tags.add(key)
        logger.warning("Unknown field kind %s; it will not be rendered", key)
    return FieldKind.UNKNOWN


def spec_for(kind: FieldKind) -> KindSpec:
    return _SPECS.get(kind, _SPECS[FieldKind.UNKNOWN])


def palette() -> list[KindSpec]:
    return [spec for kind, spec in _SPECS.items() if kind is not FieldKind.UNKNOWN]


def filter_options(options: Iterable[Any] | None) -> list[str]:
    """Return the displayable options: strings with visible text, in order.

    Duplicates are kept. Entries that are not strings are dropped rather than
    rendered, so a malformed stored definition cannot break a renderer.
    """
    if not options or isinstance(options, (str, bytes)):
        return []
    return [option for option in options if isinstance(option, str) and option.strip()]


def _choice_from(entry: Any) -> Choice | None:
    if isinstance(entry, str):
        return Choice(entry, entry) if entry.strip() else None
    if isinstance(entry, dict):
        value = entry.get("value")
        label = entry.get("label", value)
        if isinstance(value, str) and isinstance(label, str) and value.strip() and label.strip():
            return Choice(label, value)
    return None


def option_source(field: FormField) -> list[Any]:
    """Stored option entries for a field: ``options`` first, then ``metadata['options']``."""
    if isinstance(field.options, list) and field.options:
        return field.options
    meta_options = field.metadata.get("options") if isinstance(field.metadata, dict) else None
    if isinstance(meta_options, list):
        return meta_options
    return []


def choices_for(field: FormField) -> list[Choice]:
    choices: list[Choice] = []
    for entry in option_source(field):
        choice = _choice_from(entry)
        if choice is not None:
            choices.append(choice)
    return choices


def default_value(kind: FieldKind, field: FormField | None = None) -> Any:
    if kind is FieldKind.CHECKBOX and field is not None:
        choices = choices_for(field)
        if choices:
            return {choice.value: False for choice in choices}
    return spec_for(kind).default()
