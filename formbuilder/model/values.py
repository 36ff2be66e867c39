"""Runtime field values: per-kind shapes and the pure edit rules behind each control."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import mimetypes
import os
from pathlib import Path
from typing import Any

from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, ValueShape, choices_for, default_value, spec_for

DATE_RANGE_KEYS = ("startDate", "endDate")


@dataclass(frozen=True, slots=True)
class ImageRef:
    """One image of a MultiImageUpload value.

    Existing images are referenced by URL. Newly picked files stay local
    (``pending``) until an external uploader stores them.
    """

    source: str
    pending: bool = False

    @property
    def name(self) -> str:
        return Path(self.source).name or self.source


def shape_of(field: FormField) -> ValueShape:
    if field.kind is FieldKind.CHECKBOX and choices_for(field):
        return ValueShape.OPTION_MAP
    return spec_for(field.kind).shape


def coerce_value(field: FormField, value: Any) -> Any:
    """Normalise ``value`` to the shape ``field`` produces; missing means default."""
    shape = shape_of(field)
    if value is None:
        return default_value(field.kind, field)

    if shape is ValueShape.STRING:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return ""
        text = value if isinstance(value, str) else str(value)
        if field.kind in (FieldKind.SELECT, FieldKind.DROPDOWN, FieldKind.RADIO):
            allowed = {choice.value for choice in choices_for(field)}
            return text if text in allowed else ""
        return text

    if shape is ValueShape.BOOLEAN:
        return value if isinstance(value, bool) else False

    if shape is ValueShape.OPTION_MAP:
        options = [choice.value for choice in choices_for(field)]
        if isinstance(value, dict):
            return {option: bool(value.get(option, False)) for option in options}
        if isinstance(value, (list, tuple)):
            return {option: option in value for option in options}
        return {option: False for option in options}

    if shape is ValueShape.STRING_LIST:
        items = [item for item in value if isinstance(item, str)] if isinstance(value, list) else []
        if field.kind is FieldKind.MULTI_SELECT:
            allowed = [choice.value for choice in choices_for(field)]
            return [option for option in allowed if option in items]
        return items or [""]

    if shape is ValueShape.DATE_RANGE:
        if not isinstance(value, dict):
            return default_value(field.kind)
        return {
            key: value.get(key) if isinstance(value.get(key), str) else ""
            for key in DATE_RANGE_KEYS
        }

    if shape is ValueShape.ADDRESS:
        return dict(value) if isinstance(value, dict) else None

    if shape is ValueShape.IMAGE_LIST:
        return _coerce_images(value)

    return None


def _coerce_images(value: Any) -> list[ImageRef]:
    if not isinstance(value, list):
        return []
    images: list[ImageRef] = []
    for item in value:
        if isinstance(item, ImageRef):
            images.append(item)
        elif isinstance(item, str) and item:
            images.append(ImageRef(item))
        elif isinstance(item, dict) and isinstance(item.get("source"), str):
            images.append(ImageRef(item["source"], bool(item.get("pending", False))))
    return images


def merge_date_range(current: Any, key: str, date: str) -> dict[str, str]:
    if key not in DATE_RANGE_KEYS:
        raise ValueError(f"Unknown date-range key: {key}")
    merged = {name: "" for name in DATE_RANGE_KEYS}
    if isinstance(current, dict):
        for name in DATE_RANGE_KEYS:
            if isinstance(current.get(name), str):
                merged[name] = current[name]
    merged[key] = date
    return merged


def _slots(values: Any) -> list[str]:
    if isinstance(values, list) and values:
        return [item if isinstance(item, str) else "" for item in values]
    return [""]


def button_group_add(values: Any) -> list[str]:
    return [*_slots(values), ""]


def button_group_set(values: Any, index: int, text: str) -> list[str]:
    slots = _slots(values)
    if 0 <= index < len(slots):
        slots[index] = text
    return slots


def button_group_remove(values: Any, index: int) -> list[str]:
    """Remove one slot; refused (unchanged copy) for the last remaining slot."""
    slots = _slots(values)
    if len(slots) <= 1 or not 0 <= index < len(slots):
        return slots
    del slots[index]
    return slots or [""]


def offers_remove(index: int) -> bool:
    # The first slot never gets a remove control.
    return index > 0


def set_option_checked(current: Any, option: str, checked: bool) -> dict[str, bool]:
    updated = dict(current) if isinstance(current, dict) else {}
    updated[option] = bool(checked)
    return updated


def toggle_multi_select(
    current: Any,
    option: str,
    checked: bool,
    allowed: Iterable[str],
) -> list[str]:
    selected = set(item for item in current if isinstance(item, str)) if isinstance(current, list) else set()
    if checked:
        selected.add(option)
    else:
        selected.discard(option)
    return [item for item in allowed if item in selected]


def validate_image(
    path: str | Path,
    size: int,
    accepted_formats: Iterable[str],
    max_size_mb: float,
) -> str | None:
    accepted = list(accepted_formats)
    mime, _ = mimetypes.guess_type(str(path))
    if mime not in accepted:
        return (
            f"File type {mime or 'unknown'} is not supported. "
            f"Allowed types: {', '.join(accepted)}"
        )
    size_mb = size / (1024 * 1024)
    if size_mb > max_size_mb:
        return (
            f"File size {size_mb:.2f}MB exceeds maximum allowed size of {max_size_mb:g}MB"
        )
    return None


def queue_images(
    current: Any,
    paths: Iterable[str | Path],
    accepted_formats: Iterable[str],
    max_size_mb: float,
    max_files: int,
    size_of: Callable[[str], int] = os.path.getsize,
) -> tuple[list[ImageRef], list[str]]:
    """Append valid local files as pending images, reporting the rejects."""
    images = _coerce_images(current)
    accepted = list(accepted_formats)
    errors: list[str] = []
    for path in paths:
        name = Path(path).name
        if len(images) >= max_files:
            errors.append(f"{name}: Maximum {max_files} files allowed")
            continue
        try:
            size = size_of(str(path))
        except OSError:
            errors.append(f"{name}: File could not be read")
            continue
        error = validate_image(path, size, accepted, max_size_mb)
        if error:
            errors.append(f"{name}: {error}")
            continue
        images.append(ImageRef(str(path), pending=True))
    return images, errors


def remove_image(current: Any, index: int) -> list[ImageRef]:
    images = _coerce_images(current)
    if 0 <= index < len(images):
        del images[index]
    return images


def address_from_place(place: dict[str, Any]) -> dict[str, Any]:
    address = dict(place)
    address["formattedAddress"] = str(place.get("formattedAddress") or "")
    for key in ("lat", "lng"):
        coordinate = place.get(key)
        address[key] = float(coordinate) if isinstance(coordinate, (int, float)) else None
    return address
