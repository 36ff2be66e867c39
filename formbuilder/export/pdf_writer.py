"""Fillable PDF export of a form definition using reportlab widgets + pypdf."""

from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
from pathlib import Path
from typing import Any

from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import FormField
from formbuilder.model.kinds import FieldKind, choices_for
from formbuilder.model.values import coerce_value

MARGIN = 54.0
LABEL_GAP = 14.0
ROW_GAP = 12.0
FIELD_HEIGHT = 20.0
TEXTAREA_HEIGHT = 54.0
BOX_SIZE = 12.0

TEXT_KINDS = frozenset(
    {
        FieldKind.TEXT,
        FieldKind.EMAIL,
        FieldKind.NUMBER,
        FieldKind.DATE,
        FieldKind.BUTTON_GROUP,
        FieldKind.ADDRESS,
    }
)
SKIPPED_KINDS = frozenset({FieldKind.BUTTON, FieldKind.MULTI_IMAGE_UPLOAD, FieldKind.UNKNOWN})


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


def write_definition_pdf(
    definition: FormDefinition,
    output_path: str | Path,
    values: Mapping[str, Any] | None = None,
) -> Path:
    output = Path(output_path)
    try:
        overlay = _build_form_pdf(definition, values or {})
        reader = PdfReader(overlay)
        writer = PdfWriter(clone_from=reader)
        writer.add_metadata(
            {
                "/Title": definition.title,
                "/Subject": definition.description,
            }
        )
        writer.set_need_appearances_writer(True)
        with output.open("wb") as handle:
            writer.write(handle)
    except Exception as exc:
        raise PdfWriteError(f"Failed to write output PDF: {output}") from exc
    return output


def _row_height(field: FormField) -> float:
    kind = field.kind
    if kind is FieldKind.TEXTAREA:
        return TEXTAREA_HEIGHT
    if kind in (FieldKind.RADIO, FieldKind.MULTI_SELECT) or (
        kind is FieldKind.CHECKBOX and choices_for(field)
    ):
        return max(1, len(choices_for(field))) * (BOX_SIZE + 6.0)
    return FIELD_HEIGHT


def _text_value(field: FormField, value: Any) -> str:
    if field.kind is FieldKind.BUTTON_GROUP:
        return ", ".join(item for item in value if item)
    if field.kind is FieldKind.ADDRESS:
        return str(value.get("formattedAddress", "")) if isinstance(value, dict) else ""
    return value if isinstance(value, str) else ""


def _build_form_pdf(definition: FormDefinition, values: Mapping[str, Any]) -> BytesIO:
    buffer = BytesIO()
    page_w, page_h = letter
    report = canvas.Canvas(buffer, pagesize=letter)
    width = page_w - 2 * MARGIN
    y = page_h - MARGIN

    report.setFont("Helvetica-Bold", 16)
    report.drawString(MARGIN, y - 16, definition.title or "Untitled Form")
    y -= 26
    if definition.description:
        report.setFont("Helvetica", 10)
        report.drawString(MARGIN, y - 10, definition.description)
        y -= 18
    y -= ROW_GAP

    for field in definition.fields:
        if field.kind in SKIPPED_KINDS:
            continue
        needed = LABEL_GAP + _row_height(field) + ROW_GAP
        if y - needed < MARGIN:
            report.showPage()
            y = page_h - MARGIN

        label = f"{field.label} *" if field.required else field.label
        report.setFont("Helvetica-Bold", 10)
        report.setFillColor(colors.black)
        report.drawString(MARGIN, y - 10, label)
        y -= LABEL_GAP

        value = coerce_value(field, values.get(field.id))
        y = _draw_widget(report, field, value, MARGIN, y, width)
        y -= ROW_GAP

    report.showPage()
    report.save()
    buffer.seek(0)
    return buffer


def _draw_widget(
    report: canvas.Canvas,
    field: FormField,
    value: Any,
    x: float,
    top: float,
    width: float,
) -> float:
    form = report.acroForm
    kind = field.kind
    choices = choices_for(field)

    if kind in TEXT_KINDS or kind is FieldKind.TEXTAREA:
        height = TEXTAREA_HEIGHT if kind is FieldKind.TEXTAREA else FIELD_HEIGHT
        form.textfield(
            name=field.id,
            value=_text_value(field, value),
            x=x,
            y=top - height,
            width=width,
            height=height,
            fieldFlags="multiline" if kind is FieldKind.TEXTAREA else "",
            borderColor=colors.grey,
            fillColor=colors.white,
            textColor=colors.black,
        )
        return top - height

    if kind is FieldKind.DATE_RANGE:
        half = (width - 12.0) / 2
        for offset, key, suffix in ((0.0, "startDate", "start"), (half + 12.0, "endDate", "end")):
            form.textfield(
                name=f"{field.id}_{suffix}",
                value=value.get(key, ""),
                x=x + offset,
                y=top - FIELD_HEIGHT,
                width=half,
                height=FIELD_HEIGHT,
                borderColor=colors.grey,
                fillColor=colors.white,
                textColor=colors.black,
            )
        return top - FIELD_HEIGHT

    if kind in (FieldKind.SELECT, FieldKind.DROPDOWN):
        if not choices:
            return _draw_note(report, "(no options)", x, top)
        labels = [choice.value for choice in choices]
        form.choice(
            name=field.id,
            value=value if value in labels else labels[0],
            options=labels,
            x=x,
            y=top - FIELD_HEIGHT,
            width=width,
            height=FIELD_HEIGHT,
            borderColor=colors.grey,
            fillColor=colors.white,
            textColor=colors.black,
        )
        return top - FIELD_HEIGHT

    if kind is FieldKind.RADIO:
        if not choices:
            return _draw_note(report, "(no options)", x, top)
        for choice in choices:
            top -= BOX_SIZE + 6.0
            form.radio(
                name=field.id,
                value=choice.value,
                selected=value == choice.value,
                x=x,
                y=top,
                size=BOX_SIZE,
                buttonStyle="circle",
                borderColor=colors.grey,
                fillColor=colors.white,
            )
            _draw_option_label(report, choice.label, x, top)
        return top

    if kind is FieldKind.MULTI_SELECT or (kind is FieldKind.CHECKBOX and choices):
        if not choices:
            return _draw_note(report, "(no options)", x, top)
        for index, choice in enumerate(choices):
            top -= BOX_SIZE + 6.0
            if isinstance(value, dict):
                checked = bool(value.get(choice.value))
            else:
                checked = choice.value in value
            form.checkbox(
                name=f"{field.id}_{index}",
                x=x,
                y=top,
                size=BOX_SIZE,
                checked=checked,
                buttonStyle="check",
                borderColor=colors.grey,
                fillColor=colors.white,
            )
            _draw_option_label(report, choice.label, x, top)
        return top

    # Plain checkbox and toggle.
    form.checkbox(
        name=field.id,
        x=x,
        y=top - BOX_SIZE - 4.0,
        size=BOX_SIZE,
        checked=bool(value),
        buttonStyle="check",
        borderColor=colors.grey,
        fillColor=colors.white,
    )
    return top - FIELD_HEIGHT


def _draw_option_label(report: canvas.Canvas, text: str, x: float, y: float) -> None:
    report.setFont("Helvetica", 10)
    report.setFillColor(colors.black)
    report.drawString(x + BOX_SIZE + 6.0, y + 2.0, text)


def _draw_note(report: canvas.Canvas, text: str, x: float, top: float) -> float:
    report.setFont("Helvetica-Oblique", 9)
    report.setFillColor(colors.grey)
    report.drawString(x, top - 12.0, text)
    return top - FIELD_HEIGHT
