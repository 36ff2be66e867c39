from __future__ import annotations

from pypdf import PdfReader
import pytest

from formbuilder.export.pdf_writer import PdfWriteError, write_definition_pdf
from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import create_field
from formbuilder.model.kinds import FieldKind


def test_exported_pdf_has_one_widget_per_value_field(tmp_path, sample_definition) -> None:
    sample_definition.fields.append(create_field(FieldKind.BUTTON, "field_9"))
    sample_definition.fields.append(
        create_field(FieldKind.MULTI_SELECT, "field_10", options=["A", "B"])
    )
    output = write_definition_pdf(sample_definition, tmp_path / "form.pdf")

    reader = PdfReader(output)
    names = set(reader.get_fields())
    assert {"field_1", "field_2", "field_3", "field_4", "field_5_start", "field_5_end"} <= names
    assert {"field_10_0", "field_10_1"} <= names
    assert "field_9" not in names
    assert reader.metadata.title == "Signup"


def test_values_are_written_into_text_fields(tmp_path, sample_definition) -> None:
    output = write_definition_pdf(
        sample_definition,
        tmp_path / "filled.pdf",
        values={"field_1": "Ada", "field_5": {"startDate": "2024-01-01", "endDate": ""}},
    )
    fields = PdfReader(output).get_fields()
    assert fields["field_1"].get("/V") == "Ada"
    assert fields["field_5_start"].get("/V") == "2024-01-01"


def test_long_forms_flow_onto_more_pages(tmp_path) -> None:
    definition = FormDefinition(
        title="Long",
        fields=[create_field(FieldKind.TEXTAREA, f"field_{index}") for index in range(1, 20)],
    )
    output = write_definition_pdf(definition, tmp_path / "long.pdf")
    assert len(PdfReader(output).pages) > 1


def test_unwritable_output_raises(tmp_path, sample_definition) -> None:
    with pytest.raises(PdfWriteError):
        write_definition_pdf(sample_definition, tmp_path / "missing" / "form.pdf")
