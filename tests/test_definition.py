from __future__ import annotations

from formbuilder.model.definition import FormDefinition, incomplete_fields
from formbuilder.model.field import FormField, create_field, default_placeholder
from formbuilder.model.kinds import FieldKind


def test_create_field_uses_kind_title_and_placeholder() -> None:
    field = create_field(FieldKind.EMAIL, "field_1")
    assert field.label == "Email"
    assert field.placeholder == "Enter email..."
    assert field.required is False
    assert field.type_name == "email"


def test_create_field_without_placeholder_for_choice_kinds() -> None:
    assert create_field(FieldKind.SELECT, "field_1").placeholder == ""
    assert default_placeholder(FieldKind.TOGGLE, "Dark mode") == ""


def test_unknown_field_keeps_its_wire_tag() -> None:
    field = FormField(id="field_9", kind=FieldKind.UNKNOWN, type_tag="signature")
    assert field.type_name == "signature"


def test_copy_is_deep_and_renamed() -> None:
    original = create_field(FieldKind.SELECT, "field_1", options=["A"], metadata={"k": [1]})
    duplicate = original.copy("field_2")
    duplicate.options.append("B")
    duplicate.metadata["k"].append(2)
    assert duplicate.id == "field_2"
    assert original.options == ["A"]
    assert original.metadata == {"k": [1]}


def test_definition_lookup_helpers(sample_definition) -> None:
    ids = sample_definition.field_ids()
    assert sample_definition.index_of(ids[2]) == 2
    assert sample_definition.index_of("missing") is None
    assert sample_definition.get_field(None) is None
    assert sample_definition.get_field(ids[0]).label == "Name"


def test_clone_is_independent(sample_definition) -> None:
    clone = sample_definition.clone()
    clone.fields[0].label = "Changed"
    clone.fields.pop()
    assert sample_definition.fields[0].label == "Name"
    assert len(sample_definition.fields) == 5


def test_incomplete_fields_reports_choice_kinds_without_options() -> None:
    definition = FormDefinition(
        fields=[
            create_field(FieldKind.SELECT, "field_1"),
            create_field(FieldKind.RADIO, "field_2", options=["A"]),
            create_field(FieldKind.CHECKBOX, "field_3"),
            create_field(FieldKind.MULTI_SELECT, "field_4", options=["", "  "]),
        ]
    )
    assert [item.id for item in incomplete_fields(definition)] == ["field_1", "field_4"]
