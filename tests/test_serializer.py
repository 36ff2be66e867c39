from __future__ import annotations

import json

import pytest

from formbuilder.export.serializer import (
    SCHEMA_VERSION,
    DefinitionFileError,
    InvalidDefinitionError,
    deserialize,
    dumps,
    load_definition,
    loads,
    save_definition,
    serialize,
)
from formbuilder.model.kinds import FieldKind


def _document(*fields: dict) -> dict:
    return {"title": "T", "description": "", "fields": list(fields)}


def test_round_trip_preserves_definition(sample_definition) -> None:
    sample_definition.fields[0].validation = {"minLength": 2}
    sample_definition.fields[1].metadata = {"hint": {"nested": [1, 2]}}
    assert loads(dumps(sample_definition)) == sample_definition


def test_serialized_shape_uses_type_key(sample_definition) -> None:
    data = serialize(sample_definition)
    assert data["schemaVersion"] == SCHEMA_VERSION
    first = data["fields"][0]
    assert first["type"] == "text"
    assert "kind" not in first
    assert "validation" not in first
    assert set(first) == {"id", "type", "label", "placeholder", "required", "options", "metadata"}


def test_unknown_kind_round_trips_untouched() -> None:
    record = {
        "id": "field_1",
        "type": "signature",
        "label": "Sign",
        "placeholder": "",
        "required": True,
        "options": [],
        "metadata": {"pen": "blue"},
    }
    definition = deserialize(_document(record))
    assert definition.fields[0].kind is FieldKind.UNKNOWN
    assert serialize(definition)["fields"][0] == record


def test_kind_key_and_name_fallback_are_accepted() -> None:
    definition = deserialize(_document({"id": "field_1", "kind": "email", "name": "Work email"}))
    field = definition.fields[0]
    assert field.kind is FieldKind.EMAIL
    assert field.label == "Work email"
    assert field.options == [] and field.metadata == {}


def test_missing_schema_version_reads_as_current() -> None:
    assert deserialize({"title": "T", "fields": []}).title == "T"


def test_text_input_is_accepted() -> None:
    text = json.dumps(_document({"id": "field_1", "type": "text"}))
    assert deserialize(text).fields[0].id == "field_1"


@pytest.mark.parametrize(
    ("document", "key"),
    [
        ({"fields": []}, "title"),
        ({"title": "T"}, "fields"),
        ({"title": "T", "fields": {}}, "fields"),
        ({"title": "T", "fields": [], "schemaVersion": "1"}, "schemaVersion"),
        (_document("oops"), "fields[0]"),
        (_document({"type": "text"}), "fields[0].id"),
        (_document({"id": "field_1"}), "fields[0].type"),
        (_document({"id": "field_1", "type": "select", "options": "A,B"}), "fields[0].options"),
        (_document({"id": "field_1", "type": "text", "metadata": []}), "fields[0].metadata"),
        (_document({"id": "field_1", "type": "text", "required": "yes"}), "fields[0].required"),
        (_document({"id": "field_1", "type": "text", "label": 3}), "fields[0].label"),
        (
            _document({"id": "field_1", "type": "text"}, {"id": "field_1", "type": "email"}),
            "fields[1].id",
        ),
    ],
)
def test_invalid_documents_name_the_offending_key(document, key) -> None:
    with pytest.raises(InvalidDefinitionError) as excinfo:
        deserialize(document)
    assert excinfo.value.key == key
    assert key in str(excinfo.value)


def test_invalid_json_text() -> None:
    with pytest.raises(InvalidDefinitionError) as excinfo:
        loads("{not json")
    assert excinfo.value.key == "$"


def test_save_and_load_file(tmp_path, sample_definition) -> None:
    path = save_definition(sample_definition, tmp_path / "form-config.json")
    assert json.loads(path.read_text(encoding="utf-8"))["title"] == "Signup"
    assert load_definition(path) == sample_definition


def test_file_errors_are_wrapped(tmp_path, sample_definition) -> None:
    with pytest.raises(DefinitionFileError):
        load_definition(tmp_path / "missing.json")
    with pytest.raises(DefinitionFileError):
        save_definition(sample_definition, tmp_path / "no-such-dir" / "form.json")


def test_category_record_name_is_used_as_title() -> None:
    definition = deserialize(
        {"name": "Vendor intake", "fields": [{"id": "field_1", "type": "text", "name": "Company"}]}
    )
    assert definition.title == "Vendor intake"
    assert definition.fields[0].label == "Company"


def test_newer_schema_version_still_loads(caplog) -> None:
    definition = deserialize({"schemaVersion": SCHEMA_VERSION + 1, "title": "T", "fields": []})
    assert definition.title == "T"
    assert "newer than supported" in caplog.text


def test_non_object_document_is_rejected() -> None:
    with pytest.raises(InvalidDefinitionError) as excinfo:
        deserialize(["not", "a", "form"])
    assert excinfo.value.key == "$"
