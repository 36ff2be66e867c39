from __future__ import annotations

from formbuilder.model.kinds import (
    Choice,
    FieldKind,
    OptionsRule,
    ValueShape,
    choices_for,
    default_value,
    filter_options,
    palette,
    resolve_kind,
    spec_for,
)


def test_resolve_kind_maps_wire_tags() -> None:
    assert resolve_kind("text") is FieldKind.TEXT
    assert resolve_kind("button-group") is FieldKind.BUTTON_GROUP
    assert resolve_kind("Address") is FieldKind.ADDRESS
    assert resolve_kind("MultiImageUpload") is FieldKind.MULTI_IMAGE_UPLOAD
    assert resolve_kind(FieldKind.RADIO) is FieldKind.RADIO


def test_resolve_kind_unknown_tags_become_unknown() -> None:
    assert resolve_kind("signature") is FieldKind.UNKNOWN
    assert resolve_kind("address") is FieldKind.UNKNOWN
    assert resolve_kind(42) is FieldKind.UNKNOWN
    assert resolve_kind(None) is FieldKind.UNKNOWN


def test_palette_lists_every_known_kind_once() -> None:
    kinds = [spec.kind for spec in palette()]
    assert FieldKind.UNKNOWN not in kinds
    assert len(kinds) == len(set(kinds)) == len(FieldKind) - 1


def test_option_rules() -> None:
    assert spec_for(FieldKind.SELECT).needs_options
    assert spec_for(FieldKind.MULTI_SELECT).options is OptionsRule.ALWAYS
    assert spec_for(FieldKind.CHECKBOX).options is OptionsRule.CONDITIONAL
    assert not spec_for(FieldKind.TEXT).needs_options


def test_button_is_not_value_bearing() -> None:
    assert spec_for(FieldKind.BUTTON).shape is ValueShape.EVENT
    assert not spec_for(FieldKind.BUTTON).value_bearing
    assert spec_for(FieldKind.TEXT).value_bearing


def test_filter_options_drops_blank_and_non_string_entries() -> None:
    options = ["A", "", "   ", None, 3, "B", "A"]
    filtered = filter_options(options)
    assert filtered == ["A", "B", "A"]
    assert filter_options(filtered) == filtered
    assert filter_options(None) == []
    assert filter_options("AB") == []


def test_choices_fall_back_to_metadata_options(make_field) -> None:
    field = make_field(FieldKind.SELECT, metadata={"options": ["X", {"label": "Why", "value": "Y"}]})
    assert choices_for(field) == [Choice("X", "X"), Choice("Why", "Y")]


def test_explicit_options_win_over_metadata(make_field) -> None:
    field = make_field(FieldKind.RADIO, options=["A"], metadata={"options": ["X"]})
    assert [choice.value for choice in choices_for(field)] == ["A"]


def test_default_values_per_kind(make_field) -> None:
    assert default_value(FieldKind.TEXT) == ""
    assert default_value(FieldKind.TOGGLE) is False
    assert default_value(FieldKind.BUTTON_GROUP) == [""]
    assert default_value(FieldKind.MULTI_SELECT) == []
    assert default_value(FieldKind.DATE_RANGE) == {"startDate": "", "endDate": ""}
    assert default_value(FieldKind.ADDRESS) is None
    assert default_value(FieldKind.BUTTON) is None


def test_checkbox_with_options_defaults_to_unchecked_map(make_field) -> None:
    field = make_field(FieldKind.CHECKBOX, options=["A", "B"])
    assert default_value(FieldKind.CHECKBOX, field) == {"A": False, "B": False}
    assert default_value(FieldKind.CHECKBOX, make_field(FieldKind.CHECKBOX)) is False


def test_default_lists_are_fresh_objects() -> None:
    first = default_value(FieldKind.BUTTON_GROUP)
    first.append("x")
    assert default_value(FieldKind.BUTTON_GROUP) == [""]
