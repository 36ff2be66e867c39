from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from formbuilder.config import Settings
from formbuilder.model.definition import FormDefinition
from formbuilder.model.field import FormField, create_field
from formbuilder.model.kinds import FieldKind


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def make_field():
    counter = {"next": 1}

    def factory(kind: FieldKind, **kwargs) -> FormField:
        field_id = kwargs.pop("field_id", None) or f"field_{counter['next']}"
        counter["next"] += 1
        return create_field(kind, field_id, **kwargs)

    return factory


@pytest.fixture
def sample_definition(make_field) -> FormDefinition:
    return FormDefinition(
        title="Signup",
        description="Tell us about yourself",
        fields=[
            make_field(FieldKind.TEXT, label="Name", required=True),
            make_field(FieldKind.EMAIL, label="Email"),
            make_field(FieldKind.SELECT, label="Plan", options=["Free", "Pro"]),
            make_field(FieldKind.CHECKBOX, label="Agree"),
            make_field(FieldKind.DATE_RANGE, label="Stay"),
        ],
    )
