from __future__ import annotations

import json

from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent
from PySide6.QtWidgets import QApplication, QCheckBox, QMessageBox
import shiboken6
import pytest

from formbuilder.export.serializer import save_definition
from formbuilder.model.definition import FormDefinition
from formbuilder.model.kinds import FieldKind
from formbuilder.state.session import AuthoringSession, SessionState
from formbuilder.state.values import FormValues
from formbuilder.ui.main_window import MainWindow
from formbuilder.ui.properties_panel import PropertiesPanel
from formbuilder.ui.sidebar import ComponentSidebar
from formbuilder.viewer import canvas as canvas_module
from formbuilder.viewer.canvas import FIELD_MIME_TYPE, FormCanvas
from formbuilder.viewer.preview import FormPreview


@pytest.fixture(autouse=True)
def _qt(qapp):
    yield


@pytest.fixture
def window(settings):
    main_window = MainWindow(settings=settings)
    yield main_window
    main_window.close()
    main_window.deleteLater()


def test_sidebar_emits_chosen_kind() -> None:
    sidebar = ComponentSidebar()
    chosen = []
    sidebar.kind_chosen.connect(chosen.append)
    item = sidebar.list_widget.item(0)
    sidebar.list_widget.itemClicked.emit(item)
    assert chosen == [FieldKind.TEXT]
    assert sidebar.list_widget.count() == len(FieldKind) - 1


def test_canvas_builds_one_card_per_field(sample_definition) -> None:
    canvas = FormCanvas()
    canvas.set_fields(sample_definition.fields, "field_2", FormValues(sample_definition))
    assert list(canvas.cards) == sample_definition.field_ids()

    removed = []
    canvas.remove_requested.connect(removed.append)
    canvas.cards["field_3"].remove_button.click()
    assert removed == ["field_3"]

    canvas.clear()
    assert canvas.cards == {}


def test_canvas_checkbox_requests_properties_toggle(sample_definition) -> None:
    canvas = FormCanvas()
    canvas.set_fields(sample_definition.fields, None, FormValues(sample_definition))
    toggles = []
    canvas.properties_toggle_requested.connect(lambda: toggles.append(True))
    canvas.cards["field_4"].control.findChild(QCheckBox).click()
    assert toggles == [True]


def test_preview_collects_and_submits_values(sample_definition) -> None:
    preview = FormPreview()
    values = FormValues(sample_definition)
    preview.set_definition(sample_definition, values)
    assert preview.title_label.text() == "Signup"
    assert preview.empty_label.isHidden()

    submitted = []
    preview.submitted.connect(submitted.append)
    preview.form_view.controls["field_1"].textEdited.emit("Ada")
    preview.submit_button.click()
    assert submitted[0]["field_1"] == "Ada"


def test_preview_of_empty_form() -> None:
    preview = FormPreview()
    preview.set_definition(FormDefinition(), None)
    assert preview.title_label.text() == "Preview Form"
    assert not preview.empty_label.isHidden()
    assert preview.submit_button.isHidden()


def test_properties_panel_edits_flow_into_session() -> None:
    session = AuthoringSession()
    field = session.add_field(FieldKind.RADIO)
    panel = PropertiesPanel()
    panel.field_updated.connect(session.update_field)
    panel.set_field(field)
    assert panel.stack.currentIndex() == 1
    assert panel.placeholder_edit.isHidden()

    panel.label_edit.textEdited.emit("Colour")
    panel.new_option_edit.setText("Red")
    panel.commit_new_option()
    panel.new_option_edit.setText("Blue")
    panel.commit_new_option()
    assert field.label == "Colour"
    assert field.options == ["Red", "Blue"]
    assert len(panel.option_edits) == 2

    panel.option_edits[1].textEdited.emit("Green")
    panel.remove_option_at(0)
    assert field.options == ["Green"]
    panel.required_check.setChecked(True)
    assert field.required is True
    assert "Options: 1" in panel.info_label.text()

    panel.set_field(None)
    assert panel.stack.currentIndex() == 0


def test_properties_panel_adopts_metadata_options() -> None:
    session = AuthoringSession()
    field = session.add_field(FieldKind.SELECT, metadata={"options": ["X", "Y"]})
    panel = PropertiesPanel()
    panel.field_updated.connect(session.update_field)
    panel.set_field(field)
    assert field.options == ["X", "Y"]


def test_properties_panel_type_change() -> None:
    panel = PropertiesPanel()
    session = AuthoringSession()
    field = session.add_field(FieldKind.TEXT)
    panel.set_field(field)
    changes = []
    panel.kind_changed.connect(lambda field_id, kind: changes.append((field_id, kind)))
    index = panel.type_combo.findData(FieldKind.EMAIL.value)
    panel.type_combo.activated.emit(index)
    assert changes == [(field.id, FieldKind.EMAIL)]


def test_window_add_select_and_delete(window) -> None:
    window.sidebar.kind_chosen.emit(FieldKind.TEXT)
    window.sidebar.kind_chosen.emit(FieldKind.SELECT)
    session = window.session
    assert [item.id for item in session.fields] == ["field_1", "field_2"]
    assert session.definition.title == "My Custom Form"

    window.canvas.field_clicked.emit("field_2")
    assert session.state is SessionState.FIELD_SELECTED
    assert not window.properties_panel.isHidden()
    assert window.properties_panel.field is session.selected_field

    window.copy_selected_field()
    assert [item.id for item in session.fields] == ["field_1", "field_2", "field_3"]

    window.delete_selected_field()
    assert [item.id for item in session.fields] == ["field_1", "field_3"]
    assert session.state is SessionState.IDLE
    assert window.properties_panel.isHidden()


def test_window_kind_change_moves_selection(window) -> None:
    window.add_field(FieldKind.TEXT)
    window.select_field("field_1")
    window.properties_panel.kind_changed.emit("field_1", FieldKind.TEXTAREA)
    assert window.session.fields[0].kind is FieldKind.TEXTAREA
    assert window.session.selected_field_id == "field_2"
    assert window.properties_panel.field is window.session.fields[0]


def test_window_opens_definition(tmp_path, window, sample_definition) -> None:
    path = save_definition(sample_definition, tmp_path / "form.json")
    assert window.open_definition(path)
    assert window.title_edit.text() == "Signup"
    assert list(window.canvas.cards) == sample_definition.field_ids()


def test_window_reports_bad_definition(tmp_path, window, monkeypatch) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"title": "T", "fields": [{"type": "text"}]}), encoding="utf-8")
    shown = []
    monkeypatch.setattr(QMessageBox, "critical", lambda *args: shown.append(args[1]))
    assert not window.open_definition(path)
    assert shown == ["Open Failed"]
    assert window.session.fields == []


def test_window_preview_mode(window) -> None:
    window.add_field(FieldKind.TEXT)
    window.enter_preview_mode()
    assert window.tabs.currentWidget() is window.preview
    assert list(window.preview.form_view.controls) == ["field_1"]


def _mouse(kind: QEvent.Type, x: float, y: float) -> QMouseEvent:
    position = QPointF(x, y)
    pressed = kind == QEvent.Type.MouseButtonPress
    return QMouseEvent(
        kind,
        position,
        position,
        Qt.MouseButton.LeftButton if pressed else Qt.MouseButton.NoButton,
        Qt.MouseButton.LeftButton,
        Qt.KeyboardModifier.NoModifier,
    )


class _RecordingDrag:
    started: list[str] = []

    def __init__(self, source) -> None:
        self.source = source
        self.mime = None

    def setMimeData(self, mime) -> None:
        self.mime = mime

    def exec(self, action):
        _RecordingDrag.started.append(bytes(self.mime.data(FIELD_MIME_TYPE)).decode("utf-8"))
        return action


def test_pressing_a_card_selects_it_and_can_start_a_drag(window, monkeypatch) -> None:
    window.add_field(FieldKind.TEXT)
    window.add_field(FieldKind.EMAIL)
    card = window.canvas.cards["field_2"]

    card.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 10, 10))
    QApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    assert window.session.selected_field_id == "field_2"
    assert window.canvas.cards["field_2"] is card
    assert shiboken6.isValid(card)
    assert card.selected
    assert not window.canvas.cards["field_1"].selected

    _RecordingDrag.started = []
    monkeypatch.setattr(canvas_module, "QDrag", _RecordingDrag)
    card.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 90, 90))
    assert _RecordingDrag.started == ["field_2"]


def test_background_click_clears_card_selection(window) -> None:
    window.add_field(FieldKind.TEXT)
    window.select_field("field_1")
    card = window.canvas.cards["field_1"]
    window.canvas.background_clicked.emit()
    assert window.session.selected_field_id is None
    assert window.canvas.cards["field_1"] is card
    assert not card.selected
    assert card.badge.isHidden()


def test_dropping_a_card_reorders_without_rebuilding(window) -> None:
    for kind in (FieldKind.TEXT, FieldKind.EMAIL, FieldKind.NUMBER):
        window.add_field(kind)
    cards = dict(window.canvas.cards)

    window.canvas.field_dropped.emit("field_3", "field_1")
    assert window.session.definition.field_ids() == ["field_3", "field_1", "field_2"]
    assert list(window.canvas.cards) == ["field_3", "field_1", "field_2"]
    assert all(window.canvas.cards[field_id] is card for field_id, card in cards.items())
    positions = [window.canvas.layout().indexOf(card) for card in window.canvas.cards.values()]
    assert positions == sorted(positions)
