"""Widget tests for the session player tab and the session builder dialog."""

import pytest

pytest.importorskip("PyQt6")

from PyQt6.QtWidgets import QDialog, QMessageBox

from yogaplan.session import TransportState
from yogaplan.session.timeline import build_timeline
from yogaplan.session.view import SegmentStatus
from yogaplan.ui.session_builder_dialog import SessionBuilderDialog
from yogaplan.ui.session_player_tab import SessionPlayerTab
from yogaplan.ui.timeline_list import TimelineListWidget


def _stored_session(library, exercises):
    return library.sessions.create({
        "title": "Abendruhe",
        "description": "Zum Runterkommen",
        "duration_minutes": 15,
        "exercises": exercises,
        "category": "Abend",
        "level": "Alle Levels",
    }).item


@pytest.fixture
def tab(qtbot, qapp, library, scheduler, clock):
    widget = SessionPlayerTab(library, scheduler=scheduler, clock=clock)
    qtbot.addWidget(widget)
    widget.refresh()
    yield widget
    widget.shutdown()


def test_tab_shows_builtin_session(tab):
    assert tab.label_title.text() == "Basis Yoga Flow"
    assert tab.timeline_list.count() == 5
    assert tab.label_end.text() == "Session end: 13:20"
    assert tab.progress_bar.format() == "Not started"
    assert tab.label_timer.text() == "00:00 / 20:00"
    assert not tab.btn_delete.isEnabled()


def test_start_and_pause_toggle_button(tab, scheduler, clock):
    tab.btn_start.click()
    assert tab.view.transport.state is TransportState.RUNNING
    assert "Pause" in tab.btn_start.text()

    scheduler.fire(clock.advance(60_000))
    assert tab.label_timer.text() == "01:00 / 20:00"
    assert tab.progress_bar.format() == "5% - 19:00 remaining"

    tab.btn_start.click()
    assert tab.view.transport.state is TransportState.PAUSED
    assert "Start" in tab.btn_start.text()


def test_list_repaints_after_move(qtbot, tab):
    tab.view.move(0, 4)
    qtbot.waitUntil(lambda: "Sonnengruß" in tab.timeline_list.item(4).text())
    assert tab.timeline_list.item(4).text().startswith("5. ")
    assert "Krieger" in tab.timeline_list.item(0).text()


def test_next_steps_to_second_card(tab):
    tab.btn_next.click()
    assert tab.view.transport.active_segment().position == 1
    assert tab.label_current.text().startswith("Current: Krieger")


def test_delete_session_after_confirmation(qtbot, tab, library, monkeypatch):
    session = _stored_session(library, ["1", "2"])
    tab._reload_sessions(select=session.id)
    assert tab.view.session.id == session.id

    monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.StandardButton.No)
    tab._on_delete_session()
    assert library.sessions.get(session.id) is not None

    monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.StandardButton.Yes)
    tab._on_delete_session()
    assert library.sessions.get(session.id) is None
    assert tab.view.is_default_session
    assert tab.session_combo.count() == 1


def test_timeline_list_marks_missing_cards(qtbot, qapp, library):
    widget = TimelineListWidget()
    qtbot.addWidget(widget)
    timeline = build_timeline(["1", "story-404", "2"], library.resolver(), "08:00")
    widget.show_timeline(timeline, lambda _segment: SegmentStatus.UPCOMING)

    assert widget.count() == 3
    assert widget.item(1).text() == "2. Missing card (ID: story-404)"
    assert "08:05 - 08:09" in widget.item(2).text()


def test_builder_reports_errors_without_closing(qtbot, qapp, library):
    dialog = SessionBuilderDialog(library)
    qtbot.addWidget(dialog)
    dialog._on_save()
    assert dialog.label_errors.isVisibleTo(dialog)
    assert "title is required" in dialog.label_errors.text()
    assert dialog.saved_session_id is None


def test_builder_palette_click_appends_and_saves(qtbot, qapp, library):
    dialog = SessionBuilderDialog(library)
    qtbot.addWidget(dialog)

    dialog.title_edit.setText("Kurz")
    dialog.description_edit.setPlainText("Zwei Karten")
    dialog._on_palette_clicked(dialog.palette.item(0))
    dialog._on_palette_clicked(dialog.palette.item(1))
    qtbot.waitUntil(lambda: dialog.order_list.count() == 2)
    assert dialog.label_counts.text() == "2 exercises, 0 stories, 0 practicals"

    dialog._on_save()
    assert dialog.result() == QDialog.DialogCode.Accepted
    saved = library.sessions.get(dialog.saved_session_id)
    assert saved.title == "Kurz"
    assert saved.exercises == ["1", "2"]


def test_builder_search_filters_palette(qtbot, qapp, library):
    dialog = SessionBuilderDialog(library)
    qtbot.addWidget(dialog)
    dialog.search_edit.setText("kobra")
    assert dialog.palette.count() == 1
    assert "Kobra" in dialog.palette.item(0).text()
