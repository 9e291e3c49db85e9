"""Tests for SessionView wiring and follow-scroll math."""

import pytest

from yogaplan.session import ReorderPolicy, SessionEventType, TransportState
from yogaplan.session.view import ScrollSync, SegmentStatus, SessionView


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
def view(library, scheduler, clock):
    return SessionView(library, scheduler, clock=clock)


def test_starts_on_builtin_session(view):
    assert view.is_default_session
    assert view.order == ["1", "2", "3", "4", "5"]
    assert view.timeline.total_duration_ms == 20 * 60_000
    assert view.timeline.end_label == "13:20"
    assert view.transport.state is TransportState.IDLE


def test_reorder_builtin_session_stays_in_memory(view, library):
    assert view.move(0, 4) is True
    assert view.order == ["2", "3", "4", "5", "1"]
    assert view.session.exercises == ["2", "3", "4", "5", "1"]
    assert library.sessions.list() == []
    assert view.timeline.segments[-1].item_id == "1"


def test_reorder_stored_session_persists(view, library):
    session = _stored_session(library, ["1", "2", "3"])
    view.select_session(session.id)
    assert not view.is_default_session

    view.move(2, 0)
    assert library.sessions.get(session.id).exercises == ["3", "1", "2"]


def test_gesture_commits_also_persist(view, library):
    session = _stored_session(library, ["1", "2"])
    view.select_session(session.id)
    view.reorder.insert("3", 1)
    assert library.sessions.get(session.id).exercises == ["1", "3", "2"]
    assert len(view.timeline.segments) == 3


def test_unknown_session_falls_back_to_default(view):
    events = []
    view.emitter.subscribe(SessionEventType.SESSION_CHANGE, lambda e: events.append(e.data["session_id"]))
    session = view.select_session("does-not-exist")
    assert session.is_default
    assert events == ["default"]


def test_session_change_resets_transport(view, library, scheduler, clock):
    session = _stored_session(library, ["2"])
    view.transport.start()
    scheduler.fire(clock.advance(30_000))
    view.select_session(session.id)
    assert view.transport.state is TransportState.IDLE
    assert view.transport.elapsed_ms == 0
    assert scheduler.pending == 0


def test_move_during_playback_keeps_elapsed_by_default(view, scheduler, clock):
    view.transport.start()
    scheduler.fire(clock.advance(6 * 60_000))
    assert view.transport.active_segment().item_id == "2"

    view.move(1, 0)
    assert view.transport.elapsed_ms == 6 * 60_000
    assert view.transport.active_segment().item_id == "1"
    assert view.transport.is_running()


def test_identity_policy_follows_active_card(library, scheduler, clock):
    view = SessionView(library, scheduler, clock=clock, policy=ReorderPolicy.IDENTITY)
    view.transport.start()
    scheduler.fire(clock.advance(6 * 60_000))

    view.move(1, 0)
    assert view.transport.active_segment().item_id == "2"
    assert view.transport.elapsed_ms == 60_000


def test_set_start_time(view, scheduler, clock):
    view.transport.start()
    scheduler.fire(clock.advance(2_000))
    view.set_start_time("07:30")
    assert view.timeline.end_label == "07:50"
    assert view.transport.elapsed_ms == 2_000

    view.set_start_time(None)
    assert view.timeline.end_label == "20:00"

    with pytest.raises(ValueError):
        view.set_start_time("7.30")


def test_reload_library_resolves_new_cards(view, library):
    session = _stored_session(library, ["1", "story-1"])
    view.select_session(session.id)
    assert len(view.timeline.unresolved) == 1

    library.stories.create({"title": "Der Berg", "text": "...", "tags": [], "time": 2})
    view.reload_library()
    assert view.timeline.unresolved == []
    assert view.timeline.total_duration_ms == 7 * 60_000


def test_status_of(view, scheduler, clock):
    segments = view.timeline.segments
    assert view.status_of(segments[0]) is SegmentStatus.ACTIVE
    assert view.status_of(segments[1]) is SegmentStatus.UPCOMING

    view.transport.seek_to_segment(2)
    assert view.status_of(segments[0]) is SegmentStatus.PAST
    assert view.status_of(segments[2]) is SegmentStatus.ACTIVE


def test_available_sessions_lists_builtin_first(view, library):
    _stored_session(library, ["1"])
    sessions = view.available_sessions()
    assert sessions[0].is_default
    assert [s.title for s in sessions[1:]] == ["Abendruhe"]


def test_scroll_sync_throttles():
    sync = ScrollSync(interval_ms=100)
    assert sync.due(0) is True
    assert sync.due(50) is False
    assert sync.due(100) is True
    sync.reset()
    assert sync.due(101) is True


def test_scroll_target_spans_list():
    # List of 1000px inside a 300px viewport, starting at 0
    assert ScrollSync.scroll_target(0.0, 0, 1000, 300) == 0
    assert ScrollSync.scroll_target(1.0, 0, 1000, 300) == 700
    assert ScrollSync.scroll_target(0.5, 0, 1000, 300) == 350
    # List starting lower on the page begins 30% of the viewport above it
    assert ScrollSync.scroll_target(0.0, 500, 1000, 300) == 410
    # Short lists never scroll negative
    assert ScrollSync.scroll_target(1.0, 0, 100, 300) == 0
