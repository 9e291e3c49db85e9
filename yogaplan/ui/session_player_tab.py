"""
Session Player Tab

Provides UI for:
- Choosing a session and the clock start time
- Start/Pause, Reset, Previous/Next transport controls
- Countdown label and progress bar driven by the transport
- Running order with active/past highlighting and live reordering
- Follow-scroll while playing
"""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QTime, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox, QComboBox, QGroupBox, QHBoxLayout, QLabel, QMessageBox,
    QProgressBar, QPushButton, QTimeEdit, QVBoxLayout, QWidget,
)

from ..session.events import SessionEvent, SessionEventType
from ..session.items import DEFAULT_SESSION_ID
from ..session.scheduling import monotonic_ms
from ..session.timeline import DEFAULT_START_TIME, format_elapsed, parse_start_time
from ..session.transport import TransportState
from ..session.view import SCROLL_SYNC_MS, ScrollSync, SessionView
from .qt_scheduler import QtFrameScheduler
from .session_builder_dialog import SessionBuilderDialog
from .timeline_list import TimelineListWidget


class SessionPlayerTab(QWidget):
    """
    Tab that plays one session on its timeline.

    Everything shown here is a projection of the ``SessionView``: the list
    is rebuilt from the timeline, the labels read the transport.
    """

    # Signals
    session_started = pyqtSignal()
    session_paused = pyqtSignal()
    session_completed = pyqtSignal()

    def __init__(self, library, parent=None, scheduler=None, clock: Callable[[], float] = monotonic_ms):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.library = library
        self.clock = clock

        self.scheduler = scheduler or QtFrameScheduler(clock=clock, parent=self)
        self.view = SessionView(library, self.scheduler, clock=clock, start_time=DEFAULT_START_TIME)
        self.scroll_sync = ScrollSync()

        self._refresh_pending = False
        self._init_ui()
        self._subscribe()

        # Follow-scroll runs on its own coarse timer and only reads progress.
        self.scroll_timer = QTimer(self)
        self.scroll_timer.setInterval(SCROLL_SYNC_MS)
        self.scroll_timer.timeout.connect(self._sync_scroll)
        self.scroll_timer.start()

        self._reload_sessions(select=DEFAULT_SESSION_ID)

    def _init_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(12, 12, 12, 12)

        layout.addWidget(self._create_session_section())
        layout.addWidget(self._create_info_section())
        layout.addWidget(self._create_progress_section())
        layout.addWidget(self._create_controls_section())
        layout.addWidget(self._create_list_section(), 1)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #888; font-style: italic;")
        layout.addWidget(self.status_label)

    def _create_session_section(self) -> QGroupBox:
        group = QGroupBox("Session")
        layout = QHBoxLayout()

        self.session_combo = QComboBox()
        self.session_combo.currentIndexChanged.connect(self._on_session_selected)
        layout.addWidget(self.session_combo, 1)

        self.chk_clock = QCheckBox("Clock times")
        self.chk_clock.setChecked(True)
        self.chk_clock.toggled.connect(self._on_start_time_changed)
        layout.addWidget(self.chk_clock)

        self.start_time_edit = QTimeEdit()
        self.start_time_edit.setDisplayFormat("HH:mm")
        self.start_time_edit.setTime(QTime.fromString(DEFAULT_START_TIME, "HH:mm"))
        self.start_time_edit.timeChanged.connect(self._on_start_time_changed)
        layout.addWidget(self.start_time_edit)

        self.btn_new = QPushButton("➕ New...")
        self.btn_new.clicked.connect(self._on_new_session)
        layout.addWidget(self.btn_new)

        self.btn_edit = QPushButton("✏️ Edit...")
        self.btn_edit.clicked.connect(self._on_edit_session)
        layout.addWidget(self.btn_edit)

        self.btn_delete = QPushButton("🗑️ Delete")
        self.btn_delete.clicked.connect(self._on_delete_session)
        layout.addWidget(self.btn_delete)

        group.setLayout(layout)
        return group

    def _create_info_section(self) -> QGroupBox:
        group = QGroupBox("About")
        layout = QVBoxLayout()

        self.label_title = QLabel("")
        self.label_title.setStyleSheet("font-size: 14pt; font-weight: bold;")
        layout.addWidget(self.label_title)

        self.label_description = QLabel("")
        self.label_description.setWordWrap(True)
        layout.addWidget(self.label_description)

        self.label_meta = QLabel("")
        layout.addWidget(self.label_meta)

        self.label_story = QLabel("")
        self.label_story.setWordWrap(True)
        self.label_story.setStyleSheet("font-style: italic;")
        layout.addWidget(self.label_story)

        group.setLayout(layout)
        return group

    def _create_progress_section(self) -> QGroupBox:
        group = QGroupBox("Progress")
        layout = QVBoxLayout()

        self.label_timer = QLabel("00:00 / 00:00")
        self.label_timer.setStyleSheet("font-size: 18pt; font-family: monospace;")
        layout.addWidget(self.label_timer)

        self.progress_bar = QProgressBar()
        self.progress_bar.setMinimum(0)
        self.progress_bar.setMaximum(1000)
        self.progress_bar.setValue(0)
        self.progress_bar.setTextVisible(True)
        self.progress_bar.setFormat("Not started")
        layout.addWidget(self.progress_bar)

        self.label_current = QLabel("Current: <i>None</i>")
        layout.addWidget(self.label_current)

        group.setLayout(layout)
        return group

    def _create_controls_section(self) -> QGroupBox:
        group = QGroupBox("Playback Controls")
        layout = QHBoxLayout()

        self.btn_previous = QPushButton("⏮️ Previous")
        self.btn_previous.clicked.connect(self.view.transport.previous)
        layout.addWidget(self.btn_previous)

        self.btn_start = QPushButton("▶️ Start")
        self.btn_start.clicked.connect(self._on_toggle)
        layout.addWidget(self.btn_start)

        self.btn_reset = QPushButton("⏹️ Reset")
        self.btn_reset.clicked.connect(self.view.transport.reset)
        layout.addWidget(self.btn_reset)

        self.btn_next = QPushButton("⏭️ Next")
        self.btn_next.clicked.connect(self.view.transport.next)
        layout.addWidget(self.btn_next)

        layout.addStretch()
        group.setLayout(layout)
        return group

    def _create_list_section(self) -> QGroupBox:
        group = QGroupBox("Running Order")
        layout = QVBoxLayout()

        self.timeline_list = TimelineListWidget(self.view.reorder, clock=self.clock)
        self.timeline_list.itemDoubleClicked.connect(self._on_item_double_clicked)
        layout.addWidget(self.timeline_list)

        self.label_end = QLabel("Session end: --:--")
        layout.addWidget(self.label_end)

        group.setLayout(layout)
        return group

    def _subscribe(self):
        emitter = self.view.emitter
        for event_type in (
            SessionEventType.TIMELINE_CHANGE,
            SessionEventType.SEGMENT_CHANGE,
            SessionEventType.SESSION_CHANGE,
        ):
            emitter.subscribe(event_type, self._on_structure_event)
        for event_type in (
            SessionEventType.TRANSPORT_START,
            SessionEventType.TRANSPORT_PAUSE,
            SessionEventType.TRANSPORT_RESET,
            SessionEventType.TRANSPORT_SEEK,
            SessionEventType.TRANSPORT_PROGRESS,
            SessionEventType.TRANSPORT_COMPLETE,
        ):
            emitter.subscribe(event_type, self._on_transport_event)

    # === Event Handlers ===

    def _on_structure_event(self, event: SessionEvent):
        self._schedule_refresh()

    def _on_transport_event(self, event: SessionEvent):
        self._update_progress()
        if event.event_type is SessionEventType.TRANSPORT_START:
            self.scroll_sync.reset()
            self.session_started.emit()
        elif event.event_type is SessionEventType.TRANSPORT_PAUSE:
            self.session_paused.emit()
        elif event.event_type is SessionEventType.TRANSPORT_COMPLETE:
            self.status_label.setText("✅ Session complete")
            self.session_completed.emit()

    def _on_toggle(self):
        self.view.transport.toggle()
        self._update_progress()

    def _on_item_double_clicked(self, item):
        position = self.timeline_list.row(item)
        segment = self.view.timeline.segment_for_position(position)
        if segment is not None:
            self.view.transport.seek_to_segment(segment.unique_index)

    def _on_session_selected(self, index: int):
        session_id = self.session_combo.itemData(index)
        if session_id is None:
            return
        self.view.select_session(session_id)
        self.status_label.setText("")

    def _on_start_time_changed(self, *_args):
        enabled = self.chk_clock.isChecked()
        self.start_time_edit.setEnabled(enabled)
        text = self.start_time_edit.time().toString("HH:mm") if enabled else None
        try:
            if text is not None:
                parse_start_time(text)
            self.view.set_start_time(text)
        except ValueError as e:
            self.logger.warning(f"[ui] Invalid start time {text!r}: {e}")
            self.status_label.setText(f"⚠️ {e}")

    def _on_new_session(self):
        self._open_builder(None)

    def _on_edit_session(self):
        self._open_builder(self.view.session)

    def _open_builder(self, session):
        dialog = SessionBuilderDialog(self.library, session=session, parent=self)
        if dialog.exec():
            saved_id = dialog.saved_session_id or DEFAULT_SESSION_ID
            self.view.reload_library()
            self._reload_sessions(select=saved_id)
            self.status_label.setText(f"✅ Saved session {saved_id}")

    def _on_delete_session(self):
        session = self.view.session
        if session.is_default:
            return
        reply = QMessageBox.question(
            self,
            "Delete Session",
            f"Delete session '{session.title}'?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        if self.library.sessions.delete(session.id):
            self.logger.info(f"[ui] Deleted session {session.id}")
            self._reload_sessions(select=DEFAULT_SESSION_ID)
        else:
            self.status_label.setText("❌ Session could not be deleted")

    # === Projection ===

    def _reload_sessions(self, select: Optional[str] = None):
        self.session_combo.blockSignals(True)
        self.session_combo.clear()
        for session in self.view.available_sessions():
            self.session_combo.addItem(session.title, session.id)
        self.session_combo.blockSignals(False)

        index = self.session_combo.findData(select) if select is not None else 0
        index = max(0, index)
        self.session_combo.setCurrentIndex(index)
        self._on_session_selected(index)

    def _schedule_refresh(self):
        # Coalesce: one repaint after the current event (e.g. a drop) returns.
        if self._refresh_pending:
            return
        self._refresh_pending = True
        QTimer.singleShot(0, self.refresh)

    def refresh(self):
        """Repaint header, list and progress from the session view."""
        self._refresh_pending = False
        session = self.view.session
        self.label_title.setText(session.title)
        self.label_description.setText(session.description)
        meta = [f"Level: {session.level}"] if session.level else []
        if session.category:
            meta.append(f"Category: {session.category}")
        meta.append(f"Cards: {len(self.view.order)}")
        self.label_meta.setText("    ".join(meta))
        self.label_story.setText(session.story)
        self.label_story.setVisible(bool(session.story))
        self.btn_delete.setEnabled(not session.is_default)

        self.timeline_list.show_timeline(self.view.timeline, self.view.status_of)
        self.label_end.setText(f"Session end: {self.view.timeline.end_label}")
        self._update_progress()

    def _update_progress(self):
        transport = self.view.transport
        elapsed = transport.elapsed_ms
        total = transport.total_duration_ms
        self.label_timer.setText(f"{format_elapsed(elapsed)} / {format_elapsed(total)}")

        state = transport.state
        if state is TransportState.IDLE:
            self.progress_bar.setValue(0)
            self.progress_bar.setFormat("Not started")
        else:
            self.progress_bar.setValue(int(transport.progress * 1000))
            pct = int(transport.progress * 100)
            remaining = transport.remaining_ms / 1000
            self.progress_bar.setFormat(f"{pct}% - {int(remaining // 60)}:{int(remaining % 60):02d} remaining")

        running = transport.is_running()
        self.btn_start.setText("⏸️ Pause" if running else "▶️ Start")
        self.btn_start.setEnabled(total > 0 or running)
        self.btn_reset.setEnabled(running or elapsed > 0)
        has_segments = not self.view.timeline.is_empty
        self.btn_previous.setEnabled(has_segments)
        self.btn_next.setEnabled(has_segments)

        segment = transport.active_segment()
        if segment is None or state is TransportState.IDLE:
            self.label_current.setText("Current: <i>None</i>")
        else:
            self.label_current.setText(f"Current: {segment.item.title}")

    def _sync_scroll(self):
        transport = self.view.transport
        if not transport.is_running() or not self.scroll_sync.due(self.clock()):
            return
        bar = self.timeline_list.verticalScrollBar()
        viewport_height = self.timeline_list.viewport().height()
        content_height = bar.maximum() + viewport_height
        target = ScrollSync.scroll_target(transport.progress, 0, content_height, viewport_height)
        bar.setValue(int(target))

    def shutdown(self):
        """Stop timers and the transport before the window closes."""
        self.scroll_timer.stop()
        if self.view.transport.is_running():
            self.view.transport.pause()
