"""
Ordered card list with pointer drag-and-drop and touch long-press reorder.

Both input paths end in the same ``ReorderEngine`` calls: Qt drag-and-drop
goes through ``DragGesture``, touch goes through ``LongPressGesture``. Cards
dragged in from the palette arrive as ``CARD_MIME`` and are inserted.
"""

import logging
from typing import Callable, List, Optional

from PyQt6.QtCore import QEvent, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QFont
from PyQt6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem

from ..session.items import ItemKind
from ..session.reorder import LONG_PRESS_MS, DragGesture, LongPressGesture, ReorderEngine
from ..session.scheduling import monotonic_ms
from ..session.timeline import TimedSegment, Timeline, UnresolvedEntry
from ..session.view import SegmentStatus

CARD_MIME = "application/x-yogaplan-card"

KIND_ICONS = {
    ItemKind.EXERCISE: "🧘",
    ItemKind.STORY: "📖",
    ItemKind.PRACTICAL: "🔔",
}

ACTIVE_BG = QColor("#d8efe9")
INDICATOR_BG = QColor("#fff3c4")
PAST_FG = QColor("#9a9a9a")
MISSING_FG = QColor("#c0392b")


def format_minutes(minutes: float) -> str:
    if float(minutes).is_integer():
        return f"{int(minutes)} min"
    return f"{minutes:.1f} min"


def card_icon(item) -> str:
    icon = getattr(item, "icon", "")
    return icon or KIND_ICONS[item.kind]


def touch_position(event):
    points = event.points()
    return points[0].position() if points else None


def item_bounds(widget: QListWidget) -> List[tuple]:
    """Vertical span of every row in viewport coordinates."""
    bounds = []
    for row in range(widget.count()):
        rect = widget.visualItemRect(widget.item(row))
        bounds.append((rect.top(), rect.bottom()))
    return bounds


class TimelineListWidget(QListWidget):
    """Running order of one session or draft.

    Row index equals position in the order, placeholders included.
    """

    order_changed = pyqtSignal()

    def __init__(
        self,
        engine: Optional[ReorderEngine] = None,
        parent=None,
        clock: Callable[[], float] = monotonic_ms,
        haptic: Optional[Callable[[int], None]] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.clock = clock
        self.haptic = haptic
        self.engine: Optional[ReorderEngine] = None
        self.drag: Optional[DragGesture] = None
        self.long_press: Optional[LongPressGesture] = None
        self._indicator_row: Optional[int] = None

        self.setAlternatingRowColors(True)
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setDropIndicatorShown(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DragDrop)
        self.setDefaultDropAction(Qt.DropAction.MoveAction)
        self.viewport().setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)

        self._hold_timer = QTimer(self)
        self._hold_timer.setSingleShot(True)
        self._hold_timer.setInterval(LONG_PRESS_MS)
        self._hold_timer.timeout.connect(self._on_hold_timeout)

        if engine is not None:
            self.set_engine(engine)

    def set_engine(self, engine: ReorderEngine) -> None:
        self.engine = engine
        self.drag = DragGesture(engine)
        self.long_press = LongPressGesture(engine, haptic=self.haptic)

    # ===== Rendering =====

    def show_timeline(self, timeline: Timeline, status_of: Callable[[TimedSegment], SegmentStatus]) -> None:
        """Rows for a played timeline: times, active and past styling."""
        self.clear()
        self._indicator_row = None
        for entry in timeline.entries:
            if isinstance(entry, UnresolvedEntry):
                self._add_missing(entry)
                continue
            start, end = timeline.label_range(entry)
            text = (
                f"{entry.position + 1}. {card_icon(entry.item)} {entry.item.title}"
                f"    {start} - {end}    ({format_minutes(entry.item.duration_minutes)})"
            )
            row = QListWidgetItem(text)
            row.setData(Qt.ItemDataRole.UserRole, entry.item_id)
            status = status_of(entry)
            if status is SegmentStatus.ACTIVE:
                font = QFont(row.font())
                font.setBold(True)
                row.setFont(font)
                row.setBackground(QBrush(ACTIVE_BG))
            elif status is SegmentStatus.PAST:
                row.setForeground(QBrush(PAST_FG))
            self.addItem(row)

    def show_entries(self, entries) -> None:
        """Rows for a draft: cards and placeholders without times."""
        self.clear()
        self._indicator_row = None
        for position, entry in enumerate(entries):
            if isinstance(entry, UnresolvedEntry):
                self._add_missing(entry)
                continue
            row = QListWidgetItem(
                f"{position + 1}. {card_icon(entry)} {entry.title} ({format_minutes(entry.duration_minutes)})"
            )
            row.setData(Qt.ItemDataRole.UserRole, entry.id)
            self.addItem(row)

    def _add_missing(self, entry: UnresolvedEntry) -> None:
        row = QListWidgetItem(f"{entry.position + 1}. {entry.label}")
        row.setData(Qt.ItemDataRole.UserRole, entry.item_id)
        row.setForeground(QBrush(MISSING_FG))
        self.addItem(row)

    def _set_indicator(self, row: Optional[int]) -> None:
        if row == self._indicator_row:
            return
        if self._indicator_row is not None and self._indicator_row < self.count():
            self.item(self._indicator_row).setData(Qt.ItemDataRole.BackgroundRole, None)
        self._indicator_row = row
        if row is not None and 0 <= row < self.count():
            self.item(row).setBackground(QBrush(INDICATOR_BG))

    # ===== Pointer drag-and-drop =====

    def startDrag(self, supportedActions):
        if self.drag is not None:
            self.drag.begin(self.currentRow())
        super().startDrag(supportedActions)
        if self.drag is not None:
            self.drag.cancel()
        self._set_indicator(None)

    def dragEnterEvent(self, event):
        if event.source() is self or event.mimeData().hasFormat(CARD_MIME):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        row = self.indexAt(event.position().toPoint()).row()
        if self.drag is not None and event.source() is self:
            self.drag.over(row if row >= 0 else None)
            self._set_indicator(self.drag.indicator)
        else:
            self._set_indicator(row if row >= 0 else None)
        event.accept()

    def dragLeaveEvent(self, event):
        self._set_indicator(None)
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        if self.drag is None:
            event.ignore()
            return
        row = self.indexAt(event.position().toPoint()).row()
        mime = event.mimeData()
        if mime.hasFormat(CARD_MIME):
            card_id = bytes(mime.data(CARD_MIME)).decode("utf-8")
            self.drag.drop_card(card_id, row if row >= 0 else None)
        elif event.source() is self and self.drag.active:
            self.drag.drop(row if row >= 0 else self.count() - 1)
        else:
            event.ignore()
            return
        # The engine owns the order; keep Qt from moving or removing rows itself.
        event.setDropAction(Qt.DropAction.CopyAction)
        event.accept()
        self._set_indicator(None)
        self.order_changed.emit()

    # ===== Touch long-press reorder =====

    def viewportEvent(self, event):
        kind = event.type()
        if self.long_press is None or kind not in (
            QEvent.Type.TouchBegin,
            QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd,
            QEvent.Type.TouchCancel,
        ):
            return super().viewportEvent(event)

        pos = touch_position(event)
        if kind == QEvent.Type.TouchBegin and pos is not None:
            row = self.indexAt(pos.toPoint()).row()
            if row >= 0:
                self.long_press.press(row, self.clock())
                self._hold_timer.start()
        elif kind == QEvent.Type.TouchUpdate and pos is not None:
            if not self.long_press.armed:
                self._hold_timer.stop()
            self._set_indicator(self.long_press.move(pos.y(), item_bounds(self)))
        elif kind == QEvent.Type.TouchEnd:
            self._hold_timer.stop()
            if self.long_press.release(self.clock()):
                self.order_changed.emit()
            self._set_indicator(None)
        else:
            self._hold_timer.stop()
            self.long_press.cancel()
            self._set_indicator(None)
        event.accept()
        return True

    def _on_hold_timeout(self):
        if self.long_press is not None and self.long_press.arm(self.clock()):
            self.logger.debug(f"[ui] Touch drag armed on row {self.long_press.source}")
