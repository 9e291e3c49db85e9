"""QTimer-backed frame scheduler for the transport."""

import logging
from typing import Callable, Set

from PyQt6.QtCore import QObject, QTimer

from ..session.scheduling import FRAME_INTERVAL_MS, TickCallback, monotonic_ms


class QtFrameScheduler(QObject):
    """One single-shot QTimer per requested frame.

    The handle returned by :meth:`schedule_tick` is the timer itself;
    cancelling stops it and schedules it for deletion.
    """

    def __init__(
        self,
        interval_ms: int = FRAME_INTERVAL_MS,
        clock: Callable[[], float] = monotonic_ms,
        parent=None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.interval_ms = interval_ms
        self.clock = clock
        self._timers: Set[QTimer] = set()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def schedule_tick(self, callback: TickCallback) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(self.interval_ms)
        timer.timeout.connect(lambda: self._fire(timer, callback))
        self._timers.add(timer)
        timer.start()
        return timer

    def cancel_tick(self, handle) -> None:
        if handle in self._timers:
            self._timers.discard(handle)
            handle.stop()
            handle.deleteLater()

    def _fire(self, timer: QTimer, callback: TickCallback) -> None:
        if timer not in self._timers:
            return
        self._timers.discard(timer)
        timer.deleteLater()
        callback(self.clock())
