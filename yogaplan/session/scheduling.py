"""Frame scheduling primitives for the transport loop.

The transport never talks to a concrete timer. It asks a ``TickScheduler``
for one single-shot callback per frame and cancels the pending one whenever
playback stops or jumps. The Qt implementation lives in
``yogaplan.ui.qt_scheduler``; the ones here drive tests and headless runs.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Callable, Dict, Hashable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]

FRAME_INTERVAL_MS = 16


def monotonic_ms() -> float:
    """Default transport clock in milliseconds."""
    return time.monotonic() * 1000.0


class TickScheduler(Protocol):
    def schedule_tick(self, callback: TickCallback) -> Hashable:
        """Run ``callback(now_ms)`` once on the next frame; return a handle."""

    def cancel_tick(self, handle: Hashable) -> None:
        """Drop a pending callback; unknown or fired handles are ignored."""


class ManualTickScheduler:
    """Scheduler driven by explicit ``fire(now)`` calls.

    Used by tests and by anything that wants to simulate frames without a
    real clock.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, TickCallback] = {}
        self._ids = itertools.count(1)
        self.scheduled_total = 0
        self.cancelled_total = 0

    def schedule_tick(self, callback: TickCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        self.scheduled_total += 1
        return handle

    def cancel_tick(self, handle: Hashable) -> None:
        if self._pending.pop(handle, None) is not None:  # type: ignore[arg-type]
            self.cancelled_total += 1

    @property
    def pending(self) -> int:
        return len(self._pending)

    def fire(self, now: float) -> int:
        """Run callbacks pending at call time; returns how many ran."""
        batch = list(self._pending.items())
        self._pending.clear()
        for _handle, callback in batch:
            callback(now)
        return len(batch)


class LoopTickScheduler:
    """Blocking frame loop for headless playback (CLI ``play``)."""

    def __init__(
        self,
        interval_ms: float = FRAME_INTERVAL_MS,
        clock: Callable[[], float] = monotonic_ms,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval_ms = max(1.0, float(interval_ms))
        self._clock = clock
        self._sleep = sleep
        self._inner = ManualTickScheduler()

    def schedule_tick(self, callback: TickCallback) -> int:
        return self._inner.schedule_tick(callback)

    def cancel_tick(self, handle: Hashable) -> None:
        self._inner.cancel_tick(handle)

    @property
    def pending(self) -> int:
        return self._inner.pending

    def run_until_idle(self, max_ms: Optional[float] = None) -> int:
        """Fire frames until nothing is pending or ``max_ms`` has passed.

        Returns:
            Number of frames fired
        """
        started = self._clock()
        frames = 0
        while self._inner.pending:
            self._sleep(self.interval_ms / 1000.0)
            now = self._clock()
            if max_ms is not None and now - started > max_ms:
                logger.info(f"[scheduler] Frame loop stopped after {max_ms:.0f}ms budget")
                break
            self._inner.fire(now)
            frames += 1
        return frames
