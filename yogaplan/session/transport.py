"""
Transport Controller - play/pause/seek over a built timeline.

Elapsed time is always recomputed as ``now - anchor`` rather than summed
from per-frame deltas, so variable frame intervals never accumulate drift.

The frame loop is a chain of single-shot callbacks obtained from a
``TickScheduler``. Every operation that stops or redirects playback cancels
the pending callback and bumps a generation counter; a callback that still
fires with an old generation is ignored.

States:
    IDLE       elapsed == 0, not running
    RUNNING    frame loop active
    PAUSED     elapsed frozen somewhere inside the timeline
    COMPLETED  elapsed == total, not running
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Hashable, Optional, Tuple

from ..logging_utils import TICK_TRACE_TAG, BurstSampler
from .events import SessionEvent, SessionEventEmitter, SessionEventType
from .reorder import remap_position
from .scheduling import TickScheduler, monotonic_ms
from .timeline import Timeline, TimedSegment, format_elapsed

logger = logging.getLogger(__name__)


class TransportState(Enum):
    IDLE = auto()
    RUNNING = auto()
    PAUSED = auto()
    COMPLETED = auto()


class ReorderPolicy(str, Enum):
    """What playback follows when the order changes mid-session."""
    POSITION = "position"  # keep elapsed time; the card under it may change
    IDENTITY = "identity"  # keep the active card and the offset inside it


_EMPTY_TIMELINE = Timeline(entries=(), segments=())


class TransportController:
    """Owns elapsed time and running state for one session view.

    Args:
        scheduler: Frame scheduler (Qt timer, manual, headless loop)
        clock: Millisecond clock shared with the scheduler
        emitter: Event bus; a private one is created when omitted
        timeline: Initial timeline (empty by default)
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        clock: Callable[[], float] = monotonic_ms,
        emitter: Optional[SessionEventEmitter] = None,
        timeline: Optional[Timeline] = None,
    ):
        self.scheduler = scheduler
        self.clock = clock
        self.emitter = emitter or SessionEventEmitter()

        self._timeline: Timeline = timeline or _EMPTY_TIMELINE
        self._elapsed_ms: float = 0.0
        self._running = False
        self._anchor: float = clock()
        self._handle: Optional[Hashable] = None
        self._generation = 0
        self._cursor: Optional[int] = None
        self._last_active: Optional[int] = self.active_segment_index()
        self._frame_sampler = BurstSampler(interval_s=5.0)

    # ===== Queries =====

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    @property
    def total_duration_ms(self) -> int:
        return self._timeline.total_duration_ms

    @property
    def remaining_ms(self) -> float:
        return max(0.0, self.total_duration_ms - self._elapsed_ms)

    @property
    def progress(self) -> float:
        """Fraction of the timeline played, 0..1."""
        total = self.total_duration_ms
        if total <= 0:
            return 0.0
        return min(self._elapsed_ms / total, 1.0)

    def is_running(self) -> bool:
        return self._running

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    @property
    def state(self) -> TransportState:
        if self._running:
            return TransportState.RUNNING
        if self._elapsed_ms <= 0:
            return TransportState.IDLE
        if self._elapsed_ms >= self.total_duration_ms:
            return TransportState.COMPLETED
        return TransportState.PAUSED

    def active_segment_index(self) -> Optional[int]:
        """Segment holding the current position.

        A segment chosen by a seek stays active while elapsed still sits on
        its start, so zero-width story segments can be stepped onto.
        """
        segments = self._timeline.segments
        if (
            self._cursor is not None
            and self._cursor < len(segments)
            and segments[self._cursor].start_ms == self._elapsed_ms
        ):
            return self._cursor
        return self._timeline.segment_at(self._elapsed_ms)

    def active_segment(self) -> Optional[TimedSegment]:
        index = self.active_segment_index()
        return None if index is None else self._timeline.segments[index]

    # ===== Transport operations =====

    def start(self) -> bool:
        """Start or resume playback; a completed timeline restarts from 0."""
        if self._running:
            logger.warning("[transport] Cannot start: already running")
            return False
        if self._elapsed_ms >= self.total_duration_ms:
            self._elapsed_ms = 0.0
            self._cursor = None
        self._invalidate_tick()
        self._anchor = self.clock() - self._elapsed_ms
        self._running = True
        logger.info(
            f"[transport] Started at {format_elapsed(self._elapsed_ms)} of {format_elapsed(self.total_duration_ms)}"
        )
        self._emit(SessionEventType.TRANSPORT_START)
        self._sync_active()
        self._schedule_tick()
        return True

    def pause(self) -> bool:
        if not self._running:
            logger.debug("[transport] Pause ignored: not running")
            return False
        self._invalidate_tick()
        self._running = False
        logger.info(f"[transport] Paused at {format_elapsed(self._elapsed_ms)}")
        self._emit(SessionEventType.TRANSPORT_PAUSE)
        return True

    def toggle(self) -> bool:
        """Start/Pause button; returns True when now running."""
        if self._running:
            self.pause()
        else:
            self.start()
        return self._running

    def reset(self) -> None:
        self._invalidate_tick()
        self._running = False
        self._elapsed_ms = 0.0
        self._cursor = None
        # Re-anchor so an immediate start() lines up with zero.
        self._anchor = self.clock()
        logger.info("[transport] Reset")
        self._emit(SessionEventType.TRANSPORT_RESET)
        self._sync_active()

    def tick(self, now: float) -> None:
        """Advance elapsed time to ``now``; ignored unless running."""
        if not self._running:
            logger.debug(f"{TICK_TRACE_TAG} ignored at {now:.1f} (not running)")
            return

        new_elapsed = max(self._elapsed_ms, now - self._anchor)
        total = self.total_duration_ms
        if new_elapsed >= total:
            self._elapsed_ms = float(total)
            self._running = False
            self._invalidate_tick()
            self._emit(SessionEventType.TRANSPORT_PROGRESS)
            self._sync_active()
            logger.info(f"[transport] Completed at {format_elapsed(total)}")
            self._emit(SessionEventType.TRANSPORT_COMPLETE)
            return

        self._elapsed_ms = new_elapsed
        logger.debug(f"{TICK_TRACE_TAG} elapsed={new_elapsed:.1f}ms")
        frames = self._frame_sampler.record()
        if frames:
            logger.debug(f"[transport] {frames} frames, at {format_elapsed(new_elapsed)}")
        self._emit(SessionEventType.TRANSPORT_PROGRESS)
        self._sync_active()
        if self._handle is None:
            self._schedule_tick()

    def seek_to_segment(self, index: int) -> bool:
        """Jump to the start of segment ``index``; running state is kept."""
        segments = self._timeline.segments
        if not 0 <= index < len(segments):
            logger.warning(f"[transport] Seek ignored: segment {index} out of range ({len(segments)} segments)")
            return False
        self._invalidate_tick()
        self._elapsed_ms = float(segments[index].start_ms)
        self._anchor = self.clock() - self._elapsed_ms
        self._cursor = index
        logger.info(f"[transport] Seek to segment {index} ({segments[index].item.title!r})")
        self._emit(SessionEventType.TRANSPORT_SEEK, index=index)
        self._sync_active()
        if self._running:
            self._schedule_tick()
        return True

    def previous(self) -> bool:
        current = self.active_segment_index()
        if current is None:
            return False
        return self.seek_to_segment(max(0, current - 1))

    def next(self) -> bool:
        current = self.active_segment_index()
        if current is None:
            return False
        return self.seek_to_segment(min(len(self._timeline.segments) - 1, current + 1))

    # ===== Timeline changes =====

    def set_timeline(self, timeline: Timeline) -> None:
        """Session change: swap the timeline and return to IDLE."""
        self._invalidate_tick()
        self._timeline = timeline
        self._running = False
        self._elapsed_ms = 0.0
        self._cursor = None
        self._anchor = self.clock()
        self._emit(SessionEventType.TIMELINE_CHANGE)
        self._sync_active()

    def apply_timeline(
        self,
        timeline: Timeline,
        policy: ReorderPolicy = ReorderPolicy.POSITION,
        *,
        moved: Optional[Tuple[int, int]] = None,
    ) -> None:
        """Swap in a rebuilt timeline while keeping playback alive.

        Args:
            timeline: The recomputed timeline
            policy: POSITION keeps elapsed time, IDENTITY follows the card
                that was active before the change
            moved: ``(from_index, to_index)`` of the reorder, needed by
                IDENTITY to locate the card again
        """
        before = self.active_segment()
        offset = self._elapsed_ms - before.start_ms if before else 0.0

        self._timeline = timeline
        self._cursor = None
        elapsed = self._elapsed_ms

        if policy is ReorderPolicy.IDENTITY and before is not None:
            position = before.position
            if moved is not None:
                position = remap_position(position, *moved)
            target = timeline.segment_for_position(position)
            if target is not None and target.item_id == before.item_id:
                elapsed = target.start_ms + min(offset, target.duration_ms)
                if offset == 0:
                    self._cursor = target.unique_index

        self._elapsed_ms = float(min(elapsed, timeline.total_duration_ms))
        if self._running:
            self._invalidate_tick()
            self._anchor = self.clock() - self._elapsed_ms
            self._schedule_tick()
        logger.debug(
            f"[transport] Timeline replaced ({policy.value}); elapsed={format_elapsed(self._elapsed_ms)}"
        )
        self._emit(SessionEventType.TIMELINE_CHANGE)
        self._sync_active()

    # ===== Internals =====

    def _schedule_tick(self) -> None:
        generation = self._generation
        self._handle = self.scheduler.schedule_tick(lambda now: self._on_frame(generation, now))

    def _invalidate_tick(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel_tick(self._handle)
            self._handle = None
        self._generation += 1

    def _on_frame(self, generation: int, now: float) -> None:
        if generation != self._generation:
            logger.debug(f"{TICK_TRACE_TAG} stale frame dropped (gen {generation} != {self._generation})")
            return
        self._handle = None
        self.tick(now)

    def _sync_active(self) -> None:
        index = self.active_segment_index()
        if index == self._last_active:
            return
        self._last_active = index
        segment = None if index is None else self._timeline.segments[index]
        self.emitter.emit(SessionEvent(
            SessionEventType.SEGMENT_CHANGE,
            data={
                "index": index,
                "item_id": segment.item_id if segment else None,
                "position": segment.position if segment else None,
            },
        ))

    def _emit(self, event_type: SessionEventType, **extra) -> None:
        self.emitter.emit(SessionEvent(
            event_type,
            data={
                "elapsed_ms": self._elapsed_ms,
                "total_ms": self.total_duration_ms,
                "running": self._running,
                **extra,
            },
        ))
