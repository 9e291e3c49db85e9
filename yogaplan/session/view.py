"""
Session view - the single owner of one displayed session.

Ties the engine together for a player screen or the headless CLI:
the selected session, its running order (through a ``ReorderEngine``),
the resolved timeline and the ``TransportController``. No other component
mutates the order or the elapsed time.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

from ..data.defaults import default_session
from .events import SessionEvent, SessionEventEmitter, SessionEventType
from .items import DEFAULT_SESSION_ID, YogaSession
from .reorder import ReorderEngine
from .scheduling import TickScheduler, monotonic_ms
from .timeline import DEFAULT_START_TIME, TimedSegment, Timeline, build_timeline, parse_start_time
from .transport import ReorderPolicy, TransportController

if TYPE_CHECKING:
    from ..storage.library import CardLibrary

logger = logging.getLogger(__name__)

SCROLL_SYNC_MS = 100


class SegmentStatus(Enum):
    PAST = "past"
    ACTIVE = "active"
    UPCOMING = "upcoming"


class SessionView:
    """One session on screen.

    Args:
        library: Card and session repositories
        scheduler: Frame scheduler for the transport
        clock: Millisecond clock shared with the scheduler
        start_time: ``HH:MM`` for absolute labels, None for elapsed labels
        policy: How playback follows a reorder
        emitter: Shared event bus
    """

    def __init__(
        self,
        library: CardLibrary,
        scheduler: TickScheduler,
        clock: Callable[[], float] = monotonic_ms,
        start_time: Optional[str] = DEFAULT_START_TIME,
        policy: ReorderPolicy = ReorderPolicy.POSITION,
        emitter: Optional[SessionEventEmitter] = None,
    ):
        self.library = library
        self.emitter = emitter or SessionEventEmitter()
        self.policy = policy
        if start_time is not None:
            parse_start_time(start_time)
        self.start_time = start_time
        self.transport = TransportController(scheduler, clock=clock, emitter=self.emitter)
        self.reorder = ReorderEngine(on_commit=self._on_order_commit, emitter=self.emitter)
        self.resolver = library.resolver()
        self.session: YogaSession = default_session()
        self.reorder.replace(self.session.exercises)
        self.timeline: Timeline = self._build()
        self.transport.set_timeline(self.timeline)

    # ===== Session selection =====

    def available_sessions(self) -> List[YogaSession]:
        """Built-in session first, then stored ones."""
        return [default_session(), *self.library.sessions.list()]

    def select_session(self, session_id: str) -> YogaSession:
        """Load a session; unknown ids fall back to the built-in one."""
        session = None
        if session_id != DEFAULT_SESSION_ID:
            session = self.library.sessions.get(session_id)
            if session is None:
                logger.warning(f"[view] Session {session_id!r} not found, using default")
        self.session = session or default_session()
        self.reorder.replace(self.session.exercises)
        self.timeline = self._build()
        self.transport.set_timeline(self.timeline)
        logger.info(f"[view] Selected session {self.session.id!r} ({len(self.reorder)} cards)")
        self.emitter.emit(SessionEvent(
            SessionEventType.SESSION_CHANGE,
            data={"session_id": self.session.id},
        ))
        return self.session

    @property
    def is_default_session(self) -> bool:
        return self.session.is_default

    @property
    def order(self) -> List[str]:
        return self.reorder.order

    # ===== Rebuilds =====

    def set_start_time(self, text: Optional[str]) -> None:
        """Change the clock origin; playback position is kept.

        Raises:
            ValueError: for malformed ``HH:MM``
        """
        if text is not None:
            parse_start_time(text)
        self.start_time = text
        self._rebuild()

    def reload_library(self) -> None:
        """Cards were added, edited or removed elsewhere."""
        self.resolver = self.library.resolver()
        self._rebuild()

    def move(self, from_index: int, to_index: int) -> bool:
        """Reorder; the commit hook persists and retargets the transport."""
        return self.reorder.move(from_index, to_index)

    def _build(self) -> Timeline:
        return build_timeline(self.reorder.order, self.resolver, self.start_time)

    def _rebuild(self) -> None:
        self.timeline = self._build()
        self.transport.apply_timeline(self.timeline, ReorderPolicy.POSITION)

    def _on_order_commit(self, order: List[str]) -> None:
        self._persist_order(order)
        change = self.reorder.last_change or {}
        moved = None
        if change.get("operation") == "move":
            moved = (change["from_index"], change["to_index"])
        self.timeline = self._build()
        policy = self.policy if moved is not None else ReorderPolicy.POSITION
        self.transport.apply_timeline(self.timeline, policy, moved=moved)

    def _persist_order(self, order: List[str]) -> None:
        self.session.exercises = list(order)
        if self.session.is_default:
            logger.debug("[view] Default session reordered in memory only")
            return
        result = self.library.sessions.reorder(self.session.id, order)
        if not result.success:
            logger.error(f"[view] Could not persist order for {self.session.id!r}: {result.errors}")

    # ===== Render helpers =====

    def status_of(self, segment: TimedSegment) -> SegmentStatus:
        active = self.transport.active_segment_index()
        if active is not None and segment.unique_index == active:
            return SegmentStatus.ACTIVE
        if active is not None and segment.unique_index < active:
            return SegmentStatus.PAST
        return SegmentStatus.UPCOMING


class ScrollSync:
    """Throttled follow-scroll; reads transport progress, never writes it."""

    def __init__(self, interval_ms: float = SCROLL_SYNC_MS):
        self.interval_ms = interval_ms
        self._last: Optional[float] = None

    def due(self, now: float) -> bool:
        if self._last is None or now - self._last >= self.interval_ms:
            self._last = now
            return True
        return False

    def reset(self) -> None:
        self._last = None

    @staticmethod
    def scroll_target(
        progress: float,
        container_top: float,
        container_height: float,
        viewport_height: float,
    ) -> float:
        """Scroll offset that keeps the list moving with playback.

        Starts with the list top 30% down the viewport and ends with its
        bottom on the viewport bottom.
        """
        start = max(0.0, container_top - viewport_height * 0.3)
        end = container_top + container_height - viewport_height
        span = max(0.0, end - start)
        return max(0.0, start + span * min(max(progress, 0.0), 1.0))
