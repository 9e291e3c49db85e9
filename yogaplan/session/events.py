"""Session event system for broadcasting transport and order changes.

Provides event types, event data structures, and an event emitter for
decoupled communication between the engine and UI/logging/CLI consumers.

Usage:
    emitter = SessionEventEmitter()
    emitter.subscribe(SessionEventType.SEGMENT_CHANGE, lambda evt: print(evt.data))
    emitter.emit(SessionEvent(SessionEventType.SEGMENT_CHANGE, data={"index": 0}))
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Any, Optional
import logging
import time


class SessionEventType(Enum):
    """Types of events raised by the timeline engine."""

    # Transport lifecycle
    TRANSPORT_START = auto()     # Playback started or resumed
    TRANSPORT_PAUSE = auto()     # Playback paused
    TRANSPORT_RESET = auto()     # Elapsed time back to zero
    TRANSPORT_SEEK = auto()      # Jumped to a segment start
    TRANSPORT_COMPLETE = auto()  # Reached the end of the timeline

    # Per-frame progress (for UI updates)
    TRANSPORT_PROGRESS = auto()

    # Active segment moved to another card
    SEGMENT_CHANGE = auto()

    # Structure
    TIMELINE_CHANGE = auto()     # Timeline rebuilt (order, cards or start time)
    ORDER_CHANGE = auto()        # Running order mutated
    SESSION_CHANGE = auto()      # Another session selected


@dataclass
class SessionEvent:
    """Represents a session event with optional payload data.

    Attributes:
        event_type: Type of event that occurred
        data: Optional dictionary with event-specific data
        timestamp: Optional timestamp (set by emitter when missing)
    """
    event_type: SessionEventType
    data: Optional[dict[str, Any]] = None
    timestamp: Optional[float] = None

    def __str__(self) -> str:
        if self.data:
            data_str = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"SessionEvent({self.event_type.name}, {data_str})"
        return f"SessionEvent({self.event_type.name})"


class SessionEventEmitter:
    """Event bus for engine state changes.

    Allows components to subscribe to specific event types and receive
    notifications when those events occur. Supports multiple subscribers
    per event type; a failing subscriber is logged and does not stop the
    others.
    """

    def __init__(self):
        self._subscribers: dict[SessionEventType, list[Callable[[SessionEvent], None]]] = {}
        self.logger = logging.getLogger(__name__)

    def subscribe(
        self,
        event_type: SessionEventType,
        callback: Callable[[SessionEvent], None]
    ) -> None:
        """Subscribe to a specific event type.

        Args:
            event_type: Type of event to listen for
            callback: Function to call when event occurs (receives SessionEvent)
        """
        subscribers = self._subscribers.setdefault(event_type, [])
        if callback not in subscribers:
            subscribers.append(callback)
            self.logger.debug(f"[events] Subscribed to {event_type.name} (total={len(subscribers)})")

    def unsubscribe(
        self,
        event_type: SessionEventType,
        callback: Callable[[SessionEvent], None]
    ) -> None:
        subscribers = self._subscribers.get(event_type)
        if subscribers and callback in subscribers:
            subscribers.remove(callback)
            self.logger.debug(f"[events] Unsubscribed from {event_type.name} (total={len(subscribers)})")

    def emit(self, event: SessionEvent) -> None:
        """Emit an event to all subscribed callbacks."""
        if event.timestamp is None:
            event.timestamp = time.time()

        if event.event_type is not SessionEventType.TRANSPORT_PROGRESS:
            self.logger.debug(f"[events] Emitting: {event}")

        for callback in list(self._subscribers.get(event.event_type, ())):
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"[events] Callback error for {event.event_type.name}: {e}", exc_info=True)

    def clear_all(self) -> None:
        """Remove all event subscribers (useful for testing/cleanup)."""
        self._subscribers.clear()
        self.logger.debug("[events] Cleared all subscribers")
