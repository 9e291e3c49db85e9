"""
Timeline Builder - turns a session's id order into timed segments.

Each resolved card becomes a ``TimedSegment`` with a cumulative start/end
offset. Ids that do not resolve become ``UnresolvedEntry`` placeholders that
keep their position in the list but do not advance the clock.

Two display variants share one algorithm:
- relative: offsets start at 0, labels are ``MM:SS`` elapsed
- absolute: offsets start at a configured ``HH:MM`` time of day, labels are
  clock times with a ``(+N)`` day marker once midnight is crossed
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from .items import Item, ItemKind
from .resolver import ItemResolver, classify

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000
MINUTES_PER_DAY = 24 * 60
DEFAULT_START_TIME = "13:00"


def parse_start_time(text: str) -> int:
    """Parse ``HH:MM`` into minutes after midnight.

    Raises:
        ValueError: if the text is not a valid 24h time
    """
    if not isinstance(text, str):
        raise ValueError(f"Start time must be a string, got {type(text).__name__}")
    parts = text.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Start time must look like HH:MM, got {text!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Start time out of range: {text!r}")
    return hours * 60 + minutes


def format_clock_time(total_minutes: float) -> str:
    """Format minutes since the start day as ``HH:MM`` with a day marker.

    >>> format_clock_time(13 * 60 + 12)
    '13:12'
    >>> format_clock_time(24 * 60 + 30)
    '00:30 (+1)'
    """
    whole = int(math.floor(total_minutes))
    days = whole // MINUTES_PER_DAY
    hours = (whole % MINUTES_PER_DAY) // 60
    minutes = whole % 60
    label = f"{hours:02d}:{minutes:02d}"
    if days > 0:
        label += f" (+{days})"
    return label


def format_elapsed(ms: float) -> str:
    """``MM:SS`` for an elapsed duration; minutes do not wrap at 60."""
    total_seconds = max(0, int(ms // 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def minutes_to_ms(minutes: float) -> int:
    return int(round(minutes * MS_PER_MINUTE))


@dataclass(frozen=True)
class TimedSegment:
    """A resolved card placed on the timeline.

    Attributes:
        item: The card
        kind: Card kind
        unique_index: Index among timed segments (seek target)
        position: Index in the session's id order
        start_ms / end_ms / duration_ms: Offsets relative to session start
        clock_start / clock_end: Minutes including the configured start time
    """
    item: Item
    kind: ItemKind
    unique_index: int
    position: int
    start_ms: int
    end_ms: int
    duration_ms: int
    clock_start: float
    clock_end: float

    @property
    def item_id(self) -> str:
        return self.item.id

    def contains(self, elapsed_ms: float) -> bool:
        return self.start_ms <= elapsed_ms < self.end_ms


@dataclass(frozen=True)
class UnresolvedEntry:
    """Placeholder for an id missing from every collection."""
    item_id: str
    position: int
    kind: ItemKind

    @property
    def label(self) -> str:
        return f"Missing card (ID: {self.item_id})"


TimelineEntry = Union[TimedSegment, UnresolvedEntry]


@dataclass(frozen=True)
class Timeline:
    """Immutable projection of one session order; rebuilt, never edited."""
    entries: Tuple[TimelineEntry, ...]
    segments: Tuple[TimedSegment, ...]
    start_minutes: Optional[int] = None
    total_minutes: float = 0.0

    @property
    def is_absolute(self) -> bool:
        return self.start_minutes is not None

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def total_duration_ms(self) -> int:
        return self.segments[-1].end_ms if self.segments else 0

    @property
    def unresolved(self) -> List[UnresolvedEntry]:
        return [e for e in self.entries if isinstance(e, UnresolvedEntry)]

    @property
    def end_minutes(self) -> float:
        return (self.start_minutes or 0) + self.total_minutes

    @property
    def end_label(self) -> str:
        """Session end; falls back to the start time for an empty order."""
        if self.is_absolute:
            return format_clock_time(self.end_minutes)
        return format_elapsed(self.total_duration_ms)

    def label_range(self, segment: TimedSegment) -> Tuple[str, str]:
        if self.is_absolute:
            return format_clock_time(segment.clock_start), format_clock_time(segment.clock_end)
        return format_elapsed(segment.start_ms), format_elapsed(segment.end_ms)

    def segment_at(self, elapsed_ms: float) -> Optional[int]:
        """Index of the segment whose ``[start, end)`` holds ``elapsed_ms``.

        Once elapsed reaches the total the last segment stays active.
        """
        if not self.segments:
            return None
        if elapsed_ms >= self.total_duration_ms:
            return len(self.segments) - 1
        for segment in self.segments:
            if segment.contains(elapsed_ms):
                return segment.unique_index
        return 0

    def segment_for_position(self, position: int) -> Optional[TimedSegment]:
        for segment in self.segments:
            if segment.position == position:
                return segment
        return None


def build_timeline(
    order: Iterable[str],
    resolver: ItemResolver,
    start_time: Optional[str] = None,
) -> Timeline:
    """Resolve ``order`` and lay the cards out back to back.

    Args:
        order: Card ids in running order
        resolver: Lookup built from the current collections
        start_time: ``HH:MM`` for the absolute variant, None for relative

    Returns:
        A fresh ``Timeline``; unresolved ids appear as placeholders.

    Raises:
        ValueError: if ``start_time`` is malformed
    """
    start_minutes = parse_start_time(start_time) if start_time is not None else None
    initial = float(start_minutes or 0)

    entries: List[TimelineEntry] = []
    segments: List[TimedSegment] = []
    offset_ms = 0
    offset_minutes = initial

    for position, item_id in enumerate(order):
        resolved = resolver.resolve(item_id)
        if resolved is None:
            logger.warning(f"[timeline] Unresolved card id {item_id!r} at position {position + 1}")
            entries.append(UnresolvedEntry(item_id=str(item_id), position=position, kind=classify(item_id)))
            continue

        minutes = float(resolved.item.duration_minutes)
        if not math.isfinite(minutes):
            logger.warning(f"[timeline] Card {item_id!r} has no usable duration ({minutes}); counted as 0")
            minutes = 0.0
        minutes = max(0.0, minutes)
        duration_ms = minutes_to_ms(minutes)
        segment = TimedSegment(
            item=resolved.item,
            kind=resolved.kind,
            unique_index=len(segments),
            position=position,
            start_ms=offset_ms,
            end_ms=offset_ms + duration_ms,
            duration_ms=duration_ms,
            clock_start=offset_minutes,
            clock_end=offset_minutes + minutes,
        )
        segments.append(segment)
        entries.append(segment)
        offset_ms = segment.end_ms
        offset_minutes = segment.clock_end

    return Timeline(
        entries=tuple(entries),
        segments=tuple(segments),
        start_minutes=start_minutes,
        total_minutes=offset_minutes - initial,
    )
