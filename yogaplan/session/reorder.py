"""
Reorder Engine - the only code that mutates a session's running order.

``move_item`` is the single list-splice primitive. Pointer drag-and-drop
and touch long-press-drag are thin gesture adapters that work out a
``(from_index, to_index)`` pair and hand it to ``ReorderEngine.move``.
The card palette uses the same engine for inserts.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .events import SessionEvent, SessionEventEmitter, SessionEventType

logger = logging.getLogger(__name__)

LONG_PRESS_MS = 200
HAPTIC_PULSE_MS = 50

ItemBounds = Tuple[float, float]


def move_item(order: Sequence[str], from_index: int, to_index: int) -> List[str]:
    """Remove the id at ``from_index`` and reinsert it at ``to_index``.

    Splice semantics, not swap: ``move_item(['a','b','c'], 0, 2)`` gives
    ``['b','c','a']``. Self-moves and out-of-bounds indices return an
    unchanged copy.
    """
    result = list(order)
    size = len(result)
    if from_index == to_index:
        return result
    if not (0 <= from_index < size and 0 <= to_index < size):
        return result
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def insert_item(order: Sequence[str], item_id: str, index: Optional[int] = None) -> List[str]:
    """Insert ``item_id`` at ``index``; append when index is None or out of range."""
    result = list(order)
    if index is None or not (0 <= index <= len(result)):
        result.append(item_id)
    else:
        result.insert(index, item_id)
    return result


def remove_item(order: Sequence[str], index: int) -> List[str]:
    result = list(order)
    if 0 <= index < len(result):
        del result[index]
    return result


def remap_position(position: int, from_index: int, to_index: int) -> int:
    """Where the entry at ``position`` ends up after ``move_item(from, to)``."""
    if position == from_index:
        return to_index
    if from_index < to_index and from_index < position <= to_index:
        return position - 1
    if to_index < from_index and to_index <= position < from_index:
        return position + 1
    return position


def hit_test(y: float, bounds: Sequence[ItemBounds]) -> Optional[int]:
    """Index of the rendered item whose vertical span holds ``y``.

    Bounds are ``(top, bottom)`` pairs in the same coordinate space as ``y``.
    Overlapping spans resolve to the last match.
    """
    hovered = None
    for index, (top, bottom) in enumerate(bounds):
        if top <= y <= bottom:
            hovered = index
    return hovered


class ReorderEngine:
    """Owns one running order and applies every mutation to it.

    ``on_commit`` receives the new order after each effective change; the
    session view uses it to persist stored sessions.
    """

    def __init__(
        self,
        order: Iterable[str] = (),
        on_commit: Optional[Callable[[List[str]], None]] = None,
        emitter: Optional[SessionEventEmitter] = None,
    ):
        self._order: List[str] = list(order)
        self.on_commit = on_commit
        self.last_change: Optional[dict] = None
        self.emitter = emitter or SessionEventEmitter()

    @property
    def order(self) -> List[str]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def replace(self, order: Iterable[str]) -> None:
        """Load another order without persisting it (session switch)."""
        self._order = list(order)

    def move(self, from_index: int, to_index: int) -> bool:
        updated = move_item(self._order, from_index, to_index)
        if updated == self._order:
            logger.debug(f"[reorder] Ignored move {from_index} -> {to_index} (len={len(self._order)})")
            return False
        self._order = updated
        logger.info(f"[reorder] Moved position {from_index + 1} to {to_index + 1}")
        self._commit("move", from_index=from_index, to_index=to_index)
        return True

    def insert(self, item_id: str, index: Optional[int] = None) -> int:
        """Insert one id; returns the index it landed on."""
        if index is None or not (0 <= index <= len(self._order)):
            index = len(self._order)
        self._order = insert_item(self._order, item_id, index)
        self._commit("insert", item_id=item_id, index=index)
        return index

    def insert_many(self, item_ids: Iterable[str], index: Optional[int] = None) -> int:
        ids = list(item_ids)
        if not ids:
            return 0
        if index is None or not (0 <= index <= len(self._order)):
            index = len(self._order)
        self._order[index:index] = ids
        self._commit("insert", item_ids=ids, index=index)
        return len(ids)

    def remove(self, index: int) -> Optional[str]:
        if not (0 <= index < len(self._order)):
            return None
        removed = self._order[index]
        self._order = remove_item(self._order, index)
        self._commit("remove", item_id=removed, index=index)
        return removed

    def _commit(self, operation: str, **data) -> None:
        self.last_change = {"operation": operation, **data}
        self.emitter.emit(SessionEvent(
            SessionEventType.ORDER_CHANGE,
            data={"operation": operation, "order": list(self._order), **data},
        ))
        if self.on_commit is not None:
            self.on_commit(list(self._order))


class DragGesture:
    """Pointer drag-and-drop adapter.

    The source index is captured on drag start; the drop target index
    produces one ``move``. Cards dragged in from the palette are inserted.
    """

    def __init__(self, engine: ReorderEngine):
        self.engine = engine
        self.source: Optional[int] = None
        self.indicator: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.source is not None

    def begin(self, index: int) -> None:
        self.source = index
        self.indicator = None

    def over(self, index: Optional[int]) -> None:
        if self.source is not None and index is not None and index != self.source:
            self.indicator = index

    def drop(self, index: int) -> bool:
        source = self.source
        self.cancel()
        if source is None:
            return False
        return self.engine.move(source, index)

    def drop_card(self, item_id: str, index: Optional[int] = None) -> int:
        """Palette card released on the list: insert at ``index`` or append."""
        self.cancel()
        return self.engine.insert(item_id, index)

    def cancel(self) -> None:
        self.source = None
        self.indicator = None


class _LongPress:
    """Shared long-press bookkeeping for the touch adapters."""

    def __init__(
        self,
        engine: ReorderEngine,
        threshold_ms: float = LONG_PRESS_MS,
        haptic: Optional[Callable[[int], None]] = None,
    ):
        self.engine = engine
        self.threshold_ms = threshold_ms
        self.haptic = haptic
        self._clear()

    def _clear(self) -> None:
        self._pressed_at: Optional[float] = None
        self.armed = False
        self.cancelled = False
        self.indicator: Optional[int] = None

    @property
    def pressed(self) -> bool:
        return self._pressed_at is not None

    def arm(self, now: float) -> bool:
        """Hold timer expired: switch into drag mode."""
        if self._pressed_at is None or self.cancelled or self.armed:
            return False
        if now - self._pressed_at < self.threshold_ms:
            return False
        self.armed = True
        if self.haptic is not None:
            self.haptic(HAPTIC_PULSE_MS)
        logger.debug("[reorder] Long-press armed drag mode")
        return True


class LongPressGesture(_LongPress):
    """Touch reorder inside the ordered list."""

    def __init__(self, engine, threshold_ms=LONG_PRESS_MS, haptic=None):
        super().__init__(engine, threshold_ms, haptic)
        self.source: Optional[int] = None

    def press(self, index: int, now: float) -> None:
        self._clear()
        self.source = index
        self._pressed_at = now

    def move(self, y: float, bounds: Sequence[ItemBounds]) -> Optional[int]:
        """Touch moved; returns the current drop indicator."""
        if self.source is None:
            return None
        if not self.armed:
            # Finger moved before the hold completed: treat as a scroll.
            self.cancelled = True
            return None
        hovered = hit_test(y, bounds)
        if hovered is not None and hovered != self.source:
            self.indicator = hovered
        return self.indicator

    def cancel(self) -> None:
        self._clear()
        self.source = None

    def release(self, now: float) -> bool:
        source, indicator, armed = self.source, self.indicator, self.armed
        self._clear()
        self.source = None
        if not armed or source is None or indicator is None or indicator == source:
            return False
        return self.engine.move(source, indicator)


class PaletteTouchGesture(_LongPress):
    """Touch input on the card palette.

    A quick tap appends the card. A long press arms a drag whose release
    inserts the card at the drop indicator, or appends without one.
    """

    def __init__(self, engine, threshold_ms=LONG_PRESS_MS, haptic=None):
        super().__init__(engine, threshold_ms, haptic)
        self.item_id: Optional[str] = None

    def press(self, item_id: str, now: float) -> None:
        self._clear()
        self.item_id = item_id
        self._pressed_at = now

    def move(self, y: float, bounds: Sequence[ItemBounds]) -> Optional[int]:
        if self.item_id is None:
            return None
        if not self.armed:
            self.cancelled = True
            return None
        if not bounds:
            self.indicator = 0
            return self.indicator
        hovered = hit_test(y, bounds)
        if hovered is not None:
            self.indicator = hovered
        return self.indicator

    def cancel(self) -> None:
        self._clear()
        self.item_id = None

    def release(self, now: float) -> Optional[int]:
        """Returns the index the card was inserted at, or None."""
        item_id, indicator, armed = self.item_id, self.indicator, self.armed
        quick_tap = (
            not armed
            and not self.cancelled
            and self._pressed_at is not None
            and now - self._pressed_at < self.threshold_ms
        )
        self._clear()
        self.item_id = None
        if item_id is None:
            return None
        if armed:
            return self.engine.insert(item_id, indicator)
        if quick_tap:
            return self.engine.insert(item_id)
        return None
