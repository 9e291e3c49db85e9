"""
Session timeline engine for YogaPlan.

Turns a session's ordered card ids into a timed running order and plays it
back with a drift-free transport.

Core Components:
- Items: Exercise / Story / Practical cards with a ``kind`` discriminant
- ItemResolver: merged id lookup across card collections
- Timeline: cumulative start/end offsets, unresolved placeholders
- TransportController: play/pause/seek over a frame scheduler
- ReorderEngine: list-splice moves fed by drag and touch gestures
"""

from .items import (
    DEFAULT_SESSION_ID,
    Exercise,
    Item,
    ItemKind,
    Practical,
    Story,
    YogaSession,
    item_from_dict,
)

from .resolver import (
    ItemResolver,
    ResolvedItem,
    classify,
    is_practical_id,
    is_story_id,
)

from .timeline import (
    DEFAULT_START_TIME,
    TimedSegment,
    Timeline,
    UnresolvedEntry,
    build_timeline,
    format_clock_time,
    format_elapsed,
    parse_start_time,
)

from .events import (
    SessionEventType,
    SessionEvent,
    SessionEventEmitter
)

from .scheduling import (
    LoopTickScheduler,
    ManualTickScheduler,
    TickScheduler,
    monotonic_ms,
)

from .reorder import (
    DragGesture,
    LongPressGesture,
    PaletteTouchGesture,
    ReorderEngine,
    hit_test,
    move_item,
)

from .transport import ReorderPolicy, TransportController, TransportState

__all__ = [
    # Cards
    'DEFAULT_SESSION_ID',
    'Exercise',
    'Item',
    'ItemKind',
    'Practical',
    'Story',
    'YogaSession',
    'item_from_dict',

    # Resolution and timeline
    'ItemResolver',
    'ResolvedItem',
    'classify',
    'is_practical_id',
    'is_story_id',
    'DEFAULT_START_TIME',
    'TimedSegment',
    'Timeline',
    'UnresolvedEntry',
    'build_timeline',
    'format_clock_time',
    'format_elapsed',
    'parse_start_time',

    # Event system
    'SessionEventType',
    'SessionEvent',
    'SessionEventEmitter',

    # Playback
    'LoopTickScheduler',
    'ManualTickScheduler',
    'TickScheduler',
    'monotonic_ms',
    'ReorderPolicy',
    'TransportController',
    'TransportState',

    # Reordering
    'DragGesture',
    'LongPressGesture',
    'PaletteTouchGesture',
    'ReorderEngine',
    'hit_test',
    'move_item',
]
