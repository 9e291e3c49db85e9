"""
Card data models - the schedulable units of a yoga session.

Three card kinds share one ordered id list inside a session:
- Exercise: a pose or flow with a mandatory positive duration
- Story: a narrative text block, usually a zero-length pause
- Practical: a short action prompt ("drink some water")

Each kind carries a ``kind`` discriminant so the resolver and timeline
can switch on it instead of probing for fields.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ItemKind(str, Enum):
    """Discriminant shared by every card."""
    EXERCISE = "exercise"
    STORY = "story"
    PRACTICAL = "practical"


DEFAULT_SESSION_ID = "default"


def _as_minutes(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return None
    return minutes if math.isfinite(minutes) else None


def _as_tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


@dataclass
class Exercise:
    """
    A timed exercise card.

    Attributes:
        id: Bare numeric string ("1", "2", ...)
        title: Display title
        description: What to do
        category: Exercise category (e.g. "Stehübungen")
        tags: Free-form tags, order preserved
        duration_minutes: Strictly positive duration
        icon: Optional emoji or short label
    """
    id: str
    title: str
    description: str
    category: str
    tags: List[str] = field(default_factory=list)
    duration_minutes: float = 0.0
    icon: str = ""

    @property
    def kind(self) -> ItemKind:
        return ItemKind.EXERCISE

    @property
    def content(self) -> str:
        return self.description

    @property
    def category_label(self) -> Optional[str]:
        return self.category or None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "duration_minutes": self.duration_minutes,
        }
        if self.icon:
            data["icon"] = self.icon
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Exercise:
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            tags=_as_tags(data.get("tags")),
            duration_minutes=_as_minutes(data.get("duration_minutes")) or 0.0,
            icon=str(data.get("icon") or ""),
        )


@dataclass
class Story:
    """A narrative block read aloud between exercises.

    ``time`` is optional; a story without it is a pure pause that does not
    advance the clock.
    """
    id: str
    title: str
    text: str
    tags: List[str] = field(default_factory=list)
    time: Optional[float] = None
    mood: str = ""

    @property
    def kind(self) -> ItemKind:
        return ItemKind.STORY

    @property
    def duration_minutes(self) -> float:
        return self.time or 0.0

    @property
    def content(self) -> str:
        return self.text

    @property
    def category_label(self) -> Optional[str]:
        return self.mood or None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "tags": list(self.tags),
            "time": self.time,
            "mood": self.mood,
            "type": ItemKind.STORY.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Story:
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            text=str(data.get("text", "")),
            tags=_as_tags(data.get("tags")),
            time=_as_minutes(data.get("time")),
            mood=str(data.get("mood") or ""),
        )


@dataclass
class Practical:
    """An action prompt; like a story it may carry a ``time``."""
    id: str
    title: str
    instruction: str
    tags: List[str] = field(default_factory=list)
    time: Optional[float] = None

    @property
    def kind(self) -> ItemKind:
        return ItemKind.PRACTICAL

    @property
    def duration_minutes(self) -> float:
        return self.time or 0.0

    @property
    def content(self) -> str:
        return self.instruction

    @property
    def category_label(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "instruction": self.instruction,
            "tags": list(self.tags),
            "time": self.time,
            "type": ItemKind.PRACTICAL.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Practical:
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            instruction=str(data.get("instruction", "")),
            tags=_as_tags(data.get("tags")),
            time=_as_minutes(data.get("time")),
        )


Item = Union[Exercise, Story, Practical]

_ITEM_TYPES = {
    ItemKind.EXERCISE: Exercise,
    ItemKind.STORY: Story,
    ItemKind.PRACTICAL: Practical,
}


def item_from_dict(kind: ItemKind | str, data: Dict[str, Any]) -> Item:
    """Build the card variant matching ``kind``."""
    return _ITEM_TYPES[ItemKind(kind)].from_dict(data)


@dataclass
class YogaSession:
    """
    A saved running order.

    ``exercises`` keeps its historical name but holds a mixed sequence of
    exercise, story and practical ids. ``duration_minutes`` is the advisory
    target entered by the user, not the computed timeline length.
    """
    id: str
    title: str
    description: str
    story: str = ""
    duration_minutes: float = 30.0
    exercises: List[str] = field(default_factory=list)
    category: str = ""
    level: str = ""

    @property
    def is_default(self) -> bool:
        return self.id == DEFAULT_SESSION_ID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "story": self.story,
            "duration_minutes": self.duration_minutes,
            "exercises": list(self.exercises),
            "category": self.category,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> YogaSession:
        order = data.get("exercises")
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            story=str(data.get("story") or ""),
            duration_minutes=_as_minutes(data.get("duration_minutes")) or 0.0,
            exercises=[str(i) for i in order] if isinstance(order, list) else [],
            category=str(data.get("category", "")),
            level=str(data.get("level", "")),
        )
