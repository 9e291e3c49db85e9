"""Concrete repositories for cards, sessions, story books and card sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..session.items import Exercise, Practical, Story, YogaSession
from . import validators
from .repository import JsonArrayRepository, Record, clean_tags, clean_text
from .results import RepositoryResult

logger = logging.getLogger(__name__)


class ExerciseRepository(JsonArrayRepository[Exercise]):
    storage_key = "yogasession_exercises"
    noun = "Exercise"

    def validate(self, data):
        return validators.validate_exercise(data)

    def _build_record(self, data, item_id, existing):
        record = {
            "id": item_id,
            "title": clean_text(data["title"]),
            "description": clean_text(data["description"]),
            "category": clean_text(data["category"]),
            "tags": clean_tags(data["tags"]),
            "duration_minutes": data["duration_minutes"],
        }
        icon = data.get("icon") or (existing or {}).get("icon")
        if icon:
            record["icon"] = str(icon)
        return record

    def _to_item(self, record):
        return Exercise.from_dict(record)


class StoryRepository(JsonArrayRepository[Story]):
    storage_key = "yogasession_stories"
    id_prefix = "story-"
    noun = "Story"

    def validate(self, data):
        return validators.validate_story(data)

    def _build_record(self, data, item_id, existing):
        return {
            "id": item_id,
            "title": clean_text(data["title"]),
            "text": clean_text(data["text"]),
            "mood": clean_text(data.get("mood")),
            "tags": clean_tags(data["tags"]),
            "time": data["time"],
            "type": "story",
        }

    def _to_item(self, record):
        return Story.from_dict(record)


class PracticalRepository(JsonArrayRepository[Practical]):
    storage_key = "yogasession_practicals"
    id_prefix = "practical-"
    noun = "Practical"

    def validate(self, data):
        return validators.validate_practical(data)

    def _build_record(self, data, item_id, existing):
        return {
            "id": item_id,
            "title": clean_text(data["title"]),
            "instruction": clean_text(data["instruction"]),
            "tags": clean_tags(data["tags"]),
            "time": data["time"],
            "type": "practical",
        }

    def _to_item(self, record):
        return Practical.from_dict(record)


class SessionRepository(JsonArrayRepository[YogaSession]):
    storage_key = "yogasession_sessions"
    noun = "Session"

    def validate(self, data):
        return validators.validate_session(data)

    def _build_record(self, data, item_id, existing):
        return {
            "id": item_id,
            "title": clean_text(data["title"]),
            "description": clean_text(data["description"]),
            "story": clean_text(data.get("story")),
            "duration_minutes": data["duration_minutes"],
            "exercises": list(data["exercises"]),
            "category": clean_text(data["category"]),
            "level": clean_text(data["level"]),
        }

    def _to_item(self, record):
        return YogaSession.from_dict(record)

    def reorder(self, session_id: str, new_order: Any) -> RepositoryResult[YogaSession]:
        """Replace a stored session's running order."""
        if not isinstance(new_order, list):
            return RepositoryResult.fail("newExerciseOrder must be an array")
        if any(not isinstance(item_id, str) for item_id in new_order):
            return RepositoryResult.fail("all exercise IDs must be strings")

        records = self.load_records()
        for record in records:
            if record.get("id") == session_id:
                record["exercises"] = list(new_order)
                self.save_records(records)
                logger.info(f"[storage] Reordered session {session_id} ({len(new_order)} cards)")
                return RepositoryResult.ok(self._to_item(record))
        return RepositoryResult.fail("Session not found")


@dataclass
class StoryBook:
    """Named bundle of stories that can be dropped into a session at once."""
    id: str
    title: str
    description: str
    theme: str = ""
    story_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "theme": self.theme,
            "storyIds": list(self.story_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StoryBook:
        ids = data.get("storyIds")
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            theme=str(data.get("theme") or ""),
            story_ids=[i for i in ids if isinstance(i, str)] if isinstance(ids, list) else [],
        )


class StoryBookRepository(JsonArrayRepository[StoryBook]):
    storage_key = "yogasession_storybooks"
    id_prefix = "storybook-"
    noun = "Story book"

    def validate(self, data):
        return validators.validate_story_book(data)

    def _build_record(self, data, item_id, existing):
        return {
            "id": item_id,
            "title": clean_text(data["title"]),
            "description": clean_text(data["description"]),
            "theme": clean_text(data.get("theme")),
            "storyIds": [i for i in data["storyIds"] if isinstance(i, str)],
        }

    def _to_item(self, record):
        return StoryBook.from_dict(record)


class SetKind(Enum):
    """Card set flavours: (storage key suffix, id prefix, id field, noun)."""
    EXERCISE = ("exercise_sets", "exercise-set-", "exerciseIds", "Exercise set")
    STORY = ("story_sets", "story-set-", "storyIds", "Story set")
    PRACTICAL = ("practical_sets", "practical-set-", "practicalIds", "Practical set")

    @property
    def storage_key(self) -> str:
        return f"yogasession_{self.value[0]}"

    @property
    def id_prefix(self) -> str:
        return self.value[1]

    @property
    def ids_field(self) -> str:
        return self.value[2]

    @property
    def noun(self) -> str:
        return self.value[3]


@dataclass
class CardSet:
    id: str
    kind: SetKind
    name: str
    description: str = ""
    item_ids: List[str] = field(default_factory=list)
    is_default: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            self.kind.ids_field: list(self.item_ids),
            "isDefault": self.is_default,
            "createdAt": self.created_at,
        }
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        return data


class CardSetRepository(JsonArrayRepository[CardSet]):
    """One repository class for all three set kinds.

    Sets flagged ``isDefault`` cannot be deleted.
    """

    def __init__(self, store, kind: SetKind):
        self.kind = kind
        self.storage_key = kind.storage_key
        self.id_prefix = kind.id_prefix
        self.noun = kind.noun
        super().__init__(store)

    def validate(self, data):
        return validators.validate_card_set(data, self.kind.ids_field)

    def _build_record(self, data: Mapping[str, Any], item_id: str, existing: Optional[Record]) -> Record:
        now = datetime.now().isoformat()
        record: Record = {
            "id": item_id,
            "name": clean_text(data["name"]),
            "description": clean_text(data.get("description")),
            self.kind.ids_field: list(data[self.kind.ids_field]),
        }
        if existing is None:
            record["isDefault"] = bool(data.get("isDefault", False))
            record["createdAt"] = now
        else:
            record["isDefault"] = bool(existing.get("isDefault", False))
            record["createdAt"] = existing.get("createdAt")
            record["updatedAt"] = now
        return record

    def _to_item(self, record):
        ids = record.get(self.kind.ids_field)
        return CardSet(
            id=str(record.get("id", "")),
            kind=self.kind,
            name=str(record.get("name", "")),
            description=str(record.get("description") or ""),
            item_ids=[i for i in ids if isinstance(i, str)] if isinstance(ids, list) else [],
            is_default=bool(record.get("isDefault", False)),
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
        )

    def _can_delete(self, record):
        return not record.get("isDefault", False)

    def initialize_defaults(self, default_set: Optional[Mapping[str, Any]] = None) -> bool:
        """Seed ``default_set`` unless a default set already exists."""
        if default_set is None:
            return False
        records = self.load_records()
        if any(record.get("isDefault") for record in records):
            return False
        record = dict(default_set)
        record.setdefault("createdAt", datetime.now().isoformat())
        record["isDefault"] = True
        records.append(record)
        self.save_records(records)
        logger.info(f"[storage] Seeded default {self.noun.lower()} {record.get('id')}")
        return True
