"""All repositories over one store, plus the resolver built from them."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..data.defaults import DEFAULT_EXERCISE_SET, DEFAULT_EXERCISES
from ..session.items import Exercise, Item, ItemKind
from ..session.resolver import ItemResolver
from .backend import JsonFileStore, KeyValueStore
from .repositories import (
    CardSetRepository,
    ExerciseRepository,
    PracticalRepository,
    SessionRepository,
    SetKind,
    StoryBookRepository,
    StoryRepository,
)

logger = logging.getLogger(__name__)


class CardLibrary:
    """Entry point to every stored collection.

    Args:
        store: Backend shared by all repositories; defaults to the JSON file
            in the user data directory.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else JsonFileStore()
        self.exercises = ExerciseRepository(self.store)
        self.stories = StoryRepository(self.store)
        self.practicals = PracticalRepository(self.store)
        self.sessions = SessionRepository(self.store)
        self.story_books = StoryBookRepository(self.store)
        self.sets = {kind: CardSetRepository(self.store, kind) for kind in SetKind}

    def cards(self, kind: ItemKind):
        return {
            ItemKind.EXERCISE: self.exercises,
            ItemKind.STORY: self.stories,
            ItemKind.PRACTICAL: self.practicals,
        }[ItemKind(kind)]

    def all_exercises(self) -> List[Exercise]:
        """Stored exercises followed by built-ins whose ids are not taken."""
        stored = self.exercises.list()
        taken = {exercise.id for exercise in stored}
        return stored + [e for e in DEFAULT_EXERCISES if e.id not in taken]

    def all_cards(self) -> List[Item]:
        return [*self.all_exercises(), *self.stories.list(), *self.practicals.list()]

    def resolver(self) -> ItemResolver:
        return ItemResolver.from_collections(
            exercises=self.exercises.list(),
            stories=self.stories.list(),
            practicals=self.practicals.list(),
            defaults=DEFAULT_EXERCISES,
        )

    def initialize_defaults(self) -> None:
        """First-run seeding of the starter exercise set."""
        self.sets[SetKind.EXERCISE].initialize_defaults(DEFAULT_EXERCISE_SET)
