"""Local persistence for cards, sessions, story books and card sets."""

from .backend import JsonFileStore, KeyValueStore, MemoryStore
from .library import CardLibrary
from .repositories import (
    CardSet,
    CardSetRepository,
    ExerciseRepository,
    PracticalRepository,
    SessionRepository,
    SetKind,
    StoryBook,
    StoryBookRepository,
    StoryRepository,
)
from .results import RepositoryResult

__all__ = [
    "CardLibrary",
    "CardSet",
    "CardSetRepository",
    "ExerciseRepository",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PracticalRepository",
    "RepositoryResult",
    "SessionRepository",
    "SetKind",
    "StoryBook",
    "StoryBookRepository",
    "StoryRepository",
]
