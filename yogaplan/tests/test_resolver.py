"""Tests for id classification and the merged card lookup."""

from yogaplan.data.defaults import DEFAULT_EXERCISES
from yogaplan.session import (
    Exercise,
    ItemKind,
    ItemResolver,
    Practical,
    Story,
    classify,
    is_practical_id,
    is_story_id,
)


def test_id_patterns():
    assert is_story_id("story-3")
    assert not is_story_id("3")
    assert is_practical_id("practical-1")
    assert not is_practical_id("story-1")
    assert not is_story_id(None)
    assert not is_practical_id(42)


def test_classify_defaults_to_exercise():
    assert classify("story-1") is ItemKind.STORY
    assert classify("practical-7") is ItemKind.PRACTICAL
    assert classify("12") is ItemKind.EXERCISE
    assert classify("anything-else") is ItemKind.EXERCISE


def test_resolve_each_kind():
    resolver = ItemResolver.from_collections(
        exercises=[Exercise("10", "Baum", "Stand", "Stehübungen", [], 4)],
        stories=[Story("story-1", "Der Fluss", "...", ["ruhig"], time=2)],
        practicals=[Practical("practical-1", "Wasser", "Trinken", [], time=None)],
    )
    assert resolver.resolve("10").kind is ItemKind.EXERCISE
    assert resolver.resolve("story-1").item.title == "Der Fluss"
    assert resolver.resolve("practical-1").kind is ItemKind.PRACTICAL
    assert resolver.resolve("missing") is None
    assert "story-1" in resolver
    assert len(resolver) == 3


def test_stored_exercise_shadows_builtin_with_same_id():
    stored = Exercise("1", "Eigene Übung", "Selbst erstellt", "Eigene", [], 9)
    resolver = ItemResolver.from_collections(exercises=[stored], defaults=DEFAULT_EXERCISES)

    resolved = resolver.resolve("1")
    assert resolved.item is stored
    # Other built-ins are still reachable
    assert resolver.resolve("2").item.title == DEFAULT_EXERCISES[1].title


def test_first_registration_wins():
    resolver = ItemResolver()
    first = Story("story-1", "Erste", "a")
    assert resolver.register(first) is True
    assert resolver.register(Story("story-1", "Zweite", "b")) is False
    assert resolver.resolve("story-1").item is first
