"""Tests for storage backends, validation and the card/session repositories."""

import json
import logging
import math

import pytest

from yogaplan.data.defaults import DEFAULT_EXERCISE_SET, DEFAULT_EXERCISES
from yogaplan.session import ItemKind
from yogaplan.storage import (
    CardLibrary,
    JsonFileStore,
    MemoryStore,
    SetKind,
)


def _story(**overrides):
    data = {"title": "Der Fluss", "text": "Es war einmal...", "tags": ["ruhig"], "time": 2, "mood": "calm"}
    data.update(overrides)
    return data


def _session(**overrides):
    data = {
        "title": "Morgenflow",
        "description": "Sanfter Start",
        "story": "",
        "duration_minutes": 20,
        "exercises": ["1", "2"],
        "category": "Morgen",
        "level": "Anfänger",
    }
    data.update(overrides)
    return data


def test_story_ids_are_prefixed_and_increment(library):
    first = library.stories.create(_story())
    second = library.stories.create(_story(title="Zweite"))
    assert first.success and second.success
    assert first.item.id == "story-1"
    assert second.item.id == "story-2"
    assert second.item.kind is ItemKind.STORY


def test_generated_id_uses_highest_suffix(store):
    store.set("yogasession_practicals", json.dumps([
        {"id": "practical-7", "title": "A", "instruction": "x", "tags": [], "time": 1},
        {"id": "legacy", "title": "B", "instruction": "y", "tags": [], "time": 1},
    ]))
    library = CardLibrary(store)
    result = library.practicals.create({"title": "Wasser", "instruction": "Trinken", "tags": [], "time": 0.5})
    assert result.item.id == "practical-8"


def test_exercise_ids_are_bare_numbers(library):
    result = library.exercises.create({
        "title": "Baum",
        "description": "Auf einem Bein stehen",
        "category": "Stehübungen",
        "tags": ["balance"],
        "duration_minutes": 3,
    })
    assert result.success
    assert result.item.id == "1"
    # A stored "1" now shadows the built-in exercise "1"
    assert library.resolver().resolve("1").item.title == "Baum"


@pytest.mark.parametrize("overrides,message", [
    ({"title": "  "}, "title is required and must be a non-empty string"),
    ({"tags": ["ok", " "]}, "tags must not contain empty strings"),
    ({"tags": "ruhig"}, "tags is required and must be an array"),
    ({"time": 0.2}, "time is required and must be at least 0.5 minutes"),
    ({"time": None}, "time is required and must be at least 0.5 minutes"),
])
def test_story_validation_messages(library, overrides, message):
    result = library.stories.create(_story(**overrides))
    assert not result.success
    assert message in result.errors
    assert library.stories.list() == []


def _exercise(**overrides):
    data = {
        "title": "Baum",
        "description": "Auf einem Bein stehen",
        "category": "Stehübungen",
        "tags": ["balance"],
        "duration_minutes": 3,
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("overrides,message", [
    ({"tags": ["  "]}, "tags must not contain empty strings"),
    ({"duration_minutes": 0}, "duration_minutes is required and must be a positive number"),
    ({"duration_minutes": math.inf}, "duration_minutes is required and must be a positive number"),
    ({"duration_minutes": math.nan}, "duration_minutes is required and must be a positive number"),
    ({"duration_minutes": True}, "duration_minutes is required and must be a positive number"),
])
def test_exercise_validation_messages(library, overrides, message):
    result = library.exercises.create(_exercise(**overrides))
    assert result.errors == [message]
    assert library.exercises.list() == []


@pytest.mark.parametrize("time", [math.inf, math.nan, -math.inf])
def test_non_finite_card_times_rejected(library, time):
    message = "time is required and must be at least 0.5 minutes"
    assert message in library.stories.create(_story(time=time)).errors
    practical = {"title": "Wasser", "instruction": "Trinken", "tags": [], "time": time}
    assert message in library.practicals.create(practical).errors


def test_practical_validation_messages(library):
    result = library.practicals.create({"title": "", "instruction": " ", "tags": ["ok", ""], "time": 1})
    assert result.errors == [
        "title is required and must be a non-empty string",
        "instruction is required and must be a non-empty string",
        "tags must not contain empty strings",
    ]


def test_session_validation_messages(library):
    result = library.sessions.create(_session(exercises=["1", 2], level=""))
    assert not result.success
    assert "all exercise IDs must be strings" in result.errors
    assert "level is required and must be a non-empty string" in result.errors


def test_update_keeps_id_and_reports_missing(library):
    created = library.stories.create(_story()).item
    updated = library.stories.update(created.id, _story(title="Neu"))
    assert updated.success
    assert updated.item.id == created.id
    assert library.stories.get(created.id).title == "Neu"

    missing = library.stories.update("story-99", _story())
    assert missing.errors == ["Story not found"]


def test_delete(library):
    created = library.practicals.create({"title": "Atmen", "instruction": "Tief", "tags": [], "time": 1}).item
    assert library.practicals.delete(created.id) is True
    assert library.practicals.delete(created.id) is False


def test_session_reorder(library):
    session = library.sessions.create(_session(exercises=["1", "2", "story-1"])).item
    result = library.sessions.reorder(session.id, ["story-1", "1", "2"])
    assert result.success
    assert library.sessions.get(session.id).exercises == ["story-1", "1", "2"]


@pytest.mark.parametrize("order,message", [
    ("1,2", "newExerciseOrder must be an array"),
    (["1", None], "all exercise IDs must be strings"),
])
def test_session_reorder_rejects_bad_input(library, order, message):
    session = library.sessions.create(_session()).item
    assert library.sessions.reorder(session.id, order).errors == [message]


def test_session_reorder_unknown_session(library):
    assert library.sessions.reorder("99", ["1"]).errors == ["Session not found"]


def test_corrupt_storage_is_logged_and_treated_as_empty(store, caplog):
    store.set("yogasession_stories", "{not json")
    store.set("yogasession_sessions", json.dumps({"not": "an array"}))
    library = CardLibrary(store)
    with caplog.at_level(logging.ERROR, logger="yogaplan.storage"):
        assert library.stories.list() == []
        assert library.sessions.list() == []
    assert any("yogasession_stories" in r.getMessage() for r in caplog.records)
    assert any("not a JSON array" in r.getMessage() for r in caplog.records)


def test_default_set_seeded_once_and_undeletable(library):
    sets = library.sets[SetKind.EXERCISE]
    assert sets.initialize_defaults(DEFAULT_EXERCISE_SET) is False  # fixture already seeded
    stored = sets.list()
    assert len(stored) == 1
    default = stored[0]
    assert default.is_default
    assert default.item_ids == DEFAULT_EXERCISE_SET["exerciseIds"]
    assert sets.delete(default.id) is False


def test_card_set_update_preserves_default_flag(library):
    sets = library.sets[SetKind.EXERCISE]
    default = sets.list()[0]
    result = sets.update(default.id, {"name": "Umbenannt", "exerciseIds": ["1"], "isDefault": False})
    assert result.success
    assert result.item.is_default is True
    assert result.item.updated_at is not None


def test_story_set_uses_story_ids_field(library):
    sets = library.sets[SetKind.STORY]
    result = sets.create({"name": "Abend", "storyIds": ["story-1", "story-2"]})
    assert result.success
    assert result.item.id == "story-set-1"
    assert result.item.to_dict()["storyIds"] == ["story-1", "story-2"]
    assert sets.delete(result.item.id) is True


def test_story_book_validation(library):
    result = library.story_books.create({"title": "Buch", "description": "d", "storyIds": ["story-1", 3]})
    assert result.errors == ["all story IDs must be strings"]
    ok = library.story_books.create({"title": "Buch", "description": "d", "storyIds": ["story-1"]})
    assert ok.item.id == "storybook-1"
    assert ok.item.story_ids == ["story-1"]


def test_all_exercises_merges_builtins(library):
    library.exercises.create({
        "title": "Eigene", "description": "x", "category": "c", "tags": [], "duration_minutes": 2,
    })
    exercises = library.all_exercises()
    assert exercises[0].title == "Eigene"
    assert len(exercises) == len(DEFAULT_EXERCISES)  # stored "1" replaces built-in "1"


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    library = CardLibrary(JsonFileStore(path))
    library.stories.create(_story())

    reopened = CardLibrary(JsonFileStore(path))
    assert [s.title for s in reopened.stories.list()] == ["Der Fluss"]
    assert isinstance(json.loads(path.read_text(encoding="utf-8"))["yogasession_stories"], str)


def test_json_file_store_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("[]", encoding="utf-8")
    store = JsonFileStore(path)
    with pytest.raises(ValueError):
        store.get("anything")
    # Repositories degrade to empty instead of raising
    assert CardLibrary(store).sessions.list() == []


def test_memory_store_remove():
    store = MemoryStore({"a": "1"})
    store.remove("a")
    store.remove("missing")
    assert store.keys() == []
