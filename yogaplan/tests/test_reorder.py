"""Tests for the reorder engine and its list primitives."""

import pytest

from yogaplan.session import ReorderEngine, SessionEventEmitter, SessionEventType, hit_test, move_item
from yogaplan.session.reorder import insert_item, remap_position, remove_item


def test_move_item_is_splice_not_swap():
    assert move_item(["a", "b", "c"], 0, 2) == ["b", "c", "a"]
    assert move_item(["a", "b", "c"], 2, 0) == ["c", "a", "b"]
    assert move_item(["a", "b", "c", "d"], 1, 2) == ["a", "c", "b", "d"]


def test_move_item_leaves_input_untouched():
    order = ["a", "b", "c"]
    result = move_item(order, 0, 1)
    assert order == ["a", "b", "c"]
    assert result is not order


@pytest.mark.parametrize("from_index,to_index", [(1, 1), (-1, 0), (0, 3), (5, 0)])
def test_move_item_noop_cases(from_index, to_index):
    assert move_item(["a", "b", "c"], from_index, to_index) == ["a", "b", "c"]


def test_move_item_round_trip_restores_order():
    order = ["1", "story-1", "2", "practical-1", "3"]
    for i in range(len(order)):
        for j in range(len(order)):
            assert move_item(move_item(order, i, j), j, i) == order


def test_move_item_preserves_multiset():
    order = ["1", "1", "story-2", "3"]
    assert sorted(move_item(order, 0, 3)) == sorted(order)


def test_insert_and_remove_primitives():
    assert insert_item(["a", "b"], "x", 1) == ["a", "x", "b"]
    assert insert_item(["a", "b"], "x") == ["a", "b", "x"]
    assert insert_item(["a", "b"], "x", 9) == ["a", "b", "x"]
    assert remove_item(["a", "b", "c"], 1) == ["a", "c"]
    assert remove_item(["a"], 4) == ["a"]


def test_remap_position_matches_move_item():
    order = list("abcdef")
    for from_index in range(len(order)):
        for to_index in range(len(order)):
            moved = move_item(order, from_index, to_index)
            for position, item in enumerate(order):
                assert moved[remap_position(position, from_index, to_index)] == item


def test_hit_test():
    bounds = [(0, 39), (40, 79), (80, 119)]
    assert hit_test(10, bounds) == 0
    assert hit_test(40, bounds) == 1
    assert hit_test(119, bounds) == 2
    assert hit_test(500, bounds) is None
    # Overlap resolves to the last match
    assert hit_test(39, [(0, 40), (39, 80)]) == 1


def test_engine_move_commits_and_emits():
    emitter = SessionEventEmitter()
    events = []
    emitter.subscribe(SessionEventType.ORDER_CHANGE, lambda e: events.append(e.data))
    committed = []
    engine = ReorderEngine(["a", "b", "c"], on_commit=committed.append, emitter=emitter)

    assert engine.move(0, 2) is True
    assert engine.order == ["b", "c", "a"]
    assert committed == [["b", "c", "a"]]
    assert events[0]["operation"] == "move"
    assert events[0]["from_index"] == 0 and events[0]["to_index"] == 2
    assert engine.last_change == {"operation": "move", "from_index": 0, "to_index": 2}


def test_engine_self_move_does_not_commit():
    committed = []
    engine = ReorderEngine(["a", "b"], on_commit=committed.append)
    assert engine.move(1, 1) is False
    assert engine.move(0, 7) is False
    assert committed == []


def test_engine_insert_landing_index():
    engine = ReorderEngine(["a", "b"])
    assert engine.insert("x", 1) == 1
    assert engine.insert("y") == 3
    assert engine.insert("z", 99) == 4
    assert engine.order == ["a", "x", "b", "y", "z"]


def test_engine_insert_many_and_remove():
    engine = ReorderEngine(["1"])
    assert engine.insert_many(["story-1", "story-2"]) == 2
    assert engine.insert_many([]) == 0
    assert engine.order == ["1", "story-1", "story-2"]
    assert engine.remove(1) == "story-1"
    assert engine.remove(10) is None
    assert engine.order == ["1", "story-2"]


def test_engine_order_is_a_copy():
    engine = ReorderEngine(["a", "b"])
    engine.order.append("c")
    assert len(engine) == 2


def test_replace_does_not_commit():
    committed = []
    engine = ReorderEngine(["a"], on_commit=committed.append)
    engine.replace(["x", "y"])
    assert engine.order == ["x", "y"]
    assert committed == []
