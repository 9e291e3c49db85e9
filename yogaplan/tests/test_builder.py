"""Tests for the palette filter and the session draft."""

from yogaplan.data.defaults import default_session
from yogaplan.session import ItemKind, UnresolvedEntry
from yogaplan.session.builder import CardSummary, SessionDraft, all_tags, filter_cards, summarize_cards


CARDS = [
    CardSummary("1", "Berghaltung", 5, ItemKind.EXERCISE, ("stehen", "basis"), "Stehübungen"),
    CardSummary("2", "Baum", 3, ItemKind.EXERCISE, ("balance",), "Gleichgewicht"),
    CardSummary("story-1", "Der Berg", 2, ItemKind.STORY, ("ruhig",)),
    CardSummary("practical-1", "Wasser trinken", 0.5, ItemKind.PRACTICAL, ()),
]


def test_filter_by_query_is_case_insensitive():
    assert [c.id for c in filter_cards(CARDS, "BERG")] == ["1", "story-1"]


def test_filter_by_kind_and_tags():
    assert [c.id for c in filter_cards(CARDS, kinds=[ItemKind.STORY, ItemKind.PRACTICAL])] == ["story-1", "practical-1"]
    assert [c.id for c in filter_cards(CARDS, tags=["balance", "ruhig"])] == ["2", "story-1"]
    assert filter_cards(CARDS, kinds=[]) == []


def test_all_tags_sorted_unique():
    assert all_tags(CARDS) == ["balance", "basis", "ruhig", "stehen"]


def test_summaries_from_library(library):
    library.stories.create({"title": "Der Fluss", "text": "...", "tags": ["wasser"], "time": 2})
    summaries = summarize_cards(library.all_cards())
    story = [s for s in summaries if s.kind is ItemKind.STORY][0]
    assert story.id == "story-1"
    assert story.tags == ("wasser",)
    assert story.time == 2


def test_new_draft_submit_creates_session(library):
    draft = SessionDraft(title="Kurz", description="Fünf Minuten", category="Morgen", level="Anfänger")
    draft.add_card("1")
    draft.add_card("3")
    draft.add_card("2", 1)
    assert draft.order == ["1", "2", "3"]

    result = draft.submit(library.sessions)
    assert result.success
    assert draft.session_id == result.item.id
    assert library.sessions.get(draft.session_id).exercises == ["1", "2", "3"]

    # Second submit updates the same session
    draft.move(0, 2)
    assert draft.submit(library.sessions).success
    assert len(library.sessions.list()) == 1
    assert library.sessions.get(draft.session_id).exercises == ["2", "3", "1"]


def test_invalid_draft_reports_errors(library):
    result = SessionDraft().submit(library.sessions)
    assert not result.success
    assert "title is required and must be a non-empty string" in result.errors
    assert library.sessions.list() == []


def test_editing_builtin_session_saves_a_copy(library):
    draft = SessionDraft.from_session(default_session())
    assert draft.session_id is None
    assert draft.order == default_session().exercises
    assert draft.submit(library.sessions).success
    assert draft.session_id != "default"


def test_story_book_appends_in_book_order():
    draft = SessionDraft()
    draft.add_card("1")
    assert draft.add_story_book(["story-3", "story-1"]) == 2
    assert draft.order == ["1", "story-3", "story-1"]


def test_entries_and_counts(library):
    draft = SessionDraft()
    for card_id in ("1", "story-9", "practical-1", "2"):
        draft.add_card(card_id)
    assert draft.remove_card(3) == "2"

    entries = draft.entries(library.resolver())
    assert entries[0].id == "1"
    assert isinstance(entries[1], UnresolvedEntry)
    assert entries[1].position == 1
    assert draft.kind_counts() == {ItemKind.EXERCISE: 1, ItemKind.STORY: 1, ItemKind.PRACTICAL: 1}
