"""Session builder: card palette filtering and the editable session draft."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..data.defaults import SESSION_CATEGORIES, SESSION_LEVELS
from .items import Item, ItemKind, YogaSession
from .reorder import ReorderEngine
from .resolver import ItemResolver, classify
from .timeline import UnresolvedEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardSummary:
    """Palette row: one card flattened to the fields the palette shows."""
    id: str
    title: str
    time: float
    kind: ItemKind
    tags: tuple = ()
    category: Optional[str] = None


def summarize(item: Item) -> CardSummary:
    return CardSummary(
        id=item.id,
        title=item.title,
        time=item.duration_minutes or 0,
        kind=item.kind,
        tags=tuple(item.tags),
        category=item.category_label,
    )


def summarize_cards(*collections: Iterable[Item]) -> List[CardSummary]:
    return [summarize(item) for collection in collections for item in collection]


def all_tags(cards: Iterable[CardSummary]) -> List[str]:
    return sorted({tag for card in cards for tag in card.tags})


def filter_cards(
    cards: Iterable[CardSummary],
    query: str = "",
    kinds: Optional[Iterable[ItemKind]] = None,
    tags: Sequence[str] = (),
) -> List[CardSummary]:
    """Palette filter.

    A card passes when its kind is selected, its title contains ``query``
    (case-insensitive) and, if tags are selected, it carries any of them.
    """
    allowed = set(ItemKind) if kinds is None else {ItemKind(k) for k in kinds}
    needle = query.strip().lower()
    result = []
    for card in cards:
        if card.kind not in allowed:
            continue
        if needle and needle not in card.title.lower():
            continue
        if tags and not any(tag in card.tags for tag in tags):
            continue
        result.append(card)
    return result


@dataclass
class SessionDraft:
    """Form state for creating or editing a session.

    The running order is owned by a private ``ReorderEngine`` so palette
    taps, drags and touch gestures all go through the same mutations.
    """
    title: str = ""
    description: str = ""
    story: str = ""
    duration_minutes: float = 30
    category: str = SESSION_CATEGORIES[0]
    level: str = SESSION_LEVELS[0]
    session_id: Optional[str] = None
    engine: ReorderEngine = field(default_factory=ReorderEngine)

    @classmethod
    def from_session(cls, session: YogaSession) -> SessionDraft:
        return cls(
            title=session.title,
            description=session.description,
            story=session.story,
            duration_minutes=session.duration_minutes or 30,
            category=session.category or SESSION_CATEGORIES[0],
            level=session.level or SESSION_LEVELS[0],
            session_id=None if session.is_default else session.id,
            engine=ReorderEngine(session.exercises),
        )

    @property
    def order(self) -> List[str]:
        return self.engine.order

    def add_card(self, card_id: str, index: Optional[int] = None) -> int:
        return self.engine.insert(card_id, index)

    def add_story_book(self, story_ids: Iterable[str]) -> int:
        """Append every story of a book in book order."""
        return self.engine.insert_many(story_ids)

    def remove_card(self, index: int) -> Optional[str]:
        return self.engine.remove(index)

    def move(self, from_index: int, to_index: int) -> bool:
        return self.engine.move(from_index, to_index)

    def entries(self, resolver: ItemResolver) -> List[Any]:
        """Order resolved for display; missing ids become placeholders."""
        rows: List[Any] = []
        for position, card_id in enumerate(self.engine.order):
            resolved = resolver.resolve(card_id)
            if resolved is None:
                rows.append(UnresolvedEntry(item_id=card_id, position=position, kind=classify(card_id)))
            else:
                rows.append(resolved.item)
        return rows

    def kind_counts(self) -> Dict[ItemKind, int]:
        counts = {kind: 0 for kind in ItemKind}
        for card_id in self.engine.order:
            counts[classify(card_id)] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "story": self.story,
            "duration_minutes": self.duration_minutes,
            "exercises": self.engine.order,
            "category": self.category,
            "level": self.level,
        }

    def submit(self, sessions):
        """Create or update through the session repository.

        Returns:
            The repository's ``RepositoryResult``; errors are left for the
            form to show inline.
        """
        data = self.to_dict()
        if self.session_id is None:
            result = sessions.create(data)
            if result.success:
                self.session_id = result.item.id
        else:
            result = sessions.update(self.session_id, data)
        if not result.success:
            logger.info(f"[builder] Session not saved: {result.errors}")
        return result
