"""Id classification and the merged card lookup used by the timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from .items import Item, ItemKind

logger = logging.getLogger(__name__)

STORY_PREFIX = "story-"
PRACTICAL_PREFIX = "practical-"


def is_story_id(item_id: Any) -> bool:
    return isinstance(item_id, str) and item_id.startswith(STORY_PREFIX)


def is_practical_id(item_id: Any) -> bool:
    return isinstance(item_id, str) and item_id.startswith(PRACTICAL_PREFIX)


def classify(item_id: Any) -> ItemKind:
    """Kind implied by the id pattern, whether or not the id resolves."""
    if is_story_id(item_id):
        return ItemKind.STORY
    if is_practical_id(item_id):
        return ItemKind.PRACTICAL
    return ItemKind.EXERCISE


@dataclass(frozen=True)
class ResolvedItem:
    item: Item
    kind: ItemKind


class ItemResolver:
    """Lookup from card id to ``ResolvedItem`` across all card kinds.

    Collections are registered in order; the first registration of an id
    wins and later duplicates are ignored.
    """

    def __init__(self) -> None:
        self._items: Dict[str, ResolvedItem] = {}

    @classmethod
    def from_collections(
        cls,
        exercises: Iterable[Item] = (),
        stories: Iterable[Item] = (),
        practicals: Iterable[Item] = (),
        defaults: Iterable[Item] = (),
    ) -> ItemResolver:
        """Build a resolver from stored cards.

        Stored exercises register before the built-in defaults so a stored
        card with a colliding bare numeric id shadows the bundled one.
        """
        resolver = cls()
        for collection in (exercises, defaults, stories, practicals):
            resolver.register_all(collection)
        return resolver

    def register(self, item: Item) -> bool:
        if item.id in self._items:
            logger.debug(f"[resolver] Ignoring duplicate id {item.id!r} ({item.kind.value})")
            return False
        self._items[item.id] = ResolvedItem(item=item, kind=item.kind)
        return True

    def register_all(self, items: Iterable[Item]) -> int:
        return sum(1 for item in items if self.register(item))

    def resolve(self, item_id: str) -> Optional[ResolvedItem]:
        return self._items.get(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)
