"""Generic JSON-array repository over a key-value store.

Every collection follows the same cycle: validate, generate an id, persist
the whole array back under its key. Subclasses supply the key, the id
pattern, the validator and the record/item conversion.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from .backend import KeyValueStore
from .results import RepositoryResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

Record = Dict[str, Any]


def clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def clean_tags(tags: Any) -> List[str]:
    if not isinstance(tags, list):
        return []
    return [tag.strip() for tag in tags if isinstance(tag, str)]


class JsonArrayRepository(Generic[T]):
    """Base class for one stored collection.

    Class attributes:
        storage_key: Key the JSON array lives under
        id_prefix: Prefix of generated ids ("" for bare numbers)
        noun: Singular display name used in not-found messages
    """

    storage_key: str = ""
    id_prefix: str = ""
    noun: str = "Item"

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._id_pattern = re.compile(rf"^{re.escape(self.id_prefix)}(\d+)$")

    # ----- hooks -----

    def validate(self, data: Mapping[str, Any]) -> List[str]:
        raise NotImplementedError

    def _build_record(self, data: Mapping[str, Any], item_id: str, existing: Optional[Record]) -> Record:
        raise NotImplementedError

    def _to_item(self, record: Record) -> T:
        raise NotImplementedError

    # ----- raw access -----

    def load_records(self) -> List[Record]:
        """Stored array; unreadable data is logged and treated as empty."""
        try:
            raw = self.store.get(self.storage_key)
            if raw is None:
                return []
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            logger.error(f"[storage] Failed to read {self.storage_key}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"[storage] {self.storage_key} is not a JSON array; ignoring it")
            return []
        return [record for record in data if isinstance(record, dict)]

    def save_records(self, records: List[Record]) -> None:
        try:
            self.store.set(self.storage_key, json.dumps(records, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"[storage] Failed to save {self.storage_key}: {e}")

    def generate_id(self, records: List[Record]) -> str:
        """Next id: highest numeric suffix plus one."""
        numbers = []
        for record in records:
            match = self._id_pattern.match(str(record.get("id", "")))
            if match:
                numbers.append(int(match.group(1)))
        return f"{self.id_prefix}{max(numbers) + 1 if numbers else 1}"

    # ----- CRUD -----

    def list(self) -> List[T]:
        return [self._to_item(record) for record in self.load_records()]

    def get(self, item_id: str) -> Optional[T]:
        for record in self.load_records():
            if record.get("id") == item_id:
                return self._to_item(record)
        return None

    def create(self, data: Mapping[str, Any]) -> RepositoryResult[T]:
        errors = self.validate(data)
        if errors:
            return RepositoryResult(success=False, errors=errors)
        records = self.load_records()
        record = self._build_record(data, self.generate_id(records), None)
        records.append(record)
        self.save_records(records)
        logger.info(f"[storage] Created {self.noun.lower()} {record['id']}")
        return RepositoryResult.ok(self._to_item(record))

    def update(self, item_id: str, data: Mapping[str, Any]) -> RepositoryResult[T]:
        """In-place update; the id never changes."""
        errors = self.validate(data)
        if errors:
            return RepositoryResult(success=False, errors=errors)
        records = self.load_records()
        for index, existing in enumerate(records):
            if existing.get("id") == item_id:
                records[index] = self._build_record(data, item_id, existing)
                self.save_records(records)
                logger.info(f"[storage] Updated {self.noun.lower()} {item_id}")
                return RepositoryResult.ok(self._to_item(records[index]))
        return RepositoryResult.fail(f"{self.noun} not found")

    def delete(self, item_id: str) -> bool:
        records = self.load_records()
        for index, existing in enumerate(records):
            if existing.get("id") == item_id:
                if not self._can_delete(existing):
                    logger.warning(f"[storage] Refusing to delete protected {self.noun.lower()} {item_id}")
                    return False
                del records[index]
                self.save_records(records)
                logger.info(f"[storage] Deleted {self.noun.lower()} {item_id}")
                return True
        return False

    def _can_delete(self, record: Record) -> bool:
        return True

    def clear(self) -> None:
        try:
            self.store.remove(self.storage_key)
        except OSError as e:
            logger.error(f"[storage] Failed to clear {self.storage_key}: {e}")
