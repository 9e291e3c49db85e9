"""Structured results returned by repository writes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class RepositoryResult(Generic[T]):
    """Outcome of create/update/reorder.

    Validation and not-found conditions come back here as messages; they
    are never raised.
    """
    success: bool
    item: Optional[T] = None
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, item: T) -> RepositoryResult[T]:
        return cls(success=True, item=item)

    @classmethod
    def fail(cls, *errors: str) -> RepositoryResult[T]:
        return cls(success=False, errors=list(errors))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.success:
            to_dict = getattr(self.item, "to_dict", None)
            data["item"] = to_dict() if callable(to_dict) else self.item
        else:
            data["errors"] = list(self.errors)
        return data
