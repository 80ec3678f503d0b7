"""Aggregate cache keyed by query parameters.

Entries never expire: they are dropped only by `invalidate`, `clear` or a
forced recomputation. Concurrent writers to the same key overwrite each
other (last write wins).
"""

import json
from typing import Any, Dict, Mapping, NamedTuple, Optional

from ..domain.entities.date_range import DateRange


class CacheKey(NamedTuple):
    """Structured cache key: operation, entity id, date range, filter signature."""

    operation: str
    entity_id: Optional[str] = None
    date_range: Optional[str] = None
    filters: Optional[str] = None

    def __str__(self) -> str:
        return ":".join(part for part in self if part)


def range_signature(date_range: Optional[DateRange]) -> Optional[str]:
    return date_range.label if date_range else None


def filter_signature(**filters: Any) -> Optional[str]:
    """Order-insensitive signature of the set filters, None when nothing is set."""
    parts = []
    for name in sorted(filters):
        value = filters[name]
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            value = ",".join(str(getattr(v, "value", v)) for v in value)
        elif isinstance(value, Mapping):
            value = json.dumps(value, sort_keys=True, default=str)
        parts.append(f"{name}={value}")
    return ";".join(parts) or None


class AggregateCache:
    """In-memory map from CacheKey to a computed aggregate."""

    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}

    def get(self, key: CacheKey) -> Optional[Any]:
        return self._entries.get(key)

    def put(self, key: CacheKey, value: Any) -> Any:
        self._entries[key] = value
        return value

    def invalidate(self, key: CacheKey) -> bool:
        """Drop one entry. Returns whether it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry. Returns how many were dropped."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
