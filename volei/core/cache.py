"""
Explicit query cache for dashboard reads.

Entries are keyed by (query shape, parameters). Nothing expires on its own:
writes invalidate the shapes that depend on the written table, and sign-out
clears everything. The map holds at most `max_entries` keys; the least
recently used one is dropped first, so keys for past days age out.
"""

import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Hashable, Mapping, Optional, Tuple

from fastapi import Request

logger = logging.getLogger(__name__)

# Query shapes
SUMMARY = "dashboard.summary"
FINANCIAL_OVERVIEW = "dashboard.financial_overview"
STUDENT_STATUS = "dashboard.student_status"
INACTIVE_STUDENTS = "dashboard.inactive_students"
ATTENDANCE_STATS = "dashboard.attendance_stats"

# Shapes to drop after a write to each table
TABLE_DEPENDENTS: Dict[str, Tuple[str, ...]] = {
    "students": (SUMMARY, STUDENT_STATUS, INACTIVE_STUDENTS, ATTENDANCE_STATS),
    "payments": (SUMMARY, FINANCIAL_OVERVIEW, STUDENT_STATUS),
    "court_expenses": (SUMMARY, FINANCIAL_OVERVIEW),
    "extra_expenses": (SUMMARY, FINANCIAL_OVERVIEW),
    "additional_income": (SUMMARY, FINANCIAL_OVERVIEW),
    "attendance": (ATTENDANCE_STATS,),
}

CacheKey = Tuple[str, Tuple[Tuple[str, Hashable], ...]]

DEFAULT_MAX_ENTRIES = 256


def make_key(shape: str, params: Optional[Mapping[str, Hashable]] = None) -> CacheKey:
    return shape, tuple(sorted((params or {}).items()))


class QueryCache:
    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, Any]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, shape: str, params: Optional[Mapping[str, Hashable]] = None) -> Any:
        key = make_key(shape, params)
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, shape: str, params: Optional[Mapping[str, Hashable]], value: Any) -> None:
        self._store(make_key(shape, params), value)

    def _store(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached query %s", evicted[0])

    async def get_or_load(
        self,
        shape: str,
        params: Optional[Mapping[str, Hashable]],
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value or await the loader and store its result. Failed loads are not stored."""
        key = make_key(shape, params)
        if key in self._entries:
            self._entries.move_to_end(key)
            return self._entries[key]
        value = await loader()
        self._store(key, value)
        return value

    def invalidate(self, *shapes: str) -> int:
        """Drop every entry of the given shapes, whatever their parameters."""
        targets = set(shapes)
        stale = [k for k in self._entries if k[0] in targets]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug("Invalidated %d cached queries for %s", len(stale), sorted(targets))
        return len(stale)

    def invalidate_table(self, table: str) -> int:
        return self.invalidate(*TABLE_DEPENDENTS.get(table, ()))

    def clear(self) -> None:
        self._entries.clear()


def get_query_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache
