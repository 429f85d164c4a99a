"""Per-category result cache for one search session."""

import threading
from dataclasses import dataclass
from typing import Any

from models.normalized_result import NormalizedResult
from models.search_types import DEFAULT_FILTERS, Category, FilterSet


@dataclass(frozen=True)
class CachedEntry:
    result: NormalizedResult | None = None
    searched: bool = False


EMPTY_ENTRY = CachedEntry()


class ResultCacheStore:
    """
    Last completed result per category, plus a "searched" flag per category.

    Any filter change resets every category's searched flag, so a result read
    while ``is_searched(category)`` holds always matches the active filters.
    Results themselves stay until overwritten.
    """

    def __init__(self, filters: FilterSet | None = None):
        self._lock = threading.Lock()
        self._filters = filters or DEFAULT_FILTERS
        self._results: dict[Category, NormalizedResult | None] = {c: None for c in Category}
        # Query.dedupe_key() the cached result was produced for
        self._result_keys: dict[Category, tuple | None] = {c: None for c in Category}
        self._searched: dict[Category, bool] = {c: False for c in Category}
        self._current_query = ""
        self._active_category = Category.ALL

    def get(self, category: Category | str) -> CachedEntry:
        slot = Category(category)
        with self._lock:
            return CachedEntry(result=self._results[slot], searched=self._searched[slot])

    def set(
        self, category: Category | str, result: NormalizedResult, query_key: tuple | None = None
    ) -> None:
        """Overwrite ``category``'s result; ``query_key`` records which query produced it."""
        slot = Category(category)
        with self._lock:
            self._results[slot] = result
            self._result_keys[slot] = query_key

    def clear(self, category: Category | str) -> None:
        """Drop ``category``'s result; the searched flag is left alone."""
        slot = Category(category)
        with self._lock:
            self._results[slot] = None
            self._result_keys[slot] = None

    def mark_searched(self, category: Category | str, searched: bool) -> None:
        slot = Category(category)
        with self._lock:
            self._searched[slot] = searched

    def is_searched(self, category: Category | str) -> bool:
        slot = Category(category)
        with self._lock:
            return self._searched[slot]

    def is_fresh(self, category: Category | str, query_key: tuple) -> bool:
        """
        True when ``category`` is searched and its result was produced for exactly ``query_key``.

        The key is ``Query.dedupe_key()``: text, follow-up flag, filters and
        deep research options all have to match.
        """
        slot = Category(category)
        with self._lock:
            return (
                self._searched[slot]
                and self._results[slot] is not None
                and self._result_keys[slot] == query_key
            )

    @property
    def filters(self) -> FilterSet:
        with self._lock:
            return self._filters

    def set_filters(self, partial: dict[str, Any]) -> FilterSet:
        """
        Merge ``partial`` into the active filters and invalidate every category.

        Raises:
            ValueError: unknown filter keys or invalid values; nothing changes
        """
        with self._lock:
            self._filters = self._filters.merged(partial)
            self._reset_searched()
            return self._filters

    def reset_filters(self) -> FilterSet:
        with self._lock:
            self._filters = DEFAULT_FILTERS
            self._reset_searched()
            return self._filters

    def _reset_searched(self) -> None:
        self._searched = {c: False for c in Category}

    @property
    def current_query(self) -> str:
        with self._lock:
            return self._current_query

    def set_current_query(self, text: str) -> None:
        with self._lock:
            self._current_query = text

    @property
    def active_category(self) -> Category:
        with self._lock:
            return self._active_category

    def set_active_category(self, category: Category | str) -> None:
        key = Category(category)
        with self._lock:
            self._active_category = key

    def searched_categories(self) -> dict[str, bool]:
        with self._lock:
            return {c.value: flag for c, flag in self._searched.items()}
