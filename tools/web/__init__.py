"""Session-scoped search state: result caches and type-ahead suggestions."""

from .result_cache import EMPTY_ENTRY, CachedEntry, ResultCacheStore
from .session_registry import SessionStoreRegistry
from .suggestions import SuggestionService

__all__ = [
    "EMPTY_ENTRY",
    "CachedEntry",
    "ResultCacheStore",
    "SessionStoreRegistry",
    "SuggestionService",
]
