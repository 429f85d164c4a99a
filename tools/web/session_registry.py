"""Per-session lifecycle for ResultCacheStore instances."""

import threading

from .result_cache import ResultCacheStore


class SessionStoreRegistry:
    """
    Thread-safe registry of one ResultCacheStore per session.

    A store is created on the session's first search and dropped on logout,
    so nothing is shared between sessions.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stores: dict[str, ResultCacheStore] = {}

    def get_or_create(self, session_id: str) -> ResultCacheStore:
        """
        Get the store for a session, creating an empty one if needed.

        Args:
            session_id: Session identifier

        Returns:
            The session's ResultCacheStore
        """
        with self._lock:
            store = self._stores.get(session_id)
            if store is None:
                store = ResultCacheStore()
                self._stores[session_id] = store
            return store

    def get(self, session_id: str) -> ResultCacheStore | None:
        with self._lock:
            return self._stores.get(session_id)

    def drop(self, session_id: str) -> bool:
        """
        Tear down a session's store (logout).

        Returns:
            True if a store existed
        """
        with self._lock:
            return self._stores.pop(session_id, None) is not None

    def clear_all(self) -> None:
        """Clear all session stores (for testing)."""
        with self._lock:
            self._stores.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._stores)
