"""
SearchService - the caller side of the orchestrator.

Builds queries against a session's active filters, serves fresh cached
results, de-duplicates identical in-flight searches, cancels superseded ones
and writes completed results back into the session's ResultCacheStore.
"""

import asyncio
from dataclasses import dataclass

from models.normalized_result import NormalizedResult
from models.search_types import Category, DeepResearchOptions, Query
from orchestrator.degradation_types import SearchFailedError
from orchestrator.inflight import InFlightSearches
from orchestrator.search_orchestrator import SearchOrchestrator
from tools.web.session_registry import SessionStoreRegistry
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    result: NormalizedResult
    cache_hit: bool = False


class SearchService:
    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        registry: SessionStoreRegistry,
        inflight: InFlightSearches | None = None,
    ):
        self.orchestrator = orchestrator
        self.registry = registry
        self._inflight = inflight or InFlightSearches()
        # (session_id, category) -> (dedupe key, cancel event) of the latest search
        self._pending: dict[tuple[str, Category], tuple[tuple, asyncio.Event]] = {}

    async def search(
        self,
        session_id: str,
        text: str,
        category: Category | str = Category.ALL,
        *,
        is_follow_up: bool = False,
        deep_research: DeepResearchOptions | None = None,
        refresh: bool = False,
    ) -> SearchOutcome:
        """
        Search ``text`` in ``category`` for a session.

        Args:
            session_id: Session whose cache and filters apply
            text: Query text
            category: Result category (cache key)
            is_follow_up: Follow-up to the previous question
            deep_research: Deep research options, or None
            refresh: Ignore a fresh cached result (manual retry)

        Raises:
            ValueError: invalid query text or category
            SearchFailedError: every tier failed; the category is marked searched
            SearchCancelledError: a newer search for the same category superseded this one
        """
        store = self.registry.get_or_create(session_id)
        query = Query(
            text=text,
            category=Category(category),
            is_follow_up=is_follow_up,
            filters=store.filters,
            deep_research=deep_research,
        )
        store.set_current_query(query.text)
        store.set_active_category(query.category)

        if refresh:
            store.mark_searched(query.category, False)
        elif store.is_fresh(query.category, query.dedupe_key()):
            logger.info(
                "Serving cached search result",
                extra={"extra_fields": {"session_id": session_id, "category": query.category.value}},
            )
            return SearchOutcome(result=store.get(query.category).result, cache_hit=True)

        key = (session_id, *query.dedupe_key())
        cancel = self._supersede(session_id, query.category, key)

        try:
            result = await self._inflight.run(key, lambda: self.orchestrator.search(query, cancel=cancel))
        except SearchFailedError:
            # the old result no longer answers the active filters or query
            store.clear(query.category)
            store.mark_searched(query.category, True)
            raise
        finally:
            self._release(session_id, query.category, key)

        if store.filters != query.filters:
            # filters changed mid-flight; the result no longer matches them
            logger.info(
                "Discarding result for outdated filters",
                extra={"extra_fields": {"session_id": session_id, "category": query.category.value}},
            )
            return SearchOutcome(result=result)

        store.set(query.category, result, query_key=query.dedupe_key())
        store.mark_searched(query.category, True)
        return SearchOutcome(result=result)

    def _supersede(self, session_id: str, category: Category, key: tuple) -> asyncio.Event:
        slot = (session_id, category)
        previous = self._pending.get(slot)
        if previous is not None:
            previous_key, previous_event = previous
            if previous_key == key:
                return previous_event
            previous_event.set()
            logger.info(
                "Cancelling superseded search",
                extra={"extra_fields": {"session_id": session_id, "category": category.value}},
            )
        event = asyncio.Event()
        self._pending[slot] = (key, event)
        return event

    def _release(self, session_id: str, category: Category, key: tuple) -> None:
        slot = (session_id, category)
        current = self._pending.get(slot)
        if current is not None and current[0] == key and not self._inflight.is_in_flight(key):
            del self._pending[slot]

    def end_session(self, session_id: str) -> bool:
        """Cancel a session's pending searches and drop its cache (logout)."""
        for slot in [s for s in self._pending if s[0] == session_id]:
            self._pending.pop(slot)[1].set()
        return self.registry.drop(session_id)
