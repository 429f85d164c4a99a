import asyncio
import json

from orchestrator.degradation_types import ProviderResponse
from utils.logger import get_logger

from .base_client import BaseSearchClient

logger = get_logger(__name__)

SEARCH_PATH = "/api/search"
SUGGESTIONS_PATH = "/api/search/suggestions"
MIN_SUGGESTION_CHARS = 2


class CombinedSearchClient(BaseSearchClient):
    """AI answer + web results endpoint (Tier 1 and the no-tools Tier 2)."""

    provider_name = "combined"

    @property
    def path(self) -> str:
        return SEARCH_PATH

    async def search(
        self, params: dict[str, str], *, cancel: asyncio.Event | None = None
    ) -> ProviderResponse:
        logger.debug(
            "Combined search request",
            extra={"extra_fields": {"type": params.get("type"), "param_keys": sorted(params)}},
        )
        return await self._request(params, cancel)


class WebSearchClient(BaseSearchClient):
    """Web-results-only endpoint used by the Tier 3 fallback."""

    provider_name = "web"

    @property
    def path(self) -> str:
        return SEARCH_PATH

    async def search(
        self, params: dict[str, str], *, cancel: asyncio.Event | None = None
    ) -> ProviderResponse:
        return await self._request(params, cancel)


class SuggestionClient(BaseSearchClient):
    provider_name = "suggestions"

    @property
    def path(self) -> str:
        return SUGGESTIONS_PATH

    async def search(
        self, params: dict[str, str], *, cancel: asyncio.Event | None = None
    ) -> ProviderResponse:
        return await self._request(params, cancel)

    async def suggest(self, text: str) -> list[str]:
        """
        Fetch type-ahead suggestions.

        Returns an empty list for inputs shorter than two characters and for
        any failed lookup; suggestions are best effort.
        """
        if not text or len(text) < MIN_SUGGESTION_CHARS:
            return []

        response = await self.search({"q": text})
        if not response.ok:
            logger.warning(
                "Suggestion lookup failed",
                extra={"extra_fields": {"status": response.status}},
            )
            return []

        try:
            data = self._parse_list(response.text)
        except ValueError as exc:
            logger.warning(f"Suggestion body was not a JSON list: {exc}")
            return []
        return [str(item) for item in data if isinstance(item, str)]

    @staticmethod
    def _parse_list(text: str) -> list:
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("expected a list")
        return data
