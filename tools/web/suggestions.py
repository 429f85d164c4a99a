"""Type-ahead suggestions behind a keystroke debouncer."""

import asyncio

from api.search_client import SuggestionClient
from utils.debouncer import DEFAULT_DELAY_S, Debouncer
from utils.logger import get_logger

logger = get_logger(__name__)


class SuggestionService:
    """
    Suggestion lookups for one input box.

    ``suggest`` queries immediately; ``suggest_debounced`` waits for a quiet
    period so a burst of keystrokes costs one request.
    """

    def __init__(self, client: SuggestionClient, delay_s: float = DEFAULT_DELAY_S):
        self.client = client
        self._debouncer = Debouncer(self.suggest, delay_s=delay_s)

    async def suggest(self, text: str) -> list[str]:
        try:
            return await self.client.suggest(text)
        except Exception as e:
            logger.error(f"Suggestion lookup error: {e}", exc_info=True)
            return []

    def suggest_debounced(self, text: str) -> asyncio.Future:
        return self._debouncer.trigger(text)

    def cancel(self) -> None:
        self._debouncer.cancel()
