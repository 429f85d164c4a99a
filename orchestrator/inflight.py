import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

from utils.logger import get_logger

logger = get_logger(__name__)


class InFlightSearches:
    """
    Collapse concurrent identical searches onto one running task.

    The first caller for a key starts the task; later callers with the same
    key await it. Each caller awaits through ``asyncio.shield`` so one caller
    going away does not cancel the search for the others.
    """

    def __init__(self):
        self._tasks: dict[Hashable, asyncio.Task] = {}

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda t, k=key: self._discard(k, t))
        else:
            logger.info("Joining in-flight search", extra={"extra_fields": {"key": str(key)}})
        return await asyncio.shield(task)

    def _discard(self, key: Hashable, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # mark the outcome retrieved even when every caller has gone away
        if not task.cancelled():
            task.exception()

    def is_in_flight(self, key: Hashable) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
