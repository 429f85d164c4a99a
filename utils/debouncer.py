"""Asyncio debouncer for keystroke-driven lookups."""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

DEFAULT_DELAY_S = 0.3


class Debouncer:
    """
    Run ``func`` only after ``delay_s`` of quiet.

    Every ``trigger`` cancels the pending call and returns a future for the
    new one. Superseded futures are cancelled; the surviving future resolves
    with ``func``'s result (or its exception).
    """

    def __init__(self, func: Callable[..., Awaitable[Any]], delay_s: float = DEFAULT_DELAY_S):
        if delay_s < 0:
            raise ValueError("delay_s must not be negative")
        self._func = func
        self.delay_s = delay_s
        self._task: asyncio.Task | None = None
        self._future: asyncio.Future | None = None
        self._pending_args: tuple[tuple, dict] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args, **kwargs) -> asyncio.Future:
        self.cancel()
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._future = future
        self._pending_args = (args, kwargs)
        self._task = loop.create_task(self._run_later(future, args, kwargs))
        return future

    async def _run_later(self, future: asyncio.Future, args: tuple, kwargs: dict) -> None:
        await asyncio.sleep(self.delay_s)
        await self._invoke(future, args, kwargs)

    async def _invoke(self, future: asyncio.Future, args: tuple, kwargs: dict) -> None:
        self._pending_args = None
        try:
            result = await self._func(*args, **kwargs)
        except asyncio.CancelledError:
            if not future.done():
                future.cancel()
            raise
        except Exception as exc:
            if not future.done():
                future.set_exception(exc)
        else:
            if not future.done():
                future.set_result(result)

    def cancel(self) -> None:
        """Drop the pending call, cancelling its future."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if self._future is not None and not self._future.done():
            self._future.cancel()
        self._task = None
        self._future = None
        self._pending_args = None

    async def flush(self) -> Any:
        """Run the pending call now instead of waiting out the delay."""
        if self._pending_args is None or self._future is None:
            return None
        args, kwargs = self._pending_args
        future = self._future
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        await self._invoke(future, args, kwargs)
        return await future
