from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

SEARCH_DEBOUNCE_SECONDS = 0.5


class Debouncer:
    """Only the most recently scheduled call fires; scheduling again cancels the pending one."""

    def __init__(self, delay: float = SEARCH_DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    def schedule(self, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, callback, args)
        return self._handle

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        result = callback(*args)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for callbacks that already fired and returned coroutines."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
