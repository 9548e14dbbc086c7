from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class Debouncer(Generic[T]):
    """Trailing-edge debounce on the running event loop.

    Every `push` restarts the timer. The callback only sees the value that was
    stable for `delay_ms`; intermediate values are dropped.
    """

    def __init__(self, delay_ms: int, callback: Callable[[T], Awaitable[Any] | Any]) -> None:
        self.delay_ms = max(0, delay_ms)
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._pending: Any = _UNSET
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not _UNSET

    def push(self, value: T) -> None:
        self._cancel_timer()
        self._pending = value
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire)

    def flush(self) -> None:
        if self.pending:
            self._cancel_timer()
            self._fire()

    def cancel(self) -> None:
        self._cancel_timer()
        self._pending = _UNSET

    async def join(self) -> None:
        """Waits for a pending value to fire and for every callback task it started."""
        while self.pending or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self.delay_ms / 1000)

    def _fire(self) -> None:
        self._handle = None
        value, self._pending = self._pending, _UNSET
        if value is _UNSET:
            return
        result = self._callback(value)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
