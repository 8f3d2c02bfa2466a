"""Trailing-edge async debouncer for coalescing bursts of writes."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from src.utils.logging import get_logger

logger = get_logger(__name__)


class AsyncDebouncer:
    """Calls `callback` with the latest submitted arguments once `delay`
    seconds pass without a new submission.

    Must be used from within a running event loop. A call already in flight
    is never cancelled; newer arguments wait for the next quiet period.
    """

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]) -> None:
        self._delay = delay
        self._callback = callback
        self._pending: tuple[Any, ...] | None = None
        self._timer: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def submit(self, *args: Any) -> None:
        self._pending = args
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._fire_later())

    async def flush(self) -> None:
        """Run the pending call now instead of waiting for the quiet period."""
        self._cancel_timer()
        if self._inflight is not None:
            await asyncio.shield(self._inflight)
        await self._fire()

    async def cancel(self) -> None:
        self._pending = None
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _fire_later(self) -> None:
        await asyncio.sleep(self._delay)
        self._timer = None
        self._inflight = asyncio.current_task()
        try:
            await self._fire()
        except Exception as exc:
            logger.error("debounced_call_failed", error=str(exc))
        finally:
            self._inflight = None

    async def _fire(self) -> None:
        if self._pending is None:
            return
        args, self._pending = self._pending, None
        await self._callback(*args)
