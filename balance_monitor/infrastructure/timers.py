"""
Recurring timers for the monitor scheduler.

The scheduler only depends on the `TimerFactory` / `TimerHandle` protocols so
tests can drive ticks by hand instead of waiting on the wall clock. The
asyncio implementation runs one task per timer: sleep for the interval, await
the callback, repeat.

Cancelling a timer never interrupts a callback that is already running; the
loop exits once that callback returns.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

from balance_monitor.utils.logging import get_logger

log = get_logger(__name__)

TickCallback = Callable[[], Awaitable[object]]


class TimerHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class TimerFactory(Protocol):
    def call_every(self, interval_seconds: float, callback: TickCallback, name: str) -> TimerHandle:
        """Arm a recurring timer; the first call happens after one interval."""
        ...


class AsyncioTimer:
    def __init__(self, interval_seconds: float, callback: TickCallback, name: str) -> None:
        self.interval_seconds = interval_seconds
        self.name = name
        self._callback = callback
        self._cancelled = False
        self._in_callback = False
        self._task: Optional[asyncio.Task[None]] = asyncio.get_running_loop().create_task(
            self._run(), name=f"timer:{name}"
        )

    @property
    def active(self) -> bool:
        return not self._cancelled and self._task is not None and not self._task.done()

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._in_callback:
            self._task.cancel()

    async def _run(self) -> None:
        while not self._cancelled:
            await asyncio.sleep(self.interval_seconds)
            if self._cancelled:
                break
            self._in_callback = True
            try:
                await self._callback()
            except Exception:  # noqa: BLE001 - a failing tick must not end the timer
                log.exception(f"Timer callback failed: {self.name}", extra={"timer": self.name})
            finally:
                self._in_callback = False


class AsyncioTimerFactory:
    """Default factory; must be used from inside a running event loop."""

    def call_every(self, interval_seconds: float, callback: TickCallback, name: str) -> AsyncioTimer:
        return AsyncioTimer(interval_seconds, callback, name)


__all__ = ["AsyncioTimer", "AsyncioTimerFactory", "TickCallback", "TimerFactory", "TimerHandle"]
