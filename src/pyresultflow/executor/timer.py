"""
Timer primitives used by retries and periodic sessions.

From Dave Cheney's Practical Go:
"Leave concurrency to the caller" - wait() is async, letting the caller
decide whether to await it or run it concurrently.

Python Implementation:
- asyncio.sleep() for retry delays
- loop.call_later() for periodic ticks; the returned asyncio.TimerHandle
  is cancelable and a canceled handle never runs its callback
"""

import asyncio
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

__all__ = ["Timer", "LoopTimer", "wait"]


@runtime_checkable
class Timer(Protocol):
    """Schedules a one-shot callback and cancels it.

    Periodic sessions only need these two operations, so tests can pass a
    manual implementation that fires ticks on demand.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> Any:
        """Run callback once after delay seconds. Returns a handle for cancel()."""
        ...

    def cancel(self, handle: Any) -> None:
        """Prevent a scheduled callback from running. Canceling twice is harmless."""
        ...


class LoopTimer:
    """Timer backed by the asyncio event loop.

    Args:
        loop: Event loop to schedule on. Defaults to the running loop at
              schedule() time, so schedule() must be called from inside it.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def __repr__(self) -> str:
        return f"LoopTimer(loop={self._loop!r})"


async def wait(delay: float) -> None:
    """Suspend the current evaluation for delay seconds."""
    await asyncio.sleep(delay)
