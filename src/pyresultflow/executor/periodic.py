"""Periodic supervisor behind Flow.run_periodically().

A PeriodicSession evaluates a flow every `interval` seconds until it fails
(and recovery does not heal it) or the caller interrupts it.

State machine:
    RUNNING → STOPPED   flow failed, no recovery / recovery failed / fault
    RUNNING → ABORTED   handle.interrupt()

The next tick is armed only once the current evaluation (and its recovery)
has finished, so two evaluations of one session never overlap. The timer
handle and the in-flight tick task are owned by the session and touched only
from the event loop thread.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from returns.pipeline import is_successful

from pyresultflow.core.errors import FlowConfigurationError
from pyresultflow.executor.steps import resolve
from pyresultflow.executor.timer import LoopTimer, Timer
from pyresultflow.models import PeriodicInterruption

if TYPE_CHECKING:
    from pyresultflow.executor.flow import Flow

logger = logging.getLogger(__name__)

__all__ = ["PeriodicSession", "PeriodicHandle", "SessionState"]


class SessionState(Enum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    ABORTED = "ABORTED"

    @property
    def is_terminal(self) -> bool:
        return self != SessionState.RUNNING

    def __str__(self) -> str:
        return self.value


class PeriodicSession:
    """One active periodic execution of a flow.

    Usage:
        ```python
        session = PeriodicSession(health_check, interval=5.0, on_interruption=report)
        handle = session.start()
        ...
        handle.interrupt()
        ```

    Args:
        flow: Flow evaluated on every tick
        interval: Seconds between the end of one evaluation and the next tick
        recovery_action: Called with the failure; its step-like outcome decides
                         whether the session continues
        on_interruption: Called once with a PeriodicInterruption when the session ends
        context: Context captured for every evaluation of this session
        max_recoveries: Consecutive recoveries allowed before a failure stops
                        the session outright (None = unbounded)
        timer: Timer used to schedule ticks (LoopTimer by default)
    """

    def __init__(
        self,
        flow: "Flow",
        interval: float,
        *,
        recovery_action: Callable[[Any], Any] | None = None,
        on_interruption: Callable[[PeriodicInterruption], Any] | None = None,
        context: Any = None,
        max_recoveries: int | None = None,
        timer: Timer | None = None,
    ):
        if interval <= 0:
            raise FlowConfigurationError(f"interval must be positive, got {interval}")
        if max_recoveries is not None and max_recoveries < 0:
            raise FlowConfigurationError(
                f"max_recoveries must be non-negative or None, got {max_recoveries}"
            )

        self._flow = flow
        self._interval = interval
        self._recovery_action = recovery_action
        self._on_interruption = on_interruption
        self._context = context
        self._max_recoveries = max_recoveries
        self._timer = timer or LoopTimer()

        self._state = SessionState.RUNNING
        self._timer_handle: Any = None
        self._tick_task: asyncio.Task | None = None
        self._consecutive_recoveries = 0
        self._ticks = 0

        # Keep references to callback tasks so they are not garbage collected
        self._background_tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    def start(self) -> "PeriodicHandle":
        """Arm the first tick and return the caller's handle. Evaluates nothing yet."""
        logger.info(f"{self._flow.name}: periodic session started (interval {self._interval}s)")
        self._arm()
        return PeriodicHandle(self)

    def interrupt(self) -> None:
        """Abort the session. No-op once the session is terminal."""
        if self._state.is_terminal:
            return

        self._state = SessionState.ABORTED
        self._disarm()
        logger.info(f"{self._flow.name}: periodic session aborted after {self._ticks} ticks")
        self._notify(PeriodicInterruption.aborted())

    def _arm(self) -> None:
        self._timer_handle = self._timer.schedule(self._interval, self._on_tick)
        logger.debug(f"{self._flow.name}: next tick in {self._interval}s")

    def _disarm(self) -> None:
        if self._timer_handle is not None:
            self._timer.cancel(self._timer_handle)
            self._timer_handle = None

    def _on_tick(self) -> None:
        self._timer_handle = None
        if self._state.is_terminal:
            return

        self._ticks += 1
        self._tick_task = asyncio.ensure_future(self._evaluate())

    async def _evaluate(self) -> None:
        try:
            await self._tick()
        except Exception as e:
            if self._state.is_terminal:
                logger.exception(f"{self._flow.name}: fault after session ended")
                return
            logger.exception(f"{self._flow.name}: periodic session stopped by fault")
            self._stop(PeriodicInterruption.fault(e))

    async def _tick(self) -> None:
        result = await self._flow.run(self._context)
        if self._state.is_terminal:
            return

        if is_successful(result):
            self._consecutive_recoveries = 0
            self._arm()
            return

        error = result.failure()

        if self._recovery_action is None or self._recoveries_exhausted():
            self._stop(PeriodicInterruption.failure(error))
            return

        recovery = await resolve(self._recovery_action(error), self._context)
        if self._state.is_terminal:
            return

        if is_successful(recovery):
            self._consecutive_recoveries += 1
            logger.info(f"{self._flow.name}: recovered from failure {error!r}")
            self._arm()
            return

        self._stop(PeriodicInterruption.failure(error, recovery.failure()))

    def _recoveries_exhausted(self) -> bool:
        return (
            self._max_recoveries is not None
            and self._consecutive_recoveries >= self._max_recoveries
        )

    def _stop(self, interruption: PeriodicInterruption) -> None:
        self._state = SessionState.STOPPED
        self._disarm()
        logger.warning(f"{self._flow.name}: periodic session stopped: {interruption}")
        self._notify(interruption)

    def _notify(self, interruption: PeriodicInterruption) -> None:
        if self._on_interruption is None:
            return

        outcome = self._on_interruption(interruption)
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._background_tasks.add(task)
            task.add_done_callback(self._background_tasks.discard)

    def __repr__(self) -> str:
        return (
            f"PeriodicSession(flow={self._flow.name!r}, interval={self._interval}, "
            f"state={self._state}, ticks={self._ticks})"
        )


class PeriodicHandle:
    """Handle for stopping a periodic session.

    Composition - handle HAS-A session, exposing only cancellation.

    Usage:
        handle = flow.run_periodically(interval=1.0)
        handle.interrupt()
    """

    __slots__ = ("_session",)

    def __init__(self, session: PeriodicSession):
        self._session = session

    def interrupt(self) -> None:
        """Stop the session before its next tick. Safe to call more than once."""
        self._session.interrupt()
