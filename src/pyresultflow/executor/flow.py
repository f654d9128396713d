"""
Flow - deferred, immutable, re-evaluable fallible computation.

A Flow describes a sequence of steps that may fail. Nothing runs when the
Flow is built; every call to run() evaluates it from scratch and produces
exactly one returns.result.Result (or raises, if user code faults).

Design Pattern: Decorator Pattern
Every combinator wraps the receiver in a new Flow whose evaluation runs the
receiver and post-processes its Result. The receiver is never altered and
stays independently evaluable.

Example:
    ```python
    from returns.result import Failure, Success

    update_user = Flow.of(update_user_builder)

    result = await (
        update_user
        .map(lambda user: user["id"])
        .if_failure(lambda error: logger.warning(f"update failed: {error}"))
        .retry_policy(max_retries=2, condition=lambda e: e["reason"] == "timeout")
        .run(context=request_context)
    )
    ```
"""

import inspect
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from returns.pipeline import is_successful
from returns.primitives.reawaitable import ReAwaitable
from returns.result import Failure, Result, Success

from pyresultflow.core.context import flow_context
from pyresultflow.executor.helpers import StepHelpers
from pyresultflow.executor.outcome import _StepFailed
from pyresultflow.executor.periodic import PeriodicHandle, PeriodicSession
from pyresultflow.executor.retry import evaluate_with_retry
from pyresultflow.executor.steps import resolve
from pyresultflow.executor.timer import Timer
from pyresultflow.models import PeriodicInterruption, RetryPolicy

logger = logging.getLogger(__name__)

__all__ = ["Flow"]

A = TypeVar("A")  # Success type
E = TypeVar("E")  # Failure type
C = TypeVar("C")  # Context type
A2 = TypeVar("A2")
E2 = TypeVar("E2")

Evaluation = Callable[[Any], Awaitable[Result]]
Builder = Callable[[StepHelpers, Any], Awaitable[Any]]


def _describe(function: Any) -> str:
    return getattr(function, "__qualname__", None) or type(function).__name__


async def _call(function: Callable[..., Any], *args: Any) -> Any:
    outcome = function(*args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


@dataclass(frozen=True, eq=False, repr=False)
class Flow(Generic[A, E, C]):
    """
    A not-yet-executed computation producing Result[A, E].

    Build flows with Flow.of(), Flow.from_()/Flow.lift() or Flow.gen(),
    never with the constructor directly.

    Attributes:
        name: Label used in logs and repr (derived from the builder)
    """

    _evaluate: Evaluation
    name: str = "flow"

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def of(cls, builder: Builder, name: str | None = None) -> "Flow[A, E, C]":
        """
        Create a flow from a builder function.

        The builder receives fresh StepHelpers and the context on every run:

            async def builder(steps: StepHelpers, context: C) -> A

        It is not invoked here.

        Example:
            ```python
            async def update_user(steps, context):
                user = await steps.try_to(context.repo.find_by_id(1))
                await steps.try_to(validate(user))
                return await steps.try_to(context.repo.update_by_id(user["id"], payload))

            flow = Flow.of(update_user)
            ```
        """
        label = name or _describe(builder)

        async def evaluate(context: Any) -> Result:
            helpers = StepHelpers(context)
            try:
                value = await _call(builder, helpers, context)
            except _StepFailed as signal:
                if signal.owner is not helpers:
                    raise
                logger.debug(f"{label}: short-circuited with {signal.failure!r}")
                return signal.failure
            return Success(value)

        return cls(evaluate, label)

    @classmethod
    def from_(cls, value: Any, name: str | None = None) -> "Flow[A, E, C]":
        """
        Lift a Result, async Result, Flow, or zero-argument thunk into a flow.

        A thunk is called at evaluation time, once per run(). A bare coroutine
        can only produce one value, so it is awaited once and its Result is
        replayed by later runs; pass a thunk when every run must re-execute.

        Example:
            ```python
            Flow.from_(Success(1))
            Flow.from_(lambda: repository.find_by_id(1))
            ```
        """
        if inspect.iscoroutine(value):
            value = ReAwaitable(value)

        async def builder(steps: StepHelpers, context: Any) -> Any:
            return await steps.try_to(value)

        return cls.of(builder, name or f"from({_describe(value)})")

    @classmethod
    def lift(cls, value: Any, name: str | None = None) -> "Flow[A, E, C]":
        """Alias for from_()."""
        return cls.from_(value, name)

    @classmethod
    def success(cls, value: A) -> "Flow[A, Any, C]":
        """Flow that always succeeds with value."""
        return cls.from_(Success(value), name="success")

    @classmethod
    def failure(cls, error: E) -> "Flow[Any, E, C]":
        """Flow that always fails with error."""
        return cls.from_(Failure(error), name="failure")

    @classmethod
    def gen(
        cls, factory: Callable[[Any], Generator[Any, Any, A]], name: str | None = None
    ) -> "Flow[A, E, C]":
        """
        Create a flow from a generator that yields steps.

        Each yielded step-like (Result, awaitable, Flow, thunk) is evaluated
        and its success value is sent back into the generator. The first
        failed step ends the evaluation: the generator is closed and that
        Failure becomes the outcome. The generator's return value is the
        success value.

        The factory may also be an async generator function, which can await
        between yields. It cannot return a value, so the success value of
        the last yielded step becomes the flow's value (None if it yields
        nothing).

        Example:
            ```python
            def update_user(context):
                user = yield context.repo.find_by_id(1)
                yield validate(user)
                return (yield context.repo.update_by_id(user["id"], payload))

            flow = Flow.gen(update_user)
            ```
        """
        label = name or _describe(factory)

        async def evaluate(context: Any) -> Result:
            generator = factory(context)
            if inspect.isasyncgen(generator):
                return await _drive_async(generator, context)

            sent: Any = None
            try:
                while True:
                    try:
                        step = generator.send(sent)
                    except StopIteration as stop:
                        return Success(stop.value)

                    result = await resolve(step, context)
                    if not is_successful(result):
                        logger.debug(f"{label}: short-circuited with {result!r}")
                        return result
                    sent = result.unwrap()
            finally:
                generator.close()

        async def _drive_async(generator: AsyncGenerator[Any, Any], context: Any) -> Result:
            # Async generators cannot return a value: the last yielded
            # step's success value is the flow's value.
            sent: Any = None
            try:
                while True:
                    try:
                        step = await generator.asend(sent)
                    except StopAsyncIteration:
                        return Success(sent)

                    result = await resolve(step, context)
                    if not is_successful(result):
                        logger.debug(f"{label}: short-circuited with {result!r}")
                        return result
                    sent = result.unwrap()
            finally:
                await generator.aclose()

        return cls(evaluate, label)

    @staticmethod
    def is_flow(value: Any) -> bool:
        """Return True if value is a Flow."""
        return isinstance(value, Flow)

    # =========================================================================
    # Evaluation
    # =========================================================================

    async def run(self, context: C | None = None) -> Result[A, E]:
        """
        Evaluate the flow.

        The context is published through FLOW_CONTEXT for the duration of
        the evaluation. Nothing is cached: each call re-executes every step.

        Returns:
            Success(value) if the flow completed, Failure(error) if a step failed

        Raises:
            Any exception raised by user code that is not a step failure
        """
        with flow_context(context):
            return await self._evaluate(context)

    # =========================================================================
    # Combinators
    # =========================================================================

    def _derive(self, evaluate: Evaluation, label: str) -> "Flow":
        return Flow(evaluate, f"{self.name}.{label}")

    def map(self, f: Callable[[A], A2]) -> "Flow[A2, E, C]":
        """
        Transform the success value. Failures pass through unexamined.

        f receives only the value; call get_current_context() for the context.
        """

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if not is_successful(result):
                return result
            return Success(f(result.unwrap()))

        return self._derive(evaluate, "map")

    def map_error(self, f: Callable[[E], E2]) -> "Flow[A, E2, C]":
        """Transform the failure value. Successes pass through unchanged."""

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if is_successful(result):
                return result
            return Failure(f(result.failure()))

        return self._derive(evaluate, "map_error")

    def chain(self, f: Callable[[A], Any]) -> "Flow[A2, E | E2, C]":
        """
        Continue with another step built from the success value.

        f may return a Result, an async Result or a Flow; the chained flow's
        outcome is that step's outcome. On failure f is never called.
        The context is available inside f through get_current_context().
        """

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if not is_successful(result):
                return result
            return await resolve(f(result.unwrap()), context)

        return self._derive(evaluate, "chain")

    def if_success(self, f: Callable[[A], Any]) -> "Flow[A, E, C]":
        """Call f(value) for its side effect on success. The outcome is unchanged."""

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if is_successful(result):
                await _call(f, result.unwrap())
            return result

        return self._derive(evaluate, "if_success")

    def if_failure(self, f: Callable[[E], Any]) -> "Flow[A, E, C]":
        """Call f(error) for its side effect on failure. The flow stays failed."""

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if not is_successful(result):
                await _call(f, result.failure())
            return result

        return self._derive(evaluate, "if_failure")

    def or_else(self, alternative: Callable[[E], Any]) -> "Flow[A, E2, C]":
        """
        Replace a failure with the outcome of alternative(error).

        alternative may return a Result, an async Result or a Flow. On
        success it is never called. The context is available inside
        alternative through get_current_context().
        """

        async def evaluate(context: Any) -> Result:
            result = await self.run(context)
            if is_successful(result):
                return result
            return await resolve(alternative(result.failure()), context)

        return self._derive(evaluate, "or_else")

    # =========================================================================
    # Policies
    # =========================================================================

    def retry_policy(self, policy: RetryPolicy | None = None, **overrides: Any) -> "Flow[A, E, C]":
        """
        Re-run the flow on failure according to a RetryPolicy.

        Args:
            policy: Base policy (RetryPolicy() if omitted)
            **overrides: Field overrides (condition, before_retry, max_retries,
                         delay_strategy)

        Example:
            ```python
            flow.retry_policy(RetryPolicy.STANDARD)
            flow.retry_policy(max_retries=3, delay_strategy=ExponentialBackoff(0.1, 2.0))
            ```
        """
        policy = policy or RetryPolicy()
        if overrides:
            policy = replace(policy, **overrides)

        async def evaluate(context: Any) -> Result:
            return await evaluate_with_retry(self, policy, context)

        return self._derive(evaluate, "retry")

    def run_periodically(
        self,
        interval: float,
        *,
        recovery_action: Callable[[E], Any] | None = None,
        on_interruption: Callable[[PeriodicInterruption], Any] | None = None,
        context: C | None = None,
        max_recoveries: int | None = None,
        timer: Timer | None = None,
    ) -> PeriodicHandle:
        """
        Evaluate the flow every `interval` seconds until it fails or is interrupted.

        Returns immediately, before the first evaluation. The next tick is
        armed only after the current evaluation (and any recovery) finishes,
        so ticks run at a fixed delay and the cadence drifts by the time each
        evaluation takes. See PeriodicSession for the full state machine.

        Example:
            ```python
            handle = health_check.run_periodically(
                interval=30.0,
                recovery_action=lambda error: restart_service(error),
                on_interruption=lambda event: logger.warning(f"stopped: {event}"),
            )
            ...
            handle.interrupt()
            ```
        """
        session = PeriodicSession(
            self,
            interval,
            recovery_action=recovery_action,
            on_interruption=on_interruption,
            context=context,
            max_recoveries=max_recoveries,
            timer=timer,
        )
        return session.start()

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return f"Flow(name={self.name!r})"
