"""
Step normalization.

Every place that accepts "something that produces a result" (try_to,
Flow.from_, chain, or_else, recovery actions) funnels its input through
to_step(), which classifies it once into a closed variant:

    ResultStep     a Result (or IOResult) that is already available
    AwaitableStep  a coroutine, future or FutureResult producing one
    FlowStep       a Flow, run with the caller's context

Zero-argument callables (thunks) are invoked by to_step() and their return
value is classified in turn. resolve_step() then evaluates a Step into a
plain returns.result.Result.

Example:
    ```python
    step = to_step(repository.find_by_id(1))   # AwaitableStep
    result = await resolve_step(step, context)  # Success(user) | Failure(...)
    ```
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from returns.io import IOResult
from returns.result import Result
from returns.unsafe import unsafe_perform_io

from pyresultflow.core.errors import UnsupportedStepError

if TYPE_CHECKING:
    from pyresultflow.executor.flow import Flow

__all__ = [
    "ResultStep",
    "AwaitableStep",
    "FlowStep",
    "Step",
    "to_step",
    "resolve_step",
    "resolve",
    "map_error",
]


@dataclass(frozen=True)
class ResultStep:
    """A result that is already available."""

    result: Result | IOResult


@dataclass(frozen=True)
class AwaitableStep:
    """An awaitable producing a Result or IOResult."""

    awaitable: Awaitable[Any]


@dataclass(frozen=True)
class FlowStep:
    """A Flow, evaluated with the surrounding context."""

    flow: Flow


Step = ResultStep | AwaitableStep | FlowStep


def _is_flow(value: Any) -> bool:
    # Deferred import: flow.py depends on this module
    from pyresultflow.executor.flow import Flow

    return Flow.is_flow(value)


def _classify(value: Any) -> Step | None:
    if isinstance(value, (ResultStep, AwaitableStep, FlowStep)):
        return value
    if _is_flow(value):
        return FlowStep(value)
    if isinstance(value, (Result, IOResult)):
        return ResultStep(value)
    if inspect.isawaitable(value):
        return AwaitableStep(value)
    return None


def to_step(value: Any) -> Step:
    """
    Classify a step-like value into the closed Step variant.

    Args:
        value: Result, IOResult, awaitable, Flow, or a zero-argument callable
               returning one of those

    Returns:
        The matching Step

    Raises:
        UnsupportedStepError: If value (or what the thunk returned) is none of the above
    """
    step = _classify(value)
    if step is not None:
        return step

    if callable(value):
        produced = value()
        step = _classify(produced)
        if step is not None:
            return step
        raise UnsupportedStepError(produced)

    raise UnsupportedStepError(value)


def _as_result(value: Any) -> Result:
    if isinstance(value, Result):
        return value
    if isinstance(value, IOResult):
        return unsafe_perform_io(value)
    raise UnsupportedStepError(value)


async def resolve_step(step: Step, context: Any = None) -> Result:
    """
    Evaluate a Step into a Result.

    Flows are run with the given context. An awaitable that produces a Flow
    has that Flow run as well.
    """
    match step:
        case ResultStep(result=result):
            return _as_result(result)
        case AwaitableStep(awaitable=awaitable):
            produced = await awaitable
            if _is_flow(produced):
                return await produced.run(context)
            return _as_result(produced)
        case FlowStep(flow=flow):
            return await flow.run(context)

    raise UnsupportedStepError(step)


async def resolve(value: Any, context: Any = None) -> Result:
    """Shorthand for resolve_step(to_step(value), context)."""
    return await resolve_step(to_step(value), context)


async def map_error(value: Any, mapper: Callable[[Any], Any], context: Any = None) -> Result:
    """
    Resolve a step-like value and transform its failure, if any.

    Unlike StepHelpers.try_to(..., map_error=...), this never interrupts the
    builder: the mapped Result is returned to the caller.
    """
    result = await resolve(value, context)
    return result.alt(mapper)
