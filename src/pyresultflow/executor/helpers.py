"""Step helpers handed to Flow.of() builders.

A fresh StepHelpers is created for every run(). It knows the context of that
evaluation and raises the short-circuit signal tagged with itself, so the
run() that created it is the one that converts the signal into a Failure.
"""

from collections.abc import Callable
from typing import Any, NoReturn

from returns.pipeline import is_successful
from returns.result import Failure

from pyresultflow.executor.outcome import _StepFailed
from pyresultflow.executor.steps import map_error as map_step_error
from pyresultflow.executor.steps import resolve

__all__ = ["StepHelpers"]


class StepHelpers:
    """Helpers available inside a builder: try_to(), fail(), map_error().

    Usage:
        ```python
        async def checkout(steps: StepHelpers, context: Shop) -> Order:
            cart = await steps.try_to(context.carts.find(context.user_id))
            if not cart.items:
                steps.fail({"reason": "empty-cart"})
            return await steps.try_to(
                context.orders.create(cart),
                map_error=lambda e: {"reason": "order-failed", "cause": e},
            )
        ```
    """

    __slots__ = ("_context",)

    def __init__(self, context: Any = None):
        self._context = context

    @property
    def context(self) -> Any:
        """Context passed to the run() that owns these helpers."""
        return self._context

    async def try_to(self, value: Any, map_error: Callable[[Any], Any] | None = None) -> Any:
        """
        Unwrap a step's success value, or stop the builder on failure.

        Args:
            value: Result, IOResult, awaitable of either, Flow, or a thunk returning one
            map_error: Optional transformation applied to the failure before stopping

        Returns:
            The success value

        Raises:
            _StepFailed: Internal signal, caught by the owning run()
        """
        result = await resolve(value, self._context)

        if is_successful(result):
            return result.unwrap()

        error = result.failure()
        if map_error is not None:
            error = map_error(error)
        raise _StepFailed(Failure(error), owner=self)

    def fail(self, error: Any) -> NoReturn:
        """Stop the builder with the given failure. Never returns."""
        raise _StepFailed(Failure(error), owner=self)

    async def map_error(self, value: Any, mapper: Callable[[Any], Any]) -> Any:
        """Resolve a step and map its failure without stopping the builder."""
        return await map_step_error(value, mapper, self._context)

    def __repr__(self) -> str:
        return f"StepHelpers(context={self._context!r})"
