"""Task-local flow context.

Publishes the context value passed to Flow.run() for the duration of that
evaluation, so combinator callbacks can read it without it being threaded
through every function signature. Uses contextvars for task-local storage,
allowing multiple flows to be evaluated concurrently without interference.

Design: Read-Only Ambient Value
    The context is opaque to this package. It is set once per run() and
    reset afterwards; nothing in the package mutates it.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

__all__ = ["FLOW_CONTEXT", "get_current_context", "flow_context"]


FLOW_CONTEXT: ContextVar[Any] = ContextVar("flow_context", default=None)
"""Task-local context of the innermost running flow evaluation.

Usage:
    ```python
    token = FLOW_CONTEXT.set(context)
    try:
        # Context available to all code in this task
        current = FLOW_CONTEXT.get()
    finally:
        FLOW_CONTEXT.reset(token)
    ```
"""


def get_current_context() -> Any:
    """Return the context of the flow evaluation currently running, or None.

    Example:
        ```python
        flow = find_user(1).map(
            lambda user: {**user, "tenant": get_current_context().tenant}
        )
        ```
    """
    return FLOW_CONTEXT.get()


@contextmanager
def flow_context(context: Any) -> Iterator[Any]:
    """Publish context as the current flow context inside a with block."""
    token = FLOW_CONTEXT.set(context)
    try:
        yield context
    finally:
        FLOW_CONTEXT.reset(token)
