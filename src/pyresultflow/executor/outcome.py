"""
Short-circuit signal for helper-based builders.

A builder written with Flow.of() stops at the first failed step:

    ```python
    async def update_user(steps, context):
        user = await steps.try_to(find_by_id(1))   # Failure here...
        await steps.try_to(validate(user))           # ...means this never runs
        return await steps.try_to(update_by_id(user.id, payload))
    ```

Python has no way to return from the builder on the caller's behalf, so
try_to() and fail() raise _StepFailed. The run() that created the helpers
catches it and turns it back into the Failure it carries.

Everywhere else (combinators, retries, the periodic supervisor, Flow.gen)
evaluation is an explicit driver that inspects the Result after each await,
and no signal is raised.
"""

from typing import Any

from returns.result import Failure

__all__ = ["_FlowControl", "_StepFailed"]


class _FlowControl(BaseException):
    """
    Base class for flow control signals.

    Like Python's StopIteration and GeneratorExit, these are control flow
    mechanisms, not errors. They inherit from BaseException (not Exception)
    so a user step written with `except Exception:` cannot swallow them.

    **Reference**: PEP 352 - Required Superclass for Exceptions
    https://www.python.org/dev/peps/pep-0352/
    """

    pass


class _StepFailed(_FlowControl):  # noqa: N818
    """
    Signal that a step failed and the builder must stop (not an error).

    Raised by StepHelpers.try_to() and StepHelpers.fail(). Carries the
    Failure to report and the helpers that raised it: only the run() owning
    those helpers converts the signal, any other run() lets it pass.

    **Visibility**: Internal mechanism, never visible to user code - caught
    by Flow.run() before the Result is returned.
    """

    def __init__(self, failure: Failure, owner: Any):
        super().__init__(failure)
        self.failure = failure
        self.owner = owner

    def __repr__(self) -> str:
        return f"_StepFailed({self.failure!r})"
