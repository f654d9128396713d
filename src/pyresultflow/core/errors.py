"""Exceptions raised by pyresultflow.

These are programming errors (faults), not domain failures. Domain failures
always travel as Failure values and never show up here.
"""

__all__ = ["FlowError", "UnsupportedStepError", "FlowConfigurationError"]


class FlowError(Exception):
    """Base class for pyresultflow faults."""

    pass


class UnsupportedStepError(FlowError, TypeError):
    """A step boundary received something that is not a result.

    Steps accept a Result, an IOResult, an awaitable producing one of those,
    a Flow, or a zero-argument callable returning any of them.
    """

    def __init__(self, value: object):
        super().__init__(
            f"Expected a Result, an awaitable Result, a Flow or a thunk returning one, "
            f"got {type(value).__name__}: {value!r}"
        )
        self.value = value


class FlowConfigurationError(FlowError, ValueError):
    """Invalid configuration passed to a flow policy."""

    pass
