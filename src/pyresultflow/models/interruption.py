"""Events reported when a periodic session ends.

A periodic session never raises to its caller. The only way it reports that
it stopped is by handing a PeriodicInterruption to on_interruption.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class InterruptionCause(Enum):
    """Why a periodic session stopped.

    Lifecycle:
        RUNNING → STOPPED (FAILURE or FAULT) | ABORTED
    """

    FAILURE = "failure"
    """The flow failed and there was no recovery, or the recovery failed too."""

    ABORTED = "aborted"
    """The caller invoked interrupt() on the session handle."""

    FAULT = "fault"
    """The flow or its recovery raised an unexpected exception."""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PeriodicInterruption:
    """
    Terminal event of a periodic session.

    Attributes:
        cause: Why the session ended
        error: The flow's failure value (FAILURE) or the exception (FAULT)
        recovery_error: The recovery's failure value, if recovery was tried and failed
    """

    cause: InterruptionCause
    error: Any = None
    recovery_error: Any = None

    @classmethod
    def aborted(cls) -> "PeriodicInterruption":
        return cls(cause=InterruptionCause.ABORTED)

    @classmethod
    def failure(cls, error: Any, recovery_error: Any = None) -> "PeriodicInterruption":
        return cls(cause=InterruptionCause.FAILURE, error=error, recovery_error=recovery_error)

    @classmethod
    def fault(cls, exc: BaseException) -> "PeriodicInterruption":
        return cls(cause=InterruptionCause.FAULT, error=exc)

    @property
    def is_aborted(self) -> bool:
        return self.cause == InterruptionCause.ABORTED

    @property
    def is_failure(self) -> bool:
        return self.cause == InterruptionCause.FAILURE

    def __str__(self) -> str:
        if self.is_aborted:
            return "PeriodicInterruption(aborted)"
        return (
            f"PeriodicInterruption({self.cause}, error={self.error!r}, "
            f"recovery_error={self.recovery_error!r})"
        )
