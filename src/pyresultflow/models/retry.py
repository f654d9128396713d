"""
Retry policy configuration for flow evaluation.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates retry behavior (when to retry, how often, how long
to wait), allowing different retry strategies without modifying the flow
being retried.

Design Rationale:
- Safe default: one retry, no waiting
- Simple retry: RetryPolicy.with_max_retries(3) with standard backoff
- Advanced control: custom condition and before_retry hooks
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from pyresultflow.models.delay import DelayStrategy, ExponentialBackoff, Immediate

__all__ = ["RetryPolicy", "always_retry"]


def always_retry(error: Any) -> bool:
    """Default retry condition: every failure is worth another attempt."""
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retrying a failed flow.

    Examples:
        # Simple: just specify max retries (uses standard delays)
        policy = RetryPolicy.with_max_retries(3)

        # Named policy: predefined sensible defaults
        policy = RetryPolicy.STANDARD

        # Custom policy: full control
        policy = RetryPolicy(
            condition=lambda error: error.get("reason") == "timeout",
            before_retry=log_retry,
            max_retries=5,
            delay_strategy=ExponentialBackoff(base_delay=0.2, max_delay=5.0),
        )
    """

    condition: Callable[[Any], bool] = always_retry
    """Predicate on the failure value. False stops retrying immediately.

    Default: always True
    """

    before_retry: Callable[[Any, int, Any], Awaitable[None] | None] | None = None
    """Hook called as before_retry(error, retry_number, context).

    retry_number is 1-based. May be a coroutine function; its result is awaited.

    Default: None (no hook)
    """

    max_retries: int = 1
    """Maximum number of retries after the initial attempt.

    For example, max_retries = 2 means:
    - Attempt 1: initial run
    - Attempt 2: first retry
    - Attempt 3: second retry

    Values <= 0 disable retrying entirely.

    Default: 1
    """

    delay_strategy: DelayStrategy = field(default_factory=Immediate)
    """How long to wait before each retry.

    Default: Immediate()
    """

    # =========================================================================
    # Predefined Policies
    # =========================================================================

    if TYPE_CHECKING:
        NONE: RetryPolicy
        STANDARD: RetryPolicy
        AGGRESSIVE: RetryPolicy
    else:
        # Runtime placeholders (set after class definition)
        NONE = cast("RetryPolicy", None)
        STANDARD = cast("RetryPolicy", None)
        AGGRESSIVE = cast("RetryPolicy", None)

    @classmethod
    def with_max_retries(cls, max_retries: int) -> RetryPolicy:
        """
        Create a policy with custom max_retries (uses standard delays).

        Args:
            max_retries: Maximum number of retries after the first attempt

        Returns:
            RetryPolicy with standard exponential backoff

        Example:
            policy = RetryPolicy.with_max_retries(5)
        """
        return cls(
            max_retries=max_retries,
            delay_strategy=ExponentialBackoff(base_delay=1.0, max_delay=30.0),
        )

    @property
    def max_attempts(self) -> int:
        """Total number of evaluations the policy allows (initial + retries)."""
        return max(self.max_retries, 0) + 1

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return (
            f"RetryPolicy(max_retries={self.max_retries}, "
            f"delay_strategy={self.delay_strategy!r}, "
            f"conditional={self.condition is not always_retry}, "
            f"before_retry={self.before_retry is not None})"
        )


RetryPolicy.NONE = RetryPolicy(max_retries=0)

RetryPolicy.STANDARD = RetryPolicy(
    max_retries=3,
    delay_strategy=ExponentialBackoff(
        base_delay=1.0,  # 1 second
        max_delay=30.0,  # 30 seconds
    ),
)

RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_retries=10,
    delay_strategy=ExponentialBackoff(
        base_delay=0.1,  # 100 milliseconds
        max_delay=10.0,  # 10 seconds
    ),
)
