"""
Delay strategies for retried flow evaluations.

Design Pattern: Strategy Pattern
A DelayStrategy describes how long to wait before a retry attempt, without
the retry loop knowing which kind of backoff is in use.

Durations are expressed in seconds (float), matching asyncio.sleep().

Example:
    ```python
    strategy = ExponentialBackoff(base_delay=0.5, max_delay=4.0)

    calculate_delay(strategy, 1)  # 0.5
    calculate_delay(strategy, 2)  # 1.0
    calculate_delay(strategy, 5)  # 4.0 (capped)
    ```
"""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = [
    "Immediate",
    "ExponentialBackoff",
    "DelayStrategy",
    "calculate_delay",
    "calculate_exponential_delay",
]


@dataclass(frozen=True)
class Immediate:
    """Retry right away, without waiting."""

    def __repr__(self) -> str:
        return "Immediate()"


@dataclass(frozen=True)
class ExponentialBackoff:
    """
    Double the wait before every retry, optionally capped.

    Each delay is calculated as:
    min(base_delay * 2^(attempt-1), max_delay)

    Attributes:
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any delay, in seconds (None = uncapped)
    """

    base_delay: float
    max_delay: float | None = None

    def __post_init__(self):
        """Validate invariants after creation."""
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {self.base_delay}")

        if self.max_delay is not None and self.max_delay < 0:
            raise ValueError(f"max_delay must be non-negative, got {self.max_delay}")


# DelayStrategy is a closed union: Immediate | ExponentialBackoff.
#
#     match strategy:
#         case Immediate():
#             ...
#         case ExponentialBackoff(base_delay, max_delay):
#             ...
#
DelayStrategy = Immediate | ExponentialBackoff


def calculate_delay(strategy: DelayStrategy, attempt: int) -> float:
    """
    Calculate how long to wait before a retry attempt.

    Args:
        strategy: The configured delay strategy
        attempt: 1-based number of the retry about to happen

    Returns:
        Delay in seconds (never negative)

    Raises:
        ValueError: If attempt is lower than 1
        TypeError: If strategy is not a known DelayStrategy
    """
    if attempt < 1:
        raise ValueError(f"attempt must be a positive integer, got {attempt}")

    match strategy:
        case Immediate():
            return 0.0
        case ExponentialBackoff(base_delay=base_delay, max_delay=max_delay):
            return calculate_exponential_delay(attempt, base_delay, max_delay)

    raise TypeError(f"Unknown delay strategy: {strategy!r}")


def calculate_exponential_delay(
    attempt: int, base_delay: float, max_delay: float | None = None
) -> float:
    """
    Exponential backoff: base_delay * 2^(attempt-1), capped at max_delay.

    attempt=1 (first retry): 2^0 = 1 → base_delay
    attempt=2 (second retry): 2^1 → base_delay * 2
    attempt=3 (third retry): 2^2 → base_delay * 4

    Once the uncapped delay exceeds the float range it is math.inf, so a
    capped strategy keeps returning max_delay for arbitrarily high attempts.
    """
    if base_delay == 0:
        return 0.0

    try:
        delay = base_delay * 2.0 ** (attempt - 1)
    except OverflowError:
        delay = math.inf

    if max_delay is not None:
        delay = min(delay, max_delay)

    return float(delay)
