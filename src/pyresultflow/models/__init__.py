"""Core data models for flow evaluation.

Defines types for retry configuration, delay strategies and periodic
session events.

Design: Dependency-Free Models
These types have no dependencies on core or executor modules to
prevent circular imports and enable clean layering.
"""

from pyresultflow.models.delay import (
    DelayStrategy,
    ExponentialBackoff,
    Immediate,
    calculate_delay,
    calculate_exponential_delay,
)
from pyresultflow.models.interruption import InterruptionCause, PeriodicInterruption
from pyresultflow.models.retry import RetryPolicy, always_retry

__all__ = [
    "DelayStrategy",
    "Immediate",
    "ExponentialBackoff",
    "calculate_delay",
    "calculate_exponential_delay",
    "RetryPolicy",
    "always_retry",
    "InterruptionCause",
    "PeriodicInterruption",
]
