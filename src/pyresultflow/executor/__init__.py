"""
Executor module - Evaluation engine for flows.

This module contains the evaluation components:
- flow: The Flow type, its constructors and combinators
- helpers: StepHelpers handed to builders (try_to, fail)
- outcome: Internal short-circuit signal
- steps: Normalization of step-likes into a closed variant
- retry: Retry loop behind Flow.retry_policy()
- periodic: Periodic supervisor behind Flow.run_periodically()
- timer: Timer protocol and asyncio-backed implementation

From Dave Cheney: "Package Design"
Package name "executor" describes what it provides (evaluation),
not what it contains.
"""

from pyresultflow.executor.flow import Flow
from pyresultflow.executor.helpers import StepHelpers
from pyresultflow.executor.periodic import PeriodicHandle, PeriodicSession, SessionState
from pyresultflow.executor.retry import evaluate_with_retry
from pyresultflow.executor.steps import (
    AwaitableStep,
    FlowStep,
    ResultStep,
    Step,
    map_error,
    resolve,
    resolve_step,
    to_step,
)
from pyresultflow.executor.timer import LoopTimer, Timer, wait

__all__ = [
    # Flow
    "Flow",
    "StepHelpers",
    # Steps
    "Step",
    "ResultStep",
    "AwaitableStep",
    "FlowStep",
    "to_step",
    "resolve_step",
    "resolve",
    "map_error",
    # Policies
    "evaluate_with_retry",
    "PeriodicSession",
    "PeriodicHandle",
    "SessionState",
    # Timers
    "Timer",
    "LoopTimer",
    "wait",
]
