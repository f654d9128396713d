"""
pyresultflow: Composable fallible flows for asyncio

A Flow is a deferred, immutable sequence of steps that may fail. Steps
produce returns.result.Result values; the first failure short-circuits the
rest. Flows compose with map/chain/or_else, retry with backoff, and run
periodically under a supervisor.

Design Pattern: Façade Pattern
This module provides a simplified interface to the package, hiding the
split between models, core and executor.

Example:
    ```python
    import asyncio
    from returns.result import Failure, Success
    from pyresultflow import ExponentialBackoff, Flow

    async def find_by_id(user_id):
        return Success({"id": user_id, "name": "Ada"})

    async def update_by_id(user_id, payload):
        return Failure({"reason": "not-found"})

    async def update_user(steps, context):
        user = await steps.try_to(find_by_id(1))
        return await steps.try_to(update_by_id(user["id"], {"name": "Grace"}))

    async def main():
        flow = Flow.of(update_user).retry_policy(
            max_retries=2,
            delay_strategy=ExponentialBackoff(base_delay=0.1),
        )
        result = await flow.run()
        print(result)  # <Failure: {'reason': 'not-found'}>

    asyncio.run(main())
    ```
"""

# Core types
from pyresultflow.core import (
    FLOW_CONTEXT,
    FlowConfigurationError,
    FlowError,
    UnsupportedStepError,
    flow_context,
    get_current_context,
)

# Flow and its evaluation machinery
from pyresultflow.executor import (
    Flow,
    LoopTimer,
    PeriodicHandle,
    PeriodicSession,
    StepHelpers,
    Timer,
)

# Configuration models
from pyresultflow.models import (
    DelayStrategy,
    ExponentialBackoff,
    Immediate,
    InterruptionCause,
    PeriodicInterruption,
    RetryPolicy,
    calculate_delay,
    calculate_exponential_delay,
)

# Version
__version__ = "0.1.0"

__all__ = [
    # Flow
    "Flow",
    "StepHelpers",
    # Context
    "FLOW_CONTEXT",
    "get_current_context",
    "flow_context",
    # Errors
    "FlowError",
    "UnsupportedStepError",
    "FlowConfigurationError",
    # Retry
    "RetryPolicy",
    "DelayStrategy",
    "Immediate",
    "ExponentialBackoff",
    "calculate_delay",
    "calculate_exponential_delay",
    # Periodic execution
    "PeriodicSession",
    "PeriodicHandle",
    "PeriodicInterruption",
    "InterruptionCause",
    "Timer",
    "LoopTimer",
    # Metadata
    "__version__",
]
