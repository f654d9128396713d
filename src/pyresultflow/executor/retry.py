"""Retry loop behind Flow.retry_policy().

The loop is an explicit driver: it runs the flow, inspects the Result, and
decides whether to stop or to try again. Faults raised by the flow are
never retried; they propagate to the caller.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any

from returns.pipeline import is_successful
from returns.result import Result

from pyresultflow.executor.timer import wait
from pyresultflow.models import RetryPolicy, calculate_delay

if TYPE_CHECKING:
    from pyresultflow.executor.flow import Flow

logger = logging.getLogger(__name__)

__all__ = ["evaluate_with_retry"]


async def evaluate_with_retry(flow: "Flow", policy: RetryPolicy, context: Any = None) -> Result:
    """
    Run flow until it succeeds, the policy gives up, or the condition rejects the failure.

    Timeline for a failing attempt:
    1. Stop if max_retries retries were already made (final failure wins)
    2. Stop if policy.condition(error) is False
    3. Await policy.before_retry(error, retry_number, context), if any
    4. Wait calculate_delay(policy.delay_strategy, retry_number), if positive
    5. Run again

    Args:
        flow: Flow to evaluate
        policy: Retry configuration
        context: Context passed to every attempt

    Returns:
        The outcome of the last attempt
    """
    retries = 0

    while True:
        result = await flow.run(context)

        if is_successful(result):
            if retries:
                logger.debug(f"{flow.name}: succeeded after {retries} retries")
            return result

        error = result.failure()

        if retries >= policy.max_retries:
            if policy.max_retries > 0:
                logger.debug(f"{flow.name}: giving up after {retries} retries: {error!r}")
            return result

        if not policy.condition(error):
            logger.debug(f"{flow.name}: retry condition rejected failure {error!r}")
            return result

        retries += 1

        if policy.before_retry is not None:
            hook_result = policy.before_retry(error, retries, context)
            if inspect.isawaitable(hook_result):
                await hook_result

        delay = calculate_delay(policy.delay_strategy, retries)
        logger.info(
            f"{flow.name}: retry {retries}/{policy.max_retries} after failure {error!r} "
            f"(delay {delay:.3f}s)"
        )

        if delay > 0:
            await wait(delay)
