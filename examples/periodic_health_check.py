import asyncio
import logging
import random

from returns.result import Failure, Success

from pyresultflow import Flow, PeriodicInterruption

logging.basicConfig(level=logging.INFO)


async def ping_service():
    if random.random() < 0.3:
        return Failure({"reason": "unreachable"})
    print("Service healthy")
    return Success("pong")


async def restart_service(error):
    print(f"Restarting service after {error}")
    return Success("restarted")


async def main():
    stopped = asyncio.Event()

    def on_interruption(event: PeriodicInterruption):
        print(f"Health check stopped: {event}")
        stopped.set()

    handle = Flow.from_(ping_service).run_periodically(
        0.2,
        recovery_action=restart_service,
        on_interruption=on_interruption,
        max_recoveries=2,
    )

    try:
        await asyncio.wait_for(stopped.wait(), timeout=5.0)
    except TimeoutError:
        handle.interrupt()


if __name__ == "__main__":
    asyncio.run(main())
