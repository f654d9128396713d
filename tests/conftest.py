"""
Pytest configuration and fixtures for pyresultflow tests.

Provides a fake user repository, call-count probes, a manually driven timer
and hypothesis strategies.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest
from hypothesis import strategies as st
from returns.result import Failure, Result, Success

# =============================================================================
# Fake domain collaborators
# =============================================================================


class UserRepository:
    """In-memory repository returning Results, recording every call."""

    def __init__(self, users: dict[int, dict] | None = None, fail_updates: bool = False):
        self.users = users if users is not None else {1: {"id": 1, "name": "Ada"}}
        self.fail_updates = fail_updates
        self.calls: list[str] = []

    async def find_by_id(self, user_id: int) -> Result[dict, dict]:
        self.calls.append(f"find_by_id({user_id})")
        await asyncio.sleep(0)
        if user_id not in self.users:
            return Failure({"reason": "not-found"})
        return Success(self.users[user_id])

    async def update_by_id(self, user_id: int, payload: dict) -> Result[dict, dict]:
        self.calls.append(f"update_by_id({user_id})")
        await asyncio.sleep(0)
        if self.fail_updates or user_id not in self.users:
            return Failure({"reason": "not-found"})
        self.users[user_id] = {**self.users[user_id], **payload}
        return Success(self.users[user_id])


def validate(user: dict) -> Result[dict, dict]:
    if not user.get("name"):
        return Failure({"reason": "invalid"})
    return Success(user)


@dataclass
class Probe:
    """Counts calls and remembers their arguments."""

    calls: list[tuple] = field(default_factory=list)

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)

    @property
    def count(self) -> int:
        return len(self.calls)


class ScriptedStep:
    """Step returning the next Result from a script, then repeating the last one."""

    def __init__(self, *outcomes: Result):
        self.outcomes = list(outcomes)
        self.invocations = 0

    async def __call__(self) -> Result:
        self.invocations += 1
        index = min(self.invocations, len(self.outcomes)) - 1
        return self.outcomes[index]


class ManualTimer:
    """Timer that only fires when the test says so."""

    def __init__(self):
        self.pending: list[tuple[float, Callable[[], None]]] = []
        self.canceled = 0

    def schedule(self, delay: float, callback: Callable[[], None]) -> tuple:
        handle = (delay, callback)
        self.pending.append(handle)
        return handle

    def cancel(self, handle: tuple) -> None:
        if handle in self.pending:
            self.pending.remove(handle)
            self.canceled += 1

    async def fire(self) -> None:
        """Fire the oldest pending tick and let its evaluation finish."""
        assert self.pending, "no tick scheduled"
        _, callback = self.pending.pop(0)
        callback()
        await settle()


async def settle(rounds: int = 20) -> None:
    """Yield to the event loop until queued callbacks and tasks have run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def repository() -> UserRepository:
    return UserRepository()


@pytest.fixture
def probe() -> Probe:
    return Probe()


@pytest.fixture
def manual_timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def recorded_waits(monkeypatch) -> list[float]:
    """Replace the retry wait with a recorder so backoff tests do not sleep."""
    waits: list[float] = []

    async def fake_wait(delay: float) -> None:
        waits.append(delay)

    monkeypatch.setattr("pyresultflow.executor.retry.wait", fake_wait)
    return waits


# Hypothesis strategies for property-based testing

results = st.one_of(
    st.integers().map(Success),
    st.text(max_size=10).map(Failure),
)
