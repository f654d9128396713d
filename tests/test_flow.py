"""
Tests for Flow construction, evaluation and short-circuiting.

Covers:
- Flow.of() builders with try_to()/fail()
- Flow.from_()/lift()/success()/failure()
- Flow.gen() generator builders
- Fault propagation and interruption ownership
"""

import asyncio
from dataclasses import dataclass

import pytest
from returns.future import FutureResult
from returns.io import IOFailure, IOSuccess
from returns.result import Failure, Success

from conftest import validate
from pyresultflow import Flow, StepHelpers, UnsupportedStepError, get_current_context


@dataclass(frozen=True)
class Services:
    repository: object
    payload: dict


async def update_user(steps: StepHelpers, context: Services):
    user = await steps.try_to(context.repository.find_by_id(1))
    await steps.try_to(validate(user))
    return await steps.try_to(context.repository.update_by_id(user["id"], context.payload))


# =============================================================================
# Flow.of
# =============================================================================


@pytest.mark.asyncio
async def test_builder_success(repository):
    flow = Flow.of(update_user)

    result = await flow.run(Services(repository, {"name": "Grace"}))

    assert result == Success({"id": 1, "name": "Grace"})


@pytest.mark.asyncio
async def test_end_to_end_update_not_found(repository):
    """find and validate succeed, update fails: the update's failure is the outcome."""
    repository.fail_updates = True
    flow = Flow.of(update_user)

    result = await flow.run(Services(repository, {"name": "Grace"}))

    assert result == Failure({"reason": "not-found"})
    assert repository.calls == ["find_by_id(1)", "update_by_id(1)"]


@pytest.mark.asyncio
async def test_builder_not_invoked_at_construction(probe):
    async def builder(steps, context):
        probe()
        return 1

    flow = Flow.of(builder)

    assert probe.count == 0
    await flow.run()
    assert probe.count == 1


@pytest.mark.asyncio
async def test_short_circuit_skips_later_steps(probe):
    async def builder(steps, context):
        await steps.try_to(Success(1))
        await steps.try_to(Failure("boom"))
        probe()
        return await steps.try_to(Success(3))

    result = await Flow.of(builder).run()

    assert result == Failure("boom")
    assert probe.count == 0


@pytest.mark.asyncio
async def test_fail_stops_builder(probe):
    async def builder(steps, context):
        steps.fail({"reason": "forbidden"})
        probe()

    result = await Flow.of(builder).run()

    assert result == Failure({"reason": "forbidden"})
    assert probe.count == 0


@pytest.mark.asyncio
async def test_try_to_map_error():
    async def builder(steps, context):
        return await steps.try_to(Failure(404), map_error=lambda code: f"http {code}")

    result = await Flow.of(builder).run()

    assert result == Failure("http 404")


@pytest.mark.asyncio
async def test_map_error_helper_does_not_stop_builder():
    async def builder(steps, context):
        mapped = await steps.map_error(Failure(1), lambda e: e + 1)
        return mapped

    result = await Flow.of(builder).run()

    assert result == Success(Failure(2))


@pytest.mark.asyncio
async def test_try_to_accepts_every_result_shape():
    async def coroutine_result():
        return Success("coroutine")

    async def builder(steps, context):
        return [
            await steps.try_to(Success("plain")),
            await steps.try_to(coroutine_result()),
            await steps.try_to(coroutine_result),
            await steps.try_to(lambda: Success("thunk")),
            await steps.try_to(IOSuccess("io")),
            await steps.try_to(FutureResult.from_value("future")),
            await steps.try_to(Flow.success("flow")),
        ]

    result = await Flow.of(builder).run()

    assert result == Success(["plain", "coroutine", "coroutine", "thunk", "io", "future", "flow"])


@pytest.mark.asyncio
async def test_try_to_unwraps_io_and_future_failures():
    async def io_builder(steps, context):
        return await steps.try_to(IOFailure("io-error"))

    async def future_builder(steps, context):
        return await steps.try_to(FutureResult.from_failure("future-error"))

    assert await Flow.of(io_builder).run() == Failure("io-error")
    assert await Flow.of(future_builder).run() == Failure("future-error")


@pytest.mark.asyncio
async def test_try_to_rejects_non_results():
    async def builder(steps, context):
        return await steps.try_to(42)

    with pytest.raises(UnsupportedStepError):
        await Flow.of(builder).run()


@pytest.mark.asyncio
async def test_builder_receives_context():
    seen = []

    async def builder(steps, context):
        seen.append((context, steps.context, get_current_context()))
        return context["tenant"]

    result = await Flow.of(builder).run({"tenant": "acme"})

    assert result == Success("acme")
    assert seen == [({"tenant": "acme"},) * 3]


@pytest.mark.asyncio
async def test_context_reset_after_run():
    await Flow.success(1).run("ctx")

    assert get_current_context() is None


@pytest.mark.asyncio
async def test_sync_builder_supported():
    def builder(steps, context):
        return context * 2

    assert await Flow.of(builder).run(21) == Success(42)


# =============================================================================
# Faults
# =============================================================================


@pytest.mark.asyncio
async def test_unhandled_fault_propagates():
    async def builder(steps, context):
        await steps.try_to(Success(1))
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError, match="bug"):
        await Flow.of(builder).run()


@pytest.mark.asyncio
async def test_fault_inside_step_propagates():
    async def exploding_step():
        raise KeyError("missing")

    async def builder(steps, context):
        return await steps.try_to(exploding_step())

    with pytest.raises(KeyError):
        await Flow.of(builder).run()


@pytest.mark.asyncio
async def test_except_exception_does_not_swallow_failure(probe):
    async def builder(steps, context):
        try:
            steps.fail("stop")
        except Exception:
            probe()
        return "continued"

    result = await Flow.of(builder).run()

    assert result == Failure("stop")
    assert probe.count == 0


@pytest.mark.asyncio
async def test_nested_flow_failure_caught_by_inner_run():
    inner = Flow.of(lambda steps, context: steps.try_to(Failure("inner")))

    async def outer(steps, context):
        inner_result = await inner.run()
        return inner_result

    result = await Flow.of(outer).run()

    assert result == Success(Failure("inner"))


@pytest.mark.asyncio
async def test_interruption_belongs_to_owning_run(probe):
    """An inner run does not convert a failure raised by the outer helpers."""

    async def outer(steps, context):
        async def inner_builder(inner_steps, inner_context):
            steps.fail("outer failure")

        await Flow.of(inner_builder).run()
        probe()
        return "unreachable"

    result = await Flow.of(outer).run()

    assert result == Failure("outer failure")
    assert probe.count == 0


# =============================================================================
# Re-evaluation
# =============================================================================


@pytest.mark.asyncio
async def test_each_run_re_executes(probe):
    async def builder(steps, context):
        probe()
        return probe.count

    flow = Flow.of(builder)

    assert await flow.run() == Success(1)
    assert await flow.run() == Success(2)
    assert probe.count == 2


@pytest.mark.asyncio
async def test_concurrent_runs_are_independent():
    async def builder(steps, context):
        await asyncio.sleep(0)
        return context

    flow = Flow.of(builder)

    results = await asyncio.gather(*(flow.run(i) for i in range(5)))

    assert results == [Success(i) for i in range(5)]


# =============================================================================
# Flow.from_ / lift
# =============================================================================


@pytest.mark.asyncio
async def test_from_result():
    assert await Flow.from_(Success(1)).run() == Success(1)
    assert await Flow.lift(Failure("e")).run() == Failure("e")


@pytest.mark.asyncio
async def test_from_thunk_invoked_per_run(repository):
    flow = Flow.from_(lambda: repository.find_by_id(1))

    assert repository.calls == []
    await flow.run()
    await flow.run()

    assert repository.calls == ["find_by_id(1)", "find_by_id(1)"]


@pytest.mark.asyncio
async def test_from_coroutine_can_run_twice(repository):
    flow = Flow.from_(repository.find_by_id(1))

    first = await flow.run()
    second = await flow.run()

    assert first == second == Success({"id": 1, "name": "Ada"})
    assert repository.calls == ["find_by_id(1)"]


@pytest.mark.asyncio
async def test_success_and_failure_constructors():
    assert await Flow.success("ok").run() == Success("ok")
    assert await Flow.failure("nope").run() == Failure("nope")


def test_is_flow():
    assert Flow.is_flow(Flow.success(1))
    assert not Flow.is_flow(Success(1))
    assert not Flow.is_flow(lambda: Success(1))


def test_flow_is_immutable():
    flow = Flow.success(1)

    with pytest.raises(AttributeError):
        flow.name = "renamed"


def test_flow_name_from_builder():
    assert Flow.of(update_user).name == "update_user"
    assert Flow.of(update_user).map(str).name == "update_user.map"
    assert "update_user" in repr(Flow.of(update_user))


# =============================================================================
# Flow.gen
# =============================================================================


@pytest.mark.asyncio
async def test_gen_success(repository):
    def update(context):
        user = yield repository.find_by_id(1)
        yield validate(user)
        updated = yield repository.update_by_id(user["id"], {"name": "Grace"})
        return updated["name"]

    result = await Flow.gen(update).run()

    assert result == Success("Grace")


@pytest.mark.asyncio
async def test_gen_short_circuits_and_closes_generator(probe):
    closed = []

    def steps(context):
        try:
            yield Success(1)
            yield Failure("gen-failure")
            probe()
            yield Success(3)
        finally:
            closed.append(True)

    result = await Flow.gen(steps).run()

    assert result == Failure("gen-failure")
    assert probe.count == 0
    assert closed == [True]


@pytest.mark.asyncio
async def test_gen_yields_flows_with_context():
    inner = Flow.of(lambda steps, context: steps.try_to(Success(context["value"])))

    def outer(context):
        value = yield inner
        return value + 1

    result = await Flow.gen(outer).run({"value": 41})

    assert result == Success(42)


@pytest.mark.asyncio
async def test_gen_without_steps():
    def nothing(context):
        return "done"
        yield  # pragma: no cover

    assert await Flow.gen(nothing).run() == Success("done")


@pytest.mark.asyncio
async def test_gen_async_generator(repository):
    async def update(context):
        user = yield repository.find_by_id(1)
        await asyncio.sleep(0)
        yield validate(user)
        yield repository.update_by_id(user["id"], {"name": "Grace"})

    result = await Flow.gen(update).run()

    assert result.unwrap()["name"] == "Grace"


@pytest.mark.asyncio
async def test_gen_async_generator_receives_values():
    async def count(context):
        first = yield Success(1)
        yield Success(first + 1)

    assert await Flow.gen(count).run() == Success(2)


@pytest.mark.asyncio
async def test_gen_async_short_circuits_and_closes_generator(probe):
    closed = []

    async def steps(context):
        try:
            yield Success(1)
            yield Failure("gen-failure")
            probe()
            yield Success(3)
        finally:
            closed.append(True)

    flow = Flow.gen(steps)

    assert await flow.run() == Failure("gen-failure")
    assert await flow.run() == Failure("gen-failure")
    assert probe.count == 0
    assert closed == [True, True]
