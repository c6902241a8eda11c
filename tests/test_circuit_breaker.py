import asyncio
import json

import pytest

from pyfacilitydirectory.circuit_breaker import CircuitBreaker
from pyfacilitydirectory.exceptions import CircuitOpenError, NetworkError
from pyfacilitydirectory.storage import MemoryStore, StorageKey


class _FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _Operation:
    def __init__(self, *, fail: bool = True) -> None:
        self.fail = fail
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.fail:
            raise NetworkError("boom")
        return "ok"


async def _fail_times(breaker: CircuitBreaker, operation: _Operation, count: int) -> None:
    for _ in range(count):
        with pytest.raises(NetworkError):
            await breaker.execute(operation)


@pytest.mark.asyncio
async def test_opens_after_max_failures_and_fails_fast() -> None:
    clock = _FakeClock()
    breaker = CircuitBreaker("create_entry", clock=clock)
    operation = _Operation()

    await _fail_times(breaker, operation, 5)
    state = await breaker.state()
    assert state.open is True
    assert state.consecutive_failures == 5

    clock.advance(30)
    with pytest.raises(CircuitOpenError):
        await breaker.execute(operation)
    assert operation.calls == 5


@pytest.mark.asyncio
async def test_success_resets_counter() -> None:
    breaker = CircuitBreaker("add_review", clock=_FakeClock())
    operation = _Operation()
    await _fail_times(breaker, operation, 4)
    operation.fail = False
    assert await breaker.execute(operation) == "ok"
    state = await breaker.state()
    assert state.consecutive_failures == 0
    assert state.open is False


@pytest.mark.asyncio
async def test_elapsed_time_alone_does_not_reset_counter() -> None:
    clock = _FakeClock()
    breaker = CircuitBreaker("add_report", clock=clock)
    operation = _Operation()
    await _fail_times(breaker, operation, 4)
    clock.advance(3600)
    await _fail_times(breaker, operation, 1)
    assert (await breaker.state()).open is True


@pytest.mark.asyncio
async def test_single_trial_after_reset_timeout_failure_reopens() -> None:
    clock = _FakeClock()
    breaker = CircuitBreaker("create_entry", clock=clock)
    operation = _Operation()
    await _fail_times(breaker, operation, 5)

    clock.advance(60)
    with pytest.raises(CircuitOpenError):
        await breaker.execute(operation)

    clock.advance(1)
    with pytest.raises(NetworkError):
        await breaker.execute(operation)
    assert operation.calls == 6
    state = await breaker.state()
    assert state.open is True
    assert state.last_failure_at == clock.now

    with pytest.raises(CircuitOpenError):
        await breaker.execute(operation)
    assert operation.calls == 6


@pytest.mark.asyncio
async def test_successful_trial_closes() -> None:
    clock = _FakeClock()
    breaker = CircuitBreaker("create_entry", clock=clock)
    operation = _Operation()
    await _fail_times(breaker, operation, 5)
    clock.advance(61)
    operation.fail = False
    assert await breaker.execute(operation) == "ok"
    state = await breaker.state()
    assert state.open is False
    assert state.consecutive_failures == 0
    assert state.last_failure_at is None


@pytest.mark.asyncio
async def test_only_one_trial_in_flight() -> None:
    clock = _FakeClock()
    breaker = CircuitBreaker("create_entry", clock=clock)
    await _fail_times(breaker, _Operation(), 5)
    clock.advance(61)

    release = asyncio.Event()
    calls = 0

    async def slow_trial() -> str:
        nonlocal calls
        calls += 1
        await release.wait()
        return "ok"

    trial = asyncio.create_task(breaker.execute(slow_trial))
    await asyncio.sleep(0)
    with pytest.raises(CircuitOpenError):
        await breaker.execute(slow_trial)
    release.set()
    assert await trial == "ok"
    assert calls == 1


@pytest.mark.asyncio
async def test_state_persists_across_instances() -> None:
    clock = _FakeClock()
    store = MemoryStore()
    breaker = CircuitBreaker("add_review", store=store, clock=clock)
    await _fail_times(breaker, _Operation(), 5)

    stored = json.loads(await store.get(f"{StorageKey.CIRCUIT_STATE.value}:add_review"))
    assert stored == {"consecutiveFailures": 5, "lastFailureAt": clock.now, "open": True}

    restarted = CircuitBreaker("add_review", store=store, clock=clock)
    operation = _Operation()
    with pytest.raises(CircuitOpenError):
        await restarted.execute(operation)
    assert operation.calls == 0


@pytest.mark.asyncio
async def test_reset() -> None:
    breaker = CircuitBreaker("add_report", clock=_FakeClock())
    await _fail_times(breaker, _Operation(), 5)
    await breaker.reset()
    assert (await breaker.state()).open is False
