import asyncio

import pytest

from pyfacilitydirectory.exceptions import (
    NetworkError,
    NotFoundError,
    PersistenceError,
    TimeoutError,
)
from pyfacilitydirectory.retry import RetryExecutor, backoff_delay


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class _Flaky:
    def __init__(self, failures: list[Exception], result: str = "doc-1") -> None:
        self._failures = list(failures)
        self._result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self._failures:
            raise self._failures.pop(0)
        return self._result


def test_backoff_delay_capped() -> None:
    assert [backoff_delay(attempt) for attempt in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]


@pytest.mark.asyncio
async def test_succeeds_on_last_allowed_attempt() -> None:
    sleep = _RecordingSleep()
    executor = RetryExecutor(sleep=sleep)
    operation = _Flaky([NetworkError("a"), TimeoutError("b"), NetworkError("c")])

    assert await executor.run(operation) == "doc-1"
    assert operation.calls == 4
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert sleep.delays == sorted(sleep.delays)


@pytest.mark.asyncio
async def test_exhaustion_raises_last_error() -> None:
    sleep = _RecordingSleep()
    executor = RetryExecutor(sleep=sleep)
    last = NetworkError("last")
    operation = _Flaky([NetworkError("1"), NetworkError("2"), NetworkError("3"), last])

    with pytest.raises(NetworkError) as excinfo:
        await executor.run(operation)
    assert excinfo.value is last
    assert operation.calls == 4


@pytest.mark.asyncio
async def test_delays_capped_with_many_retries() -> None:
    sleep = _RecordingSleep()
    executor = RetryExecutor(max_retries=6, sleep=sleep)
    operation = _Flaky([NetworkError(str(i)) for i in range(6)])
    await executor.run(operation)
    assert sleep.delays == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [NotFoundError("gone"), PersistenceError("denied")])
async def test_non_retryable_propagates_immediately(error: Exception) -> None:
    sleep = _RecordingSleep()
    executor = RetryExecutor(sleep=sleep)
    operation = _Flaky([error])
    with pytest.raises(type(error)):
        await executor.run(operation)
    assert operation.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_foreign_exceptions_are_not_retried() -> None:
    executor = RetryExecutor(sleep=_RecordingSleep())
    operation = _Flaky([RuntimeError("bug")])
    with pytest.raises(RuntimeError):
        await executor.run(operation)
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_timeout_abandons_attempt_and_ignores_late_result() -> None:
    sleep = _RecordingSleep()
    executor = RetryExecutor(timeout=0.01, max_retries=1, sleep=sleep)
    release = asyncio.Event()
    late_completions: list[str] = []
    calls = 0

    async def operation() -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            late_completions.append("late")
            return "stale"
        return "fresh"

    assert await executor.run(operation) == "fresh"
    assert sleep.delays == [1.0]

    release.set()
    await asyncio.sleep(0.01)
    assert late_completions == ["late"]


@pytest.mark.asyncio
async def test_timeout_error_when_all_attempts_time_out() -> None:
    executor = RetryExecutor(timeout=0.01, max_retries=0, sleep=_RecordingSleep())
    release = asyncio.Event()

    async def hang() -> str:
        await release.wait()
        raise NetworkError("too late")

    with pytest.raises(TimeoutError) as excinfo:
        await executor.run(hang)
    assert excinfo.value.error_code == "deadline_exceeded"

    release.set()
    await asyncio.sleep(0.01)
