"""Timeout and bounded exponential-backoff retry for persistence calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Collection
from typing import Any, TypeVar

from .const import (
    BACKOFF_BASE_SECONDS,
    BACKOFF_CAP_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRYABLE_ERROR_CODES,
)
from .exceptions import PyFacilityDirectoryError, TimeoutError

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(
    attempt: int,
    *,
    base: float = BACKOFF_BASE_SECONDS,
    cap: float = BACKOFF_CAP_SECONDS,
) -> float:
    """Delay in seconds before retry number ``attempt`` (zero based)."""
    return min(base * (2**attempt), cap)


class RetryExecutor:
    """Run an operation with a hard per-attempt timeout and bounded retries.

    Only errors whose ``error_code`` is in ``retryable_codes`` are retried.
    An attempt that misses its deadline is abandoned rather than cancelled;
    whatever it eventually returns or raises is discarded.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = BACKOFF_BASE_SECONDS,
        max_delay: float = BACKOFF_CAP_SECONDS,
        retryable_codes: Collection[str] = RETRYABLE_ERROR_CODES,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._retryable_codes = frozenset(retryable_codes)
        self._sleep = sleep
        self._abandoned: set[asyncio.Task[Any]] = set()

    def is_retryable(self, error: BaseException) -> bool:
        return (
            isinstance(error, PyFacilityDirectoryError)
            and error.error_code in self._retryable_codes
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await self._run_with_timeout(operation)
            except PyFacilityDirectoryError as exc:
                if not self.is_retryable(exc) or attempt >= self._max_retries:
                    raise
                delay = backoff_delay(attempt, base=self._base_delay, cap=self._max_delay)
                _LOGGER.debug(
                    "Retrying after %s (%s), attempt %s of %s in %.1fs",
                    type(exc).__name__,
                    exc.error_code,
                    attempt + 1,
                    self._max_retries,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1

    async def _run_with_timeout(self, operation: Callable[[], Awaitable[T]]) -> T:
        task = asyncio.ensure_future(operation())
        try:
            return await asyncio.wait_for(asyncio.shield(task), self._timeout)
        except asyncio.TimeoutError as exc:
            self._abandon(task)
            raise TimeoutError(f"Operation timed out after {self._timeout} seconds.") from exc

    def _abandon(self, task: asyncio.Task[Any]) -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._discard_abandoned)

    def _discard_abandoned(self, task: asyncio.Task[Any]) -> None:
        self._abandoned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            _LOGGER.debug("Ignoring late failure of an abandoned attempt: %r", task.exception())
