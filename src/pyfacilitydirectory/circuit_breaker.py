"""Circuit breaker guarding one kind of persistence call.

There is no tracked half-open state. An open breaker becomes eligible for a
single live trial once ``reset_timeout`` has passed since the last failure.
A failed trial re-opens the breaker; a successful one resets it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import TypeVar

from .const import DEFAULT_MAX_FAILURES, DEFAULT_RESET_TIMEOUT
from .exceptions import CircuitOpenError
from .models import CircuitState
from .storage import KeyValueStore, StorageKey, load_json, save_json

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitBreaker:
    """Fail fast after repeated failures of the wrapped operation."""

    def __init__(
        self,
        name: str,
        *,
        store: KeyValueStore | None = None,
        max_failures: int = DEFAULT_MAX_FAILURES,
        reset_timeout: float = DEFAULT_RESET_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._name = name
        self._store = store
        self._max_failures = max(1, max_failures)
        self._reset_timeout = reset_timeout
        self._clock = clock
        self._state = CircuitState()
        self._hydrated = store is None
        self._trial_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self._name

    async def state(self) -> CircuitState:
        async with self._lock:
            await self._hydrate()
            return replace(self._state)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` unless the breaker is open.

        Raises:
            CircuitOpenError: The breaker is open and not yet eligible for a
                trial, or another trial is already running. ``operation`` is
                not invoked.
        """
        async with self._lock:
            await self._hydrate()
            trial = False
            if self._state.open:
                if self._trial_in_flight or not self._eligible_for_trial():
                    raise CircuitOpenError(f"Circuit '{self._name}' is open, rejecting request.")
                self._trial_in_flight = True
                trial = True
                _LOGGER.debug("Circuit %s letting a trial call through", self._name)
        try:
            result = await operation()
        except Exception:
            await self._record_failure()
            raise
        else:
            await self._record_success()
            return result
        finally:
            if trial:
                self._trial_in_flight = False

    async def reset(self) -> None:
        async with self._lock:
            await self._hydrate()
            self._state = CircuitState()
            await self._persist()

    def _eligible_for_trial(self) -> bool:
        last_failure = self._state.last_failure_at
        if last_failure is None:
            return True
        return self._clock() - last_failure > self._reset_timeout

    async def _record_failure(self) -> None:
        async with self._lock:
            state = self._state
            state.consecutive_failures += 1
            state.last_failure_at = self._clock()
            if not state.open and state.consecutive_failures >= self._max_failures:
                state.open = True
                _LOGGER.warning(
                    "Circuit %s opened after %s consecutive failures",
                    self._name,
                    state.consecutive_failures,
                )
            await self._persist()

    async def _record_success(self) -> None:
        async with self._lock:
            if self._state.open:
                _LOGGER.info("Circuit %s closed after a successful trial", self._name)
            if self._state != CircuitState():
                self._state = CircuitState()
                await self._persist()

    async def _hydrate(self) -> None:
        if self._hydrated:
            return
        self._hydrated = True
        data = await load_json(self._store, self._storage_key())
        if not data:
            return
        failures = data.get("consecutiveFailures")
        last_failure = data.get("lastFailureAt")
        self._state = CircuitState(
            consecutive_failures=failures if isinstance(failures, int) else 0,
            last_failure_at=float(last_failure) if isinstance(last_failure, (int, float)) else None,
            open=data.get("open") is True,
        )

    async def _persist(self) -> None:
        if self._store is None:
            return
        await save_json(
            self._store,
            self._storage_key(),
            {
                "consecutiveFailures": self._state.consecutive_failures,
                "lastFailureAt": self._state.last_failure_at,
                "open": self._state.open,
            },
        )

    def _storage_key(self) -> str:
        return f"{StorageKey.CIRCUIT_STATE.value}:{self._name}"
