"""Per-device submission cooldown."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable

from .const import COOLDOWN_SECONDS
from .models import RateLimitRecord
from .storage import DeviceIdentity, KeyValueStore, StorageKey, load_json, save_json
from .util import mask_device_id

_LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Client-local throttle between write submissions of one device.

    The record is hydrated from the store on first use and kept in memory for
    the process lifetime. Storage failures fail open.
    """

    def __init__(
        self,
        store: KeyValueStore,
        identity: DeviceIdentity | None = None,
        *,
        cooldown: float = COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._identity = identity or DeviceIdentity(store)
        self._cooldown = cooldown
        self._clock = clock
        self._record: RateLimitRecord | None = None
        self._hydrated = False
        self._lock = asyncio.Lock()

    @property
    def cooldown(self) -> float:
        return self._cooldown

    @property
    def identity(self) -> DeviceIdentity:
        return self._identity

    async def can_submit(self) -> bool:
        record = await self._current()
        if record is None:
            return True
        return self._elapsed(record) >= self._cooldown

    async def remaining_cooldown(self) -> int:
        """Whole seconds left before the next submission is allowed."""
        record = await self._current()
        if record is None:
            return 0
        return math.ceil(max(0.0, self._cooldown - self._elapsed(record)))

    async def record_submission(self) -> None:
        async with self._lock:
            await self._hydrate()
            device_id = await self._identity.get()
            now = self._clock()
            self._record = RateLimitRecord(device_id=device_id, last_submission_at=now)
            await save_json(
                self._store,
                self._storage_key(device_id),
                {"deviceId": device_id, "lastSubmissionAt": now},
            )
        _LOGGER.debug("Recorded submission for device %s", mask_device_id(device_id))

    async def _current(self) -> RateLimitRecord | None:
        async with self._lock:
            await self._hydrate()
            return self._record

    async def _hydrate(self) -> None:
        if self._hydrated:
            return
        device_id = await self._identity.get()
        data = await load_json(self._store, self._storage_key(device_id))
        last = data.get("lastSubmissionAt") if data else None
        if isinstance(last, (int, float)) and not isinstance(last, bool):
            self._record = RateLimitRecord(device_id=device_id, last_submission_at=float(last))
        self._hydrated = True

    def _elapsed(self, record: RateLimitRecord) -> float:
        return self._clock() - record.last_submission_at

    @staticmethod
    def _storage_key(device_id: str) -> str:
        return f"{StorageKey.LAST_SUBMISSION.value}:{device_id}"
