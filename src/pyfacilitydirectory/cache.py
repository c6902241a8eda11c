"""Injected repository for the last known directory entries.

Only raw, JSON-serializable data is cached; canonical hours are always
recomputed from it on read.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from .const import CACHE_EXPIRY_SECONDS
from .storage import KeyValueStore, StorageKey, load_json, save_json

_LOGGER = logging.getLogger(__name__)


class EntryCache:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        expiry: float = CACHE_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._expiry = expiry
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        """Return cached data for ``key``, or ``None`` when missing or expired."""
        record = await load_json(self._store, self._storage_key(key))
        if record is None or "data" not in record:
            return None
        timestamp = record.get("timestamp")
        if not isinstance(timestamp, (int, float)) or self._clock() - timestamp > self._expiry:
            _LOGGER.debug("Cache entry %s expired", key)
            await self.invalidate(key)
            return None
        return record["data"]

    async def set(self, key: str, data: Any) -> None:
        await save_json(
            self._store,
            self._storage_key(key),
            {"data": data, "timestamp": self._clock()},
        )

    async def invalidate(self, key: str) -> None:
        await self._store.remove(self._storage_key(key))

    @staticmethod
    def _storage_key(key: str) -> str:
        return f"{StorageKey.ENTRY_CACHE_PREFIX.value}{key}"
