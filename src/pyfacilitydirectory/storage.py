"""Key-value storage contract, namespaced keys and device identity."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import uuid
from enum import Enum
from typing import Protocol, runtime_checkable

from .const import STORAGE_KEY_LENGTH, STORAGE_NAMESPACE
from .exceptions import StorageError
from .util import mask_device_id

_LOGGER = logging.getLogger(__name__)


class StorageKey(str, Enum):
    LAST_SUBMISSION = "lastSubmission"
    DEVICE_ID = "deviceId"
    CIRCUIT_STATE = "circuitState"
    ENTRY_CACHE_PREFIX = "entry_"


@runtime_checkable
class KeyValueStore(Protocol):
    """The only storage primitive the library depends on.

    Implementations raise :class:`~pyfacilitydirectory.exceptions.StorageError`
    when the underlying storage fails.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store, used as the default and in tests."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> list[str]:
        return list(self._data)


def hash_storage_key(key: str, namespace: str = STORAGE_NAMESPACE) -> str:
    """Hash a logical key so stored keys cannot be enumerated."""
    digest = hashlib.sha256(f"{namespace}:{key}".encode()).hexdigest()
    return digest[:STORAGE_KEY_LENGTH]


class NamespacedStore:
    """Wrap another store, hashing every key under a namespace."""

    def __init__(self, store: KeyValueStore, namespace: str = STORAGE_NAMESPACE) -> None:
        self._store = store
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return hash_storage_key(key, self._namespace)

    async def get(self, key: str) -> str | None:
        return await self._store.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self._store.set(self._key(key), value)

    async def remove(self, key: str) -> None:
        await self._store.remove(self._key(key))


class DeviceIdentity:
    """Opaque per-installation identifier, generated once and never rotated."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._device_id: str | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> str:
        if self._device_id is not None:
            return self._device_id
        async with self._lock:
            if self._device_id is None:
                self._device_id = await self._load_or_create()
        return self._device_id

    async def _load_or_create(self) -> str:
        try:
            existing = await self._store.get(StorageKey.DEVICE_ID.value)
        except StorageError:
            _LOGGER.warning("Storage read failed for device id; using an in-memory id")
            existing = None
        if existing:
            return existing
        device_id = uuid.uuid4().hex
        try:
            await self._store.set(StorageKey.DEVICE_ID.value, device_id)
        except StorageError:
            _LOGGER.warning("Storage write failed for device id; id kept in memory only")
        _LOGGER.debug("Generated device id %s", mask_device_id(device_id))
        return device_id


async def load_json(store: KeyValueStore, key: str) -> dict | None:
    """Read a JSON object, treating storage failures and corrupt data as missing."""
    try:
        raw = await store.get(key)
    except StorageError:
        _LOGGER.warning("Storage read failed for %s; continuing without stored state", key)
        return None
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        _LOGGER.debug("Stored value for %s is not valid JSON; ignoring it", key)
        return None
    return data if isinstance(data, dict) else None


async def save_json(store: KeyValueStore, key: str, data: dict) -> None:
    """Write a JSON object; in-memory state stays authoritative if this fails."""
    try:
        await store.set(key, json.dumps(data, separators=(",", ":")))
    except StorageError:
        _LOGGER.warning("Storage write failed for %s; state kept in memory only", key)
