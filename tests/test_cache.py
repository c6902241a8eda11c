import pytest

from pyfacilitydirectory.cache import EntryCache
from pyfacilitydirectory.storage import MemoryStore


class _FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_cache_returns_fresh_data() -> None:
    clock = _FakeClock()
    cache = EntryCache(MemoryStore(), clock=clock)

    await cache.set("loc-1", {"name": "Library", "hours": "24/7"})
    clock.now += 900

    assert await cache.get("loc-1") == {"name": "Library", "hours": "24/7"}
    assert await cache.get("loc-2") is None


@pytest.mark.asyncio
async def test_cache_expires_and_removes_stale_entries() -> None:
    clock = _FakeClock()
    store = MemoryStore()
    cache = EntryCache(store, expiry=60, clock=clock)

    await cache.set("loc-1", ["a"])
    clock.now += 61

    assert await cache.get("loc-1") is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_cache_ignores_corrupt_records() -> None:
    store = MemoryStore({"entry_loc-1": "not json", "entry_loc-2": '{"data": 1}'})
    cache = EntryCache(store, clock=_FakeClock())

    assert await cache.get("loc-1") is None
    assert await cache.get("loc-2") is None


@pytest.mark.asyncio
async def test_cache_invalidate() -> None:
    cache = EntryCache(MemoryStore(), clock=_FakeClock())
    await cache.set("loc-1", 1)
    await cache.invalidate("loc-1")
    assert await cache.get("loc-1") is None
