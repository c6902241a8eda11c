"""Client facade wiring storage, backend, write gateway and entry cache."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import aiohttp

from .availability import get_availability
from .backend.http import HttpBackend
from .cache import EntryCache
from .const import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT
from .gateway import WriteGateway
from .models import AvailabilitySnapshot, ReportPayload, ReviewPayload, SubmissionPayload
from .retry import RetryExecutor
from .storage import KeyValueStore, MemoryStore, NamespacedStore

_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT * 2)


class Client:
    """Facade over the directory core.

    An injected ``session`` is never closed by the client; a session the
    client creates itself is closed by :meth:`aclose`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        store: KeyValueStore | None = None,
        api_uri: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self._base_url = base_url
        self._api_uri = api_uri
        self._session = session
        self._owns_session = session is None
        self._store = NamespacedStore(store if store is not None else MemoryStore())
        self._retry = RetryExecutor(timeout=timeout, max_retries=max_retries)
        self._gateway: WriteGateway | None = None
        self.entries = EntryCache(self._store)

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._gateway = None

    def availability(self, raw_hours: Any, when: datetime) -> AvailabilitySnapshot:
        return get_availability(raw_hours, when)

    async def create_entry(self, payload: SubmissionPayload) -> str:
        return await self._ensure_gateway().create_entry(payload)

    async def add_review(self, payload: ReviewPayload) -> str:
        return await self._ensure_gateway().add_review(payload)

    async def add_report(self, payload: ReportPayload) -> str:
        return await self._ensure_gateway().add_report(payload)

    def _ensure_gateway(self) -> WriteGateway:
        if self._gateway is None:
            backend = HttpBackend(self._ensure_session(), self._base_url, api_uri=self._api_uri)
            self._gateway = WriteGateway(backend, self._store, retry=self._retry)
        return self._gateway

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=_DEFAULT_TIMEOUT)
        return self._session
