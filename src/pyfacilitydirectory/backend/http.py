"""HTTP document-store backend."""

from __future__ import annotations

import builtins
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..const import DEFAULT_HEADERS, TIMEOUT_STATUSES, TRANSIENT_STATUSES
from ..exceptions import (
    NetworkError,
    NotFoundError,
    PersistenceError,
    TimeoutError,
    ValidationError,
)
from ..models import DocumentKind
from .base import PersistenceBackend

_LOGGER = logging.getLogger(__name__)


class HttpBackend(PersistenceBackend):
    """Backend that POSTs documents to ``{base_url}{api_uri}/{collection}``.

    The request itself is attempted once; retries belong to the caller.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        *,
        api_uri: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        self._session = session
        self._base_url = self._normalize_base_url(base_url)
        self._api_uri = self._normalize_api_uri(api_uri)
        self._headers = {**DEFAULT_HEADERS, **(headers or {})}

    async def create(self, kind: DocumentKind, document: Mapping[str, Any]) -> str:
        _LOGGER.debug("Backend create %s started", kind.value)
        data = await self._request_json("POST", f"/{kind.value}", json=dict(document))
        document_id = data.get("id") if isinstance(data, Mapping) else None
        if document_id is None or document_id == "":
            raise PersistenceError("Response did not include a document id.")
        _LOGGER.debug("Backend create %s completed", kind.value)
        return str(document_id)

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building backend requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{self._api_uri}{normalized_path}"

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        try:
            async with self._session.request(
                method,
                url,
                headers=self._headers,
                ssl=True,
                **kwargs,
            ) as response:
                self._raise_for_status(response)
                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError) as exc:
                    raise PersistenceError("Response did not contain valid JSON.") from exc
        except aiohttp.ClientError as exc:
            raise NetworkError("Network request failed.") from exc
        except builtins.TimeoutError as exc:
            raise TimeoutError("Network request timed out.") from exc

    def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if 200 <= response.status < 300:
            return
        if response.status == 404:
            raise NotFoundError("Referenced document was not found.")
        if response.status in TIMEOUT_STATUSES:
            raise TimeoutError(f"Backend deadline exceeded with status {response.status}.")
        if response.status in TRANSIENT_STATUSES:
            raise NetworkError(f"Backend temporarily unavailable with status {response.status}.")
        raise PersistenceError(f"Backend request failed with status {response.status}.")

    def _normalize_base_url(self, base_url: str) -> str:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        return base_url.strip().rstrip("/")

    def _normalize_api_uri(self, api_uri: str | None) -> str:
        if api_uri is None:
            return ""
        if not isinstance(api_uri, str):
            raise ValidationError("api_uri must be a string.")
        normalized = api_uri.strip().strip("/")
        if not normalized:
            return ""
        return f"/{normalized}"
