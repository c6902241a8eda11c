"""In-memory backend for development and tests."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from ..exceptions import NotFoundError
from ..models import DocumentKind
from .base import PersistenceBackend

_LOCATION_BOUND_KINDS = (DocumentKind.REVIEW, DocumentKind.REPORT)


class MemoryBackend(PersistenceBackend):
    """Keep documents in process memory.

    Reviews and reports must reference a known location id.
    """

    def __init__(self, locations: Iterable[str] = ()) -> None:
        self._locations = set(locations)
        self._documents: dict[DocumentKind, dict[str, dict[str, Any]]] = {
            kind: {} for kind in DocumentKind
        }

    def add_location(self, location_id: str) -> None:
        self._locations.add(location_id)

    def documents(self, kind: DocumentKind) -> dict[str, dict[str, Any]]:
        return dict(self._documents[kind])

    async def create(self, kind: DocumentKind, document: Mapping[str, Any]) -> str:
        if kind in _LOCATION_BOUND_KINDS:
            location_id = document.get("locationId")
            if location_id not in self._locations:
                raise NotFoundError(f"Location {location_id!r} was not found.")
        document_id = uuid.uuid4().hex
        self._documents[kind][document_id] = dict(document)
        return document_id
