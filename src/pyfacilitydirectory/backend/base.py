"""Persistence backend contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ..models import DocumentKind


class PersistenceBackend(ABC):
    """Opaque create primitive over the three document kinds.

    Implementations return the new document id, or raise a classified
    library error (``NetworkError``, ``TimeoutError``, ``NotFoundError`` or
    ``PersistenceError``).
    """

    @abstractmethod
    async def create(self, kind: DocumentKind, document: Mapping[str, Any]) -> str:
        """Store ``document`` in the ``kind`` collection and return its id."""
