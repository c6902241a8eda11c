"""Persistence backends for the write path."""

from .base import PersistenceBackend
from .http import HttpBackend
from .memory import MemoryBackend

__all__ = ["HttpBackend", "MemoryBackend", "PersistenceBackend"]
