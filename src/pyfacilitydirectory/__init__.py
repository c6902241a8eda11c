"""pyFacilityDirectory package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .availability import get_availability, is_open, is_open_at
from .client import Client
from .exceptions import (
    CircuitOpenError,
    NetworkError,
    NotFoundError,
    PersistenceError,
    PyFacilityDirectoryError,
    RateLimitError,
    StorageError,
    TimeoutError,
    ValidationError,
)
from .gateway import WriteGateway
from .hours import normalize_hours, weekly_schedule
from .models import (
    Always24x7,
    AvailabilitySnapshot,
    PerDay,
    ReportPayload,
    ReviewPayload,
    SubmissionPayload,
    TimeWindow,
    Unspecified,
    Weekday,
)

try:
    __version__ = version("pyfacilitydirectory")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "Always24x7",
    "AvailabilitySnapshot",
    "CircuitOpenError",
    "Client",
    "NetworkError",
    "NotFoundError",
    "PerDay",
    "PersistenceError",
    "PyFacilityDirectoryError",
    "RateLimitError",
    "ReportPayload",
    "ReviewPayload",
    "StorageError",
    "SubmissionPayload",
    "TimeWindow",
    "TimeoutError",
    "Unspecified",
    "ValidationError",
    "Weekday",
    "WriteGateway",
    "__version__",
    "get_availability",
    "is_open",
    "is_open_at",
    "normalize_hours",
    "weekly_schedule",
]
