"""Public data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> Weekday:
        return WEEKDAYS[value.weekday()]

    @classmethod
    def parse(cls, name: str) -> Weekday | None:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


class OperationKind(str, Enum):
    """Mutating operations, each guarded by its own circuit breaker."""

    CREATE_ENTRY = "create_entry"
    ADD_REVIEW = "add_review"
    ADD_REPORT = "add_report"


class DocumentKind(str, Enum):
    """Document collections written by the persistence backend."""

    PENDING_ENTRY = "pendingEntries"
    REVIEW = "reviews"
    REPORT = "reports"


# Raw hours, one constructor per accepted input shape.


@dataclass(frozen=True, slots=True)
class RawAlways24x7:
    pass


@dataclass(frozen=True, slots=True)
class RawUnknown:
    pass


@dataclass(frozen=True, slots=True)
class RawFreeText:
    text: str


@dataclass(frozen=True, slots=True)
class RawStructured:
    is_24_7: bool = False
    is_unsure: bool = False
    schedule: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RawLegacyWeekly:
    days: Mapping[str, Any]
    is_24_7: bool = False
    is_unsure: bool = False


RawHours = RawAlways24x7 | RawUnknown | RawFreeText | RawStructured | RawLegacyWeekly


# Canonical hours.


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Opening window in minutes since midnight.

    ``close < open`` is an overnight window that wraps past midnight.
    """

    open: int = 0
    close: int = 0
    closed: bool = False

    @property
    def overnight(self) -> bool:
        return not self.closed and self.close < self.open


CLOSED_WINDOW = TimeWindow(closed=True)


@dataclass(frozen=True, slots=True)
class Always24x7:
    pass


@dataclass(frozen=True, slots=True)
class Unspecified:
    pass


@dataclass(frozen=True, slots=True)
class PerDay:
    days: Mapping[Weekday, TimeWindow] = field(default_factory=dict)

    def window(self, day: Weekday) -> TimeWindow:
        return self.days.get(day, CLOSED_WINDOW)


CanonicalHours = Always24x7 | Unspecified | PerDay


@dataclass(frozen=True, slots=True)
class AvailabilitySnapshot:
    is_open: bool
    hours: CanonicalHours


# Write path.


@dataclass(frozen=True, slots=True)
class SubmissionPayload:
    name: str
    latitude: float
    longitude: float
    description: str | None = None
    rating: int | None = None
    tags: tuple[str, ...] = ()
    free_text: str | None = None


@dataclass(frozen=True, slots=True)
class ReviewPayload:
    location_id: str
    rating: int
    comment: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReportPayload:
    location_id: str
    issue_type: str
    details: str


@dataclass(frozen=True, slots=True)
class ValidationResult(Generic[T]):
    valid: bool
    errors: tuple[str, ...]
    sanitized: T


@dataclass(slots=True)
class RateLimitRecord:
    device_id: str
    last_submission_at: float


@dataclass(slots=True)
class CircuitState:
    consecutive_failures: int = 0
    last_failure_at: float | None = None
    open: bool = False
