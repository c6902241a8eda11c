"""Open/closed evaluation over canonical hours.

The evaluation instant is taken as-is from the caller's local clock; no
timezone conversion happens here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .hours import normalize_hours
from .models import (
    WEEKDAYS,
    Always24x7,
    AvailabilitySnapshot,
    CanonicalHours,
    PerDay,
    TimeWindow,
    Unspecified,
    Weekday,
)


def is_open(hours: CanonicalHours, weekday: Weekday, minute: int) -> bool:
    """Return whether ``hours`` are open at ``minute`` past midnight on ``weekday``.

    Unspecified hours are never open.
    """
    match hours:
        case Always24x7():
            return True
        case Unspecified():
            return False
        case PerDay():
            return window_contains(hours.window(weekday), minute)
    return False


def window_contains(window: TimeWindow, minute: int) -> bool:
    if window.closed:
        return False
    if window.close >= window.open:
        return window.open <= minute <= window.close
    return minute >= window.open or minute <= window.close


def is_open_at(hours: CanonicalHours, when: datetime) -> bool:
    return is_open(hours, Weekday.from_date(when), when.hour * 60 + when.minute)


def is_always_open(hours: CanonicalHours) -> bool:
    return isinstance(hours, Always24x7)


def get_availability(raw: Any, when: datetime) -> AvailabilitySnapshot:
    """Normalize ``raw`` hours and evaluate them at ``when``."""
    hours = normalize_hours(raw)
    return AvailabilitySnapshot(is_open=is_open_at(hours, when), hours=hours)


def next_change(
    hours: CanonicalHours,
    weekday: Weekday,
    minute: int,
    *,
    opening: bool,
) -> tuple[Weekday, int] | None:
    """Find the next opening (or closing) time for per-day hours.

    Today's window is used if its boundary is still ahead; otherwise the next
    day with a window within a week. An overnight window closes on the
    following day. Returns ``None`` when nothing is found or
    the hours are not per-day.
    """
    if not isinstance(hours, PerDay):
        return None
    today = hours.window(weekday)
    if not today.closed:
        if opening and minute < today.open:
            return weekday, today.open
        if not opening:
            if minute < today.close:
                return weekday, today.close
            if today.overnight:
                return _following(weekday, 1), today.close
    for offset in range(1, len(WEEKDAYS) + 1):
        day = _following(weekday, offset)
        window = hours.window(day)
        if window.closed:
            continue
        if opening:
            return day, window.open
        return (_following(day, 1) if window.overnight else day), window.close
    return None


def _following(weekday: Weekday, offset: int) -> Weekday:
    return WEEKDAYS[(WEEKDAYS.index(weekday) + offset) % len(WEEKDAYS)]
