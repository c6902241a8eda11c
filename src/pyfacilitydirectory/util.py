"""Shared utilities for time parsing and identifier masking."""

from __future__ import annotations

import re
from datetime import UTC, datetime

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_MERIDIEM_RE = re.compile(r"^(\d{1,2})(:(\d{2}))?\s*(AM|PM)$", re.IGNORECASE)


def parse_clock_time(value: str) -> int | None:
    """Parse a 24-hour ``"HH:MM"`` string into minutes since midnight."""
    if not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value.strip())
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def parse_meridiem_time(value: str) -> int | None:
    """Parse a 12-hour ``"h[:mm] AM|PM"`` string into minutes since midnight.

    12 AM is midnight and 12 PM is noon; any other PM hour adds twelve hours.
    Hour 0 is accepted and read as midnight.
    """
    if not isinstance(value, str):
        return None
    match = _MERIDIEM_RE.match(value.strip())
    if match is None:
        return None
    hour = int(match.group(1))
    minute = int(match.group(3)) if match.group(3) else 0
    if hour > 12 or minute > 59:
        return None
    period = match.group(4).upper()
    if hour == 12:
        hour = 0
    if period == "PM":
        hour += 12
    return hour * 60 + minute


def parse_time_of_day(value: str) -> int | None:
    """Parse either a 24-hour or a 12-hour time string."""
    minutes = parse_clock_time(value)
    if minutes is None:
        minutes = parse_meridiem_time(value)
    return minutes


def mask_device_id(device_id: str) -> str:
    if not isinstance(device_id, str) or not device_id:
        return "***"
    if len(device_id) <= 8:
        return "*" * len(device_id)
    return f"{device_id[:4]}{'*' * (len(device_id) - 8)}{device_id[-4:]}"


def format_utc_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValueError("Timestamp must include timezone information.")
    normalized = value.astimezone(UTC).replace(microsecond=0)
    return normalized.isoformat().replace("+00:00", "Z")
