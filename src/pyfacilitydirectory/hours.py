"""Normalization of raw operating hours into canonical hours.

Raw hours arrive in five shapes: the ``"24/7"`` and ``"UNK"`` sentinels, a
free-text weekly string such as ``"Monday: 6 AM to 10 PM, Tuesday: ..."``, a
structured object with ``is24_7``/``isUnsure`` flags and a ``schedule`` map,
and a legacy object keyed by lowercase weekday names. Normalization never
raises: unreadable records become :class:`Unspecified` and unreadable days
become closed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .const import SENTINEL_24_7, SENTINEL_UNKNOWN
from .models import (
    CLOSED_WINDOW,
    WEEKDAYS,
    Always24x7,
    CanonicalHours,
    PerDay,
    RawAlways24x7,
    RawFreeText,
    RawHours,
    RawLegacyWeekly,
    RawStructured,
    RawUnknown,
    TimeWindow,
    Unspecified,
    Weekday,
)
from .util import parse_meridiem_time, parse_time_of_day

_LOGGER = logging.getLogger(__name__)

_CLAUSE_SEPARATOR = ", "
_DAY_SEPARATOR = ": "
_RANGE_SEPARATOR = " to "


def classify_raw_hours(raw: Any) -> RawHours | None:
    """Return the raw shape of ``raw``, or ``None`` when it is not recognized."""
    if isinstance(raw, str):
        text = raw.strip()
        if text == SENTINEL_24_7:
            return RawAlways24x7()
        if text == SENTINEL_UNKNOWN:
            return RawUnknown()
        return RawFreeText(text) if text else None
    if not isinstance(raw, Mapping):
        return None
    is_24_7 = raw.get("is24_7") is True
    is_unsure = raw.get("isUnsure") is True
    if "schedule" in raw:
        schedule = raw["schedule"]
        return RawStructured(
            is_24_7=is_24_7,
            is_unsure=is_unsure,
            schedule=schedule if isinstance(schedule, Mapping) else None,
        )
    days = {day.value: raw[day.value] for day in WEEKDAYS if day.value in raw}
    if days:
        return RawLegacyWeekly(days=days, is_24_7=is_24_7, is_unsure=is_unsure)
    if "is24_7" in raw or "isUnsure" in raw:
        return RawStructured(is_24_7=is_24_7, is_unsure=is_unsure)
    return None


def normalize_hours(raw: Any) -> CanonicalHours:
    """Normalize any raw hours value into canonical hours."""
    match classify_raw_hours(raw):
        case RawAlways24x7():
            return Always24x7()
        case RawUnknown():
            return Unspecified()
        case RawStructured(is_24_7=True) | RawLegacyWeekly(is_24_7=True):
            return Always24x7()
        case RawStructured(is_unsure=True) | RawLegacyWeekly(is_unsure=True):
            return Unspecified()
        case RawStructured(schedule=None):
            _LOGGER.debug("Structured hours carry no schedule")
            return Unspecified()
        case RawStructured(schedule=schedule):
            return PerDay(_parse_day_map(schedule))
        case RawLegacyWeekly(days=days):
            return PerDay(_parse_day_map(days))
        case RawFreeText(text=text):
            return _parse_free_text(text)
        case _:
            _LOGGER.debug("Unrecognized hours value of type %s", type(raw).__name__)
            return Unspecified()


def weekly_schedule(hours: CanonicalHours) -> list[tuple[Weekday, TimeWindow]]:
    """Return the seven canonical windows, Monday first, for display.

    Only per-day hours have windows; other kinds return an empty list.
    """
    if not isinstance(hours, PerDay):
        return []
    return [(day, hours.window(day)) for day in WEEKDAYS]


def _parse_day_map(data: Mapping[str, Any]) -> dict[Weekday, TimeWindow]:
    days: dict[Weekday, TimeWindow] = {}
    for key, value in data.items():
        day = Weekday.parse(key) if isinstance(key, str) else None
        if day is None:
            _LOGGER.debug("Ignoring unknown weekday key %r", key)
            continue
        days[day] = _parse_day(day, value)
    return _fill_week(days)


def _parse_day(day: Weekday, value: Any) -> TimeWindow:
    if not isinstance(value, Mapping):
        _LOGGER.debug("Hours for %s are not an object; treating as closed", day.value)
        return CLOSED_WINDOW
    if value.get("isClosed") is True:
        return CLOSED_WINDOW
    opens = parse_time_of_day(value.get("open"))
    closes = parse_time_of_day(value.get("close"))
    if opens is None or closes is None:
        _LOGGER.debug("Invalid hours for %s; treating as closed", day.value)
        return CLOSED_WINDOW
    return TimeWindow(open=opens, close=closes)


def _parse_free_text(text: str) -> CanonicalHours:
    days: dict[Weekday, TimeWindow] = {}
    for clause in text.split(_CLAUSE_SEPARATOR):
        parsed = _parse_clause(clause)
        if parsed is None:
            _LOGGER.debug("Skipping unreadable hours clause %r", clause)
            continue
        day, window = parsed
        days.setdefault(day, window)
    if not days:
        return Unspecified()
    return PerDay(_fill_week(days))


def _parse_clause(clause: str) -> tuple[Weekday, TimeWindow] | None:
    parts = clause.split(_DAY_SEPARATOR, 1)
    if len(parts) != 2:
        return None
    day = Weekday.parse(parts[0])
    if day is None:
        return None
    endpoints = parts[1].split(_RANGE_SEPARATOR)
    if len(endpoints) != 2:
        return None
    opens = parse_meridiem_time(endpoints[0])
    closes = parse_meridiem_time(endpoints[1])
    if opens is None or closes is None:
        return None
    return day, TimeWindow(open=opens, close=closes)


def _fill_week(days: Mapping[Weekday, TimeWindow]) -> dict[Weekday, TimeWindow]:
    return {day: days.get(day, CLOSED_WINDOW) for day in WEEKDAYS}
