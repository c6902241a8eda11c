from datetime import datetime

import pytest

from pyfacilitydirectory.availability import (
    get_availability,
    is_always_open,
    is_open,
    is_open_at,
    next_change,
)
from pyfacilitydirectory.hours import normalize_hours
from pyfacilitydirectory.models import (
    CLOSED_WINDOW,
    WEEKDAYS,
    Always24x7,
    PerDay,
    TimeWindow,
    Unspecified,
    Weekday,
)


def _every_day(window: TimeWindow) -> PerDay:
    return PerDay({day: window for day in WEEKDAYS})


def _minutes(hour: int, minute: int = 0) -> int:
    return hour * 60 + minute


def test_always_and_unspecified() -> None:
    assert is_open(Always24x7(), Weekday.MONDAY, 0) is True
    assert is_open(Unspecified(), Weekday.MONDAY, _minutes(12)) is False


@pytest.mark.parametrize(
    ("minute", "expected"),
    [
        (_minutes(8, 59), False),
        (_minutes(9), True),
        (_minutes(12), True),
        (_minutes(17), True),
        (_minutes(17, 1), False),
    ],
)
def test_day_window_endpoints_inclusive(minute: int, expected: bool) -> None:
    hours = _every_day(TimeWindow(open=_minutes(9), close=_minutes(17)))
    assert is_open(hours, Weekday.WEDNESDAY, minute) is expected


@pytest.mark.parametrize(
    ("minute", "expected"),
    [
        (_minutes(23), True),
        (_minutes(1), True),
        (_minutes(22), True),
        (_minutes(2), True),
        (_minutes(12), False),
        (_minutes(2, 1), False),
    ],
)
def test_overnight_window(minute: int, expected: bool) -> None:
    hours = _every_day(TimeWindow(open=_minutes(22), close=_minutes(2)))
    assert is_open(hours, Weekday.FRIDAY, minute) is expected


def test_closed_and_missing_days() -> None:
    hours = PerDay({Weekday.MONDAY: TimeWindow(open=0, close=_minutes(23, 59))})
    assert is_open(hours, Weekday.MONDAY, _minutes(10)) is True
    assert is_open(hours, Weekday.TUESDAY, _minutes(10)) is False
    closed = PerDay({Weekday.MONDAY: CLOSED_WINDOW})
    assert is_open(closed, Weekday.MONDAY, _minutes(10)) is False


def test_is_open_at_uses_local_clock_as_is() -> None:
    hours = normalize_hours("Monday: 6 AM to 10 PM")
    # 2024-01-01 was a Monday.
    assert is_open_at(hours, datetime(2024, 1, 1, 6, 0)) is True
    assert is_open_at(hours, datetime(2024, 1, 1, 22, 1)) is False
    assert is_open_at(hours, datetime(2024, 1, 2, 12, 0)) is False


def test_get_availability_snapshot() -> None:
    snapshot = get_availability("24/7", datetime(2024, 1, 1, 3, 0))
    assert snapshot.is_open is True
    assert is_always_open(snapshot.hours)
    unknown = get_availability({"isUnsure": True}, datetime(2024, 1, 1, 12, 0))
    assert unknown.is_open is False
    assert unknown.hours == Unspecified()


def test_next_change() -> None:
    hours = normalize_hours("Monday: 9 AM to 5 PM, Wednesday: 10 AM to 2 PM")
    assert next_change(hours, Weekday.MONDAY, _minutes(8), opening=True) == (
        Weekday.MONDAY,
        _minutes(9),
    )
    assert next_change(hours, Weekday.MONDAY, _minutes(10), opening=True) == (
        Weekday.WEDNESDAY,
        _minutes(10),
    )
    assert next_change(hours, Weekday.MONDAY, _minutes(10), opening=False) == (
        Weekday.MONDAY,
        _minutes(17),
    )
    assert next_change(hours, Weekday.THURSDAY, 0, opening=True) == (Weekday.MONDAY, _minutes(9))
    assert next_change(Always24x7(), Weekday.MONDAY, 0, opening=True) is None
    assert next_change(PerDay(), Weekday.MONDAY, 0, opening=True) is None


def test_next_change_overnight_window() -> None:
    hours = normalize_hours({"schedule": {"monday": {"open": "22:00", "close": "02:00"}}})
    assert next_change(hours, Weekday.MONDAY, _minutes(23), opening=False) == (
        Weekday.TUESDAY,
        _minutes(2),
    )
    assert next_change(hours, Weekday.MONDAY, _minutes(1), opening=False) == (
        Weekday.MONDAY,
        _minutes(2),
    )
    assert next_change(hours, Weekday.SUNDAY, _minutes(12), opening=False) == (
        Weekday.TUESDAY,
        _minutes(2),
    )
    assert next_change(hours, Weekday.MONDAY, _minutes(23), opening=True) == (
        Weekday.MONDAY,
        _minutes(22),
    )
