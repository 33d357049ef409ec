from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from medtracker.core import time_utils


@pytest.mark.parametrize("value", ["00:00", "08:00", "12:30", "23:59"])
def test_valid_time_of_day(value):
    assert time_utils.is_valid_time_of_day(value)


@pytest.mark.parametrize("value", ["", "8:00", "24:00", "12:60", "08:00:00", "8am", None])
def test_invalid_time_of_day(value):
    assert not time_utils.is_valid_time_of_day(value)


def test_minute_of_day_truncates_seconds():
    assert time_utils.minute_of_day(datetime(2026, 10, 19, 8, 0, 59)) == "08:00"


def test_aware_datetime_is_converted_to_local():
    aware = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    local = aware.astimezone()
    assert time_utils.minute_of_day(aware) == local.strftime("%H:%M")
    assert time_utils.local_date(aware) == local.date()


def test_same_local_day_is_calendar_based():
    late = datetime(2026, 10, 19, 23, 59)
    assert time_utils.is_same_local_day(late, datetime(2026, 10, 19, 0, 0))
    assert not time_utils.is_same_local_day(late, late + timedelta(minutes=1))


def test_parse_iso8601_accepts_z_suffix():
    parsed = time_utils.parse_iso8601("2026-10-19T06:05:00.000Z")
    assert parsed == datetime(2026, 10, 19, 6, 5, tzinfo=timezone.utc)


def test_parse_iso8601_rejects_garbage():
    with pytest.raises(ValueError):
        time_utils.parse_iso8601("yesterday")


def test_format_iso8601():
    assert time_utils.format_iso8601(None) is None
    assert time_utils.format_iso8601(datetime(2026, 10, 19, 8, 5)) == "2026-10-19T08:05:00"


@pytest.mark.parametrize(
    "value, expected",
    [("08:00", "8:00 AM"), ("00:30", "12:30 AM"), ("12:00", "12:00 PM"), ("13:05", "1:05 PM")],
)
def test_format_time_12h(value, expected):
    assert time_utils.format_time_12h(value) == expected


def test_format_datetime_display():
    now = datetime(2026, 10, 19, 12, 0)
    assert time_utils.format_datetime_display(datetime(2026, 10, 19, 8, 5), now) == "Today at 8:05 AM"
    assert time_utils.format_datetime_display(datetime(2026, 10, 18, 21, 0), now) == "2026-10-18 at 9:00 PM"
