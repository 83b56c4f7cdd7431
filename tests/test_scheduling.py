from datetime import date, datetime, time, timezone

import pytest

from core.exceptions import ValidationError
from services.scheduling import (
    add_hours,
    compute_expiry,
    day_of_week,
    format_time,
    parse_time,
    session_hours,
    sortable_stamp,
)


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2024, 1, 7)) == 0   # Sunday
    assert day_of_week("2024-01-08") == 1       # Monday
    assert day_of_week("2024-01-13") == 6       # Saturday


@pytest.mark.parametrize("raw, expected", [
    ("09:30", time(9, 30)),
    ("9:05:10", time(9, 5, 10)),
    ("18", time(18, 0)),
    (time(7, 15), time(7, 15)),
])
def test_parse_time(raw, expected):
    assert parse_time(raw) == expected


@pytest.mark.parametrize("raw", ["", None, "noon", "25:00"])
def test_parse_time_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_time(raw)


def test_format_time_drops_seconds():
    assert format_time("06:00:00") == "06:00"


def test_add_hours_keeps_minutes():
    assert add_hours("09:15", 2) == time(11, 15)


def test_add_hours_to_midnight_is_clamped():
    assert add_hours("22:00", 2) == time(23, 59)


def test_add_hours_past_midnight_is_rejected():
    with pytest.raises(ValidationError):
        add_hours("22:30", 2)


def test_session_hours_lists_each_started_hour():
    assert session_hours("09:00", 3) == [time(9), time(10), time(11)]


def test_session_expires_at_its_end_time():
    expiry = compute_expiry("session", "2024-03-10", end_time="11:00")
    assert expiry == datetime(2024, 3, 10, 11, 0, tzinfo=timezone.utc)


def test_pass_defaults_to_one_day():
    expiry = compute_expiry("pass", date(2024, 3, 10))
    assert expiry == datetime(2024, 3, 11, tzinfo=timezone.utc)


def test_membership_uses_service_duration():
    assert compute_expiry("membership", "2024-03-10", duration_days=90) == datetime(2024, 6, 8, tzinfo=timezone.utc)
    assert compute_expiry("membership", "2024-03-10") == datetime(2024, 4, 9, tzinfo=timezone.utc)


def test_sortable_stamp_orders_dates_and_datetimes():
    stamps = [
        sortable_stamp(None),
        sortable_stamp(date(2024, 1, 7)),
        sortable_stamp(datetime(2024, 1, 7, 9, 0, tzinfo=timezone.utc)),
        sortable_stamp("2024-02-01"),
    ]
    assert stamps == sorted(stamps)
    assert stamps[0] == ""
