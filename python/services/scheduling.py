"""
Calendar arithmetic for slots, sessions and pass expiry.

Wall-clock times are "HH:MM" strings at the API edge and datetime.time
values at the database edge. Day of week is 0 = Sunday ... 6 = Saturday.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Union

from core.exceptions import ValidationError
from models.domain.enums import ServiceType

TimeLike = Union[str, time]

DEFAULT_PASS_DAYS = 1
DEFAULT_MEMBERSHIP_DAYS = 30


def parse_time(value: TimeLike, field: str = "time") -> time:
    """Accept "HH:MM" or "HH:MM:SS" (or a time) and return a time."""
    if isinstance(value, time):
        return value
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    parts = str(value).strip().split(":")
    try:
        hour = int(parts[0])
        minute = int(parts[1]) if len(parts) > 1 else 0
        second = int(parts[2]) if len(parts) > 2 else 0
        return time(hour, minute, second)
    except (ValueError, IndexError):
        raise ValidationError(f"Invalid {field}: {value}", field=field)


def format_time(value: TimeLike) -> str:
    return parse_time(value).strftime("%H:%M")


def parse_date(value: Union[str, date], field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}", field=field)


def day_of_week(value: Union[str, date]) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (parse_date(value).weekday() + 1) % 7


def add_hours(start: TimeLike, hours: int) -> time:
    """
    Shift a wall-clock time by whole hours, keeping minutes.

    A session may not run past midnight.
    """
    start_t = parse_time(start, "start_time")
    end_hour = start_t.hour + hours
    if end_hour > 23 and not (end_hour == 24 and start_t.minute == 0):
        raise ValidationError("Session cannot run past midnight", field="duration_hours")
    if end_hour == 24:
        return time(23, 59)
    return time(end_hour, start_t.minute)


def session_hours(start: TimeLike, hours: int) -> List[time]:
    """Start times of each hour a session covers: start, start+1h, ..."""
    start_t = parse_time(start, "start_time")
    return [
        time(start_t.hour + i, start_t.minute)
        for i in range(hours)
        if start_t.hour + i < 24
    ]


def compute_expiry(
    service_type: str,
    booking_date: Union[str, date],
    end_time: Optional[TimeLike] = None,
    duration_days: Optional[int] = None,
) -> datetime:
    """
    When an entry pass stops being valid.

    - session: the booking date at the session end time
    - pass: booking date + duration_days (default 1)
    - membership: booking date + duration_days (default 30)
    """
    day = parse_date(booking_date, "booking_date")
    midnight = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)

    if service_type == ServiceType.SESSION.value:
        end = parse_time(end_time, "end_time") if end_time else time(23, 59)
        return datetime.combine(day, end, tzinfo=timezone.utc)

    if service_type == ServiceType.PASS.value:
        return midnight + timedelta(days=duration_days or DEFAULT_PASS_DAYS)

    return midnight + timedelta(days=duration_days or DEFAULT_MEMBERSHIP_DAYS)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sortable_stamp(value) -> str:
    """Sortable text form of a date/datetime column (None sorts first)."""
    if value is None:
        return ""
    return value.isoformat() if hasattr(value, "isoformat") else str(value)
