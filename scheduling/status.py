"""Read-time state of a booking: status and the fields derived for display."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterator, Optional, Tuple

from dateutil.relativedelta import relativedelta

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class BookingStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


def resolve_status(start: datetime, end: datetime, now: datetime) -> BookingStatus:
    if end <= now:
        return BookingStatus.COMPLETED
    if start <= now:
        return BookingStatus.ACTIVE
    return BookingStatus.UPCOMING


def duration_hours(start: datetime, end: datetime) -> float:
    """Length in hours, counted in whole minutes and rounded to two decimals."""

    minutes = int((end - start).total_seconds() // 60)
    return round(minutes / 60, 2)


def _relative_units(delta: relativedelta) -> Iterator[Tuple[str, int]]:
    yield "year", delta.years
    yield "month", delta.months
    yield "week", delta.days // 7
    yield "day", delta.days
    yield "hour", delta.hours
    yield "minute", delta.minutes
    yield "second", delta.seconds


def time_until_start(start: datetime, now: datetime) -> Optional[str]:
    """Human-readable distance to the start, e.g. ``"2 hours from now"``.

    Only upcoming bookings have one; ``None`` otherwise. The largest non-zero
    calendar unit is used and the remainder dropped.
    """
    if start <= now:
        return None
    delta = relativedelta(start, now)
    for unit, count in _relative_units(delta):
        if count:
            return f"{count} {unit}{'' if count == 1 else 's'} from now"
    return "1 second from now"


def _clock_label(value: datetime) -> str:
    return f"{value.hour % 12 or 12}:{value:%M} {'AM' if value.hour < 12 else 'PM'}"


def formatted_time_range(start: datetime, end: datetime) -> str:
    """``"Oct 20, 2026 9:00 AM - 10:00 AM"``"""

    return f"{start:%b} {start.day}, {start.year} {_clock_label(start)} - {_clock_label(end)}"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)
