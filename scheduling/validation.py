"""Business-hours and duration rules for a candidate booking interval."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List

from common.config import Settings

from .errors import InvalidTimeRange, TimeRangeViolation, VIOLATION_MESSAGES


def _hour_label(hour: int) -> str:
    return time(hour).strftime("%I:%M %p").lstrip("0")


@dataclass(frozen=True)
class BookingPolicy:
    business_open_hour: int = 8
    last_start_hour: int = 22
    closing_hour: int = 23
    min_duration: timedelta = timedelta(minutes=30)
    max_duration: timedelta = timedelta(hours=8)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingPolicy":
        return cls(
            business_open_hour=settings.business_open_hour,
            last_start_hour=settings.last_start_hour,
            closing_hour=settings.closing_hour,
            min_duration=timedelta(minutes=settings.min_booking_minutes),
            max_duration=timedelta(hours=settings.max_booking_hours),
        )

    def message_for(self, violation: TimeRangeViolation) -> str:
        if self == DEFAULT_POLICY:
            return VIOLATION_MESSAGES[violation]
        if violation is TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_START:
            return (
                f"Bookings are only allowed between {_hour_label(self.business_open_hour)} "
                f"and {_hour_label(self.last_start_hour)}."
            )
        if violation is TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_END:
            return f"Bookings must end by {_hour_label(self.closing_hour)}."
        if violation is TimeRangeViolation.TOO_LONG:
            hours = self.max_duration.total_seconds() / 3600
            return f"Booking duration cannot exceed {hours:g} hours."
        if violation is TimeRangeViolation.TOO_SHORT:
            minutes = self.min_duration.total_seconds() / 60
            return f"Booking duration must be at least {minutes:g} minutes."
        return VIOLATION_MESSAGES[violation]


DEFAULT_POLICY = BookingPolicy()


def _ends_by_closing(end: datetime, closing_hour: int) -> bool:
    # compared at minute granularity; the date of the end is not checked
    return end.hour < closing_hour or (end.hour == closing_hour and end.minute == 0)


def collect_time_range_violations(
    start: datetime,
    end: datetime,
    now: datetime,
    policy: BookingPolicy = DEFAULT_POLICY,
) -> List[TimeRangeViolation]:
    """Return every rule the interval breaks, in check order."""

    violations: List[TimeRangeViolation] = []
    if end <= start:
        violations.append(TimeRangeViolation.END_BEFORE_START)
    if start <= now:
        violations.append(TimeRangeViolation.NOT_FUTURE)
    if start.hour < policy.business_open_hour or start.hour > policy.last_start_hour:
        violations.append(TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_START)
    if not _ends_by_closing(end, policy.closing_hour):
        violations.append(TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_END)

    duration = end - start
    if duration > policy.max_duration:
        violations.append(TimeRangeViolation.TOO_LONG)
    if end > start and duration < policy.min_duration:
        violations.append(TimeRangeViolation.TOO_SHORT)
    return violations


def validate_time_range(
    start: datetime,
    end: datetime,
    now: datetime,
    policy: BookingPolicy = DEFAULT_POLICY,
) -> None:
    """Raise ``InvalidTimeRange`` for the first rule the interval breaks."""

    violations = collect_time_range_violations(start, end, now, policy)
    if violations:
        first = violations[0]
        raise InvalidTimeRange(first, policy.message_for(first))
