"""Domain errors raised by the booking engine.

Raised by the validator, the overlap detector and the lifecycle manager and
translated into HTTP responses by the services.
"""
from __future__ import annotations

from enum import Enum


class TimeRangeViolation(str, Enum):
    END_BEFORE_START = "end-before-start"
    NOT_FUTURE = "not-future"
    OUTSIDE_BUSINESS_HOURS_START = "outside-business-hours-start"
    OUTSIDE_BUSINESS_HOURS_END = "outside-business-hours-end"
    TOO_LONG = "too-long"
    TOO_SHORT = "too-short"


VIOLATION_MESSAGES = {
    TimeRangeViolation.END_BEFORE_START: "End time must be after start time.",
    TimeRangeViolation.NOT_FUTURE: "Start time must be in the future.",
    TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_START: "Bookings are only allowed between 8:00 AM and 10:00 PM.",
    TimeRangeViolation.OUTSIDE_BUSINESS_HOURS_END: "Bookings must end by 11:00 PM.",
    TimeRangeViolation.TOO_LONG: "Booking duration cannot exceed 8 hours.",
    TimeRangeViolation.TOO_SHORT: "Booking duration must be at least 30 minutes.",
}


class BookingError(Exception):
    """Base class for every error the booking engine reports to its callers."""

    default_message = "Booking request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BookingError):
    """Malformed or out-of-bounds request field (user name, instants)."""

    default_message = "Invalid booking request"


class InvalidTimeRange(BookingError):
    """The candidate interval breaks a business-hours or duration rule."""

    def __init__(self, reason: TimeRangeViolation, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or VIOLATION_MESSAGES[reason])


class SlotConflict(BookingError):
    default_message = "This time slot conflicts with an existing booking"


class NotFound(BookingError):
    default_message = "Not found"


class TransientStorageFailure(BookingError):
    """Storage failed or timed out. Safe for the caller to retry; the engine never does."""

    default_message = "Storage is temporarily unavailable, please retry"
