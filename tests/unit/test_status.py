"""Unit tests for booking status and display fields."""
from datetime import datetime, timedelta

from scheduling.status import (
    BookingStatus,
    duration_hours,
    format_timestamp,
    formatted_time_range,
    resolve_status,
    time_until_start,
)

T = datetime(2030, 1, 15, 12, 0)
HOUR = timedelta(hours=1)


class TestResolveStatus:
    """Test status resolution relative to now."""

    def test_straddling_now_is_active(self):
        """Test that a booking spanning now is active."""
        assert resolve_status(T - HOUR, T + HOUR, T) is BookingStatus.ACTIVE

    def test_future_is_upcoming(self):
        """Test that a booking starting later is upcoming."""
        assert resolve_status(T + HOUR, T + 2 * HOUR, T) is BookingStatus.UPCOMING

    def test_past_is_completed(self):
        """Test that a booking that ended is completed."""
        assert resolve_status(T - 2 * HOUR, T - HOUR, T) is BookingStatus.COMPLETED

    def test_start_equal_to_now_is_active(self):
        """Test that a booking starting exactly now is active."""
        assert resolve_status(T, T + HOUR, T) is BookingStatus.ACTIVE

    def test_end_equal_to_now_is_completed(self):
        """Test that a booking ending exactly now is completed."""
        assert resolve_status(T - HOUR, T, T) is BookingStatus.COMPLETED

    def test_status_serializes_as_plain_string(self):
        """Test that statuses compare equal to their string values."""
        assert BookingStatus.UPCOMING.value == "upcoming"
        assert BookingStatus.ACTIVE == "active"


class TestDisplayFields:
    """Test the derived display fields."""

    def test_duration_hours_rounds_to_two_decimals(self):
        """Test that durations are rounded to two decimals."""
        assert duration_hours(T, T + timedelta(minutes=90)) == 1.5
        assert duration_hours(T, T + timedelta(minutes=50)) == 0.83
        assert duration_hours(T, T + timedelta(hours=8)) == 8.0

    def test_duration_counts_whole_minutes(self):
        """Test that leftover seconds are dropped."""
        assert duration_hours(T, T + timedelta(minutes=30, seconds=59)) == 0.5

    def test_time_until_start_uses_largest_unit(self):
        """Test that the largest non-zero unit is reported."""
        assert time_until_start(T + 2 * HOUR, T) == "2 hours from now"
        assert time_until_start(T + timedelta(minutes=1), T) == "1 minute from now"
        assert time_until_start(T + timedelta(days=3, hours=4), T) == "3 days from now"
        assert time_until_start(T + timedelta(days=15), T) == "2 weeks from now"

    def test_time_until_start_is_none_once_started(self):
        """Test that started bookings have no countdown."""
        assert time_until_start(T, T) is None
        assert time_until_start(T - HOUR, T) is None

    def test_formatted_time_range(self):
        """Test the human-readable time range."""
        start = datetime(2026, 10, 20, 9, 0)
        end = datetime(2026, 10, 20, 13, 30)

        assert formatted_time_range(start, end) == "Oct 20, 2026 9:00 AM - 1:30 PM"

    def test_formatted_time_range_at_noon(self):
        """Test that noon is rendered as 12 PM."""
        assert formatted_time_range(datetime(2030, 3, 5, 12, 0), datetime(2030, 3, 5, 12, 45)) == (
            "Mar 5, 2030 12:00 PM - 12:45 PM"
        )

    def test_format_timestamp(self):
        """Test the timestamp format and its handling of None."""
        assert format_timestamp(datetime(2030, 1, 2, 3, 4, 5)) == "2030-01-02 03:04:05"
        assert format_timestamp(None) is None
