"""Conflict detection between a candidate interval and a room's bookings."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from common.models import Booking

    from .storage import BookingStorage


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap test: [a) and [b) intersect. Touching endpoints do not."""

    return start_a < end_b and end_a > start_b


def find_conflicts(
    storage: "BookingStorage",
    room_id: int,
    start: datetime,
    end: datetime,
    now: datetime,
    exclude_booking_id: Optional[int] = None,
) -> List["Booking"]:
    """Return the room's unfinished bookings that intersect ``[start, end)``.

    Bookings that ended at or before ``now`` are left out, the same scope the
    room listing uses. A candidate always starts after ``now`` so an ended
    booking can never intersect it.
    """
    return [
        booking
        for booking in storage.get_bookings_for_room(room_id, ending_after=now)
        if booking.id != exclude_booking_id
        and intervals_overlap(start, end, booking.start_time, booking.end_time)
    ]


def has_conflict(
    storage: "BookingStorage",
    room_id: int,
    start: datetime,
    end: datetime,
    now: datetime,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    return bool(find_conflicts(storage, room_id, start, end, now, exclude_booking_id))
