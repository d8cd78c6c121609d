"""Build response bodies from entities that were already loaded.

Nothing here touches the database: callers pass the room and its bookings
explicitly instead of relying on lazy relationship loading.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from scheduling.status import (
    BookingStatus,
    duration_hours,
    format_timestamp,
    formatted_time_range,
    resolve_status,
    time_until_start,
)

from .models import Booking, Room
from .schemas import BookingRead, RoomRead


def room_resource(room: Room, now: datetime, bookings: Optional[Sequence[Booking]] = None) -> RoomRead:
    fields = {
        "id": room.id,
        "name": room.name,
        "capacity": room.capacity,
        "created_at": format_timestamp(room.created_at),
        "updated_at": format_timestamp(room.updated_at),
    }
    if bookings is not None:
        upcoming = sorted((b for b in bookings if b.start_time > now), key=lambda b: b.start_time)
        fields["current_bookings_count"] = sum(1 for b in bookings if b.end_time > now)
        fields["next_available"] = format_timestamp(upcoming[0].start_time) if upcoming else None
    return RoomRead(**fields)


def booking_resource(booking: Booking, now: datetime, room: Optional[Room] = None) -> BookingRead:
    status = resolve_status(booking.start_time, booking.end_time, now)
    fields = {
        "id": booking.id,
        "room_id": booking.room_id,
        "user_name": booking.user_name,
        "start_time": format_timestamp(booking.start_time),
        "end_time": format_timestamp(booking.end_time),
        "duration_hours": duration_hours(booking.start_time, booking.end_time),
        "is_current": status is BookingStatus.ACTIVE,
        "is_upcoming": status is BookingStatus.UPCOMING,
        "is_past": status is BookingStatus.COMPLETED,
        "status": status,
        "formatted_time_range": formatted_time_range(booking.start_time, booking.end_time),
        "created_at": format_timestamp(booking.created_at),
        "updated_at": format_timestamp(booking.updated_at),
    }
    if room is not None:
        fields["room"] = room_resource(room, now)
    if status is BookingStatus.UPCOMING:
        fields["time_until_start"] = time_until_start(booking.start_time, now)
    return BookingRead(**fields)
