"""Demo rooms and sample bookings."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from scheduling.clock import Clock, SystemClock
from scheduling.errors import BookingError
from scheduling.lifecycle import BookingManager
from scheduling.storage import SqlBookingStorage

from .models import Room

logger = logging.getLogger(__name__)

DEMO_ROOMS = [
    ("Meeting Room A", 8),
    ("Meeting Room B", 12),
    ("Conference Hall", 50),
    ("Small Office", 4),
    ("Open Space", 20),
]


def _sample_bookings(now: datetime):
    tomorrow = (now + timedelta(days=1)).replace(minute=0, second=0, microsecond=0)
    in_two_days = (now + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)
    return [
        ("Meeting Room A", "John Doe", now + timedelta(hours=2), now + timedelta(hours=4)),
        ("Meeting Room A", "Jane Smith", tomorrow.replace(hour=10), tomorrow.replace(hour=12)),
        ("Meeting Room B", "Bob Johnson", now + timedelta(hours=1), now + timedelta(hours=3)),
        ("Conference Hall", "Alice Brown", in_two_days.replace(hour=14), in_two_days.replace(hour=16)),
    ]


def seed_rooms(db: Session, clock: Optional[Clock] = None, with_bookings: bool = True) -> List[Room]:
    """Create the demo rooms that are missing; optionally book a few sample slots.

    Sample bookings go through ``BookingManager`` so they obey the same rules
    as user requests; the ones the current time makes invalid are skipped.
    """
    existing = {room.name for room in db.query(Room).all()}
    created = [Room(name=name, capacity=capacity) for name, capacity in DEMO_ROOMS if name not in existing]
    db.add_all(created)
    db.commit()
    logger.info("Seeded %d rooms", len(created))

    if with_bookings and created:
        by_name = {room.name: room for room in db.query(Room).all()}
        manager = BookingManager(SqlBookingStorage(db), clock=clock or SystemClock())
        for room_name, user_name, start, end in _sample_bookings(manager.clock.now()):
            try:
                manager.create(by_name[room_name].id, user_name, start, end)
            except BookingError as exc:
                logger.info("Skipped sample booking for %s in %s: %s", user_name, room_name, exc.message)
    return created
