"""Booking lifecycle: listing, creation and deletion of room bookings.

``BookingManager`` is the only way bookings are created or removed. Creation
runs the time-range rules first, then checks for overlaps and inserts while
holding both a process-wide lock for the room and a database row lock on it,
so two overlapping requests for the same room can never both succeed.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from common.models import Booking, Room

from .clock import Clock, SystemClock, to_local_naive
from .errors import InvalidInput, NotFound, SlotConflict, TransientStorageFailure
from .overlap import has_conflict
from .storage import BookingStorage, RoomSchedule
from .validation import DEFAULT_POLICY, BookingPolicy, validate_time_range

logger = logging.getLogger(__name__)

USER_NAME_MIN_LENGTH = 2
USER_NAME_MAX_LENGTH = 255
DEFAULT_LOCK_TIMEOUT = 5.0


class RoomLocks:
    """One mutex per room, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def _lock_for(self, room_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(room_id, threading.Lock())

    @contextmanager
    def hold(self, room_id: int, timeout: float) -> Iterator[None]:
        lock = self._lock_for(room_id)
        if not lock.acquire(timeout=timeout):
            logger.warning("Timed out after %.1fs waiting for room %s", timeout, room_id)
            raise TransientStorageFailure("The room is busy, please retry")
        try:
            yield
        finally:
            lock.release()


room_locks = RoomLocks()


def normalize_user_name(user_name: Any) -> str:
    if not isinstance(user_name, str):
        raise InvalidInput("Please provide a user name.")
    cleaned = user_name.strip()
    if not cleaned:
        raise InvalidInput("Please provide a user name.")
    if len(cleaned) < USER_NAME_MIN_LENGTH:
        raise InvalidInput(f"User name must be at least {USER_NAME_MIN_LENGTH} characters.")
    if len(cleaned) > USER_NAME_MAX_LENGTH:
        raise InvalidInput(f"User name may not be greater than {USER_NAME_MAX_LENGTH} characters.")
    return cleaned


def _instant(value: Any, label: str) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidInput(f"Please provide a valid {label}.")
    return to_local_naive(value)


class BookingManager:
    def __init__(
        self,
        storage: BookingStorage,
        clock: Optional[Clock] = None,
        policy: BookingPolicy = DEFAULT_POLICY,
        locks: RoomLocks = room_locks,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self.storage = storage
        self.clock = clock or SystemClock()
        self.policy = policy
        self._locks = locks
        self._lock_timeout = lock_timeout

    def list_rooms(self) -> List[Room]:
        return self.storage.get_rooms_ordered()

    def room_schedule(self, room_id: int) -> RoomSchedule:
        """The room with its bookings that have not ended yet, earliest first."""

        schedule = self.storage.get_room_with_future_bookings(room_id, self.clock.now())
        if schedule is None:
            raise NotFound("Room not found")
        return schedule

    def list_for_room(self, room_id: int) -> List[Booking]:
        return self.room_schedule(room_id).bookings

    def check_availability(self, room_id: int, start: datetime, end: datetime) -> bool:
        start = _instant(start, "start time")
        end = _instant(end, "end time")
        if self.storage.get_room(room_id) is None:
            raise NotFound("Room not found")
        return not has_conflict(self.storage, room_id, start, end, self.clock.now())

    def create(self, room_id: int, user_name: Any, start: Any, end: Any) -> Booking:
        user_name = normalize_user_name(user_name)
        start = _instant(start, "start time")
        end = _instant(end, "end time")
        validate_time_range(start, end, self.clock.now(), self.policy)

        with self._locks.hold(room_id, self._lock_timeout):
            with self.storage.room_transaction(room_id) as room:
                if room is None:
                    raise NotFound("The selected room does not exist.")
                if has_conflict(self.storage, room_id, start, end, self.clock.now()):
                    logger.info("Rejected booking for room %s (%s - %s): slot taken", room_id, start, end)
                    raise SlotConflict()
                booking = self.storage.insert_booking(room, user_name, start, end)

        logger.info("Booking %s created for room %s by %s", booking.id, room_id, user_name)
        return booking

    def delete(self, booking_id: int) -> None:
        booking = self.storage.find_booking_by_id(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if not self.storage.delete_booking(booking_id):
            # removed by a concurrent request between lookup and delete
            raise NotFound("Booking not found")
        logger.info("Booking %s deleted from room %s", booking_id, booking.room_id)
