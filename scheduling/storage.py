"""Storage interface used by the booking engine and its SQLAlchemy implementation."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps
from typing import Callable, ContextManager, Iterator, List, Optional, Protocol, TypeVar

from circuitbreaker import CircuitBreaker, CircuitBreakerError
from sqlalchemy.exc import InterfaceError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from common.config import get_settings
from common.models import Booking, Room

from .errors import TransientStorageFailure

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")

_TRANSIENT_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)

storage_breaker = CircuitBreaker(
    failure_threshold=settings.storage_failure_threshold,
    recovery_timeout=settings.storage_recovery_timeout,
    expected_exception=TransientStorageFailure,
    name="booking-storage",
)


@dataclass
class RoomSchedule:
    room: Room
    bookings: List[Booking] = field(default_factory=list)


class BookingStorage(Protocol):
    def get_rooms_ordered(self) -> List[Room]: ...

    def get_room(self, room_id: int) -> Optional[Room]: ...

    def get_room_with_future_bookings(self, room_id: int, now: datetime) -> Optional[RoomSchedule]: ...

    def get_bookings_for_room(self, room_id: int, ending_after: Optional[datetime] = None) -> List[Booking]: ...

    def room_transaction(self, room_id: int) -> ContextManager[Optional[Room]]: ...

    def insert_booking(self, room: Room, user_name: str, start: datetime, end: datetime) -> Booking: ...

    def find_booking_by_id(self, booking_id: int) -> Optional[Booking]: ...

    def delete_booking(self, booking_id: int) -> bool: ...


def _translate(exc: Exception) -> TransientStorageFailure:
    logger.warning("Storage call failed: %s", exc)
    return TransientStorageFailure()


def storage_call(func: Callable[..., T]) -> Callable[..., T]:
    """Report database outages as ``TransientStorageFailure`` and trip the shared circuit."""

    def translated(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except _TRANSIENT_ERRORS as exc:
            raise _translate(exc) from exc

    guarded = storage_breaker(translated)

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return guarded(*args, **kwargs)
        except CircuitBreakerError as exc:
            logger.warning("Storage circuit open, failing fast: %s", exc)
            raise TransientStorageFailure() from exc

    return wrapper


class SqlBookingStorage:
    """``BookingStorage`` backed by a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @storage_call
    def get_rooms_ordered(self) -> List[Room]:
        return self._db.query(Room).order_by(Room.name).all()

    @storage_call
    def get_room(self, room_id: int) -> Optional[Room]:
        return self._db.query(Room).filter(Room.id == room_id).first()

    @storage_call
    def get_room_with_future_bookings(self, room_id: int, now: datetime) -> Optional[RoomSchedule]:
        room = self._db.query(Room).filter(Room.id == room_id).first()
        if room is None:
            return None
        bookings = (
            self._db.query(Booking)
            .filter(Booking.room_id == room_id, Booking.end_time > now)
            .order_by(Booking.start_time)
            .all()
        )
        return RoomSchedule(room=room, bookings=bookings)

    @storage_call
    def get_bookings_for_room(self, room_id: int, ending_after: Optional[datetime] = None) -> List[Booking]:
        query = self._db.query(Booking).filter(Booking.room_id == room_id)
        if ending_after is not None:
            query = query.filter(Booking.end_time > ending_after)
        return query.order_by(Booking.start_time).all()

    @contextmanager
    def room_transaction(self, room_id: int) -> Iterator[Optional[Room]]:
        """Lock the room row for the duration of the block, then commit.

        Any exception raised inside the block rolls the transaction back.
        """
        try:
            room = self._db.query(Room).filter(Room.id == room_id).with_for_update().first()
            yield room
            self._db.commit()
        except _TRANSIENT_ERRORS as exc:
            self._db.rollback()
            raise _translate(exc) from exc
        except Exception:
            self._db.rollback()
            raise

    @storage_call
    def insert_booking(self, room: Room, user_name: str, start: datetime, end: datetime) -> Booking:
        booking = Booking(room=room, user_name=user_name, start_time=start, end_time=end)
        self._db.add(booking)
        # assigns the id and the created_at/updated_at defaults
        self._db.flush()
        return booking

    @storage_call
    def find_booking_by_id(self, booking_id: int) -> Optional[Booking]:
        return self._db.query(Booking).filter(Booking.id == booking_id).first()

    @storage_call
    def delete_booking(self, booking_id: int) -> bool:
        deleted = self._db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        self._db.commit()
        return deleted > 0
