"""Reusable FastAPI dependencies for the clock, database access and the booking engine."""
from fastapi import Depends
from sqlalchemy.orm import Session

from scheduling.clock import Clock, SystemClock
from scheduling.lifecycle import BookingManager
from scheduling.storage import SqlBookingStorage
from scheduling.validation import BookingPolicy

from .config import get_settings
from .database import get_db

settings = get_settings()
_system_clock = SystemClock()
_policy = BookingPolicy.from_settings(settings)


def get_clock() -> Clock:
    return _system_clock


def get_booking_manager(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> BookingManager:
    return BookingManager(
        SqlBookingStorage(db),
        clock=clock,
        policy=_policy,
        lock_timeout=settings.storage_timeout_seconds,
    )
