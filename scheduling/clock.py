"""Time sources for the booking rules."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Server-local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, delta: timedelta) -> None:
        self._current += delta


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive server-local time; naive values pass through."""

    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
