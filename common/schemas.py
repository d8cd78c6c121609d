"""Pydantic schemas for the rooms and bookings services."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from scheduling.status import BookingStatus


class RoomRead(BaseModel):
    id: int
    name: str
    capacity: int
    # only present when the room's bookings were fetched
    current_bookings_count: Optional[int] = None
    next_available: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class BookingCreate(BaseModel):
    room_id: int
    user_name: str = Field(..., description="Trimmed; 2-255 characters")
    start_time: datetime
    end_time: datetime


class BookingRead(BaseModel):
    id: int
    room_id: int
    room: Optional[RoomRead] = None
    user_name: str
    start_time: str
    end_time: str
    duration_hours: float
    is_current: bool
    is_upcoming: bool
    is_past: bool
    status: BookingStatus
    time_until_start: Optional[str] = None
    formatted_time_range: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Availability(BaseModel):
    room_id: int
    available: bool


class RoomList(BaseModel):
    success: bool
    data: List[RoomRead]
    message: str


class RoomBookingList(BaseModel):
    success: bool
    data: List[BookingRead]
    message: str
    room: RoomRead


class BookingEnvelope(BaseModel):
    success: bool
    data: BookingRead
    message: str


class AvailabilityEnvelope(BaseModel):
    success: bool
    data: Availability


class MessageResponse(BaseModel):
    success: bool
    message: str


class ServicePing(BaseModel):
    status: str
    service: str
