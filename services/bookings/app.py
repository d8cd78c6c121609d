from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from common.config import get_settings
from common.database import Base, engine
from common.dependencies import get_booking_manager
from common.logging_middleware import add_audit_middleware
from common.presenters import booking_resource
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, apply_rate_limiter, limiter
from common.responses import register_error_handlers
from common.schemas import (
    Availability,
    AvailabilityEnvelope,
    BookingCreate,
    BookingEnvelope,
    MessageResponse,
    ServicePing,
)
from scheduling.errors import BookingError, NotFound, TransientStorageFailure
from scheduling.lifecycle import BookingManager

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Bookings Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", response_model=ServicePing, tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "bookings"}


@app.post(
    "/bookings",
    response_model=BookingEnvelope,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(WRITE_LIMIT)
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    manager: BookingManager = Depends(get_booking_manager),
) -> BookingEnvelope:
    try:
        booking = manager.create(
            booking_in.room_id,
            booking_in.user_name,
            booking_in.start_time,
            booking_in.end_time,
        )
    except TransientStorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc
    except BookingError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc

    return BookingEnvelope(
        success=True,
        data=booking_resource(booking, manager.clock.now(), room=booking.room),
        message="Booking created successfully",
    )


@app.delete("/bookings/{booking_id}", response_model=MessageResponse)
@limiter.limit(WRITE_LIMIT)
def delete_booking(
    request: Request,
    booking_id: int,
    manager: BookingManager = Depends(get_booking_manager),
) -> MessageResponse:
    try:
        manager.delete(booking_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except TransientStorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc
    return MessageResponse(success=True, message="Booking deleted successfully")


@app.get("/bookings/availability", response_model=AvailabilityEnvelope)
@limiter.limit(READ_LIMIT)
def check_availability(
    request: Request,
    room_id: int,
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    manager: BookingManager = Depends(get_booking_manager),
) -> AvailabilityEnvelope:
    try:
        available = manager.check_availability(room_id, start_time, end_time)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except TransientStorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc
    return AvailabilityEnvelope(success=True, data=Availability(room_id=room_id, available=available))
