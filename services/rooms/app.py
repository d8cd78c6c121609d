from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from common.cache import RoomDirectoryCache
from common.config import get_settings
from common.database import Base, SessionLocal, engine
from common.dependencies import get_booking_manager
from common.logging_middleware import add_audit_middleware
from common.presenters import booking_resource, room_resource
from common.rate_limit import READ_LIMIT, apply_rate_limiter, limiter
from common.responses import register_error_handlers
from common.schemas import RoomBookingList, RoomList, RoomRead, ServicePing
from common.seed import seed_rooms
from scheduling.errors import NotFound, TransientStorageFailure
from scheduling.lifecycle import BookingManager

settings = get_settings()
room_directory: RoomDirectoryCache[RoomRead] = RoomDirectoryCache(ttl=settings.room_cache_ttl)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    if settings.seed_demo_data:
        with SessionLocal() as db:
            seed_rooms(db)
        room_directory.invalidate()
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Rooms Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "rooms")
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", response_model=ServicePing, tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "rooms"}


@app.get("/rooms", response_model=RoomList, response_model_exclude_unset=True)
@limiter.limit(READ_LIMIT)
def list_rooms(request: Request, manager: BookingManager = Depends(get_booking_manager)) -> RoomList:
    now = manager.clock.now()
    try:
        rooms: List[RoomRead] = room_directory.get_or_load(
            lambda: [room_resource(room, now) for room in manager.list_rooms()]
        )
    except TransientStorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc
    return RoomList(success=True, data=rooms, message="Rooms retrieved successfully")


@app.get("/rooms/{room_id}/bookings", response_model=RoomBookingList, response_model_exclude_unset=True)
@limiter.limit(READ_LIMIT)
def room_bookings(
    request: Request,
    room_id: int,
    manager: BookingManager = Depends(get_booking_manager),
) -> RoomBookingList:
    try:
        schedule = manager.room_schedule(room_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except TransientStorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc

    now = manager.clock.now()
    return RoomBookingList(
        success=True,
        data=[booking_resource(booking, now, room=schedule.room) for booking in schedule.bookings],
        message="Room bookings retrieved successfully",
        room=room_resource(schedule.room, now, bookings=schedule.bookings),
    )
