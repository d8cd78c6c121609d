import os
from datetime import datetime
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("RUN_DB_MIGRATIONS", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from common.dependencies import get_clock  # noqa: E402
from common.models import Room  # noqa: E402
from scheduling.clock import FixedClock  # noqa: E402
from scheduling.lifecycle import BookingManager  # noqa: E402
from scheduling.storage import SqlBookingStorage  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.rooms.app import app as rooms_app, room_directory  # noqa: E402

# a Monday morning, well inside business hours
NOW = datetime(2030, 1, 14, 9, 0)


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    room_directory.invalidate()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def manager(db_session, clock) -> BookingManager:
    return BookingManager(SqlBookingStorage(db_session), clock=clock)


@pytest.fixture()
def room(db_session) -> Room:
    room = Room(name="Meeting Room A", capacity=8)
    db_session.add(room)
    db_session.commit()
    return room


@pytest.fixture()
def rooms_client(clock) -> Generator[TestClient, None, None]:
    rooms_app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(rooms_app) as client:
        yield client
    rooms_app.dependency_overrides.clear()


@pytest.fixture()
def bookings_client(clock) -> Generator[TestClient, None, None]:
    bookings_app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(bookings_app) as client:
        yield client
    bookings_app.dependency_overrides.clear()
