"""Unit tests for the SQL storage adapter."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from common.models import Booking, Room
from scheduling.errors import SlotConflict, TransientStorageFailure
from scheduling.storage import SqlBookingStorage

NOW = datetime(2030, 1, 14, 9, 0)


def locked_database(*_args, **_kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture()
def storage(db_session) -> SqlBookingStorage:
    return SqlBookingStorage(db_session)


def add_booking(db_session, room: Room, start: datetime, end: datetime) -> Booking:
    booking = Booking(room=room, user_name="Seeded", start_time=start, end_time=end)
    db_session.add(booking)
    db_session.commit()
    return booking


class TestQueries:
    """Test the storage read and delete queries."""

    def test_future_bookings_exclude_finished_ones(self, storage, db_session, room):
        """Test that finished bookings are left out of the schedule."""
        add_booking(db_session, room, NOW - timedelta(hours=3), NOW - timedelta(hours=2))
        current = add_booking(db_session, room, NOW - timedelta(minutes=30), NOW + timedelta(minutes=30))
        later = add_booking(db_session, room, NOW + timedelta(hours=2), NOW + timedelta(hours=3))

        schedule = storage.get_room_with_future_bookings(room.id, NOW)

        assert schedule.room.id == room.id
        assert [b.id for b in schedule.bookings] == [current.id, later.id]

    def test_future_bookings_for_missing_room(self, storage):
        """Test that a missing room yields None."""
        assert storage.get_room_with_future_bookings(1234, NOW) is None

    def test_bookings_for_room_without_filter_returns_all(self, storage, db_session, room):
        """Test that the end filter is optional."""
        add_booking(db_session, room, NOW - timedelta(hours=3), NOW - timedelta(hours=2))
        add_booking(db_session, room, NOW + timedelta(hours=2), NOW + timedelta(hours=3))

        assert len(storage.get_bookings_for_room(room.id)) == 2
        assert len(storage.get_bookings_for_room(room.id, ending_after=NOW)) == 1

    def test_delete_reports_whether_a_row_was_removed(self, storage, db_session, room):
        """Test that delete returns whether a row was removed."""
        booking = add_booking(db_session, room, NOW + timedelta(hours=1), NOW + timedelta(hours=2))

        assert storage.delete_booking(booking.id) is True
        assert storage.delete_booking(booking.id) is False
        assert storage.find_booking_by_id(booking.id) is None


class TestRoomTransaction:
    """Test the room-locking transaction."""

    def test_commits_on_success(self, storage, db_session, room):
        """Test that the block's writes are committed."""
        with storage.room_transaction(room.id) as locked_room:
            storage.insert_booking(locked_room, "Alice", NOW + timedelta(hours=1), NOW + timedelta(hours=2))

        db_session.expire_all()
        assert db_session.query(Booking).count() == 1

    def test_rolls_back_when_block_raises(self, storage, db_session, room):
        """Test that an exception in the block rolls back its writes."""
        with pytest.raises(SlotConflict):
            with storage.room_transaction(room.id) as locked_room:
                storage.insert_booking(locked_room, "Alice", NOW + timedelta(hours=1), NOW + timedelta(hours=2))
                raise SlotConflict()

        assert db_session.query(Booking).count() == 0

    def test_yields_none_for_missing_room(self, storage):
        """Test that a missing room yields None."""
        with storage.room_transaction(99) as locked_room:
            assert locked_room is None


class TestTransientFailures:
    """Test translation of database outages."""

    def test_operational_error_becomes_transient_failure(self, storage, db_session, monkeypatch):
        """Test that OperationalError is raised as TransientStorageFailure."""
        monkeypatch.setattr(db_session, "query", locked_database)

        with pytest.raises(TransientStorageFailure):
            storage.find_booking_by_id(1)

    def test_storage_recovers_after_a_failure(self, storage, db_session, room, monkeypatch):
        """Test that calls succeed again once the database recovers."""
        with monkeypatch.context() as patch:
            patch.setattr(db_session, "query", locked_database)
            with pytest.raises(TransientStorageFailure):
                storage.get_rooms_ordered()

        assert [r.id for r in storage.get_rooms_ordered()] == [room.id]

    def test_transaction_failure_is_transient(self, storage, db_session, room, monkeypatch):
        """Test that a failed commit is raised as TransientStorageFailure."""
        monkeypatch.setattr(db_session, "commit", locked_database)

        with pytest.raises(TransientStorageFailure):
            with storage.room_transaction(room.id):
                pass
