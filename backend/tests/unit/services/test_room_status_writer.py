"""
Unit Tests for RoomStatusWriter
Tests for: recompute write-back, idempotence, fetch/write failure handling
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OccupancyUpdateError
from app.models.student import StudentStatus
from app.services.occupancy import RoomStatus
from app.services.room_status_writer import RoomStatusWriter


@pytest.fixture
def writer() -> RoomStatusWriter:
    return RoomStatusWriter()


class TestRecompute:
    """Test recomputing a single room"""

    @pytest.mark.asyncio
    async def test_writes_derived_values(self, db_session: AsyncSession, writer, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4)
        await make_student(room)
        await make_student(room)

        update = await writer.recompute(db_session, room.id)

        assert update.written is True
        assert update.occupancy == 2
        assert update.status == RoomStatus.PARTIALLY_OCCUPIED
        assert update.warning is None

        await db_session.refresh(room)
        assert room.current_occupancy == 2
        assert room.status == "partially-occupied"

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, db_session: AsyncSession, writer, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, "A1", capacity=2)
        await make_student(room)
        await make_student(room)

        first = await writer.recompute(db_session, room.id)
        second = await writer.recompute(db_session, room.id)

        assert first.written is True
        assert second.written is False
        assert second.occupancy == 2
        assert second.status == RoomStatus.FULLY_OCCUPIED

    @pytest.mark.asyncio
    async def test_inactive_students_do_not_count(self, db_session: AsyncSession, writer, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, "A1", capacity=2)
        await make_student(room)
        await make_student(room, status=StudentStatus.INACTIVE)

        update = await writer.recompute(db_session, room.id)

        assert update.occupancy == 1
        assert update.status == RoomStatus.PARTIALLY_OCCUPIED

    @pytest.mark.asyncio
    async def test_over_capacity(self, db_session: AsyncSession, writer, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, "A1", capacity=1)
        await make_student(room)
        await make_student(room)

        update = await writer.recompute(db_session, room.id)

        assert update.occupancy == 2
        assert update.status == RoomStatus.OVER_CAPACITY

    @pytest.mark.asyncio
    async def test_manual_override_kept_but_occupancy_updated(
        self, db_session: AsyncSession, writer, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4, status="maintenance")
        await make_student(room)

        update = await writer.recompute(db_session, room.id)

        assert update.written is True
        assert update.occupancy == 1
        assert update.status == RoomStatus.MAINTENANCE

        await db_session.refresh(room)
        assert room.status == "maintenance"
        assert room.current_occupancy == 1

    @pytest.mark.asyncio
    async def test_missing_room_returns_warning(self, db_session: AsyncSession, writer):
        update = await writer.recompute(db_session, "does-not-exist")

        assert update.written is False
        assert update.warning is not None
        assert "not found" in update.warning


class TestFailureHandling:
    """The writer reports failures instead of raising"""

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_stored_occupancy(
        self, db_session: AsyncSession, writer, make_house, make_room, make_student, monkeypatch
    ):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4, status="partially-occupied", current_occupancy=3)
        await make_student(room)

        async def failing_fetch(db, room_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(writer, "fetch_population", failing_fetch)

        update = await writer.recompute(db_session, room.id)

        assert update.occupancy == 3
        assert update.status == RoomStatus.PARTIALLY_OCCUPIED
        assert update.written is False
        assert update.warning is not None

        await db_session.refresh(room)
        assert room.current_occupancy == 3

    @pytest.mark.asyncio
    async def test_room_load_failure_returns_warning(
        self, db_session: AsyncSession, writer, make_house, make_room, monkeypatch
    ):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4)

        async def failing_load(db, room_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(writer, "_load_room", failing_load)

        update = await writer.recompute(db_session, room.id)

        assert update.room_id == room.id
        assert update.written is False
        assert update.status is None
        assert "could not be updated" in update.warning

    @pytest.mark.asyncio
    async def test_write_failure_returns_warning(
        self, db_session: AsyncSession, writer, make_house, make_room, make_student, monkeypatch
    ):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4)
        await make_student(room)

        async def failing_persist(db, room_id, occupancy, status):
            raise OccupancyUpdateError(room_id, "write refused")

        monkeypatch.setattr(writer, "_persist", failing_persist)

        update = await writer.recompute(db_session, room.id)

        assert update.written is False
        assert update.occupancy == 1
        assert update.status == RoomStatus.PARTIALLY_OCCUPIED
        assert "could not be updated" in update.warning

    @pytest.mark.asyncio
    async def test_commit_failure_is_rolled_back(
        self, db_session: AsyncSession, writer, make_house, make_room, make_student, monkeypatch
    ):
        house = await make_house()
        room = await make_room(house, "A1", capacity=4)
        await make_student(room)

        async def failing_commit():
            raise RuntimeError("disk full")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        update = await writer.recompute(db_session, room.id)

        assert update.written is False
        assert update.warning is not None

        monkeypatch.undo()
        await db_session.refresh(room)
        assert room.current_occupancy == 0
        assert room.status == "vacant"


class TestRecomputeMany:

    @pytest.mark.asyncio
    async def test_skips_none_and_duplicates(self, db_session: AsyncSession, writer, make_house, make_room):
        house = await make_house()
        room_a = await make_room(house, "A1")
        room_b = await make_room(house, "A2")

        updates = await writer.recompute_many(db_session, [None, room_a.id, room_b.id, room_a.id])

        assert [u.room_id for u in updates] == [room_a.id, room_b.id]

    @pytest.mark.asyncio
    async def test_reconcile_all_repairs_stale_rooms(
        self, db_session: AsyncSession, writer, make_house, make_room, make_student
    ):
        house = await make_house()
        stale = await make_room(house, "A1", capacity=2, status="fully-occupied", current_occupancy=2)
        fresh = await make_room(house, "A2", capacity=2)
        await make_student(fresh)

        updates = await writer.reconcile_all(db_session)

        by_room = {u.room_id: u for u in updates}
        assert by_room[stale.id].occupancy == 0
        assert by_room[stale.id].status == RoomStatus.VACANT
        assert by_room[fresh.id].occupancy == 1
        assert all(u.written for u in updates)
