"""
Room Status Writer

Keeps boarding_rooms.current_occupancy and boarding_rooms.status in line
with the students actually assigned to a room. Called after any committed
mutation that can change a room's occupant set:

- assigning, reassigning (both rooms) or unassigning a student
- deleting a room (for the rooms its occupants left, not the room itself)
- deleting, deactivating or re-activating a student
- changing a room's capacity or manual status

The writer is bookkeeping. It never raises: failures come back as a
warning on the returned OccupancyUpdate and the triggering action stays
committed. Counts are taken from the store on every call, so a stale
value left by two racing requests is corrected by the next recompute or
by ``reconcile_all``.
"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OccupancyUpdateError
from app.core.logging_config import logger
from app.models.boarding import Room
from app.models.student import Student, StudentStatus
from app.schemas.common import OccupancyUpdate
from app.services.occupancy import Occupant, RoomStatus, count_active_occupants, derive_status


class RoomStatusWriter:
    """Recompute and persist room occupancy/status"""

    async def fetch_population(self, db: AsyncSession, room_id: str) -> List[Occupant]:
        """Students currently pointing at room_id, as Occupant records"""
        result = await db.execute(
            select(Student.status, Student.boarding_room_id).where(Student.boarding_room_id == room_id)
        )
        return [
            Occupant(active=row.status == StudentStatus.ACTIVE, room_id=row.boarding_room_id)
            for row in result
        ]

    async def _load_room(self, db: AsyncSession, room_id: str) -> Optional[Tuple[int, int, str]]:
        result = await db.execute(
            select(Room.capacity, Room.current_occupancy, Room.status)
            .where(Room.id == room_id)
        )
        row = result.first()
        if row is None:
            return None
        return row.capacity, row.current_occupancy or 0, row.status

    async def _persist(self, db: AsyncSession, room_id: str, occupancy: int, status: RoomStatus) -> None:
        try:
            await db.execute(
                update(Room)
                .where(Room.id == room_id)
                .values(current_occupancy=occupancy, status=status.value)
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            raise OccupancyUpdateError(room_id, f"Could not update occupancy for room {room_id}: {e}") from e

    async def recompute(self, db: AsyncSession, room_id: str) -> OccupancyUpdate:
        """
        Recompute one room and write back if anything changed.

        Must run after the triggering mutation has been committed.
        """
        room_id = str(room_id)

        try:
            stored = await self._load_room(db, room_id)
        except Exception as e:
            await db.rollback()
            logger.log_error_with_context(e, context="RoomStatusWriter.load_room", room_id=room_id)
            return OccupancyUpdate(
                room_id=room_id,
                warning=f"Occupancy for room {room_id} could not be updated",
            )

        if stored is None:
            logger.warning(f"Occupancy recompute skipped: room {room_id} not found")
            return OccupancyUpdate(room_id=room_id, warning=f"Room {room_id} not found")

        capacity, stored_occupancy, stored_status = stored
        warning = None

        try:
            population = await self.fetch_population(db, room_id)
            occupancy = count_active_occupants(population, room_id)
        except Exception as e:
            # Stale but present beats undefined
            await db.rollback()
            logger.warning(
                f"Occupant fetch failed for room {room_id}, keeping stored occupancy "
                f"{stored_occupancy}: {e}"
            )
            occupancy = stored_occupancy
            warning = f"Occupancy for room {room_id} could not be recounted; showing last known value"

        status = derive_status(occupancy, capacity, stored_status)

        if occupancy == stored_occupancy and stored_status == status.value:
            logger.log_occupancy_update(room_id, occupancy, status.value, written=False)
            return OccupancyUpdate(
                room_id=room_id, occupancy=occupancy, status=status, written=False, warning=warning
            )

        try:
            await self._persist(db, room_id, occupancy, status)
        except OccupancyUpdateError as e:
            logger.log_error_with_context(e, context="RoomStatusWriter.persist", room_id=room_id)
            return OccupancyUpdate(
                room_id=room_id,
                occupancy=occupancy,
                status=status,
                written=False,
                warning=f"Occupancy for room {room_id} could not be updated",
            )

        logger.log_occupancy_update(
            room_id,
            occupancy,
            status.value,
            written=True,
            previous_occupancy=stored_occupancy,
            previous_status=stored_status,
        )
        return OccupancyUpdate(
            room_id=room_id, occupancy=occupancy, status=status, written=True, warning=warning
        )

    async def recompute_many(self, db: AsyncSession, room_ids: Iterable[Optional[str]]) -> List[OccupancyUpdate]:
        """Recompute several rooms, skipping None and duplicates, in the given order"""
        seen = set()
        updates = []
        for room_id in room_ids:
            if room_id is None:
                continue
            room_id = str(room_id)
            if room_id in seen:
                continue
            seen.add(room_id)
            updates.append(await self.recompute(db, room_id))
        return updates

    async def reconcile_all(self, db: AsyncSession) -> List[OccupancyUpdate]:
        """Recompute every room"""
        result = await db.execute(select(Room.id).order_by(Room.house_id, Room.room_number))
        room_ids = list(result.scalars().all())
        logger.info(f"Reconciling occupancy for {len(room_ids)} rooms")
        return await self.recompute_many(db, room_ids)


# Singleton instance
room_status_writer = RoomStatusWriter()
