"""
Boarding Service - houses, rooms, accommodation types and room assignments

Handles:
- House CRUD with stats derived from rooms and active occupants
- Room CRUD, available-room lookup and occupancy reconcile
- Accommodation type CRUD (cached listing)
- Assigning, moving and removing students

Every mutation that changes who sits in a room commits first and then
asks the RoomStatusWriter to recompute the affected rooms.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update, and_
from datetime import date
from typing import Optional, List, Tuple, Dict
import logging

from app.core.exceptions import (
    StudentNotFoundError,
    HouseNotFoundError,
    RoomNotFoundError,
    AccommodationTypeNotFoundError,
    DuplicateRecordError,
    ValidationError,
)
from app.models.boarding import BoardingHouse, Room, AccommodationType
from app.models.student import Student, StudentStatus
from app.schemas.boarding import (
    HouseCreate,
    HouseUpdate,
    HouseWithStats,
    RoomCreate,
    RoomUpdate,
    AccommodationTypeCreate,
    AccommodationTypeUpdate,
    AccommodationTypeResponse,
    AssignmentCreate,
    AssignmentUpdate,
    BoardingStudent,
    Roommate,
)
from app.schemas.common import OccupancyUpdate
from app.services.cache_service import cache_service
from app.services.occupancy import AVAILABLE_STATUSES, derive_status, is_manual_override
from app.services.room_status_writer import room_status_writer

logger = logging.getLogger(__name__)


class BoardingService:
    """Service for boarding houses, rooms and occupant assignments"""

    # ==================== HOUSES ====================

    async def get_house(self, db: AsyncSession, house_id: str) -> BoardingHouse:
        house = await db.get(BoardingHouse, house_id)
        if not house:
            raise HouseNotFoundError(house_id)
        return house

    async def _house_stats(self, db: AsyncSession, house_ids: Optional[List[str]] = None) -> Dict[str, dict]:
        """total_rooms / total_capacity / current_occupancy per house"""
        room_query = select(
            Room.house_id,
            func.count(Room.id),
            func.coalesce(func.sum(Room.capacity), 0),
        ).group_by(Room.house_id)

        occupant_query = (
            select(Room.house_id, func.count(Student.id))
            .join(Student, Student.boarding_room_id == Room.id)
            .where(Student.status == StudentStatus.ACTIVE)
            .group_by(Room.house_id)
        )

        if house_ids is not None:
            room_query = room_query.where(Room.house_id.in_(house_ids))
            occupant_query = occupant_query.where(Room.house_id.in_(house_ids))

        stats: Dict[str, dict] = {}
        for house_id, total_rooms, total_capacity in (await db.execute(room_query)).all():
            stats[house_id] = {
                "total_rooms": total_rooms,
                "total_capacity": int(total_capacity),
                "current_occupancy": 0,
            }
        for house_id, occupants in (await db.execute(occupant_query)).all():
            stats.setdefault(house_id, {"total_rooms": 0, "total_capacity": 0, "current_occupancy": 0})
            stats[house_id]["current_occupancy"] = occupants
        return stats

    def _with_stats(self, house: BoardingHouse, stats: Dict[str, dict]) -> HouseWithStats:
        response = HouseWithStats.model_validate(house)
        for key, value in stats.get(house.id, {}).items():
            setattr(response, key, value)
        return response

    async def list_houses(self, db: AsyncSession) -> List[HouseWithStats]:
        """List houses ordered by name, each with derived stats"""
        houses = (await db.execute(select(BoardingHouse).order_by(BoardingHouse.name))).scalars().all()
        stats = await self._house_stats(db)
        return [self._with_stats(house, stats) for house in houses]

    async def get_house_with_stats(self, db: AsyncSession, house_id: str) -> HouseWithStats:
        house = await self.get_house(db, house_id)
        stats = await self._house_stats(db, [house.id])
        return self._with_stats(house, stats)

    async def create_house(self, db: AsyncSession, data: HouseCreate) -> BoardingHouse:
        house = BoardingHouse(**data.model_dump())
        db.add(house)
        await db.commit()
        await db.refresh(house)

        logger.info(f"Created boarding house {house.name}")
        return house

    async def update_house(self, db: AsyncSession, house_id: str, data: HouseUpdate) -> BoardingHouse:
        house = await self.get_house(db, house_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(house, field, value)

        await db.commit()
        await db.refresh(house)
        logger.info(f"Updated boarding house {house.name}")
        return house

    async def delete_house(self, db: AsyncSession, house_id: str) -> Tuple[int, int, List[OccupancyUpdate]]:
        """
        Delete a house and all its rooms, unassigning their occupants.

        Returns:
            Tuple of (rooms deleted, students unassigned, occupancy updates)
        """
        house = await self.get_house(db, house_id)
        room_ids = (await db.execute(select(Room.id).where(Room.house_id == house.id))).scalars().all()

        unassigned = 0
        updates: List[OccupancyUpdate] = []
        for room_id in room_ids:
            count, room_updates = await self.delete_room(db, room_id)
            unassigned += count
            updates.extend(room_updates)

        # Students left pointing at the house without a room
        await db.execute(
            update(Student)
            .where(Student.boarding_house_id == house.id)
            .values(boarding_house_id=None)
        )
        await db.delete(house)
        await db.commit()

        logger.info(f"Deleted boarding house {house_id}: {len(room_ids)} rooms, {unassigned} students unassigned")
        return len(room_ids), unassigned, updates

    # ==================== ROOMS ====================

    async def get_room(self, db: AsyncSession, room_id: str) -> Room:
        room = await db.get(Room, room_id)
        if not room:
            raise RoomNotFoundError(room_id)
        return room

    async def list_rooms(self, db: AsyncSession, house_id: Optional[str] = None) -> List[Room]:
        query = select(Room)
        if house_id:
            query = query.where(Room.house_id == house_id)
        query = query.order_by(Room.house_id, Room.room_number)
        return list((await db.execute(query)).scalars().all())

    async def available_rooms(self, db: AsyncSession, house_id: str) -> List[Room]:
        """Rooms in a house whose stored status is vacant or partially-occupied"""
        await self.get_house(db, house_id)
        query = (
            select(Room)
            .where(
                and_(
                    Room.house_id == house_id,
                    Room.status.in_([s.value for s in AVAILABLE_STATUSES]),
                )
            )
            .order_by(Room.room_number)
        )
        return list((await db.execute(query)).scalars().all())

    async def _ensure_unique_room_number(
        self,
        db: AsyncSession,
        house_id: str,
        room_number: str,
        exclude_id: Optional[str] = None
    ) -> None:
        query = select(Room.id).where(and_(Room.house_id == house_id, Room.room_number == room_number))
        if exclude_id:
            query = query.where(Room.id != exclude_id)
        if (await db.execute(query)).first():
            raise DuplicateRecordError("Room", "room_number", room_number)

    async def create_room(self, db: AsyncSession, data: RoomCreate) -> Room:
        """Create an empty room. A maintenance/reserved status is kept as override."""
        await self.get_house(db, data.house_id)
        await self._ensure_unique_room_number(db, data.house_id, data.room_number)

        status = derive_status(0, data.capacity, data.status.value if data.status else None)
        room = Room(
            house_id=data.house_id,
            room_number=data.room_number,
            floor=data.floor,
            capacity=data.capacity,
            current_occupancy=0,
            status=status.value,
            amenities=data.amenities,
        )
        db.add(room)
        await db.commit()
        await db.refresh(room)

        logger.info(f"Created room {room.room_number} (capacity {room.capacity}) in house {room.house_id}")
        return room

    async def update_room(
        self,
        db: AsyncSession,
        room_id: str,
        data: RoomUpdate
    ) -> Tuple[Room, List[OccupancyUpdate]]:
        """
        Update a room. Capacity or status changes trigger a recompute.

        Setting a derived status (e.g. vacant) clears a manual override;
        the recompute then replaces it with the real derived value.
        """
        room = await self.get_room(db, room_id)
        values = data.model_dump(exclude_unset=True)

        if values.get("room_number") and values["room_number"] != room.room_number:
            await self._ensure_unique_room_number(db, room.house_id, values["room_number"], exclude_id=room.id)

        needs_recompute = False
        for field, value in values.items():
            if value is None and field in ("room_number", "capacity", "status"):
                continue
            if field == "status":
                value = value.value
                needs_recompute = True
            if field == "capacity" and value != room.capacity:
                needs_recompute = True
            setattr(room, field, value)

        await db.commit()

        updates = []
        if needs_recompute:
            updates = await room_status_writer.recompute_many(db, [room.id])

        await db.refresh(room)
        logger.info(f"Updated room {room.room_number}: {sorted(values)}")
        return room, updates

    async def delete_room(self, db: AsyncSession, room_id: str) -> Tuple[int, List[OccupancyUpdate]]:
        """
        Unassign all occupants of a room, then delete it.

        The deleted room gets no write-back and the unassigned students
        have no new room, so no other room needs a recompute.
        """
        room = await self.get_room(db, room_id)

        result = await db.execute(
            update(Student)
            .where(Student.boarding_room_id == room.id)
            .values(boarding_room_id=None)
        )
        unassigned = result.rowcount or 0

        await db.delete(room)
        await db.commit()

        logger.info(f"Deleted room {room_id}, unassigned {unassigned} students")
        return unassigned, []

    async def reconcile(self, db: AsyncSession) -> List[OccupancyUpdate]:
        """Recompute occupancy/status for every room"""
        return await room_status_writer.reconcile_all(db)

    # ==================== ACCOMMODATION TYPES ====================

    async def get_accommodation_type(self, db: AsyncSession, type_id: str) -> AccommodationType:
        accommodation_type = await db.get(AccommodationType, type_id)
        if not accommodation_type:
            raise AccommodationTypeNotFoundError(type_id)
        return accommodation_type

    async def list_accommodation_types(self, db: AsyncSession) -> List[dict]:
        async def loader():
            rows = (await db.execute(select(AccommodationType).order_by(AccommodationType.name))).scalars().all()
            return [AccommodationTypeResponse.model_validate(row).model_dump(mode="json") for row in rows]

        return await cache_service.cached_query(AccommodationType.__tablename__, loader)

    async def _ensure_unique_type_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(AccommodationType.id).where(func.lower(AccommodationType.name) == name.lower())
        if exclude_id:
            query = query.where(AccommodationType.id != exclude_id)
        if (await db.execute(query)).first():
            raise DuplicateRecordError("Accommodation Type", "name", name)

    async def create_accommodation_type(self, db: AsyncSession, data: AccommodationTypeCreate) -> AccommodationType:
        await self._ensure_unique_type_name(db, data.name)

        accommodation_type = AccommodationType(**data.model_dump())
        db.add(accommodation_type)
        await db.commit()
        await db.refresh(accommodation_type)
        await cache_service.invalidate_table(AccommodationType.__tablename__)

        logger.info(f"Created accommodation type {accommodation_type.name}")
        return accommodation_type

    async def update_accommodation_type(
        self,
        db: AsyncSession,
        type_id: str,
        data: AccommodationTypeUpdate
    ) -> AccommodationType:
        accommodation_type = await self.get_accommodation_type(db, type_id)
        values = data.model_dump(exclude_unset=True)

        if values.get("name") and values["name"] != accommodation_type.name:
            await self._ensure_unique_type_name(db, values["name"], exclude_id=type_id)

        for field, value in values.items():
            if field == "name" and value is None:
                continue
            setattr(accommodation_type, field, value)

        await db.commit()
        await db.refresh(accommodation_type)
        await cache_service.invalidate_table(AccommodationType.__tablename__)
        return accommodation_type

    async def delete_accommodation_type(self, db: AsyncSession, type_id: str) -> int:
        """Delete a type and clear it from students. Returns students cleared."""
        accommodation_type = await self.get_accommodation_type(db, type_id)

        result = await db.execute(
            update(Student)
            .where(Student.accommodation_type_id == type_id)
            .values(accommodation_type_id=None)
        )
        cleared = result.rowcount or 0

        await db.delete(accommodation_type)
        await db.commit()
        await cache_service.invalidate_table(AccommodationType.__tablename__)

        logger.info(f"Deleted accommodation type {type_id}, cleared {cleared} students")
        return cleared

    # ==================== ASSIGNMENTS ====================

    async def _get_student(self, db: AsyncSession, student_id: str) -> Student:
        student = await db.get(Student, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def _place(
        self,
        db: AsyncSession,
        student: Student,
        room_id: str,
        accommodation_type_id: Optional[str],
        check_in_date: Optional[date],
    ) -> Tuple[dict, List[OccupancyUpdate]]:
        """Point a student at a room, commit, and recompute old and new rooms"""
        if student.status != StudentStatus.ACTIVE:
            raise ValidationError("Only active students can be assigned to a room", field="student_id")

        room = await self.get_room(db, room_id)
        if accommodation_type_id:
            await self.get_accommodation_type(db, accommodation_type_id)

        previous_room_id = student.boarding_room_id
        moving = previous_room_id is not None and previous_room_id != room.id

        if is_manual_override(room.status):
            logger.warning(f"Assigning student {student.id} to room {room.id} with status {room.status}")

        student.boarding_room_id = room.id
        student.boarding_house_id = room.house_id
        if accommodation_type_id:
            student.accommodation_type_id = accommodation_type_id
        if check_in_date:
            student.check_in_date = check_in_date
        elif previous_room_id is None:
            student.check_in_date = date.today()

        placement = {
            "student_id": student.id,
            "boarding_house_id": student.boarding_house_id,
            "boarding_room_id": student.boarding_room_id,
            "accommodation_type_id": student.accommodation_type_id,
            "check_in_date": student.check_in_date,
        }
        await db.commit()

        if moving:
            logger.info(f"Moved student {student.id} from room {previous_room_id} to {room.id}")
        else:
            logger.info(f"Assigned student {student.id} to room {room.id}")

        updates = await room_status_writer.recompute_many(db, [previous_room_id, room.id])
        return placement, updates

    async def assign_student(self, db: AsyncSession, data: AssignmentCreate) -> Tuple[dict, List[OccupancyUpdate]]:
        """
        Assign a student to a room.

        Capacity is not enforced; an over-assigned room reports
        over-capacity. A student who already has another room is moved.
        """
        student = await self._get_student(db, data.student_id)
        return await self._place(db, student, data.room_id, data.accommodation_type_id, data.check_in_date)

    async def reassign_student(
        self,
        db: AsyncSession,
        student_id: str,
        data: AssignmentUpdate
    ) -> Tuple[dict, List[OccupancyUpdate]]:
        """Move a student to another room, recomputing the vacated and the new room"""
        student = await self._get_student(db, student_id)
        return await self._place(db, student, data.room_id, data.accommodation_type_id, data.check_in_date)

    async def unassign_student(self, db: AsyncSession, student_id: str) -> Tuple[dict, List[OccupancyUpdate]]:
        """Remove a student from boarding and recompute the room they left"""
        student = await self._get_student(db, student_id)
        previous_room_id = student.boarding_room_id

        student.boarding_room_id = None
        student.boarding_house_id = None
        student.check_in_date = None
        placement = {
            "student_id": student.id,
            "boarding_house_id": None,
            "boarding_room_id": None,
            "accommodation_type_id": student.accommodation_type_id,
            "check_in_date": None,
        }
        await db.commit()

        logger.info(f"Unassigned student {student_id} from room {previous_room_id}")
        updates = await room_status_writer.recompute_many(db, [previous_room_id])
        return placement, updates

    async def list_boarding_students(self, db: AsyncSession, house_id: Optional[str] = None) -> List[BoardingStudent]:
        """Active students with a room, their placement and roommates"""
        query = (
            select(Student, Room.room_number, BoardingHouse.name, AccommodationType.name)
            .join(Room, Student.boarding_room_id == Room.id)
            .join(BoardingHouse, Room.house_id == BoardingHouse.id)
            .outerjoin(AccommodationType, Student.accommodation_type_id == AccommodationType.id)
            .where(Student.status == StudentStatus.ACTIVE)
            .order_by(BoardingHouse.name, Room.room_number, Student.name)
        )
        if house_id:
            query = query.where(Room.house_id == house_id)

        rows = (await db.execute(query)).all()

        by_room: Dict[str, List[Student]] = {}
        for student, _, _, _ in rows:
            by_room.setdefault(student.boarding_room_id, []).append(student)

        boarders = []
        for student, room_number, house_name, type_name in rows:
            roommates = [
                Roommate(id=other.id, name=other.name, admission_number=other.admission_number)
                for other in by_room[student.boarding_room_id]
                if other.id != student.id
            ]
            boarders.append(
                BoardingStudent(
                    id=student.id,
                    name=student.name,
                    admission_number=student.admission_number,
                    boarding_house_id=student.boarding_house_id,
                    house_name=house_name,
                    boarding_room_id=student.boarding_room_id,
                    room_number=room_number,
                    accommodation_type_id=student.accommodation_type_id,
                    accommodation_type_name=type_name,
                    check_in_date=student.check_in_date,
                    roommates=roommates,
                )
            )
        return boarders


# Singleton instance
boarding_service = BoardingService()
