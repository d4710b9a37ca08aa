"""
Student Service - masterlist CRUD, deactivation and class progression

Any change that can move a student in or out of a room's active
occupant set (status flips, deletion) is committed first and then handed
to the RoomStatusWriter. The writer's outcome travels back to the caller
as a list of OccupancyUpdate.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from datetime import date
from typing import Optional, List, Tuple
import logging

from app.core.exceptions import (
    StudentNotFoundError,
    DuplicateRecordError,
    ZoneNotFoundError,
)
from app.models.student import Student, StudentStatus
from app.models.transport import TransportZone
from app.schemas.common import OccupancyUpdate
from app.schemas.student import StudentCreate, StudentUpdate, ProgressionRequest
from app.services.lookup_service import lookup_service
from app.services.room_status_writer import room_status_writer
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


# Student column -> lookup table it references
LOOKUP_FIELDS = {
    "class_admitted_to_id": "classes",
    "current_class_id": "classes",
    "stream_id": "streams",
    "team_colour_id": "team_colours",
    "transport_type_id": "transport_types",
}


class StudentService:
    """Service for the student masterlist"""

    async def _validate_references(self, db: AsyncSession, values: dict) -> None:
        for field, table in LOOKUP_FIELDS.items():
            if values.get(field):
                await lookup_service.ensure_exists(db, table, values[field])

        zone_id = values.get("transport_zone_id")
        if zone_id and not await db.get(TransportZone, zone_id):
            raise ZoneNotFoundError(zone_id)

    async def _ensure_unique_admission(
        self,
        db: AsyncSession,
        admission_number: str,
        exclude_id: Optional[str] = None
    ) -> None:
        query = select(Student.id).where(Student.admission_number == admission_number)
        if exclude_id:
            query = query.where(Student.id != exclude_id)
        if (await db.execute(query)).first():
            raise DuplicateRecordError("Student", "admission_number", admission_number)

    # ==================== READ ====================

    async def get_student(self, db: AsyncSession, student_id: str) -> Student:
        """Get student by ID, raising StudentNotFoundError if missing"""
        student = await db.get(Student, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def list_students(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[StudentStatus] = None,
        current_class_id: Optional[str] = None,
        stream_id: Optional[str] = None,
        boarding_house_id: Optional[str] = None,
        transport_zone_id: Optional[str] = None,
    ) -> dict:
        """
        List students with filters, ordered by name.

        search matches name or admission number (case-insensitive).
        """
        query = select(Student)

        conditions = []
        if search:
            term = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Student.name.ilike(term),
                    Student.admission_number.ilike(term)
                )
            )
        if status:
            conditions.append(Student.status == status)
        if current_class_id:
            conditions.append(Student.current_class_id == current_class_id)
        if stream_id:
            conditions.append(Student.stream_id == stream_id)
        if boarding_house_id:
            conditions.append(Student.boarding_house_id == boarding_house_id)
        if transport_zone_id:
            conditions.append(Student.transport_zone_id == transport_zone_id)

        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(Student.name, Student.admission_number)
        return await paginate(db, query, page, page_size)

    # ==================== WRITE ====================

    async def create_student(self, db: AsyncSession, data: StudentCreate) -> Student:
        """Create a masterlist record. New students start without a room."""
        values = data.model_dump()
        await self._ensure_unique_admission(db, data.admission_number)
        await self._validate_references(db, values)

        student = Student(**values)
        db.add(student)
        await db.commit()
        await db.refresh(student)

        logger.info(f"Created student {student.admission_number} ({student.name})")
        return student

    async def update_student(
        self,
        db: AsyncSession,
        student_id: str,
        data: StudentUpdate
    ) -> Tuple[Student, List[OccupancyUpdate]]:
        """
        Apply a partial update.

        A status change recomputes the student's room, if any. Turning a
        student Inactive without a withdrawal date stamps today.
        """
        student = await self.get_student(db, student_id)
        values = data.model_dump(exclude_unset=True)

        if values.get("admission_number") and values["admission_number"] != student.admission_number:
            await self._ensure_unique_admission(db, values["admission_number"], exclude_id=student_id)
        await self._validate_references(db, values)

        status_changed = "status" in values and values["status"] is not None and values["status"] != student.status
        if status_changed and values["status"] == StudentStatus.INACTIVE and not values.get("withdrawal_date"):
            values["withdrawal_date"] = date.today()

        for field, value in values.items():
            if field in ("admission_number", "name", "status") and value is None:
                continue
            setattr(student, field, value)

        room_id = student.boarding_room_id
        await db.commit()

        updates = []
        if status_changed and room_id:
            updates = await room_status_writer.recompute_many(db, [room_id])

        await db.refresh(student)
        logger.info(f"Updated student {student.admission_number}: {sorted(values)}")
        return student, updates

    async def deactivate_student(
        self,
        db: AsyncSession,
        student_id: str,
        withdrawal_date: Optional[date] = None
    ) -> Tuple[Student, List[OccupancyUpdate]]:
        """
        Mark a student Inactive.

        The room assignment is left in place, but the student stops
        counting toward the room's occupancy.
        """
        student = await self.get_student(db, student_id)

        student.status = StudentStatus.INACTIVE
        student.withdrawal_date = withdrawal_date or student.withdrawal_date or date.today()
        room_id = student.boarding_room_id
        await db.commit()

        updates = await room_status_writer.recompute_many(db, [room_id])

        await db.refresh(student)
        logger.info(f"Deactivated student {student.admission_number}")
        return student, updates

    async def delete_student(self, db: AsyncSession, student_id: str) -> List[OccupancyUpdate]:
        """Delete a student and recompute the room they occupied"""
        student = await self.get_student(db, student_id)
        room_id = student.boarding_room_id
        admission_number = student.admission_number

        await db.delete(student)
        await db.commit()

        logger.info(f"Deleted student {admission_number}")
        return await room_status_writer.recompute_many(db, [room_id])

    async def progress_classes(
        self,
        db: AsyncSession,
        request: ProgressionRequest
    ) -> Tuple[int, int, List[OccupancyUpdate]]:
        """
        End-of-year progression for active students.

        Graduation wins when a class is both mapped and graduating.
        Graduates are set Inactive with today's withdrawal date and their
        rooms are recomputed.

        Returns:
            Tuple of (progressed count, graduated count, occupancy updates)
        """
        graduating = set(request.graduating_class_ids)
        mapping = {k: v for k, v in request.class_mapping.items() if k not in graduating and v}
        for target in set(mapping.values()):
            await lookup_service.ensure_exists(db, "classes", target)

        source_classes = set(mapping) | graduating
        if not source_classes:
            return 0, 0, []

        query = select(Student).where(
            and_(
                Student.status == StudentStatus.ACTIVE,
                Student.current_class_id.in_(source_classes),
            )
        )
        if request.excluded_student_ids:
            query = query.where(Student.id.notin_(request.excluded_student_ids))
        students = (await db.execute(query)).scalars().all()

        today = date.today()
        progressed = 0
        graduated = 0
        vacated_rooms = []

        for student in students:
            if student.current_class_id in graduating:
                student.status = StudentStatus.INACTIVE
                student.withdrawal_date = today
                graduated += 1
                if student.boarding_room_id:
                    vacated_rooms.append(student.boarding_room_id)
            else:
                student.current_class_id = mapping[student.current_class_id]
                progressed += 1

        await db.commit()
        logger.info(f"Class progression: {progressed} progressed, {graduated} graduated")

        updates = await room_status_writer.recompute_many(db, vacated_rooms)
        return progressed, graduated, updates


# Singleton instance
student_service = StudentService()
