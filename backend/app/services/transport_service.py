"""
Transport Service - zones with their areas, student zone/type assignment, summary
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
from typing import Optional, List
import logging

from app.core.exceptions import ZoneNotFoundError, StudentNotFoundError, DuplicateRecordError
from app.models.student import Student, StudentStatus
from app.models.transport import TransportZone, TransportZoneArea
from app.schemas.transport import (
    ZoneCreate,
    ZoneUpdate,
    ZoneResponse,
    StudentTransportUpdate,
    ZoneSummary,
)
from app.services.cache_service import cache_service
from app.services.lookup_service import lookup_service

logger = logging.getLogger(__name__)


class TransportService:
    """Service for transport zones and student transport assignment"""

    async def get_zone(self, db: AsyncSession, zone_id: str) -> TransportZone:
        zone = await db.get(TransportZone, zone_id)
        if not zone:
            raise ZoneNotFoundError(zone_id)
        return zone

    async def list_zones(self, db: AsyncSession) -> List[dict]:
        async def loader():
            zones = (await db.execute(select(TransportZone).order_by(TransportZone.name))).scalars().all()
            return [ZoneResponse.model_validate(zone).model_dump(mode="json") for zone in zones]

        return await cache_service.cached_query(TransportZone.__tablename__, loader)

    async def _ensure_unique_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(TransportZone.id).where(func.lower(TransportZone.name) == name.lower())
        if exclude_id:
            query = query.where(TransportZone.id != exclude_id)
        if (await db.execute(query)).first():
            raise DuplicateRecordError("Transport Zone", "name", name)

    async def create_zone(self, db: AsyncSession, data: ZoneCreate) -> TransportZone:
        await self._ensure_unique_name(db, data.name)

        zone = TransportZone(
            name=data.name,
            description=data.description,
            areas=[TransportZoneArea(name=a.name, description=a.description) for a in data.areas],
        )
        db.add(zone)
        await db.commit()
        await db.refresh(zone)
        await cache_service.invalidate_table(TransportZone.__tablename__)

        logger.info(f"Created transport zone {zone.name} with {len(data.areas)} areas")
        return zone

    async def update_zone(self, db: AsyncSession, zone_id: str, data: ZoneUpdate) -> TransportZone:
        """Update a zone. A given areas list replaces the existing areas."""
        zone = await self.get_zone(db, zone_id)
        values = data.model_dump(exclude_unset=True)

        if values.get("name") and values["name"] != zone.name:
            await self._ensure_unique_name(db, values["name"], exclude_id=zone_id)
            zone.name = values["name"]
        if "description" in values:
            zone.description = values["description"]
        if data.areas is not None:
            zone.areas = [TransportZoneArea(name=a.name, description=a.description) for a in data.areas]

        await db.commit()
        await db.refresh(zone)
        await cache_service.invalidate_table(TransportZone.__tablename__)
        return zone

    async def delete_zone(self, db: AsyncSession, zone_id: str) -> int:
        """Delete a zone and its areas, clearing it from students. Returns students cleared."""
        zone = await self.get_zone(db, zone_id)

        result = await db.execute(
            update(Student)
            .where(Student.transport_zone_id == zone_id)
            .values(transport_zone_id=None)
        )
        cleared = result.rowcount or 0

        await db.delete(zone)
        await db.commit()
        await cache_service.invalidate_table(TransportZone.__tablename__)

        logger.info(f"Deleted transport zone {zone_id}, cleared {cleared} students")
        return cleared

    async def assign_student(self, db: AsyncSession, student_id: str, data: StudentTransportUpdate) -> Student:
        """Set (or clear, with null) a student's zone and transport type"""
        student = await db.get(Student, student_id)
        if not student:
            raise StudentNotFoundError(student_id)

        values = data.model_dump(exclude_unset=True)
        if values.get("transport_zone_id"):
            await self.get_zone(db, values["transport_zone_id"])
        if values.get("transport_type_id"):
            await lookup_service.ensure_exists(db, "transport_types", values["transport_type_id"])

        for field, value in values.items():
            setattr(student, field, value)

        await db.commit()
        await db.refresh(student)
        logger.info(f"Transport for student {student_id}: zone={student.transport_zone_id} type={student.transport_type_id}")
        return student

    async def summary(self, db: AsyncSession) -> List[ZoneSummary]:
        """Active students per zone, including zones with none and an unassigned bucket"""
        counts = dict(
            (await db.execute(
                select(Student.transport_zone_id, func.count(Student.id))
                .where(Student.status == StudentStatus.ACTIVE)
                .group_by(Student.transport_zone_id)
            )).all()
        )

        zones = (await db.execute(select(TransportZone.id, TransportZone.name).order_by(TransportZone.name))).all()
        summary = [
            ZoneSummary(zone_id=zone_id, zone_name=name, student_count=counts.get(zone_id, 0))
            for zone_id, name in zones
        ]
        if counts.get(None):
            summary.append(ZoneSummary(zone_id=None, zone_name="Unassigned", student_count=counts[None]))
        return summary


# Singleton instance
transport_service = TransportService()
