"""
Transport API Endpoints

Endpoints:
- GET/POST /transport/zones, GET/PATCH/DELETE /transport/zones/{id}
- PUT /transport/students/{id} - Set a student's zone and transport type
- GET /transport/summary - Active students per zone
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_user, get_current_admin
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.transport import (
    ZoneCreate,
    ZoneUpdate,
    ZoneResponse,
    StudentTransportUpdate,
    StudentTransportResponse,
    TransportSummaryResponse,
)
from app.services.transport_service import transport_service

router = APIRouter(prefix="/transport", tags=["Transport"])


@router.get("/zones", response_model=List[ZoneResponse])
async def list_zones(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await transport_service.list_zones(db)


@router.post("/zones", response_model=ZoneResponse, status_code=status.HTTP_201_CREATED)
async def create_zone(
    data: ZoneCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await transport_service.create_zone(db, data)


@router.get("/zones/{zone_id}", response_model=ZoneResponse)
async def get_zone(
    zone_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await transport_service.get_zone(db, zone_id)


@router.patch("/zones/{zone_id}", response_model=ZoneResponse)
async def update_zone(
    zone_id: str,
    data: ZoneUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await transport_service.update_zone(db, zone_id, data)


@router.delete("/zones/{zone_id}", response_model=MessageResponse)
async def delete_zone(
    zone_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    cleared = await transport_service.delete_zone(db, zone_id)
    return MessageResponse(message=f"Zone deleted. {cleared} student(s) unassigned.")


@router.put("/students/{student_id}", response_model=StudentTransportResponse)
async def assign_student_transport(
    student_id: str,
    data: StudentTransportUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    student = await transport_service.assign_student(db, student_id, data)
    return StudentTransportResponse(
        student_id=student.id,
        transport_zone_id=student.transport_zone_id,
        transport_type_id=student.transport_type_id,
    )


@router.get("/summary", response_model=TransportSummaryResponse)
async def transport_summary(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    zones = await transport_service.summary(db)
    return TransportSummaryResponse(zones=zones, total_students=sum(z.student_count for z in zones))
