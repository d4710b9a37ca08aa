"""
Student Masterlist API Endpoints

Endpoints:
- GET /students - Filtered, paginated masterlist
- POST /students - Create a student
- POST /students/progression - End-of-year class progression (admin)
- GET /students/{id} - Get a student
- PATCH /students/{id} - Partial update
- POST /students/{id}/deactivate - Mark Inactive
- DELETE /students/{id} - Delete (admin)

Mutations that change a boarder's active status return occupancy_updates
and warnings for the affected room.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_user, get_current_admin
from app.models.student import StudentStatus
from app.models.user import User
from app.schemas.common import OccupancyAwareResponse, collect_warnings
from app.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentListResponse,
    StudentMutationResponse,
    DeactivateRequest,
    ProgressionRequest,
    ProgressionResponse,
)
from app.services.student_service import student_service

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=StudentListResponse)
async def list_students(
    search: Optional[str] = Query(None, description="Name or admission number"),
    status_filter: Optional[StudentStatus] = Query(None, alias="status"),
    current_class_id: Optional[str] = None,
    stream_id: Optional[str] = None,
    boarding_house_id: Optional[str] = None,
    transport_zone_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List students ordered by name"""
    result = await student_service.list_students(
        db,
        page=page,
        page_size=page_size,
        search=search,
        status=status_filter,
        current_class_id=current_class_id,
        stream_id=stream_id,
        boarding_house_id=boarding_house_id,
        transport_zone_id=transport_zone_id,
    )
    result["items"] = [StudentResponse.model_validate(s) for s in result["items"]]
    return result


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a masterlist record"""
    return await student_service.create_student(db, data)


@router.post("/progression", response_model=ProgressionResponse)
async def progress_classes(
    data: ProgressionRequest,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Move active students to their next class and graduate the final class.

    Graduates become Inactive and stop counting toward room occupancy.
    """
    progressed, graduated, updates = await student_service.progress_classes(db, data)
    return ProgressionResponse(
        progressed=progressed,
        graduated=graduated,
        message=f"{progressed} students progressed to new classes, {graduated} graduated (set to inactive).",
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await student_service.get_student(db, student_id)


@router.patch("/{student_id}", response_model=StudentMutationResponse)
async def update_student(
    student_id: str,
    data: StudentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Partial update. Status changes recompute the student's room."""
    student, updates = await student_service.update_student(db, student_id, data)
    return StudentMutationResponse(
        student=StudentResponse.model_validate(student),
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.post("/{student_id}/deactivate", response_model=StudentMutationResponse)
async def deactivate_student(
    student_id: str,
    data: Optional[DeactivateRequest] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Set a student Inactive (withdrawal date defaults to today)"""
    student, updates = await student_service.deactivate_student(
        db, student_id, data.withdrawal_date if data else None
    )
    return StudentMutationResponse(
        student=StudentResponse.model_validate(student),
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.delete("/{student_id}", response_model=OccupancyAwareResponse)
async def delete_student(
    student_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a student and recompute the room they occupied"""
    updates = await student_service.delete_student(db, student_id)
    return OccupancyAwareResponse(occupancy_updates=updates, warnings=collect_warnings(updates))
