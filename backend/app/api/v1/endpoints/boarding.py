"""
Boarding API Endpoints

Endpoints:
- GET/POST /boarding/houses, GET/PATCH/DELETE /boarding/houses/{id}
- GET /boarding/houses/{id}/available-rooms
- GET/POST /boarding/rooms, GET/PATCH/DELETE /boarding/rooms/{id}
- POST /boarding/rooms/reconcile - Recompute every room (admin)
- GET/POST /boarding/accommodation-types, PATCH/DELETE /boarding/accommodation-types/{id}
- POST /boarding/assignments - Assign a student to a room
- PUT /boarding/assignments/{student_id} - Move a student
- DELETE /boarding/assignments/{student_id} - Remove a student from boarding
- GET /boarding/students - Active boarders with roommates

House/room writes and all deletes require admin.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_user, get_current_admin
from app.models.user import User
from app.schemas.common import collect_warnings
from app.schemas.boarding import (
    HouseCreate,
    HouseUpdate,
    HouseWithStats,
    HouseDeleteResponse,
    RoomCreate,
    RoomUpdate,
    RoomResponse,
    RoomMutationResponse,
    RoomDeleteResponse,
    ReconcileResponse,
    AccommodationTypeCreate,
    AccommodationTypeUpdate,
    AccommodationTypeResponse,
    AccommodationTypeDeleteResponse,
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    BoardingStudent,
)
from app.services.boarding_service import boarding_service

router = APIRouter(prefix="/boarding", tags=["Boarding"])


# ==================== HOUSES ====================

@router.get("/houses", response_model=List[HouseWithStats])
async def list_houses(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Houses with total_rooms, total_capacity and current_occupancy"""
    return await boarding_service.list_houses(db)


@router.post("/houses", response_model=HouseWithStats, status_code=status.HTTP_201_CREATED)
async def create_house(
    data: HouseCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    house = await boarding_service.create_house(db, data)
    return await boarding_service.get_house_with_stats(db, house.id)


@router.get("/houses/{house_id}", response_model=HouseWithStats)
async def get_house(
    house_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.get_house_with_stats(db, house_id)


@router.patch("/houses/{house_id}", response_model=HouseWithStats)
async def update_house(
    house_id: str,
    data: HouseUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await boarding_service.update_house(db, house_id, data)
    return await boarding_service.get_house_with_stats(db, house_id)


@router.delete("/houses/{house_id}", response_model=HouseDeleteResponse)
async def delete_house(
    house_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a house, its rooms, and unassign the rooms' occupants"""
    rooms_deleted, unassigned, updates = await boarding_service.delete_house(db, house_id)
    return HouseDeleteResponse(
        rooms_deleted=rooms_deleted,
        students_unassigned=unassigned,
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.get("/houses/{house_id}/available-rooms", response_model=List[RoomResponse])
async def available_rooms(
    house_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Rooms in the house that are vacant or partially occupied"""
    return await boarding_service.available_rooms(db, house_id)


# ==================== ROOMS ====================

@router.get("/rooms", response_model=List[RoomResponse])
async def list_rooms(
    house_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.list_rooms(db, house_id)


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    data: RoomCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.create_room(db, data)


@router.post("/rooms/reconcile", response_model=ReconcileResponse)
async def reconcile_rooms(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Recount occupants of every room and repair stored occupancy/status"""
    updates = await boarding_service.reconcile(db)
    return ReconcileResponse(
        rooms_checked=len(updates),
        rooms_updated=sum(1 for u in updates if u.written),
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.get("/rooms/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.get_room(db, room_id)


@router.patch("/rooms/{room_id}", response_model=RoomMutationResponse)
async def update_room(
    room_id: str,
    data: RoomUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a room; capacity and status changes recompute its status"""
    room, updates = await boarding_service.update_room(db, room_id, data)
    return RoomMutationResponse(
        room=RoomResponse.model_validate(room),
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.delete("/rooms/{room_id}", response_model=RoomDeleteResponse)
async def delete_room(
    room_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Unassign the room's occupants, then delete it"""
    unassigned, updates = await boarding_service.delete_room(db, room_id)
    return RoomDeleteResponse(
        students_unassigned=unassigned,
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


# ==================== ACCOMMODATION TYPES ====================

@router.get("/accommodation-types", response_model=List[AccommodationTypeResponse])
async def list_accommodation_types(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.list_accommodation_types(db)


@router.post("/accommodation-types", response_model=AccommodationTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_accommodation_type(
    data: AccommodationTypeCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.create_accommodation_type(db, data)


@router.patch("/accommodation-types/{type_id}", response_model=AccommodationTypeResponse)
async def update_accommodation_type(
    type_id: str,
    data: AccommodationTypeUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await boarding_service.update_accommodation_type(db, type_id, data)


@router.delete("/accommodation-types/{type_id}", response_model=AccommodationTypeDeleteResponse)
async def delete_accommodation_type(
    type_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a type; students using it are cleared"""
    cleared = await boarding_service.delete_accommodation_type(db, type_id)
    return AccommodationTypeDeleteResponse(students_cleared=cleared)


# ==================== ASSIGNMENTS ====================

@router.post("/assignments", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_student(
    data: AssignmentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Assign a student to a room.

    The assignment is kept even when the room recompute fails; the
    failure is reported in warnings.
    """
    placement, updates = await boarding_service.assign_student(db, data)
    return AssignmentResponse(
        **placement,
        message="Student assigned successfully",
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.put("/assignments/{student_id}", response_model=AssignmentResponse)
async def reassign_student(
    student_id: str,
    data: AssignmentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Move a student; both the vacated and the new room are recomputed"""
    placement, updates = await boarding_service.reassign_student(db, student_id, data)
    return AssignmentResponse(
        **placement,
        message="Student assignment updated successfully",
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.delete("/assignments/{student_id}", response_model=AssignmentResponse)
async def unassign_student(
    student_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    placement, updates = await boarding_service.unassign_student(db, student_id)
    return AssignmentResponse(
        **placement,
        message="Student removed from boarding",
        occupancy_updates=updates,
        warnings=collect_warnings(updates),
    )


@router.get("/students", response_model=List[BoardingStudent])
async def list_boarding_students(
    house_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active boarders with their house, room, accommodation type and roommates"""
    return await boarding_service.list_boarding_students(db, house_id)
