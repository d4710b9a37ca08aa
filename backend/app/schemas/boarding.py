"""
Boarding Schemas - houses, rooms, accommodation types and room assignments
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import date, datetime

from app.services.occupancy import RoomStatus
from app.schemas.common import OccupancyAwareResponse


# ============== Houses ==============

class HousePersonnel(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    designation: Optional[str] = Field(None, max_length=100)


class HouseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    designation: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    personnel: List[HousePersonnel] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)


class HouseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    designation: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    personnel: Optional[List[HousePersonnel]] = None
    amenities: Optional[List[str]] = None


class HouseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    designation: Optional[str] = None
    description: Optional[str] = None
    personnel: List[HousePersonnel] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    created_at: datetime


class HouseWithStats(HouseResponse):
    """House plus figures derived from its rooms and their active occupants"""
    total_rooms: int = 0
    total_capacity: int = 0
    current_occupancy: int = 0


class HouseDeleteResponse(OccupancyAwareResponse):
    success: bool = True
    rooms_deleted: int = 0
    students_unassigned: int = 0


# ============== Rooms ==============

class RoomCreate(BaseModel):
    house_id: str
    room_number: str = Field(..., min_length=1, max_length=50)
    floor: Optional[str] = Field(None, max_length=50)
    capacity: int = Field(..., gt=0)
    status: Optional[RoomStatus] = Field(
        None, description="Only maintenance/reserved are kept; anything else is derived"
    )
    amenities: List[str] = Field(default_factory=list)


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=50)
    floor: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = Field(None, gt=0)
    status: Optional[RoomStatus] = Field(
        None, description="Set maintenance/reserved to override; any derived value clears the override"
    )
    amenities: Optional[List[str]] = None


class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    house_id: str
    room_number: str
    floor: Optional[str] = None
    capacity: int
    current_occupancy: int
    status: RoomStatus
    amenities: List[str] = Field(default_factory=list)
    created_at: datetime


class RoomMutationResponse(OccupancyAwareResponse):
    room: RoomResponse


class RoomDeleteResponse(OccupancyAwareResponse):
    success: bool = True
    students_unassigned: int = 0


class ReconcileResponse(OccupancyAwareResponse):
    rooms_checked: int
    rooms_updated: int


# ============== Accommodation types ==============

class AccommodationTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class AccommodationTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class AccommodationTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None


class AccommodationTypeDeleteResponse(BaseModel):
    success: bool = True
    students_cleared: int = 0


# ============== Assignments ==============

class AssignmentCreate(BaseModel):
    student_id: str
    room_id: str
    accommodation_type_id: Optional[str] = None
    check_in_date: Optional[date] = None


class AssignmentUpdate(BaseModel):
    """Move a student to another room (possibly in another house)"""
    room_id: str
    accommodation_type_id: Optional[str] = None
    check_in_date: Optional[date] = None


class AssignmentResponse(OccupancyAwareResponse):
    student_id: str
    boarding_house_id: Optional[str] = None
    boarding_room_id: Optional[str] = None
    accommodation_type_id: Optional[str] = None
    check_in_date: Optional[date] = None
    message: str


class Roommate(BaseModel):
    id: str
    name: str
    admission_number: str


class BoardingStudent(BaseModel):
    """Active boarder with their placement and roommates"""
    id: str
    name: str
    admission_number: str
    boarding_house_id: Optional[str] = None
    house_name: Optional[str] = None
    boarding_room_id: Optional[str] = None
    room_number: Optional[str] = None
    accommodation_type_id: Optional[str] = None
    accommodation_type_name: Optional[str] = None
    check_in_date: Optional[date] = None
    roommates: List[Roommate] = Field(default_factory=list)
