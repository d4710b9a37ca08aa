"""
Student Schemas - Request/Response models for the masterlist
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict
from datetime import date, datetime

from app.models.student import StudentStatus
from app.schemas.common import OccupancyAwareResponse


class StudentFields(BaseModel):
    """Editable masterlist fields. Boarding placement goes through /boarding/assignments."""
    gender: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    date_of_admission: Optional[date] = None

    class_admitted_to_id: Optional[str] = None
    current_class_id: Optional[str] = None
    stream_id: Optional[str] = None
    team_colour_id: Optional[str] = None

    father_name: Optional[str] = Field(None, max_length=255)
    father_phone: Optional[str] = Field(None, max_length=30)
    father_email: Optional[str] = Field(None, max_length=255)
    mother_name: Optional[str] = Field(None, max_length=255)
    mother_phone: Optional[str] = Field(None, max_length=30)
    mother_email: Optional[str] = Field(None, max_length=255)
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=30)
    emergency_contact: Optional[str] = Field(None, max_length=255)
    emergency_relationship: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None

    birth_certificate_status: Optional[str] = Field(None, max_length=50)
    previous_school_report_status: Optional[str] = Field(None, max_length=50)
    medical_form_status: Optional[str] = Field(None, max_length=50)

    allergies: Optional[str] = None
    medical_conditions: Optional[str] = None

    transport_zone_id: Optional[str] = None
    transport_type_id: Optional[str] = None


class StudentCreate(StudentFields):
    admission_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    status: StudentStatus = StudentStatus.ACTIVE

    @field_validator('admission_number', 'name')
    @classmethod
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StudentUpdate(StudentFields):
    """Partial update; only fields present in the request are applied"""
    admission_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[StudentStatus] = None
    withdrawal_date: Optional[date] = None


class StudentResponse(StudentFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    admission_number: str
    name: str
    status: StudentStatus
    withdrawal_date: Optional[date] = None

    boarding_house_id: Optional[str] = None
    boarding_room_id: Optional[str] = None
    accommodation_type_id: Optional[str] = None
    check_in_date: Optional[date] = None

    created_at: datetime
    updated_at: Optional[datetime] = None


class StudentMutationResponse(OccupancyAwareResponse):
    """Student after an update that may have changed room occupancy"""
    student: StudentResponse


class StudentListResponse(BaseModel):
    items: List[StudentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class DeactivateRequest(BaseModel):
    withdrawal_date: Optional[date] = None


class ProgressionRequest(BaseModel):
    """
    End-of-year class progression.

    class_mapping moves every active student of a class to another class.
    Students in graduating_class_ids are set Inactive with today's
    withdrawal date instead.
    """
    class_mapping: Dict[str, str] = Field(default_factory=dict)
    graduating_class_ids: List[str] = Field(default_factory=list)
    excluded_student_ids: List[str] = Field(default_factory=list)


class ProgressionResponse(OccupancyAwareResponse):
    progressed: int
    graduated: int
    message: str
