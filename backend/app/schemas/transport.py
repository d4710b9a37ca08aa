from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


class ZoneAreaBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class ZoneAreaResponse(ZoneAreaBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    zone_id: str


class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    areas: List[ZoneAreaBase] = Field(default_factory=list)


class ZoneUpdate(BaseModel):
    """areas, when given, replaces the zone's area list"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    areas: Optional[List[ZoneAreaBase]] = None


class ZoneResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    areas: List[ZoneAreaResponse] = Field(default_factory=list)
    created_at: datetime


class StudentTransportUpdate(BaseModel):
    """Null clears the assignment"""
    transport_zone_id: Optional[str] = None
    transport_type_id: Optional[str] = None


class StudentTransportResponse(BaseModel):
    student_id: str
    transport_zone_id: Optional[str] = None
    transport_type_id: Optional[str] = None


class ZoneSummary(BaseModel):
    zone_id: Optional[str] = None
    zone_name: str
    student_count: int


class TransportSummaryResponse(BaseModel):
    zones: List[ZoneSummary]
    total_students: int
