from sqlalchemy import Column, String, DateTime, Date, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class StudentStatus(str, enum.Enum):
    """Enrollment status. Only active students occupy boarding rooms."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Student(Base):
    """Student masterlist record"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    admission_number = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False, index=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    date_of_admission = Column(Date, nullable=True)

    # Academic placement
    class_admitted_to_id = Column(GUID, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    current_class_id = Column(GUID, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    stream_id = Column(GUID, ForeignKey("streams.id", ondelete="SET NULL"), nullable=True)
    team_colour_id = Column(GUID, ForeignKey("team_colours.id", ondelete="SET NULL"), nullable=True)

    status = Column(SQLEnum(StudentStatus), default=StudentStatus.ACTIVE, nullable=False, index=True)
    withdrawal_date = Column(Date, nullable=True)

    # Parent / guardian contacts
    father_name = Column(String(255), nullable=True)
    father_phone = Column(String(30), nullable=True)
    father_email = Column(String(255), nullable=True)
    mother_name = Column(String(255), nullable=True)
    mother_phone = Column(String(30), nullable=True)
    mother_email = Column(String(255), nullable=True)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(30), nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    emergency_relationship = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)

    # Documents on file
    birth_certificate_status = Column(String(50), nullable=True)
    previous_school_report_status = Column(String(50), nullable=True)
    medical_form_status = Column(String(50), nullable=True)

    # Medical
    allergies = Column(Text, nullable=True)
    medical_conditions = Column(Text, nullable=True)

    # Boarding (boarding_room_id is the occupant assignment)
    boarding_house_id = Column(GUID, ForeignKey("boarding_houses.id", ondelete="SET NULL"), nullable=True, index=True)
    boarding_room_id = Column(GUID, ForeignKey("boarding_rooms.id", ondelete="SET NULL"), nullable=True, index=True)
    accommodation_type_id = Column(
        GUID, ForeignKey("boarding_accommodation_types.id", ondelete="SET NULL"), nullable=True
    )
    check_in_date = Column(Date, nullable=True)

    # Transport
    transport_zone_id = Column(GUID, ForeignKey("transport_zones.id", ondelete="SET NULL"), nullable=True, index=True)
    transport_type_id = Column(GUID, ForeignKey("transport_types.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    boarding_room = relationship("Room", back_populates="occupants")

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    def __repr__(self):
        return f"<Student {self.admission_number} {self.name}>"
