"""
Boarding Models
- Boarding houses with personnel and amenities
- Rooms with stored occupancy and status
- Accommodation types
"""

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid
from app.services.occupancy import RoomStatus


class BoardingHouse(Base):
    """Boarding house (dormitory)"""
    __tablename__ = "boarding_houses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    designation = Column(String(100), nullable=True)  # e.g. Boys, Girls, Mixed
    description = Column(Text, nullable=True)
    personnel = Column(JSON, default=list)  # [{name, designation}]
    amenities = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rooms = relationship("Room", back_populates="house", order_by="Room.room_number", passive_deletes=True)

    def __repr__(self):
        return f"<BoardingHouse {self.name}>"


class Room(Base):
    """
    Boarding room.

    current_occupancy and status are bookkeeping fields maintained by
    RoomStatusWriter. A status of maintenance or reserved is a manual
    override and survives recomputes.
    """
    __tablename__ = "boarding_rooms"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    house_id = Column(GUID, ForeignKey("boarding_houses.id", ondelete="CASCADE"), nullable=False, index=True)
    room_number = Column(String(50), nullable=False)
    floor = Column(String(50), nullable=True)
    capacity = Column(Integer, nullable=False)
    current_occupancy = Column(Integer, default=0, nullable=False)
    status = Column(String(32), default=RoomStatus.VACANT.value, nullable=False)
    amenities = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    house = relationship("BoardingHouse", back_populates="rooms")
    occupants = relationship("Student", back_populates="boarding_room", passive_deletes=True)

    def __repr__(self):
        return f"<Room {self.room_number} ({self.current_occupancy}/{self.capacity} {self.status})>"


class AccommodationType(Base):
    """Accommodation type (e.g. Full Boarder, Weekly Boarder)"""
    __tablename__ = "boarding_accommodation_types"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<AccommodationType {self.name}>"
