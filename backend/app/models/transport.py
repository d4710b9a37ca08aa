from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class TransportZone(Base):
    """Pickup zone served by school transport"""
    __tablename__ = "transport_zones"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    areas = relationship(
        "TransportZoneArea",
        back_populates="zone",
        cascade="all, delete-orphan",
        order_by="TransportZoneArea.name",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<TransportZone {self.name}>"


class TransportZoneArea(Base):
    """Named area (estate, road) inside a zone"""
    __tablename__ = "transport_zone_areas"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    zone_id = Column(GUID, ForeignKey("transport_zones.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    zone = relationship("TransportZone", back_populates="areas")
