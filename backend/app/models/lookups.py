"""
Lookup tables

Small ordered option lists used by the masterlist and transport forms:
classes, streams, team colours and transport types. They all share the
same shape (name + sort_order) and are served through the query cache.
"""

from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class LookupMixin:
    """Columns shared by every lookup table"""

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    sort_order = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class SchoolClass(LookupMixin, Base):
    """Class / grade (e.g. Grade 7)"""
    __tablename__ = "classes"


class Stream(LookupMixin, Base):
    """Stream within a class (e.g. East, West)"""
    __tablename__ = "streams"


class TeamColour(LookupMixin, Base):
    """Sports house / team colour"""
    __tablename__ = "team_colours"


class TransportType(LookupMixin, Base):
    """Transport type (e.g. One Way, Two Way)"""
    __tablename__ = "transport_types"


# Table name -> model, used by the generic lookup endpoints
LOOKUP_MODELS = {
    SchoolClass.__tablename__: SchoolClass,
    Stream.__tablename__: Stream,
    TeamColour.__tablename__: TeamColour,
    TransportType.__tablename__: TransportType,
}
