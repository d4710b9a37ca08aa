"""Dashboard operator accounts"""
import enum
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    ADMIN = "admin"   # may delete and edit reference data
    STAFF = "staff"


class User(Base):
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255))
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.STAFF)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime)

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else '-'})>"
