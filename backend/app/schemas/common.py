"""
Shared response pieces
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any

from app.services.occupancy import RoomStatus


class OccupancyUpdate(BaseModel):
    """Outcome of recomputing one room's occupancy"""
    room_id: str
    occupancy: int = 0
    status: Optional[RoomStatus] = None
    written: bool = False
    warning: Optional[str] = None


class OccupancyAwareResponse(BaseModel):
    """
    Base for responses of mutations that move students in or out of rooms.

    The primary action already succeeded when this is returned. Failures
    of the follow-up room recompute only show up in ``warnings``.
    """
    occupancy_updates: List[OccupancyUpdate] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PaginatedResponse(BaseModel):
    """Standard paginated response"""
    items: List[Any]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


def collect_warnings(updates: List[OccupancyUpdate]) -> List[str]:
    return [u.warning for u in updates if u.warning]
