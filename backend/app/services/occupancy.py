"""
Room occupancy aggregation.

Pure functions shared by every boarding code path that needs a room's
occupant count or its derived status. Nothing here touches the database;
RoomStatusWriter feeds these functions from the store and persists the
results.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional


class RoomStatus(str, enum.Enum):
    """Room status as stored on boarding_rooms.status"""
    VACANT = "vacant"
    PARTIALLY_OCCUPIED = "partially-occupied"
    FULLY_OCCUPIED = "fully-occupied"
    OVER_CAPACITY = "over-capacity"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


# Statuses set by an administrator. They win over anything derived.
MANUAL_OVERRIDES = (RoomStatus.MAINTENANCE, RoomStatus.RESERVED)

# Rooms a student can be placed into from the "available rooms" picker
AVAILABLE_STATUSES = (RoomStatus.VACANT, RoomStatus.PARTIALLY_OCCUPIED)


@dataclass(frozen=True)
class Occupant:
    """Minimal view of a student for occupancy counting"""
    active: bool
    room_id: Optional[str] = None


def count_active_occupants(occupants: Optional[Iterable], room_id: Optional[str]) -> int:
    """
    Count records that are active and assigned to room_id.

    Accepts anything exposing ``active`` and ``room_id`` attributes
    (Occupant records, or a mapping with those keys). A None population
    counts as empty.
    """
    if occupants is None:
        return 0

    count = 0
    for occupant in occupants:
        if isinstance(occupant, dict):
            active = occupant.get("active")
            occupant_room = occupant.get("room_id")
        else:
            active = occupant.active
            occupant_room = occupant.room_id
        if active is True and occupant_room is not None and str(occupant_room) == str(room_id):
            count += 1
    return count


def derive_status(occupancy: int, capacity: int, manual_override: Optional[str] = None) -> RoomStatus:
    """
    Derive a room's status.

    Priority: manual override (maintenance/reserved), then vacant,
    fully-occupied, over-capacity, partially-occupied. Any other
    override value, including a previously derived status, is ignored.
    """
    if manual_override is not None and manual_override in MANUAL_OVERRIDES:
        return RoomStatus(manual_override)
    if occupancy == 0:
        return RoomStatus.VACANT
    if occupancy == capacity:
        return RoomStatus.FULLY_OCCUPIED
    if occupancy > capacity:
        return RoomStatus.OVER_CAPACITY
    return RoomStatus.PARTIALLY_OCCUPIED


def is_manual_override(status: Optional[str]) -> bool:
    return status is not None and status in MANUAL_OVERRIDES
