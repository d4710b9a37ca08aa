# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.lookups import SchoolClass, Stream, TeamColour, TransportType, LOOKUP_MODELS
from app.models.student import Student, StudentStatus
from app.models.boarding import BoardingHouse, Room, AccommodationType
from app.models.transport import TransportZone, TransportZoneArea
from app.models.inventory import (
    InventoryCategory,
    InventoryStorageLocation,
    InventoryItem,
    InventoryStockHistory,
)

__all__ = [
    # Users
    "User",
    "UserRole",
    # Lookups
    "SchoolClass",
    "Stream",
    "TeamColour",
    "TransportType",
    "LOOKUP_MODELS",
    # Students
    "Student",
    "StudentStatus",
    # Boarding
    "BoardingHouse",
    "Room",
    "AccommodationType",
    # Transport
    "TransportZone",
    "TransportZoneArea",
    # Inventory
    "InventoryCategory",
    "InventoryStorageLocation",
    "InventoryItem",
    "InventoryStockHistory",
]
