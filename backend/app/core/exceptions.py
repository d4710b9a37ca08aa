"""
Custom Exceptions for School Admin
==================================

Services raise these instead of HTTPException so the same code can be
called from endpoints, scripts and tests. The API layer converts them to
JSON responses in app.main.

Usage:
    from app.core.exceptions import StudentNotFoundError

    if not student:
        raise StudentNotFoundError(student_id)
"""

from typing import Optional, Any, Dict


class SchoolAdminError(Exception):
    """Base exception for all School Admin errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(SchoolAdminError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(SchoolAdminError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(SchoolAdminError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class StudentNotFoundError(ResourceNotFoundError):
    """Student not found"""

    def __init__(self, student_id: str):
        super().__init__("Student", student_id)


class HouseNotFoundError(ResourceNotFoundError):
    """Boarding house not found"""

    def __init__(self, house_id: str):
        super().__init__("Boarding House", house_id)


class RoomNotFoundError(ResourceNotFoundError):
    """Boarding room not found"""

    def __init__(self, room_id: str):
        super().__init__("Room", room_id)


class AccommodationTypeNotFoundError(ResourceNotFoundError):
    """Accommodation type not found"""

    def __init__(self, type_id: str):
        super().__init__("Accommodation Type", type_id)


class ZoneNotFoundError(ResourceNotFoundError):
    """Transport zone not found"""

    def __init__(self, zone_id: str):
        super().__init__("Transport Zone", zone_id)


class InventoryItemNotFoundError(ResourceNotFoundError):
    """Inventory item not found"""

    def __init__(self, item_id: str):
        super().__init__("Inventory Item", item_id)


class LookupNotFoundError(ResourceNotFoundError):
    """Row in a lookup table not found"""

    def __init__(self, table: str, row_id: str):
        super().__init__("Lookup", row_id)
        self.details["table"] = table


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(SchoolAdminError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateRecordError(ValidationError):
    """A unique value is already taken"""

    status_code = 409

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(f"{resource_type} with {field} '{value}' already exists", field=field)
        self.code = "DUPLICATE_RECORD"
        self.details["value"] = value


class InvalidLookupTableError(ValidationError):
    """Unknown lookup table name"""

    def __init__(self, table: str, allowed_tables: list):
        super().__init__(
            f"Lookup table '{table}' not allowed. Allowed: {', '.join(allowed_tables)}"
        )
        self.code = "INVALID_LOOKUP_TABLE"
        self.details = {"table": table, "allowed_tables": allowed_tables}


# ============================================
# Occupancy bookkeeping
# ============================================

class OccupancyUpdateError(SchoolAdminError):
    """Recomputing or persisting a room's occupancy failed"""

    def __init__(self, room_id: str, message: str):
        super().__init__(message, code="OCCUPANCY_UPDATE_FAILED")
        self.details["room_id"] = room_id


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: SchoolAdminError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
