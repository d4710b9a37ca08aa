# API endpoints
from . import auth, lookups, students, boarding, transport, inventory, health

__all__ = ["auth", "lookups", "students", "boarding", "transport", "inventory", "health"]
