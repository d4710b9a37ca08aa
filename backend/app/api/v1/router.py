from fastapi import APIRouter
from app.api.v1.endpoints import auth, lookups, students, boarding, transport, inventory, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(lookups.router)
api_router.include_router(students.router)
api_router.include_router(boarding.router)
api_router.include_router(transport.router)
api_router.include_router(inventory.router)
