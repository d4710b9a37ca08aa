"""
Lookup API Endpoints

Endpoints:
- GET /lookups/{table} - Ordered entries (cached)
- POST /lookups/{table} - Append an entry
- DELETE /lookups/{table}/{id} - Delete an entry (admin)

table is one of: classes, streams, team_colours, transport_types
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_user, get_current_admin
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.lookup import LookupCreate, LookupResponse
from app.services.lookup_service import lookup_service

router = APIRouter(prefix="/lookups", tags=["Lookups"])


@router.get("/{table}", response_model=List[LookupResponse])
async def list_lookup_entries(
    table: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List a lookup table ordered by sort_order, then id"""
    return await lookup_service.list_entries(db, table)


@router.post("/{table}", response_model=LookupResponse, status_code=status.HTTP_201_CREATED)
async def add_lookup_entry(
    table: str,
    data: LookupCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add an entry at the end of the table's ordering"""
    return await lookup_service.add_entry(db, table, data)


@router.delete("/{table}/{row_id}", response_model=MessageResponse)
async def delete_lookup_entry(
    table: str,
    row_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete an entry; students referencing it are cleared"""
    cleared = await lookup_service.delete_entry(db, table, row_id)
    return MessageResponse(message=f"Deleted. {cleared} student reference(s) cleared.")
