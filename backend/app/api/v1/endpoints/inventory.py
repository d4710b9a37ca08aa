"""
Inventory API Endpoints

Endpoints:
- GET/POST /inventory/categories, PATCH/DELETE /inventory/categories/{id}
- GET/POST /inventory/locations, PATCH/DELETE /inventory/locations/{id}
- GET/POST /inventory/items, GET/PATCH/DELETE /inventory/items/{id}
- POST /inventory/items/{id}/adjust - Single stock adjustment
- POST /inventory/stock-updates - Batch stock adjustment (all or nothing)
- GET /inventory/stock-history - History, optionally for one item
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_user, get_current_admin
from app.models.inventory import InventoryCategory, InventoryStorageLocation
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.inventory import (
    NamedEntryCreate,
    NamedEntryUpdate,
    NamedEntryResponse,
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    StockAdjustment,
    BatchStockUpdateRequest,
    StockHistoryResponse,
    StockStatus,
)
from app.services.inventory_service import inventory_service

router = APIRouter(prefix="/inventory", tags=["Inventory"])


# ==================== CATEGORIES ====================

@router.get("/categories", response_model=List[NamedEntryResponse])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.list_entries(db, InventoryCategory)


@router.post("/categories", response_model=NamedEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: NamedEntryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.create_entry(db, InventoryCategory, data)


@router.patch("/categories/{category_id}", response_model=NamedEntryResponse)
async def update_category(
    category_id: str,
    data: NamedEntryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.update_entry(db, InventoryCategory, category_id, data)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await inventory_service.deactivate_entry(db, InventoryCategory, category_id)
    return MessageResponse(message="Category deactivated")


# ==================== LOCATIONS ====================

@router.get("/locations", response_model=List[NamedEntryResponse])
async def list_locations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.list_entries(db, InventoryStorageLocation)


@router.post("/locations", response_model=NamedEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    data: NamedEntryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.create_entry(db, InventoryStorageLocation, data)


@router.patch("/locations/{location_id}", response_model=NamedEntryResponse)
async def update_location(
    location_id: str,
    data: NamedEntryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.update_entry(db, InventoryStorageLocation, location_id, data)


@router.delete("/locations/{location_id}", response_model=MessageResponse)
async def delete_location(
    location_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await inventory_service.deactivate_entry(db, InventoryStorageLocation, location_id)
    return MessageResponse(message="Storage location deactivated")


# ==================== ITEMS ====================

@router.get("/items", response_model=List[ItemResponse])
async def list_items(
    search: Optional[str] = None,
    category_id: Optional[str] = None,
    storage_location_id: Optional[str] = None,
    stock_status: Optional[StockStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Items with derived status and total_value"""
    return await inventory_service.list_items(
        db,
        search=search,
        category_id=category_id,
        storage_location_id=storage_location_id,
        status=stock_status,
    )


@router.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.create_item(db, data, user_id=current_user.id)


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.get_item(db, item_id)


@router.patch("/items/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: str,
    data: ItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.update_item(db, item_id, data)


@router.delete("/items/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await inventory_service.delete_item(db, item_id)
    return MessageResponse(message="Item deleted")


@router.post("/items/{item_id}/adjust", response_model=ItemResponse)
async def adjust_stock(
    item_id: str,
    data: StockAdjustment,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add (positive) or remove (negative) stock; recorded in stock history"""
    return await inventory_service.adjust_stock(db, item_id, data, user_id=current_user.id)


@router.post("/stock-updates", response_model=List[ItemResponse])
async def batch_stock_updates(
    data: BatchStockUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Apply several stock adjustments in one transaction"""
    return await inventory_service.batch_update_stock(db, data.updates, user_id=current_user.id)


@router.get("/stock-history", response_model=List[StockHistoryResponse])
async def stock_history(
    item_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await inventory_service.stock_history(db, item_id=item_id, limit=limit)
