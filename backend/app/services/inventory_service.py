"""
Inventory Service

Handles:
- Categories and storage locations (soft delete)
- Item CRUD
- Stock adjustments, single and batch, each recorded in stock history
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_, and_
from datetime import datetime
from typing import Optional, List, Type
import logging

from app.core.exceptions import (
    ResourceNotFoundError,
    InventoryItemNotFoundError,
    ValidationError,
)
from app.models.inventory import (
    InventoryCategory,
    InventoryStorageLocation,
    InventoryItem,
    InventoryStockHistory,
)
from app.schemas.inventory import (
    NamedEntryCreate,
    NamedEntryUpdate,
    ItemCreate,
    ItemUpdate,
    StockAdjustment,
    BatchStockUpdate,
    StockStatus,
    stock_status,
)

logger = logging.getLogger(__name__)


ENTRY_LABELS = {
    InventoryCategory: "Inventory Category",
    InventoryStorageLocation: "Storage Location",
}


class InventoryService:
    """Service for inventory categories, locations, items and stock"""

    # ==================== CATEGORIES / LOCATIONS ====================

    async def _get_entry(self, db: AsyncSession, model: Type, entry_id: str, active_only: bool = True):
        entry = await db.get(model, entry_id)
        if not entry or (active_only and not entry.is_active):
            raise ResourceNotFoundError(ENTRY_LABELS[model], entry_id)
        return entry

    async def list_entries(self, db: AsyncSession, model: Type) -> list:
        """Active categories or locations, ordered by name"""
        result = await db.execute(
            select(model).where(model.is_active.is_(True)).order_by(model.name)
        )
        return list(result.scalars().all())

    async def create_entry(self, db: AsyncSession, model: Type, data: NamedEntryCreate):
        entry = model(name=data.name, description=data.description, is_active=True)
        db.add(entry)
        await db.commit()
        await db.refresh(entry)

        logger.info(f"Created {ENTRY_LABELS[model]} {entry.name}")
        return entry

    async def update_entry(self, db: AsyncSession, model: Type, entry_id: str, data: NamedEntryUpdate):
        entry = await self._get_entry(db, model, entry_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(entry, field, value)

        await db.commit()
        await db.refresh(entry)
        return entry

    async def deactivate_entry(self, db: AsyncSession, model: Type, entry_id: str):
        """Soft delete: items keep their reference, the entry leaves listings"""
        entry = await self._get_entry(db, model, entry_id)
        entry.is_active = False
        await db.commit()

        logger.info(f"Deactivated {ENTRY_LABELS[model]} {entry_id}")
        return entry

    # ==================== ITEMS ====================

    async def get_item(self, db: AsyncSession, item_id: str) -> InventoryItem:
        item = await db.get(InventoryItem, item_id)
        if not item:
            raise InventoryItemNotFoundError(item_id)
        return item

    async def list_items(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        storage_location_id: Optional[str] = None,
        status: Optional[StockStatus] = None,
    ) -> List[InventoryItem]:
        query = select(InventoryItem)

        conditions = []
        if search:
            term = f"%{search.strip()}%"
            conditions.append(
                or_(
                    InventoryItem.item_name.ilike(term),
                    InventoryItem.description.ilike(term)
                )
            )
        if category_id:
            conditions.append(InventoryItem.category_id == category_id)
        if storage_location_id:
            conditions.append(InventoryItem.storage_location_id == storage_location_id)
        if conditions:
            query = query.where(and_(*conditions))

        items = list((await db.execute(query.order_by(InventoryItem.item_name))).scalars().all())
        if status:
            items = [i for i in items if stock_status(i.in_stock, i.minimum_stock_level) == status]
        return items

    async def _validate_placement(self, db: AsyncSession, values: dict) -> None:
        if values.get("category_id"):
            await self._get_entry(db, InventoryCategory, values["category_id"])
        if values.get("storage_location_id"):
            await self._get_entry(db, InventoryStorageLocation, values["storage_location_id"])

    async def create_item(self, db: AsyncSession, data: ItemCreate, user_id: Optional[str] = None) -> InventoryItem:
        """Create an item; opening stock is recorded as an initial history row"""
        values = data.model_dump()
        await self._validate_placement(db, values)

        item = InventoryItem(**values)
        db.add(item)
        await db.flush()

        if item.in_stock:
            db.add(InventoryStockHistory(
                item_id=item.id,
                transaction_type="initial",
                quantity_change=item.in_stock,
                quantity_before=0,
                quantity_after=item.in_stock,
                unit_price_at_time=item.unit_price,
                created_by=user_id,
            ))

        await db.commit()
        await db.refresh(item)

        logger.info(f"Created inventory item {item.item_name} ({item.in_stock} in stock)")
        return item

    async def update_item(self, db: AsyncSession, item_id: str, data: ItemUpdate) -> InventoryItem:
        item = await self.get_item(db, item_id)
        values = data.model_dump(exclude_unset=True)
        await self._validate_placement(db, values)

        for field, value in values.items():
            if field in ("item_name", "unit_price", "minimum_stock_level", "pending_requisitions") and value is None:
                continue
            setattr(item, field, value)

        await db.commit()
        await db.refresh(item)
        return item

    async def delete_item(self, db: AsyncSession, item_id: str) -> None:
        item = await self.get_item(db, item_id)
        await db.execute(delete(InventoryStockHistory).where(InventoryStockHistory.item_id == item.id))
        await db.delete(item)
        await db.commit()

        logger.info(f"Deleted inventory item {item_id}")

    # ==================== STOCK ====================

    def _apply(self, item: InventoryItem, change: StockAdjustment, user_id: Optional[str]) -> InventoryStockHistory:
        before = item.in_stock or 0
        after = before + change.quantity_change
        if after < 0:
            raise ValidationError(
                f"Insufficient stock for '{item.item_name}': have {before}, change {change.quantity_change}",
                field="quantity_change",
            )

        item.in_stock = after
        return InventoryStockHistory(
            item_id=item.id,
            transaction_date=datetime.utcnow(),
            transaction_type=change.transaction_type,
            quantity_change=change.quantity_change,
            quantity_before=before,
            quantity_after=after,
            unit_price_at_time=item.unit_price,
            reference_type=change.reference_type,
            reference_id=change.reference_id,
            notes=change.notes,
            created_by=user_id,
        )

    async def adjust_stock(
        self,
        db: AsyncSession,
        item_id: str,
        change: StockAdjustment,
        user_id: Optional[str] = None
    ) -> InventoryItem:
        """Change an item's stock and record the history row. Stock cannot go negative."""
        if change.quantity_change == 0:
            raise ValidationError("quantity_change must not be zero", field="quantity_change")

        item = await self.get_item(db, item_id)
        db.add(self._apply(item, change, user_id))
        await db.commit()
        await db.refresh(item)

        logger.info(f"Stock {item.item_name}: {change.quantity_change:+d} -> {item.in_stock}")
        return item

    async def batch_update_stock(
        self,
        db: AsyncSession,
        updates: List[BatchStockUpdate],
        user_id: Optional[str] = None
    ) -> List[InventoryItem]:
        """
        Apply several adjustments in one commit.

        Either every adjustment is applied or none is: the first invalid
        one raises before anything is committed.
        """
        touched = {}
        try:
            for change in updates:
                if change.quantity_change == 0:
                    raise ValidationError("quantity_change must not be zero", field="quantity_change")
                item = touched.get(change.item_id) or await self.get_item(db, change.item_id)
                touched[change.item_id] = item
                db.add(self._apply(item, change, user_id))
        except Exception:
            await db.rollback()
            raise

        await db.commit()
        for item in touched.values():
            await db.refresh(item)

        logger.info(f"Batch stock update: {len(updates)} changes on {len(touched)} items")
        return list(touched.values())

    async def stock_history(
        self,
        db: AsyncSession,
        item_id: Optional[str] = None,
        limit: int = 100
    ) -> List[InventoryStockHistory]:
        query = select(InventoryStockHistory)
        if item_id:
            await self.get_item(db, item_id)
            query = query.where(InventoryStockHistory.item_id == item_id)
        query = query.order_by(InventoryStockHistory.transaction_date.desc()).limit(limit)
        return list((await db.execute(query)).scalars().all())


# Singleton instance
inventory_service = InventoryService()
