"""
Inventory Models
- Categories and storage locations (soft deleted via is_active)
- Items with stock level and unit price
- Stock history, one row per quantity change
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, Float
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class InventoryCategory(Base):
    __tablename__ = "inventory_categories"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InventoryStorageLocation(Base):
    __tablename__ = "inventory_storage_locations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InventoryItem(Base):
    """Stocked item"""
    __tablename__ = "inventory_items"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    item_name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category_id = Column(GUID, ForeignKey("inventory_categories.id", ondelete="SET NULL"), nullable=True)
    storage_location_id = Column(
        GUID, ForeignKey("inventory_storage_locations.id", ondelete="SET NULL"), nullable=True
    )
    in_stock = Column(Integer, default=0, nullable=False)
    unit_price = Column(Float, default=0, nullable=False)
    minimum_stock_level = Column(Integer, default=0, nullable=False)
    pending_requisitions = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("InventoryCategory", lazy="selectin")
    storage_location = relationship("InventoryStorageLocation", lazy="selectin")
    history = relationship(
        "InventoryStockHistory",
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InventoryStockHistory.transaction_date.desc()",
    )

    def __repr__(self):
        return f"<InventoryItem {self.item_name} ({self.in_stock})>"


class InventoryStockHistory(Base):
    """Audit row for a stock quantity change"""
    __tablename__ = "inventory_stock_history"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    item_id = Column(GUID, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    transaction_type = Column(String(50), nullable=False)  # e.g. adjustment, receipt, issue
    quantity_change = Column(Integer, nullable=False)
    quantity_before = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)
    unit_price_at_time = Column(Float, nullable=True)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    item = relationship("InventoryItem", back_populates="history")
