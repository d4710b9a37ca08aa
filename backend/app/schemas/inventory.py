"""
Inventory Schemas
"""

from pydantic import BaseModel, Field, ConfigDict, computed_field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class StockStatus(str, Enum):
    OUT_OF_STOCK = "Out of Stock"
    LOW_STOCK = "Low Stock"
    IN_STOCK = "In Stock"


def stock_status(in_stock: int, minimum_stock_level: int) -> StockStatus:
    if in_stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if in_stock <= minimum_stock_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


# ============== Categories / locations ==============

class NamedEntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class NamedEntryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class NamedEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    is_active: bool


# ============== Items ==============

class ItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    storage_location_id: Optional[str] = None
    in_stock: int = Field(default=0, ge=0)
    unit_price: float = Field(default=0, ge=0)
    minimum_stock_level: int = Field(default=0, ge=0)
    pending_requisitions: int = Field(default=0, ge=0)


class ItemUpdate(BaseModel):
    """in_stock is changed through adjustments so that history is kept"""
    item_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    storage_location_id: Optional[str] = None
    unit_price: Optional[float] = Field(None, ge=0)
    minimum_stock_level: Optional[int] = Field(None, ge=0)
    pending_requisitions: Optional[int] = Field(None, ge=0)


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    item_name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    storage_location_id: Optional[str] = None
    in_stock: int
    unit_price: float
    minimum_stock_level: int
    pending_requisitions: int
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def status(self) -> StockStatus:
        return stock_status(self.in_stock, self.minimum_stock_level)

    @computed_field
    @property
    def total_value(self) -> float:
        return round(self.in_stock * self.unit_price, 2)


# ============== Stock changes ==============

class StockAdjustment(BaseModel):
    quantity_change: int = Field(..., description="Positive to add stock, negative to remove")
    transaction_type: str = Field(default="adjustment", max_length=50)
    reference_type: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class BatchStockUpdate(StockAdjustment):
    item_id: str


class BatchStockUpdateRequest(BaseModel):
    updates: List[BatchStockUpdate] = Field(..., min_length=1)


class StockHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    item_id: str
    transaction_date: datetime
    transaction_type: str
    quantity_change: int
    quantity_before: int
    quantity_after: int
    unit_price_at_time: Optional[float] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None
