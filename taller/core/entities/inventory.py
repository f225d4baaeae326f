"""Inventory ledger entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Kinds of stock movement written by the pipeline."""

    DISPATCH = "dispatch"


class ReferenceType(str, Enum):
    WORK_ORDER = "work_order"


class InventoryItem(BaseModel):
    """Stock record for a part. ``stock_quantity`` never goes below zero."""

    id: int | None = None
    tenant_id: str
    sku: str
    name: str
    part_number: str | None = None
    cost_price: float = 0.0
    sell_price: float = 0.0
    stock_quantity: float = Field(default=0.0, ge=0)
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class WarehouseLocation(BaseModel):
    """A bin or shelf inside a warehouse."""

    id: int | None = None
    tenant_id: str
    warehouse_id: int | None = None
    code: str
    name: str | None = None
    is_active: bool = True


class StockMovement(BaseModel):
    """Append-only record of a stock deduction. Never updated or deleted."""

    id: int | None = None
    tenant_id: str
    inventory_item_id: int
    from_warehouse_id: int | None = None
    from_location_id: int | None = None
    movement_type: MovementType = MovementType.DISPATCH
    quantity: float  # always positive
    reference_type: ReferenceType = ReferenceType.WORK_ORDER
    reference_id: int | None = None
    reason: str | None = None
    performed_by: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
