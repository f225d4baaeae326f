"""Core domain entities."""

from taller.core.entities.client import Client
from taller.core.entities.folio import INVOICEABLE_DTE_TYPES, CafFolio, DteType
from taller.core.entities.inventory import (
    InventoryItem,
    MovementType,
    ReferenceType,
    StockMovement,
    WarehouseLocation,
)
from taller.core.entities.invoice import (
    BuiltDocument,
    Invoice,
    InvoiceDraft,
    InvoiceLine,
    InvoiceStatus,
    PaymentCondition,
)
from taller.core.entities.pipeline import (
    DISPATCHABLE_STATUSES,
    QUOTATION_TRANSITIONS,
    STAGE_TRANSITIONS,
    WORK_ORDER_TRANSITIONS,
    PipelineStage,
    QuotationStatus,
    WorkOrderStatus,
    can_transition,
    ensure_transition,
)
from taller.core.entities.quotation import Quotation, QuotationItem
from taller.core.entities.work_order import WorkOrder, WorkOrderPart

__all__ = [
    # Pipeline state
    "QuotationStatus",
    "WorkOrderStatus",
    "PipelineStage",
    "QUOTATION_TRANSITIONS",
    "WORK_ORDER_TRANSITIONS",
    "STAGE_TRANSITIONS",
    "DISPATCHABLE_STATUSES",
    "can_transition",
    "ensure_transition",
    # Sales
    "Client",
    "Quotation",
    "QuotationItem",
    "WorkOrder",
    "WorkOrderPart",
    # Inventory
    "InventoryItem",
    "WarehouseLocation",
    "StockMovement",
    "MovementType",
    "ReferenceType",
    # Fiscal
    "DteType",
    "INVOICEABLE_DTE_TYPES",
    "CafFolio",
    "Invoice",
    "InvoiceDraft",
    "InvoiceLine",
    "InvoiceStatus",
    "PaymentCondition",
    "BuiltDocument",
]
