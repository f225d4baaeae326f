"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the only contracts between use cases and the API layer.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from taller.core.entities.folio import CafFolio, DteType
from taller.core.entities.inventory import StockMovement
from taller.core.entities.invoice import Invoice
from taller.core.entities.quotation import Quotation
from taller.core.entities.work_order import WorkOrder, WorkOrderPart


class QuotationResponse(BaseModel):
    """Quotation header."""

    id: int
    quote_number: str
    client_id: int | None = None
    vehicle_id: int | None = None
    status: str
    pipeline_stage: str
    total: float
    items_count: int
    work_order_id: int | None = None
    invoice_id: int | None = None
    converted_at: datetime | None = None
    converted_by: str | None = None

    @classmethod
    def from_entity(cls, q: Quotation) -> "QuotationResponse":
        return cls(
            id=q.id,
            quote_number=q.quote_number,
            client_id=q.client_id,
            vehicle_id=q.vehicle_id,
            status=q.status.value,
            pipeline_stage=q.pipeline_stage.value,
            total=q.total,
            items_count=len(q.items),
            work_order_id=q.work_order_id,
            invoice_id=q.invoice_id,
            converted_at=q.converted_at,
            converted_by=q.converted_by,
        )


class WorkOrderPartResponse(BaseModel):
    """A work order part line."""

    id: int
    name: str
    quantity: float
    unit_price: float
    total_price: float
    inventory_item_id: int | None = None
    warehouse_location_id: int | None = None
    is_dispatched: bool
    dispatched_at: datetime | None = None
    stock_movement_id: int | None = None

    @classmethod
    def from_entity(cls, p: WorkOrderPart) -> "WorkOrderPartResponse":
        return cls(
            id=p.id,
            name=p.name,
            quantity=p.quantity,
            unit_price=p.unit_price,
            total_price=p.total_price,
            inventory_item_id=p.inventory_item_id,
            warehouse_location_id=p.warehouse_location_id,
            is_dispatched=p.is_dispatched,
            dispatched_at=p.dispatched_at,
            stock_movement_id=p.stock_movement_id,
        )


class WorkOrderResponse(BaseModel):
    """Work order with its parts."""

    id: int
    order_number: str
    status: str
    pipeline_stage: str
    client_id: int | None = None
    vehicle_id: int | None = None
    quotation_id: int | None = None
    labor_cost: float
    parts_cost: float
    total_cost: float
    actual_hours: float
    parts_dispatched: bool
    dispatched_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    invoice_id: int | None = None
    invoiced_at: datetime | None = None
    parts: list[WorkOrderPartResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, wo: WorkOrder) -> "WorkOrderResponse":
        return cls(
            id=wo.id,
            order_number=wo.order_number,
            status=wo.status.value,
            pipeline_stage=wo.pipeline_stage.value,
            client_id=wo.client_id,
            vehicle_id=wo.vehicle_id,
            quotation_id=wo.quotation_id,
            labor_cost=wo.labor_cost,
            parts_cost=wo.parts_cost,
            total_cost=wo.total_cost,
            actual_hours=wo.actual_hours,
            parts_dispatched=wo.parts_dispatched,
            dispatched_at=wo.dispatched_at,
            started_at=wo.started_at,
            completed_at=wo.completed_at,
            invoice_id=wo.invoice_id,
            invoiced_at=wo.invoiced_at,
            parts=[WorkOrderPartResponse.from_entity(p) for p in wo.parts],
        )


class StockMovementResponse(BaseModel):
    """A ledger entry."""

    id: int
    inventory_item_id: int
    from_location_id: int | None = None
    movement_type: str
    quantity: float
    reference_type: str
    reference_id: int | None = None
    reason: str | None = None
    performed_by: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, m: StockMovement) -> "StockMovementResponse":
        return cls(
            id=m.id,
            inventory_item_id=m.inventory_item_id,
            from_location_id=m.from_location_id,
            movement_type=m.movement_type.value,
            quantity=m.quantity,
            reference_type=m.reference_type.value,
            reference_id=m.reference_id,
            reason=m.reason,
            performed_by=m.performed_by,
            created_at=m.created_at,
        )


class InvoiceResponse(BaseModel):
    """Issued invoice identity and totals."""

    id: int
    dte_type: int
    dte_name: str
    folio: int
    status: str
    issue_date: date
    due_date: date | None = None
    net_amount: float
    exempt_amount: float
    tax_amount: float
    total_amount: float
    has_document: bool
    work_order_id: int | None = None
    quotation_id: int | None = None

    @classmethod
    def from_entity(cls, inv: Invoice) -> "InvoiceResponse":
        return cls(
            id=inv.id,
            dte_type=inv.dte_type,
            dte_name=DteType(inv.dte_type).display_name,
            folio=inv.folio,
            status=inv.status.value,
            issue_date=inv.issue_date,
            due_date=inv.due_date,
            net_amount=inv.net_amount,
            exempt_amount=inv.exempt_amount,
            tax_amount=inv.tax_amount,
            total_amount=inv.total_amount,
            has_document=inv.document is not None,
            work_order_id=inv.work_order_id,
            quotation_id=inv.quotation_id,
        )


class ValidationReportResponse(BaseModel):
    """Outcome of a precondition check."""

    valid: bool = Field(..., description="True when the operation may proceed")
    missing_fields: list[str] = Field(default_factory=list, description="Every problem found")


class ConvertQuotationResponse(BaseModel):
    work_order: WorkOrderResponse
    quotation: QuotationResponse


class DispatchPartsResponse(BaseModel):
    work_order: WorkOrderResponse
    movements: list[StockMovementResponse]
    dispatched_parts: list[WorkOrderPartResponse]


class WorkOrderReadinessResponse(BaseModel):
    """Checklist for dispatch and invoicing."""

    work_order_id: int
    status: str
    can_dispatch: bool
    can_invoice: bool
    parts_added: bool
    parts_dispatched: bool
    labor_recorded: bool
    is_completed: bool
    has_client: bool
    has_vehicle: bool
    missing_fields: list[str] = Field(default_factory=list)


class InvoiceWorkOrderResponse(BaseModel):
    invoice: InvoiceResponse
    work_order: WorkOrderResponse


class CafWindowResponse(BaseModel):
    """Usage of one CAF window."""

    id: int
    dte_type: int
    dte_name: str
    folio_from: int
    folio_to: int
    current_folio: int
    total: int
    used: int
    remaining: int
    percent_used: float
    is_active: bool
    is_exhausted: bool
    expiration_date: date | None = None

    @classmethod
    def from_entity(cls, w: CafFolio) -> "CafWindowResponse":
        try:
            name = DteType(w.dte_type).display_name
        except ValueError:
            name = f"DTE {w.dte_type}"
        return cls(
            id=w.id,
            dte_type=w.dte_type,
            dte_name=name,
            folio_from=w.folio_from,
            folio_to=w.folio_to,
            current_folio=w.current_folio,
            total=w.total,
            used=w.used,
            remaining=w.remaining,
            percent_used=w.percent_used,
            is_active=w.is_active,
            is_exhausted=w.is_exhausted,
            expiration_date=w.expiration_date,
        )


class CafStatusResponse(BaseModel):
    windows: list[CafWindowResponse]
    total_remaining: int


class DispatchSummaryResponse(BaseModel):
    dispatched: bool
    dispatched_at: datetime | None = None
    parts_count: int
    dispatched_count: int
    total_dispatched: float


class InvoiceSummaryResponse(BaseModel):
    id: int
    dte_type: int
    folio: int
    status: str
    total_amount: float
    created_at: datetime


class WorkOrderSummaryResponse(BaseModel):
    id: int
    order_number: str
    status: str
    total_cost: float


class PipelineStatusResponse(BaseModel):
    """Where a quotation's chain currently stands."""

    quotation_id: int
    stage: str
    quotation: QuotationResponse
    work_order: WorkOrderSummaryResponse | None = None
    dispatch: DispatchSummaryResponse | None = None
    invoice: InvoiceSummaryResponse | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(default_factory=datetime.now)
    components: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. OUT_OF_FOLIOS)
    - message: human-readable description
    - hint: suggested recovery action
    - details: structured context such as the full list of missing fields
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
