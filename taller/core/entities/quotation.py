"""Quotation domain entities."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, model_validator

from taller.core.entities.pipeline import (
    QUOTATION_TRANSITIONS,
    STAGE_TRANSITIONS,
    PipelineStage,
    QuotationStatus,
    ensure_transition,
)


class QuotationItem(BaseModel):
    """One priced line of a quotation."""

    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    total: float = 0.0  # always quantity * unit_price
    inventory_item_id: int | None = None

    @model_validator(mode="after")
    def compute_total(self) -> "QuotationItem":
        """Derive the line total; a supplied total never overrides the price."""
        self.total = self.quantity * self.unit_price
        return self


class Quotation(BaseModel):
    """
    A price quotation for a client's vehicle.

    Converting an approved quotation links it to exactly one work order.
    After that only ``pipeline_stage`` and ``invoice_id`` change.
    """

    id: int | None = None
    tenant_id: str
    quote_number: str
    client_id: int | None = None
    vehicle_id: int | None = None
    items: list[QuotationItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    notes: str | None = None

    status: QuotationStatus = QuotationStatus.DRAFT
    pipeline_stage: PipelineStage = PipelineStage.QUOTATION
    work_order_id: int | None = None
    invoice_id: int | None = None
    converted_at: datetime | None = None
    converted_by: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def compute_totals(self) -> "Quotation":
        """Fill subtotal and total from the items when not supplied."""
        if self.items and not self.subtotal:
            self.subtotal = self.items_total
        if not self.total:
            self.total = self.subtotal + self.tax
        return self

    @property
    def items_total(self) -> float:
        return sum(item.total for item in self.items)

    def change_status(self, target: QuotationStatus) -> None:
        ensure_transition("quotation", QUOTATION_TRANSITIONS, self.status, target)
        self.status = target
        self.updated_at = datetime.now(UTC)

    def advance_stage(self, target: PipelineStage) -> None:
        ensure_transition("quotation_stage", STAGE_TRANSITIONS, self.pipeline_stage, target)
        self.pipeline_stage = target
        self.updated_at = datetime.now(UTC)

    def mark_converted(self, work_order_id: int, actor: str) -> None:
        self.change_status(QuotationStatus.CONVERTED)
        self.advance_stage(PipelineStage.WORK_ORDER)
        self.work_order_id = work_order_id
        self.converted_at = datetime.now(UTC)
        self.converted_by = actor
