"""Work order domain entities."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from taller.core.entities.pipeline import (
    STAGE_TRANSITIONS,
    WORK_ORDER_TRANSITIONS,
    PipelineStage,
    WorkOrderStatus,
    ensure_transition,
)


class WorkOrderPart(BaseModel):
    """A part line on a work order, dispatched from stock or still pending."""

    id: int | None = None
    work_order_id: int | None = None
    name: str
    part_number: str | None = None
    quantity: float
    unit_price: float = 0.0
    total_price: float = 0.0
    inventory_item_id: int | None = None
    warehouse_location_id: int | None = None
    is_dispatched: bool = False
    dispatched_at: datetime | None = None
    stock_movement_id: int | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class WorkOrder(BaseModel):
    """
    A repair job born from a converted quotation.

    Invariants kept by the gates that mutate it:
    - invoice_id set implies status == invoiced
    - every dispatched part carries the stock movement that paid for it
    """

    id: int | None = None
    tenant_id: str
    order_number: str
    client_id: int | None = None
    vehicle_id: int | None = None
    quotation_id: int | None = None
    assigned_to: str | None = None

    status: WorkOrderStatus = WorkOrderStatus.PENDING
    pipeline_stage: PipelineStage = PipelineStage.WORK_ORDER
    type: str = "repair"
    priority: str = "normal"
    description: str | None = None
    internal_notes: str | None = None

    actual_hours: float = 0.0
    labor_cost: float = 0.0
    parts_cost: float = 0.0
    total_cost: float = 0.0

    parts_dispatched: bool = False
    dispatched_at: datetime | None = None
    dispatched_by: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    invoice_id: int | None = None
    invoiced_at: datetime | None = None
    invoiced_by: str | None = None

    parts: list[WorkOrderPart] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def labor_recorded(self) -> bool:
        return self.labor_cost > 0 or self.actual_hours > 0

    @property
    def dispatched_parts(self) -> list[WorkOrderPart]:
        return [p for p in self.parts if p.is_dispatched]

    def recompute_costs(self) -> None:
        self.parts_cost = sum(p.total_price for p in self.parts)
        self.total_cost = self.parts_cost + self.labor_cost

    def change_status(self, target: WorkOrderStatus) -> None:
        ensure_transition("work_order", WORK_ORDER_TRANSITIONS, self.status, target)
        self.status = target
        self.updated_at = datetime.now(UTC)

    def advance_stage(self, target: PipelineStage) -> None:
        ensure_transition("work_order_stage", STAGE_TRANSITIONS, self.pipeline_stage, target)
        self.pipeline_stage = target
        self.updated_at = datetime.now(UTC)
