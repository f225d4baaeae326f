"""
Precondition rules for the quotation and invoicing gates.

Pure functions over already-loaded entities. They never touch storage, so
running them has no side effects. Each returns every problem found as
``"field: message"`` strings, empty when the record may proceed.
"""

from dataclasses import dataclass, field

from taller.core.entities.client import Client
from taller.core.entities.pipeline import DISPATCHABLE_STATUSES, WorkOrderStatus
from taller.core.entities.quotation import Quotation
from taller.core.entities.work_order import WorkOrder


def check_quotation_convertible(quotation: Quotation, client: Client | None) -> list[str]:
    """Field problems that keep an approved quotation from becoming a work order."""
    missing: list[str] = []

    if quotation.client_id is None:
        missing.append("client_id: quotation has no client assigned")
    elif client is None:
        missing.append("client_id: client does not exist")
    elif not client.has_tax_id:
        missing.append("client.tax_id: client has no tax id")

    if quotation.vehicle_id is None:
        missing.append("vehicle_id: quotation has no vehicle assigned")

    if not quotation.items:
        missing.append("items: quotation has no line items")

    for i, item in enumerate(quotation.items):
        if not item.description or not item.description.strip():
            missing.append(f"items[{i}].description: description is required")
        if item.quantity <= 0:
            missing.append(f"items[{i}].quantity: must be greater than 0")
        if item.unit_price < 0:
            missing.append(f"items[{i}].unit_price: must not be negative")

    if quotation.items_total <= 0:
        missing.append("total: quotation total must be greater than 0")

    return missing


def check_invoice_readiness(work_order: WorkOrder, client: Client | None) -> list[str]:
    """Field problems that keep a work order from being invoiced."""
    missing: list[str] = []

    if work_order.status != WorkOrderStatus.COMPLETED:
        missing.append(
            f"status: work order must be completed before invoicing "
            f"(current: '{work_order.status.value}')"
        )

    if work_order.client_id is None:
        missing.append("client_id: work order has no client assigned")
    elif client is None:
        missing.append("client_id: client does not exist")
    elif not client.has_tax_id:
        missing.append("client.tax_id: client needs a tax id to be invoiced")

    if work_order.vehicle_id is None:
        missing.append("vehicle_id: work order has no vehicle assigned")

    if not work_order.parts_dispatched:
        missing.append("parts_dispatched: parts have not been dispatched from stock")

    if not work_order.parts and work_order.labor_cost <= 0:
        missing.append("parts: work order has neither parts nor labor")

    if not work_order.labor_recorded:
        missing.append("labor_cost: no labor cost or hours recorded")

    if work_order.invoice_id is not None or work_order.status == WorkOrderStatus.INVOICED:
        missing.append("invoice_id: work order is already invoiced")

    return missing


@dataclass
class WorkOrderReadiness:
    """Checklist view of how far a work order is from dispatch and invoicing."""

    work_order_id: int | None
    status: str
    can_dispatch: bool
    can_invoice: bool
    parts_added: bool
    parts_dispatched: bool
    labor_recorded: bool
    is_completed: bool
    has_client: bool
    has_vehicle: bool
    missing_fields: list[str] = field(default_factory=list)


def assess_readiness(work_order: WorkOrder, client: Client | None) -> WorkOrderReadiness:
    """Flags and missing fields describing how far a work order has come."""
    missing = check_invoice_readiness(work_order, client)
    return WorkOrderReadiness(
        work_order_id=work_order.id,
        status=work_order.status.value,
        can_dispatch=work_order.status in DISPATCHABLE_STATUSES,
        can_invoice=not missing,
        parts_added=bool(work_order.parts),
        parts_dispatched=work_order.parts_dispatched,
        labor_recorded=work_order.labor_recorded,
        is_completed=work_order.status == WorkOrderStatus.COMPLETED,
        has_client=client is not None,
        has_vehicle=work_order.vehicle_id is not None,
        missing_fields=missing,
    )
