"""Turn a work order into invoice lines and total them."""

from dataclasses import dataclass

from taller.core.entities.invoice import InvoiceLine
from taller.core.entities.work_order import WorkOrder


def compose_invoice_lines(
    work_order: WorkOrder,
    exempt: bool = False,
    labor_line_name: str = "Mano de obra",
) -> list[InvoiceLine]:
    """One line per part plus a labor line when labor was charged."""
    lines: list[InvoiceLine] = []

    for part in work_order.parts:
        lines.append(
            InvoiceLine(
                line_number=len(lines) + 1,
                item_code=part.part_number,
                name=part.name,
                quantity=part.quantity,
                unit_price=part.unit_price,
                amount=part.total_price,
                is_exempt=exempt,
                inventory_item_id=part.inventory_item_id,
                work_order_part_id=part.id,
            )
        )

    if work_order.labor_cost > 0:
        description = None
        if work_order.actual_hours > 0:
            description = f"{work_order.actual_hours:g} h"
        lines.append(
            InvoiceLine(
                line_number=len(lines) + 1,
                name=labor_line_name,
                description=description,
                quantity=1,
                unit_price=work_order.labor_cost,
                amount=work_order.labor_cost,
                is_exempt=exempt,
            )
        )

    return lines


@dataclass
class LineTotals:
    net_amount: float
    exempt_amount: float
    tax_rate: float
    tax_amount: float
    total_amount: float


def summarize_invoice_lines(
    lines: list[InvoiceLine], exempt_document: bool, tax_rate: float
) -> LineTotals:
    """Net, exempt, tax and total amounts of a set of lines, rounded to whole pesos."""
    net = round(sum(l.amount for l in lines if not (l.is_exempt or exempt_document)))
    exempt = round(sum(l.amount for l in lines if l.is_exempt or exempt_document))
    rate = 0.0 if exempt_document else tax_rate
    tax = round(net * rate)
    return LineTotals(
        net_amount=net,
        exempt_amount=exempt,
        tax_rate=rate,
        tax_amount=tax,
        total_amount=net + exempt + tax,
    )
