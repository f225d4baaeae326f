"""
Core business rules.

Layer-pure: depends only on taller.core entities, interfaces and exceptions.
"""

from taller.core.services.dispatch_planner import (
    DispatchLine,
    DispatchPlan,
    PlannedLine,
    StockShortfall,
    aggregate_quantities,
    plan_dispatch,
)
from taller.core.services.folio_allocator import FolioAllocator
from taller.core.services.invoice_lines import (
    LineTotals,
    compose_invoice_lines,
    summarize_invoice_lines,
)
from taller.core.services.pipeline_rules import (
    WorkOrderReadiness,
    assess_readiness,
    check_invoice_readiness,
    check_quotation_convertible,
)

__all__ = [
    # Quotation and invoicing gates
    "check_quotation_convertible",
    "check_invoice_readiness",
    "assess_readiness",
    "WorkOrderReadiness",
    # Dispatch
    "DispatchLine",
    "DispatchPlan",
    "PlannedLine",
    "StockShortfall",
    "aggregate_quantities",
    "plan_dispatch",
    # Folios
    "FolioAllocator",
    "compose_invoice_lines",
    "summarize_invoice_lines",
    "LineTotals",
]
