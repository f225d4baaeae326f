"""
Status enums and transition tables for the pipeline entities.

Each status field is a closed enum. Moving between values goes through
``ensure_transition`` so a transition missing from the table is rejected.
"""

from enum import Enum

from taller.core.exceptions import InvalidStateError


class QuotationStatus(str, Enum):
    """Quotation lifecycle."""

    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    CONVERTED = "converted"
    REJECTED = "rejected"


class WorkOrderStatus(str, Enum):
    """Work order lifecycle."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INVOICED = "invoiced"


class PipelineStage(str, Enum):
    """Coarse progress tag shared by a quotation and its work order."""

    QUOTATION = "quotation"
    WORK_ORDER = "work_order"
    DISPATCHED = "dispatched"
    INVOICED = "invoiced"


QUOTATION_TRANSITIONS: dict[QuotationStatus, frozenset[QuotationStatus]] = {
    QuotationStatus.DRAFT: frozenset(
        {QuotationStatus.SENT, QuotationStatus.APPROVED, QuotationStatus.REJECTED}
    ),
    QuotationStatus.SENT: frozenset({QuotationStatus.APPROVED, QuotationStatus.REJECTED}),
    QuotationStatus.APPROVED: frozenset(
        {QuotationStatus.CONVERTED, QuotationStatus.REJECTED}
    ),
    QuotationStatus.CONVERTED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
}

WORK_ORDER_TRANSITIONS: dict[WorkOrderStatus, frozenset[WorkOrderStatus]] = {
    WorkOrderStatus.PENDING: frozenset({WorkOrderStatus.IN_PROGRESS}),
    WorkOrderStatus.IN_PROGRESS: frozenset({WorkOrderStatus.COMPLETED}),
    WorkOrderStatus.COMPLETED: frozenset({WorkOrderStatus.INVOICED}),
    WorkOrderStatus.INVOICED: frozenset(),
}

# A second dispatch against an already dispatched order keeps the stage.
STAGE_TRANSITIONS: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.QUOTATION: frozenset({PipelineStage.WORK_ORDER}),
    PipelineStage.WORK_ORDER: frozenset({PipelineStage.DISPATCHED}),
    PipelineStage.DISPATCHED: frozenset(
        {PipelineStage.DISPATCHED, PipelineStage.INVOICED}
    ),
    PipelineStage.INVOICED: frozenset(),
}

# Statuses from which parts may still be dispatched
DISPATCHABLE_STATUSES = frozenset({WorkOrderStatus.PENDING, WorkOrderStatus.IN_PROGRESS})


def can_transition(table: dict, current: Enum, target: Enum) -> bool:
    return target in table.get(current, frozenset())


def ensure_transition(entity: str, table: dict, current: Enum, target: Enum) -> None:
    """Raise InvalidStateError unless ``current -> target`` is in ``table``."""
    if not can_transition(table, current, target):
        raise InvalidStateError(entity, current.value, target=target.value)
