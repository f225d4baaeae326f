"""Read-only checks on a work order: readiness checklist and invoicing dry run."""

from taller.application.dto.responses import (
    ValidationReportResponse,
    WorkOrderReadinessResponse,
)
from taller.application.use_cases.base import PipelineUseCase
from taller.application.use_cases.validate_quotation import ValidationReport
from taller.config import get_logger
from taller.core.entities.client import Client
from taller.core.entities.work_order import WorkOrder
from taller.core.exceptions import NotFoundError
from taller.core.services.pipeline_rules import (
    WorkOrderReadiness,
    assess_readiness,
    check_invoice_readiness,
)

logger = get_logger(__name__)


class _WorkOrderReader(PipelineUseCase):
    async def _load(self, tenant_id: str, work_order_id: int) -> tuple[WorkOrder, Client | None]:
        """Load a work order and its client, or raise NotFoundError."""
        factory = await self._get_uow_factory()
        async with factory(lock=False) as uow:
            work_order = await uow.work_orders.get_work_order(tenant_id, work_order_id)
            if work_order is None:
                raise NotFoundError("work_order", work_order_id)
            client = None
            if work_order.client_id is not None:
                client = await uow.clients.get_client(tenant_id, work_order.client_id)
        return work_order, client


class GetWorkOrderReadinessUseCase(_WorkOrderReader):
    """How far a work order is from dispatch and invoicing."""

    async def execute(self, tenant_id: str, work_order_id: int) -> WorkOrderReadiness:
        work_order, client = await self._load(tenant_id, work_order_id)
        return assess_readiness(work_order, client)

    def to_response(self, result: WorkOrderReadiness) -> WorkOrderReadinessResponse:
        return WorkOrderReadinessResponse(
            work_order_id=result.work_order_id,
            status=result.status,
            can_dispatch=result.can_dispatch,
            can_invoice=result.can_invoice,
            parts_added=result.parts_added,
            parts_dispatched=result.parts_dispatched,
            labor_recorded=result.labor_recorded,
            is_completed=result.is_completed,
            has_client=result.has_client,
            has_vehicle=result.has_vehicle,
            missing_fields=result.missing_fields,
        )


class ValidateInvoicingUseCase(_WorkOrderReader):
    """Report every reason a work order cannot be invoiced yet. Writes nothing."""

    async def execute(self, tenant_id: str, work_order_id: int) -> ValidationReport:
        work_order, client = await self._load(tenant_id, work_order_id)
        missing = check_invoice_readiness(work_order, client)
        logger.info(
            "invoicing_validated",
            work_order_id=work_order_id,
            valid=not missing,
            problems=len(missing),
        )
        return ValidationReport(valid=not missing, missing_fields=missing)

    def to_response(self, result: ValidationReport) -> ValidationReportResponse:
        return ValidationReportResponse(valid=result.valid, missing_fields=result.missing_fields)
