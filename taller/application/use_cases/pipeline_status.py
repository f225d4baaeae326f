"""Pipeline Status Use Case: where a quotation's chain stands."""

from dataclasses import dataclass

from taller.application.dto.responses import (
    DispatchSummaryResponse,
    InvoiceSummaryResponse,
    PipelineStatusResponse,
    QuotationResponse,
    WorkOrderSummaryResponse,
)
from taller.application.use_cases.base import PipelineUseCase
from taller.core.entities.invoice import Invoice
from taller.core.entities.quotation import Quotation
from taller.core.entities.work_order import WorkOrder
from taller.core.exceptions import NotFoundError


@dataclass
class PipelineStatus:
    quotation: Quotation
    work_order: WorkOrder | None = None
    invoice: Invoice | None = None


class GetPipelineStatusUseCase(PipelineUseCase):
    """Read-only snapshot of a quotation, its work order and its invoice."""

    async def execute(self, tenant_id: str, quotation_id: int) -> PipelineStatus:
        factory = await self._get_uow_factory()
        async with factory(lock=False) as uow:
            quotation = await uow.quotations.get_quotation(tenant_id, quotation_id)
            if quotation is None:
                raise NotFoundError("quotation", quotation_id)

            work_order = None
            if quotation.work_order_id is not None:
                work_order = await uow.work_orders.get_work_order(
                    tenant_id, quotation.work_order_id
                )

            invoice_id = None
            if work_order is not None and work_order.invoice_id is not None:
                invoice_id = work_order.invoice_id
            elif quotation.invoice_id is not None:
                invoice_id = quotation.invoice_id

            invoice = None
            if invoice_id is not None:
                invoice = await uow.invoices.get_invoice(tenant_id, invoice_id)

        return PipelineStatus(quotation=quotation, work_order=work_order, invoice=invoice)

    def to_response(self, result: PipelineStatus) -> PipelineStatusResponse:
        quotation, work_order, invoice = result.quotation, result.work_order, result.invoice

        work_order_summary = dispatch = None
        if work_order is not None:
            work_order_summary = WorkOrderSummaryResponse(
                id=work_order.id,
                order_number=work_order.order_number,
                status=work_order.status.value,
                total_cost=work_order.total_cost,
            )
            dispatched = work_order.dispatched_parts
            dispatch = DispatchSummaryResponse(
                dispatched=work_order.parts_dispatched,
                dispatched_at=work_order.dispatched_at,
                parts_count=len(work_order.parts),
                dispatched_count=len(dispatched),
                total_dispatched=sum(p.total_price for p in dispatched),
            )

        invoice_summary = None
        if invoice is not None:
            invoice_summary = InvoiceSummaryResponse(
                id=invoice.id,
                dte_type=invoice.dte_type,
                folio=invoice.folio,
                status=invoice.status.value,
                total_amount=invoice.total_amount,
                created_at=invoice.created_at,
            )

        return PipelineStatusResponse(
            quotation_id=quotation.id,
            stage=quotation.pipeline_stage.value,
            quotation=QuotationResponse.from_entity(quotation),
            work_order=work_order_summary,
            dispatch=dispatch,
            invoice=invoice_summary,
        )
