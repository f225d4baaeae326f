"""
Invoice Work Order Use Case.

Issues the tax document for a completed work order. Folio allocation, the
invoice row and the work order's move to invoiced share one immediate
transaction, so a folio is only ever consumed by an invoice that exists.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from taller.application.dto.requests import InvoiceWorkOrderRequest
from taller.application.dto.responses import (
    InvoiceResponse,
    InvoiceWorkOrderResponse,
    WorkOrderResponse,
)
from taller.application.services import get_document_builder, get_folio_allocator
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger, get_settings
from taller.core.entities.client import Client
from taller.core.entities.folio import DteType
from taller.core.entities.invoice import Invoice, InvoiceDraft, InvoiceStatus
from taller.core.entities.pipeline import PipelineStage, WorkOrderStatus
from taller.core.entities.work_order import WorkOrder
from taller.core.exceptions import (
    AlreadyInvoicedError,
    DocumentBuildError,
    NotFoundError,
    ValidationFailedError,
)
from taller.core.interfaces.documents import IDocumentBuilder
from taller.core.interfaces.notifier import INotifier
from taller.core.interfaces.unit_of_work import UnitOfWorkFactory
from taller.core.services.folio_allocator import FolioAllocator
from taller.core.services.invoice_lines import (
    compose_invoice_lines,
    summarize_invoice_lines,
)
from taller.core.services.pipeline_rules import check_invoice_readiness

logger = get_logger(__name__)


@dataclass
class InvoiceWorkOrderResult:
    invoice: Invoice
    work_order: WorkOrder


def build_draft(
    tenant_id: str,
    dte_type: int,
    folio: int,
    client: Client | None,
    request: InvoiceWorkOrderRequest,
    issue_date: date | None = None,
) -> InvoiceDraft:
    """Invoice header with receptor data taken from the client record."""
    issue_date = issue_date or date.today()
    due_date = None
    if request.payment_condition is not None:
        due_date = request.payment_condition.due_date(issue_date)
    return InvoiceDraft(
        tenant_id=tenant_id,
        dte_type=dte_type,
        folio=folio,
        issue_date=issue_date,
        due_date=due_date,
        payment_condition=request.payment_condition,
        payment_method=request.payment_method,
        receptor_rut=client.tax_id if client else None,
        receptor_name=client.name if client else None,
        receptor_business_line=client.business_line if client else None,
        receptor_address=client.address if client else None,
        receptor_commune=client.commune if client else None,
        receptor_city=client.city if client else None,
        notes=request.notes,
    )


class InvoiceWorkOrderUseCase(PipelineUseCase):
    """Allocate a folio, build the document and mark the work order invoiced."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        notifier: INotifier | None = None,
        document_builder: IDocumentBuilder | None = None,
        folio_allocator: FolioAllocator | None = None,
    ):
        super().__init__(uow_factory=uow_factory, notifier=notifier)
        self._document_builder = document_builder
        self._folio_allocator = folio_allocator or get_folio_allocator()

    def _get_document_builder(self) -> IDocumentBuilder:
        """Return the injected builder or the configured one."""
        if self._document_builder is None:
            self._document_builder = get_document_builder()
        return self._document_builder

    async def execute(
        self,
        tenant_id: str,
        work_order_id: int,
        actor: str,
        request: InvoiceWorkOrderRequest | None = None,
    ) -> InvoiceWorkOrderResult:
        request = request or InvoiceWorkOrderRequest()
        dte_type = DteType(request.dte_type)
        logger.info(
            "invoice_work_order_started",
            work_order_id=work_order_id,
            dte_type=dte_type.value,
            actor=actor,
        )

        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            work_order = await uow.work_orders.get_work_order(tenant_id, work_order_id)
            if work_order is None:
                raise NotFoundError("work_order", work_order_id)
            if work_order.invoice_id is not None or work_order.status == WorkOrderStatus.INVOICED:
                raise AlreadyInvoicedError(work_order_id, work_order.invoice_id)

            client = None
            if work_order.client_id is not None:
                client = await uow.clients.get_client(tenant_id, work_order.client_id)

            missing = check_invoice_readiness(work_order, client)
            if missing:
                logger.warning(
                    "invoice_work_order_rejected",
                    work_order_id=work_order_id,
                    problems=len(missing),
                )
                raise ValidationFailedError("invoice_work_order", missing)

            folio = await self._folio_allocator.next_folio(uow, tenant_id, dte_type.value)
            draft = build_draft(tenant_id, dte_type.value, folio, client, request)
            lines = compose_invoice_lines(
                work_order,
                exempt=dte_type.is_exempt,
                labor_line_name=get_settings().fiscal.labor_line_name,
            )

            invoice = Invoice(
                tenant_id=tenant_id,
                dte_type=dte_type.value,
                folio=folio,
                issue_date=draft.issue_date,
                due_date=draft.due_date,
                receptor_rut=draft.receptor_rut,
                receptor_name=draft.receptor_name,
                payment_condition=request.payment_condition,
                payment_method=request.payment_method,
                notes=request.notes,
                client_id=work_order.client_id,
                work_order_id=work_order.id,
                quotation_id=work_order.quotation_id,
                created_by=actor,
                lines=lines,
            )

            try:
                built = self._get_document_builder().build_document(draft, lines)
            except DocumentBuildError:
                # Rolls back the folio along with everything else
                raise
            except Exception as e:
                # The folio stays taken; the draft carries the line totals and the failure
                logger.error(
                    "document_build_failed",
                    work_order_id=work_order_id,
                    dte_type=dte_type.value,
                    folio=folio,
                    error=str(e),
                )
                totals = summarize_invoice_lines(
                    lines, dte_type.is_exempt, get_settings().fiscal.iva_rate
                )
                invoice.net_amount = totals.net_amount
                invoice.exempt_amount = totals.exempt_amount
                invoice.tax_rate = totals.tax_rate
                invoice.tax_amount = totals.tax_amount
                invoice.total_amount = totals.total_amount
                invoice.notes = "\n".join(
                    filter(None, [request.notes, f"Document not built: {e}"])
                )
            else:
                invoice.status = InvoiceStatus.ISSUED
                invoice.document = built.content
                invoice.net_amount = built.net_amount
                invoice.exempt_amount = built.exempt_amount
                invoice.tax_rate = built.tax_rate
                invoice.tax_amount = built.tax_amount
                invoice.total_amount = built.total_amount

            invoice = await uow.invoices.create_invoice(invoice)

            now = datetime.now(UTC)
            work_order.change_status(WorkOrderStatus.INVOICED)
            work_order.advance_stage(PipelineStage.INVOICED)
            work_order.invoice_id = invoice.id
            work_order.invoiced_at = now
            work_order.invoiced_by = actor
            await uow.work_orders.update_work_order(work_order)

            if work_order.quotation_id is not None:
                quotation = await uow.quotations.get_quotation(tenant_id, work_order.quotation_id)
                if quotation is not None:
                    quotation.advance_stage(PipelineStage.INVOICED)
                    quotation.invoice_id = invoice.id
                    await uow.quotations.update_quotation(quotation)

        logger.info(
            "invoice_work_order_complete",
            work_order_id=work_order_id,
            invoice_id=invoice.id,
            dte_type=dte_type.value,
            folio=folio,
            status=invoice.status.value,
            total_amount=invoice.total_amount,
        )
        await self._publish(
            "work_order_invoiced",
            {
                "tenant_id": tenant_id,
                "work_order_id": work_order_id,
                "invoice_id": invoice.id,
                "dte_type": dte_type.value,
                "folio": folio,
                "actor": actor,
            },
        )
        return InvoiceWorkOrderResult(invoice=invoice, work_order=work_order)

    def to_response(self, result: InvoiceWorkOrderResult) -> InvoiceWorkOrderResponse:
        return InvoiceWorkOrderResponse(
            invoice=InvoiceResponse.from_entity(result.invoice),
            work_order=WorkOrderResponse.from_entity(result.work_order),
        )
