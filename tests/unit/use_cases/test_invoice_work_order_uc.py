"""Tests for InvoiceWorkOrderUseCase."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from taller.application.dto.requests import InvoiceWorkOrderRequest
from taller.application.use_cases import InvoiceWorkOrderUseCase
from taller.application.use_cases.invoice_work_order import build_draft
from taller.core.entities import (
    BuiltDocument,
    CafFolio,
    InvoiceStatus,
    PaymentCondition,
    PipelineStage,
    WorkOrderStatus,
)
from taller.core.exceptions import (
    AlreadyInvoicedError,
    DocumentBuildError,
    NotFoundError,
    OutOfFoliosError,
    ValidationFailedError,
)
from taller.core.services import FolioAllocator


@pytest.fixture
def builder():
    builder = MagicMock()
    builder.build_document.return_value = BuiltDocument(
        content="<DTE/>",
        net_amount=100000,
        tax_rate=19.0,
        tax_amount=19000,
        total_amount=119000,
    )
    return builder


@pytest.fixture
def use_case(uow, notifier, builder):
    return InvoiceWorkOrderUseCase(
        uow_factory=uow,
        notifier=notifier,
        document_builder=builder,
        folio_allocator=FolioAllocator(),
    )


@pytest.fixture
def loaded(uow, completed_work_order, approved_quotation, client):
    completed_work_order.pipeline_stage = PipelineStage.DISPATCHED
    approved_quotation.mark_converted(completed_work_order.id, "ana")
    approved_quotation.advance_stage(PipelineStage.DISPATCHED)

    uow.work_orders.get_work_order.return_value = completed_work_order
    uow.quotations.get_quotation.return_value = approved_quotation
    uow.clients.get_client.return_value = client
    uow.folios.get_active_window.return_value = CafFolio(
        id=3, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=100, current_folio=41
    )
    uow.folios.advance_cursor.return_value = True

    async def create_invoice(invoice):
        invoice.id = 900
        return invoice

    uow.invoices.create_invoice.side_effect = create_invoice
    return uow


class TestInvoiceWorkOrderUseCase:
    async def test_issues_invoice(self, use_case, loaded, builder, approved_quotation, notifier):
        result = await use_case.execute(
            "tenant-a",
            20,
            "caja",
            InvoiceWorkOrderRequest(dte_type=33, payment_condition=PaymentCondition.DAYS_30),
        )

        invoice = result.invoice
        assert invoice.id == 900
        assert invoice.folio == 41
        assert invoice.status == InvoiceStatus.ISSUED
        assert invoice.total_amount == 119000
        assert invoice.document == "<DTE/>"
        assert invoice.receptor_rut == "76123456-7"
        assert (invoice.due_date - invoice.issue_date).days == 30
        assert [line.name for line in invoice.lines] == [
            "Pastillas de freno",
            "Disco de freno",
            "Mano de obra",
        ]

        work_order = result.work_order
        assert work_order.status == WorkOrderStatus.INVOICED
        assert work_order.pipeline_stage == PipelineStage.INVOICED
        assert work_order.invoice_id == 900
        assert work_order.invoiced_by == "caja"
        assert approved_quotation.pipeline_stage == PipelineStage.INVOICED
        assert approved_quotation.invoice_id == 900

        window = loaded.folios.advance_cursor.await_args.args[0]
        assert window.current_folio == 41
        assert loaded.folios.advance_cursor.await_args.kwargs == {"exhausted": False}
        assert loaded.committed
        assert notifier.notify.call_args[0][0] == "work_order_invoiced"

    async def test_last_folio_exhausts_window(self, use_case, loaded):
        loaded.folios.get_active_window.return_value = CafFolio(
            id=3, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=100, current_folio=100
        )
        result = await use_case.execute("tenant-a", 20, "caja")

        assert result.invoice.folio == 100
        assert loaded.folios.advance_cursor.await_args.kwargs == {"exhausted": True}

    async def test_exempt_type_marks_lines(self, use_case, loaded, builder):
        await use_case.execute("tenant-a", 20, "caja", InvoiceWorkOrderRequest(dte_type=34))

        draft, lines = builder.build_document.call_args.args
        assert draft.dte_type == 34
        assert all(line.is_exempt for line in lines)

    async def test_not_found(self, use_case, uow):
        uow.work_orders.get_work_order.return_value = None
        with pytest.raises(NotFoundError):
            await use_case.execute("tenant-a", 20, "caja")

    async def test_already_invoiced(self, use_case, loaded, completed_work_order):
        completed_work_order.status = WorkOrderStatus.INVOICED
        completed_work_order.invoice_id = 5

        with pytest.raises(AlreadyInvoicedError):
            await use_case.execute("tenant-a", 20, "caja")
        loaded.folios.get_active_window.assert_not_awaited()

    async def test_not_ready_reports_every_problem(self, use_case, loaded, completed_work_order, client):
        completed_work_order.status = WorkOrderStatus.IN_PROGRESS
        completed_work_order.labor_cost = 0
        completed_work_order.actual_hours = 0
        client.tax_id = " "

        with pytest.raises(ValidationFailedError) as exc_info:
            await use_case.execute("tenant-a", 20, "caja")

        fields = [m.split(":")[0] for m in exc_info.value.errors]
        assert fields == ["status", "client.tax_id", "labor_cost"]
        loaded.folios.get_active_window.assert_not_awaited()
        loaded.invoices.create_invoice.assert_not_awaited()

    async def test_out_of_folios(self, use_case, loaded):
        loaded.folios.get_active_window.return_value = None

        with pytest.raises(OutOfFoliosError):
            await use_case.execute("tenant-a", 20, "caja")
        loaded.invoices.create_invoice.assert_not_awaited()
        loaded.work_orders.update_work_order.assert_not_awaited()

    async def test_build_error_rolls_back(self, use_case, loaded, builder):
        builder.build_document.side_effect = DocumentBuildError("receptor RUT is required")

        with pytest.raises(DocumentBuildError):
            await use_case.execute("tenant-a", 20, "caja")
        assert loaded.rolled_back
        loaded.invoices.create_invoice.assert_not_awaited()

    async def test_unexpected_builder_failure_keeps_draft(self, use_case, loaded, builder):
        builder.build_document.side_effect = RuntimeError("signing service unavailable")

        result = await use_case.execute("tenant-a", 20, "caja")

        assert result.invoice.status == InvoiceStatus.DRAFT
        assert result.invoice.document is None
        assert result.invoice.net_amount == 100000
        assert result.invoice.tax_amount == 19000
        assert result.invoice.total_amount == 119000
        assert "signing service unavailable" in result.invoice.notes
        assert result.invoice.folio == 41
        assert result.work_order.status == WorkOrderStatus.INVOICED
        assert loaded.committed


class TestBuildDraft:
    def test_receptor_from_client(self, client):
        draft = build_draft(
            "tenant-a",
            33,
            7,
            client,
            InvoiceWorkOrderRequest(payment_condition=PaymentCondition.DAYS_60),
            issue_date=date(2026, 1, 31),
        )
        assert draft.receptor_rut == "76123456-7"
        assert draft.receptor_name == "Transportes Andes Ltda"
        assert draft.receptor_commune == "Maipu"
        assert draft.due_date == date(2026, 4, 1)

    def test_no_payment_condition_no_due_date(self):
        draft = build_draft("tenant-a", 39, 1, None, InvoiceWorkOrderRequest(dte_type=39))
        assert draft.due_date is None
        assert draft.receptor_rut is None
