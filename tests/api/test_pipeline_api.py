"""API tests for the pipeline endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from taller.api.dependencies import (
    get_complete_work_order_use_case,
    get_convert_quotation_use_case,
    get_dispatch_parts_use_case,
    get_invoice_work_order_use_case,
    get_pipeline_status_use_case,
    get_readiness_use_case,
    get_validate_invoicing_use_case,
    get_validate_quotation_use_case,
)
from taller.api.main import app
from taller.application.dto.requests import (
    CompleteWorkOrderRequest,
    DispatchPartsRequest,
    InvoiceWorkOrderRequest,
)
from taller.application.use_cases import (
    CompleteWorkOrderUseCase,
    ConvertQuotationUseCase,
    DispatchPartsUseCase,
    GetPipelineStatusUseCase,
    GetWorkOrderReadinessUseCase,
    InvoiceWorkOrderUseCase,
    ValidateInvoicingUseCase,
    ValidateQuotationUseCase,
)
from taller.application.use_cases.convert_quotation import ConvertQuotationResult
from taller.application.use_cases.dispatch_parts import DispatchPartsResult
from taller.application.use_cases.invoice_work_order import InvoiceWorkOrderResult
from taller.application.use_cases.pipeline_status import PipelineStatus
from taller.application.use_cases.validate_quotation import ValidationReport
from taller.core.entities import (
    Invoice,
    InvoiceStatus,
    PipelineStage,
    StockMovement,
    WorkOrderStatus,
)
from taller.core.services.pipeline_rules import assess_readiness

HEADERS = {"X-Tenant-ID": "tenant-a", "X-Actor-ID": "ana"}


def mock_use_case(cls, result):
    """AsyncMock use case whose response is built by the real to_response."""
    uc = AsyncMock(spec=cls)
    uc.execute.return_value = result
    uc.to_response.return_value = cls().to_response(result)
    return uc


@pytest.fixture
async def api_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def override(provider, use_case):
    app.dependency_overrides[provider] = lambda: use_case
    return use_case


class TestQuotationEndpoints:
    async def test_validation_report(self, api_client):
        uc = override(
            get_validate_quotation_use_case,
            mock_use_case(
                ValidateQuotationUseCase,
                ValidationReport(valid=False, missing_fields=["vehicle_id: quotation has no vehicle assigned"]),
            ),
        )

        response = await api_client.get("/api/pipeline/quotations/10/validation", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "missing_fields": ["vehicle_id: quotation has no vehicle assigned"],
        }
        uc.execute.assert_awaited_once_with("tenant-a", 10)

    async def test_convert_returns_201(self, api_client, approved_quotation, pending_work_order):
        approved_quotation.mark_converted(pending_work_order.id, "ana")
        uc = override(
            get_convert_quotation_use_case,
            mock_use_case(
                ConvertQuotationUseCase,
                ConvertQuotationResult(work_order=pending_work_order, quotation=approved_quotation),
            ),
        )

        response = await api_client.post("/api/pipeline/quotations/10/convert", headers=HEADERS)

        assert response.status_code == 201
        body = response.json()
        assert body["work_order"]["id"] == 20
        assert body["quotation"]["status"] == "converted"
        uc.execute.assert_awaited_once_with("tenant-a", 10, "ana", None)

    async def test_pipeline_status(self, api_client, approved_quotation):
        override(
            get_pipeline_status_use_case,
            mock_use_case(GetPipelineStatusUseCase, PipelineStatus(quotation=approved_quotation)),
        )

        response = await api_client.get("/api/pipeline/quotations/10/status", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["stage"] == "quotation"
        assert response.json()["work_order"] is None

    async def test_tenant_header_required(self, api_client):
        override(get_validate_quotation_use_case, AsyncMock(spec=ValidateQuotationUseCase))

        response = await api_client.get("/api/pipeline/quotations/10/validation")

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_actor_defaults_to_system(self, api_client, approved_quotation, pending_work_order):
        uc = override(
            get_convert_quotation_use_case,
            mock_use_case(
                ConvertQuotationUseCase,
                ConvertQuotationResult(work_order=pending_work_order, quotation=approved_quotation),
            ),
        )

        await api_client.post(
            "/api/pipeline/quotations/10/convert", headers={"X-Tenant-ID": "tenant-a"}
        )

        assert uc.execute.await_args.args[2] == "system"


class TestWorkOrderEndpoints:
    async def test_dispatch(self, api_client, pending_work_order):
        part = pending_work_order.parts[0]
        part.is_dispatched = True
        part.stock_movement_id = 1
        movement = StockMovement(id=1, tenant_id="tenant-a", inventory_item_id=100, quantity=2, reference_id=20)
        uc = override(
            get_dispatch_parts_use_case,
            mock_use_case(
                DispatchPartsUseCase,
                DispatchPartsResult(
                    work_order=pending_work_order, movements=[movement], dispatched_parts=[part]
                ),
            ),
        )

        response = await api_client.post(
            "/api/pipeline/work-orders/20/dispatch",
            headers=HEADERS,
            json={"lines": [{"inventory_item_id": 100, "quantity": 2, "warehouse_location_id": 7}]},
        )

        assert response.status_code == 200
        assert response.json()["movements"][0]["id"] == 1
        request = uc.execute.await_args.args[3]
        assert isinstance(request, DispatchPartsRequest)
        assert request.lines[0].quantity == 2

    @pytest.mark.parametrize(
        "body",
        [
            {"lines": []},
            {"lines": [{"inventory_item_id": 100, "quantity": 0, "warehouse_location_id": 7}]},
            {"lines": [{"inventory_item_id": 100, "quantity": 1}]},
        ],
    )
    async def test_dispatch_body_validation(self, api_client, body):
        uc = override(get_dispatch_parts_use_case, AsyncMock(spec=DispatchPartsUseCase))

        response = await api_client.post(
            "/api/pipeline/work-orders/20/dispatch", headers=HEADERS, json=body
        )

        assert response.status_code == 422
        assert response.json()["details"]["missing_fields"]
        uc.execute.assert_not_awaited()

    async def test_complete_without_body(self, api_client, completed_work_order):
        uc = override(
            get_complete_work_order_use_case,
            mock_use_case(CompleteWorkOrderUseCase, completed_work_order),
        )

        response = await api_client.post("/api/pipeline/work-orders/20/complete", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert uc.execute.await_args.args[3] == CompleteWorkOrderRequest()

    async def test_readiness(self, api_client, pending_work_order, client):
        override(
            get_readiness_use_case,
            mock_use_case(GetWorkOrderReadinessUseCase, assess_readiness(pending_work_order, client)),
        )

        response = await api_client.get("/api/pipeline/work-orders/20/readiness", headers=HEADERS)

        body = response.json()
        assert response.status_code == 200
        assert body["can_dispatch"] is True
        assert body["can_invoice"] is False

    async def test_invoice_validation(self, api_client):
        override(
            get_validate_invoicing_use_case,
            mock_use_case(ValidateInvoicingUseCase, ValidationReport(valid=True)),
        )

        response = await api_client.get(
            "/api/pipeline/work-orders/20/invoice-validation", headers=HEADERS
        )

        assert response.json() == {"valid": True, "missing_fields": []}

    async def test_invoice_returns_201(self, api_client, completed_work_order):
        completed_work_order.status = WorkOrderStatus.INVOICED
        completed_work_order.pipeline_stage = PipelineStage.INVOICED
        completed_work_order.invoice_id = 900
        invoice = Invoice(
            id=900, tenant_id="tenant-a", dte_type=33, folio=1,
            status=InvoiceStatus.ISSUED, total_amount=119000,
        )
        uc = override(
            get_invoice_work_order_use_case,
            mock_use_case(
                InvoiceWorkOrderUseCase,
                InvoiceWorkOrderResult(invoice=invoice, work_order=completed_work_order),
            ),
        )

        response = await api_client.post(
            "/api/pipeline/work-orders/20/invoice",
            headers=HEADERS,
            json={"dte_type": 33, "payment_condition": "30dias"},
        )

        assert response.status_code == 201
        assert response.json()["invoice"]["folio"] == 1
        request = uc.execute.await_args.args[3]
        assert isinstance(request, InvoiceWorkOrderRequest)
        assert request.payment_condition.days == 30

    async def test_invoice_rejects_non_invoiceable_type(self, api_client):
        uc = override(get_invoice_work_order_use_case, AsyncMock(spec=InvoiceWorkOrderUseCase))

        response = await api_client.post(
            "/api/pipeline/work-orders/20/invoice", headers=HEADERS, json={"dte_type": 52}
        )

        assert response.status_code == 422
        uc.execute.assert_not_awaited()
