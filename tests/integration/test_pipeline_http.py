"""The pipeline driven over HTTP, with the real use cases on a temporary database."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from taller.api import dependencies
from taller.api.main import app
from taller.application.use_cases import (
    CompleteWorkOrderUseCase,
    ConvertQuotationUseCase,
    DispatchPartsUseCase,
    GetPipelineStatusUseCase,
    InvoiceWorkOrderUseCase,
    ListStockMovementsUseCase,
)
from taller.config import FiscalSettings
from taller.core.services import FolioAllocator
from taller.infrastructure.documents import DteXmlBuilder

HEADERS = {"X-Tenant-ID": "tenant-a", "X-Actor-ID": "bodega"}


def _provide(use_case):
    return lambda: use_case


@pytest.fixture
async def http(uow_factory):
    notifier = AsyncMock()
    wiring = {
        dependencies.get_convert_quotation_use_case: ConvertQuotationUseCase(
            uow_factory=uow_factory, notifier=notifier
        ),
        dependencies.get_dispatch_parts_use_case: DispatchPartsUseCase(
            uow_factory=uow_factory, notifier=notifier
        ),
        dependencies.get_complete_work_order_use_case: CompleteWorkOrderUseCase(
            uow_factory=uow_factory, notifier=notifier
        ),
        dependencies.get_invoice_work_order_use_case: InvoiceWorkOrderUseCase(
            uow_factory=uow_factory,
            notifier=notifier,
            document_builder=DteXmlBuilder(FiscalSettings()),
            folio_allocator=FolioAllocator(),
        ),
        dependencies.get_pipeline_status_use_case: GetPipelineStatusUseCase(
            uow_factory=uow_factory
        ),
        dependencies.get_list_movements_use_case: ListStockMovementsUseCase(
            uow_factory=uow_factory
        ),
    }
    for provider, use_case in wiring.items():
        app.dependency_overrides[provider] = _provide(use_case)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def dispatch_body(seeded, pads: float = 2, disc: float = 1) -> dict:
    return {
        "lines": [
            {
                "inventory_item_id": seeded.brake_pads_id,
                "quantity": pads,
                "warehouse_location_id": seeded.location_id,
            },
            {
                "inventory_item_id": seeded.brake_disc_id,
                "quantity": disc,
                "warehouse_location_id": seeded.location_id,
            },
        ]
    }


class TestPipelineOverHttp:
    async def test_quotation_to_invoice(self, http, seeded):
        converted = await http.post(
            f"/api/pipeline/quotations/{seeded.quotation_id}/convert", headers=HEADERS
        )
        assert converted.status_code == 201
        work_order_id = converted.json()["work_order"]["id"]

        dispatched = await http.post(
            f"/api/pipeline/work-orders/{work_order_id}/dispatch",
            headers=HEADERS,
            json=dispatch_body(seeded),
        )
        assert dispatched.status_code == 200
        assert dispatched.json()["work_order"]["status"] == "in_progress"
        assert len(dispatched.json()["movements"]) == 2

        completed = await http.post(
            f"/api/pipeline/work-orders/{work_order_id}/complete",
            headers=HEADERS,
            json={"labor_cost": 20000, "actual_hours": 2},
        )
        assert completed.status_code == 200

        invoiced = await http.post(
            f"/api/pipeline/work-orders/{work_order_id}/invoice",
            headers=HEADERS,
            json={"dte_type": 33, "payment_condition": "30dias"},
        )
        assert invoiced.status_code == 201
        invoice = invoiced.json()["invoice"]
        assert invoice["folio"] == 1
        assert invoice["total_amount"] == 119000

        status = await http.get(
            f"/api/pipeline/quotations/{seeded.quotation_id}/status", headers=HEADERS
        )
        assert status.json()["stage"] == "invoiced"

        movements = await http.get(
            f"/api/inventory/{seeded.brake_pads_id}/movements", headers=HEADERS
        )
        assert [m["quantity"] for m in movements.json()] == [2]

    async def test_rejections_are_reported(self, http, seeded):
        converted = await http.post(
            f"/api/pipeline/quotations/{seeded.quotation_id}/convert", headers=HEADERS
        )
        work_order_id = converted.json()["work_order"]["id"]

        again = await http.post(
            f"/api/pipeline/quotations/{seeded.quotation_id}/convert", headers=HEADERS
        )
        assert again.status_code == 409
        assert again.json()["error_code"] == "ALREADY_CONVERTED"

        short = await http.post(
            f"/api/pipeline/work-orders/{work_order_id}/dispatch",
            headers=HEADERS,
            json=dispatch_body(seeded, disc=5),
        )
        assert short.status_code == 422
        assert short.json()["error_code"] == "INSUFFICIENT_STOCK"
        assert short.json()["details"]["shortfalls"][0]["missing"] == 1

        early = await http.post(
            f"/api/pipeline/work-orders/{work_order_id}/invoice", headers=HEADERS
        )
        assert early.status_code == 422
        assert early.json()["error_code"] == "VALIDATION_FAILED"

    async def test_other_tenant_sees_nothing(self, http, seeded):
        response = await http.post(
            f"/api/pipeline/quotations/{seeded.quotation_id}/convert",
            headers={"X-Tenant-ID": "tenant-b"},
        )
        assert response.status_code == 404
