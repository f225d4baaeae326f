"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from taller.application.services import reset_services
from taller.config import reset_settings
from taller.core.entities import (
    CafFolio,
    Client,
    InventoryItem,
    Quotation,
    QuotationItem,
    QuotationStatus,
    WarehouseLocation,
    WorkOrder,
    WorkOrderPart,
    WorkOrderStatus,
)
from taller.infrastructure.storage.sqlite import ConnectionPool, SQLiteUnitOfWorkFactory
from taller.infrastructure.storage.sqlite.migrations import initialize_database

TENANT = "tenant-a"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point storage at a temp dir and drop cached singletons between tests."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("ENVIRONMENT", "development")
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


class FakeUnitOfWork:
    """Unit of work over AsyncMock stores that records how it was closed."""

    def __init__(self):
        self.clients = AsyncMock()
        self.quotations = AsyncMock()
        self.work_orders = AsyncMock()
        self.inventory = AsyncMock()
        self.folios = AsyncMock()
        self.invoices = AsyncMock()
        self.locks: list[bool] = []
        self.committed = False
        self.rolled_back = False

    def __call__(self, lock: bool = True) -> "FakeUnitOfWork":
        self.locks.append(lock)
        return self

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """A fake unit of work that is also its own factory."""
    return FakeUnitOfWork()


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def client() -> Client:
    return Client(
        id=1,
        tenant_id=TENANT,
        name="Transportes Andes Ltda",
        tax_id="76123456-7",
        business_line="Transporte de carga",
        address="Camino Real 450",
        commune="Maipu",
        city="Santiago",
    )


@pytest.fixture
def approved_quotation() -> Quotation:
    return Quotation(
        id=10,
        tenant_id=TENANT,
        quote_number="COT-0010",
        client_id=1,
        vehicle_id=5,
        status=QuotationStatus.APPROVED,
        items=[
            QuotationItem(
                description="Pastillas de freno", quantity=2, unit_price=25000, inventory_item_id=100
            ),
            QuotationItem(
                description="Disco de freno", quantity=1, unit_price=30000, inventory_item_id=101
            ),
        ],
    )


@pytest.fixture
def items() -> dict[int, InventoryItem]:
    return {
        100: InventoryItem(
            id=100, tenant_id=TENANT, sku="PF-01", name="Pastillas de freno",
            sell_price=25000, stock_quantity=10,
        ),
        101: InventoryItem(
            id=101, tenant_id=TENANT, sku="DF-01", name="Disco de freno",
            sell_price=30000, stock_quantity=4,
        ),
    }


@pytest.fixture
def locations() -> dict[int, WarehouseLocation]:
    return {
        7: WarehouseLocation(id=7, tenant_id=TENANT, warehouse_id=1, code="A-01"),
        8: WarehouseLocation(id=8, tenant_id=TENANT, warehouse_id=1, code="B-02", is_active=False),
    }


@pytest.fixture
def pending_work_order() -> WorkOrder:
    work_order = WorkOrder(
        id=20,
        tenant_id=TENANT,
        order_number="OT-000001",
        client_id=1,
        vehicle_id=5,
        quotation_id=10,
        parts=[
            WorkOrderPart(
                id=1, work_order_id=20, name="Pastillas de freno",
                quantity=2, unit_price=25000, total_price=50000, inventory_item_id=100,
            ),
            WorkOrderPart(
                id=2, work_order_id=20, name="Disco de freno",
                quantity=1, unit_price=30000, total_price=30000, inventory_item_id=101,
            ),
        ],
    )
    work_order.recompute_costs()
    return work_order


@pytest.fixture
def completed_work_order(pending_work_order: WorkOrder) -> WorkOrder:
    """The pending order after a full dispatch and 20,000 of labor."""
    work_order = pending_work_order
    for i, part in enumerate(work_order.parts, start=1):
        part.is_dispatched = True
        part.stock_movement_id = i
    work_order.parts_dispatched = True
    work_order.status = WorkOrderStatus.COMPLETED
    work_order.labor_cost = 20000
    work_order.actual_hours = 2
    work_order.recompute_costs()
    return work_order


# --- SQLite-backed fixtures ---------------------------------------------------


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "pipeline.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """A database with every migration applied."""
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert results and all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=5, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def uow_factory(pool: ConnectionPool) -> SQLiteUnitOfWorkFactory:
    return SQLiteUnitOfWorkFactory(pool)


@dataclass
class SeededPipeline:
    """Ids of the rows written by ``seeded``."""

    client_id: int
    quotation_id: int
    brake_pads_id: int
    brake_disc_id: int
    location_id: int
    inactive_location_id: int
    caf_id: int


@pytest.fixture
async def seeded(uow_factory: SQLiteUnitOfWorkFactory) -> SeededPipeline:
    """
    One tenant with a client, two stocked parts, an approved quotation
    for 2 pads and 1 disc (80,000 net) and a type 33 CAF for folios 1-100.
    """
    async with uow_factory() as uow:
        client = await uow.clients.create_client(
            Client(tenant_id=TENANT, name="Transportes Andes Ltda", tax_id="76123456-7")
        )
        pads = await uow.inventory.create_item(
            InventoryItem(
                tenant_id=TENANT, sku="PF-01", name="Pastillas de freno",
                sell_price=25000, stock_quantity=10,
            )
        )
        disc = await uow.inventory.create_item(
            InventoryItem(
                tenant_id=TENANT, sku="DF-01", name="Disco de freno",
                sell_price=30000, stock_quantity=4,
            )
        )
        location = await uow.inventory.create_location(
            WarehouseLocation(tenant_id=TENANT, warehouse_id=1, code="A-01")
        )
        inactive = await uow.inventory.create_location(
            WarehouseLocation(tenant_id=TENANT, warehouse_id=1, code="B-02", is_active=False)
        )
        quotation = await uow.quotations.create_quotation(
            Quotation(
                tenant_id=TENANT,
                quote_number="COT-0010",
                client_id=client.id,
                vehicle_id=5,
                status=QuotationStatus.APPROVED,
                items=[
                    QuotationItem(
                        description="Pastillas de freno", quantity=2,
                        unit_price=25000, inventory_item_id=pads.id,
                    ),
                    QuotationItem(
                        description="Disco de freno", quantity=1,
                        unit_price=30000, inventory_item_id=disc.id,
                    ),
                ],
            )
        )
        caf = await uow.folios.create_window(
            CafFolio(tenant_id=TENANT, dte_type=33, folio_from=1, folio_to=100)
        )

    return SeededPipeline(
        client_id=client.id,
        quotation_id=quotation.id,
        brake_pads_id=pads.id,
        brake_disc_id=disc.id,
        location_id=location.id,
        inactive_location_id=inactive.id,
        caf_id=caf.id,
    )
