"""Tests for the SQLite stores behind the pipeline gates."""

import pytest

from taller.core.entities import (
    CafFolio,
    Invoice,
    InvoiceLine,
    InvoiceStatus,
    MovementType,
    PaymentCondition,
    QuotationStatus,
    StockMovement,
    WorkOrder,
    WorkOrderPart,
)
from taller.core.exceptions import TransactionFailedError

TENANT = "tenant-a"


class TestInventoryStore:
    @pytest.mark.asyncio
    async def test_conditional_deduct(self, uow_factory, seeded):
        async with uow_factory() as uow:
            assert await uow.inventory.deduct_stock(TENANT, seeded.brake_disc_id, 3)
            assert not await uow.inventory.deduct_stock(TENANT, seeded.brake_disc_id, 2)
            item = await uow.inventory.get_item(TENANT, seeded.brake_disc_id)

        assert item.stock_quantity == 1

    @pytest.mark.asyncio
    async def test_deduct_is_tenant_scoped(self, uow_factory, seeded):
        async with uow_factory() as uow:
            assert not await uow.inventory.deduct_stock("tenant-b", seeded.brake_disc_id, 1)
            assert await uow.inventory.get_item("tenant-b", seeded.brake_disc_id) is None

    @pytest.mark.asyncio
    async def test_bulk_lookups(self, uow_factory, seeded):
        async with uow_factory(lock=False) as uow:
            items = await uow.inventory.get_items(
                TENANT, [seeded.brake_disc_id, seeded.brake_pads_id, 9999]
            )
            locations = await uow.inventory.get_locations(
                TENANT, [seeded.location_id, seeded.inactive_location_id]
            )
            empty = await uow.inventory.get_items(TENANT, [])

        assert set(items) == {seeded.brake_disc_id, seeded.brake_pads_id}
        assert locations[seeded.inactive_location_id].is_active is False
        assert empty == {}

    @pytest.mark.asyncio
    async def test_movements_newest_first(self, uow_factory, seeded):
        async with uow_factory() as uow:
            for qty in (1, 2, 3):
                await uow.inventory.add_movement(
                    StockMovement(
                        tenant_id=TENANT,
                        inventory_item_id=seeded.brake_pads_id,
                        from_location_id=seeded.location_id,
                        quantity=qty,
                        reference_id=1,
                        performed_by="bodega",
                    )
                )

        async with uow_factory(lock=False) as uow:
            page = await uow.inventory.get_movements(TENANT, seeded.brake_pads_id, limit=2)
            rest = await uow.inventory.get_movements(
                TENANT, seeded.brake_pads_id, limit=2, offset=2
            )
            by_ref = await uow.inventory.get_movements_for_reference(TENANT, "work_order", 1)

        assert [m.quantity for m in page] == [3, 2]
        assert [m.quantity for m in rest] == [1]
        assert [m.quantity for m in by_ref] == [1, 2, 3]
        assert all(m.movement_type == MovementType.DISPATCH for m in by_ref)


class TestFolioStore:
    @pytest.mark.asyncio
    async def test_cursor_compare_and_set(self, uow_factory, seeded):
        async with uow_factory() as uow:
            window = await uow.folios.get_active_window(TENANT, 33)
            stale = window.model_copy()

            assert await uow.folios.advance_cursor(window, exhausted=False)
            assert window.current_folio == 2
            assert not await uow.folios.advance_cursor(stale, exhausted=False)

    @pytest.mark.asyncio
    async def test_exhaustion_closes_window(self, uow_factory):
        async with uow_factory() as uow:
            await uow.folios.create_window(
                CafFolio(tenant_id=TENANT, dte_type=39, folio_from=7, folio_to=7)
            )
            window = await uow.folios.get_active_window(TENANT, 39)
            assert await uow.folios.advance_cursor(window, exhausted=True)

            assert await uow.folios.get_active_window(TENANT, 39) is None
            [stored] = await uow.folios.list_windows(TENANT, 39)

        assert stored.is_exhausted
        assert not stored.is_active
        assert stored.current_folio == 7
        assert stored.remaining == 0

    @pytest.mark.asyncio
    async def test_windows_are_per_tenant_and_type(self, uow_factory, seeded):
        async with uow_factory(lock=False) as uow:
            assert await uow.folios.get_active_window("tenant-b", 33) is None
            assert await uow.folios.get_active_window(TENANT, 34) is None
            assert len(await uow.folios.list_windows(TENANT)) == 1


class TestQuotationAndWorkOrderStores:
    @pytest.mark.asyncio
    async def test_quotation_round_trip(self, uow_factory, seeded):
        async with uow_factory(lock=False) as uow:
            quotation = await uow.quotations.get_quotation(TENANT, seeded.quotation_id)

        assert quotation.status == QuotationStatus.APPROVED
        assert quotation.subtotal == 80000
        assert [i.inventory_item_id for i in quotation.items] == [
            seeded.brake_pads_id,
            seeded.brake_disc_id,
        ]

    @pytest.mark.asyncio
    async def test_work_order_with_parts(self, uow_factory, seeded):
        async with uow_factory() as uow:
            number = await uow.work_orders.next_order_number(TENANT)
            work_order = await uow.work_orders.create_work_order(
                WorkOrder(
                    tenant_id=TENANT,
                    order_number=number,
                    client_id=seeded.client_id,
                    quotation_id=seeded.quotation_id,
                    parts=[
                        WorkOrderPart(
                            name="Pastillas de freno", quantity=2, unit_price=25000,
                            total_price=50000, inventory_item_id=seeded.brake_pads_id,
                        )
                    ],
                )
            )

        async with uow_factory(lock=False) as uow:
            loaded = await uow.work_orders.get_by_quotation(TENANT, seeded.quotation_id)
            other_tenant = await uow.work_orders.get_work_order("tenant-b", work_order.id)

        assert number == "OT-000001"
        assert loaded.id == work_order.id
        assert [p.id for p in loaded.parts] == [work_order.parts[0].id]
        assert loaded.parts[0].is_dispatched is False
        assert other_tenant is None

    @pytest.mark.asyncio
    async def test_update_part_writes_dispatch_state(self, uow_factory, seeded):
        async with uow_factory() as uow:
            work_order = await uow.work_orders.create_work_order(
                WorkOrder(
                    tenant_id=TENANT,
                    order_number="OT-000001",
                    parts=[
                        WorkOrderPart(
                            name="Pastillas de freno", quantity=2, unit_price=25000,
                            total_price=50000, inventory_item_id=seeded.brake_pads_id,
                        )
                    ],
                )
            )
            movement = await uow.inventory.add_movement(
                StockMovement(
                    tenant_id=TENANT,
                    inventory_item_id=seeded.brake_pads_id,
                    from_location_id=seeded.location_id,
                    quantity=1,
                    reference_id=work_order.id,
                    performed_by="bodega",
                )
            )
            part = work_order.parts[0]
            part.part_number = "PF-01"
            part.quantity, part.total_price = 1, 25000
            part.is_dispatched = True
            part.warehouse_location_id = seeded.location_id
            part.stock_movement_id = movement.id
            await uow.work_orders.update_part(part)

        async with uow_factory(lock=False) as uow:
            stored = (await uow.work_orders.get_work_order(TENANT, work_order.id)).parts[0]

        assert stored.part_number == "PF-01"
        assert stored.quantity == 1
        assert stored.total_price == 25000
        assert stored.is_dispatched
        assert stored.stock_movement_id == movement.id

    @pytest.mark.asyncio
    async def test_one_work_order_per_quotation(self, uow_factory, seeded):
        async def create(number: str):
            async with uow_factory() as uow:
                await uow.work_orders.create_work_order(
                    WorkOrder(tenant_id=TENANT, order_number=number, quotation_id=seeded.quotation_id)
                )

        await create("OT-000001")
        with pytest.raises(TransactionFailedError):
            await create("OT-000002")


class TestInvoiceStore:
    @pytest.mark.asyncio
    async def test_round_trip_with_lines(self, uow_factory, seeded):
        async with uow_factory() as uow:
            invoice = await uow.invoices.create_invoice(
                Invoice(
                    tenant_id=TENANT,
                    dte_type=33,
                    folio=1,
                    status=InvoiceStatus.ISSUED,
                    payment_condition=PaymentCondition.CONTADO,
                    total_amount=119000,
                    client_id=seeded.client_id,
                    lines=[
                        InvoiceLine(line_number=1, name="Pastillas", quantity=2, unit_price=25000, amount=50000),
                        InvoiceLine(line_number=2, name="Mano de obra", quantity=1, unit_price=50000, amount=50000),
                    ],
                )
            )

        async with uow_factory(lock=False) as uow:
            loaded = await uow.invoices.get_invoice(TENANT, invoice.id)
            by_folio = await uow.invoices.get_by_folio(TENANT, 33, 1)

        assert loaded.status == InvoiceStatus.ISSUED
        assert loaded.payment_condition == PaymentCondition.CONTADO
        assert [line.name for line in loaded.lines] == ["Pastillas", "Mano de obra"]
        assert by_folio.id == invoice.id

    @pytest.mark.asyncio
    async def test_folio_unique_per_type(self, uow_factory, seeded):
        async def create(dte_type: int, folio: int):
            async with uow_factory() as uow:
                await uow.invoices.create_invoice(
                    Invoice(tenant_id=TENANT, dte_type=dte_type, folio=folio)
                )

        await create(33, 5)
        await create(34, 5)
        with pytest.raises(TransactionFailedError):
            await create(33, 5)
