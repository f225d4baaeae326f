"""SQLite implementation of work order storage."""

from datetime import UTC, datetime

import aiosqlite

from taller.config import get_logger
from taller.core.entities.pipeline import PipelineStage, WorkOrderStatus
from taller.core.entities.work_order import WorkOrder, WorkOrderPart
from taller.core.interfaces.work_order_store import IWorkOrderStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


class SQLiteWorkOrderStore(SQLiteStore, IWorkOrderStore):
    """Work orders and their part lines."""

    async def create_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Insert a work order with its parts and set their ids."""
        cursor = await self._conn.execute(
            """
            INSERT INTO work_orders (
                tenant_id, order_number, client_id, vehicle_id, quotation_id,
                assigned_to, status, pipeline_stage, type, priority,
                description, internal_notes, actual_hours, labor_cost,
                parts_cost, total_cost, parts_dispatched, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                work_order.tenant_id,
                work_order.order_number,
                work_order.client_id,
                work_order.vehicle_id,
                work_order.quotation_id,
                work_order.assigned_to,
                work_order.status.value,
                work_order.pipeline_stage.value,
                work_order.type,
                work_order.priority,
                work_order.description,
                work_order.internal_notes,
                work_order.actual_hours,
                work_order.labor_cost,
                work_order.parts_cost,
                work_order.total_cost,
                int(work_order.parts_dispatched),
                iso(work_order.created_at),
                iso(work_order.updated_at),
            ),
        )
        work_order.id = cursor.lastrowid

        for part in work_order.parts:
            part.work_order_id = work_order.id
            await self.add_part(part)

        logger.info(
            "work_order_created",
            work_order_id=work_order.id,
            order_number=work_order.order_number,
            quotation_id=work_order.quotation_id,
            parts=len(work_order.parts),
        )
        return work_order

    async def get_work_order(self, tenant_id: str, work_order_id: int) -> WorkOrder | None:
        """Get a work order and its parts by id within the tenant."""
        row = await self._fetchone(
            "SELECT * FROM work_orders WHERE id = ? AND tenant_id = ?",
            (work_order_id, tenant_id),
        )
        if row is None:
            return None
        return await self._load(row)

    async def get_by_quotation(self, tenant_id: str, quotation_id: int) -> WorkOrder | None:
        """Get the work order a quotation was converted into."""
        row = await self._fetchone(
            "SELECT * FROM work_orders WHERE quotation_id = ? AND tenant_id = ?",
            (quotation_id, tenant_id),
        )
        if row is None:
            return None
        return await self._load(row)

    async def update_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Persist the work order header; parts are written separately."""
        work_order.updated_at = datetime.now(UTC)
        await self._conn.execute(
            """
            UPDATE work_orders SET
                status = ?,
                pipeline_stage = ?,
                assigned_to = ?,
                actual_hours = ?,
                labor_cost = ?,
                parts_cost = ?,
                total_cost = ?,
                parts_dispatched = ?,
                dispatched_at = ?,
                dispatched_by = ?,
                started_at = ?,
                completed_at = ?,
                invoice_id = ?,
                invoiced_at = ?,
                invoiced_by = ?,
                internal_notes = ?,
                updated_at = ?
            WHERE id = ? AND tenant_id = ?
            """,
            (
                work_order.status.value,
                work_order.pipeline_stage.value,
                work_order.assigned_to,
                work_order.actual_hours,
                work_order.labor_cost,
                work_order.parts_cost,
                work_order.total_cost,
                int(work_order.parts_dispatched),
                iso(work_order.dispatched_at),
                work_order.dispatched_by,
                iso(work_order.started_at),
                iso(work_order.completed_at),
                work_order.invoice_id,
                iso(work_order.invoiced_at),
                work_order.invoiced_by,
                work_order.internal_notes,
                iso(work_order.updated_at),
                work_order.id,
                work_order.tenant_id,
            ),
        )
        logger.info(
            "work_order_updated",
            work_order_id=work_order.id,
            status=work_order.status.value,
            stage=work_order.pipeline_stage.value,
        )
        return work_order

    async def add_part(self, part: WorkOrderPart) -> WorkOrderPart:
        """Insert a part line and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO work_order_parts (
                work_order_id, name, part_number, quantity, unit_price,
                total_price, inventory_item_id, warehouse_location_id,
                is_dispatched, dispatched_at, stock_movement_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                part.work_order_id,
                part.name,
                part.part_number,
                part.quantity,
                part.unit_price,
                part.total_price,
                part.inventory_item_id,
                part.warehouse_location_id,
                int(part.is_dispatched),
                iso(part.dispatched_at),
                part.stock_movement_id,
                iso(part.created_at),
            ),
        )
        part.id = cursor.lastrowid
        return part

    async def update_part(self, part: WorkOrderPart) -> WorkOrderPart:
        """Persist dispatch state, quantity and price of an existing part line."""
        await self._conn.execute(
            """
            UPDATE work_order_parts SET
                part_number = ?,
                quantity = ?,
                total_price = ?,
                warehouse_location_id = ?,
                is_dispatched = ?,
                dispatched_at = ?,
                stock_movement_id = ?
            WHERE id = ? AND work_order_id = ?
            """,
            (
                part.part_number,
                part.quantity,
                part.total_price,
                part.warehouse_location_id,
                int(part.is_dispatched),
                iso(part.dispatched_at),
                part.stock_movement_id,
                part.id,
                part.work_order_id,
            ),
        )
        return part

    async def next_order_number(self, tenant_id: str) -> str:
        """Next sequential OT number for the tenant."""
        row = await self._fetchone(
            "SELECT COUNT(*) AS n FROM work_orders WHERE tenant_id = ?", (tenant_id,)
        )
        return f"OT-{row['n'] + 1:06d}"

    async def _load(self, row: aiosqlite.Row) -> WorkOrder:
        part_rows = await self._fetchall(
            "SELECT * FROM work_order_parts WHERE work_order_id = ? ORDER BY id",
            (row["id"],),
        )
        work_order = self._row_to_work_order(row)
        work_order.parts = [self._row_to_part(r) for r in part_rows]
        return work_order

    @staticmethod
    def _row_to_work_order(row: aiosqlite.Row) -> WorkOrder:
        return WorkOrder(
            id=row["id"],
            tenant_id=row["tenant_id"],
            order_number=row["order_number"],
            client_id=row["client_id"],
            vehicle_id=row["vehicle_id"],
            quotation_id=row["quotation_id"],
            assigned_to=row["assigned_to"],
            status=WorkOrderStatus(row["status"]),
            pipeline_stage=PipelineStage(row["pipeline_stage"]),
            type=row["type"],
            priority=row["priority"],
            description=row["description"],
            internal_notes=row["internal_notes"],
            actual_hours=row["actual_hours"],
            labor_cost=row["labor_cost"],
            parts_cost=row["parts_cost"],
            total_cost=row["total_cost"],
            parts_dispatched=bool(row["parts_dispatched"]),
            dispatched_at=row["dispatched_at"],
            dispatched_by=row["dispatched_by"],
            started_at=row["started_at"],
            completed_at=row["completed_at"],
            invoice_id=row["invoice_id"],
            invoiced_at=row["invoiced_at"],
            invoiced_by=row["invoiced_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_part(row: aiosqlite.Row) -> WorkOrderPart:
        return WorkOrderPart(
            id=row["id"],
            work_order_id=row["work_order_id"],
            name=row["name"],
            part_number=row["part_number"],
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            total_price=row["total_price"],
            inventory_item_id=row["inventory_item_id"],
            warehouse_location_id=row["warehouse_location_id"],
            is_dispatched=bool(row["is_dispatched"]),
            dispatched_at=row["dispatched_at"],
            stock_movement_id=row["stock_movement_id"],
            created_at=row["created_at"],
        )
