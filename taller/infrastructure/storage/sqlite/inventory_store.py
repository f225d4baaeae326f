"""SQLite implementation of the inventory ledger."""

from datetime import UTC, datetime

import aiosqlite

from taller.config import get_logger
from taller.core.entities.inventory import (
    InventoryItem,
    MovementType,
    ReferenceType,
    StockMovement,
    WarehouseLocation,
)
from taller.core.interfaces.inventory_store import IInventoryStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


def _placeholders(n: int) -> str:
    return ", ".join("?" * n)


class SQLiteInventoryStore(SQLiteStore, IInventoryStore):
    """Inventory items, warehouse locations and the append-only movement ledger."""

    async def create_item(self, item: InventoryItem) -> InventoryItem:
        """Insert an inventory item and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO inventory_items (
                tenant_id, sku, name, part_number, cost_price, sell_price,
                stock_quantity, is_active, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item.tenant_id,
                item.sku,
                item.name,
                item.part_number,
                item.cost_price,
                item.sell_price,
                item.stock_quantity,
                int(item.is_active),
                iso(item.created_at),
                iso(item.updated_at),
            ),
        )
        item.id = cursor.lastrowid
        logger.info("inventory_item_created", item_id=item.id, sku=item.sku)
        return item

    async def get_item(self, tenant_id: str, item_id: int) -> InventoryItem | None:
        """Get an inventory item by id within the tenant."""
        row = await self._fetchone(
            "SELECT * FROM inventory_items WHERE id = ? AND tenant_id = ?",
            (item_id, tenant_id),
        )
        return self._row_to_item(row) if row else None

    async def get_items(self, tenant_id: str, item_ids: list[int]) -> dict[int, InventoryItem]:
        """Get several items at once, keyed by id."""
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        rows = await self._fetchall(
            f"SELECT * FROM inventory_items WHERE tenant_id = ? AND id IN ({_placeholders(len(ids))})",
            (tenant_id, *ids),
        )
        return {row["id"]: self._row_to_item(row) for row in rows}

    async def create_location(self, location: WarehouseLocation) -> WarehouseLocation:
        """Insert a warehouse location and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO warehouse_locations (tenant_id, warehouse_id, code, name, is_active)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                location.tenant_id,
                location.warehouse_id,
                location.code,
                location.name,
                int(location.is_active),
            ),
        )
        location.id = cursor.lastrowid
        logger.info("warehouse_location_created", location_id=location.id, code=location.code)
        return location

    async def get_locations(
        self, tenant_id: str, location_ids: list[int]
    ) -> dict[int, WarehouseLocation]:
        """Get several locations at once, keyed by id."""
        ids = sorted(set(location_ids))
        if not ids:
            return {}
        rows = await self._fetchall(
            f"SELECT * FROM warehouse_locations WHERE tenant_id = ? "
            f"AND id IN ({_placeholders(len(ids))})",
            (tenant_id, *ids),
        )
        return {row["id"]: self._row_to_location(row) for row in rows}

    async def deduct_stock(self, tenant_id: str, item_id: int, quantity: float) -> bool:
        """Decrement stock only if enough remains; False when the guard fails."""
        cursor = await self._conn.execute(
            """
            UPDATE inventory_items SET
                stock_quantity = stock_quantity - ?,
                updated_at = ?
            WHERE id = ? AND tenant_id = ? AND stock_quantity >= ?
            """,
            (quantity, iso(datetime.now(UTC)), item_id, tenant_id, quantity),
        )
        deducted = cursor.rowcount == 1
        logger.debug("stock_deducted", item_id=item_id, qty=quantity, applied=deducted)
        return deducted

    async def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append a ledger movement and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_movements (
                tenant_id, inventory_item_id, from_warehouse_id, from_location_id,
                movement_type, quantity, reference_type, reference_id,
                reason, performed_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.tenant_id,
                movement.inventory_item_id,
                movement.from_warehouse_id,
                movement.from_location_id,
                movement.movement_type.value,
                movement.quantity,
                movement.reference_type.value,
                movement.reference_id,
                movement.reason,
                movement.performed_by,
                iso(movement.created_at),
            ),
        )
        movement.id = cursor.lastrowid
        logger.info(
            "stock_movement_recorded",
            movement_id=movement.id,
            type=movement.movement_type.value,
            item_id=movement.inventory_item_id,
            qty=movement.quantity,
        )
        return movement

    async def get_movements(
        self, tenant_id: str, inventory_item_id: int, limit: int = 100, offset: int = 0
    ) -> list[StockMovement]:
        """Page through an item's movements, newest first."""
        rows = await self._fetchall(
            """
            SELECT * FROM stock_movements
            WHERE tenant_id = ? AND inventory_item_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (tenant_id, inventory_item_id, limit, offset),
        )
        return [self._row_to_movement(row) for row in rows]

    async def get_movements_for_reference(
        self, tenant_id: str, reference_type: str, reference_id: int
    ) -> list[StockMovement]:
        """Movements recorded against one document, oldest first."""
        rows = await self._fetchall(
            """
            SELECT * FROM stock_movements
            WHERE tenant_id = ? AND reference_type = ? AND reference_id = ?
            ORDER BY id
            """,
            (tenant_id, reference_type, reference_id),
        )
        return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> InventoryItem:
        return InventoryItem(
            id=row["id"],
            tenant_id=row["tenant_id"],
            sku=row["sku"],
            name=row["name"],
            part_number=row["part_number"],
            cost_price=row["cost_price"],
            sell_price=row["sell_price"],
            stock_quantity=row["stock_quantity"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_location(row: aiosqlite.Row) -> WarehouseLocation:
        return WarehouseLocation(
            id=row["id"],
            tenant_id=row["tenant_id"],
            warehouse_id=row["warehouse_id"],
            code=row["code"],
            name=row["name"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        return StockMovement(
            id=row["id"],
            tenant_id=row["tenant_id"],
            inventory_item_id=row["inventory_item_id"],
            from_warehouse_id=row["from_warehouse_id"],
            from_location_id=row["from_location_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity=row["quantity"],
            reference_type=ReferenceType(row["reference_type"]),
            reference_id=row["reference_id"],
            reason=row["reason"],
            performed_by=row["performed_by"],
            created_at=row["created_at"],
        )
