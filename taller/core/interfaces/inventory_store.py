"""Abstract interface for the inventory ledger."""

from abc import ABC, abstractmethod

from taller.core.entities.inventory import (
    InventoryItem,
    StockMovement,
    WarehouseLocation,
)


class IInventoryStore(ABC):
    """Interface for inventory items, locations and the movement ledger."""

    @abstractmethod
    async def create_item(self, item: InventoryItem) -> InventoryItem:
        """Create a new inventory item."""
        pass

    @abstractmethod
    async def get_item(self, tenant_id: str, item_id: int) -> InventoryItem | None:
        """Get inventory item by ID."""
        pass

    @abstractmethod
    async def get_items(self, tenant_id: str, item_ids: list[int]) -> dict[int, InventoryItem]:
        """Get several items at once, keyed by ID. Missing IDs are absent."""
        pass

    @abstractmethod
    async def create_location(self, location: WarehouseLocation) -> WarehouseLocation:
        """Create a warehouse location."""
        pass

    @abstractmethod
    async def get_locations(
        self, tenant_id: str, location_ids: list[int]
    ) -> dict[int, WarehouseLocation]:
        """Get several locations at once, keyed by ID."""
        pass

    @abstractmethod
    async def deduct_stock(self, tenant_id: str, item_id: int, quantity: float) -> bool:
        """
        Decrement stock if enough is on hand.

        Returns False (and changes nothing) when stock would go negative.
        """
        pass

    @abstractmethod
    async def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append a stock movement to the ledger."""
        pass

    @abstractmethod
    async def get_movements(
        self, tenant_id: str, inventory_item_id: int, limit: int = 100, offset: int = 0
    ) -> list[StockMovement]:
        """Get movements for an inventory item, newest first."""
        pass

    @abstractmethod
    async def get_movements_for_reference(
        self, tenant_id: str, reference_type: str, reference_id: int
    ) -> list[StockMovement]:
        """Get every movement caused by one document (e.g. a work order)."""
        pass
