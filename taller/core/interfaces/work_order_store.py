"""Abstract interface for work order storage."""

from abc import ABC, abstractmethod

from taller.core.entities.work_order import WorkOrder, WorkOrderPart


class IWorkOrderStore(ABC):
    """Interface for work order and work order part persistence."""

    @abstractmethod
    async def create_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Create a work order together with its parts."""
        pass

    @abstractmethod
    async def get_work_order(self, tenant_id: str, work_order_id: int) -> WorkOrder | None:
        """Get work order by ID with its parts loaded."""
        pass

    @abstractmethod
    async def get_by_quotation(self, tenant_id: str, quotation_id: int) -> WorkOrder | None:
        """Get the work order created from a quotation."""
        pass

    @abstractmethod
    async def update_work_order(self, work_order: WorkOrder) -> WorkOrder:
        """Persist work order header fields (not parts)."""
        pass

    @abstractmethod
    async def add_part(self, part: WorkOrderPart) -> WorkOrderPart:
        """Insert a new part line."""
        pass

    @abstractmethod
    async def update_part(self, part: WorkOrderPart) -> WorkOrderPart:
        """Persist part number, quantity, price and dispatch fields of an existing part line."""
        pass

    @abstractmethod
    async def next_order_number(self, tenant_id: str) -> str:
        """Next sequential order number for the tenant (OT-000001)."""
        pass
