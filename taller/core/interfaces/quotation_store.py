"""Abstract interface for quotation storage."""

from abc import ABC, abstractmethod

from taller.core.entities.quotation import Quotation


class IQuotationStore(ABC):
    """Interface for quotation persistence."""

    @abstractmethod
    async def create_quotation(self, quotation: Quotation) -> Quotation:
        """Create a quotation with its items."""
        pass

    @abstractmethod
    async def get_quotation(self, tenant_id: str, quotation_id: int) -> Quotation | None:
        """Get quotation by ID within the tenant."""
        pass

    @abstractmethod
    async def update_quotation(self, quotation: Quotation) -> Quotation:
        """Persist status, stage and back-references of a quotation."""
        pass
