"""Abstract interface for invoice storage."""

from abc import ABC, abstractmethod

from taller.core.entities.invoice import Invoice


class IInvoiceStore(ABC):
    """Interface for invoice persistence."""

    @abstractmethod
    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Insert an invoice with its lines."""
        pass

    @abstractmethod
    async def get_invoice(self, tenant_id: str, invoice_id: int) -> Invoice | None:
        """Get invoice by ID."""
        pass

    @abstractmethod
    async def get_by_folio(self, tenant_id: str, dte_type: int, folio: int) -> Invoice | None:
        """Get invoice by its document type and folio."""
        pass
