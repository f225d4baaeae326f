"""Core interfaces (abstract stores and collaborators)."""

from taller.core.interfaces.client_store import IClientStore
from taller.core.interfaces.documents import IDocumentBuilder, IDocumentSubmitter
from taller.core.interfaces.folio_store import IFolioStore
from taller.core.interfaces.inventory_store import IInventoryStore
from taller.core.interfaces.invoice_store import IInvoiceStore
from taller.core.interfaces.notifier import INotifier
from taller.core.interfaces.quotation_store import IQuotationStore
from taller.core.interfaces.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from taller.core.interfaces.work_order_store import IWorkOrderStore

__all__ = [
    "IClientStore",
    "IQuotationStore",
    "IWorkOrderStore",
    "IInventoryStore",
    "IFolioStore",
    "IInvoiceStore",
    "IUnitOfWork",
    "UnitOfWorkFactory",
    "IDocumentBuilder",
    "IDocumentSubmitter",
    "INotifier",
]
