"""Abstract unit of work spanning every pipeline store."""

from abc import ABC, abstractmethod
from typing import Callable

from taller.core.interfaces.client_store import IClientStore
from taller.core.interfaces.folio_store import IFolioStore
from taller.core.interfaces.inventory_store import IInventoryStore
from taller.core.interfaces.invoice_store import IInvoiceStore
from taller.core.interfaces.quotation_store import IQuotationStore
from taller.core.interfaces.work_order_store import IWorkOrderStore


class IUnitOfWork(ABC):
    """
    One database transaction with the stores bound to it.

    Used as ``async with factory() as uow``. Leaving the block normally
    commits; leaving it with an exception rolls everything back.
    A locking unit of work holds the write lock from its first statement, so
    reads made inside it cannot be invalidated by another writer.
    """

    clients: IClientStore
    quotations: IQuotationStore
    work_orders: IWorkOrderStore
    inventory: IInventoryStore
    folios: IFolioStore
    invoices: IInvoiceStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> bool | None:
        pass


# Factory signature: factory(lock=True) -> IUnitOfWork
UnitOfWorkFactory = Callable[..., IUnitOfWork]
