"""SQLite storage implementations."""

from taller.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from taller.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from taller.infrastructure.storage.sqlite.folio_store import SQLiteFolioStore
from taller.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from taller.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from taller.infrastructure.storage.sqlite.quotation_store import SQLiteQuotationStore
from taller.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteUnitOfWork,
    SQLiteUnitOfWorkFactory,
)
from taller.infrastructure.storage.sqlite.work_order_store import SQLiteWorkOrderStore

# Singleton factory bound to the global pool
_uow_factory: SQLiteUnitOfWorkFactory | None = None


async def get_uow_factory() -> SQLiteUnitOfWorkFactory:
    """Get singleton unit of work factory on the global pool."""
    global _uow_factory
    if _uow_factory is None:
        _uow_factory = SQLiteUnitOfWorkFactory(await get_pool())
    return _uow_factory


def reset_uow_factory() -> None:
    """Drop the singleton factory (after the pool is closed)."""
    global _uow_factory
    _uow_factory = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # Unit of work
    "SQLiteUnitOfWork",
    "SQLiteUnitOfWorkFactory",
    "get_uow_factory",
    "reset_uow_factory",
    # Store classes
    "SQLiteClientStore",
    "SQLiteQuotationStore",
    "SQLiteWorkOrderStore",
    "SQLiteInventoryStore",
    "SQLiteFolioStore",
    "SQLiteInvoiceStore",
]
