"""
SQLite unit of work.

Binds one pooled connection, one transaction and a fresh set of stores.
A locking unit of work opens with ``BEGIN IMMEDIATE``: the write lock is
held while the gate reads, validates and writes, which closes the
check-then-act window on stock rows and folio cursors.
"""

from contextlib import AsyncExitStack

import aiosqlite

from taller.config import get_logger
from taller.core.exceptions import TransactionFailedError
from taller.core.interfaces.unit_of_work import IUnitOfWork
from taller.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from taller.infrastructure.storage.sqlite.connection import ConnectionPool
from taller.infrastructure.storage.sqlite.folio_store import SQLiteFolioStore
from taller.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from taller.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from taller.infrastructure.storage.sqlite.quotation_store import SQLiteQuotationStore
from taller.infrastructure.storage.sqlite.work_order_store import SQLiteWorkOrderStore

logger = get_logger(__name__)


class SQLiteUnitOfWork(IUnitOfWork):
    """Transaction scope over the pipeline tables."""

    def __init__(self, pool: ConnectionPool, lock: bool = True):
        self._pool = pool
        self._lock = lock
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        """Acquire a connection and begin the transaction."""
        stack = AsyncExitStack()
        try:
            conn = await stack.enter_async_context(
                self._pool.transaction(immediate=self._lock)
            )
        except aiosqlite.Error as e:
            await stack.aclose()
            logger.error("transaction_begin_failed", error=str(e))
            raise TransactionFailedError("begin", str(e)) from e

        self._stack = stack
        self.clients = SQLiteClientStore(conn)
        self.quotations = SQLiteQuotationStore(conn)
        self.work_orders = SQLiteWorkOrderStore(conn)
        self.inventory = SQLiteInventoryStore(conn)
        self.folios = SQLiteFolioStore(conn)
        self.invoices = SQLiteInvoiceStore(conn)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        """Commit on success, roll back on error and release the connection."""
        stack, self._stack = self._stack, None
        try:
            await stack.__aexit__(exc_type, exc, tb)
        except aiosqlite.Error as e:
            # Commit or rollback itself failed; nothing was kept
            logger.error("transaction_failed", stage="finish", error=str(e))
            raise TransactionFailedError("commit", str(e)) from e

        if isinstance(exc, aiosqlite.Error):
            logger.error("transaction_rolled_back", error=str(exc))
            raise TransactionFailedError("transaction", str(exc)) from exc
        return False


class SQLiteUnitOfWorkFactory:
    """Callable producing units of work on a shared pool."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    def __call__(self, lock: bool = True) -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(self._pool, lock=lock)
