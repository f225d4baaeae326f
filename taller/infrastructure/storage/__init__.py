"""Storage infrastructure implementations."""

from taller.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteUnitOfWorkFactory,
    close_pool,
    get_pool,
    get_uow_factory,
)

__all__ = [
    "ConnectionPool",
    "SQLiteUnitOfWorkFactory",
    "get_pool",
    "close_pool",
    "get_uow_factory",
]
