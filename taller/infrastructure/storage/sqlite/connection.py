"""
Pooled aiosqlite connections for the pipeline database.

Connections are opened in autocommit mode and every transaction is started
explicitly. ``transaction(immediate=True)`` begins with ``BEGIN IMMEDIATE``,
taking the database write lock before the first read; the gates rely on this
to run their read-check-write sequences one writer at a time. A writer that
finds the lock taken waits up to ``busy_timeout`` milliseconds and then fails
with ``OperationalError("database is locked")``.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from taller.config import get_logger, get_settings

logger = get_logger(__name__)

# Applied to every pooled connection, busy_timeout is added per pool
CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Fixed set of connections to one SQLite file, handed out one caller at a time."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._opened: list[aiosqlite.Connection] = []
        self._ready = False
        self._guard = asyncio.Lock()

    async def initialize(self) -> None:
        """Open ``pool_size`` connections. Safe to call more than once."""
        async with self._guard:
            if self._ready:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._opened.append(conn)
                self._idle.put_nowait(conn)

            self._ready = True
            logger.info(
                "connection_pool_ready",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
                busy_timeout=self.busy_timeout,
            )

    async def _open(self) -> aiosqlite.Connection:
        """Open one connection with the pool pragmas applied."""
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)
        for pragma in (*CONNECTION_PRAGMAS, f"PRAGMA busy_timeout={self.busy_timeout}"):
            await conn.execute(pragma)
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool with no open transaction."""
        if not self._ready:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            if conn.in_transaction:
                await conn.rollback()
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside ``BEGIN`` / ``COMMIT``.

        Any exception, cancellation included, rolls the transaction back
        and propagates. With ``immediate`` the write lock is taken at BEGIN.
        """
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN DEFERRED")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def close(self) -> None:
        """Close every connection the pool opened; the next acquire reopens it."""
        async with self._guard:
            while self._opened:
                await self._opened.pop().close()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
            self._ready = False
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool built from the storage settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the shared pool, if one was opened."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
