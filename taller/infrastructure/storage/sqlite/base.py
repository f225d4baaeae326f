"""Shared plumbing for the connection-bound SQLite stores."""

from datetime import date, datetime

import aiosqlite


def iso(value: date | datetime | None) -> str | None:
    """Format a date or datetime for storage as ISO text."""
    return value.isoformat() if value is not None else None


class SQLiteStore:
    """
    Base for stores that run on a connection owned by a unit of work.

    Stores never commit; the unit of work that lent them the connection does.
    """

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _fetchone(self, sql: str, params: tuple = ()) -> aiosqlite.Row | None:
        cursor = await self._conn.execute(sql, params)
        return await cursor.fetchone()

    async def _fetchall(self, sql: str, params: tuple = ()) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params)
        return list(await cursor.fetchall())
