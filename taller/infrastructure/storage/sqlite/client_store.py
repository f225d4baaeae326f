"""SQLite implementation of client lookups."""

import aiosqlite

from taller.config import get_logger
from taller.core.entities.client import Client
from taller.core.interfaces.client_store import IClientStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


class SQLiteClientStore(SQLiteStore, IClientStore):
    """SQLite implementation of client storage."""

    async def get_client(self, tenant_id: str, client_id: int) -> Client | None:
        """Get a client by id within the tenant."""
        row = await self._fetchone(
            "SELECT * FROM clients WHERE id = ? AND tenant_id = ?",
            (client_id, tenant_id),
        )
        return self._row_to_client(row) if row else None

    async def create_client(self, client: Client) -> Client:
        """Insert a client and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO clients (
                tenant_id, name, tax_id, business_line,
                address, commune, city, email, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                client.tenant_id,
                client.name,
                client.tax_id,
                client.business_line,
                client.address,
                client.commune,
                client.city,
                client.email,
                iso(client.created_at),
            ),
        )
        client.id = cursor.lastrowid
        logger.info("client_created", client_id=client.id, tenant_id=client.tenant_id)
        return client

    @staticmethod
    def _row_to_client(row: aiosqlite.Row) -> Client:
        return Client(
            id=row["id"],
            tenant_id=row["tenant_id"],
            name=row["name"],
            tax_id=row["tax_id"],
            business_line=row["business_line"],
            address=row["address"],
            commune=row["commune"],
            city=row["city"],
            email=row["email"],
            created_at=row["created_at"],
        )
