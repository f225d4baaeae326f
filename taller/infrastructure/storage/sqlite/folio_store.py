"""SQLite implementation of CAF folio windows."""

import aiosqlite

from taller.config import get_logger
from taller.core.entities.folio import CafFolio
from taller.core.interfaces.folio_store import IFolioStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


class SQLiteFolioStore(SQLiteStore, IFolioStore):
    """CAF windows. Cursor moves are compare-and-set on ``current_folio``."""

    async def get_active_window(self, tenant_id: str, dte_type: int) -> CafFolio | None:
        """Get the lowest active, non-exhausted window for a tenant and document type."""
        row = await self._fetchone(
            """
            SELECT * FROM caf_folios
            WHERE tenant_id = ? AND dte_type = ? AND is_active = 1 AND is_exhausted = 0
            ORDER BY folio_from
            LIMIT 1
            """,
            (tenant_id, dte_type),
        )
        return self._row_to_window(row) if row else None

    async def advance_cursor(self, window: CafFolio, exhausted: bool) -> bool:
        """Move the cursor forward, or close the window, only if nobody moved it first."""
        if exhausted:
            sql = """
                UPDATE caf_folios SET is_exhausted = 1, is_active = 0
                WHERE id = ? AND current_folio = ? AND is_exhausted = 0
            """
        else:
            sql = """
                UPDATE caf_folios SET current_folio = current_folio + 1
                WHERE id = ? AND current_folio = ? AND is_exhausted = 0
            """
        cursor = await self._conn.execute(sql, (window.id, window.current_folio))
        if cursor.rowcount != 1:
            return False

        if exhausted:
            window.is_exhausted = True
            window.is_active = False
            logger.warning(
                "caf_window_exhausted",
                caf_id=window.id,
                dte_type=window.dte_type,
                folio_to=window.folio_to,
            )
        else:
            window.current_folio += 1
        return True

    async def create_window(self, window: CafFolio) -> CafFolio:
        """Insert a CAF window and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO caf_folios (
                tenant_id, dte_type, folio_from, folio_to, current_folio,
                expiration_date, caf_xml, is_active, is_exhausted, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                window.tenant_id,
                window.dte_type,
                window.folio_from,
                window.folio_to,
                window.current_folio,
                iso(window.expiration_date),
                window.caf_xml,
                int(window.is_active),
                int(window.is_exhausted),
                iso(window.created_at),
            ),
        )
        window.id = cursor.lastrowid
        logger.info(
            "caf_window_created",
            caf_id=window.id,
            dte_type=window.dte_type,
            folio_from=window.folio_from,
            folio_to=window.folio_to,
        )
        return window

    async def list_windows(self, tenant_id: str, dte_type: int | None = None) -> list[CafFolio]:
        """List a tenant's windows, optionally for one document type."""
        if dte_type is None:
            rows = await self._fetchall(
                "SELECT * FROM caf_folios WHERE tenant_id = ? ORDER BY dte_type, folio_from",
                (tenant_id,),
            )
        else:
            rows = await self._fetchall(
                "SELECT * FROM caf_folios WHERE tenant_id = ? AND dte_type = ? "
                "ORDER BY folio_from",
                (tenant_id, dte_type),
            )
        return [self._row_to_window(row) for row in rows]

    @staticmethod
    def _row_to_window(row: aiosqlite.Row) -> CafFolio:
        return CafFolio(
            id=row["id"],
            tenant_id=row["tenant_id"],
            dte_type=row["dte_type"],
            folio_from=row["folio_from"],
            folio_to=row["folio_to"],
            current_folio=row["current_folio"],
            expiration_date=row["expiration_date"],
            caf_xml=row["caf_xml"],
            is_active=bool(row["is_active"]),
            is_exhausted=bool(row["is_exhausted"]),
            created_at=row["created_at"],
        )
