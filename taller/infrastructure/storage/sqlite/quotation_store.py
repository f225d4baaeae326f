"""SQLite implementation of quotation storage."""

import json
from datetime import UTC, datetime

import aiosqlite

from taller.config import get_logger
from taller.core.entities.pipeline import PipelineStage, QuotationStatus
from taller.core.entities.quotation import Quotation, QuotationItem
from taller.core.interfaces.quotation_store import IQuotationStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


class SQLiteQuotationStore(SQLiteStore, IQuotationStore):
    """Quotations with their items serialized as JSON."""

    async def create_quotation(self, quotation: Quotation) -> Quotation:
        """Insert a quotation with its items and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO quotations (
                tenant_id, quote_number, client_id, vehicle_id, items_json,
                subtotal, tax, total, notes, status, pipeline_stage,
                work_order_id, invoice_id, converted_at, converted_by,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                quotation.tenant_id,
                quotation.quote_number,
                quotation.client_id,
                quotation.vehicle_id,
                json.dumps([item.model_dump() for item in quotation.items]),
                quotation.subtotal,
                quotation.tax,
                quotation.total,
                quotation.notes,
                quotation.status.value,
                quotation.pipeline_stage.value,
                quotation.work_order_id,
                quotation.invoice_id,
                iso(quotation.converted_at),
                quotation.converted_by,
                iso(quotation.created_at),
                iso(quotation.updated_at),
            ),
        )
        quotation.id = cursor.lastrowid
        logger.info(
            "quotation_created",
            quotation_id=quotation.id,
            quote_number=quotation.quote_number,
            items=len(quotation.items),
        )
        return quotation

    async def get_quotation(self, tenant_id: str, quotation_id: int) -> Quotation | None:
        """Get a quotation and its items by id within the tenant."""
        row = await self._fetchone(
            "SELECT * FROM quotations WHERE id = ? AND tenant_id = ?",
            (quotation_id, tenant_id),
        )
        return self._row_to_quotation(row) if row else None

    async def update_quotation(self, quotation: Quotation) -> Quotation:
        """Persist status, stage and conversion links of a quotation."""
        quotation.updated_at = datetime.now(UTC)
        await self._conn.execute(
            """
            UPDATE quotations SET
                status = ?,
                pipeline_stage = ?,
                work_order_id = ?,
                invoice_id = ?,
                converted_at = ?,
                converted_by = ?,
                updated_at = ?
            WHERE id = ? AND tenant_id = ?
            """,
            (
                quotation.status.value,
                quotation.pipeline_stage.value,
                quotation.work_order_id,
                quotation.invoice_id,
                iso(quotation.converted_at),
                quotation.converted_by,
                iso(quotation.updated_at),
                quotation.id,
                quotation.tenant_id,
            ),
        )
        logger.info(
            "quotation_updated",
            quotation_id=quotation.id,
            status=quotation.status.value,
            stage=quotation.pipeline_stage.value,
        )
        return quotation

    @staticmethod
    def _row_to_quotation(row: aiosqlite.Row) -> Quotation:
        items = [QuotationItem(**item) for item in json.loads(row["items_json"] or "[]")]
        return Quotation(
            id=row["id"],
            tenant_id=row["tenant_id"],
            quote_number=row["quote_number"],
            client_id=row["client_id"],
            vehicle_id=row["vehicle_id"],
            items=items,
            subtotal=row["subtotal"],
            tax=row["tax"],
            total=row["total"],
            notes=row["notes"],
            status=QuotationStatus(row["status"]),
            pipeline_stage=PipelineStage(row["pipeline_stage"]),
            work_order_id=row["work_order_id"],
            invoice_id=row["invoice_id"],
            converted_at=row["converted_at"],
            converted_by=row["converted_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
