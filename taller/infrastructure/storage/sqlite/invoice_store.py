"""SQLite implementation of invoice storage."""

import aiosqlite

from taller.config import get_logger
from taller.core.entities.invoice import Invoice, InvoiceLine, InvoiceStatus
from taller.core.interfaces.invoice_store import IInvoiceStore
from taller.infrastructure.storage.sqlite.base import SQLiteStore, iso

logger = get_logger(__name__)


class SQLiteInvoiceStore(SQLiteStore, IInvoiceStore):
    """Invoices and their lines."""

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Insert an invoice with its lines and set its id."""
        cursor = await self._conn.execute(
            """
            INSERT INTO invoices (
                tenant_id, dte_type, folio, issue_date, due_date, status,
                receptor_rut, receptor_name, net_amount, exempt_amount,
                tax_rate, tax_amount, total_amount, document,
                payment_condition, payment_method, notes,
                client_id, work_order_id, quotation_id, created_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                invoice.tenant_id,
                invoice.dte_type,
                invoice.folio,
                iso(invoice.issue_date),
                iso(invoice.due_date),
                invoice.status.value,
                invoice.receptor_rut,
                invoice.receptor_name,
                invoice.net_amount,
                invoice.exempt_amount,
                invoice.tax_rate,
                invoice.tax_amount,
                invoice.total_amount,
                invoice.document,
                invoice.payment_condition.value if invoice.payment_condition else None,
                invoice.payment_method,
                invoice.notes,
                invoice.client_id,
                invoice.work_order_id,
                invoice.quotation_id,
                invoice.created_by,
                iso(invoice.created_at),
            ),
        )
        invoice.id = cursor.lastrowid

        for line in invoice.lines:
            await self._conn.execute(
                """
                INSERT INTO invoice_lines (
                    invoice_id, line_number, item_code, name, description,
                    quantity, unit_measure, unit_price, amount, is_exempt,
                    inventory_item_id, work_order_part_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.id,
                    line.line_number,
                    line.item_code,
                    line.name,
                    line.description,
                    line.quantity,
                    line.unit_measure,
                    line.unit_price,
                    line.amount,
                    int(line.is_exempt),
                    line.inventory_item_id,
                    line.work_order_part_id,
                ),
            )

        logger.info(
            "invoice_created",
            invoice_id=invoice.id,
            dte_type=invoice.dte_type,
            folio=invoice.folio,
            status=invoice.status.value,
            total=invoice.total_amount,
        )
        return invoice

    async def get_invoice(self, tenant_id: str, invoice_id: int) -> Invoice | None:
        """Get an invoice and its lines by id within the tenant."""
        row = await self._fetchone(
            "SELECT * FROM invoices WHERE id = ? AND tenant_id = ?",
            (invoice_id, tenant_id),
        )
        return await self._load(row) if row else None

    async def get_by_folio(self, tenant_id: str, dte_type: int, folio: int) -> Invoice | None:
        """Get the invoice issued under a document type and folio."""
        row = await self._fetchone(
            "SELECT * FROM invoices WHERE tenant_id = ? AND dte_type = ? AND folio = ?",
            (tenant_id, dte_type, folio),
        )
        return await self._load(row) if row else None

    async def _load(self, row: aiosqlite.Row) -> Invoice:
        line_rows = await self._fetchall(
            "SELECT * FROM invoice_lines WHERE invoice_id = ? ORDER BY line_number",
            (row["id"],),
        )
        invoice = self._row_to_invoice(row)
        invoice.lines = [self._row_to_line(r) for r in line_rows]
        return invoice

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
        return Invoice(
            id=row["id"],
            tenant_id=row["tenant_id"],
            dte_type=row["dte_type"],
            folio=row["folio"],
            issue_date=row["issue_date"],
            due_date=row["due_date"],
            status=InvoiceStatus(row["status"]),
            receptor_rut=row["receptor_rut"],
            receptor_name=row["receptor_name"],
            net_amount=row["net_amount"],
            exempt_amount=row["exempt_amount"],
            tax_rate=row["tax_rate"],
            tax_amount=row["tax_amount"],
            total_amount=row["total_amount"],
            document=row["document"],
            payment_condition=row["payment_condition"],
            payment_method=row["payment_method"],
            notes=row["notes"],
            client_id=row["client_id"],
            work_order_id=row["work_order_id"],
            quotation_id=row["quotation_id"],
            created_by=row["created_by"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_line(row: aiosqlite.Row) -> InvoiceLine:
        return InvoiceLine(
            line_number=row["line_number"],
            item_code=row["item_code"],
            name=row["name"],
            description=row["description"],
            quantity=row["quantity"],
            unit_measure=row["unit_measure"],
            unit_price=row["unit_price"],
            amount=row["amount"],
            is_exempt=bool(row["is_exempt"]),
            inventory_item_id=row["inventory_item_id"],
            work_order_part_id=row["work_order_part_id"],
        )
