"""Invoice (tax document) entities."""

from datetime import UTC, date, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field


class InvoiceStatus(str, Enum):
    """
    Invoice status as far as the pipeline is concerned.

    DRAFT means the folio is taken but no document was built yet.
    Later statuses (sent, accepted, voided) belong to downstream flows.
    """

    DRAFT = "draft"
    ISSUED = "issued"


class PaymentCondition(str, Enum):
    CONTADO = "contado"
    DAYS_30 = "30dias"
    DAYS_60 = "60dias"
    DAYS_90 = "90dias"

    @property
    def days(self) -> int:
        return {"contado": 0, "30dias": 30, "60dias": 60, "90dias": 90}[self.value]

    def due_date(self, issue_date: date) -> date:
        return issue_date + timedelta(days=self.days)


class InvoiceLine(BaseModel):
    """A priced line of an invoice."""

    line_number: int
    item_code: str | None = None
    name: str
    description: str | None = None
    quantity: float
    unit_measure: str = "UN"
    unit_price: float
    amount: float = 0.0
    is_exempt: bool = False
    inventory_item_id: int | None = None
    work_order_part_id: int | None = None


class InvoiceDraft(BaseModel):
    """Everything the document builder needs apart from the lines."""

    tenant_id: str
    dte_type: int
    folio: int
    issue_date: date = Field(default_factory=date.today)
    due_date: date | None = None
    payment_condition: PaymentCondition | None = None
    payment_method: str | None = None
    receptor_rut: str | None = None
    receptor_name: str | None = None
    receptor_business_line: str | None = None
    receptor_address: str | None = None
    receptor_commune: str | None = None
    receptor_city: str | None = None
    notes: str | None = None


class BuiltDocument(BaseModel):
    """Result of building a tax document: the payload and its totals."""

    content: str
    net_amount: float
    exempt_amount: float = 0.0
    tax_rate: float
    tax_amount: float
    total_amount: float


class Invoice(BaseModel):
    """A numbered tax document issued for a work order."""

    id: int | None = None
    tenant_id: str
    dte_type: int
    folio: int
    issue_date: date = Field(default_factory=date.today)
    due_date: date | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT

    receptor_rut: str | None = None
    receptor_name: str | None = None

    net_amount: float = 0.0
    exempt_amount: float = 0.0
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    total_amount: float = 0.0
    document: str | None = None

    payment_condition: PaymentCondition | None = None
    payment_method: str | None = None
    notes: str | None = None

    client_id: int | None = None
    work_order_id: int | None = None
    quotation_id: int | None = None
    created_by: str | None = None

    lines: list[InvoiceLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
