"""Fiscal folio authorization (CAF) entities."""

from datetime import UTC, date, datetime
from enum import IntEnum

from pydantic import BaseModel, Field, model_validator


class DteType(IntEnum):
    """Electronic tax document types."""

    FACTURA = 33
    FACTURA_EXENTA = 34
    BOLETA = 39
    BOLETA_EXENTA = 41
    GUIA_DESPACHO = 52
    NOTA_DEBITO = 56
    NOTA_CREDITO = 61

    @property
    def display_name(self) -> str:
        return _DTE_NAMES[self]

    @property
    def is_exempt(self) -> bool:
        return self in (DteType.FACTURA_EXENTA, DteType.BOLETA_EXENTA)


_DTE_NAMES = {
    DteType.FACTURA: "Factura Electronica",
    DteType.FACTURA_EXENTA: "Factura No Afecta o Exenta Electronica",
    DteType.BOLETA: "Boleta Electronica",
    DteType.BOLETA_EXENTA: "Boleta Exenta Electronica",
    DteType.GUIA_DESPACHO: "Guia de Despacho Electronica",
    DteType.NOTA_DEBITO: "Nota de Debito Electronica",
    DteType.NOTA_CREDITO: "Nota de Credito Electronica",
}

# Document types a work order may be invoiced with
INVOICEABLE_DTE_TYPES = frozenset(
    {DteType.FACTURA, DteType.FACTURA_EXENTA, DteType.BOLETA, DteType.BOLETA_EXENTA}
)


class CafFolio(BaseModel):
    """
    An authorized folio window for one document type.

    ``current_folio`` is the next number to issue. Once the last number is
    issued the window is marked exhausted and inactive, permanently.
    """

    id: int | None = None
    tenant_id: str
    dte_type: int
    folio_from: int = Field(gt=0)
    folio_to: int = Field(gt=0)
    current_folio: int = 0
    expiration_date: date | None = None
    caf_xml: str | None = None
    is_active: bool = True
    is_exhausted: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def default_cursor(self) -> "CafFolio":
        if not self.current_folio:
            self.current_folio = self.folio_from
        return self

    @property
    def total(self) -> int:
        return self.folio_to - self.folio_from + 1

    @property
    def used(self) -> int:
        if self.is_exhausted:
            return self.total
        return self.current_folio - self.folio_from

    @property
    def remaining(self) -> int:
        return self.total - self.used

    @property
    def percent_used(self) -> float:
        return round(self.used / self.total * 100, 2) if self.total else 100.0
