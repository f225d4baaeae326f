"""Request DTOs for API endpoints.

Pydantic v2 models for request validation.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from taller.core.entities.folio import INVOICEABLE_DTE_TYPES, DteType
from taller.core.entities.invoice import PaymentCondition


class ConvertQuotationRequest(BaseModel):
    """Options for turning an approved quotation into a work order."""

    notes: str | None = Field(default=None, description="Extra notes for the work order")
    assigned_to: str | None = Field(default=None, description="Mechanic assigned to the job")
    type: str = Field(default="repair", description="Work order type")
    priority: Literal["low", "normal", "high", "urgent"] = Field(
        default="normal", description="Work order priority"
    )


class ChangeQuotationStatusRequest(BaseModel):
    """Send, approve or reject a quotation."""

    status: Literal["sent", "approved", "rejected"] = Field(
        ..., description="Target status"
    )


class DispatchLineRequest(BaseModel):
    """One line of a dispatch request."""

    inventory_item_id: int = Field(..., gt=0, description="Inventory item to take")
    quantity: float = Field(..., gt=0, description="Quantity to dispatch")
    warehouse_location_id: int = Field(..., gt=0, description="Location to take it from")


class DispatchPartsRequest(BaseModel):
    """Dispatch parts from stock against a work order."""

    lines: list[DispatchLineRequest] = Field(
        ..., min_length=1, description="Lines to dispatch; all or nothing"
    )
    notes: str | None = Field(default=None, description="Reason recorded on each movement")


class CompleteWorkOrderRequest(BaseModel):
    """Record labor and close the job."""

    labor_cost: float = Field(default=0.0, ge=0, description="Labor charged")
    actual_hours: float = Field(default=0.0, ge=0, description="Hours worked")
    notes: str | None = Field(default=None, description="Internal notes")


class InvoiceWorkOrderRequest(BaseModel):
    """Issue the tax document for a completed work order."""

    dte_type: int = Field(
        default=DteType.FACTURA.value,
        description="Document type: 33, 34, 39 or 41",
    )
    payment_condition: PaymentCondition | None = Field(
        default=None, description="contado, 30dias, 60dias or 90dias"
    )
    payment_method: str | None = Field(default=None, description="Payment method")
    notes: str | None = Field(default=None, description="Notes printed on the invoice")

    @field_validator("dte_type")
    @classmethod
    def check_dte_type(cls, v: int) -> int:
        if v not in {t.value for t in INVOICEABLE_DTE_TYPES}:
            allowed = ", ".join(str(t.value) for t in sorted(INVOICEABLE_DTE_TYPES))
            raise ValueError(f"dte_type must be one of {allowed}")
        return v


class UploadCafRequest(BaseModel):
    """Register a CAF (folio authorization) document."""

    caf_xml: str = Field(..., min_length=1, description="CAF XML as issued by the SII")
    dte_type: int | None = Field(
        default=None, description="Expected document type; checked against the CAF"
    )
