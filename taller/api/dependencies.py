"""
Dependency injection container for FastAPI.

Provides request identity and use case instances to route handlers.
"""

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Header

from taller.application.use_cases import (
    ChangeQuotationStatusUseCase,
    CompleteWorkOrderUseCase,
    ConvertQuotationUseCase,
    DispatchPartsUseCase,
    GetCafStatusUseCase,
    GetPipelineStatusUseCase,
    GetWorkOrderReadinessUseCase,
    InvoiceWorkOrderUseCase,
    ListStockMovementsUseCase,
    UploadCafUseCase,
    ValidateInvoicingUseCase,
    ValidateQuotationUseCase,
)
from taller.config import Settings, bind_request_context, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


@dataclass(frozen=True)
class RequestContext:
    """Who is calling: the tenant scope and the acting user."""

    tenant_id: str
    actor: str


async def get_request_context(
    x_tenant_id: str = Header(..., min_length=1, description="Tenant the request acts on"),
    x_actor_id: str = Header(default="system", description="User performing the action"),
) -> RequestContext:
    """Identity comes from upstream headers; this service does not authenticate."""
    bind_request_context(tenant_id=x_tenant_id, actor=x_actor_id)
    return RequestContext(tenant_id=x_tenant_id, actor=x_actor_id)


# Quotation gate
def get_validate_quotation_use_case() -> ValidateQuotationUseCase:
    return ValidateQuotationUseCase()


def get_convert_quotation_use_case() -> ConvertQuotationUseCase:
    """Get convert quotation use case."""
    return ConvertQuotationUseCase()


def get_change_quotation_status_use_case() -> ChangeQuotationStatusUseCase:
    return ChangeQuotationStatusUseCase()


def get_pipeline_status_use_case() -> GetPipelineStatusUseCase:
    return GetPipelineStatusUseCase()


# Work orders
def get_dispatch_parts_use_case() -> DispatchPartsUseCase:
    """Get dispatch parts use case."""
    return DispatchPartsUseCase()


def get_complete_work_order_use_case() -> CompleteWorkOrderUseCase:
    return CompleteWorkOrderUseCase()


def get_readiness_use_case() -> GetWorkOrderReadinessUseCase:
    return GetWorkOrderReadinessUseCase()


def get_validate_invoicing_use_case() -> ValidateInvoicingUseCase:
    return ValidateInvoicingUseCase()


def get_invoice_work_order_use_case() -> InvoiceWorkOrderUseCase:
    """Get invoice work order use case."""
    return InvoiceWorkOrderUseCase()


# Folios
def get_upload_caf_use_case() -> UploadCafUseCase:
    return UploadCafUseCase()


def get_caf_status_use_case() -> GetCafStatusUseCase:
    return GetCafStatusUseCase()


# Inventory
def get_list_movements_use_case() -> ListStockMovementsUseCase:
    return ListStockMovementsUseCase()
