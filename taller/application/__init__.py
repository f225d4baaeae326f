"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates the pipeline by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that run the gates inside a unit of work
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from taller.application.services import (
    get_document_builder,
    get_folio_allocator,
    get_notifier,
    reset_services,
)
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

__all__ = [
    # Use Cases
    "ValidateQuotationUseCase",
    "ConvertQuotationUseCase",
    "ChangeQuotationStatusUseCase",
    "DispatchPartsUseCase",
    "CompleteWorkOrderUseCase",
    "GetWorkOrderReadinessUseCase",
    "ValidateInvoicingUseCase",
    "InvoiceWorkOrderUseCase",
    "UploadCafUseCase",
    "GetCafStatusUseCase",
    "GetPipelineStatusUseCase",
    "ListStockMovementsUseCase",
    # Service factories
    "get_document_builder",
    "get_notifier",
    "get_folio_allocator",
    "reset_services",
]
