"""Application use cases."""

from taller.application.use_cases.change_quotation_status import ChangeQuotationStatusUseCase
from taller.application.use_cases.complete_work_order import CompleteWorkOrderUseCase
from taller.application.use_cases.convert_quotation import (
    ConvertQuotationResult,
    ConvertQuotationUseCase,
)
from taller.application.use_cases.dispatch_parts import DispatchPartsResult, DispatchPartsUseCase
from taller.application.use_cases.invoice_work_order import (
    InvoiceWorkOrderResult,
    InvoiceWorkOrderUseCase,
)
from taller.application.use_cases.list_stock_movements import ListStockMovementsUseCase
from taller.application.use_cases.manage_caf import (
    GetCafStatusUseCase,
    ParsedCaf,
    UploadCafUseCase,
    parse_caf,
)
from taller.application.use_cases.pipeline_status import GetPipelineStatusUseCase, PipelineStatus
from taller.application.use_cases.validate_quotation import (
    ValidateQuotationUseCase,
    ValidationReport,
)
from taller.application.use_cases.work_order_readiness import (
    GetWorkOrderReadinessUseCase,
    ValidateInvoicingUseCase,
)

__all__ = [
    # Quotation gate
    "ValidateQuotationUseCase",
    "ConvertQuotationUseCase",
    "ConvertQuotationResult",
    "ChangeQuotationStatusUseCase",
    "ValidationReport",
    # Dispatch
    "DispatchPartsUseCase",
    "DispatchPartsResult",
    "CompleteWorkOrderUseCase",
    "ListStockMovementsUseCase",
    # Invoicing
    "GetWorkOrderReadinessUseCase",
    "ValidateInvoicingUseCase",
    "InvoiceWorkOrderUseCase",
    "InvoiceWorkOrderResult",
    # Folios
    "UploadCafUseCase",
    "GetCafStatusUseCase",
    "ParsedCaf",
    "parse_caf",
    # Status
    "GetPipelineStatusUseCase",
    "PipelineStatus",
]
