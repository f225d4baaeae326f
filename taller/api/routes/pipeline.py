"""Sales-to-cash pipeline endpoints: quotation gate, dispatch and invoicing."""

from fastapi import APIRouter, Depends, status

from taller.api.dependencies import (
    RequestContext,
    get_change_quotation_status_use_case,
    get_complete_work_order_use_case,
    get_convert_quotation_use_case,
    get_dispatch_parts_use_case,
    get_invoice_work_order_use_case,
    get_pipeline_status_use_case,
    get_readiness_use_case,
    get_request_context,
    get_validate_invoicing_use_case,
    get_validate_quotation_use_case,
)
from taller.application.dto.requests import (
    ChangeQuotationStatusRequest,
    CompleteWorkOrderRequest,
    ConvertQuotationRequest,
    DispatchPartsRequest,
    InvoiceWorkOrderRequest,
)
from taller.application.dto.responses import (
    ConvertQuotationResponse,
    DispatchPartsResponse,
    ErrorResponse,
    InvoiceWorkOrderResponse,
    PipelineStatusResponse,
    QuotationResponse,
    ValidationReportResponse,
    WorkOrderReadinessResponse,
    WorkOrderResponse,
)
from taller.application.use_cases import (
    ChangeQuotationStatusUseCase,
    CompleteWorkOrderUseCase,
    ConvertQuotationUseCase,
    DispatchPartsUseCase,
    GetPipelineStatusUseCase,
    GetWorkOrderReadinessUseCase,
    InvoiceWorkOrderUseCase,
    ValidateInvoicingUseCase,
    ValidateQuotationUseCase,
)

router = APIRouter(prefix="/api/pipeline", tags=["pipeline"])

_GATE_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# Quotations


@router.get(
    "/quotations/{quotation_id}/validation",
    response_model=ValidationReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def validate_quotation(
    quotation_id: int,
    ctx: RequestContext = Depends(get_request_context),
    use_case: ValidateQuotationUseCase = Depends(get_validate_quotation_use_case),
) -> ValidationReportResponse:
    """Dry run of the conversion checks. Changes nothing."""
    result = await use_case.execute(ctx.tenant_id, quotation_id)
    return use_case.to_response(result)


@router.post(
    "/quotations/{quotation_id}/convert",
    response_model=ConvertQuotationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_GATE_ERRORS,
)
async def convert_quotation(
    quotation_id: int,
    request: ConvertQuotationRequest | None = None,
    ctx: RequestContext = Depends(get_request_context),
    use_case: ConvertQuotationUseCase = Depends(get_convert_quotation_use_case),
) -> ConvertQuotationResponse:
    """Convert an approved quotation into a work order (once)."""
    result = await use_case.execute(ctx.tenant_id, quotation_id, ctx.actor, request)
    return use_case.to_response(result)


@router.post(
    "/quotations/{quotation_id}/status",
    response_model=QuotationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def change_quotation_status(
    quotation_id: int,
    request: ChangeQuotationStatusRequest,
    ctx: RequestContext = Depends(get_request_context),
    use_case: ChangeQuotationStatusUseCase = Depends(get_change_quotation_status_use_case),
) -> QuotationResponse:
    """Send, approve or reject a quotation."""
    result = await use_case.execute(ctx.tenant_id, quotation_id, ctx.actor, request)
    return use_case.to_response(result)


@router.get(
    "/quotations/{quotation_id}/status",
    response_model=PipelineStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pipeline_status(
    quotation_id: int,
    ctx: RequestContext = Depends(get_request_context),
    use_case: GetPipelineStatusUseCase = Depends(get_pipeline_status_use_case),
) -> PipelineStatusResponse:
    """Stage of the quotation and its linked work order and invoice."""
    result = await use_case.execute(ctx.tenant_id, quotation_id)
    return use_case.to_response(result)


# Work orders


@router.post(
    "/work-orders/{work_order_id}/dispatch",
    response_model=DispatchPartsResponse,
    responses=_GATE_ERRORS,
)
async def dispatch_parts(
    work_order_id: int,
    request: DispatchPartsRequest,
    ctx: RequestContext = Depends(get_request_context),
    use_case: DispatchPartsUseCase = Depends(get_dispatch_parts_use_case),
) -> DispatchPartsResponse:
    """Deduct stock for the requested lines; all of them or none."""
    result = await use_case.execute(ctx.tenant_id, work_order_id, ctx.actor, request)
    return use_case.to_response(result)


@router.post(
    "/work-orders/{work_order_id}/complete",
    response_model=WorkOrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def complete_work_order(
    work_order_id: int,
    request: CompleteWorkOrderRequest | None = None,
    ctx: RequestContext = Depends(get_request_context),
    use_case: CompleteWorkOrderUseCase = Depends(get_complete_work_order_use_case),
) -> WorkOrderResponse:
    result = await use_case.execute(
        ctx.tenant_id, work_order_id, ctx.actor, request or CompleteWorkOrderRequest()
    )
    return use_case.to_response(result)


@router.get(
    "/work-orders/{work_order_id}/readiness",
    response_model=WorkOrderReadinessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_readiness(
    work_order_id: int,
    ctx: RequestContext = Depends(get_request_context),
    use_case: GetWorkOrderReadinessUseCase = Depends(get_readiness_use_case),
) -> WorkOrderReadinessResponse:
    result = await use_case.execute(ctx.tenant_id, work_order_id)
    return use_case.to_response(result)


@router.get(
    "/work-orders/{work_order_id}/invoice-validation",
    response_model=ValidationReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def validate_invoicing(
    work_order_id: int,
    ctx: RequestContext = Depends(get_request_context),
    use_case: ValidateInvoicingUseCase = Depends(get_validate_invoicing_use_case),
) -> ValidationReportResponse:
    """Dry run of the invoicing checks. Changes nothing."""
    result = await use_case.execute(ctx.tenant_id, work_order_id)
    return use_case.to_response(result)


@router.post(
    "/work-orders/{work_order_id}/invoice",
    response_model=InvoiceWorkOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_GATE_ERRORS,
)
async def invoice_work_order(
    work_order_id: int,
    request: InvoiceWorkOrderRequest | None = None,
    ctx: RequestContext = Depends(get_request_context),
    use_case: InvoiceWorkOrderUseCase = Depends(get_invoice_work_order_use_case),
) -> InvoiceWorkOrderResponse:
    """Allocate a folio and issue the tax document for a completed work order."""
    result = await use_case.execute(ctx.tenant_id, work_order_id, ctx.actor, request)
    return use_case.to_response(result)
