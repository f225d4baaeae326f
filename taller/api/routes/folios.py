"""CAF folio window endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from taller.api.dependencies import (
    RequestContext,
    get_app_settings,
    get_caf_status_use_case,
    get_request_context,
    get_upload_caf_use_case,
)
from taller.application.dto.requests import UploadCafRequest
from taller.application.dto.responses import (
    CafStatusResponse,
    CafWindowResponse,
    ErrorResponse,
)
from taller.application.use_cases import GetCafStatusUseCase, UploadCafUseCase
from taller.config import Settings

router = APIRouter(prefix="/api/folios", tags=["folios"])


@router.post(
    "/caf",
    response_model=CafWindowResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def upload_caf(
    request: UploadCafRequest,
    ctx: RequestContext = Depends(get_request_context),
    settings: Settings = Depends(get_app_settings),
    use_case: UploadCafUseCase = Depends(get_upload_caf_use_case),
) -> CafWindowResponse:
    """Register a CAF authorization as a new folio window."""
    if len(request.caf_xml.encode()) > settings.api.max_caf_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CAF document exceeds {settings.api.max_caf_size} bytes",
        )
    result = await use_case.execute(ctx.tenant_id, ctx.actor, request)
    return use_case.to_response(result)


@router.get("/caf", response_model=CafStatusResponse)
async def get_caf_status(
    dte_type: int | None = Query(default=None, description="Only this document type"),
    ctx: RequestContext = Depends(get_request_context),
    use_case: GetCafStatusUseCase = Depends(get_caf_status_use_case),
) -> CafStatusResponse:
    """Usage of every folio window of the tenant."""
    result = await use_case.execute(ctx.tenant_id, dte_type)
    return use_case.to_response(result)
