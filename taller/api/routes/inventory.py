"""Inventory ledger endpoints."""

from fastapi import APIRouter, Depends, Query

from taller.api.dependencies import (
    RequestContext,
    get_list_movements_use_case,
    get_request_context,
)
from taller.application.dto.responses import ErrorResponse, StockMovementResponse
from taller.application.use_cases import ListStockMovementsUseCase

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get(
    "/{item_id}/movements",
    response_model=list[StockMovementResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_movements(
    item_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    use_case: ListStockMovementsUseCase = Depends(get_list_movements_use_case),
) -> list[StockMovementResponse]:
    """Get stock movements for an inventory item, newest first."""
    result = await use_case.execute(ctx.tenant_id, item_id, limit=limit, offset=offset)
    return use_case.to_response(result)
