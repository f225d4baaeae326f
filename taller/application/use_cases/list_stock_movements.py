"""List the ledger movements of an inventory item."""

from taller.application.dto.responses import StockMovementResponse
from taller.application.use_cases.base import PipelineUseCase
from taller.core.entities.inventory import StockMovement
from taller.core.exceptions import NotFoundError


class ListStockMovementsUseCase(PipelineUseCase):
    async def execute(
        self,
        tenant_id: str,
        item_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> list[StockMovement]:
        factory = await self._get_uow_factory()
        async with factory(lock=False) as uow:
            if await uow.inventory.get_item(tenant_id, item_id) is None:
                raise NotFoundError("inventory_item", item_id)
            return await uow.inventory.get_movements(tenant_id, item_id, limit=limit, offset=offset)

    def to_response(self, result: list[StockMovement]) -> list[StockMovementResponse]:
        return [StockMovementResponse.from_entity(m) for m in result]
