"""Complete Work Order Use Case: record labor and close the job."""

from datetime import UTC, datetime

from taller.application.dto.requests import CompleteWorkOrderRequest
from taller.application.dto.responses import WorkOrderResponse
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.pipeline import WorkOrderStatus
from taller.core.entities.work_order import WorkOrder
from taller.core.exceptions import NotFoundError

logger = get_logger(__name__)


class CompleteWorkOrderUseCase(PipelineUseCase):
    """Move an in-progress work order to completed with its labor figures."""

    async def execute(
        self,
        tenant_id: str,
        work_order_id: int,
        actor: str,
        request: CompleteWorkOrderRequest,
    ) -> WorkOrder:
        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            work_order = await uow.work_orders.get_work_order(tenant_id, work_order_id)
            if work_order is None:
                raise NotFoundError("work_order", work_order_id)

            work_order.change_status(WorkOrderStatus.COMPLETED)
            work_order.completed_at = datetime.now(UTC)
            if request.labor_cost:
                work_order.labor_cost = request.labor_cost
            if request.actual_hours:
                work_order.actual_hours = request.actual_hours
            if request.notes:
                work_order.internal_notes = request.notes
            work_order.recompute_costs()
            await uow.work_orders.update_work_order(work_order)

        logger.info(
            "work_order_completed",
            work_order_id=work_order_id,
            labor_cost=work_order.labor_cost,
            total_cost=work_order.total_cost,
            actor=actor,
        )
        await self._publish(
            "work_order_completed",
            {"tenant_id": tenant_id, "work_order_id": work_order_id, "actor": actor},
        )
        return work_order

    def to_response(self, result: WorkOrder) -> WorkOrderResponse:
        return WorkOrderResponse.from_entity(result)
