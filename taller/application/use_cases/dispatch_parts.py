"""
Dispatch Parts Use Case.

Takes parts out of stock for a work order. Validation and commit happen
inside one immediate transaction: either every requested line is deducted,
recorded in the ledger and flagged on the work order, or nothing is.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from taller.application.dto.requests import DispatchPartsRequest
from taller.application.dto.responses import (
    DispatchPartsResponse,
    StockMovementResponse,
    WorkOrderPartResponse,
    WorkOrderResponse,
)
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.inventory import MovementType, ReferenceType, StockMovement
from taller.core.entities.pipeline import DISPATCHABLE_STATUSES, PipelineStage, WorkOrderStatus
from taller.core.entities.work_order import WorkOrder, WorkOrderPart
from taller.core.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    TransactionFailedError,
    ValidationFailedError,
)
from taller.core.interfaces.unit_of_work import IUnitOfWork
from taller.core.services.dispatch_planner import DispatchLine, PlannedLine, plan_dispatch

logger = get_logger(__name__)


@dataclass
class DispatchPartsResult:
    work_order: WorkOrder
    movements: list[StockMovement] = field(default_factory=list)
    dispatched_parts: list[WorkOrderPart] = field(default_factory=list)


class DispatchPartsUseCase(PipelineUseCase):
    """Deduct stock for a work order's parts, all lines or none."""

    async def execute(
        self,
        tenant_id: str,
        work_order_id: int,
        actor: str,
        request: DispatchPartsRequest,
    ) -> DispatchPartsResult:
        lines = [
            DispatchLine(
                inventory_item_id=line.inventory_item_id,
                quantity=line.quantity,
                warehouse_location_id=line.warehouse_location_id,
            )
            for line in request.lines
        ]
        logger.info(
            "dispatch_parts_started",
            work_order_id=work_order_id,
            lines=len(lines),
            actor=actor,
        )

        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            work_order = await uow.work_orders.get_work_order(tenant_id, work_order_id)
            if work_order is None:
                raise NotFoundError("work_order", work_order_id)
            self._check_dispatchable(work_order)

            items = await uow.inventory.get_items(
                tenant_id, sorted({line.inventory_item_id for line in lines})
            )
            locations = await uow.inventory.get_locations(
                tenant_id, sorted({line.warehouse_location_id for line in lines})
            )

            plan = plan_dispatch(lines, items, locations)
            if not plan.ok:
                logger.warning(
                    "dispatch_parts_rejected",
                    work_order_id=work_order_id,
                    errors=len(plan.errors),
                    shortfalls=len(plan.shortfalls),
                )
                shortfalls = [s.to_dict() for s in plan.shortfalls]
                if plan.only_stock_shortfalls:
                    raise InsufficientStockError(plan.errors, shortfalls)
                raise ValidationFailedError("dispatch", plan.errors, shortfalls=shortfalls)

            now = datetime.now(UTC)
            movements: list[StockMovement] = []
            dispatched: list[WorkOrderPart] = []
            for planned in plan.lines:
                movement, parts = await self._commit_line(
                    uow, work_order, planned, actor, request.notes, now
                )
                movements.append(movement)
                dispatched.extend(parts)

            work_order.recompute_costs()
            work_order.parts_dispatched = True
            work_order.dispatched_at = now
            work_order.dispatched_by = actor
            work_order.advance_stage(PipelineStage.DISPATCHED)
            if work_order.status == WorkOrderStatus.PENDING:
                work_order.change_status(WorkOrderStatus.IN_PROGRESS)
                work_order.started_at = now
            await uow.work_orders.update_work_order(work_order)

            if work_order.quotation_id is not None:
                quotation = await uow.quotations.get_quotation(tenant_id, work_order.quotation_id)
                if quotation is not None and quotation.pipeline_stage != PipelineStage.DISPATCHED:
                    quotation.advance_stage(PipelineStage.DISPATCHED)
                    await uow.quotations.update_quotation(quotation)

        logger.info(
            "dispatch_parts_complete",
            work_order_id=work_order_id,
            movements=len(movements),
            parts_cost=work_order.parts_cost,
        )
        await self._publish(
            "parts_dispatched",
            {
                "tenant_id": tenant_id,
                "work_order_id": work_order_id,
                "movement_ids": [m.id for m in movements],
                "actor": actor,
            },
        )
        return DispatchPartsResult(
            work_order=work_order, movements=movements, dispatched_parts=dispatched
        )

    @staticmethod
    def _check_dispatchable(work_order: WorkOrder) -> None:
        """Reject work orders that are invoiced or past the dispatch window."""
        if work_order.invoice_id is not None or work_order.status not in DISPATCHABLE_STATUSES:
            raise InvalidStateError(
                "work_order",
                work_order.status.value,
                message=f"Parts cannot be dispatched for a work order in status "
                f"'{work_order.status.value}'",
            )

    async def _commit_line(
        self,
        uow: IUnitOfWork,
        work_order: WorkOrder,
        planned: PlannedLine,
        actor: str,
        notes: str | None,
        now: datetime,
    ) -> tuple[StockMovement, list[WorkOrderPart]]:
        """Deduct one line's stock, record the movement and flag the parts it covers."""
        line, item = planned.line, planned.item

        # Guarded decrement; the plan already proved the stock is there
        if not await uow.inventory.deduct_stock(work_order.tenant_id, item.id, line.quantity):
            raise TransactionFailedError(
                "dispatch", f"stock for item {item.id} changed during dispatch"
            )
        item.stock_quantity -= line.quantity

        movement = await uow.inventory.add_movement(
            StockMovement(
                tenant_id=work_order.tenant_id,
                inventory_item_id=item.id,
                from_warehouse_id=planned.location.warehouse_id,
                from_location_id=planned.location.id,
                movement_type=MovementType.DISPATCH,
                quantity=line.quantity,
                reference_type=ReferenceType.WORK_ORDER,
                reference_id=work_order.id,
                reason=notes or f"Dispatch for work order {work_order.order_number}",
                performed_by=actor,
                created_at=now,
            )
        )

        # Pending parts for the item are consumed first, at their quoted price
        covered: list[WorkOrderPart] = []
        remaining = line.quantity
        pending = [
            p
            for p in work_order.parts
            if not p.is_dispatched and p.inventory_item_id == item.id
        ]
        for part in pending:
            if remaining <= 0:
                break
            if part.quantity > remaining:
                await self._split_part(uow, work_order, part, remaining)
            remaining -= part.quantity
            covered.append(part)

        if remaining > 0:
            extra = WorkOrderPart(
                work_order_id=work_order.id,
                name=item.name,
                part_number=item.part_number,
                quantity=remaining,
                unit_price=item.sell_price,
                inventory_item_id=item.id,
            )
            work_order.parts.append(extra)
            covered.append(extra)

        committed: list[WorkOrderPart] = []
        for part in covered:
            part.total_price = part.quantity * part.unit_price
            part.part_number = part.part_number or item.part_number
            part.warehouse_location_id = planned.location.id
            part.is_dispatched = True
            part.dispatched_at = now
            part.stock_movement_id = movement.id
            if part.id is None:
                committed.append(await uow.work_orders.add_part(part))
            else:
                committed.append(await uow.work_orders.update_part(part))
        return movement, committed

    @staticmethod
    async def _split_part(
        uow: IUnitOfWork, work_order: WorkOrder, part: WorkOrderPart, quantity: float
    ) -> None:
        """Shrink a pending part to ``quantity`` and keep the rest as a new pending line."""
        remainder = WorkOrderPart(
            work_order_id=part.work_order_id,
            name=part.name,
            part_number=part.part_number,
            quantity=part.quantity - quantity,
            unit_price=part.unit_price,
            total_price=(part.quantity - quantity) * part.unit_price,
            inventory_item_id=part.inventory_item_id,
        )
        remainder = await uow.work_orders.add_part(remainder)
        work_order.parts.insert(work_order.parts.index(part) + 1, remainder)
        part.quantity = quantity


    def to_response(self, result: DispatchPartsResult) -> DispatchPartsResponse:
        return DispatchPartsResponse(
            work_order=WorkOrderResponse.from_entity(result.work_order),
            movements=[StockMovementResponse.from_entity(m) for m in result.movements],
            dispatched_parts=[WorkOrderPartResponse.from_entity(p) for p in result.dispatched_parts],
        )
