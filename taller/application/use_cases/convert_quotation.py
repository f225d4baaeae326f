"""Convert Quotation Use Case: approved quotation becomes a work order, once."""

from dataclasses import dataclass

from taller.application.dto.requests import ConvertQuotationRequest
from taller.application.dto.responses import (
    ConvertQuotationResponse,
    QuotationResponse,
    WorkOrderResponse,
)
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.pipeline import QuotationStatus
from taller.core.entities.quotation import Quotation
from taller.core.entities.work_order import WorkOrder, WorkOrderPart
from taller.core.exceptions import (
    AlreadyConvertedError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from taller.core.services.pipeline_rules import check_quotation_convertible

logger = get_logger(__name__)


@dataclass
class ConvertQuotationResult:
    work_order: WorkOrder
    quotation: Quotation


def describe_work_order(quotation: Quotation, extra_notes: str | None = None) -> str:
    """Human readable work order description derived from the quotation."""
    parts = [f"Generated from quotation #{quotation.quote_number}"]
    if quotation.notes:
        parts.append(f"Quotation notes: {quotation.notes}")
    if extra_notes:
        parts.append(f"Additional notes: {extra_notes}")
    summary = "\n".join(f"- {item.description} (x{item.quantity:g})" for item in quotation.items)
    if summary:
        parts.append(f"Items:\n{summary}")
    return "\n".join(parts)


class ConvertQuotationUseCase(PipelineUseCase):
    """
    Turn an approved quotation into a pending work order.

    Every check runs inside the locked transaction before the first write,
    so a rejected conversion leaves nothing behind and two concurrent
    conversions of the same quotation cannot both succeed.
    """

    async def execute(
        self,
        tenant_id: str,
        quotation_id: int,
        actor: str,
        request: ConvertQuotationRequest | None = None,
    ) -> ConvertQuotationResult:
        request = request or ConvertQuotationRequest()
        logger.info("convert_quotation_started", quotation_id=quotation_id, actor=actor)

        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            quotation = await uow.quotations.get_quotation(tenant_id, quotation_id)
            if quotation is None:
                raise NotFoundError("quotation", quotation_id)

            if (
                quotation.work_order_id is not None
                or quotation.status == QuotationStatus.CONVERTED
            ):
                raise AlreadyConvertedError(quotation_id, quotation.work_order_id)
            if quotation.status != QuotationStatus.APPROVED:
                raise InvalidStateError(
                    "quotation",
                    quotation.status.value,
                    message=f"Only approved quotations can be converted "
                    f"(current: '{quotation.status.value}')",
                    target=QuotationStatus.CONVERTED.value,
                )

            client = None
            if quotation.client_id is not None:
                client = await uow.clients.get_client(tenant_id, quotation.client_id)

            missing = check_quotation_convertible(quotation, client)
            if missing:
                logger.warning(
                    "convert_quotation_rejected",
                    quotation_id=quotation_id,
                    problems=len(missing),
                )
                raise ValidationFailedError("convert_quotation", missing)

            work_order = WorkOrder(
                tenant_id=tenant_id,
                order_number=await uow.work_orders.next_order_number(tenant_id),
                client_id=quotation.client_id,
                vehicle_id=quotation.vehicle_id,
                quotation_id=quotation.id,
                assigned_to=request.assigned_to,
                type=request.type,
                priority=request.priority,
                description=describe_work_order(quotation, request.notes),
                parts=[
                    WorkOrderPart(
                        name=item.description,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total_price=item.total,
                        inventory_item_id=item.inventory_item_id,
                    )
                    for item in quotation.items
                ],
            )
            work_order.recompute_costs()
            work_order = await uow.work_orders.create_work_order(work_order)

            quotation.mark_converted(work_order.id, actor)
            await uow.quotations.update_quotation(quotation)

        logger.info(
            "convert_quotation_complete",
            quotation_id=quotation_id,
            work_order_id=work_order.id,
            parts_cost=work_order.parts_cost,
        )
        await self._publish(
            "quotation_converted",
            {
                "tenant_id": tenant_id,
                "quotation_id": quotation_id,
                "work_order_id": work_order.id,
                "actor": actor,
            },
        )
        return ConvertQuotationResult(work_order=work_order, quotation=quotation)

    def to_response(self, result: ConvertQuotationResult) -> ConvertQuotationResponse:
        return ConvertQuotationResponse(
            work_order=WorkOrderResponse.from_entity(result.work_order),
            quotation=QuotationResponse.from_entity(result.quotation),
        )
