"""Change Quotation Status Use Case: send, approve or reject."""

from taller.application.dto.requests import ChangeQuotationStatusRequest
from taller.application.dto.responses import QuotationResponse
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.pipeline import QuotationStatus
from taller.core.entities.quotation import Quotation
from taller.core.exceptions import NotFoundError

logger = get_logger(__name__)


class ChangeQuotationStatusUseCase(PipelineUseCase):
    """Move a quotation along its transition table. Conversion has its own use case."""

    async def execute(
        self,
        tenant_id: str,
        quotation_id: int,
        actor: str,
        request: ChangeQuotationStatusRequest,
    ) -> Quotation:
        target = QuotationStatus(request.status)
        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            quotation = await uow.quotations.get_quotation(tenant_id, quotation_id)
            if quotation is None:
                raise NotFoundError("quotation", quotation_id)

            previous = quotation.status
            quotation.change_status(target)
            await uow.quotations.update_quotation(quotation)

        logger.info(
            "quotation_status_changed",
            quotation_id=quotation_id,
            previous=previous.value,
            status=target.value,
            actor=actor,
        )
        await self._publish(
            f"quotation_{target.value}",
            {"tenant_id": tenant_id, "quotation_id": quotation_id, "actor": actor},
        )
        return quotation

    def to_response(self, result: Quotation) -> QuotationResponse:
        return QuotationResponse.from_entity(result)
