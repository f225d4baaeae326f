"""Validate Quotation Use Case: dry run of the conversion checks."""

from dataclasses import dataclass, field

from taller.application.dto.responses import ValidationReportResponse
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.pipeline import QuotationStatus
from taller.core.exceptions import NotFoundError
from taller.core.services.pipeline_rules import check_quotation_convertible

logger = get_logger(__name__)


@dataclass
class ValidationReport:
    """Every reason an operation would be rejected right now."""

    valid: bool
    missing_fields: list[str] = field(default_factory=list)


class ValidateQuotationUseCase(PipelineUseCase):
    """Report whether a quotation could be converted, without changing anything."""

    async def execute(self, tenant_id: str, quotation_id: int) -> ValidationReport:
        factory = await self._get_uow_factory()
        async with factory(lock=False) as uow:
            quotation = await uow.quotations.get_quotation(tenant_id, quotation_id)
            if quotation is None:
                raise NotFoundError("quotation", quotation_id)

            client = None
            if quotation.client_id is not None:
                client = await uow.clients.get_client(tenant_id, quotation.client_id)

        missing = check_quotation_convertible(quotation, client)
        if quotation.work_order_id is not None or quotation.status == QuotationStatus.CONVERTED:
            missing.insert(0, f"work_order_id: already converted to work order {quotation.work_order_id}")
        elif quotation.status != QuotationStatus.APPROVED:
            missing.insert(
                0, f"status: quotation must be approved (current: '{quotation.status.value}')"
            )

        logger.info(
            "quotation_validated",
            quotation_id=quotation_id,
            valid=not missing,
            problems=len(missing),
        )
        return ValidationReport(valid=not missing, missing_fields=missing)

    def to_response(self, result: ValidationReport) -> ValidationReportResponse:
        return ValidationReportResponse(valid=result.valid, missing_fields=result.missing_fields)
