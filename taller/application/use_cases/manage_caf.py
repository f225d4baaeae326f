"""
CAF window management.

A CAF (folio authorization) is an XML document issued by the tax authority
granting a contiguous range of folios for one document type. Uploading one
registers a window the folio allocator draws from.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date

from taller.application.dto.requests import UploadCafRequest
from taller.application.dto.responses import CafStatusResponse, CafWindowResponse
from taller.application.use_cases.base import PipelineUseCase
from taller.config import get_logger
from taller.core.entities.folio import CafFolio, DteType
from taller.core.exceptions import CafConflictError, ValidationError

logger = get_logger(__name__)

_INT_RE = re.compile(r"^\s*(\d+)\s*$")


@dataclass
class ParsedCaf:
    dte_type: int
    folio_from: int
    folio_to: int
    expiration_date: date | None = None


def _find_text(root: ET.Element, tag: str) -> str | None:
    # CAF files may or may not carry a namespace
    for el in root.iter():
        if el.tag == tag or el.tag.endswith("}" + tag):
            return el.text
    return None


def _int_field(root: ET.Element, tag: str) -> int:
    text = _find_text(root, tag)
    match = _INT_RE.match(text or "")
    if not match:
        raise ValidationError("caf_xml", f"<{tag}> is missing or not a number", text)
    return int(match.group(1))


def parse_caf(caf_xml: str) -> ParsedCaf:
    """Read document type, folio range and authorization date from a CAF."""
    try:
        root = ET.fromstring(caf_xml)
    except ET.ParseError as e:
        raise ValidationError("caf_xml", f"malformed XML: {e}") from e

    dte_type = _int_field(root, "TD")
    folio_from = _int_field(root, "D")
    folio_to = _int_field(root, "H")

    expiration = None
    fa = _find_text(root, "FA")
    if fa:
        try:
            expiration = date.fromisoformat(fa.strip())
        except ValueError as e:
            raise ValidationError("caf_xml", "<FA> is not a valid date", fa) from e

    if folio_from <= 0:
        raise ValidationError("caf_xml", "folio range must start at 1 or above", folio_from)
    if folio_from > folio_to:
        raise ValidationError(
            "caf_xml",
            f"invalid folio range: from ({folio_from}) is greater than to ({folio_to})",
        )
    return ParsedCaf(dte_type, folio_from, folio_to, expiration)


class UploadCafUseCase(PipelineUseCase):
    """Register a CAF window after checking it against the tenant's existing ones."""

    async def execute(self, tenant_id: str, actor: str, request: UploadCafRequest) -> CafFolio:
        parsed = parse_caf(request.caf_xml)

        if request.dte_type is not None and request.dte_type != parsed.dte_type:
            raise ValidationError(
                "dte_type",
                f"CAF is for document type {parsed.dte_type}, not {request.dte_type}",
                request.dte_type,
            )
        try:
            DteType(parsed.dte_type)
        except ValueError as e:
            raise ValidationError("caf_xml", "unknown document type", parsed.dte_type) from e

        factory = await self._get_uow_factory()
        async with factory(lock=True) as uow:
            existing = await uow.folios.list_windows(tenant_id, parsed.dte_type)
            for window in existing:
                if window.is_active and not window.is_exhausted:
                    raise CafConflictError(
                        parsed.dte_type,
                        parsed.folio_from,
                        parsed.folio_to,
                        f"window {window.folio_from}-{window.folio_to} is still active",
                    )
                if window.folio_from <= parsed.folio_to and parsed.folio_from <= window.folio_to:
                    raise CafConflictError(
                        parsed.dte_type,
                        parsed.folio_from,
                        parsed.folio_to,
                        f"overlaps window {window.folio_from}-{window.folio_to}",
                    )

            window = await uow.folios.create_window(
                CafFolio(
                    tenant_id=tenant_id,
                    dte_type=parsed.dte_type,
                    folio_from=parsed.folio_from,
                    folio_to=parsed.folio_to,
                    expiration_date=parsed.expiration_date,
                    caf_xml=request.caf_xml,
                )
            )

        logger.info(
            "caf_uploaded",
            tenant_id=tenant_id,
            dte_type=window.dte_type,
            folio_from=window.folio_from,
            folio_to=window.folio_to,
            actor=actor,
        )
        return window

    def to_response(self, result: CafFolio) -> CafWindowResponse:
        return CafWindowResponse.from_entity(result)


class GetCafStatusUseCase(PipelineUseCase):
    """Usage of every CAF window of a tenant."""

    async def execute(self, tenant_id: str, dte_type: int | None = None) -> list[CafFolio]:
        factory = await self._get_uow_factory()
        async with factory(lock=False) as uow:
            return await uow.folios.list_windows(tenant_id, dte_type)

    def to_response(self, result: list[CafFolio]) -> CafStatusResponse:
        windows = [CafWindowResponse.from_entity(w) for w in result]
        return CafStatusResponse(
            windows=windows,
            total_remaining=sum(w.remaining for w in windows if not w.is_exhausted),
        )
