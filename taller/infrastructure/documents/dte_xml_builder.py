"""
DTE XML document builder.

Renders the unsigned DTE payload for an invoice draft and computes its tax
split. Signing and submission to the tax authority happen elsewhere.
"""

import xml.etree.ElementTree as ET

from taller.config import FiscalSettings, get_logger, get_settings
from taller.core.entities.folio import DteType
from taller.core.entities.invoice import (
    BuiltDocument,
    InvoiceDraft,
    InvoiceLine,
    PaymentCondition,
)
from taller.core.exceptions import DocumentBuildError
from taller.core.interfaces.documents import IDocumentBuilder
from taller.core.services.invoice_lines import summarize_invoice_lines

logger = get_logger(__name__)

# Types whose receptor must be identified by tax id
_IDENTIFIED_RECEPTOR_TYPES = {DteType.FACTURA, DteType.FACTURA_EXENTA}


def _sub(parent: ET.Element, tag: str, text: object | None) -> ET.Element | None:
    if text is None or text == "":
        return None
    el = ET.SubElement(parent, tag)
    el.text = str(text)
    return el


class DteXmlBuilder(IDocumentBuilder):
    """Builds the SII-style DTE XML for invoices, boletas and their exempt variants."""

    def __init__(self, fiscal: FiscalSettings | None = None):
        self._fiscal = fiscal or get_settings().fiscal

    def build_document(self, draft: InvoiceDraft, lines: list[InvoiceLine]) -> BuiltDocument:
        dte_type = self._check_draft(draft, lines)

        exempt_doc = dte_type.is_exempt
        totals = summarize_invoice_lines(lines, exempt_doc, self._fiscal.iva_rate)
        net, exempt, tax = totals.net_amount, totals.exempt_amount, totals.tax_amount
        rate, total = totals.tax_rate, totals.total_amount

        if total <= 0:
            raise DocumentBuildError(f"document total must be positive, got {total}")

        root = ET.Element("DTE", version="1.0")
        doc = ET.SubElement(root, "Documento", ID=f"T{dte_type.value}F{draft.folio}")
        header = ET.SubElement(doc, "Encabezado")

        id_doc = ET.SubElement(header, "IdDoc")
        _sub(id_doc, "TipoDTE", dte_type.value)
        _sub(id_doc, "Folio", draft.folio)
        _sub(id_doc, "FchEmis", draft.issue_date.isoformat())
        if draft.payment_condition is not None:
            # 1 = cash, 2 = credit
            _sub(id_doc, "FmaPago", 1 if draft.payment_condition == PaymentCondition.CONTADO else 2)
        if draft.due_date is not None:
            _sub(id_doc, "FchVenc", draft.due_date.isoformat())

        emitter = ET.SubElement(header, "Emisor")
        _sub(emitter, "RUTEmisor", self._fiscal.emitter_rut)
        _sub(emitter, "RznSoc", self._fiscal.emitter_name)
        _sub(emitter, "GiroEmis", self._fiscal.emitter_business_line)
        _sub(emitter, "Acteco", self._fiscal.activity_code)
        _sub(emitter, "DirOrigen", self._fiscal.emitter_address)
        _sub(emitter, "CmnaOrigen", self._fiscal.emitter_commune)
        _sub(emitter, "CiudadOrigen", self._fiscal.emitter_city)

        receptor = ET.SubElement(header, "Receptor")
        _sub(receptor, "RUTRecep", draft.receptor_rut or "66666666-6")
        _sub(receptor, "RznSocRecep", draft.receptor_name)
        _sub(receptor, "GiroRecep", draft.receptor_business_line)
        _sub(receptor, "DirRecep", draft.receptor_address)
        _sub(receptor, "CmnaRecep", draft.receptor_commune)
        _sub(receptor, "CiudadRecep", draft.receptor_city)

        totals = ET.SubElement(header, "Totales")
        _sub(totals, "MntNeto", net)
        if exempt:
            _sub(totals, "MntExe", exempt)
        _sub(totals, "TasaIVA", round(rate * 100, 2))
        _sub(totals, "IVA", tax)
        _sub(totals, "MntTotal", total)

        for line in lines:
            detail = ET.SubElement(doc, "Detalle")
            _sub(detail, "NroLinDet", line.line_number)
            if line.item_code:
                code = ET.SubElement(detail, "CdgItem")
                _sub(code, "TpoCdg", "INT1")
                _sub(code, "VlrCdg", line.item_code)
            if line.is_exempt or exempt_doc:
                _sub(detail, "IndExe", 1)
            _sub(detail, "NmbItem", line.name)
            _sub(detail, "DscItem", line.description)
            _sub(detail, "QtyItem", f"{line.quantity:g}")
            _sub(detail, "UnmdItem", line.unit_measure)
            _sub(detail, "PrcItem", f"{line.unit_price:g}")
            _sub(detail, "MontoItem", round(line.amount))

        content = ET.tostring(root, encoding="unicode")
        logger.info(
            "dte_document_built",
            dte_type=dte_type.value,
            folio=draft.folio,
            lines=len(lines),
            total=total,
        )
        return BuiltDocument(
            content=content,
            net_amount=net,
            exempt_amount=exempt,
            tax_rate=rate,
            tax_amount=tax,
            total_amount=total,
        )

    @staticmethod
    def _check_draft(draft: InvoiceDraft, lines: list[InvoiceLine]) -> DteType:
        try:
            dte_type = DteType(draft.dte_type)
        except ValueError as e:
            raise DocumentBuildError(f"unknown document type {draft.dte_type}") from e

        if not lines:
            raise DocumentBuildError("invoice has no lines")
        if dte_type in _IDENTIFIED_RECEPTOR_TYPES and not draft.receptor_rut:
            raise DocumentBuildError(f"{dte_type.display_name} requires the receptor tax id")
        for line in lines:
            if line.quantity <= 0 or line.amount < 0:
                raise DocumentBuildError(f"line {line.line_number} has invalid amounts")
        return dte_type
