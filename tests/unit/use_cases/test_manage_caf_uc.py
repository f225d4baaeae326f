"""Tests for CAF parsing and window registration."""

from datetime import date

import pytest

from taller.application.dto.requests import UploadCafRequest
from taller.application.use_cases import GetCafStatusUseCase, UploadCafUseCase
from taller.application.use_cases.manage_caf import parse_caf
from taller.core.entities import CafFolio
from taller.core.exceptions import CafConflictError, ValidationError


def caf_xml(td="33", d="1", h="100", fa="2026-03-01") -> str:
    fa_tag = f"<FA>{fa}</FA>" if fa is not None else ""
    return (
        '<?xml version="1.0"?>'
        '<AUTORIZACION><CAF version="1.0"><DA>'
        "<RE>76123456-7</RE><RS>TALLER DEMO SPA</RS>"
        f"<TD>{td}</TD><RNG><D>{d}</D><H>{h}</H></RNG>{fa_tag}"
        "</DA></CAF></AUTORIZACION>"
    )


class TestParseCaf:
    def test_reads_range(self):
        parsed = parse_caf(caf_xml())
        assert parsed.dte_type == 33
        assert parsed.folio_from == 1
        assert parsed.folio_to == 100
        assert parsed.expiration_date == date(2026, 3, 1)

    def test_namespaced_document(self):
        xml = (
            '<AUTORIZACION xmlns="http://www.sii.cl/SiiDte"><CAF><DA>'
            "<TD>34</TD><RNG><D>501</D><H>600</H></RNG></DA></CAF></AUTORIZACION>"
        )
        parsed = parse_caf(xml)
        assert (parsed.dte_type, parsed.folio_from, parsed.folio_to) == (34, 501, 600)
        assert parsed.expiration_date is None

    def test_single_folio_range(self):
        parsed = parse_caf(caf_xml(d="5", h="5"))
        assert parsed.folio_from == parsed.folio_to == 5

    @pytest.mark.parametrize(
        "xml",
        [
            "<AUTORIZACION><CAF>",
            caf_xml(d="abc"),
            caf_xml(td=""),
            caf_xml(d="10", h="9"),
            caf_xml(d="0"),
            caf_xml(fa="not-a-date"),
        ],
    )
    def test_rejects_invalid(self, xml):
        with pytest.raises(ValidationError):
            parse_caf(xml)


class TestUploadCafUseCase:
    @pytest.fixture
    def use_case(self, uow, notifier):
        return UploadCafUseCase(uow_factory=uow, notifier=notifier)

    @pytest.fixture
    def created(self, uow):
        async def create_window(window):
            window.id = 1
            return window

        uow.folios.create_window.side_effect = create_window
        uow.folios.list_windows.return_value = []
        return uow

    async def test_registers_window(self, use_case, created):
        window = await use_case.execute("tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml()))

        assert window.id == 1
        assert window.current_folio == 1
        assert window.remaining == 100
        assert window.is_active
        assert created.locks == [True]
        created.folios.list_windows.assert_awaited_once_with("tenant-a", 33)

    async def test_declared_type_must_match(self, use_case, created):
        with pytest.raises(ValidationError):
            await use_case.execute(
                "tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml(), dte_type=34)
            )
        created.folios.create_window.assert_not_awaited()

    async def test_unknown_document_type(self, use_case, created):
        with pytest.raises(ValidationError):
            await use_case.execute("tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml(td="99")))

    async def test_active_window_blocks_upload(self, use_case, created):
        created.folios.list_windows.return_value = [
            CafFolio(id=1, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=100)
        ]
        with pytest.raises(CafConflictError):
            await use_case.execute(
                "tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml(d="101", h="200"))
            )
        created.folios.create_window.assert_not_awaited()

    async def test_overlap_with_exhausted_window(self, use_case, created):
        created.folios.list_windows.return_value = [
            CafFolio(
                id=1, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=100,
                current_folio=100, is_active=False, is_exhausted=True,
            )
        ]
        with pytest.raises(CafConflictError) as exc_info:
            await use_case.execute(
                "tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml(d="50", h="150"))
            )
        assert "overlaps" in exc_info.value.details["reason"]

    async def test_follow_up_window_after_exhaustion(self, use_case, created):
        created.folios.list_windows.return_value = [
            CafFolio(
                id=1, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=100,
                current_folio=100, is_active=False, is_exhausted=True,
            )
        ]
        window = await use_case.execute(
            "tenant-a", "admin", UploadCafRequest(caf_xml=caf_xml(d="101", h="200"))
        )
        assert window.folio_from == 101


class TestGetCafStatusUseCase:
    async def test_totals_exclude_exhausted(self, uow):
        uow.folios.list_windows.return_value = [
            CafFolio(
                id=1, tenant_id="tenant-a", dte_type=33, folio_from=1, folio_to=10,
                current_folio=10, is_active=False, is_exhausted=True,
            ),
            CafFolio(
                id=2, tenant_id="tenant-a", dte_type=33, folio_from=11, folio_to=20, current_folio=15
            ),
        ]
        use_case = GetCafStatusUseCase(uow_factory=uow)

        windows = await use_case.execute("tenant-a", 33)
        response = use_case.to_response(windows)

        assert uow.locks == [False]
        assert response.total_remaining == 6
        assert [w.remaining for w in response.windows] == [0, 6]
