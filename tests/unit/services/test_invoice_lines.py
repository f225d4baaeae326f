"""Tests for composing invoice lines from a work order."""

from taller.core.services import compose_invoice_lines, summarize_invoice_lines


class TestComposeInvoiceLines:
    def test_parts_then_labor(self, completed_work_order):
        lines = compose_invoice_lines(completed_work_order)
        assert [line.line_number for line in lines] == [1, 2, 3]
        assert [line.name for line in lines] == [
            "Pastillas de freno",
            "Disco de freno",
            "Mano de obra",
        ]
        assert sum(line.amount for line in lines) == 100000
        assert lines[2].description == "2 h"
        assert lines[0].work_order_part_id == 1

    def test_no_labor_line_without_labor_cost(self, pending_work_order):
        lines = compose_invoice_lines(pending_work_order)
        assert len(lines) == 2

    def test_exempt_flag_and_label(self, completed_work_order):
        lines = compose_invoice_lines(completed_work_order, exempt=True, labor_line_name="Labor")
        assert all(line.is_exempt for line in lines)
        assert lines[-1].name == "Labor"


class TestSummarizeInvoiceLines:
    def test_taxed_document(self, completed_work_order):
        totals = summarize_invoice_lines(compose_invoice_lines(completed_work_order), False, 0.19)
        assert totals.net_amount == 100000
        assert totals.exempt_amount == 0
        assert totals.tax_amount == 19000
        assert totals.total_amount == 119000

    def test_exempt_document_has_no_tax(self, completed_work_order):
        totals = summarize_invoice_lines(compose_invoice_lines(completed_work_order), True, 0.19)
        assert totals.net_amount == 0
        assert totals.exempt_amount == 100000
        assert totals.tax_rate == 0.0
        assert totals.total_amount == 100000
