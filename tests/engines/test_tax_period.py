"""
Tests for tax-period entries, period summaries and financial-year helpers.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from gst_engines.tax_period import (
    build_tax_period_entry,
    financial_quarter,
    financial_year,
    quarter_bounds,
    summarize_period,
)
from gst_engines.tax_split import split_tax
from gst_kernel.domain.values import TransactionKind


def _entry(kind: TransactionKind, amount: str, origin="27", dest="27"):
    return build_tax_period_entry(
        invoice_id=uuid4(),
        invoice_number=f"INV-{kind.value}",
        kind=kind,
        entry_date=date(2025, 5, 1),
        breakdown=split_tax(Decimal(amount), Decimal("18"), origin, dest),
        origin_code=origin,
        dest_code=dest,
    )


class TestEntrySign:

    def test_forward_kind_keeps_sign(self):
        entry = _entry(TransactionKind.SALE, "1000")
        assert entry.breakdown.total_tax == Decimal("180")

    def test_return_is_negated(self):
        entry = _entry(TransactionKind.SALE_RETURN, "1000")
        assert entry.breakdown.total_tax == Decimal("-180")
        assert entry.breakdown.cgst == Decimal("-90")


class TestSummarizePeriod:

    def test_sale_and_its_return_cancel(self):
        summary = summarize_period([
            _entry(TransactionKind.SALE, "1000"),
            _entry(TransactionKind.SALE_RETURN, "1000"),
        ])

        assert summary.output_tax.total_tax == Decimal("0")
        assert summary.entry_count == 2

    def test_net_liability(self):
        summary = summarize_period([
            _entry(TransactionKind.SALE, "1000", "27", "09"),
            _entry(TransactionKind.PURCHASE, "500"),
            _entry(TransactionKind.PURCHASE_RETURN, "100"),
        ])

        assert summary.output_tax.igst == Decimal("180")
        assert summary.input_tax.total_tax == Decimal("72")
        assert summary.net_liability == Decimal("108")
        assert summary.net_igst == Decimal("180")
        assert summary.net_cgst == Decimal("-36")

    def test_empty_period(self):
        summary = summarize_period([])

        assert summary.entry_count == 0
        assert summary.net_liability == Decimal("0")


class TestFinancialYear:

    def test_april_starts_new_year(self):
        fy = financial_year(date(2025, 4, 1))
        assert fy.label == "FY 2025-26"
        assert fy.start == date(2025, 4, 1)
        assert fy.end == date(2026, 3, 31)

    def test_march_belongs_to_previous_year(self):
        assert financial_year(date(2026, 3, 31)).label == "FY 2025-26"

    def test_century_boundary_label(self):
        assert financial_year(date(2099, 6, 1)).label == "FY 2099-00"

    def test_quarters(self):
        assert financial_quarter(date(2025, 4, 15)) == (1, "FY 2025-26")
        assert financial_quarter(date(2025, 9, 30)) == (2, "FY 2025-26")
        assert financial_quarter(date(2025, 12, 1)) == (3, "FY 2025-26")
        assert financial_quarter(date(2026, 2, 1)) == (4, "FY 2025-26")

    def test_quarter_bounds(self):
        assert quarter_bounds(date(2025, 5, 10)) == (date(2025, 4, 1), date(2025, 6, 30))
        assert quarter_bounds(date(2026, 1, 5)) == (date(2026, 1, 1), date(2026, 3, 31))
        assert quarter_bounds(date(2025, 11, 5)) == (date(2025, 10, 1), date(2025, 12, 31))
