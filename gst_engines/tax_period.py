"""
Tax Period Engine - signed per-invoice tax entries and period summaries.

Pure functions with no I/O.

Returns are the additive inverse of their forward kind: a sale return's
entry carries the negated breakdown of the same sale, so summing a period
nets returns out of the totals. Output tax comes from sales (net of sale
returns), input tax from purchases (net of purchase returns).

Indian financial years run April 1 to March 31 and are labelled
``FY 2025-26``; Q1 is April-June.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from gst_kernel.domain.values import TaxBreakdown, TaxPeriodEntry, TransactionKind
from gst_kernel.logging_config import get_logger

logger = get_logger("engines.tax_period")

_OUTPUT_KINDS = frozenset({TransactionKind.SALE, TransactionKind.SALE_RETURN})


@dataclass(frozen=True)
class FinancialYear:
    start: date
    end: date
    label: str

    def contains(self, on_date: date) -> bool:
        return self.start <= on_date <= self.end


@dataclass(frozen=True)
class TaxPeriodSummary:
    """
    Aggregated tax for a set of entries.

    ``output_tax`` and ``input_tax`` are signed sums; ``net_liability`` is
    output tax minus input tax credit and may be negative (carry-forward).
    """

    output_tax: TaxBreakdown
    input_tax: TaxBreakdown
    entry_count: int

    @property
    def net_liability(self) -> Decimal:
        return self.output_tax.total_tax - self.input_tax.total_tax

    @property
    def net_cgst(self) -> Decimal:
        return self.output_tax.cgst - self.input_tax.cgst

    @property
    def net_sgst(self) -> Decimal:
        return self.output_tax.sgst - self.input_tax.sgst

    @property
    def net_igst(self) -> Decimal:
        return self.output_tax.igst - self.input_tax.igst


def build_tax_period_entry(
    invoice_id: UUID,
    invoice_number: str,
    kind: TransactionKind,
    entry_date: date,
    breakdown: TaxBreakdown,
    origin_code: str | None = None,
    dest_code: str | None = None,
) -> TaxPeriodEntry:
    """Entry for one committed invoice, with the return sign applied."""
    return TaxPeriodEntry(
        invoice_id=invoice_id,
        invoice_number=invoice_number,
        kind=kind,
        entry_date=entry_date,
        breakdown=breakdown.scaled(kind.sign),
        origin_code=origin_code,
        dest_code=dest_code,
    )


def summarize_period(entries: Iterable[TaxPeriodEntry]) -> TaxPeriodSummary:
    """Sum signed entries into output tax and input tax."""
    output_tax = TaxBreakdown.zero()
    input_tax = TaxBreakdown.zero()
    count = 0
    for entry in entries:
        count += 1
        if entry.kind in _OUTPUT_KINDS:
            output_tax = output_tax + entry.breakdown
        else:
            input_tax = input_tax + entry.breakdown

    summary = TaxPeriodSummary(
        output_tax=output_tax,
        input_tax=input_tax,
        entry_count=count,
    )
    logger.info("tax_period_summarized", extra={
        "entry_count": count,
        "output_tax": str(output_tax.total_tax),
        "input_tax": str(input_tax.total_tax),
        "net_liability": str(summary.net_liability),
    })
    return summary


def financial_year(on_date: date) -> FinancialYear:
    """The April-March financial year containing ``on_date``."""
    start_year = on_date.year if on_date.month >= 4 else on_date.year - 1
    return FinancialYear(
        start=date(start_year, 4, 1),
        end=date(start_year + 1, 3, 31),
        label=f"FY {start_year}-{str(start_year + 1)[-2:]}",
    )


def financial_quarter(on_date: date) -> tuple[int, str]:
    """(quarter number 1-4, financial year label) for ``on_date``."""
    quarter = ((on_date.month - 4) % 12) // 3 + 1
    return quarter, financial_year(on_date).label


def quarter_bounds(on_date: date) -> tuple[date, date]:
    """First and last day of the financial quarter containing ``on_date``."""
    quarter, _ = financial_quarter(on_date)
    fy = financial_year(on_date)
    start_month = 4 + (quarter - 1) * 3
    start_year = fy.start.year if start_month <= 12 else fy.start.year + 1
    start_month = (start_month - 1) % 12 + 1
    end_month = start_month + 2
    end_day = {3: 31, 6: 30, 9: 30, 12: 31}[end_month]
    return date(start_year, start_month, 1), date(start_year, end_month, end_day)
