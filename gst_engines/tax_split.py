"""
Tax Split Engine - Split GST into CGST/SGST or IGST.

India's dual GST: an intra-state supply carries Central and State GST in
equal halves; an inter-state supply carries a single Integrated GST.
Pure functions with no I/O - rates and jurisdiction codes are parameters.

Usage:
    from decimal import Decimal
    from gst_engines.tax_split import TaxSplitter

    splitter = TaxSplitter()
    b = splitter.compute_breakdown(
        taxable_amount=Decimal("1000"),
        tax_rate_percent=Decimal("18"),
        origin_code="27",
        dest_code="27",
    )
    print(b.cgst, b.sgst, b.igst)  # 90 90 0

A transaction-level breakdown is the element-wise sum of the per-line
breakdowns, never one rate applied to the subtotal: lines may carry
different rates.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from gst_engines.tracer import traced_engine
from gst_kernel.domain.values import (
    HUNDRED,
    TWO,
    ZERO,
    Jurisdiction,
    LineItem,
    TaxBreakdown,
)
from gst_kernel.exceptions import ValidationError
from gst_kernel.logging_config import get_logger

logger = get_logger("engines.tax_split")


def is_inter_jurisdiction(
    origin_code: str | None,
    dest_code: str | None,
    force_inter_jurisdiction: bool = False,
) -> bool:
    """
    Whether a supply is inter-jurisdiction (IGST) rather than intra (CGST+SGST).

    A missing code on either side means intra-jurisdiction unless forced.
    """
    if force_inter_jurisdiction:
        return True
    if not origin_code or not dest_code:
        return False
    return origin_code != dest_code


class TaxSplitter:
    """
    Compute CGST/SGST/IGST breakdowns.

    Pure functions - no I/O, no rounding. Callers round for display only
    (``TaxBreakdown.rounded()``).
    """

    @traced_engine(
        "tax_split", "1.0",
        fingerprint_fields=(
            "taxable_amount", "tax_rate_percent", "origin_code", "dest_code",
            "force_inter_jurisdiction",
        ),
    )
    def compute_breakdown(
        self,
        taxable_amount: Decimal,
        tax_rate_percent: Decimal,
        origin_code: str | None,
        dest_code: str | None,
        force_inter_jurisdiction: bool = False,
    ) -> TaxBreakdown:
        """
        Split the tax on one taxable amount.

        Args:
            taxable_amount: Tax-exclusive base amount.
            tax_rate_percent: GST rate as a percentage (18 for 18%).
            origin_code: Jurisdiction code of the supplier side.
            dest_code: Jurisdiction code of the recipient side.
            force_inter_jurisdiction: Treat as inter-jurisdiction regardless
                of the codes.

        Returns:
            TaxBreakdown where either ``igst == total_tax`` or
            ``cgst == sgst == total_tax / 2``.

        Raises:
            ValidationError: If the amount or rate is negative.
        """
        if taxable_amount < ZERO:
            raise ValidationError(
                "taxable_amount", f"cannot be negative (got {taxable_amount})",
            )
        if tax_rate_percent < ZERO:
            raise ValidationError(
                "tax_rate_percent", f"cannot be negative (got {tax_rate_percent})",
            )

        total_tax = taxable_amount * tax_rate_percent / HUNDRED
        inter = is_inter_jurisdiction(origin_code, dest_code, force_inter_jurisdiction)

        if inter:
            cgst = sgst = ZERO
            igst = total_tax
        else:
            cgst = sgst = total_tax / TWO
            igst = ZERO

        return TaxBreakdown(
            taxable_amount=taxable_amount,
            cgst=cgst,
            sgst=sgst,
            igst=igst,
            total_tax=total_tax,
            total_amount=taxable_amount + total_tax,
        )

    def breakdown_for(
        self,
        taxable_amount: Decimal,
        tax_rate_percent: Decimal,
        jurisdiction: Jurisdiction,
    ) -> TaxBreakdown:
        """Same as compute_breakdown, with the codes bundled in a Jurisdiction."""
        return self.compute_breakdown(
            taxable_amount=taxable_amount,
            tax_rate_percent=tax_rate_percent,
            origin_code=jurisdiction.origin_code,
            dest_code=jurisdiction.dest_code,
            force_inter_jurisdiction=jurisdiction.force_inter_jurisdiction,
        )

    def line_breakdown(
        self,
        line: LineItem,
        jurisdiction: Jurisdiction,
    ) -> TaxBreakdown:
        """Breakdown of one line item on its tax-exclusive line total."""
        if line.tax_rate_percent is None:
            raise ValidationError("tax_rate_percent", "line has no tax rate")
        return self.breakdown_for(line.line_total, line.tax_rate_percent, jurisdiction)

    def transaction_breakdown(
        self,
        lines: Iterable[LineItem],
        jurisdiction: Jurisdiction,
    ) -> tuple[TaxBreakdown, tuple[TaxBreakdown, ...]]:
        """
        Per-line breakdowns and their element-wise sum.

        Returns:
            (transaction_total, per_line_breakdowns) in input order.
        """
        per_line = tuple(self.line_breakdown(line, jurisdiction) for line in lines)
        total = TaxBreakdown.zero()
        for breakdown in per_line:
            total = total + breakdown

        logger.info("transaction_breakdown_computed", extra={
            "line_count": len(per_line),
            "taxable_amount": str(total.taxable_amount),
            "total_tax": str(total.total_tax),
            "is_inter_jurisdiction": is_inter_jurisdiction(
                jurisdiction.origin_code,
                jurisdiction.dest_code,
                jurisdiction.force_inter_jurisdiction,
            ),
        })
        return total, per_line


def split_tax(
    taxable_amount: Decimal,
    tax_rate_percent: Decimal,
    origin_code: str | None,
    dest_code: str | None,
    force_inter_jurisdiction: bool = False,
) -> TaxBreakdown:
    """Convenience function for a one-off breakdown."""
    return TaxSplitter().compute_breakdown(
        taxable_amount=taxable_amount,
        tax_rate_percent=tax_rate_percent,
        origin_code=origin_code,
        dest_code=dest_code,
        force_inter_jurisdiction=force_inter_jurisdiction,
    )
