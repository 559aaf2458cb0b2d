"""
Module: gst_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  Canonical import surface for gst_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import gst_kernel.domain, gst_kernel.exceptions and
    gst_kernel.logging_config (and sibling engine modules).
    MUST NOT import gst_services or gst_config.

Invariants enforced:
    - Purity: engines never read the clock; dates are explicit parameters.
    - Decimal-only arithmetic for money and rates; no rounding inside.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from gst_engines.tax_split import TaxSplitter
    from gst_engines.stock import evaluate_delta, signed_stock_delta
    from gst_engines.receiving import compute_receipt, derive_order_status
    from gst_engines.payment_status import PaymentStatusResolver
    from gst_engines.tax_period import summarize_period
"""

from gst_engines.payment_status import (
    PaymentStatusResolver,
    merge_with_persisted,
    total_paid,
    validate_payment_amount,
    validate_status_transition,
)
from gst_engines.receiving import (
    LineReceivingState,
    ReceiptComputation,
    clamp_receipt_quantity,
    compute_receipt,
    derive_order_status,
    line_receiving_state,
    receiving_progress_percent,
)
from gst_engines.stock import (
    StockDecision,
    StockDecisionType,
    evaluate_delta,
    signed_stock_delta,
    whole_units,
)
from gst_engines.tax_period import (
    FinancialYear,
    TaxPeriodSummary,
    build_tax_period_entry,
    financial_quarter,
    financial_year,
    quarter_bounds,
    summarize_period,
)
from gst_engines.tax_split import TaxSplitter, is_inter_jurisdiction, split_tax
from gst_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # payment_status
    "PaymentStatusResolver",
    "merge_with_persisted",
    "total_paid",
    "validate_payment_amount",
    "validate_status_transition",
    # receiving
    "LineReceivingState",
    "ReceiptComputation",
    "clamp_receipt_quantity",
    "compute_receipt",
    "derive_order_status",
    "line_receiving_state",
    "receiving_progress_percent",
    # stock
    "StockDecision",
    "StockDecisionType",
    "evaluate_delta",
    "signed_stock_delta",
    "whole_units",
    # tax_period
    "FinancialYear",
    "TaxPeriodSummary",
    "build_tax_period_entry",
    "financial_quarter",
    "financial_year",
    "quarter_bounds",
    "summarize_period",
    # tax_split
    "TaxSplitter",
    "is_inter_jurisdiction",
    "split_tax",
    # tracer
    "compute_input_fingerprint",
    "traced_engine",
]
