"""Pure domain types for the GST kernel. No I/O."""

from gst_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from gst_kernel.domain.values import (
    EntityRole,
    InvoiceSnapshot,
    InvoiceTaxRecord,
    Jurisdiction,
    LineItem,
    Payment,
    PaymentStatus,
    ProductStock,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    TaxBreakdown,
    TaxPeriodEntry,
    TransactionKind,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "EntityRole",
    "InvoiceSnapshot",
    "InvoiceTaxRecord",
    "Jurisdiction",
    "LineItem",
    "Payment",
    "PaymentStatus",
    "ProductStock",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
    "TaxBreakdown",
    "TaxPeriodEntry",
    "TransactionKind",
]
