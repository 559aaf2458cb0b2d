"""
gst_services -- stateful services wired to a RecordStore.

Architecture position:
    Services -- composes pure engines (``gst_engines``) with persistence
    (``gst_kernel.store``). Services own the transaction boundary; engines
    never commit.

Usage:
    from gst_services import TransactionOrchestrator, InvoiceDraft
    from gst_services import PaymentService
"""

from gst_services.payment_service import PaymentService
from gst_services.receiving_tracker import ReceiveResult, ReceivingTracker
from gst_services.stock_ledger import StockLedger, StockOutcome, StockOutcomeStatus
from gst_services.transaction_orchestrator import (
    InvoiceDraft,
    InvoiceRecordResult,
    PurchaseOrderReceipt,
    TransactionOrchestrator,
)

__all__ = [
    "InvoiceDraft",
    "InvoiceRecordResult",
    "PaymentService",
    "PurchaseOrderReceipt",
    "ReceiveResult",
    "ReceivingTracker",
    "StockLedger",
    "StockOutcome",
    "StockOutcomeStatus",
    "TransactionOrchestrator",
]
