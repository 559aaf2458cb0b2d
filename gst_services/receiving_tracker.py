"""
ReceivingTracker -- cumulative receipt of goods against purchase order lines.

Each call to ``receive`` clamps the requested quantity into the line's
outstanding amount, persists the new cumulative total, forwards only the
accepted increment to the StockLedger as an inbound purchase delta, and
recomputes the order status from all of its lines.

Transaction boundary: with ``auto_commit=True`` each call commits on
success and rolls back on any raised error. The orchestrator constructs
the tracker with ``auto_commit=False`` and commits once per order receipt.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from gst_engines.receiving import (
    LineReceivingState,
    compute_receipt,
    derive_order_status,
    line_receiving_state,
)
from gst_engines.tax_split import TaxSplitter
from gst_kernel.domain.values import (
    Jurisdiction,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    TaxBreakdown,
)
from gst_kernel.exceptions import ValidationError
from gst_kernel.logging_config import LogContext, get_logger
from gst_kernel.store import RecordStore
from gst_services.stock_ledger import StockLedger, StockOutcome

logger = get_logger("services.receiving_tracker")


@dataclass(frozen=True)
class ReceiveResult:
    """Outcome of one receiving event on one line."""

    line_id: UUID
    requested_quantity: int
    accepted_quantity: int
    new_received_total: int
    line_complete: bool
    delta_applied_to_stock: int
    tax_breakdown: TaxBreakdown
    stock_outcome: StockOutcome | None = None

    @property
    def was_capped(self) -> bool:
        return self.accepted_quantity < self.requested_quantity


class ReceivingTracker:
    """Applies receipts to purchase order lines and keeps order status current."""

    def __init__(
        self,
        store: RecordStore,
        stock_ledger: StockLedger | None = None,
        tax_splitter: TaxSplitter | None = None,
        auto_commit: bool = True,
    ):
        self._store = store
        self._stock_ledger = stock_ledger or StockLedger(store, auto_commit=False)
        self._tax_splitter = tax_splitter or TaxSplitter()
        self._auto_commit = auto_commit

    def receive(
        self,
        line_id: UUID,
        quantity_now: int,
        jurisdiction: Jurisdiction,
    ) -> ReceiveResult:
        """
        Receive ``quantity_now`` units against one line.

        Over-receipt is capped at the outstanding quantity. A zero accepted
        quantity writes nothing and moves no stock.

        Raises:
            PurchaseOrderLineNotFoundError: Unknown line.
            PurchaseOrderNotFoundError: The line's order is missing.
            ValidationError: Order is cancelled, or quantity is not a whole number.
        """
        line = self._store.get_purchase_order_line(line_id)
        with LogContext.bind(order_id=line.order_id):
            try:
                result = self._receive_line(line, quantity_now, jurisdiction)
                self.recompute_order_status(line.order_id)
                if self._auto_commit:
                    self._store.commit()
                return result
            except Exception:
                if self._auto_commit:
                    self._store.rollback()
                    logger.error("receive_rolled_back", exc_info=True, extra={
                        "line_id": str(line_id),
                    })
                raise

    def _receive_line(
        self,
        line: PurchaseOrderLine,
        quantity_now: int,
        jurisdiction: Jurisdiction,
    ) -> ReceiveResult:
        status = self._store.get_purchase_order_status(line.order_id)
        if status is PurchaseOrderStatus.CANCELLED:
            raise ValidationError(
                "order_id", f"purchase order {line.order_id} is cancelled",
            )

        receipt = compute_receipt(line, quantity_now)
        tax_breakdown = self._tax_splitter.breakdown_for(
            Decimal(receipt.accepted_quantity) * line.unit_price,
            line.tax_rate_percent,
            jurisdiction,
        )

        stock_outcome = None
        if receipt.accepted_quantity > 0:
            self._store.set_received_quantity(line.id, receipt.new_received_total)
            stock_outcome = self._stock_ledger.receive_stock(
                line.product_ref,
                receipt.accepted_quantity,
                product_name=line.description,
            )

        if receipt.was_capped:
            logger.warning("receipt_capped", extra={
                "line_id": str(line.id),
                "requested": receipt.requested_quantity,
                "accepted": receipt.accepted_quantity,
            })

        logger.info("line_received", extra={
            "line_id": str(line.id),
            "accepted": receipt.accepted_quantity,
            "received_total": receipt.new_received_total,
            "ordered": receipt.ordered_quantity,
            "line_complete": receipt.line_complete,
        })

        return ReceiveResult(
            line_id=line.id,
            requested_quantity=receipt.requested_quantity,
            accepted_quantity=receipt.accepted_quantity,
            new_received_total=receipt.new_received_total,
            line_complete=receipt.line_complete,
            delta_applied_to_stock=(
                receipt.accepted_quantity
                if stock_outcome is not None and stock_outcome.applied else 0
            ),
            tax_breakdown=tax_breakdown,
            stock_outcome=stock_outcome,
        )

    def recompute_order_status(self, order_id: UUID) -> PurchaseOrderStatus:
        """Derive and persist the order status from its current lines."""
        current = self._store.get_purchase_order_status(order_id)
        lines = self._store.list_purchase_order_lines(order_id)
        derived = derive_order_status(lines, current)
        if derived is not current:
            self._store.set_purchase_order_status(order_id, derived)
            logger.info("purchase_order_status_changed", extra={
                "order_id": str(order_id),
                "from_status": current.value,
                "to_status": derived.value,
            })
        return derived

    def line_states(self, order_id: UUID) -> dict[UUID, LineReceivingState]:
        return {
            line.id: line_receiving_state(line)
            for line in self._store.list_purchase_order_lines(order_id)
        }
