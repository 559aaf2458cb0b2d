"""
Receiving Engine - cumulative receipt arithmetic for purchase order lines.

Pure functions with no I/O.

Rules:
    - A requested receipt is clamped to [0, ordered - received_so_far];
      over-receipt is capped, not rejected.
    - Only the accepted increment moves stock, never the cumulative total.
    - Order status after a line update: RECEIVED if every line is complete,
      else PARTIAL if any line has received > 0, else unchanged.
      CANCELLED is never recomputed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from gst_engines.tracer import traced_engine
from gst_kernel.domain.values import PurchaseOrderLine, PurchaseOrderStatus
from gst_kernel.exceptions import ValidationError


class LineReceivingState(str, Enum):
    """Per-line receiving progress."""

    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ReceiptComputation:
    """Result of applying one requested receipt to one line."""

    requested_quantity: int
    accepted_quantity: int
    previous_received: int
    new_received_total: int
    ordered_quantity: int

    @property
    def line_complete(self) -> bool:
        return self.new_received_total == self.ordered_quantity

    @property
    def was_capped(self) -> bool:
        return self.accepted_quantity < self.requested_quantity


def clamp_receipt_quantity(line: PurchaseOrderLine, quantity_now: int) -> int:
    """Clamp a requested receipt into [0, remaining]."""
    return max(0, min(quantity_now, line.remaining_quantity))


@traced_engine("receiving", "1.0", fingerprint_fields=("quantity_now",))
def compute_receipt(line: PurchaseOrderLine, quantity_now: int) -> ReceiptComputation:
    """
    Apply a requested receipt to a line without touching storage.

    Raises:
        ValidationError: If quantity_now is not an int.
    """
    if isinstance(quantity_now, bool) or not isinstance(quantity_now, int):
        raise ValidationError(
            "quantity_now", f"must be a whole number (got {quantity_now!r})",
        )
    accepted = clamp_receipt_quantity(line, quantity_now)
    return ReceiptComputation(
        requested_quantity=quantity_now,
        accepted_quantity=accepted,
        previous_received=line.received_quantity,
        new_received_total=line.received_quantity + accepted,
        ordered_quantity=line.ordered_quantity,
    )


def line_receiving_state(line: PurchaseOrderLine) -> LineReceivingState:
    if line.received_quantity >= line.ordered_quantity:
        return LineReceivingState.COMPLETE
    if line.received_quantity > 0:
        return LineReceivingState.PARTIAL
    return LineReceivingState.PENDING


def receiving_progress_percent(line: PurchaseOrderLine) -> int:
    """Whole-percent receiving progress, 100 for an empty (zero-quantity) line."""
    if line.ordered_quantity == 0:
        return 100
    return line.received_quantity * 100 // line.ordered_quantity


def derive_order_status(
    lines: Iterable[PurchaseOrderLine],
    current: PurchaseOrderStatus,
) -> PurchaseOrderStatus:
    """
    Order-level status from its lines.

    An order with no lines keeps its current status.
    """
    if current is PurchaseOrderStatus.CANCELLED:
        return current
    lines = list(lines)
    if not lines:
        return current
    if all(line.is_complete for line in lines):
        return PurchaseOrderStatus.RECEIVED
    if any(line.received_quantity > 0 for line in lines):
        return PurchaseOrderStatus.PARTIAL
    return current
