"""
Tests for purchase order receiving arithmetic.

Covers clamping, cumulative totals, per-line state and order status
derivation.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from gst_engines.receiving import (
    LineReceivingState,
    compute_receipt,
    derive_order_status,
    line_receiving_state,
    receiving_progress_percent,
)
from gst_kernel.domain.values import PurchaseOrderLine, PurchaseOrderStatus
from gst_kernel.exceptions import ValidationError

ORDER_ID = uuid4()


def _line(ordered: int, received: int = 0) -> PurchaseOrderLine:
    return PurchaseOrderLine(
        id=uuid4(),
        order_id=ORDER_ID,
        ordered_quantity=ordered,
        received_quantity=received,
        unit_price=Decimal("100"),
        tax_rate_percent=Decimal("18"),
    )


class TestComputeReceipt:

    def test_partial_then_capped(self):
        """Ordered 10: receive 6, then request 10 and get only the remaining 4."""
        first = compute_receipt(_line(10), 6)
        assert first.accepted_quantity == 6
        assert first.new_received_total == 6
        assert not first.line_complete

        second = compute_receipt(_line(10, received=6), 10)
        assert second.accepted_quantity == 4
        assert second.new_received_total == 10
        assert second.line_complete
        assert second.was_capped

    def test_negative_request_clamped_to_zero(self):
        result = compute_receipt(_line(10, received=3), -2)

        assert result.accepted_quantity == 0
        assert result.new_received_total == 3

    def test_fully_received_line_accepts_nothing(self):
        result = compute_receipt(_line(4, received=4), 1)

        assert result.accepted_quantity == 0
        assert result.line_complete

    @pytest.mark.parametrize("bad", [2.5, True, "3"])
    def test_non_integer_rejected(self, bad):
        with pytest.raises(ValidationError):
            compute_receipt(_line(10), bad)


class TestLineState:

    def test_states(self):
        assert line_receiving_state(_line(5)) is LineReceivingState.PENDING
        assert line_receiving_state(_line(5, 2)) is LineReceivingState.PARTIAL
        assert line_receiving_state(_line(5, 5)) is LineReceivingState.COMPLETE

    def test_progress_percent(self):
        assert receiving_progress_percent(_line(3, 1)) == 33
        assert receiving_progress_percent(_line(0)) == 100

    def test_over_receipt_cannot_be_constructed(self):
        with pytest.raises(ValidationError):
            _line(5, 6)


class TestDeriveOrderStatus:

    def test_all_complete_is_received(self):
        lines = [_line(5, 5), _line(2, 2)]
        assert derive_order_status(lines, PurchaseOrderStatus.PARTIAL) is PurchaseOrderStatus.RECEIVED

    def test_any_received_is_partial(self):
        lines = [_line(5, 1), _line(2)]
        assert derive_order_status(lines, PurchaseOrderStatus.SENT) is PurchaseOrderStatus.PARTIAL

    def test_nothing_received_keeps_current(self):
        lines = [_line(5), _line(2)]
        assert derive_order_status(lines, PurchaseOrderStatus.DRAFT) is PurchaseOrderStatus.DRAFT
        assert derive_order_status(lines, PurchaseOrderStatus.SENT) is PurchaseOrderStatus.SENT

    def test_cancelled_is_never_recomputed(self):
        lines = [_line(5, 5)]
        assert derive_order_status(lines, PurchaseOrderStatus.CANCELLED) is PurchaseOrderStatus.CANCELLED

    def test_no_lines_keeps_current(self):
        assert derive_order_status([], PurchaseOrderStatus.SENT) is PurchaseOrderStatus.SENT


class TestReceiptTrace:

    def _fingerprints(self, captured_logs) -> list[str]:
        return [
            r["input_fingerprint"] for r in captured_logs()
            if r["message"] == "GST_ENGINE_TRACE" and r["engine_name"] == "receiving"
        ]

    def test_positional_quantity_changes_fingerprint(self, captured_logs):
        line = _line(10)

        compute_receipt(line, 1)
        compute_receipt(line, 7)

        first, second = self._fingerprints(captured_logs)[-2:]
        assert first != second

    def test_positional_and_keyword_calls_match(self, captured_logs):
        line = _line(10)

        compute_receipt(line, 4)
        compute_receipt(line=line, quantity_now=4)

        first, second = self._fingerprints(captured_logs)[-2:]
        assert first == second
