"""Tests for payment status derivation and the irreversible-paid rule."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from gst_engines.payment_status import (
    PaymentStatusResolver,
    merge_with_persisted,
    total_paid,
    validate_payment_amount,
    validate_status_transition,
)
from gst_kernel.domain.values import Payment, PaymentStatus
from gst_kernel.exceptions import InvalidStatusTransitionError, ValidationError

INVOICE_ID = uuid4()


def _payments(*amounts: str) -> list[Payment]:
    return [Payment(INVOICE_ID, Decimal(a), date(2025, 5, 1)) for a in amounts]


@pytest.fixture
def resolver() -> PaymentStatusResolver:
    return PaymentStatusResolver()


class TestResolve:

    def test_no_payments_is_due(self, resolver):
        assert resolver.resolve(Decimal("1000"), []) is PaymentStatus.DUE

    def test_part_payment_is_partial(self, resolver):
        assert resolver.resolve(Decimal("1000"), _payments("400")) is PaymentStatus.PARTIAL

    def test_exact_payment_is_paid(self, resolver):
        assert resolver.resolve(Decimal("1000"), _payments("400", "600")) is PaymentStatus.PAID

    def test_overpayment_is_paid(self, resolver):
        assert resolver.resolve(Decimal("1000"), _payments("1200")) is PaymentStatus.PAID

    def test_zero_total_is_paid(self, resolver):
        assert resolver.resolve(Decimal("0"), []) is PaymentStatus.PAID

    def test_resolution_is_idempotent(self, resolver):
        payments = _payments("100", "250.50")
        first = resolver.resolve(Decimal("1000"), payments)
        assert resolver.resolve(Decimal("1000"), payments) is first

    def test_outstanding_never_negative(self, resolver):
        assert resolver.outstanding(Decimal("1000"), _payments("400")) == Decimal("600")
        assert resolver.outstanding(Decimal("1000"), _payments("1500")) == Decimal("0")

    def test_total_paid(self):
        assert total_paid(_payments("0.10", "0.20")) == Decimal("0.30")


class TestTransitions:

    @pytest.mark.parametrize("requested", [PaymentStatus.DUE, PaymentStatus.PARTIAL])
    def test_downgrade_from_paid_rejected(self, requested):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            validate_status_transition(PaymentStatus.PAID, requested, invoice_id="inv-1")

        assert exc_info.value.current == "paid"
        assert exc_info.value.requested == requested.value

    def test_paid_to_paid_allowed(self):
        validate_status_transition(PaymentStatus.PAID, PaymentStatus.PAID)

    def test_forward_moves_allowed(self):
        validate_status_transition(PaymentStatus.DUE, PaymentStatus.PAID)
        validate_status_transition(PaymentStatus.PARTIAL, PaymentStatus.DUE)

    def test_merge_keeps_persisted_paid(self):
        assert merge_with_persisted(PaymentStatus.PARTIAL, PaymentStatus.PAID) is PaymentStatus.PAID
        assert merge_with_persisted(PaymentStatus.PARTIAL, PaymentStatus.DUE) is PaymentStatus.PARTIAL


class TestPaymentAmount:

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    def test_non_positive_rejected(self, amount):
        with pytest.raises(ValidationError):
            validate_payment_amount(amount)

    def test_float_rejected(self):
        with pytest.raises(ValidationError):
            validate_payment_amount(100.0)

    def test_payment_value_object_rejects_zero(self):
        with pytest.raises(ValidationError):
            Payment(INVOICE_ID, Decimal("0"), date(2025, 5, 1))


class TestResolverTrace:

    def test_fingerprint_tracks_positional_total(self, resolver, captured_logs):
        resolver.resolve(Decimal("100"), _payments("40"))
        resolver.resolve(Decimal("250"), _payments("40"))

        fps = [
            r["input_fingerprint"] for r in captured_logs()
            if r["message"] == "GST_ENGINE_TRACE" and r["engine_name"] == "payment_status"
        ]
        assert fps[-2] != fps[-1]
