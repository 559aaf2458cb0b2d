"""
Tests for the PaymentService.

Covers the due -> partial -> paid progression, the irreversible-paid rule,
refresh idempotence and outstanding balances.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from gst_kernel.domain.values import EntityRole, LineItem, PaymentStatus
from gst_kernel.exceptions import (
    InvalidStatusTransitionError,
    InvoiceNotFoundError,
    ValidationError,
)
from gst_services.payment_service import PaymentService


@pytest.fixture
def payments(store, deterministic_clock) -> PaymentService:
    return PaymentService(store, deterministic_clock)


@pytest.fixture
def invoice_1000(record_invoice):
    """An invoice whose total is exactly 1000 (zero-rated)."""
    result = record_invoice(
        LineItem(Decimal("1"), Decimal("1000"), Decimal("0")),
        role=EntityRole.SUPPLIER,
    )
    return result.invoice_id


class TestPaymentProgression:

    def test_due_partial_paid_then_downgrade_rejected(self, payments, invoice_1000):
        """Total 1000, payments 400 then 600: due, partial, paid; due is then refused."""
        assert payments.current_status(invoice_1000) is PaymentStatus.DUE

        assert payments.record_payment(invoice_1000, Decimal("400")) is PaymentStatus.PARTIAL
        assert payments.record_payment(invoice_1000, Decimal("600")) is PaymentStatus.PAID

        with pytest.raises(InvalidStatusTransitionError):
            payments.set_status(invoice_1000, PaymentStatus.DUE)

        assert payments.current_status(invoice_1000) is PaymentStatus.PAID

    def test_payment_date_defaults_to_clock(self, payments, store, invoice_1000):
        payments.record_payment(invoice_1000, Decimal("10"))

        (payment,) = store.list_payments(invoice_1000)
        assert payment.payment_date == date(2025, 4, 1)

    def test_explicit_payment_date(self, payments, store, invoice_1000):
        payments.record_payment(invoice_1000, Decimal("10"), date(2025, 6, 2))

        (payment,) = store.list_payments(invoice_1000)
        assert payment.payment_date == date(2025, 6, 2)

    def test_refresh_is_idempotent(self, payments, invoice_1000):
        payments.record_payment(invoice_1000, Decimal("250"))

        assert payments.refresh_status(invoice_1000) is PaymentStatus.PARTIAL
        assert payments.refresh_status(invoice_1000) is PaymentStatus.PARTIAL

    def test_outstanding_balance(self, payments, invoice_1000):
        payments.record_payment(invoice_1000, Decimal("400"))

        assert payments.outstanding_balance(invoice_1000) == Decimal("600")


class TestExplicitStatus:

    def test_manual_mark_paid(self, payments, invoice_1000):
        assert payments.set_status(invoice_1000, PaymentStatus.PAID) is PaymentStatus.PAID

    def test_refresh_keeps_manually_paid(self, payments, invoice_1000):
        payments.set_status(invoice_1000, PaymentStatus.PAID)

        assert payments.refresh_status(invoice_1000) is PaymentStatus.PAID


class TestPaymentValidation:

    def test_zero_amount_rejected(self, payments, store, invoice_1000):
        with pytest.raises(ValidationError):
            payments.record_payment(invoice_1000, Decimal("0"))

        assert store.list_payments(invoice_1000) == []

    def test_unknown_invoice(self, payments):
        with pytest.raises(InvoiceNotFoundError):
            payments.record_payment(uuid4(), Decimal("10"))

    def test_rejected_downgrade_is_logged(self, payments, invoice_1000, captured_logs):
        payments.set_status(invoice_1000, PaymentStatus.PAID)

        with pytest.raises(InvalidStatusTransitionError):
            payments.set_status(invoice_1000, PaymentStatus.PARTIAL)

        messages = [r["message"] for r in captured_logs()]
        assert "payment_status_downgrade_rejected" in messages
