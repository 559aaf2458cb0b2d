"""
Payment Status Engine - derive an invoice's payment status from its payments.

Pure functions with no I/O.

    total_paid == 0                   -> due
    0 < total_paid < invoice_total    -> partial
    total_paid >= invoice_total       -> paid

Payments are append-only and strictly positive, so re-deriving after an
append can only move due -> partial -> paid. An explicit request to move a
paid invoice back to partial or due is rejected.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from gst_engines.tracer import traced_engine
from gst_kernel.domain.values import ZERO, Payment, PaymentStatus
from gst_kernel.exceptions import InvalidStatusTransitionError, ValidationError
from gst_kernel.logging_config import get_logger

logger = get_logger("engines.payment_status")


def validate_payment_amount(amount: Decimal) -> None:
    """
    Raises:
        ValidationError: If amount is not a positive Decimal.
    """
    if not isinstance(amount, Decimal):
        raise ValidationError("amount", f"must be Decimal, got {type(amount).__name__}")
    if amount <= ZERO:
        raise ValidationError("amount", f"payment must be positive (got {amount})")


def validate_status_transition(
    current: PaymentStatus,
    requested: PaymentStatus,
    invoice_id: str | None = None,
) -> None:
    """
    Enforce the irreversible-paid rule for explicit status requests.

    Raises:
        InvalidStatusTransitionError: If current is PAID and requested is not.
    """
    if current is PaymentStatus.PAID and requested is not PaymentStatus.PAID:
        logger.warning("payment_status_downgrade_rejected", extra={
            "invoice_id": invoice_id,
            "current": current.value,
            "requested": requested.value,
        })
        raise InvalidStatusTransitionError(invoice_id, current.value, requested.value)


def total_paid(payments: Iterable[Payment]) -> Decimal:
    return sum((p.amount for p in payments), ZERO)


class PaymentStatusResolver:
    """Folds a payment list against an invoice total."""

    @traced_engine("payment_status", "1.0", fingerprint_fields=("invoice_total",))
    def resolve(
        self,
        invoice_total: Decimal,
        payments: Iterable[Payment],
    ) -> PaymentStatus:
        """
        Derive the payment status.

        Deterministic: the same inputs always give the same status.
        """
        paid = total_paid(payments)
        return self.status_for_amount(invoice_total, paid)

    @staticmethod
    def status_for_amount(invoice_total: Decimal, paid: Decimal) -> PaymentStatus:
        # A zero-value invoice is already settled.
        if paid >= invoice_total:
            return PaymentStatus.PAID
        if paid > ZERO:
            return PaymentStatus.PARTIAL
        return PaymentStatus.DUE

    @staticmethod
    def outstanding(invoice_total: Decimal, payments: Iterable[Payment]) -> Decimal:
        """Amount still owed, never below zero."""
        return max(invoice_total - total_paid(payments), ZERO)


def merge_with_persisted(
    derived: PaymentStatus,
    persisted: PaymentStatus,
) -> PaymentStatus:
    """
    Status to write after a fresh derivation.

    A persisted PAID is kept even if the derivation says otherwise, so a
    refresh never performs a downgrade.
    """
    if persisted is PaymentStatus.PAID:
        return PaymentStatus.PAID
    return derived
