"""
PaymentService -- persistence wrapper around the payment status engine.

Payments are append-only. After each append the status is re-derived from
the full payment list and written back; a persisted ``paid`` is never moved
backward by a refresh, and an explicit request to do so is rejected.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from gst_engines.payment_status import (
    PaymentStatusResolver,
    merge_with_persisted,
    validate_payment_amount,
    validate_status_transition,
)
from gst_kernel.domain.clock import Clock, SystemClock
from gst_kernel.domain.values import PaymentStatus
from gst_kernel.logging_config import LogContext, get_logger
from gst_kernel.store import RecordStore

logger = get_logger("services.payment")


class PaymentService:
    """
    Records payments and keeps invoice payment status in step with them.

    Each public mutation commits on success and rolls back on error.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        resolver: PaymentStatusResolver | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._resolver = resolver or PaymentStatusResolver()

    def record_payment(
        self,
        invoice_id: UUID,
        amount: Decimal,
        payment_date: date | None = None,
    ) -> PaymentStatus:
        """
        Append a payment and persist the re-derived status.

        Args:
            invoice_id: Invoice being paid.
            amount: Strictly positive Decimal.
            payment_date: Defaults to the clock's current date.

        Returns:
            The invoice's payment status after the append.

        Raises:
            ValidationError: amount is not a positive Decimal.
            InvoiceNotFoundError: Unknown invoice.
        """
        validate_payment_amount(amount)
        payment_date = payment_date or self._clock.today()

        with LogContext.bind(invoice_id=invoice_id):
            logger.info("payment_record_started", extra={
                "amount": str(amount),
                "payment_date": payment_date.isoformat(),
            })
            try:
                self._store.append_payment(invoice_id, amount, payment_date)
                status = self._refresh(invoice_id)
                self._store.commit()
            except Exception:
                self._store.rollback()
                logger.error("payment_record_rolled_back", exc_info=True)
                raise

            logger.info("payment_recorded", extra={
                "amount": str(amount),
                "payment_status": status.value,
            })
            return status

    def refresh_status(self, invoice_id: UUID) -> PaymentStatus:
        """Re-derive status from all payments; idempotent."""
        with LogContext.bind(invoice_id=invoice_id):
            try:
                status = self._refresh(invoice_id)
                self._store.commit()
            except Exception:
                self._store.rollback()
                logger.error("payment_refresh_rolled_back", exc_info=True)
                raise
            return status

    def set_status(self, invoice_id: UUID, status: PaymentStatus) -> PaymentStatus:
        """
        Explicit status request.

        Raises:
            InvalidStatusTransitionError: invoice is paid and status is not.
        """
        with LogContext.bind(invoice_id=invoice_id):
            current = self._store.get_invoice(invoice_id).payment_status
            validate_status_transition(current, status, invoice_id=str(invoice_id))
            try:
                self._store.set_invoice_payment_status(invoice_id, status)
                self._store.commit()
            except Exception:
                self._store.rollback()
                logger.error("payment_status_set_rolled_back", exc_info=True)
                raise

            logger.info("payment_status_set", extra={
                "from_status": current.value,
                "to_status": status.value,
            })
            return status

    def outstanding_balance(self, invoice_id: UUID) -> Decimal:
        invoice = self._store.get_invoice(invoice_id)
        return self._resolver.outstanding(
            invoice.total_amount, self._store.list_payments(invoice_id),
        )

    def current_status(self, invoice_id: UUID) -> PaymentStatus:
        return self._store.get_invoice(invoice_id).payment_status

    def _refresh(self, invoice_id: UUID) -> PaymentStatus:
        invoice = self._store.get_invoice(invoice_id)
        derived = self._resolver.resolve(
            invoice.total_amount, self._store.list_payments(invoice_id),
        )
        status = merge_with_persisted(derived, invoice.payment_status)
        if status is not invoice.payment_status:
            self._store.set_invoice_payment_status(invoice_id, status)
            logger.info("payment_status_changed", extra={
                "from_status": invoice.payment_status.value,
                "to_status": status.value,
            })
        return status
