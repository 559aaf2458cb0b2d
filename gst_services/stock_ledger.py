"""
Stock Ledger Service (``gst_services.stock_ledger``).

Responsibility
--------------
The only writer of product ``current_stock``. Resolves the product,
computes the signed delta for the transaction kind, enforces the
non-negative stock rule through ``gst_engines.stock``, and performs at most
one ``set_product_stock`` write per call.

Architecture position
---------------------
**Services layer** -- composes the pure stock engine with a ``RecordStore``.

Invariants enforced
-------------------
* Stock moves only for ``EntityRole.CUSTOMER`` transactions; other roles
  are open items and report ``SKIPPED_ROLE``.
* An outbound delta that would leave stock below zero is rejected with no
  write; the rejection is returned, not raised.
* Exactly one write per accepted call. Retries are not deduplicated here;
  the caller must not replay an already-committed delta.

Failure modes
-------------
* Negative quantity -> ``ValidationError`` (raised before any read).
* Unknown product (by ref or by name) -> ``SKIPPED_NO_PRODUCT`` outcome.
* Insufficient stock -> ``REJECTED_INSUFFICIENT`` outcome carrying
  ``InsufficientStockError(available, requested)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from gst_engines.stock import evaluate_delta, signed_stock_delta
from gst_kernel.domain.values import EntityRole, ProductStock, TransactionKind
from gst_kernel.exceptions import InsufficientStockError
from gst_kernel.logging_config import get_logger
from gst_kernel.store import RecordStore

logger = get_logger("services.stock_ledger")


class StockOutcomeStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED_ROLE = "skipped_role"
    SKIPPED_NO_PRODUCT = "skipped_no_product"
    REJECTED_INSUFFICIENT = "rejected_insufficient"


@dataclass(frozen=True)
class StockOutcome:
    """Structured result of one apply_delta call."""

    status: StockOutcomeStatus
    product_id: UUID | None = None
    delta: int = 0
    previous_stock: int | None = None
    new_stock: int | None = None
    is_low_stock: bool = False
    rejection: InsufficientStockError | None = None

    @property
    def applied(self) -> bool:
        return self.status is StockOutcomeStatus.APPLIED

    @property
    def skipped(self) -> bool:
        return self.status in (
            StockOutcomeStatus.SKIPPED_ROLE,
            StockOutcomeStatus.SKIPPED_NO_PRODUCT,
        )


class StockLedger:
    """
    Applies signed stock deltas to catalog products.

    Transaction boundary: with ``auto_commit=True`` each accepted call
    commits; orchestrators pass ``auto_commit=False`` and own the boundary.
    """

    def __init__(self, store: RecordStore, auto_commit: bool = True):
        self._store = store
        self._auto_commit = auto_commit

    def resolve_product(
        self,
        product_ref: UUID | None,
        product_name: str | None = None,
    ) -> ProductStock | None:
        """Explicit reference first, then trimmed case-insensitive name."""
        if product_ref is not None:
            return self._store.get_product(product_ref)
        if product_name and product_name.strip():
            return self._store.find_product_by_name(product_name)
        return None

    def apply_delta(
        self,
        product_ref: UUID | None,
        quantity: int,
        kind: TransactionKind,
        role: EntityRole,
        product_name: str | None = None,
    ) -> StockOutcome:
        """
        Apply ``quantity`` units of a ``kind`` movement for a ``role`` party.

        Args:
            product_ref: Catalog product id, or None for a free-text line.
            quantity: Non-negative whole units.
            kind: Transaction kind; decides the delta sign.
            role: Counterparty role; only customer moves stock.
            product_name: Fallback name used when product_ref is None.

        Returns:
            StockOutcome describing what happened.
        """
        delta = signed_stock_delta(kind, quantity)

        if not role.is_stock_linked:
            logger.debug("stock_delta_skipped_role", extra={
                "product_ref": str(product_ref) if product_ref else None,
                "role": role.value,
                "kind": kind.value,
            })
            return StockOutcome(status=StockOutcomeStatus.SKIPPED_ROLE, delta=delta)

        return self._commit_delta(product_ref, product_name, delta, kind)

    def receive_stock(
        self,
        product_ref: UUID | None,
        quantity: int,
        product_name: str | None = None,
    ) -> StockOutcome:
        """
        Inbound purchase delta for goods received against a purchase order.

        Receiving is not tied to an invoice counterparty, so there is no
        role gate.
        """
        delta = signed_stock_delta(TransactionKind.PURCHASE, quantity)
        return self._commit_delta(product_ref, product_name, delta, TransactionKind.PURCHASE)

    def _commit_delta(
        self,
        product_ref: UUID | None,
        product_name: str | None,
        delta: int,
        kind: TransactionKind,
    ) -> StockOutcome:
        product = self.resolve_product(product_ref, product_name)
        if product is None:
            logger.info("stock_delta_skipped_no_product", extra={
                "product_ref": str(product_ref) if product_ref else None,
                "product_name": product_name,
                "kind": kind.value,
            })
            return StockOutcome(status=StockOutcomeStatus.SKIPPED_NO_PRODUCT, delta=delta)

        decision = evaluate_delta(product, delta)
        if not decision.accepted:
            logger.warning("stock_delta_rejected_insufficient", extra={
                "product_id": str(product.product_id),
                "available": product.current_stock,
                "requested": -delta,
                "kind": kind.value,
            })
            return StockOutcome(
                status=StockOutcomeStatus.REJECTED_INSUFFICIENT,
                product_id=product.product_id,
                delta=delta,
                previous_stock=product.current_stock,
                new_stock=product.current_stock,
                is_low_stock=product.is_low_stock,
                rejection=decision.rejection,
            )

        try:
            self._store.set_product_stock(product.product_id, decision.new_stock)
            if self._auto_commit:
                self._store.commit()
        except Exception:
            if self._auto_commit:
                self._store.rollback()
            logger.error("stock_write_failed", exc_info=True, extra={
                "product_id": str(product.product_id),
            })
            raise

        is_low = decision.new_stock <= product.min_stock_level
        logger.info("stock_delta_applied", extra={
            "product_id": str(product.product_id),
            "kind": kind.value,
            "delta": delta,
            "previous_stock": product.current_stock,
            "new_stock": decision.new_stock,
            "is_low_stock": is_low,
        })
        return StockOutcome(
            status=StockOutcomeStatus.APPLIED,
            product_id=product.product_id,
            delta=delta,
            previous_stock=product.current_stock,
            new_stock=decision.new_stock,
            is_low_stock=is_low,
        )
