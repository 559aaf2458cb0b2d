"""
Stock Engine - signed stock deltas and the non-negative stock rule.

Pure functions with no I/O. The StockLedger service reads the product,
asks this engine what to do, and performs at most one write.

Delta by transaction kind:

    sale            -> -quantity
    purchase        -> +quantity
    sale_return     -> +quantity   (inverse of sale)
    purchase_return -> -quantity   (inverse of purchase)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from gst_engines.tracer import traced_engine
from gst_kernel.domain.values import ProductStock, TransactionKind
from gst_kernel.exceptions import InsufficientStockError, ValidationError

_DIRECTION: dict[TransactionKind, int] = {
    TransactionKind.SALE: -1,
    TransactionKind.PURCHASE: 1,
    TransactionKind.SALE_RETURN: 1,
    TransactionKind.PURCHASE_RETURN: -1,
}


class StockDecisionType(str, Enum):
    ACCEPT = "accept"
    REJECT_INSUFFICIENT = "reject_insufficient"


@dataclass(frozen=True)
class StockDecision:
    """Outcome of evaluating one delta against one product's stock."""

    decision: StockDecisionType
    current_stock: int
    delta: int
    new_stock: int
    rejection: InsufficientStockError | None = None

    @property
    def accepted(self) -> bool:
        return self.decision is StockDecisionType.ACCEPT


def signed_stock_delta(kind: TransactionKind, quantity: int) -> int:
    """
    Signed stock movement for ``quantity`` units of a ``kind`` transaction.

    Raises:
        ValidationError: If quantity is negative.
    """
    if quantity < 0:
        raise ValidationError("quantity", f"cannot be negative (got {quantity})")
    return _DIRECTION[kind] * quantity


def whole_units(quantity: Decimal, field: str = "quantity") -> int:
    """
    Convert a line quantity to whole stock units.

    Raises:
        ValidationError: If the quantity is negative or fractional.
    """
    if quantity < 0:
        raise ValidationError(field, f"cannot be negative (got {quantity})")
    if quantity != quantity.to_integral_value():
        raise ValidationError(
            field, f"stock-linked quantity must be whole units (got {quantity})",
        )
    return int(quantity)


@traced_engine("stock", "1.0", fingerprint_fields=("delta",))
def evaluate_delta(product: ProductStock, delta: int) -> StockDecision:
    """
    Decide whether ``delta`` may be applied to ``product``.

    Inbound (non-negative) deltas are always accepted; there is no upper
    bound. An outbound delta is rejected when it would leave stock below
    zero, carrying ``InsufficientStockError(available, requested)``.
    """
    new_stock = product.current_stock + delta
    if delta < 0 and new_stock < 0:
        return StockDecision(
            decision=StockDecisionType.REJECT_INSUFFICIENT,
            current_stock=product.current_stock,
            delta=delta,
            new_stock=product.current_stock,
            rejection=InsufficientStockError(
                product_id=str(product.product_id),
                available=product.current_stock,
                requested=-delta,
            ),
        )
    return StockDecision(
        decision=StockDecisionType.ACCEPT,
        current_stock=product.current_stock,
        delta=delta,
        new_stock=new_stock,
    )
