"""
Domain value objects for the GST kernel (``gst_kernel.domain.values``).

Responsibility
--------------
Frozen value objects and enums shared by engines and services: transaction
kinds, entity roles, line items, tax breakdowns, product stock, purchase
order lines, payments and the two derived status enums.

Architecture
------------
Layer: **Kernel > Domain** -- pure data, zero I/O. Engines and services
import from here; this module imports nothing above the kernel.

Invariants
----------
- All money and rate fields are ``Decimal``; floats are rejected.
- ``LineItem`` quantities, prices and rates are non-negative.
- ``PurchaseOrderLine`` keeps ``0 <= received_quantity <= ordered_quantity``.
- ``Payment.amount`` is strictly positive.

Failure Modes
-------------
- Construction with a value that breaks an invariant raises
  ``ValidationError`` immediately.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

from gst_kernel.exceptions import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO = Decimal("2")


def _require_decimal(field: str, value: object) -> None:
    if not isinstance(value, Decimal):
        raise ValidationError(field, f"must be Decimal, got {type(value).__name__}")


def _require_non_negative(field: str, value: Decimal | int) -> None:
    if value < 0:
        raise ValidationError(field, f"cannot be negative (got {value})")


class TransactionKind(str, Enum):
    """Kind of a committed transaction."""

    SALE = "sale"
    PURCHASE = "purchase"
    SALE_RETURN = "sale_return"
    PURCHASE_RETURN = "purchase_return"

    @property
    def is_return(self) -> bool:
        return self in (TransactionKind.SALE_RETURN, TransactionKind.PURCHASE_RETURN)

    @property
    def forward(self) -> "TransactionKind":
        """The non-return counterpart (identity for forward kinds)."""
        if self is TransactionKind.SALE_RETURN:
            return TransactionKind.SALE
        if self is TransactionKind.PURCHASE_RETURN:
            return TransactionKind.PURCHASE
        return self

    @property
    def sign(self) -> int:
        """-1 for returns, +1 otherwise. Applied to aggregate tax totals."""
        return -1 if self.is_return else 1


class EntityRole(str, Enum):
    """Role of the counterparty on a transaction."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"
    WHOLESALER = "wholesaler"
    TRANSPORT = "transport"
    LABOUR = "labour"
    OTHER = "other"

    @property
    def is_stock_linked(self) -> bool:
        """Only customer transactions move inventory; the rest are open items."""
        return self is EntityRole.CUSTOMER


class PurchaseOrderStatus(str, Enum):
    """Purchase order lifecycle status. Partial/received are derived."""

    DRAFT = "draft"
    SENT = "sent"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Invoice payment status, ordered due < partial < paid."""

    DUE = "due"
    PARTIAL = "partial"
    PAID = "paid"

    @property
    def rank(self) -> int:
        return _PAYMENT_RANK[self]


_PAYMENT_RANK = {
    PaymentStatus.DUE: 0,
    PaymentStatus.PARTIAL: 1,
    PaymentStatus.PAID: 2,
}


@dataclass(frozen=True)
class LineItem:
    """
    One quantity/price/rate row of an invoice.

    ``line_total`` is tax-exclusive. ``product_ref`` is None for manual
    (free-text) lines; those may still match a catalog product by
    ``description``. A None ``tax_rate_percent`` means the company default
    rate applies; see ``with_default_rate``.
    """

    quantity: Decimal
    unit_price: Decimal
    tax_rate_percent: Decimal | None = None
    product_ref: UUID | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        for name in ("quantity", "unit_price", "tax_rate_percent"):
            value = getattr(self, name)
            if value is None and name == "tax_rate_percent":
                continue
            _require_decimal(name, value)
            _require_non_negative(name, value)

    def with_default_rate(self, rate: Decimal) -> "LineItem":
        if self.tax_rate_percent is not None:
            return self
        return replace(self, tax_rate_percent=rate)

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class TaxBreakdown:
    """
    CGST/SGST/IGST split of one line or one transaction.

    Values are unrounded; ``rounded()`` is for display only. A per-line
    breakdown is either all-IGST or an equal CGST/SGST pair; a summed
    transaction breakdown may contain both when lines differ.
    """

    taxable_amount: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total_tax: Decimal
    total_amount: Decimal

    @classmethod
    def zero(cls) -> "TaxBreakdown":
        return cls(ZERO, ZERO, ZERO, ZERO, ZERO, ZERO)

    @property
    def is_inter_jurisdiction(self) -> bool:
        return self.igst != ZERO

    def __add__(self, other: "TaxBreakdown") -> "TaxBreakdown":
        if not isinstance(other, TaxBreakdown):
            return NotImplemented
        return TaxBreakdown(
            taxable_amount=self.taxable_amount + other.taxable_amount,
            cgst=self.cgst + other.cgst,
            sgst=self.sgst + other.sgst,
            igst=self.igst + other.igst,
            total_tax=self.total_tax + other.total_tax,
            total_amount=self.total_amount + other.total_amount,
        )

    def negated(self) -> "TaxBreakdown":
        return TaxBreakdown(
            taxable_amount=-self.taxable_amount,
            cgst=-self.cgst,
            sgst=-self.sgst,
            igst=-self.igst,
            total_tax=-self.total_tax,
            total_amount=-self.total_amount,
        )

    def scaled(self, sign: int) -> "TaxBreakdown":
        return self.negated() if sign < 0 else self

    def rounded(self, places: int = 2) -> "TaxBreakdown":
        quantum = Decimal(1).scaleb(-places)

        def q(value: Decimal) -> Decimal:
            return value.quantize(quantum, rounding=ROUND_HALF_UP)

        return TaxBreakdown(
            taxable_amount=q(self.taxable_amount),
            cgst=q(self.cgst),
            sgst=q(self.sgst),
            igst=q(self.igst),
            total_tax=q(self.total_tax),
            total_amount=q(self.total_amount),
        )


@dataclass(frozen=True)
class Jurisdiction:
    """Origin/destination pair for one tax computation."""

    origin_code: str | None
    dest_code: str | None
    force_inter_jurisdiction: bool = False


@dataclass(frozen=True)
class ProductStock:
    """Stock state of one catalog product."""

    product_id: UUID
    name: str
    current_stock: int
    min_stock_level: int = 0

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock_level


@dataclass(frozen=True)
class PurchaseOrderLine:
    """
    One ordered row of a purchase order.

    Contract: ``0 <= received_quantity <= ordered_quantity``. Only the
    receiving tracker produces a line with a larger ``received_quantity``.
    """

    id: UUID
    order_id: UUID
    ordered_quantity: int
    received_quantity: int
    unit_price: Decimal
    tax_rate_percent: Decimal
    product_ref: UUID | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        _require_non_negative("ordered_quantity", self.ordered_quantity)
        _require_non_negative("received_quantity", self.received_quantity)
        if self.received_quantity > self.ordered_quantity:
            raise ValidationError(
                "received_quantity",
                f"{self.received_quantity} exceeds ordered {self.ordered_quantity}",
            )
        _require_decimal("unit_price", self.unit_price)
        _require_non_negative("unit_price", self.unit_price)
        _require_decimal("tax_rate_percent", self.tax_rate_percent)
        _require_non_negative("tax_rate_percent", self.tax_rate_percent)

    @property
    def remaining_quantity(self) -> int:
        return self.ordered_quantity - self.received_quantity

    @property
    def is_complete(self) -> bool:
        return self.received_quantity == self.ordered_quantity


@dataclass(frozen=True)
class Payment:
    """A recorded payment against one invoice. Append-only."""

    invoice_id: UUID
    amount: Decimal
    payment_date: date

    def __post_init__(self) -> None:
        _require_decimal("amount", self.amount)
        if self.amount <= 0:
            raise ValidationError("amount", f"payment must be positive (got {self.amount})")


@dataclass(frozen=True)
class InvoiceSnapshot:
    """Persisted invoice header as seen by the payment service."""

    invoice_id: UUID
    invoice_number: str
    kind: TransactionKind
    role: EntityRole
    total_amount: Decimal
    payment_status: PaymentStatus


@dataclass(frozen=True)
class TaxPeriodEntry:
    """
    Signed tax record of one committed invoice, for period aggregation.

    ``breakdown`` already carries the return sign: a sale return holds the
    negated breakdown of the equivalent sale.
    """

    invoice_id: UUID
    invoice_number: str
    kind: TransactionKind
    entry_date: date
    breakdown: TaxBreakdown
    origin_code: str | None = None
    dest_code: str | None = None


@dataclass(frozen=True)
class InvoiceTaxRecord:
    """Persisted invoice header with its unsigned transaction totals."""

    invoice_id: UUID
    invoice_number: str
    kind: TransactionKind
    invoice_date: date
    totals: TaxBreakdown
    origin_code: str | None = None
    dest_code: str | None = None
