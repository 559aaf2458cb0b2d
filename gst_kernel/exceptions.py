"""
Typed Exception Hierarchy for the GST kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the engine (form handlers, import jobs, report builders) must be
able to tell a bad input apart from a stock shortfall or a forbidden status
change without parsing message strings. Every error therefore:

  1. Has its own class (catch by type, not message)
  2. Carries a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        payments.set_status(invoice_id, PaymentStatus.DUE)
    except InvalidStatusTransitionError as e:
        api_response(code=e.code, current=e.current, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    GstKernelError (base)
    |
    +-- ValidationError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |
    +-- StatusError
    |   +-- InvalidStatusTransitionError
    |
    +-- NotFoundError
    |   +-- ProductNotFoundError
    |   +-- PurchaseOrderNotFoundError
    |   +-- PurchaseOrderLineNotFoundError
    |   +-- InvoiceNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                           | When Raised
------------|--------------------------------|--------------------------------------
Validation  | VALIDATION_ERROR               | Negative amount/quantity, payment <= 0,
            |                                | customer invoice without entity
------------|--------------------------------|--------------------------------------
Stock       | INSUFFICIENT_STOCK             | Outbound movement would go below zero
------------|--------------------------------|--------------------------------------
Status      | INVALID_STATUS_TRANSITION      | Downgrade requested on a paid invoice
------------|--------------------------------|--------------------------------------
Lookup      | PRODUCT_NOT_FOUND              | Product id does not exist
            | PURCHASE_ORDER_NOT_FOUND       | Purchase order id does not exist
            | PURCHASE_ORDER_LINE_NOT_FOUND  | PO line id does not exist
            | INVOICE_NOT_FOUND              | Invoice id does not exist
------------|--------------------------------|--------------------------------------
Config      | CONFIGURATION_ERROR            | Malformed or invalid engine config

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION and STATUS errors propagate to the caller, who owns the
   user-facing message. No mutation has happened when they are raised.

2. INSUFFICIENT STOCK is line-scoped. StockLedger does not raise it; it
   returns it inside a ``StockOutcome`` so an invoice loop can keep going:

    outcome = ledger.apply_delta(...)
    if outcome.rejection is not None:
        warnings.append(outcome.rejection.code)

3. PRODUCT NOT FOUND during stock application is a no-op (free-text line),
   so the ledger reports ``SKIPPED_NO_PRODUCT`` instead of raising.
   PURCHASE ORDER lookups during receiving raise, since the line must exist.
"""


class GstKernelError(Exception):
    """
    Base exception for all GST kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "GST_KERNEL_ERROR"


# Validation


class ValidationError(GstKernelError):
    """Input rejected before any mutation."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Stock


class StockError(GstKernelError):
    """Base exception for stock-related errors."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """
    Outbound movement would drive stock below zero.

    Recoverable and line-scoped: returned in a StockOutcome, reported as a
    warning, never fatal to the enclosing transaction.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"available={available}, requested={requested}"
        )


# Status


class StatusError(GstKernelError):
    """Base exception for status-related errors."""

    code: str = "STATUS_ERROR"


class InvalidStatusTransitionError(StatusError):
    """
    Explicit status change that would move a paid invoice backward.

    Status must be re-derived from the payment list instead of forced.
    """

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, invoice_id: str | None, current: str, requested: str):
        self.invoice_id = invoice_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change payment status of invoice {invoice_id} "
            f"from {current} to {requested}"
        )


# Lookups


class NotFoundError(GstKernelError):
    """Base exception for record lookups that missed."""

    code: str = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order with given ID was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Purchase order not found: {order_id}")


class PurchaseOrderLineNotFoundError(NotFoundError):
    """Purchase order line with given ID was not found."""

    code: str = "PURCHASE_ORDER_LINE_NOT_FOUND"

    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Purchase order line not found: {line_id}")


class InvoiceNotFoundError(NotFoundError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


# Configuration


class ConfigurationError(GstKernelError):
    """Engine configuration is malformed or invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration '{key}': {reason}")
