"""
Module: gst_kernel.store
Responsibility: The persistence collaborator the engine reads from and
    writes to.  ``RecordStore`` is the protocol; ``SqlRecordStore`` is the
    SQLAlchemy implementation over a caller-owned ``Session``.

Architecture position: Kernel.  Services depend on the ``RecordStore``
    protocol only, never on ORM models, so they can run against any store
    exposing these record-level operations.

Invariants enforced:
    - Product lookups by name are trimmed, case-insensitive exact matches.
    - ``set_invoice_payment_status`` refuses to move a paid invoice back to
      partial/due (InvalidStatusTransitionError).
    - Invoice numbers are unique; ``invoice_number_exists`` lets callers
      reject a duplicate before writing.
    - Payments are append-only; there is no update or delete operation.
    - No compare-and-swap on ``current_stock``: the last committed write wins.

Failure modes:
    - PurchaseOrderLineNotFoundError / PurchaseOrderNotFoundError /
      InvoiceNotFoundError / ProductNotFoundError on writes or hard lookups
      against a missing id.
    - ``get_product`` and ``find_product_by_name`` return None on a miss;
      the StockLedger treats that as a manual line.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from gst_kernel.domain.values import (
    EntityRole,
    InvoiceSnapshot,
    InvoiceTaxRecord,
    LineItem,
    Payment,
    PaymentStatus,
    ProductStock,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    TaxBreakdown,
    TaxPeriodEntry,
    TransactionKind,
)
from gst_kernel.exceptions import (
    InvalidStatusTransitionError,
    InvoiceNotFoundError,
    ProductNotFoundError,
    PurchaseOrderLineNotFoundError,
    PurchaseOrderNotFoundError,
)
from gst_kernel.logging_config import get_logger
from gst_kernel.models import (
    InvoiceLineModel,
    InvoiceModel,
    PaymentModel,
    ProductModel,
    PurchaseOrderLineModel,
    PurchaseOrderModel,
    TaxPeriodEntryModel,
    normalize_product_name,
)

logger = get_logger("store")


@runtime_checkable
class RecordStore(Protocol):
    """Record-level read/write operations consumed by the engine."""

    def get_product(self, product_id: UUID) -> ProductStock | None: ...

    def find_product_by_name(self, name: str) -> ProductStock | None: ...

    def set_product_stock(self, product_id: UUID, new_stock: int) -> None: ...

    def list_low_stock_products(self) -> list[ProductStock]: ...

    def get_purchase_order_line(self, line_id: UUID) -> PurchaseOrderLine: ...

    def list_purchase_order_lines(self, order_id: UUID) -> list[PurchaseOrderLine]: ...

    def get_purchase_order_status(self, order_id: UUID) -> PurchaseOrderStatus: ...

    def set_received_quantity(self, line_id: UUID, new_total: int) -> None: ...

    def set_purchase_order_status(
        self, order_id: UUID, status: PurchaseOrderStatus,
    ) -> None: ...

    def create_invoice(
        self,
        *,
        invoice_number: str,
        invoice_date: date,
        kind: TransactionKind,
        role: EntityRole,
        entity_id: UUID | None,
        origin_code: str | None,
        dest_code: str | None,
        is_inter_jurisdiction: bool,
        lines: Sequence[tuple[LineItem, TaxBreakdown]],
        totals: TaxBreakdown,
    ) -> UUID: ...

    def invoice_number_exists(self, invoice_number: str) -> bool: ...

    def get_invoice(self, invoice_id: UUID) -> InvoiceSnapshot: ...

    def list_payments(self, invoice_id: UUID) -> list[Payment]: ...

    def append_payment(
        self, invoice_id: UUID, amount: Decimal, payment_date: date,
    ) -> None: ...

    def set_invoice_payment_status(
        self, invoice_id: UUID, status: PaymentStatus,
    ) -> None: ...

    def add_tax_period_entry(self, entry: TaxPeriodEntry) -> None: ...

    def list_tax_period_entries(
        self, start: date, end: date,
    ) -> list[TaxPeriodEntry]: ...

    def list_invoices_missing_tax_period_entry(self) -> list[InvoiceTaxRecord]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlRecordStore:
    """
    RecordStore backed by a SQLAlchemy Session.

    Contract:
        The store flushes writes but never commits on its own; the calling
        service owns the transaction boundary through ``commit()`` and
        ``rollback()``.
    """

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def get_product(self, product_id: UUID) -> ProductStock | None:
        model = self._session.get(ProductModel, product_id)
        return model.to_dto() if model is not None else None

    def find_product_by_name(self, name: str) -> ProductStock | None:
        key = normalize_product_name(name)
        if not key:
            return None
        model = self._session.scalars(
            select(ProductModel)
            .where(ProductModel.name_key == key)
            .order_by(ProductModel.created_at)
            .limit(1)
        ).first()
        return model.to_dto() if model is not None else None

    def set_product_stock(self, product_id: UUID, new_stock: int) -> None:
        model = self._session.get(ProductModel, product_id)
        if model is None:
            raise ProductNotFoundError(str(product_id))
        previous = model.current_stock
        model.current_stock = new_stock
        self._session.flush()
        logger.debug(
            "product_stock_written",
            extra={
                "product_id": str(product_id),
                "previous_stock": previous,
                "new_stock": new_stock,
            },
        )

    def list_low_stock_products(self) -> list[ProductStock]:
        models = self._session.scalars(
            select(ProductModel)
            .where(ProductModel.current_stock <= ProductModel.min_stock_level)
            .order_by(ProductModel.name_key)
        ).all()
        return [m.to_dto() for m in models]

    # -------------------------------------------------------------------------
    # Purchase orders
    # -------------------------------------------------------------------------

    def _line_model(self, line_id: UUID) -> PurchaseOrderLineModel:
        model = self._session.get(PurchaseOrderLineModel, line_id)
        if model is None:
            raise PurchaseOrderLineNotFoundError(str(line_id))
        return model

    def _order_model(self, order_id: UUID) -> PurchaseOrderModel:
        model = self._session.get(PurchaseOrderModel, order_id)
        if model is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        return model

    def get_purchase_order_line(self, line_id: UUID) -> PurchaseOrderLine:
        return self._line_model(line_id).to_dto()

    def list_purchase_order_lines(self, order_id: UUID) -> list[PurchaseOrderLine]:
        self._order_model(order_id)
        models = self._session.scalars(
            select(PurchaseOrderLineModel)
            .where(PurchaseOrderLineModel.order_id == order_id)
            .order_by(PurchaseOrderLineModel.line_number)
        ).all()
        return [m.to_dto() for m in models]

    def get_purchase_order_status(self, order_id: UUID) -> PurchaseOrderStatus:
        return PurchaseOrderStatus(self._order_model(order_id).status)

    def set_received_quantity(self, line_id: UUID, new_total: int) -> None:
        model = self._line_model(line_id)
        model.received_quantity = new_total
        self._session.flush()

    def set_purchase_order_status(
        self, order_id: UUID, status: PurchaseOrderStatus,
    ) -> None:
        model = self._order_model(order_id)
        model.status = status.value
        self._session.flush()

    # -------------------------------------------------------------------------
    # Invoices and payments
    # -------------------------------------------------------------------------

    def _invoice_model(self, invoice_id: UUID) -> InvoiceModel:
        model = self._session.get(InvoiceModel, invoice_id)
        if model is None:
            raise InvoiceNotFoundError(str(invoice_id))
        return model

    def create_invoice(
        self,
        *,
        invoice_number: str,
        invoice_date: date,
        kind: TransactionKind,
        role: EntityRole,
        entity_id: UUID | None,
        origin_code: str | None,
        dest_code: str | None,
        is_inter_jurisdiction: bool,
        lines: Sequence[tuple[LineItem, TaxBreakdown]],
        totals: TaxBreakdown,
    ) -> UUID:
        invoice = InvoiceModel(
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            kind=kind.value,
            role=role.value,
            entity_id=entity_id,
            origin_code=origin_code,
            dest_code=dest_code,
            is_inter_jurisdiction=is_inter_jurisdiction,
            subtotal=totals.taxable_amount,
            cgst=totals.cgst,
            sgst=totals.sgst,
            igst=totals.igst,
            tax_amount=totals.total_tax,
            total_amount=totals.total_amount,
            payment_status=PaymentStatus.DUE.value,
        )
        self._session.add(invoice)
        self._session.flush()

        for number, (item, breakdown) in enumerate(lines, start=1):
            self._session.add(InvoiceLineModel(
                invoice_id=invoice.id,
                line_number=number,
                product_id=item.product_ref,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_rate_percent=item.tax_rate_percent,
                line_total=item.line_total,
                cgst=breakdown.cgst,
                sgst=breakdown.sgst,
                igst=breakdown.igst,
            ))
        self._session.flush()
        return invoice.id

    def invoice_number_exists(self, invoice_number: str) -> bool:
        return bool(self._session.scalar(
            select(exists().where(InvoiceModel.invoice_number == invoice_number))
        ))

    def get_invoice(self, invoice_id: UUID) -> InvoiceSnapshot:
        return self._invoice_model(invoice_id).to_dto()

    def list_payments(self, invoice_id: UUID) -> list[Payment]:
        models = self._session.scalars(
            select(PaymentModel)
            .where(PaymentModel.invoice_id == invoice_id)
            .order_by(PaymentModel.payment_date, PaymentModel.created_at)
        ).all()
        return [m.to_dto() for m in models]

    def append_payment(
        self, invoice_id: UUID, amount: Decimal, payment_date: date,
    ) -> None:
        self._invoice_model(invoice_id)
        self._session.add(PaymentModel(
            invoice_id=invoice_id,
            amount=amount,
            payment_date=payment_date,
        ))
        self._session.flush()

    def set_invoice_payment_status(
        self, invoice_id: UUID, status: PaymentStatus,
    ) -> None:
        model = self._invoice_model(invoice_id)
        current = PaymentStatus(model.payment_status)
        if current is PaymentStatus.PAID and status is not PaymentStatus.PAID:
            raise InvalidStatusTransitionError(
                str(invoice_id), current.value, status.value,
            )
        model.payment_status = status.value
        self._session.flush()

    # -------------------------------------------------------------------------
    # Tax period entries
    # -------------------------------------------------------------------------

    def add_tax_period_entry(self, entry: TaxPeriodEntry) -> None:
        self._session.add(TaxPeriodEntryModel.from_dto(entry))
        self._session.flush()

    def list_tax_period_entries(
        self, start: date, end: date,
    ) -> list[TaxPeriodEntry]:
        models = self._session.scalars(
            select(TaxPeriodEntryModel)
            .where(TaxPeriodEntryModel.entry_date >= start)
            .where(TaxPeriodEntryModel.entry_date <= end)
            .order_by(TaxPeriodEntryModel.entry_date, TaxPeriodEntryModel.invoice_number)
        ).all()
        return [m.to_dto() for m in models]

    def list_invoices_missing_tax_period_entry(self) -> list[InvoiceTaxRecord]:
        has_entry = exists().where(TaxPeriodEntryModel.invoice_id == InvoiceModel.id)
        models = self._session.scalars(
            select(InvoiceModel)
            .where(~has_entry)
            .order_by(InvoiceModel.invoice_date, InvoiceModel.invoice_number)
        ).all()
        return [m.to_tax_record() for m in models]

    # -------------------------------------------------------------------------
    # Transaction boundary
    # -------------------------------------------------------------------------

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
