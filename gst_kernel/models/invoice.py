"""
Module: gst_kernel.models.invoice
Responsibility: ORM persistence for invoices, invoice lines and payments.

Invariants enforced:
    - Invoice and line amounts are the unrounded Decimal values produced by
      the TaxSplitter; display rounding happens outside the engine.
    - invoice_number is unique across all invoices.
    - Payments are append-only: the store exposes no update or delete.
    - payment_status is stored redundantly alongside the payment rows; it
      is only ever written through RecordStore.set_invoice_payment_status.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gst_kernel.db.base import TrackedBase, UUIDString
from gst_kernel.domain.values import (
    EntityRole,
    InvoiceSnapshot,
    InvoiceTaxRecord,
    Payment,
    PaymentStatus,
    TaxBreakdown,
    TransactionKind,
)


class InvoiceModel(TrackedBase):
    """ORM model for an invoice header with its transaction-level tax totals."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_number", "invoice_number", unique=True),
        Index("idx_invoice_date", "invoice_date"),
    )

    invoice_number: Mapped[str] = mapped_column(String(50))
    invoice_date: Mapped[date] = mapped_column(Date)
    kind: Mapped[str] = mapped_column(String(20))
    role: Mapped[str] = mapped_column(String(20))
    entity_id: Mapped[UUID | None] = mapped_column(nullable=True)
    origin_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    dest_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    is_inter_jurisdiction: Mapped[bool] = mapped_column(Boolean, default=False)

    subtotal: Mapped[Decimal] = mapped_column()
    cgst: Mapped[Decimal] = mapped_column()
    sgst: Mapped[Decimal] = mapped_column()
    igst: Mapped[Decimal] = mapped_column()
    tax_amount: Mapped[Decimal] = mapped_column()
    total_amount: Mapped[Decimal] = mapped_column()

    payment_status: Mapped[str] = mapped_column(String(20), default="due")

    lines: Mapped[list["InvoiceLineModel"]] = relationship(
        back_populates="invoice",
        order_by="InvoiceLineModel.line_number",
    )

    def to_dto(self) -> InvoiceSnapshot:
        return InvoiceSnapshot(
            invoice_id=self.id,
            invoice_number=self.invoice_number,
            kind=TransactionKind(self.kind),
            role=EntityRole(self.role),
            total_amount=Decimal(self.total_amount),
            payment_status=PaymentStatus(self.payment_status),
        )

    def to_tax_record(self) -> InvoiceTaxRecord:
        return InvoiceTaxRecord(
            invoice_id=self.id,
            invoice_number=self.invoice_number,
            kind=TransactionKind(self.kind),
            invoice_date=self.invoice_date,
            totals=TaxBreakdown(
                taxable_amount=Decimal(self.subtotal),
                cgst=Decimal(self.cgst),
                sgst=Decimal(self.sgst),
                igst=Decimal(self.igst),
                total_tax=Decimal(self.tax_amount),
                total_amount=Decimal(self.total_amount),
            ),
            origin_code=self.origin_code,
            dest_code=self.dest_code,
        )

    def __repr__(self) -> str:
        return (
            f"<InvoiceModel {self.invoice_number} total={self.total_amount} "
            f"status={self.payment_status}>"
        )


class InvoiceLineModel(TrackedBase):
    """ORM model for one invoice line with its per-line tax split."""

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_line_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("invoices.id"),
    )
    line_number: Mapped[int] = mapped_column(BigInteger, default=1)
    product_id: Mapped[UUID | None] = mapped_column(nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[Decimal] = mapped_column()
    unit_price: Mapped[Decimal] = mapped_column()
    tax_rate_percent: Mapped[Decimal] = mapped_column()
    line_total: Mapped[Decimal] = mapped_column()
    cgst: Mapped[Decimal] = mapped_column()
    sgst: Mapped[Decimal] = mapped_column()
    igst: Mapped[Decimal] = mapped_column()

    invoice: Mapped[InvoiceModel] = relationship(back_populates="lines")


class PaymentModel(TrackedBase):
    """ORM model for a payment recorded against an invoice. Append-only."""

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("invoices.id"),
    )
    amount: Mapped[Decimal] = mapped_column()
    payment_date: Mapped[date] = mapped_column(Date)

    def to_dto(self) -> Payment:
        return Payment(
            invoice_id=self.invoice_id,
            amount=Decimal(self.amount),
            payment_date=self.payment_date,
        )
