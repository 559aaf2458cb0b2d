"""
Module: gst_kernel.models.tax_period
Responsibility: ORM persistence for derived tax-period entries, one per
    committed invoice.  Amounts are stored already signed (returns negative)
    so period totals are a plain SUM.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gst_kernel.db.base import TrackedBase
from gst_kernel.domain.values import TaxBreakdown, TaxPeriodEntry, TransactionKind


class TaxPeriodEntryModel(TrackedBase):
    """ORM model for TaxPeriodEntry."""

    __tablename__ = "tax_period_entries"

    __table_args__ = (
        Index("idx_tax_entry_date", "entry_date"),
        Index("idx_tax_entry_invoice", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column()
    invoice_number: Mapped[str] = mapped_column(String(50))
    kind: Mapped[str] = mapped_column(String(20))
    entry_date: Mapped[date] = mapped_column(Date)
    origin_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    dest_code: Mapped[str | None] = mapped_column(String(4), nullable=True)

    taxable_amount: Mapped[Decimal] = mapped_column()
    cgst: Mapped[Decimal] = mapped_column()
    sgst: Mapped[Decimal] = mapped_column()
    igst: Mapped[Decimal] = mapped_column()
    total_tax: Mapped[Decimal] = mapped_column()
    total_amount: Mapped[Decimal] = mapped_column()

    def to_dto(self) -> TaxPeriodEntry:
        return TaxPeriodEntry(
            invoice_id=self.invoice_id,
            invoice_number=self.invoice_number,
            kind=TransactionKind(self.kind),
            entry_date=self.entry_date,
            breakdown=TaxBreakdown(
                taxable_amount=Decimal(self.taxable_amount),
                cgst=Decimal(self.cgst),
                sgst=Decimal(self.sgst),
                igst=Decimal(self.igst),
                total_tax=Decimal(self.total_tax),
                total_amount=Decimal(self.total_amount),
            ),
            origin_code=self.origin_code,
            dest_code=self.dest_code,
        )

    @classmethod
    def from_dto(cls, dto: TaxPeriodEntry) -> "TaxPeriodEntryModel":
        b = dto.breakdown
        return cls(
            invoice_id=dto.invoice_id,
            invoice_number=dto.invoice_number,
            kind=dto.kind.value,
            entry_date=dto.entry_date,
            origin_code=dto.origin_code,
            dest_code=dto.dest_code,
            taxable_amount=b.taxable_amount,
            cgst=b.cgst,
            sgst=b.sgst,
            igst=b.igst,
            total_tax=b.total_tax,
            total_amount=b.total_amount,
        )
