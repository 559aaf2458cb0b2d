"""
Module: gst_kernel.models.purchase_order
Responsibility: ORM persistence for purchase orders and their lines.

Invariants enforced:
    - received_quantity is only advanced by the ReceivingTracker through
      RecordStore.set_received_quantity; it never exceeds ordered_quantity.
    - status is stored as the PurchaseOrderStatus value string.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import BigInteger, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gst_kernel.db.base import TrackedBase, UUIDString
from gst_kernel.domain.values import PurchaseOrderLine


class PurchaseOrderModel(TrackedBase):
    """ORM model for a purchase order header."""

    __tablename__ = "purchase_orders"

    __table_args__ = (
        Index("idx_po_status", "status"),
    )

    po_number: Mapped[str] = mapped_column(String(50))
    order_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    supplier_id: Mapped[UUID | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft")

    lines: Mapped[list["PurchaseOrderLineModel"]] = relationship(
        back_populates="order",
        order_by="PurchaseOrderLineModel.line_number",
    )

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.po_number} status={self.status}>"


class PurchaseOrderLineModel(TrackedBase):
    """ORM model for one purchase order line. Maps to PurchaseOrderLine."""

    __tablename__ = "purchase_order_lines"

    __table_args__ = (
        Index("idx_po_line_order", "order_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("purchase_orders.id"),
    )
    line_number: Mapped[int] = mapped_column(BigInteger, default=1)
    product_id: Mapped[UUID | None] = mapped_column(nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ordered_quantity: Mapped[int] = mapped_column(BigInteger)
    received_quantity: Mapped[int] = mapped_column(BigInteger, default=0)
    unit_price: Mapped[Decimal] = mapped_column()
    tax_rate_percent: Mapped[Decimal] = mapped_column()

    order: Mapped[PurchaseOrderModel] = relationship(back_populates="lines")

    def to_dto(self) -> PurchaseOrderLine:
        return PurchaseOrderLine(
            id=self.id,
            order_id=self.order_id,
            ordered_quantity=self.ordered_quantity,
            received_quantity=self.received_quantity or 0,
            unit_price=Decimal(self.unit_price),
            tax_rate_percent=Decimal(self.tax_rate_percent),
            product_ref=self.product_id,
            description=self.description,
        )

    def __repr__(self) -> str:
        return (
            f"<PurchaseOrderLineModel {self.id} "
            f"received={self.received_quantity}/{self.ordered_quantity}>"
        )
