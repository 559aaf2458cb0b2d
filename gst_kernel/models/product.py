"""
Module: gst_kernel.models.product
Responsibility: ORM persistence for catalog products and their stock level.

Invariants enforced:
    - current_stock is written only through RecordStore.set_product_stock,
      which the StockLedger calls after its non-negativity check.
    - name_key is the trimmed, lower-cased name, kept in sync on every
      insert and update (mapper events below) so name lookups are
      case-insensitive exact matches.
"""

from sqlalchemy import BigInteger, Index, String, event
from sqlalchemy.orm import Mapped, mapped_column

from gst_kernel.db.base import TrackedBase
from gst_kernel.domain.values import ProductStock


def normalize_product_name(name: str) -> str:
    """Lookup key for a product name: trimmed and case-folded."""
    return name.strip().casefold()


class ProductModel(TrackedBase):
    """ORM model for a catalog product. Maps to ProductStock."""

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_name_key", "name_key"),
    )

    name: Mapped[str] = mapped_column(String(255))
    name_key: Mapped[str] = mapped_column(String(255))
    hsn_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    current_stock: Mapped[int] = mapped_column(BigInteger, default=0)
    min_stock_level: Mapped[int] = mapped_column(BigInteger, default=0)

    def to_dto(self) -> ProductStock:
        return ProductStock(
            product_id=self.id,
            name=self.name,
            current_stock=self.current_stock,
            min_stock_level=self.min_stock_level or 0,
        )

    def __repr__(self) -> str:
        return f"<ProductModel {self.id} name={self.name!r} stock={self.current_stock}>"


@event.listens_for(ProductModel, "before_insert")
@event.listens_for(ProductModel, "before_update")
def _sync_name_key(mapper, connection, target: ProductModel) -> None:
    target.name_key = normalize_product_name(target.name)
