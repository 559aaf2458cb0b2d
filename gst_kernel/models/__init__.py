"""SQLAlchemy ORM models. Importing this package registers every table."""

from gst_kernel.models.invoice import InvoiceLineModel, InvoiceModel, PaymentModel
from gst_kernel.models.product import ProductModel, normalize_product_name
from gst_kernel.models.purchase_order import PurchaseOrderLineModel, PurchaseOrderModel
from gst_kernel.models.tax_period import TaxPeriodEntryModel

__all__ = [
    "InvoiceLineModel",
    "InvoiceModel",
    "PaymentModel",
    "ProductModel",
    "normalize_product_name",
    "PurchaseOrderLineModel",
    "PurchaseOrderModel",
    "TaxPeriodEntryModel",
]
