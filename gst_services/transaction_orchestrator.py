"""
Transaction Orchestrator (``gst_services.transaction_orchestrator``).

Responsibility
--------------
Composes the tax splitter, stock ledger, receiving tracker and tax-period
engine into the business transactions of the system:

* **Record invoice** -- validate, compute per-line tax, persist the invoice,
  move stock for customer invoices, and record a signed tax-period entry.
* **Receive purchase order** -- apply per-line receipts, recompute the
  order status, and report the GST on the received tranche.
* **Backfill** -- record tax-period entries for invoices that lack one.

Architecture position
---------------------
**Services layer** -- the outermost public surface of the engine. Owns the
transaction boundary: one commit per successful call, rollback and re-raise
on any exception.

Invariants enforced
-------------------
* All validation runs before the first store mutation.
* Stock moves only for ``customer`` invoices, exactly once per line.
* Insufficient stock never rolls back the invoice; it becomes a warning.
* Returns record a negated tax-period entry of their forward kind.

Failure modes
-------------
* ``ValidationError`` -- malformed draft (no lines, zero quantity,
  fractional stock quantity, customer without entity, bad GSTIN).
* ``ValidationError`` -- a caller-supplied invoice number that already exists.
* ``PurchaseOrderNotFoundError`` / ``PurchaseOrderLineNotFoundError`` --
  unknown order or a line that does not belong to it.
* ``ValidationError`` -- receiving against a cancelled order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from gst_config.schema import EngineConfig
from gst_engines.stock import whole_units
from gst_engines.tax_period import (
    TaxPeriodSummary,
    build_tax_period_entry,
    quarter_bounds,
    summarize_period,
)
from gst_engines.tax_split import TaxSplitter, is_inter_jurisdiction
from gst_kernel.domain.clock import Clock, SystemClock
from gst_kernel.domain.jurisdiction import jurisdiction_from_gstin, validate_gstin
from gst_kernel.domain.values import (
    ZERO,
    EntityRole,
    Jurisdiction,
    LineItem,
    ProductStock,
    PurchaseOrderStatus,
    TaxBreakdown,
    TaxPeriodEntry,
    TransactionKind,
)
from gst_kernel.exceptions import PurchaseOrderLineNotFoundError, ValidationError
from gst_kernel.logging_config import LogContext, get_logger
from gst_kernel.store import RecordStore
from gst_services.receiving_tracker import ReceiveResult, ReceivingTracker
from gst_services.stock_ledger import StockLedger, StockOutcome, StockOutcomeStatus

logger = get_logger("services.transaction_orchestrator")

_SALE_SIDE = frozenset({TransactionKind.SALE, TransactionKind.SALE_RETURN})

_SEQUENCE_MODULUS = 1_000_000
_MAX_GENERATED_NUMBER_ATTEMPTS = 100


@dataclass(frozen=True)
class InvoiceDraft:
    """
    Unsaved invoice as submitted by a caller.

    ``origin_code``/``dest_code`` override the jurisdictions derived from the
    company configuration and ``party_gstin``. A None or blank
    ``invoice_number`` is generated from the clock as ``INV-YYYYMM-nnnnnn``.
    Lines without a tax rate take the configured default rate.
    """

    invoice_number: str | None
    invoice_date: date
    kind: TransactionKind
    role: EntityRole
    lines: Sequence[LineItem]
    entity_id: UUID | None = None
    origin_code: str | None = None
    dest_code: str | None = None
    force_inter_jurisdiction: bool | None = None
    party_gstin: str | None = None


@dataclass(frozen=True)
class InvoiceRecordResult:
    """``display_totals`` is ``totals`` rounded to the configured places."""

    invoice_id: UUID
    invoice_number: str
    is_inter_jurisdiction: bool
    totals: TaxBreakdown
    display_totals: TaxBreakdown
    line_breakdowns: tuple[TaxBreakdown, ...]
    stock_outcomes: tuple[StockOutcome, ...]
    warnings: tuple[str, ...]
    tax_period_entry: TaxPeriodEntry


@dataclass(frozen=True)
class PurchaseOrderReceipt:
    order_id: UUID
    order_status: PurchaseOrderStatus
    line_results: tuple[ReceiveResult, ...] = field(default_factory=tuple)
    totals: TaxBreakdown = field(default_factory=TaxBreakdown.zero)
    display_totals: TaxBreakdown = field(default_factory=TaxBreakdown.zero)

    @property
    def accepted_quantity(self) -> int:
        return sum(r.accepted_quantity for r in self.line_results)


class TransactionOrchestrator:
    """
    Entry point for recording invoices and receiving purchase orders.

    Usage:
        orchestrator = TransactionOrchestrator(SqlRecordStore(session), config)
        result = orchestrator.record_invoice(draft)
    """

    def __init__(
        self,
        store: RecordStore,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self._store = store
        self._config = config or EngineConfig()
        self._clock = clock or SystemClock()
        self._tax_splitter = TaxSplitter()
        self._stock_ledger = StockLedger(store, auto_commit=False)
        self._receiving = ReceivingTracker(
            store,
            stock_ledger=self._stock_ledger,
            tax_splitter=self._tax_splitter,
            auto_commit=False,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    # =========================================================================
    # Invoices
    # =========================================================================

    def resolve_jurisdiction(self, draft: InvoiceDraft) -> Jurisdiction:
        """
        Origin/destination for a draft.

        The company is the origin of sales and the destination of purchases;
        the counterparty side comes from the explicit code, else the party's
        GSTIN.
        """
        company = self._config.company_jurisdiction
        party = None
        if draft.party_gstin:
            if not validate_gstin(draft.party_gstin):
                raise ValidationError(
                    "party_gstin", f"invalid GSTIN format {draft.party_gstin!r}",
                )
            party = jurisdiction_from_gstin(draft.party_gstin)

        if draft.kind in _SALE_SIDE:
            origin = draft.origin_code or company
            dest = draft.dest_code or party
        else:
            origin = draft.origin_code or party
            dest = draft.dest_code or company

        force = draft.force_inter_jurisdiction
        if force is None:
            force = self._config.force_inter_jurisdiction
        return Jurisdiction(origin_code=origin, dest_code=dest, force_inter_jurisdiction=force)

    def record_invoice(self, draft: InvoiceDraft) -> InvoiceRecordResult:
        """
        Record an invoice end to end.

        Raises:
            ValidationError: The draft is malformed or its invoice number is
                already taken. Nothing is written.
        """
        default_rate = self._config.default_tax_rate_percent
        lines = tuple(line.with_default_rate(default_rate) for line in draft.lines)
        jurisdiction = self.resolve_jurisdiction(draft)
        products = self._validate_draft(draft, lines)
        invoice_number = self._assign_invoice_number(draft)
        totals, per_line = self._tax_splitter.transaction_breakdown(lines, jurisdiction)
        inter = is_inter_jurisdiction(
            jurisdiction.origin_code,
            jurisdiction.dest_code,
            jurisdiction.force_inter_jurisdiction,
        )

        logger.info("invoice_record_started", extra={
            "invoice_number": invoice_number,
            "kind": draft.kind.value,
            "role": draft.role.value,
            "line_count": len(lines),
            "is_inter_jurisdiction": inter,
        })

        try:
            invoice_id = self._store.create_invoice(
                invoice_number=invoice_number,
                invoice_date=draft.invoice_date,
                kind=draft.kind,
                role=draft.role,
                entity_id=draft.entity_id,
                origin_code=jurisdiction.origin_code,
                dest_code=jurisdiction.dest_code,
                is_inter_jurisdiction=inter,
                lines=tuple(zip(lines, per_line)),
                totals=totals,
            )
            with LogContext.bind(invoice_id=invoice_id):
                outcomes, warnings = self._apply_stock(draft, lines, products)
                entry = build_tax_period_entry(
                    invoice_id=invoice_id,
                    invoice_number=invoice_number,
                    kind=draft.kind,
                    entry_date=draft.invoice_date,
                    breakdown=totals,
                    origin_code=jurisdiction.origin_code,
                    dest_code=jurisdiction.dest_code,
                )
                self._store.add_tax_period_entry(entry)
                self._store.commit()

                logger.info("invoice_recorded", extra={
                    "invoice_number": invoice_number,
                    "taxable_amount": str(totals.taxable_amount),
                    "total_tax": str(totals.total_tax),
                    "total_amount": str(totals.total_amount),
                    "warning_count": len(warnings),
                })
        except Exception:
            self._store.rollback()
            logger.error("invoice_record_rolled_back", exc_info=True, extra={
                "invoice_number": invoice_number,
            })
            raise

        return InvoiceRecordResult(
            invoice_id=invoice_id,
            invoice_number=invoice_number,
            is_inter_jurisdiction=inter,
            totals=totals,
            display_totals=self.display_breakdown(totals),
            line_breakdowns=per_line,
            stock_outcomes=outcomes,
            warnings=warnings,
            tax_period_entry=entry,
        )

    def display_breakdown(self, breakdown: TaxBreakdown) -> TaxBreakdown:
        """Round a breakdown to the configured display places."""
        return breakdown.rounded(self._config.display_decimal_places)

    def _assign_invoice_number(self, draft: InvoiceDraft) -> str:
        number = (draft.invoice_number or "").strip()
        if number:
            return number
        return self._generate_invoice_number()

    def _generate_invoice_number(self) -> str:
        """
        ``INV-YYYYMM-nnnnnn`` where nnnnnn is the clock's epoch milliseconds
        modulo one million. A taken number moves to the next sequence value.
        """
        now = self._clock.now()
        sequence = int(now.timestamp() * 1000) % _SEQUENCE_MODULUS
        for _ in range(_MAX_GENERATED_NUMBER_ATTEMPTS):
            candidate = f"INV-{now:%Y%m}-{sequence:06d}"
            if not self._store.invoice_number_exists(candidate):
                return candidate
            sequence = (sequence + 1) % _SEQUENCE_MODULUS
        raise ValidationError(
            "invoice_number",
            f"no free generated number after {_MAX_GENERATED_NUMBER_ATTEMPTS} attempts",
        )

    def _validate_draft(
        self,
        draft: InvoiceDraft,
        lines: tuple[LineItem, ...],
    ) -> dict[int, ProductStock]:
        """Check the draft and resolve catalog products for stock-moving lines."""
        number = (draft.invoice_number or "").strip()
        if number and self._store.invoice_number_exists(number):
            raise ValidationError("invoice_number", f"{number!r} already exists")
        if draft.role is EntityRole.CUSTOMER and draft.entity_id is None:
            raise ValidationError("entity_id", "customer invoices require an entity")
        if not lines:
            raise ValidationError("lines", "an invoice needs at least one line item")
        for index, line in enumerate(lines):
            if line.quantity <= ZERO:
                raise ValidationError(
                    f"lines[{index}].quantity", f"must be positive (got {line.quantity})",
                )

        products: dict[int, ProductStock] = {}
        if not draft.role.is_stock_linked:
            return products
        for index, line in enumerate(lines):
            product = self._stock_ledger.resolve_product(line.product_ref, line.description)
            if product is None:
                continue
            whole_units(line.quantity, field=f"lines[{index}].quantity")
            products[index] = product
        return products

    def _apply_stock(
        self,
        draft: InvoiceDraft,
        lines: tuple[LineItem, ...],
        products: dict[int, ProductStock],
    ) -> tuple[tuple[StockOutcome, ...], tuple[str, ...]]:
        outcomes: list[StockOutcome] = []
        warnings: list[str] = []

        if not draft.role.is_stock_linked:
            return tuple(outcomes), tuple(warnings)

        for index, line in enumerate(lines):
            product = products.get(index)
            if product is None:
                outcomes.append(StockOutcome(status=StockOutcomeStatus.SKIPPED_NO_PRODUCT))
                continue

            outcome = self._stock_ledger.apply_delta(
                product.product_id,
                whole_units(line.quantity),
                draft.kind,
                draft.role,
            )
            outcomes.append(outcome)

            if outcome.rejection is not None:
                warnings.append(
                    f"Insufficient stock for {product.name}: "
                    f"available {outcome.rejection.available}, "
                    f"requested {outcome.rejection.requested}"
                )
            elif outcome.applied and outcome.is_low_stock and self._config.low_stock_warning:
                warnings.append(
                    f"Low stock for {product.name}: {outcome.new_stock} remaining "
                    f"(minimum {product.min_stock_level})"
                )
        return tuple(outcomes), tuple(warnings)

    # =========================================================================
    # Purchase orders
    # =========================================================================

    def default_receiving_jurisdiction(self) -> Jurisdiction:
        company = self._config.company_jurisdiction
        return Jurisdiction(
            origin_code=company,
            dest_code=company,
            force_inter_jurisdiction=self._config.force_inter_jurisdiction,
        )

    def receive_purchase_order(
        self,
        order_id: UUID,
        quantities: Mapping[UUID, int],
        jurisdiction: Jurisdiction | None = None,
    ) -> PurchaseOrderReceipt:
        """
        Receive several lines of one order in a single transaction.

        Lines with a zero or negative requested quantity are ignored.

        Raises:
            PurchaseOrderNotFoundError: Unknown order.
            PurchaseOrderLineNotFoundError: A line id not on this order.
            ValidationError: The order is cancelled.
        """
        jurisdiction = jurisdiction or self.default_receiving_jurisdiction()

        with LogContext.bind(order_id=order_id):
            current = self._store.get_purchase_order_status(order_id)
            known = {line.id for line in self._store.list_purchase_order_lines(order_id)}
            for line_id in quantities:
                if line_id not in known:
                    raise PurchaseOrderLineNotFoundError(str(line_id))
            if current is PurchaseOrderStatus.CANCELLED:
                raise ValidationError("order_id", f"purchase order {order_id} is cancelled")

            logger.info("purchase_order_receive_started", extra={
                "line_count": len(quantities),
                "status": current.value,
            })

            try:
                results: list[ReceiveResult] = []
                totals = TaxBreakdown.zero()
                for line_id, quantity_now in quantities.items():
                    if quantity_now <= 0:
                        continue
                    result = self._receiving.receive(line_id, quantity_now, jurisdiction)
                    results.append(result)
                    totals = totals + result.tax_breakdown

                status = self._receiving.recompute_order_status(order_id)
                self._store.commit()
            except Exception:
                self._store.rollback()
                logger.error("purchase_order_receive_rolled_back", exc_info=True)
                raise

            logger.info("purchase_order_received", extra={
                "status": status.value,
                "accepted_quantity": sum(r.accepted_quantity for r in results),
                "total_tax": str(totals.total_tax),
            })
            return PurchaseOrderReceipt(
                order_id=order_id,
                order_status=status,
                line_results=tuple(results),
                totals=totals,
                display_totals=self.display_breakdown(totals),
            )

    def receive_all_remaining(
        self,
        order_id: UUID,
        jurisdiction: Jurisdiction | None = None,
    ) -> PurchaseOrderReceipt:
        """Receive every line's outstanding quantity."""
        quantities = {
            line.id: line.remaining_quantity
            for line in self._store.list_purchase_order_lines(order_id)
            if line.remaining_quantity > 0
        }
        return self.receive_purchase_order(order_id, quantities, jurisdiction)

    # =========================================================================
    # Reporting
    # =========================================================================

    def tax_period_summary(self, start: date, end: date) -> TaxPeriodSummary:
        if start > end:
            raise ValidationError("start", f"{start} is after {end}")
        return summarize_period(self._store.list_tax_period_entries(start, end))

    def current_quarter_summary(self) -> TaxPeriodSummary:
        """Summary for the financial quarter containing the clock's today."""
        start, end = quarter_bounds(self._clock.today())
        return self.tax_period_summary(start, end)

    def backfill_tax_period_entries(self) -> tuple[TaxPeriodEntry, ...]:
        """
        Record a tax-period entry for every invoice that has none.

        Invoices that already carry an entry are left untouched, so repeated
        calls add nothing. All entries commit together.
        """
        records = self._store.list_invoices_missing_tax_period_entry()
        logger.info("tax_period_backfill_started", extra={"invoice_count": len(records)})

        try:
            entries: list[TaxPeriodEntry] = []
            for record in records:
                entry = build_tax_period_entry(
                    invoice_id=record.invoice_id,
                    invoice_number=record.invoice_number,
                    kind=record.kind,
                    entry_date=record.invoice_date,
                    breakdown=record.totals,
                    origin_code=record.origin_code,
                    dest_code=record.dest_code,
                )
                self._store.add_tax_period_entry(entry)
                entries.append(entry)
            self._store.commit()
        except Exception:
            self._store.rollback()
            logger.error("tax_period_backfill_rolled_back", exc_info=True)
            raise

        logger.info("tax_period_backfill_completed", extra={"entry_count": len(entries)})
        return tuple(entries)

    def low_stock_products(self) -> list[ProductStock]:
        return self._store.list_low_stock_products()
