"""
Purchasing Domain Models (``stock_modules.purchasing.models``).

Responsibility
--------------
Frozen value objects for a purchase document: supplier details, line
items (each wrapping a ``LineCosting`` from the cost derivation engine) and
the ``Purchase`` itself with its derived ``PurchaseTotals``.

Invariants
----------
- A line's cost fields always satisfy the cost derivation invariants; the
  editor only ever stores lines produced by ``CostDerivationEngine``.
- ``Purchase.totals`` is always the aggregator's output for the current
  line set and purchase-level charges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from stock_engines.cost_derivation import DiscountMode, LineCosting
from stock_engines.purchase_totals import PurchaseTotals
from stock_kernel.domain.measurement import Measurement, MeasurementType


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    DEBIT = "debit"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    PARTIALLY_RECEIVED = "partially_received"
    CANCELLED = "cancelled"


class TargetKind(str, Enum):
    """What a purchase line restocks."""

    ITEM = "item"
    ASSET = "asset"


@dataclass(frozen=True)
class Supplier:
    name: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class PurchaseLineItem:
    """
    One purchased item or asset.

    The live measurement is ``(measurement_type, costing.measurement_amount,
    unit)``; all money fields live on ``costing``.
    """

    line_id: str
    target_id: str
    measurement_type: MeasurementType = MeasurementType.QUANTITY
    unit: str = "units"
    target_kind: TargetKind = TargetKind.ITEM
    costing: LineCosting = field(default_factory=LineCosting)

    @property
    def measurement(self) -> Measurement:
        return Measurement(self.measurement_type, self.costing.measurement_amount, self.unit)

    @property
    def measurement_amount(self) -> Decimal:
        return self.costing.measurement_amount

    @property
    def original_cost(self) -> Decimal:
        return self.costing.original_cost

    @property
    def cost_per_unit(self) -> Decimal:
        return self.costing.cost_per_unit

    @property
    def discount_percentage(self) -> Decimal:
        return self.costing.discount_percentage

    @property
    def discount_amount(self) -> Decimal:
        return self.costing.discount_amount

    @property
    def discount_mode(self) -> DiscountMode:
        return self.costing.discount_mode

    @property
    def total_cost(self) -> Decimal:
        return self.costing.total_cost


@dataclass(frozen=True)
class Purchase:
    """A purchase document with derived totals."""

    purchase_id: str | None = None
    supplier: Supplier = field(default_factory=Supplier)
    lines: tuple[PurchaseLineItem, ...] = ()
    totals: PurchaseTotals = field(default_factory=PurchaseTotals)
    invoice_number: str = ""
    purchase_date: date | None = None
    notes: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: PurchaseStatus = PurchaseStatus.RECEIVED

    @property
    def subtotal(self) -> Decimal:
        return self.totals.subtotal

    @property
    def discount_amount(self) -> Decimal:
        return self.totals.discount_amount

    @property
    def tax_rate(self) -> Decimal:
        return self.totals.tax_rate

    @property
    def tax_amount(self) -> Decimal:
        return self.totals.tax_amount

    @property
    def shipping_cost(self) -> Decimal:
        return self.totals.shipping_cost

    @property
    def total(self) -> Decimal:
        return self.totals.total

    def get_line(self, line_id: str) -> PurchaseLineItem | None:
        return next((line for line in self.lines if line.line_id == line_id), None)
