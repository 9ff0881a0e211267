"""
Module: stock_engines.purchase_totals
Responsibility:
    Aggregate a purchase's line totals into subtotal, tax and grand total,
    applying the purchase-level discount and shipping cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - subtotal   = sum(line total_cost)            (0 for no lines)
    - tax_amount = subtotal * tax_rate / 100
    - total      = subtotal - discount_amount + tax_amount + shipping_cost
    - Every output is rounded to the engine precision; the computation is a
      full re-sum on every call, never an incremental patch.

Failure modes:
    - ValueError if any input is negative or non-finite.  Callers that accept
      user input validate it first (see ``validate_charge``) and keep the
      prior value on failure.

Usage:
    from stock_engines.purchase_totals import recompute_totals

    totals = recompute_totals(
        line_totals=[Decimal("50"), Decimal("75")],
        discount_amount=Decimal("10"),
        tax_rate=Decimal("10"),
        shipping_cost=Decimal("5"),
    )
    totals.total   # Decimal("132.50000")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.rounding import DEFAULT_PRECISION, round_amount
from stock_engines.tracer import traced_engine
from stock_kernel.domain.failures import ValidationFailure
from stock_kernel.domain.values import HUNDRED, ZERO, coerce_decimal, is_valid_amount
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.purchase_totals")


@dataclass(frozen=True)
class PurchaseTotals:
    """Derived monetary fields of a purchase."""

    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax_amount: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    total: Decimal = ZERO
    line_count: int = 0


@dataclass(frozen=True)
class ChargeCheck:
    """Result of validating one purchase-level input."""

    value: Decimal | None
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.failure is None


def validate_charge(field: str, raw: object) -> ChargeCheck:
    """Accept a finite, non-negative number for a purchase-level field."""
    value = coerce_decimal(raw)
    if not is_valid_amount(value):
        return ChargeCheck(value=None, failure=ValidationFailure.invalid_amount(field, raw))
    return ChargeCheck(value=value)


class PurchaseAggregator:
    """
    Recompute purchase totals from the full line set.

    Contract:
        Pure function of the line totals and the purchase-level discount,
        tax rate and shipping cost.
    Non-goals:
        - No tax-jurisdiction rules; the rate is a single percentage.
        - No currency handling.
    """

    def __init__(self, places: int = DEFAULT_PRECISION):
        self.places = places

    @traced_engine("purchase_totals", "1.0", fingerprint_fields=("discount_amount", "tax_rate", "shipping_cost"))
    def recompute(
        self,
        line_totals: Iterable[Decimal],
        discount_amount: Decimal = ZERO,
        tax_rate: Decimal = ZERO,
        shipping_cost: Decimal = ZERO,
    ) -> PurchaseTotals:
        """
        Args:
            line_totals: ``total_cost`` of every line, in any order.
            discount_amount: Purchase-level discount (absolute).
            tax_rate: Percentage, e.g. ``Decimal("8.25")``.
            shipping_cost: Absolute shipping charge.
        """
        totals = list(line_totals)
        for name, value in (
            ("discount_amount", discount_amount),
            ("tax_rate", tax_rate),
            ("shipping_cost", shipping_cost),
        ):
            if not is_valid_amount(value):
                raise ValueError(f"{name} must be a finite non-negative Decimal, got {value!r}")

        places = self.places
        subtotal = round_amount(sum(totals, ZERO), places)
        tax_amount = round_amount(subtotal * tax_rate / HUNDRED, places)
        total = round_amount(subtotal - discount_amount + tax_amount + shipping_cost, places)

        logger.debug("purchase_totals_recomputed", extra={
            "line_count": len(totals),
            "subtotal": str(subtotal),
            "tax_amount": str(tax_amount),
            "total": str(total),
        })

        return PurchaseTotals(
            subtotal=subtotal,
            discount_amount=round_amount(discount_amount, places),
            tax_rate=round_amount(tax_rate, places),
            tax_amount=tax_amount,
            shipping_cost=round_amount(shipping_cost, places),
            total=total,
            line_count=len(totals),
        )


_default_aggregator = PurchaseAggregator()


def recompute_totals(
    line_totals: Iterable[Decimal],
    discount_amount: Decimal = ZERO,
    tax_rate: Decimal = ZERO,
    shipping_cost: Decimal = ZERO,
) -> PurchaseTotals:
    """Module-level convenience around a default-precision aggregator."""
    return _default_aggregator.recompute(line_totals, discount_amount, tax_rate, shipping_cost)
