"""
Module: stock_engines.cost_derivation
Responsibility:
    Keep one purchase line's cost fields mutually consistent after any single
    field edit: measurement amount, original (total paid) cost, cost per
    unit, discount percentage or discount amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (domain values, failures, logging).

Invariants enforced:
    - cost_per_unit = original_cost / measurement_amount, or 0 when the
      amount is 0 (division guard, never an exception).
    - base_amount = measurement_amount * (original_cost / measurement_amount)
      taken before rounding, i.e. original_cost when the amount is positive
      and 0 otherwise.  The rounded cost_per_unit is a display value and
      never feeds back into the total.
    - Exactly one of discount_percentage / discount_amount drives; the other
      is recomputed from base_amount.  The driving side is remembered in
      ``discount_mode`` and survives measurement/cost edits.
    - total_cost = max(0, base_amount - discount_amount).
    - Every output field is rounded to the engine precision.

Failure modes:
    - A negative, non-finite or unreadable new value yields a result with
      status INVALID_VALUE and the input line returned unchanged.
    - ValueError for an unknown edited field name (programmer error).

Usage:
    from stock_engines.cost_derivation import EditedField, LineCosting, derive_line

    line = LineCosting.from_inputs(measurement_amount="10", original_cost="100")
    result = derive_line(line, EditedField.DISCOUNT_PERCENTAGE, "20")
    result.line.total_cost   # Decimal("80.00000")
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from stock_engines.rounding import DEFAULT_PRECISION, round_amount
from stock_engines.tracer import traced_engine
from stock_kernel.domain.failures import ValidationFailure
from stock_kernel.domain.values import (
    HUNDRED,
    ZERO,
    NumberLike,
    coerce_decimal,
    is_valid_amount,
    safe_divide,
    to_decimal,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.cost_derivation")


class EditedField(str, Enum):
    """Line field the actor changed."""

    MEASUREMENT_AMOUNT = "measurement_amount"
    ORIGINAL_COST = "original_cost"
    COST_PER_UNIT = "cost_per_unit"
    DISCOUNT_PERCENTAGE = "discount_percentage"
    DISCOUNT_AMOUNT = "discount_amount"


class DiscountMode(str, Enum):
    """Which discount field was last edited (the driving side)."""

    PERCENTAGE = "percentage"
    AMOUNT = "amount"


class DerivationStatus(str, Enum):
    DERIVED = "derived"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class LineCosting:
    """
    Cost fields of one purchase line.

    Contract:
        Frozen value object.  Instances produced by this engine always satisfy
        the module invariants; hand-built instances are normalised by
        ``CostDerivationEngine.recalculate``.
    """

    measurement_amount: Decimal = ZERO
    original_cost: Decimal = ZERO
    cost_per_unit: Decimal = ZERO
    discount_percentage: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total_cost: Decimal = ZERO
    discount_mode: DiscountMode = DiscountMode.PERCENTAGE

    @property
    def base_amount(self) -> Decimal:
        """Pre-discount amount: what was paid for the measured amount."""
        if self.measurement_amount > ZERO:
            return self.original_cost
        return ZERO

    @classmethod
    def from_inputs(
        cls,
        measurement_amount: NumberLike = ZERO,
        original_cost: NumberLike = ZERO,
        discount_percentage: NumberLike | None = None,
        discount_amount: NumberLike | None = None,
        places: int = DEFAULT_PRECISION,
    ) -> LineCosting:
        """
        Build a fully derived line from raw inputs.

        When both discount inputs are given the amount drives (it is the value
        the original document stored as paid).
        """
        mode = DiscountMode.PERCENTAGE
        pct = ZERO
        amt = ZERO
        if discount_amount is not None and to_decimal(discount_amount) != ZERO:
            mode = DiscountMode.AMOUNT
            amt = to_decimal(discount_amount)
        elif discount_percentage is not None:
            pct = to_decimal(discount_percentage)
        seed = cls(
            measurement_amount=to_decimal(measurement_amount),
            original_cost=to_decimal(original_cost),
            discount_percentage=pct,
            discount_amount=amt,
            discount_mode=mode,
        )
        return CostDerivationEngine(places).recalculate(seed)


@dataclass(frozen=True)
class DerivationResult:
    """Outcome of one field edit."""

    status: DerivationStatus
    line: LineCosting
    edited_field: EditedField
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == DerivationStatus.DERIVED


class CostDerivationEngine:
    """
    Re-derive a line's dependent cost fields from a single edit.

    Contract:
        Pure function of (line, edited_field, new_value).  No I/O, no state
        beyond the configured precision.
    Guarantees:
        - One pass, fully consistent output; no re-entrancy.
        - Invalid values never raise; they come back as INVALID_VALUE.
    Non-goals:
        - Does not aggregate lines into a purchase (see purchase_totals).
    """

    def __init__(self, places: int = DEFAULT_PRECISION):
        self.places = places

    def _round(self, value: Decimal) -> Decimal:
        return round_amount(value, self.places)

    @traced_engine("cost_derivation", "1.0", fingerprint_fields=("edited_field", "new_value"))
    def derive(
        self,
        line: LineCosting,
        edited_field: EditedField | str,
        new_value: object,
    ) -> DerivationResult:
        """
        Apply ``new_value`` to ``edited_field`` and re-derive the rest.

        Args:
            line: Current line state.
            edited_field: Field the actor changed.
            new_value: New value; must be a finite number >= 0.

        Returns:
            DerivationResult carrying the updated (or unchanged) line.
        """
        field = EditedField(edited_field)
        value = coerce_decimal(new_value)

        if not is_valid_amount(value):
            logger.info("line_edit_rejected", extra={
                "edited_field": field.value,
                "value": str(new_value),
            })
            return DerivationResult(
                status=DerivationStatus.INVALID_VALUE,
                line=line,
                edited_field=field,
                failure=ValidationFailure.invalid_amount(field.value, new_value),
            )

        value = self._round(value)

        match field:
            case EditedField.MEASUREMENT_AMOUNT:
                updated = self._derive_costs(replace(line, measurement_amount=value))
            case EditedField.ORIGINAL_COST:
                updated = self._derive_costs(replace(line, original_cost=value))
            case EditedField.COST_PER_UNIT:
                updated = self._derive_from_unit_cost(line, value)
            case EditedField.DISCOUNT_PERCENTAGE:
                updated = self._apply_discount(
                    replace(line, discount_percentage=value, discount_mode=DiscountMode.PERCENTAGE)
                )
            case EditedField.DISCOUNT_AMOUNT:
                updated = self._apply_discount(
                    replace(line, discount_amount=value, discount_mode=DiscountMode.AMOUNT)
                )

        logger.debug("line_derived", extra={
            "edited_field": field.value,
            "cost_per_unit": str(updated.cost_per_unit),
            "discount_mode": updated.discount_mode.value,
            "total_cost": str(updated.total_cost),
        })

        return DerivationResult(
            status=DerivationStatus.DERIVED,
            line=updated,
            edited_field=field,
        )

    def recalculate(self, line: LineCosting) -> LineCosting:
        """Full cascade from measurement amount and original cost."""
        return self._derive_costs(replace(
            line,
            measurement_amount=self._round(line.measurement_amount),
            original_cost=self._round(line.original_cost),
            discount_percentage=self._round(line.discount_percentage),
            discount_amount=self._round(line.discount_amount),
        ))

    def _derive_costs(self, line: LineCosting) -> LineCosting:
        """original_cost / amount -> cost_per_unit, then discount and total."""
        cost_per_unit = self._round(safe_divide(line.original_cost, line.measurement_amount))
        return self._apply_discount(replace(line, cost_per_unit=cost_per_unit))

    def _derive_from_unit_cost(self, line: LineCosting, cost_per_unit: Decimal) -> LineCosting:
        """Unit cost edit: original_cost follows amount * unit cost."""
        if line.measurement_amount == ZERO:
            # Nothing to price yet; cost_per_unit stays 0 with a zero amount.
            cost_per_unit = ZERO
        original_cost = self._round(line.measurement_amount * cost_per_unit)
        return self._apply_discount(
            replace(line, original_cost=original_cost, cost_per_unit=cost_per_unit)
        )

    def _apply_discount(self, line: LineCosting) -> LineCosting:
        """Recompute the non-driving discount field and the total."""
        base = line.base_amount

        if line.discount_mode == DiscountMode.PERCENTAGE:
            pct = line.discount_percentage
            amount = self._round(base * pct / HUNDRED)
        else:
            amount = line.discount_amount
            pct = self._round(safe_divide(amount * HUNDRED, base))

        total = self._round(max(ZERO, base - amount))
        return replace(
            line,
            discount_percentage=self._round(pct),
            discount_amount=self._round(amount),
            total_cost=total,
        )


_default_engine = CostDerivationEngine()


def derive_line(
    line: LineCosting,
    edited_field: EditedField | str,
    new_value: object,
) -> DerivationResult:
    """Module-level convenience around a default-precision engine."""
    return _default_engine.derive(line, edited_field, new_value)
