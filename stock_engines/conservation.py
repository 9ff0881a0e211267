"""
Module: stock_engines.conservation
Responsibility:
    Bookkeeping for a breakdown: track how much of a source item's capacity
    is still unassigned, per measurement type, as derived amounts are added,
    edited and removed; refuse any change that would over-allocate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (domain values, failures, logging).

Invariants enforced:
    - remaining[T] = capacity[T] - sum(derived amounts of T), for every T.
    - remaining[T] >= 0 after every accepted change.  A change that would go
      negative is refused with an ``OverAllocation`` carrying the available
      amount, and the prior remaining value is returned untouched.
    - All stored values are rounded to the engine precision.

Failure modes:
    - No raises for business conditions; OVER_ALLOCATED / INVALID_AMOUNT
      statuses are returned instead.

Usage:
    from stock_engines.conservation import RemainingCapacity, apply_delta

    remaining = RemainingCapacity(quantity=Decimal("10"))
    result = apply_delta(remaining, MeasurementType.QUANTITY, Decimal("4"))
    result.remaining.quantity   # Decimal("6.00000")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from stock_engines.rounding import DEFAULT_PRECISION, round_amount
from stock_engines.tracer import traced_engine
from stock_kernel.domain.failures import OverAllocation, ValidationFailure
from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.domain.values import ZERO, coerce_decimal, is_valid_amount
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.conservation")


@dataclass(frozen=True)
class RemainingCapacity:
    """
    Unassigned amount per measurement type.

    Contract:
        Frozen value object with one Decimal per measurement type.  Only the
        source item's tracking type is consulted during a breakdown; the
        other four are carried along untouched.
    """

    quantity: Decimal = ZERO
    weight: Decimal = ZERO
    length: Decimal = ZERO
    area: Decimal = ZERO
    volume: Decimal = ZERO

    def get(self, measurement_type: MeasurementType) -> Decimal:
        return getattr(self, MeasurementType.parse(measurement_type).value)

    def replace(self, measurement_type: MeasurementType, value: Decimal) -> RemainingCapacity:
        return replace(self, **{MeasurementType.parse(measurement_type).value: value})

    def as_dict(self) -> dict[MeasurementType, Decimal]:
        return {t: self.get(t) for t in MeasurementType}

    @classmethod
    def from_mapping(cls, values: dict[MeasurementType | str, Decimal]) -> RemainingCapacity:
        return cls(**{MeasurementType.parse(k).value: v for k, v in values.items()})


class ConservationStatus(str, Enum):
    APPLIED = "applied"
    OVER_ALLOCATED = "over_allocated"
    INVALID_AMOUNT = "invalid_amount"


@dataclass(frozen=True)
class ConservationResult:
    """
    Outcome of one capacity change.

    Guarantees:
        - On failure ``remaining`` is the exact input value.
    """

    status: ConservationStatus
    remaining: RemainingCapacity
    measurement_type: MeasurementType
    delta: Decimal
    failure: OverAllocation | ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == ConservationStatus.APPLIED

    @property
    def available(self) -> Decimal:
        """Remaining amount of the affected type after the call."""
        return self.remaining.get(self.measurement_type)


def delta_for_add(amount: Decimal) -> Decimal:
    return amount


def delta_for_edit(old_amount: Decimal, new_amount: Decimal) -> Decimal:
    return new_amount - old_amount


def delta_for_remove(amount: Decimal) -> Decimal:
    return -amount


class ConservationTracker:
    """
    Apply signed deltas to a ``RemainingCapacity``.

    Contract:
        Pure; the caller threads the returned ``RemainingCapacity`` into the
        next call.  A positive delta consumes capacity, a negative delta
        returns it.
    Guarantees:
        - Never produces a negative remaining value.
    Non-goals:
        - Does not know about derived records; callers compute deltas with
          ``delta_for_add`` / ``delta_for_edit`` / ``delta_for_remove``.
    """

    def __init__(self, places: int = DEFAULT_PRECISION):
        self.places = places

    @traced_engine("conservation", "1.0", fingerprint_fields=("measurement_type", "delta"))
    def apply_delta(
        self,
        remaining: RemainingCapacity,
        measurement_type: MeasurementType | str,
        delta: object,
        unit: str | None = None,
    ) -> ConservationResult:
        """
        Subtract ``delta`` from ``remaining[measurement_type]``.

        Returns:
            ConservationResult -- APPLIED with the new capacity, or
            OVER_ALLOCATED with the unchanged capacity and the amount that
            was available.
        """
        mtype = MeasurementType.parse(measurement_type)
        value = coerce_decimal(delta)

        if value is None or not value.is_finite():
            return ConservationResult(
                status=ConservationStatus.INVALID_AMOUNT,
                remaining=remaining,
                measurement_type=mtype,
                delta=ZERO,
                failure=ValidationFailure.invalid_amount("delta", delta),
            )

        value = round_amount(value, self.places)
        available = remaining.get(mtype)
        new_value = round_amount(available - value, self.places)

        if new_value < ZERO:
            logger.info("over_allocation_rejected", extra={
                "measurement_type": mtype.value,
                "requested": str(value),
                "available": str(available),
            })
            return ConservationResult(
                status=ConservationStatus.OVER_ALLOCATED,
                remaining=remaining,
                measurement_type=mtype,
                delta=value,
                failure=OverAllocation(
                    measurement_type=mtype,
                    requested=value,
                    available=available,
                    unit=unit,
                ),
            )

        return ConservationResult(
            status=ConservationStatus.APPLIED,
            remaining=remaining.replace(mtype, new_value),
            measurement_type=mtype,
            delta=value,
        )

    def apply_edit(
        self,
        remaining: RemainingCapacity,
        measurement_type: MeasurementType | str,
        old_amount: Decimal,
        new_amount: object,
        unit: str | None = None,
    ) -> ConservationResult:
        """Validate ``new_amount`` (finite, >= 0) and apply new - old."""
        mtype = MeasurementType.parse(measurement_type)
        value = coerce_decimal(new_amount)
        if not is_valid_amount(value):
            return ConservationResult(
                status=ConservationStatus.INVALID_AMOUNT,
                remaining=remaining,
                measurement_type=mtype,
                delta=ZERO,
                failure=ValidationFailure.invalid_amount("amount", new_amount),
            )
        return self.apply_delta(
            remaining, mtype, delta_for_edit(old_amount, round_amount(value, self.places)), unit
        )


_default_tracker = ConservationTracker()


def apply_delta(
    remaining: RemainingCapacity,
    measurement_type: MeasurementType | str,
    delta: object,
    unit: str | None = None,
) -> ConservationResult:
    """Module-level convenience around a default-precision tracker."""
    return _default_tracker.apply_delta(remaining, measurement_type, delta, unit)


def allocated_total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum of derived amounts (0 for none)."""
    return round_amount(sum(amounts, ZERO))


def verify_conservation(
    capacity: RemainingCapacity,
    remaining: RemainingCapacity,
    allocated: dict[MeasurementType, Decimal],
) -> bool:
    """True if remaining == capacity - allocated and >= 0 for every type."""
    for mtype in MeasurementType:
        expected = round_amount(capacity.get(mtype) - allocated.get(mtype, ZERO))
        if expected < ZERO or round_amount(remaining.get(mtype)) != expected:
            return False
    return True
