"""
Measurement -- the five tracking types and their unit symbols.

Responsibility:
    Enumerates the measurement systems an item can be tracked in
    (quantity, weight, length, area, volume), the unit symbols allowed for
    each, the default unit per type, and a ``Measurement`` value object that
    pairs an amount with its type and unit.

Architecture position:
    Kernel > Domain -- pure lookup, zero I/O, no state.

Invariants enforced:
    - Exactly one measurement type is live per item or line; the type is an
      enum member, never a free-form string past the parsing boundary.
    - A ``Measurement`` unit always belongs to its type.

Failure modes:
    - ``UnknownMeasurementTypeError`` from ``MeasurementType.parse``.
    - ``InvalidUnitError`` when a unit is not allowed for a type.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from stock_kernel.domain.values import ZERO, NumberLike, to_decimal
from stock_kernel.exceptions import InvalidUnitError, UnknownMeasurementTypeError


class MeasurementType(str, Enum):
    """Unit system an item's stock (or a purchase line) is measured in."""

    QUANTITY = "quantity"
    WEIGHT = "weight"
    LENGTH = "length"
    AREA = "area"
    VOLUME = "volume"

    @classmethod
    def parse(cls, value: MeasurementType | str) -> MeasurementType:
        """Parse a tracking-type string (case-insensitive)."""
        if isinstance(value, MeasurementType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnknownMeasurementTypeError(value)

    @property
    def units(self) -> tuple[str, ...]:
        """Unit symbols allowed for this type."""
        return UNIT_SYMBOLS[self]

    @property
    def default_unit(self) -> str:
        return DEFAULT_UNITS[self]


UNIT_SYMBOLS: dict[MeasurementType, tuple[str, ...]] = {
    MeasurementType.QUANTITY: ("units",),
    MeasurementType.WEIGHT: ("oz", "lb", "g", "kg"),
    MeasurementType.LENGTH: ("mm", "cm", "m", "in", "ft", "yd"),
    MeasurementType.AREA: ("sqft", "sqm", "sqyd", "acre", "ha"),
    MeasurementType.VOLUME: ("ml", "l", "gal", "floz", "cu_ft", "cu_m"),
}

DEFAULT_UNITS: dict[MeasurementType, str] = {
    MeasurementType.QUANTITY: "units",
    MeasurementType.WEIGHT: "lb",
    MeasurementType.LENGTH: "in",
    MeasurementType.AREA: "sqft",
    MeasurementType.VOLUME: "l",
}

# Symbols whose display label differs from the stored symbol.
UNIT_LABELS: dict[str, str] = {
    "sqft": "sq ft",
    "sqm": "sq m",
    "sqyd": "sq yd",
    "floz": "fl oz",
    "cu_ft": "cu ft",
    "cu_m": "cu m",
}


def unit_label(unit: str) -> str:
    """Human-readable label for a unit symbol."""
    return UNIT_LABELS.get(unit, unit)


def validate_unit(measurement_type: MeasurementType, unit: str | None) -> str:
    """
    Return ``unit`` (or the type's default when ``None``/empty).

    Raises:
        InvalidUnitError: if the unit is not allowed for the type.
    """
    if not unit:
        return measurement_type.default_unit
    if unit not in UNIT_SYMBOLS[measurement_type]:
        raise InvalidUnitError(
            measurement_type.value, unit, UNIT_SYMBOLS[measurement_type]
        )
    return unit


def format_amount(amount: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros."""
    if amount == ZERO:
        return "0"
    return format(amount.normalize(), "f")


@dataclass(frozen=True, slots=True)
class Measurement:
    """
    An amount expressed in one measurement type and unit.

    Contract:
        Frozen value object. ``unit`` is validated against ``measurement_type``
        at construction; an omitted unit takes the type's default.
    Non-goals:
        - No conversion between units of the same type.
    """

    measurement_type: MeasurementType
    amount: Decimal
    unit: str = ""

    def __post_init__(self) -> None:
        mtype = MeasurementType.parse(self.measurement_type)
        object.__setattr__(self, "measurement_type", mtype)
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "unit", validate_unit(mtype, self.unit))

    @classmethod
    def of(
        cls,
        measurement_type: MeasurementType | str,
        amount: NumberLike,
        unit: str | None = None,
    ) -> Measurement:
        return cls(
            measurement_type=MeasurementType.parse(measurement_type),
            amount=to_decimal(amount),
            unit=unit or "",
        )

    def with_amount(self, amount: Decimal) -> Measurement:
        return Measurement(self.measurement_type, amount, self.unit)

    def __str__(self) -> str:
        return format_measurement(self)


def format_measurement(measurement: Measurement) -> str:
    """``"10 units"`` for quantity, ``"2.5 kg"`` / ``"3 sq ft"`` otherwise."""
    amount = format_amount(measurement.amount)
    if measurement.measurement_type is MeasurementType.QUANTITY:
        return f"{amount} units"
    return f"{amount} {unit_label(measurement.unit)}"
