"""
Pure domain layer.

Measurement model, Decimal coercion and typed failures. No ORM, no
database, no clock, no I/O. All domain objects are immutable.
"""

from stock_kernel.domain.failures import FailureCode, OverAllocation, ValidationFailure
from stock_kernel.domain.measurement import (
    DEFAULT_UNITS,
    UNIT_SYMBOLS,
    Measurement,
    MeasurementType,
    format_amount,
    format_measurement,
    unit_label,
    validate_unit,
)
from stock_kernel.domain.values import (
    HUNDRED,
    ZERO,
    coerce_decimal,
    is_valid_amount,
    safe_divide,
    to_decimal,
)

__all__ = [
    "DEFAULT_UNITS",
    "UNIT_SYMBOLS",
    "FailureCode",
    "HUNDRED",
    "Measurement",
    "MeasurementType",
    "OverAllocation",
    "ValidationFailure",
    "ZERO",
    "coerce_decimal",
    "format_amount",
    "format_measurement",
    "is_valid_amount",
    "safe_divide",
    "to_decimal",
    "unit_label",
    "validate_unit",
]
