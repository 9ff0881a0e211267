"""
Failures -- typed, returned (never raised) business outcomes.

Responsibility:
    Value objects describing why an edit or a commit was refused. Engines
    place these on their result objects; callers surface ``message`` to the
    actor verbatim and branch on ``code``.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - An ``OverAllocation`` always reports the capacity that WAS available
      when the edit was refused (the remaining value is left untouched).
    - ``ValidationFailure.code`` is a stable machine string; the message is
      for humans.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stock_kernel.domain.measurement import MeasurementType, format_amount, unit_label


class FailureCode:
    """Stable codes carried by ``ValidationFailure``."""

    INVALID_AMOUNT = "INVALID_AMOUNT"
    SUPPLIER_NAME_REQUIRED = "SUPPLIER_NAME_REQUIRED"
    LINE_ITEMS_REQUIRED = "LINE_ITEMS_REQUIRED"
    TOTAL_NOT_POSITIVE = "TOTAL_NOT_POSITIVE"
    NO_DERIVED_RECORDS = "NO_DERIVED_RECORDS"
    AMOUNT_NOT_POSITIVE = "AMOUNT_NOT_POSITIVE"
    NAME_REQUIRED = "NAME_REQUIRED"
    SKU_REQUIRED = "SKU_REQUIRED"
    TARGET_REQUIRED = "TARGET_REQUIRED"
    SELF_ALLOCATION = "SELF_ALLOCATION"
    DUPLICATE_TARGET = "DUPLICATE_TARGET"


@dataclass(frozen=True)
class OverAllocation:
    """An edit would have driven a remaining-capacity field below zero."""

    measurement_type: MeasurementType
    requested: Decimal
    available: Decimal
    unit: str | None = None

    code = "OVER_ALLOCATION"

    @property
    def message(self) -> str:
        if self.measurement_type is MeasurementType.QUANTITY:
            what = f"{format_amount(self.available)} units"
        else:
            unit = self.unit or self.measurement_type.default_unit
            what = f"{format_amount(self.available)} {unit_label(unit)}"
        return (
            f"Not enough {self.measurement_type.value} remaining. "
            f"Only {what} available."
        )


@dataclass(frozen=True)
class ValidationFailure:
    """Structural or input problem that blocks an edit or a commit."""

    code: str
    message: str
    field: str | None = None

    @classmethod
    def invalid_amount(cls, field: str, value: object) -> ValidationFailure:
        return cls(
            code=FailureCode.INVALID_AMOUNT,
            message=f"{field} must be a finite number greater than or equal to 0 (got {value!r})",
            field=field,
        )
