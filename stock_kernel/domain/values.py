"""
Values -- Decimal coercion for every amount that enters the kernel.

Responsibility:
    Converts caller-supplied numbers (``Decimal``, ``int``, ``str`` or
    ``float``) into ``Decimal`` without ever doing float arithmetic, and
    classifies whether a value is an acceptable edit input.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Floats are converted through ``str()`` so ``0.1`` becomes
      ``Decimal("0.1")`` and not its binary expansion.
    - ``ZERO`` is the single zero constant used by guards (DivisionGuard).

Failure modes:
    - ``coerce_decimal`` returns ``None`` for values that cannot be read as
      a number; it never raises for bad user input.
    - ``to_decimal`` raises ``TypeError`` for values of the wrong shape
      (programmer error) and ``ValueError`` for unparseable strings.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

ZERO = Decimal("0")
HUNDRED = Decimal("100")

NumberLike = Union[Decimal, int, float, str]


def to_decimal(value: NumberLike) -> Decimal:
    """
    Convert a number-like value to Decimal.

    Raises:
        TypeError: if ``value`` is not a Decimal, int, float or str
            (``bool`` is rejected as well).
        ValueError: if a string cannot be parsed.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a valid amount")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    raise TypeError(f"Expected a number, got {type(value).__name__}")


def coerce_decimal(value: object) -> Decimal | None:
    """Best-effort conversion used for user edits; ``None`` when unreadable."""
    try:
        return to_decimal(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def is_valid_amount(value: Decimal | None) -> bool:
    """True for a finite, non-negative Decimal."""
    return value is not None and value.is_finite() and value >= ZERO


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero for a zero divisor."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator
