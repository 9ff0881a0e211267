"""
Module: stock_engines.rounding
Responsibility:
    Fixed-precision decimal rounding applied to every derived amount so that
    repeated edits never accumulate representation drift.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Idempotence: ``round_amount(round_amount(x)) == round_amount(x)``.
    - One rounding mode everywhere (ROUND_HALF_UP), one default precision
      (5 decimal places).

Failure modes:
    - ValueError for a negative ``places``.
    - Non-finite values (NaN, Infinity) are returned unchanged; callers
      reject them before they reach a derivation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from stock_kernel.domain.values import NumberLike, to_decimal

DEFAULT_PRECISION = 5

_QUANTUM_CACHE: dict[int, Decimal] = {}


def quantum(places: int) -> Decimal:
    """``Decimal("1e-<places>")``, cached per precision."""
    if places < 0:
        raise ValueError("places cannot be negative")
    q = _QUANTUM_CACHE.get(places)
    if q is None:
        q = Decimal(1).scaleb(-places)
        _QUANTUM_CACHE[places] = q
    return q


def round_amount(value: NumberLike, places: int = DEFAULT_PRECISION) -> Decimal:
    """
    Round to ``places`` decimal places, half away from zero.

    >>> round_amount("12.3456789")
    Decimal('12.34568')
    """
    amount = to_decimal(value)
    if not amount.is_finite():
        return amount
    rounded = amount.quantize(quantum(places), rounding=ROUND_HALF_UP)
    # Normalise negative zero produced by quantizing tiny negatives.
    if rounded.is_zero():
        return abs(rounded)
    return rounded


def is_rounded(value: Decimal, places: int = DEFAULT_PRECISION) -> bool:
    """True if ``value`` already sits on the ``places`` grid."""
    return round_amount(value, places) == value
