"""
Module: stock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  Canonical import surface for ``stock_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (and sibling engine modules).
    MUST NOT import stock_modules or stock_config.

Invariants enforced:
    - Decimal-only arithmetic; floats are converted through ``str``.
    - Determinism: identical inputs always produce identical outputs.
    - Business failures are returned on result objects, never raised.

Usage:
    from stock_engines import derive_line, apply_delta, recompute_totals
"""

from stock_engines.conservation import (
    ConservationResult,
    ConservationStatus,
    ConservationTracker,
    RemainingCapacity,
    allocated_total,
    apply_delta,
    delta_for_add,
    delta_for_edit,
    delta_for_remove,
    verify_conservation,
)
from stock_engines.cost_derivation import (
    CostDerivationEngine,
    DerivationResult,
    DerivationStatus,
    DiscountMode,
    EditedField,
    LineCosting,
    derive_line,
)
from stock_engines.purchase_totals import (
    ChargeCheck,
    PurchaseAggregator,
    PurchaseTotals,
    recompute_totals,
    validate_charge,
)
from stock_engines.rounding import DEFAULT_PRECISION, is_rounded, round_amount
from stock_engines.validation import (
    PURCHASE_RULES,
    PurchaseGateInput,
    ValidationOutcome,
    ValidationRule,
    run_rules,
    validate_purchase_gate,
)

__all__ = [
    # Rounding
    "DEFAULT_PRECISION",
    "is_rounded",
    "round_amount",
    # Cost derivation
    "CostDerivationEngine",
    "DerivationResult",
    "DerivationStatus",
    "DiscountMode",
    "EditedField",
    "LineCosting",
    "derive_line",
    # Conservation
    "ConservationResult",
    "ConservationStatus",
    "ConservationTracker",
    "RemainingCapacity",
    "allocated_total",
    "apply_delta",
    "delta_for_add",
    "delta_for_edit",
    "delta_for_remove",
    "verify_conservation",
    # Purchase totals
    "ChargeCheck",
    "PurchaseAggregator",
    "PurchaseTotals",
    "recompute_totals",
    "validate_charge",
    # Validation
    "PURCHASE_RULES",
    "PurchaseGateInput",
    "ValidationOutcome",
    "ValidationRule",
    "run_rules",
    "validate_purchase_gate",
]
