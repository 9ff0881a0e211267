"""
Module: stock_engines.validation
Responsibility:
    Ordered, short-circuiting rule runner used as the gate before a document
    is handed to persistence, plus the purchase save rules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Rule sets that need module
    types (e.g. breakdown records) are declared in the module and run here.

Invariants enforced:
    - Rules run in declaration order; the first failing rule's message is
      returned verbatim and no further rule is evaluated.
    - A gate never raises for an incomplete document.

Usage:
    from stock_engines.validation import ValidationRule, run_rules

    outcome = run_rules(purchase, PURCHASE_RULES)
    if not outcome.is_valid:
        show(outcome.message)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, TypeVar

from stock_kernel.domain.failures import FailureCode, ValidationFailure
from stock_kernel.domain.values import ZERO
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.validation")

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationOutcome:
    """Pass, or the first failure."""

    failure: ValidationFailure | None = None

    @property
    def is_valid(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None

    @property
    def code(self) -> str | None:
        return self.failure.code if self.failure else None

    @classmethod
    def ok(cls) -> ValidationOutcome:
        return cls()

    @classmethod
    def fail(cls, code: str, message: str, field: str | None = None) -> ValidationOutcome:
        return cls(ValidationFailure(code=code, message=message, field=field))


@dataclass(frozen=True)
class ValidationRule(Generic[T]):
    """A named predicate; ``check`` returns True when the subject passes."""

    code: str
    message: str
    check: Callable[[T], bool]
    field: str | None = None


def run_rules(subject: T, rules: Sequence[ValidationRule[T]]) -> ValidationOutcome:
    """Evaluate ``rules`` in order and stop at the first failure."""
    for rule in rules:
        if not rule.check(subject):
            logger.info("validation_failed", extra={"code": rule.code})
            return ValidationOutcome.fail(rule.code, rule.message, rule.field)
    return ValidationOutcome.ok()


# ---------------------------------------------------------------------------
# Purchase save gate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseGateInput:
    """The three facts the purchase gate looks at."""

    supplier_name: str | None
    line_count: int
    total: Decimal


PURCHASE_RULES: tuple[ValidationRule[PurchaseGateInput], ...] = (
    ValidationRule(
        code=FailureCode.SUPPLIER_NAME_REQUIRED,
        message="Supplier name is required",
        check=lambda p: bool((p.supplier_name or "").strip()),
        field="supplier.name",
    ),
    ValidationRule(
        code=FailureCode.LINE_ITEMS_REQUIRED,
        message="At least one item is required",
        check=lambda p: p.line_count > 0,
        field="items",
    ),
    ValidationRule(
        code=FailureCode.TOTAL_NOT_POSITIVE,
        message="Total must be greater than zero",
        check=lambda p: p.total > ZERO,
        field="total",
    ),
)


def validate_purchase_gate(gate_input: PurchaseGateInput) -> ValidationOutcome:
    """Supplier name, then at least one line, then total > 0."""
    return run_rules(gate_input, PURCHASE_RULES)
