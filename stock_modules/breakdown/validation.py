"""
Breakdown commit validation (``stock_modules.breakdown.validation``).

Rules run through ``stock_engines.validation.run_rules`` in this order:
records present, then for each record in list order its amount, then the
variant checks.  The first failure wins and names the record position.
Target ids are compared in canonical form, so two spellings of one UUID
count as the same item.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stock_engines.validation import ValidationOutcome, ValidationRule, run_rules
from stock_kernel.domain.failures import FailureCode
from stock_kernel.domain.values import ZERO
from stock_modules.breakdown.models import DerivedRecord, RecordKind
from stock_modules.inventory.models import canonical_item_id


@dataclass(frozen=True)
class RecordCheck:
    """One record plus the context its rules need."""

    position: int
    record: DerivedRecord
    source_id: str
    earlier_targets: frozenset[str]


def _target(check: RecordCheck) -> str:
    return canonical_item_id(check.record.target_id)


def _amount_rule(position: int) -> ValidationRule[RecordCheck]:
    return ValidationRule(
        code=FailureCode.AMOUNT_NOT_POSITIVE,
        message=f"Item {position}: amount must be greater than zero",
        check=lambda c: c.record.amount > ZERO,
        field=f"records[{position - 1}].amount",
    )


def _new_item_rules(position: int) -> tuple[ValidationRule[RecordCheck], ...]:
    return (
        _amount_rule(position),
        ValidationRule(
            code=FailureCode.NAME_REQUIRED,
            message=f"Item {position}: name is required",
            check=lambda c: bool(c.record.name.strip()),
            field=f"records[{position - 1}].name",
        ),
        ValidationRule(
            code=FailureCode.SKU_REQUIRED,
            message=f"Item {position}: SKU is required",
            check=lambda c: bool(c.record.sku.strip()),
            field=f"records[{position - 1}].sku",
        ),
    )


def _allocation_rules(position: int) -> tuple[ValidationRule[RecordCheck], ...]:
    return (
        _amount_rule(position),
        ValidationRule(
            code=FailureCode.TARGET_REQUIRED,
            message=f"Item {position}: select an item to allocate to",
            check=lambda c: bool(_target(c)),
            field=f"records[{position - 1}].target_id",
        ),
        ValidationRule(
            code=FailureCode.SELF_ALLOCATION,
            message=f"Item {position}: cannot allocate to the source item itself",
            check=lambda c: _target(c) != canonical_item_id(c.source_id),
            field=f"records[{position - 1}].target_id",
        ),
        ValidationRule(
            code=FailureCode.DUPLICATE_TARGET,
            message=f"Item {position}: this item is already allocated to in another row",
            check=lambda c: _target(c) not in c.earlier_targets,
            field=f"records[{position - 1}].target_id",
        ),
    )


def validate_breakdown(source_id: str, records: Sequence[DerivedRecord]) -> ValidationOutcome:
    """Validate a breakdown's records before commit."""
    if not records:
        return ValidationOutcome.fail(
            FailureCode.NO_DERIVED_RECORDS, "Add at least one derived item", "records"
        )

    seen: set[str] = set()
    for position, record in enumerate(records, start=1):
        match record.kind:
            case RecordKind.NEW_ITEM:
                rules = _new_item_rules(position)
            case RecordKind.ALLOCATION:
                rules = _allocation_rules(position)
        outcome = run_rules(
            RecordCheck(position, record, source_id, frozenset(seen)), rules
        )
        if not outcome.is_valid:
            return outcome
        if record.kind is RecordKind.ALLOCATION:
            seen.add(canonical_item_id(record.target_id))
    return ValidationOutcome.ok()
