"""
Breakdown Domain Models (``stock_modules.breakdown.models``).

Responsibility
--------------
Value objects for one breakdown of a generic item into derived records:
the ``DerivedRecord`` tagged union (``NewItemRecord`` | ``AllocationRecord``),
session enums, per-edit results, the commit ``BreakdownPlan`` and the
summary shown next to the records.

Invariants
----------
- A derived record's ``amount`` is always in the source item's tracking
  type and unit; the record does not carry its own type.
- ``kind`` is a class-level tag; dispatch on it with ``match``.
- Everything here is frozen; the session replaces records rather than
  mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from stock_kernel.domain.failures import OverAllocation, ValidationFailure
from stock_kernel.domain.measurement import MeasurementType, format_amount, unit_label
from stock_kernel.domain.values import ZERO
from stock_modules.inventory.models import AllocationDelta, NewItemDraft


class BreakdownMode(str, Enum):
    """Create new items, or allocate to existing ones."""

    CREATE = "create"
    ALLOCATE = "allocate"


class SessionState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    COMMITTING = "committing"
    CLOSED = "closed"


class RecordKind(str, Enum):
    NEW_ITEM = "new_item"
    ALLOCATION = "allocation"


@dataclass(frozen=True)
class NewItemRecord:
    """A derived record that becomes a brand new item on commit."""

    record_id: str
    amount: Decimal = ZERO
    name: str = ""
    sku: str = ""
    category: str = ""
    price: Decimal = ZERO
    cost: Decimal = ZERO
    description: str = ""
    tags: tuple[str, ...] = ()

    kind: ClassVar[RecordKind] = RecordKind.NEW_ITEM


@dataclass(frozen=True)
class AllocationRecord:
    """A derived record that adds its amount to an existing item on commit."""

    record_id: str
    amount: Decimal = ZERO
    target_id: str = ""

    kind: ClassVar[RecordKind] = RecordKind.ALLOCATION


DerivedRecord = Union[NewItemRecord, AllocationRecord]

# Fields of each variant that ``update_fields`` may touch.
EDITABLE_FIELDS: dict[RecordKind, frozenset[str]] = {
    RecordKind.NEW_ITEM: frozenset(
        {"name", "sku", "category", "price", "cost", "description", "tags"}
    ),
    RecordKind.ALLOCATION: frozenset({"target_id"}),
}


class EditStatus(str, Enum):
    APPLIED = "applied"
    OVER_ALLOCATED = "over_allocated"
    INVALID_AMOUNT = "invalid_amount"


@dataclass(frozen=True)
class RecordEditResult:
    """
    Outcome of adding, editing or removing a derived record.

    ``record`` is the record as it now stands (the prior record on failure,
    ``None`` for a refused add).  ``remaining`` is the unassigned capacity in
    the tracking type after the call.
    """

    status: EditStatus
    record: DerivedRecord | None
    remaining: Decimal
    failure: OverAllocation | ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == EditStatus.APPLIED

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None


@dataclass(frozen=True)
class BreakdownPlan:
    """Everything persistence needs to carry out a validated breakdown."""

    mode: BreakdownMode
    source_id: str
    tracking_type: MeasurementType
    unit: str
    consumed_total: Decimal
    new_items: tuple[NewItemDraft, ...] = ()
    allocations: tuple[AllocationDelta, ...] = ()


class CommitStatus(str, Enum):
    READY = "ready"
    INVALID = "invalid"


@dataclass(frozen=True)
class CommitCheck:
    """Result of ``BreakdownSession.begin_commit``."""

    status: CommitStatus
    plan: BreakdownPlan | None = None
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == CommitStatus.READY

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None


@dataclass(frozen=True)
class BreakdownSummary:
    """Allocated vs remaining capacity in the source's tracking type."""

    tracking_type: MeasurementType
    unit: str
    capacity: Decimal
    allocated: Decimal
    remaining: Decimal
    record_count: int

    @property
    def is_fully_allocated(self) -> bool:
        return self.remaining == ZERO

    @property
    def label(self) -> str:
        unit = "unit" if self.tracking_type is MeasurementType.QUANTITY else unit_label(self.unit)
        return f"{format_amount(self.allocated)} / {format_amount(self.capacity)} {unit} allocated"


class BreakdownStatus(str, Enum):
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class BreakdownResult:
    """
    Outcome of ``BreakdownService.commit``.

    ``items`` are the created items (create mode) or the updated targets
    (allocate mode).
    """

    status: BreakdownStatus
    plan: BreakdownPlan | None = None
    items: tuple = field(default_factory=tuple)
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == BreakdownStatus.COMMITTED

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None
