"""
Breakdown Session (``stock_modules.breakdown.session``).

Responsibility
--------------
In-memory editing session for breaking one source item down into derived
records.  Owns the record list and the ``RemainingCapacity`` value, threads
every amount change through ``ConservationTracker`` and enforces the
session state machine.

Architecture
------------
Layer: **Modules** -- stateful wrapper around the pure conservation engine.
Nothing is persisted here; ``BreakdownService`` turns the ``BreakdownPlan``
returned by ``begin_commit`` into repository calls.

State machine
-------------
::

    open() -> IDLE --add--> EDITING --begin_commit--> COMMITTING --complete--> CLOSED
               ^  <-remove last-- |                    |
               |                  <------abort---------+
               +-- switch_mode (records discarded, capacity restored)

    cancel() from IDLE or EDITING -> CLOSED
    open() from any state but COMMITTING starts over with a new source.

Invariants
----------
- remaining = capacity - sum(record amounts), never negative.
- A refused add leaves the record list untouched; a refused edit keeps
  the record's prior amount.
- Mutating a COMMITTING or CLOSED session raises ``SessionStateError``.

Usage::

    session = BreakdownSession()
    session.open(source_item, sku_seed="SKU-00042")
    result = session.add_record(Decimal("4"))
    check = session.begin_commit()
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

from stock_config.schema import InventorySettings
from stock_engines.conservation import (
    ConservationStatus,
    ConservationTracker,
    RemainingCapacity,
    allocated_total,
    delta_for_add,
    delta_for_remove,
)
from stock_engines.rounding import DEFAULT_PRECISION, round_amount
from stock_kernel.domain.failures import ValidationFailure
from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.domain.values import ZERO, coerce_decimal, is_valid_amount, to_decimal
from stock_kernel.exceptions import RecordNotFoundError, SessionStateError, SourceItemRequiredError
from stock_kernel.logging_config import get_logger
from stock_modules.breakdown.models import (
    EDITABLE_FIELDS,
    AllocationRecord,
    BreakdownMode,
    BreakdownPlan,
    BreakdownSummary,
    CommitCheck,
    CommitStatus,
    DerivedRecord,
    EditStatus,
    NewItemRecord,
    RecordEditResult,
    RecordKind,
    SessionState,
)
from stock_modules.breakdown.validation import validate_breakdown
from stock_modules.inventory.models import AllocationDelta, NewItemDraft, SourceItem, canonical_item_id

logger = get_logger("modules.breakdown.session")

_MUTABLE_STATES = (SessionState.IDLE, SessionState.EDITING)
_MONEY_FIELDS = ("price", "cost")
_TEXT_FIELDS = ("name", "sku", "category", "description", "target_id")


class BreakdownSession:
    """
    One breakdown of a source item.

    Contract:
        Single-threaded; one edit at a time.  Business failures come back
        as ``RecordEditResult`` / ``CommitCheck``; only misuse raises.
    """

    def __init__(
        self,
        settings: InventorySettings | None = None,
        places: int = DEFAULT_PRECISION,
    ):
        self.settings = settings or InventorySettings()
        self.places = places
        self._tracker = ConservationTracker(places)
        self._state = SessionState.IDLE
        self._source: SourceItem | None = None
        self._mode = BreakdownMode.CREATE
        self._records: list[DerivedRecord] = []
        self._capacity = RemainingCapacity()
        self._remaining = RemainingCapacity()
        self._sku_seed: str | None = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> BreakdownMode:
        return self._mode

    @property
    def source(self) -> SourceItem | None:
        return self._source

    @property
    def records(self) -> tuple[DerivedRecord, ...]:
        return tuple(self._records)

    @property
    def remaining(self) -> RemainingCapacity:
        return self._remaining

    @property
    def capacity(self) -> RemainingCapacity:
        return self._capacity

    @property
    def tracking_type(self) -> MeasurementType:
        return self._require_source("tracking_type").tracking_type

    @property
    def unit(self) -> str:
        return self._require_source("unit").unit_for()

    @property
    def remaining_amount(self) -> Decimal:
        return self._remaining.get(self.tracking_type)

    @property
    def is_fully_allocated(self) -> bool:
        return self.summary().is_fully_allocated

    def get_record(self, record_id: str) -> DerivedRecord:
        return self._records[self._index_of(record_id)]

    def summary(self) -> BreakdownSummary:
        source = self._require_source("summary")
        mtype = source.tracking_type
        return BreakdownSummary(
            tracking_type=mtype,
            unit=source.unit_for(),
            capacity=self._capacity.get(mtype),
            allocated=allocated_total(r.amount for r in self._records),
            remaining=self._remaining.get(mtype),
            record_count=len(self._records),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(
        self,
        source: SourceItem,
        mode: BreakdownMode = BreakdownMode.CREATE,
        sku_seed: str | None = None,
    ) -> None:
        """Start (or restart) a breakdown of ``source`` with full capacity."""
        if self._state is SessionState.COMMITTING:
            raise SessionStateError("open", self._state.value)
        capacity = RemainingCapacity.from_mapping({
            t: round_amount(v, self.places) for t, v in source.capacity().as_dict().items()
        })
        self._source = source
        self._mode = BreakdownMode(mode)
        self._sku_seed = sku_seed
        self._records = []
        self._capacity = capacity
        self._remaining = capacity
        self._state = SessionState.IDLE
        logger.info("breakdown_opened", extra={
            "source_id": source.id,
            "mode": self._mode.value,
            "tracking_type": source.tracking_type.value,
            "capacity": str(capacity.get(source.tracking_type)),
        })

    def switch_mode(self, mode: BreakdownMode | str) -> None:
        """Change mode; discards every record and restores full capacity."""
        self._check_mutable("switch_mode")
        new_mode = BreakdownMode(mode)
        if new_mode is self._mode:
            return
        discarded = len(self._records)
        self._mode = new_mode
        self._records = []
        self._remaining = self._capacity
        self._state = SessionState.IDLE
        logger.info("breakdown_mode_switched", extra={
            "mode": new_mode.value,
            "discarded_records": discarded,
        })

    def begin_commit(self) -> CommitCheck:
        """Validate the records; on success freeze the session and return the plan."""
        self._check_mutable("begin_commit")
        source = self._source
        outcome = validate_breakdown(source.id, self._records)
        if not outcome.is_valid:
            return CommitCheck(status=CommitStatus.INVALID, failure=outcome.failure)

        plan = self._build_plan(source)
        self._state = SessionState.COMMITTING
        logger.info("breakdown_commit_started", extra={
            "source_id": source.id,
            "mode": self._mode.value,
            "record_count": len(self._records),
            "consumed_total": str(plan.consumed_total),
        })
        return CommitCheck(status=CommitStatus.READY, plan=plan)

    def complete_commit(self) -> None:
        if self._state is not SessionState.COMMITTING:
            raise SessionStateError("complete_commit", self._state.value)
        self._state = SessionState.CLOSED
        logger.info("breakdown_committed", extra={"source_id": self._source.id})

    def abort_commit(self) -> None:
        """Return to EDITING with records intact (persistence failed)."""
        if self._state is not SessionState.COMMITTING:
            raise SessionStateError("abort_commit", self._state.value)
        self._state = SessionState.EDITING
        logger.warning("breakdown_commit_aborted", extra={"source_id": self._source.id})

    def cancel(self) -> None:
        """Drop every record and close; nothing was persisted."""
        if self._state not in _MUTABLE_STATES:
            raise SessionStateError("cancel", self._state.value)
        self._records = []
        self._remaining = self._capacity
        self._state = SessionState.CLOSED
        logger.info("breakdown_cancelled")

    # ------------------------------------------------------------------
    # Record edits
    # ------------------------------------------------------------------

    def add_record(self, amount: object = ZERO, **fields) -> RecordEditResult:
        """
        Append a record of the current mode's variant.

        New-item records start from the source's defaults (variant name,
        derived SKU, category, price, cost, description and tags); ``fields``
        override them.  Allocation records accept ``target_id``.
        """
        source = self._check_mutable("add_record")
        mtype = source.tracking_type
        value = coerce_decimal(amount)
        if not is_valid_amount(value):
            return RecordEditResult(
                status=EditStatus.INVALID_AMOUNT,
                record=None,
                remaining=self.remaining_amount,
                failure=ValidationFailure.invalid_amount("amount", amount),
            )
        value = round_amount(value, self.places)

        result = self._tracker.apply_delta(
            self._remaining, mtype, delta_for_add(value), source.unit_for()
        )
        if not result.is_success:
            return RecordEditResult(
                status=EditStatus.OVER_ALLOCATED,
                record=None,
                remaining=self.remaining_amount,
                failure=result.failure,
            )

        record = self._new_record(value, fields)
        self._records.append(record)
        self._remaining = result.remaining
        self._state = SessionState.EDITING
        logger.debug("breakdown_record_added", extra={
            "record_id": record.record_id,
            "kind": record.kind.value,
            "amount": str(value),
        })
        return RecordEditResult(
            status=EditStatus.APPLIED, record=record, remaining=self.remaining_amount
        )

    def update_amount(self, record_id: str, amount: object) -> RecordEditResult:
        """Change one record's amount; refused edits keep the prior amount."""
        source = self._check_mutable("update_amount")
        index = self._index_of(record_id)
        record = self._records[index]

        result = self._tracker.apply_edit(
            self._remaining, source.tracking_type, record.amount, amount, source.unit_for()
        )
        if not result.is_success:
            status = (
                EditStatus.INVALID_AMOUNT
                if result.status is ConservationStatus.INVALID_AMOUNT
                else EditStatus.OVER_ALLOCATED
            )
            return RecordEditResult(
                status=status,
                record=record,
                remaining=self.remaining_amount,
                failure=result.failure,
            )

        updated = replace(record, amount=round_amount(record.amount + result.delta, self.places))
        self._records[index] = updated
        self._remaining = result.remaining
        return RecordEditResult(
            status=EditStatus.APPLIED, record=updated, remaining=self.remaining_amount
        )

    def update_fields(self, record_id: str, **fields) -> DerivedRecord:
        """
        Edit non-amount fields of a record; capacity is not touched.

        Raises:
            ValueError: for a field the record's variant does not allow.
        """
        self._check_mutable("update_fields")
        index = self._index_of(record_id)
        record = self._records[index]
        allowed = EDITABLE_FIELDS[record.kind]
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(
                f"Cannot edit {sorted(unknown)} on a {record.kind.value} record; "
                f"editable fields are {sorted(allowed)}"
            )
        updated = replace(record, **self._normalise_fields(fields))
        self._records[index] = updated
        return updated

    def remove_record(self, record_id: str) -> RecordEditResult:
        """Remove a record and return its amount to the remaining capacity."""
        source = self._check_mutable("remove_record")
        index = self._index_of(record_id)
        record = self._records[index]

        result = self._tracker.apply_delta(
            self._remaining, source.tracking_type, delta_for_remove(record.amount), source.unit_for()
        )
        del self._records[index]
        self._remaining = result.remaining
        if not self._records:
            self._state = SessionState.IDLE
        logger.debug("breakdown_record_removed", extra={
            "record_id": record.record_id,
            "amount": str(record.amount),
        })
        return RecordEditResult(
            status=EditStatus.APPLIED, record=record, remaining=self.remaining_amount
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_source(self, operation: str) -> SourceItem:
        if self._source is None:
            raise SourceItemRequiredError(operation)
        return self._source

    def _check_mutable(self, operation: str) -> SourceItem:
        if self._state not in _MUTABLE_STATES:
            raise SessionStateError(operation, self._state.value)
        return self._require_source(operation)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.record_id == record_id:
                return index
        raise RecordNotFoundError(record_id)

    @staticmethod
    def _normalise_fields(fields: dict) -> dict:
        normalised = dict(fields)
        for name in _MONEY_FIELDS:
            if name in normalised:
                normalised[name] = to_decimal(normalised[name])
        for name in _TEXT_FIELDS:
            if name in normalised:
                value = normalised[name]
                normalised[name] = "" if value is None else str(value)
        if "tags" in normalised:
            normalised["tags"] = tuple(normalised["tags"])
        return normalised

    def default_name(self, position: int) -> str:
        return self.settings.variant_name_template.format(
            source_name=self._source.name, index=position
        )

    def default_sku(self, position: int) -> str:
        seed = self._sku_seed or self._source.sku
        return f"{seed}-{position:0{self.settings.derived_sku_suffix_width}d}"

    def _new_record(self, amount: Decimal, fields: dict) -> DerivedRecord:
        record_id = str(uuid4())
        match self._mode:
            case BreakdownMode.CREATE:
                unknown = set(fields) - EDITABLE_FIELDS[RecordKind.NEW_ITEM]
                if unknown:
                    raise ValueError(f"Unknown new-item fields: {sorted(unknown)}")
                source = self._source
                position = len(self._records) + 1
                defaults = {
                    "name": self.default_name(position),
                    "sku": self.default_sku(position),
                    "category": source.category,
                    "price": source.price,
                    "cost": source.cost,
                    "description": source.description,
                    "tags": source.tags,
                }
                defaults.update(self._normalise_fields(fields))
                return NewItemRecord(record_id=record_id, amount=amount, **defaults)
            case BreakdownMode.ALLOCATE:
                unknown = set(fields) - EDITABLE_FIELDS[RecordKind.ALLOCATION]
                if unknown:
                    raise ValueError(f"Unknown allocation fields: {sorted(unknown)}")
                return AllocationRecord(
                    record_id=record_id, amount=amount, **self._normalise_fields(fields)
                )

    def _build_plan(self, source: SourceItem) -> BreakdownPlan:
        mtype = source.tracking_type
        unit = source.unit_for()
        consumed = allocated_total(r.amount for r in self._records)
        new_items: tuple[NewItemDraft, ...] = ()
        allocations: tuple[AllocationDelta, ...] = ()
        match self._mode:
            case BreakdownMode.CREATE:
                new_items = tuple(
                    NewItemDraft(
                        name=r.name.strip(),
                        sku=r.sku.strip(),
                        tracking_type=mtype,
                        amount=r.amount,
                        unit=unit,
                        category=r.category,
                        price=r.price,
                        cost=r.cost,
                        description=r.description,
                        tags=r.tags,
                    )
                    for r in self._records
                )
            case BreakdownMode.ALLOCATE:
                allocations = tuple(
                    AllocationDelta(
                        target_id=canonical_item_id(r.target_id),
                        measurement_type=mtype,
                        amount=r.amount,
                    )
                    for r in self._records
                )
        return BreakdownPlan(
            mode=self._mode,
            source_id=source.id,
            tracking_type=mtype,
            unit=unit,
            consumed_total=consumed,
            new_items=new_items,
            allocations=allocations,
        )
