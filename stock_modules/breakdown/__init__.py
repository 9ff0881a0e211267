"""
Breakdown Module (``stock_modules.breakdown``).

Responsibility
--------------
Split one generic inventory item into new derived items, or allocate its
amount to existing items, without ever assigning more than the item holds.

Architecture
------------
``BreakdownSession`` is the in-memory editor (state machine plus
conservation bookkeeping); ``BreakdownService`` loads and persists through
the inventory repository.
"""

from stock_modules.breakdown.models import (
    AllocationRecord,
    BreakdownMode,
    BreakdownPlan,
    BreakdownResult,
    BreakdownStatus,
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
from stock_modules.breakdown.service import BreakdownService
from stock_modules.breakdown.session import BreakdownSession
from stock_modules.breakdown.validation import validate_breakdown

__all__ = [
    "AllocationRecord",
    "BreakdownMode",
    "BreakdownPlan",
    "BreakdownResult",
    "BreakdownService",
    "BreakdownSession",
    "BreakdownStatus",
    "BreakdownSummary",
    "CommitCheck",
    "CommitStatus",
    "DerivedRecord",
    "EditStatus",
    "NewItemRecord",
    "RecordEditResult",
    "RecordKind",
    "SessionState",
    "validate_breakdown",
]
