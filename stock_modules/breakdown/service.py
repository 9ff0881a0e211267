"""
Breakdown Service (``stock_modules.breakdown.service``).

Responsibility
--------------
Orchestrates a breakdown end to end: load the source item, seed the
``BreakdownSession`` with a suggested SKU, and turn a validated
``BreakdownPlan`` into repository writes.  Thin glue; every rule lives in
the session, its validation rules, or the conservation engine.

Invariants
----------
- ``commit`` owns the transaction boundary: ``session.commit()`` on success,
  ``session.rollback()`` plus ``abort_commit()`` on any exception, which is
  then re-raised unchanged.
- Create mode inserts one item per record and takes the consumed total from
  the source; allocate mode adds each amount to its target and takes the
  same total from the source.

Failure Modes
-------------
- ``ItemNotFoundError`` for an unknown source or target id.
- Persistence errors propagate after rollback; the breakdown session is
  back in EDITING with its records intact so the actor can retry.

Usage::

    service = BreakdownService(db_session)
    breakdown = service.start(source_id)
    breakdown.add_record(Decimal("4"))
    result = service.commit(breakdown)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from stock_config import get_active_config
from stock_config.schema import InventorySettings, StockConfig
from stock_engines.rounding import DEFAULT_PRECISION
from stock_kernel.logging_config import LogContext, get_logger
from stock_modules.breakdown.models import (
    BreakdownMode,
    BreakdownResult,
    BreakdownStatus,
)
from stock_modules.breakdown.session import BreakdownSession
from stock_modules.inventory.models import SourceItem
from stock_modules.inventory.repository import (
    ItemRepository,
    SequentialSkuGenerator,
    SkuGenerator,
    SqlItemRepository,
)

logger = get_logger("modules.breakdown.service")


class BreakdownService:
    """
    Runs breakdown sessions against an item repository.

    Transaction boundary: this service commits on success, rolls back on
    failure.  Repositories only flush.
    """

    def __init__(
        self,
        session: Session,
        settings: InventorySettings | None = None,
        places: int = DEFAULT_PRECISION,
        repository: ItemRepository | None = None,
        sku_generator: SkuGenerator | None = None,
    ):
        self._session = session
        self._settings = settings or InventorySettings()
        self._places = places
        self._items = repository or SqlItemRepository(session)
        self._skus = sku_generator or SequentialSkuGenerator(session, self._settings)

    @classmethod
    def from_config(cls, session: Session, config: StockConfig | None = None) -> "BreakdownService":
        """Build from the active (or given) configuration set."""
        config = config or get_active_config()
        return cls(session, settings=config.inventory, places=config.engine.precision)

    def start(
        self,
        source_id: str,
        mode: BreakdownMode = BreakdownMode.CREATE,
    ) -> BreakdownSession:
        """Load the source item and open a fresh session for it."""
        source = self._items.get_source_item(source_id)
        breakdown = BreakdownSession(self._settings, self._places)
        breakdown.open(source, mode=mode, sku_seed=self._skus.next_sku())
        return breakdown

    def search_targets(self, breakdown: BreakdownSession, text: str) -> list[SourceItem]:
        """Allocation candidates matching ``text``, excluding the source."""
        source_id = breakdown.source.id if breakdown.source else None
        return [i for i in self._items.search(text) if i.id != source_id]

    def commit(self, breakdown: BreakdownSession) -> BreakdownResult:
        """
        Validate and persist a breakdown.

        Postconditions:
            - REJECTED: nothing written; the session is unchanged.
            - COMMITTED: items created or targets updated, source capacity
              reduced by the consumed total, session CLOSED.

        Raises:
            Exception: Propagates repository errors after rolling back.
        """
        check = breakdown.begin_commit()
        if not check.is_success:
            logger.info("breakdown_rejected", extra={
                "code": check.failure.code,
                "reason": check.failure.message,
            })
            return BreakdownResult(status=BreakdownStatus.REJECTED, failure=check.failure)

        plan = check.plan
        with LogContext.bind(document_id=plan.source_id):
            try:
                match plan.mode:
                    case BreakdownMode.CREATE:
                        items = self._items.create_items(plan.new_items)
                        self._items.consume_capacity(
                            plan.source_id, plan.tracking_type, plan.consumed_total
                        )
                    case BreakdownMode.ALLOCATE:
                        items = self._items.apply_allocations(plan.source_id, plan.allocations)
                self._session.commit()
            except Exception:
                self._session.rollback()
                breakdown.abort_commit()
                logger.warning("breakdown_persist_failed", exc_info=True)
                raise

            breakdown.complete_commit()
            logger.info("breakdown_persisted", extra={
                "mode": plan.mode.value,
                "item_count": len(items),
                "consumed_total": str(plan.consumed_total),
            })
        return BreakdownResult(status=BreakdownStatus.COMMITTED, plan=plan, items=tuple(items))
