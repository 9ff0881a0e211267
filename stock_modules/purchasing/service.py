"""
Purchasing Service (``stock_modules.purchasing.service``).

Responsibility
--------------
Open purchase documents for editing and persist them once the save gate
passes.  Thin glue over ``PurchaseEditor`` and ``PurchaseRepository``.

Invariants
----------
- Nothing is written unless ``validate_purchase`` passes.
- ``save`` owns the transaction boundary: commit on success, rollback and
  re-raise on any exception.

Usage::

    service = PurchasingService(db_session)
    editor = service.new_purchase()
    ...
    result = service.save(editor)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Session

from stock_config import get_active_config
from stock_config.schema import InventorySettings, PurchasingSettings, StockConfig
from stock_engines.rounding import DEFAULT_PRECISION
from stock_kernel.domain.failures import ValidationFailure
from stock_kernel.logging_config import LogContext, get_logger
from stock_modules.purchasing.editor import PurchaseEditor
from stock_modules.purchasing.models import Purchase
from stock_modules.purchasing.reports import PurchaseSummary, summarize_purchases
from stock_modules.purchasing.repository import PurchaseRepository, SqlPurchaseRepository

logger = get_logger("modules.purchasing.service")


class SaveStatus(str, Enum):
    SAVED = "saved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PurchaseSaveResult:
    status: SaveStatus
    purchase: Purchase
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SaveStatus.SAVED

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None


class PurchasingService:
    """
    Loads, validates and stores purchases.

    Transaction boundary: this service commits on success, rolls back on
    failure.  The repository only flushes.
    """

    def __init__(
        self,
        session: Session,
        settings: PurchasingSettings | None = None,
        places: int = DEFAULT_PRECISION,
        repository: PurchaseRepository | None = None,
        inventory_settings: InventorySettings | None = None,
    ):
        self._session = session
        self._settings = settings or PurchasingSettings()
        self._inventory_settings = inventory_settings or InventorySettings()
        self._places = places
        self._purchases = repository or SqlPurchaseRepository(session)

    @classmethod
    def from_config(cls, session: Session, config: StockConfig | None = None) -> "PurchasingService":
        """Build from the active (or given) configuration set."""
        config = config or get_active_config()
        return cls(
            session,
            settings=config.purchasing,
            places=config.engine.precision,
            inventory_settings=config.inventory,
        )

    def new_purchase(self) -> PurchaseEditor:
        return self._editor()

    def edit_purchase(self, purchase_id: str) -> PurchaseEditor:
        """Load a stored purchase into an editor (totals are re-derived)."""
        purchase = self._purchases.get(purchase_id)
        return self._editor(purchase)

    def get_purchase(self, purchase_id: str) -> Purchase:
        return self._purchases.get(purchase_id)

    def save(self, editor: PurchaseEditor) -> PurchaseSaveResult:
        """
        Run the save gate, then create or update the purchase.

        Raises:
            Exception: Propagates repository errors after rolling back.
        """
        purchase = editor.purchase
        outcome = editor.validate()
        if not outcome.is_valid:
            logger.info("purchase_rejected", extra={
                "code": outcome.code,
                "reason": outcome.message,
            })
            return PurchaseSaveResult(
                status=SaveStatus.REJECTED, purchase=purchase, failure=outcome.failure
            )

        with LogContext.bind(document_id=purchase.purchase_id):
            try:
                stored = self._purchases.save(purchase)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("purchase_persist_failed", exc_info=True)
                raise

        editor.load(stored)
        logger.info("purchase_persisted", extra={
            "purchase_id": stored.purchase_id,
            "total": str(stored.total),
        })
        return PurchaseSaveResult(status=SaveStatus.SAVED, purchase=stored)

    def report(self) -> PurchaseSummary:
        """Count, total cost and average value over every stored purchase."""
        return summarize_purchases(self._purchases.list_all())

    def _editor(self, purchase: Purchase | None = None) -> PurchaseEditor:
        return PurchaseEditor(
            purchase,
            settings=self._settings,
            places=self._places,
            inventory_settings=self._inventory_settings,
        )
