"""
Purchase Repository (``stock_modules.purchasing.repository``).

Responsibility
--------------
Read a purchase by id; create or update it with its full line list and
derived totals.  ``SqlPurchaseRepository`` flushes but never commits; the
calling service owns the transaction boundary.

Failure Modes
-------------
- ``PurchaseNotFoundError`` for an unknown or malformed purchase id.
- SQLAlchemy errors propagate unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_kernel.exceptions import PurchaseNotFoundError
from stock_kernel.logging_config import get_logger
from stock_modules.purchasing.models import Purchase
from stock_modules.purchasing.orm import PurchaseLineModel, PurchaseModel

logger = get_logger("modules.purchasing.repository")


class PurchaseRepository(Protocol):
    def get(self, purchase_id: str) -> Purchase:
        """Return the purchase or raise PurchaseNotFoundError."""
        ...

    def save(self, purchase: Purchase) -> Purchase:
        """Insert (no ``purchase_id``) or update; returns the stored document."""
        ...

    def list_all(self) -> list[Purchase]:
        ...


class SqlPurchaseRepository:
    """SQLAlchemy-backed ``PurchaseRepository``."""

    def __init__(self, session: Session):
        self.session = session

    def _get_model(self, purchase_id: str) -> PurchaseModel:
        try:
            key = UUID(str(purchase_id))
        except ValueError as exc:
            raise PurchaseNotFoundError(str(purchase_id)) from exc
        model = self.session.get(PurchaseModel, key)
        if model is None:
            raise PurchaseNotFoundError(str(purchase_id))
        return model

    def get(self, purchase_id: str) -> Purchase:
        return self._get_model(purchase_id).to_dto()

    def list_all(self) -> list[Purchase]:
        stmt = select(PurchaseModel).order_by(PurchaseModel.created_at, PurchaseModel.id)
        return [m.to_dto() for m in self.session.execute(stmt).scalars().all()]

    def save(self, purchase: Purchase) -> Purchase:
        if purchase.purchase_id is None:
            model = PurchaseModel(id=uuid4())
            self.session.add(model)
            created = True
        else:
            model = self._get_model(purchase.purchase_id)
            created = False

        model.apply_dto(purchase)
        self._sync_lines(model, purchase)
        self.session.flush()

        logger.info("purchase_saved", extra={
            "purchase_id": str(model.id),
            "is_new": created,
            "line_count": len(purchase.lines),
            "total": str(purchase.total),
        })
        return replace(model.to_dto(), totals=purchase.totals)

    @staticmethod
    def _sync_lines(model: PurchaseModel, purchase: Purchase) -> None:
        """Update lines in place by id, add new ones, drop the rest."""
        existing = {str(line.id): line for line in model.lines}
        kept: list[PurchaseLineModel] = []
        for seq, dto in enumerate(purchase.lines):
            fresh = PurchaseLineModel.from_dto(dto, seq)
            current = existing.get(dto.line_id)
            if current is None:
                kept.append(fresh)
                continue
            for column in PurchaseLineModel.__table__.columns.keys():
                if column in ("id", "purchase_id", "created_at", "updated_at"):
                    continue
                setattr(current, column, getattr(fresh, column))
            kept.append(current)
        model.lines = kept
