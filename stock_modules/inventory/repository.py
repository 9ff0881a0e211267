"""
Inventory Repository (``stock_modules.inventory.repository``).

Responsibility
--------------
Persistence collaborators used by the breakdown workflow:

- ``ItemRepository`` -- fetch a source item, search candidates for
  allocation, create items from drafts, persist allocation deltas.
- ``SkuGenerator`` -- suggest the next SKU as an opaque seed string.

``SqlItemRepository`` and ``SequentialSkuGenerator`` are the SQLAlchemy
reference implementations.  Neither commits; the calling service owns the
transaction boundary.

Failure Modes
-------------
- ``ItemNotFoundError`` for an unknown or malformed item id.
- SQLAlchemy errors propagate unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from stock_config.schema import InventorySettings
from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.exceptions import ItemNotFoundError
from stock_kernel.logging_config import get_logger
from stock_modules.inventory.models import AllocationDelta, NewItemDraft, SourceItem
from stock_modules.inventory.orm import ItemModel

logger = get_logger("modules.inventory.repository")


class ItemRepository(Protocol):
    """Item store consulted and written by a breakdown."""

    def get_source_item(self, item_id: str) -> SourceItem:
        """Return the item or raise ItemNotFoundError."""
        ...

    def search(self, text: str, limit: int = 20) -> list[SourceItem]:
        """Items whose name or sku contains ``text`` (case-insensitive)."""
        ...

    def create_items(self, drafts: Sequence[NewItemDraft]) -> list[SourceItem]:
        """Persist new items; returns them with generated ids, in input order."""
        ...

    def apply_allocations(
        self,
        source_id: str,
        deltas: Sequence[AllocationDelta],
    ) -> list[SourceItem]:
        """Add each delta to its target and take the total from the source."""
        ...

    def consume_capacity(
        self,
        source_id: str,
        measurement_type: MeasurementType,
        amount: Decimal,
    ) -> SourceItem:
        """Take ``amount`` from the source's capacity field of that type."""
        ...


class SkuGenerator(Protocol):
    """Supplies a suggested next SKU; never checked for uniqueness here."""

    def next_sku(self) -> str | None:
        ...


def _parse_id(item_id: str) -> UUID:
    try:
        return item_id if isinstance(item_id, UUID) else UUID(str(item_id))
    except ValueError as exc:
        raise ItemNotFoundError(str(item_id)) from exc


class SqlItemRepository:
    """SQLAlchemy-backed ``ItemRepository``."""

    def __init__(self, session: Session):
        self.session = session

    def _get_model(self, item_id: str) -> ItemModel:
        model = self.session.get(ItemModel, _parse_id(item_id))
        if model is None:
            raise ItemNotFoundError(str(item_id))
        return model

    def get_source_item(self, item_id: str) -> SourceItem:
        return self._get_model(item_id).to_dto()

    def save(self, item: SourceItem) -> SourceItem:
        """Insert or overwrite an item from its DTO."""
        model = self.session.merge(ItemModel.from_dto(item))
        self.session.flush()
        return model.to_dto()

    def search(self, text: str, limit: int = 20) -> list[SourceItem]:
        stmt = select(ItemModel)
        needle = (text or "").strip()
        if needle:
            pattern = f"%{needle}%"
            stmt = stmt.where(or_(ItemModel.name.ilike(pattern), ItemModel.sku.ilike(pattern)))
        stmt = stmt.order_by(ItemModel.name, ItemModel.sku).limit(limit)
        return [m.to_dto() for m in self.session.execute(stmt).scalars().all()]

    def create_items(self, drafts: Sequence[NewItemDraft]) -> list[SourceItem]:
        models = [ItemModel.from_draft(d) for d in drafts]
        self.session.add_all(models)
        self.session.flush()
        logger.info("items_created", extra={"count": len(models)})
        return [m.to_dto() for m in models]

    def apply_allocations(
        self,
        source_id: str,
        deltas: Sequence[AllocationDelta],
    ) -> list[SourceItem]:
        source = self._get_model(source_id)
        consumed: dict[MeasurementType, Decimal] = {}
        targets = []
        for delta in deltas:
            target = self._get_model(delta.target_id)
            target.set_capacity(
                delta.measurement_type,
                target.get_capacity(delta.measurement_type) + delta.amount,
            )
            consumed[delta.measurement_type] = (
                consumed.get(delta.measurement_type, Decimal("0")) + delta.amount
            )
            targets.append(target)

        for mtype, amount in consumed.items():
            self._consume(source, mtype, amount)

        self.session.flush()
        logger.info("allocations_applied", extra={
            "source_id": str(source_id),
            "target_count": len(targets),
        })
        return [t.to_dto() for t in targets]

    def consume_capacity(
        self,
        source_id: str,
        measurement_type: MeasurementType,
        amount: Decimal,
    ) -> SourceItem:
        source = self._get_model(source_id)
        self._consume(source, measurement_type, amount)
        self.session.flush()
        return source.to_dto()

    @staticmethod
    def _consume(source: ItemModel, measurement_type: MeasurementType, amount: Decimal) -> None:
        source.set_capacity(measurement_type, source.get_capacity(measurement_type) - amount)


class SequentialSkuGenerator:
    """
    ``<prefix>-<n>`` with ``n`` one past the highest numeric suffix in use.

    Only SKUs of exactly that shape count; derived SKUs such as
    ``SKU-00012-03`` are ignored.
    """

    def __init__(self, session: Session, settings: InventorySettings | None = None):
        self.session = session
        self.settings = settings or InventorySettings()
        self._pattern = re.compile(rf"^{re.escape(self.settings.sku_prefix)}-(\d+)$")

    def next_sku(self) -> str:
        prefix = self.settings.sku_prefix
        stmt = select(ItemModel.sku).where(ItemModel.sku.like(f"{prefix}-%"))
        highest = 0
        for sku in self.session.execute(stmt).scalars():
            match = self._pattern.match(sku or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{prefix}-{highest + 1:0{self.settings.sku_width}d}"
