"""
Inventory Module (``stock_modules.inventory``).

Responsibility
--------------
Item value objects seen by the breakdown and purchasing workflows, the
``items`` ORM table, and the repository / SKU generator collaborators.

Architecture
------------
Layer: **Modules**.  Imports from ``stock_engines`` and ``stock_kernel``
but never the reverse.
"""

from stock_modules.inventory.models import (
    AllocationDelta,
    NewItemDraft,
    SourceItem,
    canonical_item_id,
)
from stock_modules.inventory.repository import (
    ItemRepository,
    SequentialSkuGenerator,
    SkuGenerator,
    SqlItemRepository,
)

__all__ = [
    "AllocationDelta",
    "ItemRepository",
    "NewItemDraft",
    "SequentialSkuGenerator",
    "SkuGenerator",
    "SourceItem",
    "SqlItemRepository",
    "canonical_item_id",
]
