"""
Purchasing Module (``stock_modules.purchasing``).

Responsibility
--------------
Purchase documents: line-level cost derivation through
``CostDerivationEngine``, purchase totals through ``PurchaseAggregator``,
the save gate, persistence and a simple spend report.
"""

from stock_modules.purchasing.editor import EditOutcome, PurchaseEditor, PurchaseEditResult
from stock_modules.purchasing.models import (
    PaymentMethod,
    Purchase,
    PurchaseLineItem,
    PurchaseStatus,
    Supplier,
    TargetKind,
)
from stock_modules.purchasing.reports import PurchaseSummary, summarize_purchases
from stock_modules.purchasing.repository import PurchaseRepository, SqlPurchaseRepository
from stock_modules.purchasing.service import PurchaseSaveResult, PurchasingService, SaveStatus
from stock_modules.purchasing.validation import validate_purchase

__all__ = [
    "EditOutcome",
    "PaymentMethod",
    "Purchase",
    "PurchaseEditResult",
    "PurchaseEditor",
    "PurchaseLineItem",
    "PurchaseRepository",
    "PurchaseSaveResult",
    "PurchaseStatus",
    "PurchaseSummary",
    "PurchasingService",
    "SaveStatus",
    "SqlPurchaseRepository",
    "Supplier",
    "TargetKind",
    "summarize_purchases",
    "validate_purchase",
]
