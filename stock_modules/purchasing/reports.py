"""Purchase reporting helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.rounding import round_amount
from stock_kernel.domain.values import ZERO, safe_divide
from stock_modules.purchasing.models import Purchase, PurchaseStatus


@dataclass(frozen=True)
class PurchaseSummary:
    purchase_count: int
    total_cost: Decimal
    average_value: Decimal


def summarize_purchases(
    purchases: Iterable[Purchase],
    include_cancelled: bool = True,
) -> PurchaseSummary:
    """Number of purchases, sum of their totals and the mean (0 when empty)."""
    selected = [
        p for p in purchases
        if include_cancelled or p.status is not PurchaseStatus.CANCELLED
    ]
    total = round_amount(sum((p.total for p in selected), ZERO))
    count = len(selected)
    return PurchaseSummary(
        purchase_count=count,
        total_cost=total,
        average_value=round_amount(safe_divide(total, Decimal(count))),
    )
