"""Save gate for purchase documents (``stock_modules.purchasing.validation``)."""

from __future__ import annotations

from stock_engines.validation import PurchaseGateInput, ValidationOutcome, validate_purchase_gate
from stock_modules.purchasing.models import Purchase


def validate_purchase(purchase: Purchase) -> ValidationOutcome:
    """Supplier name, then at least one line, then total > 0; first failure wins."""
    return validate_purchase_gate(PurchaseGateInput(
        supplier_name=purchase.supplier.name,
        line_count=len(purchase.lines),
        total=purchase.total,
    ))
