"""
Purchase Editor (``stock_modules.purchasing.editor``).

Responsibility
--------------
Holds one in-memory ``Purchase`` while the actor edits it.  Line cost edits
go through ``CostDerivationEngine``; every mutation that can move money
re-runs ``PurchaseAggregator`` over the full line set so the stored totals
are never stale.

Invariants
----------
- A refused edit (invalid number) leaves the document exactly as it was
  and reports ``INVALID_AMOUNT``.
- ``purchase.totals`` always equals the aggregator output for the current
  lines and charges.

Usage::

    editor = PurchaseEditor()
    editor.set_supplier(name="Acme")
    line = editor.add_line("item-1", amount="10", original_cost="100").line
    editor.edit_line(line.line_id, EditedField.DISCOUNT_PERCENTAGE, "20")
    editor.validate()
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from uuid import uuid4

from stock_config.schema import InventorySettings, PurchasingSettings
from stock_engines.cost_derivation import CostDerivationEngine, EditedField, LineCosting
from stock_engines.purchase_totals import PurchaseAggregator, validate_charge
from stock_engines.rounding import DEFAULT_PRECISION
from stock_engines.validation import ValidationOutcome
from stock_kernel.domain.failures import ValidationFailure
from stock_kernel.domain.measurement import MeasurementType, validate_unit
from stock_kernel.domain.values import ZERO, coerce_decimal, is_valid_amount
from stock_kernel.exceptions import LineNotFoundError
from stock_kernel.logging_config import get_logger
from stock_modules.purchasing.models import (
    PaymentMethod,
    Purchase,
    PurchaseLineItem,
    PurchaseStatus,
    TargetKind,
)
from stock_modules.purchasing.validation import validate_purchase

logger = get_logger("modules.purchasing.editor")


class EditOutcome(str, Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PurchaseEditResult:
    """Document after the edit, plus the touched line when there is one."""

    status: EditOutcome
    purchase: Purchase
    line: PurchaseLineItem | None = None
    failure: ValidationFailure | None = None

    @property
    def is_success(self) -> bool:
        return self.status == EditOutcome.APPLIED

    @property
    def message(self) -> str | None:
        return self.failure.message if self.failure else None


class PurchaseEditor:
    """
    Editing session for one purchase document.

    Contract:
        Single-threaded.  Business failures are returned; only an unknown
        line id (``LineNotFoundError``) or an unknown measurement type /
        unit raises.
    """

    def __init__(
        self,
        purchase: Purchase | None = None,
        settings: PurchasingSettings | None = None,
        places: int = DEFAULT_PRECISION,
        inventory_settings: InventorySettings | None = None,
    ):
        settings = settings or PurchasingSettings()
        self._units = inventory_settings or InventorySettings()
        self._costing = CostDerivationEngine(places)
        self._aggregator = PurchaseAggregator(places)
        if purchase is None:
            purchase = Purchase(
                payment_method=PaymentMethod(settings.default_payment_method),
                status=PurchaseStatus(settings.default_status),
            )
        self._purchase = self._recompute(purchase)

    @property
    def purchase(self) -> Purchase:
        return self._purchase

    def load(self, purchase: Purchase) -> None:
        """Replace the document (e.g. with the stored copy after a save)."""
        self._purchase = self._recompute(purchase)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def add_line(
        self,
        target_id: str,
        measurement_type: MeasurementType | str = MeasurementType.QUANTITY,
        amount: object = ZERO,
        original_cost: object = ZERO,
        unit: str | None = None,
        target_kind: TargetKind | str = TargetKind.ITEM,
        discount_percentage: object = None,
        discount_amount: object = None,
    ) -> PurchaseEditResult:
        """Append a fully derived line and re-aggregate."""
        mtype = MeasurementType.parse(measurement_type)
        for name, value, required in (
            ("measurement_amount", amount, True),
            ("original_cost", original_cost, True),
            ("discount_percentage", discount_percentage, False),
            ("discount_amount", discount_amount, False),
        ):
            if value is None and not required:
                continue
            if not is_valid_amount(coerce_decimal(value)):
                return self._reject(ValidationFailure.invalid_amount(name, value))

        line = PurchaseLineItem(
            line_id=str(uuid4()),
            target_id=target_id,
            measurement_type=mtype,
            unit=validate_unit(mtype, unit or self._units.default_unit_for(mtype)),
            target_kind=TargetKind(target_kind),
            costing=self._derive_new(amount, original_cost, discount_percentage, discount_amount),
        )
        self._commit(replace(self._purchase, lines=self._purchase.lines + (line,)))
        logger.debug("purchase_line_added", extra={
            "line_id": line.line_id,
            "target_id": target_id,
            "total_cost": str(line.total_cost),
        })
        return self._applied(line)

    def edit_line(
        self,
        line_id: str,
        edited_field: EditedField | str,
        value: object,
    ) -> PurchaseEditResult:
        """Apply one cost-field edit to a line through the cost engine."""
        line = self._get_line(line_id)
        result = self._costing.derive(line.costing, edited_field, value)
        if not result.is_success:
            return self._reject(result.failure, line)
        updated = replace(line, costing=result.line)
        self._replace_line(updated)
        return self._applied(updated)

    def update_line_details(
        self,
        line_id: str,
        target_id: str | None = None,
        target_kind: TargetKind | str | None = None,
        measurement_type: MeasurementType | str | None = None,
        unit: str | None = None,
    ) -> PurchaseEditResult:
        """
        Change what a line refers to or how it is measured.

        Switching the measurement type resets the unit to that type's
        default unless ``unit`` is given; amounts are not converted.
        """
        line = self._get_line(line_id)
        mtype = MeasurementType.parse(measurement_type) if measurement_type else line.measurement_type
        if unit is None:
            unit = line.unit if mtype is line.measurement_type else self._units.default_unit_for(mtype)
        updated = replace(
            line,
            target_id=line.target_id if target_id is None else target_id,
            target_kind=line.target_kind if target_kind is None else TargetKind(target_kind),
            measurement_type=mtype,
            unit=validate_unit(mtype, unit),
        )
        self._replace_line(updated)
        return self._applied(updated)

    def remove_line(self, line_id: str) -> PurchaseEditResult:
        line = self._get_line(line_id)
        lines = tuple(existing for existing in self._purchase.lines if existing.line_id != line_id)
        self._commit(replace(self._purchase, lines=lines))
        logger.debug("purchase_line_removed", extra={"line_id": line_id})
        return self._applied(line)

    # ------------------------------------------------------------------
    # Purchase-level charges
    # ------------------------------------------------------------------

    def set_discount_amount(self, value: object) -> PurchaseEditResult:
        return self._set_charge("discount_amount", value)

    def set_tax_rate(self, value: object) -> PurchaseEditResult:
        return self._set_charge("tax_rate", value)

    def set_shipping_cost(self, value: object) -> PurchaseEditResult:
        return self._set_charge("shipping_cost", value)

    # ------------------------------------------------------------------
    # Header fields
    # ------------------------------------------------------------------

    def set_supplier(
        self,
        name: str | None = None,
        contact_name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> PurchaseEditResult:
        """Update the given supplier fields; ``None`` leaves a field as is."""
        changes = {
            k: v for k, v in
            {"name": name, "contact_name": contact_name, "email": email, "phone": phone}.items()
            if v is not None
        }
        supplier = replace(self._purchase.supplier, **changes)
        self._purchase = replace(self._purchase, supplier=supplier)
        return self._applied()

    def set_details(
        self,
        invoice_number: str | None = None,
        purchase_date: date | None = None,
        notes: str | None = None,
        payment_method: PaymentMethod | str | None = None,
        status: PurchaseStatus | str | None = None,
    ) -> PurchaseEditResult:
        changes: dict = {}
        if invoice_number is not None:
            changes["invoice_number"] = invoice_number
        if purchase_date is not None:
            changes["purchase_date"] = purchase_date
        if notes is not None:
            changes["notes"] = notes
        if payment_method is not None:
            changes["payment_method"] = PaymentMethod(payment_method)
        if status is not None:
            changes["status"] = PurchaseStatus(status)
        self._purchase = replace(self._purchase, **changes)
        return self._applied()

    def validate(self) -> ValidationOutcome:
        return validate_purchase(self._purchase)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _derive_new(self, amount, original_cost, discount_percentage, discount_amount) -> LineCosting:
        line = self._costing.recalculate(LineCosting(
            measurement_amount=coerce_decimal(amount),
            original_cost=coerce_decimal(original_cost),
        ))
        if discount_amount is not None and coerce_decimal(discount_amount) != ZERO:
            return self._costing.derive(line, EditedField.DISCOUNT_AMOUNT, discount_amount).line
        if discount_percentage is not None:
            return self._costing.derive(line, EditedField.DISCOUNT_PERCENTAGE, discount_percentage).line
        return line

    def _get_line(self, line_id: str) -> PurchaseLineItem:
        line = self._purchase.get_line(line_id)
        if line is None:
            raise LineNotFoundError(line_id)
        return line

    def _replace_line(self, updated: PurchaseLineItem) -> None:
        lines = tuple(
            updated if line.line_id == updated.line_id else line
            for line in self._purchase.lines
        )
        self._commit(replace(self._purchase, lines=lines))

    def _set_charge(self, name: str, value: object) -> PurchaseEditResult:
        check = validate_charge(name, value)
        if not check.is_success:
            return self._reject(check.failure)
        totals = replace(self._purchase.totals, **{name: check.value})
        self._commit(replace(self._purchase, totals=totals))
        logger.debug("purchase_charge_set", extra={"field": name, "value": str(check.value)})
        return self._applied()

    def _recompute(self, purchase: Purchase) -> Purchase:
        current = purchase.totals
        totals = self._aggregator.recompute(
            (line.total_cost for line in purchase.lines),
            discount_amount=current.discount_amount,
            tax_rate=current.tax_rate,
            shipping_cost=current.shipping_cost,
        )
        return replace(purchase, totals=totals)

    def _commit(self, purchase: Purchase) -> None:
        self._purchase = self._recompute(purchase)

    def _applied(self, line: PurchaseLineItem | None = None) -> PurchaseEditResult:
        return PurchaseEditResult(status=EditOutcome.APPLIED, purchase=self._purchase, line=line)

    def _reject(
        self,
        failure: ValidationFailure,
        line: PurchaseLineItem | None = None,
    ) -> PurchaseEditResult:
        logger.info("purchase_edit_rejected", extra={"code": failure.code, "field": failure.field})
        return PurchaseEditResult(
            status=EditOutcome.REJECTED, purchase=self._purchase, line=line, failure=failure
        )
