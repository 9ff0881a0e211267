"""
Inventory Domain Models (``stock_modules.inventory.models``).

Responsibility
--------------
Frozen value objects for stocked items as the breakdown and purchasing
modules see them: the ``SourceItem`` being broken down (also the shape of
any persisted item returned by the repository), the ``NewItemDraft`` handed
to the repository for creation, and the ``AllocationDelta`` persisted when
amounts are assigned to existing items.

Invariants
----------
- ``tracking_type`` is a ``MeasurementType``; capacity fields of the other
  four types are carried for display only and never interpreted.
- Every unit field holds a symbol allowed for its type.
- All amounts are ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from stock_engines.conservation import RemainingCapacity
from stock_kernel.domain.measurement import Measurement, MeasurementType, validate_unit
from stock_kernel.domain.values import ZERO, to_decimal

_AMOUNT_FIELDS = ("price", "cost", "quantity", "weight", "length", "area", "volume")
_UNIT_FIELDS = {
    MeasurementType.WEIGHT: "weight_unit",
    MeasurementType.LENGTH: "length_unit",
    MeasurementType.AREA: "area_unit",
    MeasurementType.VOLUME: "volume_unit",
}


def canonical_item_id(item_id: object) -> str:
    """
    The one spelling of an item id that equality checks should compare.

    UUIDs come back lower-case and hyphenated whatever form they were typed
    in, matching how the repository resolves them.  Anything else is only
    stripped.
    """
    text = str(item_id or "").strip()
    try:
        return str(UUID(text))
    except ValueError:
        return text


def _normalise_item_fields(obj: object) -> None:
    """Shared __post_init__ for item-shaped frozen dataclasses."""
    object.__setattr__(obj, "tracking_type", MeasurementType.parse(obj.tracking_type))
    for name in _AMOUNT_FIELDS:
        value = getattr(obj, name)
        if not isinstance(value, Decimal):
            object.__setattr__(obj, name, to_decimal(value))
    for mtype, unit_field in _UNIT_FIELDS.items():
        object.__setattr__(obj, unit_field, validate_unit(mtype, getattr(obj, unit_field)))
    object.__setattr__(obj, "tags", tuple(obj.tags))


@dataclass(frozen=True)
class SourceItem:
    """
    A stocked item (generic item being broken down, or any persisted item).

    Contract: Immutable value object.  ``id`` is the repository identifier
    (opaque string).
    """

    id: str
    name: str
    sku: str
    tracking_type: MeasurementType = MeasurementType.QUANTITY
    category: str = ""
    price: Decimal = ZERO
    cost: Decimal = ZERO
    quantity: Decimal = ZERO
    weight: Decimal = ZERO
    weight_unit: str = "lb"
    length: Decimal = ZERO
    length_unit: str = "in"
    area: Decimal = ZERO
    area_unit: str = "sqft"
    volume: Decimal = ZERO
    volume_unit: str = "l"
    description: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _normalise_item_fields(self)

    def capacity(self) -> RemainingCapacity:
        """Capacity fields as a ``RemainingCapacity`` (full, nothing assigned)."""
        return RemainingCapacity(
            quantity=self.quantity,
            weight=self.weight,
            length=self.length,
            area=self.area,
            volume=self.volume,
        )

    def unit_for(self, measurement_type: MeasurementType | None = None) -> str:
        mtype = MeasurementType.parse(measurement_type or self.tracking_type)
        unit_field = _UNIT_FIELDS.get(mtype)
        return getattr(self, unit_field) if unit_field else mtype.default_unit

    @property
    def tracked_amount(self) -> Decimal:
        """Capacity in the item's own tracking type."""
        return self.capacity().get(self.tracking_type)

    @property
    def tracked_measurement(self) -> Measurement:
        return Measurement(self.tracking_type, self.tracked_amount, self.unit_for())


@dataclass(frozen=True)
class NewItemDraft:
    """
    Input for creating an item in the repository.

    The measurement amount is stored in the capacity field of
    ``tracking_type``; the other capacity fields start at zero.
    """

    name: str
    sku: str
    tracking_type: MeasurementType
    amount: Decimal
    unit: str = ""
    category: str = ""
    price: Decimal = ZERO
    cost: Decimal = ZERO
    description: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        mtype = MeasurementType.parse(self.tracking_type)
        object.__setattr__(self, "tracking_type", mtype)
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "price", to_decimal(self.price))
        object.__setattr__(self, "cost", to_decimal(self.cost))
        object.__setattr__(self, "unit", validate_unit(mtype, self.unit))
        object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def measurement(self) -> Measurement:
        return Measurement(self.tracking_type, self.amount, self.unit)


@dataclass(frozen=True)
class AllocationDelta:
    """An amount assigned from a source item to an existing item."""

    target_id: str
    measurement_type: MeasurementType
    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "measurement_type", MeasurementType.parse(self.measurement_type))
        object.__setattr__(self, "amount", to_decimal(self.amount))
