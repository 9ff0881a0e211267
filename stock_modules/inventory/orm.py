"""
Module: stock_modules.inventory.orm
Responsibility: SQLAlchemy ORM persistence model for stocked items.
    Maps the frozen ``SourceItem`` value object to the ``items`` table and
    builds new rows from ``NewItemDraft`` inputs.

Architecture position: Modules > Inventory > ORM.  Inherits from TrackedBase
    (stock_kernel.db.base).

Invariants enforced:
    - Capacity and money fields use Decimal (Numeric(38,9)), never float.
    - tracking_type stored as String(20) holding the MeasurementType value.
    - Unit columns always hold a symbol allowed for their type.

Failure modes:
    - IntegrityError on duplicate item id.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase
from stock_kernel.domain.measurement import MeasurementType


class ItemModel(TrackedBase):
    """
    ORM model for an inventory item.

    Maps to: stock_modules.inventory.models.SourceItem (frozen dataclass).
    """

    __tablename__ = "items"

    __table_args__ = (
        Index("idx_item_sku", "sku"),
        Index("idx_item_name", "name"),
    )

    name: Mapped[str] = mapped_column(String(255))
    sku: Mapped[str] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(100), default="")
    tracking_type: Mapped[str] = mapped_column(String(20), default=MeasurementType.QUANTITY.value)

    price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    # Capacity per measurement type
    quantity: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    weight: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    weight_unit: Mapped[str] = mapped_column(String(10), default="lb")
    length: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    length_unit: Mapped[str] = mapped_column(String(10), default="in")
    area: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    area_unit: Mapped[str] = mapped_column(String(10), default="sqft")
    volume: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    volume_unit: Mapped[str] = mapped_column(String(10), default="l")

    description: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[list] = mapped_column(JSON, default=list)

    def to_dto(self):
        """Convert ORM model to frozen SourceItem DTO."""
        from stock_modules.inventory.models import SourceItem
        return SourceItem(
            id=str(self.id),
            name=self.name,
            sku=self.sku,
            tracking_type=MeasurementType(self.tracking_type),
            category=self.category or "",
            price=self.price,
            cost=self.cost,
            quantity=self.quantity,
            weight=self.weight,
            weight_unit=self.weight_unit,
            length=self.length,
            length_unit=self.length_unit,
            area=self.area,
            area_unit=self.area_unit,
            volume=self.volume,
            volume_unit=self.volume_unit,
            description=self.description or "",
            tags=tuple(self.tags or ()),
        )

    @classmethod
    def from_dto(cls, dto) -> "ItemModel":
        """Create ORM model from a frozen SourceItem DTO."""
        return cls(
            id=UUID(dto.id),
            name=dto.name,
            sku=dto.sku,
            tracking_type=dto.tracking_type.value,
            category=dto.category,
            price=dto.price,
            cost=dto.cost,
            quantity=dto.quantity,
            weight=dto.weight,
            weight_unit=dto.weight_unit,
            length=dto.length,
            length_unit=dto.length_unit,
            area=dto.area,
            area_unit=dto.area_unit,
            volume=dto.volume,
            volume_unit=dto.volume_unit,
            description=dto.description,
            tags=list(dto.tags),
        )

    @classmethod
    def from_draft(cls, draft) -> "ItemModel":
        """Create a new row from a NewItemDraft; only its tracked field is set."""
        model = cls(
            id=uuid4(),
            name=draft.name,
            sku=draft.sku,
            tracking_type=draft.tracking_type.value,
            category=draft.category,
            price=draft.price,
            cost=draft.cost,
            quantity=Decimal("0"),
            weight=Decimal("0"),
            weight_unit=MeasurementType.WEIGHT.default_unit,
            length=Decimal("0"),
            length_unit=MeasurementType.LENGTH.default_unit,
            area=Decimal("0"),
            area_unit=MeasurementType.AREA.default_unit,
            volume=Decimal("0"),
            volume_unit=MeasurementType.VOLUME.default_unit,
            description=draft.description,
            tags=list(draft.tags),
        )
        model.set_capacity(draft.tracking_type, draft.amount)
        if draft.tracking_type != MeasurementType.QUANTITY:
            setattr(model, f"{draft.tracking_type.value}_unit", draft.unit)
        return model

    def get_capacity(self, measurement_type: MeasurementType) -> Decimal:
        return getattr(self, MeasurementType.parse(measurement_type).value) or Decimal("0")

    def set_capacity(self, measurement_type: MeasurementType, value: Decimal) -> None:
        setattr(self, MeasurementType.parse(measurement_type).value, value)

    def __repr__(self) -> str:
        return f"<ItemModel {self.id} sku={self.sku} tracking={self.tracking_type}>"
