"""
Module: stock_modules.purchasing.orm
Responsibility: SQLAlchemy ORM persistence models for purchase documents
    and their line items, with the derived totals stored alongside.

Architecture position: Modules > Purchasing > ORM.  Inherits from TrackedBase
    (stock_kernel.db.base).  Line targets reference items or assets via
    String columns with NO foreign key constraints.

Invariants enforced:
    - All monetary and measurement fields use Decimal (Numeric(38,9)).
    - Enum fields stored as String(50).
    - Lines are owned by their purchase (delete-orphan) and ordered by
      line_seq.

Failure modes:
    - IntegrityError on duplicate purchase or line id.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import TrackedBase, UUIDString


class PurchaseModel(TrackedBase):
    """
    ORM model for a purchase document.

    Maps to: stock_modules.purchasing.models.Purchase (frozen dataclass).
    """

    __tablename__ = "purchases"

    __table_args__ = (
        Index("idx_purchase_supplier", "supplier_name"),
        Index("idx_purchase_date", "purchase_date"),
        Index("idx_purchase_status", "status"),
    )

    # Supplier
    supplier_name: Mapped[str] = mapped_column(String(255))
    supplier_contact_name: Mapped[str] = mapped_column(String(255), default="")
    supplier_email: Mapped[str] = mapped_column(String(255), default="")
    supplier_phone: Mapped[str] = mapped_column(String(50), default="")

    # Header
    invoice_number: Mapped[str] = mapped_column(String(100), default="")
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="")
    payment_method: Mapped[str] = mapped_column(String(50), default="cash")
    status: Mapped[str] = mapped_column(String(50), default="received")

    # Derived totals
    subtotal: Mapped[Decimal] = mapped_column()
    discount_amount: Mapped[Decimal] = mapped_column()
    tax_rate: Mapped[Decimal] = mapped_column()
    tax_amount: Mapped[Decimal] = mapped_column()
    shipping_cost: Mapped[Decimal] = mapped_column()
    total: Mapped[Decimal] = mapped_column()

    lines: Mapped[list["PurchaseLineModel"]] = relationship(
        back_populates="purchase",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PurchaseLineModel.line_seq",
    )

    def apply_dto(self, dto) -> None:
        """Copy header fields and totals from a Purchase DTO (lines excluded)."""
        self.supplier_name = dto.supplier.name
        self.supplier_contact_name = dto.supplier.contact_name
        self.supplier_email = dto.supplier.email
        self.supplier_phone = dto.supplier.phone
        self.invoice_number = dto.invoice_number
        self.purchase_date = dto.purchase_date
        self.notes = dto.notes
        self.payment_method = dto.payment_method.value
        self.status = dto.status.value
        self.subtotal = dto.totals.subtotal
        self.discount_amount = dto.totals.discount_amount
        self.tax_rate = dto.totals.tax_rate
        self.tax_amount = dto.totals.tax_amount
        self.shipping_cost = dto.totals.shipping_cost
        self.total = dto.totals.total

    def to_dto(self):
        """Convert ORM model to a frozen Purchase DTO."""
        from stock_engines.purchase_totals import PurchaseTotals
        from stock_modules.purchasing.models import (
            PaymentMethod,
            Purchase,
            PurchaseStatus,
            Supplier,
        )
        return Purchase(
            purchase_id=str(self.id),
            supplier=Supplier(
                name=self.supplier_name,
                contact_name=self.supplier_contact_name or "",
                email=self.supplier_email or "",
                phone=self.supplier_phone or "",
            ),
            lines=tuple(line.to_dto() for line in self.lines),
            totals=PurchaseTotals(
                subtotal=self.subtotal,
                discount_amount=self.discount_amount,
                tax_rate=self.tax_rate,
                tax_amount=self.tax_amount,
                shipping_cost=self.shipping_cost,
                total=self.total,
                line_count=len(self.lines),
            ),
            invoice_number=self.invoice_number or "",
            purchase_date=self.purchase_date,
            notes=self.notes or "",
            payment_method=PaymentMethod(self.payment_method),
            status=PurchaseStatus(self.status),
        )

    def __repr__(self) -> str:
        return f"<PurchaseModel {self.id} supplier={self.supplier_name} total={self.total}>"


class PurchaseLineModel(TrackedBase):
    """
    ORM model for one purchase line.

    Maps to: stock_modules.purchasing.models.PurchaseLineItem.
    """

    __tablename__ = "purchase_lines"

    __table_args__ = (
        Index("idx_purchase_line_purchase", "purchase_id"),
        Index("idx_purchase_line_target", "target_id"),
    )

    purchase_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("purchases.id"),
        nullable=False,
    )
    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Item or asset reference (no FK)
    target_id: Mapped[str] = mapped_column(String(100))
    target_kind: Mapped[str] = mapped_column(String(20), default="item")

    measurement_type: Mapped[str] = mapped_column(String(20))
    unit: Mapped[str] = mapped_column(String(10))
    measurement_amount: Mapped[Decimal] = mapped_column()
    original_cost: Mapped[Decimal] = mapped_column()
    cost_per_unit: Mapped[Decimal] = mapped_column()
    discount_percentage: Mapped[Decimal] = mapped_column()
    discount_amount: Mapped[Decimal] = mapped_column()
    discount_mode: Mapped[str] = mapped_column(String(20), default="percentage")
    total_cost: Mapped[Decimal] = mapped_column()

    purchase: Mapped["PurchaseModel"] = relationship(back_populates="lines")

    def to_dto(self):
        """Convert ORM model to a frozen PurchaseLineItem DTO."""
        from stock_engines.cost_derivation import DiscountMode, LineCosting
        from stock_kernel.domain.measurement import MeasurementType
        from stock_modules.purchasing.models import PurchaseLineItem, TargetKind
        return PurchaseLineItem(
            line_id=str(self.id),
            target_id=self.target_id,
            measurement_type=MeasurementType(self.measurement_type),
            unit=self.unit,
            target_kind=TargetKind(self.target_kind),
            costing=LineCosting(
                measurement_amount=self.measurement_amount,
                original_cost=self.original_cost,
                cost_per_unit=self.cost_per_unit,
                discount_percentage=self.discount_percentage,
                discount_amount=self.discount_amount,
                total_cost=self.total_cost,
                discount_mode=DiscountMode(self.discount_mode),
            ),
        )

    @classmethod
    def from_dto(cls, dto, line_seq: int) -> "PurchaseLineModel":
        """Create ORM model from a frozen PurchaseLineItem DTO."""
        return cls(
            id=UUID(dto.line_id),
            line_seq=line_seq,
            target_id=dto.target_id,
            target_kind=dto.target_kind.value,
            measurement_type=dto.measurement_type.value,
            unit=dto.unit,
            measurement_amount=dto.measurement_amount,
            original_cost=dto.original_cost,
            cost_per_unit=dto.cost_per_unit,
            discount_percentage=dto.discount_percentage,
            discount_amount=dto.discount_amount,
            discount_mode=dto.discount_mode.value,
            total_cost=dto.total_cost,
        )

    def __repr__(self) -> str:
        return f"<PurchaseLineModel {self.id} target={self.target_id} total={self.total_cost}>"
