"""
Module: stock_kernel.db.base
Responsibility: declarative bases shared by the item and purchase ORM
    models.
Architecture position: Kernel > DB.  Imported by ORM modules only; MUST
    NOT import from domain/ or stock_modules.

Invariants enforced:
    - Primary keys are uuid4 values stored as String(36), so SQLite and
      PostgreSQL hold identical text.
    - Quantities, unit prices and costs map to Numeric(38, 9) and come back
      as Decimal.  Float columns are not used.
    - created_at / updated_at are filled in by the database.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID bound as its 36-character string and read back as UUID."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9, asdecimal=True),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Adds server-maintained ``created_at`` and ``updated_at`` columns."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
