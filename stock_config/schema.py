"""
Configuration Schema (``stock_config.schema``).

Frozen dataclasses for every settings section.  Values are validated at
construction; an invalid value raises ``ValueError`` with the offending key.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.logging_config import LOG_FORMATS

VALID_PAYMENT_METHODS = ("cash", "credit", "debit", "check", "bank_transfer", "other")
VALID_PURCHASE_STATUSES = ("pending", "received", "partially_received", "cancelled")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EngineSettings:
    """Precision shared by every derived computation."""

    precision: int = 5

    def __post_init__(self) -> None:
        if not isinstance(self.precision, int) or not 0 <= self.precision <= 12:
            raise ValueError(f"engine.precision must be an int in [0, 12], got {self.precision!r}")


@dataclass(frozen=True)
class InventorySettings:
    """SKU suggestion and default-naming settings."""

    sku_prefix: str = "SKU"
    sku_width: int = 5
    derived_sku_suffix_width: int = 2
    variant_name_template: str = "{source_name} Variant {index}"
    default_units: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.sku_width < 1:
            raise ValueError("inventory.sku_width must be positive")
        if self.derived_sku_suffix_width < 1:
            raise ValueError("inventory.derived_sku_suffix_width must be positive")
        if "{index}" not in self.variant_name_template:
            raise ValueError("inventory.variant_name_template must contain '{index}'")

    def default_unit_for(self, measurement_type: MeasurementType | str) -> str:
        mtype = MeasurementType.parse(measurement_type)
        return self.default_units.get(mtype.value) or mtype.default_unit


@dataclass(frozen=True)
class PurchasingSettings:
    """Defaults applied to a new purchase document."""

    default_payment_method: str = "cash"
    default_status: str = "received"

    def __post_init__(self) -> None:
        if self.default_payment_method not in VALID_PAYMENT_METHODS:
            raise ValueError(
                f"purchasing.default_payment_method must be one of {VALID_PAYMENT_METHODS}, "
                f"got '{self.default_payment_method}'"
            )
        if self.default_status not in VALID_PURCHASE_STATUSES:
            raise ValueError(
                f"purchasing.default_status must be one of {VALID_PURCHASE_STATUSES}, "
                f"got '{self.default_status}'"
            )


@dataclass(frozen=True)
class LoggingSettings:
    """Level and output format for the ``stock_kernel`` logger."""

    level: str = "INFO"
    format: str = "json"

    def __post_init__(self) -> None:
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {VALID_LOG_LEVELS}, got '{self.level}'")
        if self.format not in LOG_FORMATS:
            raise ValueError(f"logging.format must be one of {LOG_FORMATS}, got '{self.format}'")


@dataclass(frozen=True)
class StockConfig:
    """The complete, validated configuration set."""

    config_id: str
    version: int
    checksum: str
    engine: EngineSettings = field(default_factory=EngineSettings)
    inventory: InventorySettings = field(default_factory=InventorySettings)
    purchasing: PurchasingSettings = field(default_factory=PurchasingSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
