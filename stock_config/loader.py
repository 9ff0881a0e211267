"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``stock_config.schema``.  Runtime callers go through
``stock_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key  -> ``ValueError``.
* Invalid value  -> ``ValueError`` from the schema dataclass.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import (
    EngineSettings,
    InventorySettings,
    LoggingSettings,
    PurchasingSettings,
    StockConfig,
)
from stock_kernel.domain.measurement import MeasurementType, validate_unit

_SECTIONS = {
    "engine": EngineSettings,
    "inventory": InventorySettings,
    "purchasing": PurchasingSettings,
    "logging": LoggingSettings,
}
_TOP_LEVEL_KEYS = {"config_id", "version", *_SECTIONS}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 over the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _parse_section(name: str, data: dict[str, Any] | None) -> Any:
    cls = _SECTIONS[name]
    data = dict(data or {})
    known = set(cls.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}': {', '.join(sorted(unknown))}")
    return cls(**data)


def _check_default_units(units: dict[str, str]) -> None:
    for type_name, unit in units.items():
        validate_unit(MeasurementType.parse(type_name), unit)


def parse_config(data: dict[str, Any]) -> StockConfig:
    """
    Parse a ``StockConfig`` from a dict.

    Raises:
        ValueError: unknown keys or invalid values.
        InvalidUnitError / UnknownMeasurementTypeError: bad default units.
    """
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

    inventory = _parse_section("inventory", data.get("inventory"))
    _check_default_units(inventory.default_units)

    return StockConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        checksum=compute_checksum(data),
        engine=_parse_section("engine", data.get("engine")),
        inventory=inventory,
        purchasing=_parse_section("purchasing", data.get("purchasing")),
        logging=_parse_section("logging", data.get("logging")),
    )


def load_config(path: Path) -> StockConfig:
    """Load and parse a settings file."""
    return parse_config(load_yaml_file(path))
