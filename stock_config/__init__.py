"""
stock_config -- single public entrypoint for library settings.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    YAML loading lives in ``stock_config.loader``.

Resolution order:
    1. explicit ``path`` argument
    2. ``STOCK_CONFIG_PATH`` environment variable
    3. the packaged ``sets/default.yaml``

Audit relevance:
    Every call emits a ``STOCK_CONFIG_TRACE`` log entry with the config id,
    version and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from stock_config.loader import load_config
from stock_config.schema import (
    EngineSettings,
    InventorySettings,
    LoggingSettings,
    PurchasingSettings,
    StockConfig,
)
from stock_kernel.logging_config import configure_logging, get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"
CONFIG_PATH_ENV = "STOCK_CONFIG_PATH"


def get_active_config(path: Path | str | None = None) -> StockConfig:
    """
    Load the active configuration.

    Raises:
        FileNotFoundError: if the resolved file does not exist.
        ValueError: if the file fails schema validation.
    """
    resolved = Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = load_config(resolved)

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "path": str(resolved),
        },
    )
    return config


def configure_logging_from_config(config: StockConfig | None = None) -> None:
    """Apply the ``logging`` section (level and format) to the kernel logger."""
    config = config or get_active_config()
    configure_logging(level=config.logging.level, fmt=config.logging.format)


__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "EngineSettings",
    "InventorySettings",
    "LoggingSettings",
    "PurchasingSettings",
    "StockConfig",
    "configure_logging_from_config",
    "get_active_config",
]
