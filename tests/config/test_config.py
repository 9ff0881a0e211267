"""Tests for YAML configuration loading."""

import logging

import pytest
import yaml

from stock_config import CONFIG_PATH_ENV, configure_logging_from_config, get_active_config
from stock_config.loader import compute_checksum, parse_config
from stock_config.schema import (
    EngineSettings,
    InventorySettings,
    LoggingSettings,
    PurchasingSettings,
)
from stock_kernel.exceptions import InvalidUnitError
from stock_kernel.logging_config import ConsoleFormatter, configure_logging, reset_logging


def _write(tmp_path, data) -> str:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestDefaultConfig:

    def test_packaged_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        config = get_active_config()
        assert config.config_id == "default"
        assert config.engine.precision == 5
        assert config.inventory.sku_prefix == "SKU"
        assert config.inventory.default_unit_for("weight") == "lb"
        assert config.purchasing.default_payment_method == "cash"
        assert config.purchasing.default_status == "received"
        assert len(config.checksum) == 64

    def test_emits_config_trace(self, monkeypatch, captured_logs):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "STOCK_CONFIG_TRACE"]
        assert traces and traces[-1]["config_id"] == "default"


class TestOverrides:

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"config_id": "shop", "version": 3, "engine": {"precision": 2}})
        monkeypatch.setenv(CONFIG_PATH_ENV, path)
        config = get_active_config()
        assert config.config_id == "shop"
        assert config.version == 3
        assert config.engine.precision == 2

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "missing.yaml"))
        path = _write(tmp_path, {"config_id": "explicit"})
        assert get_active_config(path).config_id == "explicit"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")


class TestValidation:

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="Unknown configuration section"):
            parse_config({"billing": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown key"):
            parse_config({"engine": {"precision": 5, "mode": "fast"}})

    def test_precision_range(self):
        with pytest.raises(ValueError):
            EngineSettings(precision=20)

    def test_bad_payment_method(self):
        with pytest.raises(ValueError):
            PurchasingSettings(default_payment_method="barter")

    def test_template_needs_index(self):
        with pytest.raises(ValueError):
            InventorySettings(variant_name_template="{source_name} copy")

    def test_bad_default_unit(self):
        with pytest.raises(InvalidUnitError):
            parse_config({"inventory": {"default_units": {"weight": "ft"}}})

    def test_checksum_is_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestLoggingSection:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        config = get_active_config()
        assert config.logging.level == "INFO"
        assert config.logging.format == "json"

    def test_bad_level(self):
        with pytest.raises(ValueError, match="logging.level"):
            parse_config({"logging": {"level": "LOUD"}})

    def test_bad_format(self):
        with pytest.raises(ValueError, match="logging.format"):
            LoggingSettings(format="xml")

    def test_configure_from_config(self):
        config = parse_config({"logging": {"level": "warning", "format": "console"}})
        reset_logging()
        try:
            configure_logging_from_config(config)
            root = logging.getLogger("stock_kernel")
            assert root.level == logging.WARNING
            assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
        finally:
            reset_logging()
            configure_logging(level=logging.DEBUG)
