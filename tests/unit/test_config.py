"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from tim_app.config.defaults import get_default_config
from tim_app.config.loader import (
    ConfigLoader,
    build_exchange_rates,
    build_format_config,
    build_scanner_params,
    build_wage_config,
)
from tim_app.config.validation import ConfigValidator
from tim_app.data.models import DirectionMode, WagePeriod


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config is not None
        assert config.format.symbol == "$"
        assert config.wage.amount == 30.0
        assert config.scanner.debounce_interval_ms == 200
        assert config.scanner.max_pending_nodes == 2000
        assert config.scanner.debounce_interval_s == 0.2


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert loader is not None
        assert isinstance(loader.config_dir, Path)

    def test_merge_config_defaults_only(self, tmp_path) -> None:
        """Test config merging with defaults only."""
        loader = ConfigLoader.create(tmp_path)
        config = loader.merge_config()

        assert config["format"]["iso_code"] == "USD"
        assert config["scanner"]["initial_scan"] is True
        assert config["exchange"]["rates"] == {}

    def test_merge_config_with_settings_file(self, tmp_path) -> None:
        """Test that the settings file overrides defaults."""
        (tmp_path / "settings.yaml").write_text(
            "wage:\n  amount: 52000\n  period: yearly\n", encoding="utf-8"
        )
        config = ConfigLoader.create(tmp_path).merge_config()

        assert config["wage"]["amount"] == 52000
        assert config["wage"]["period"] == "yearly"
        # Other defaults should remain
        assert config["wage"]["currency"] == "USD"

    def test_merge_config_with_overrides(self, tmp_path) -> None:
        """Test that explicit overrides win over the settings file."""
        (tmp_path / "settings.yaml").write_text("scanner:\n  debounce_interval_ms: 500\n", encoding="utf-8")
        config = ConfigLoader.create(tmp_path).merge_config({"scanner": {"debounce_interval_ms": 50}})

        assert config["scanner"]["debounce_interval_ms"] == 50
        assert config["scanner"]["max_pending_nodes"] == 2000

    def test_shipped_settings_are_valid(self) -> None:
        """Test that the repository settings file validates."""
        config = ConfigLoader.create().merge_config()
        assert ConfigValidator.validate_config(config) == []


class TestBuilders:
    """Test suite for snapshot builders."""

    def test_format_and_wage(self) -> None:
        """Test format and wage snapshots from a merged config."""
        config = ConfigLoader.create(Path("/nonexistent")).merge_config({
            "format": {"symbol": "€", "iso_code": "EUR", "thousands": "spacesAndDots", "decimal": "comma"},
            "wage": {"amount": 41600, "currency": "EUR", "period": "yearly"},
        })

        fmt = build_format_config(config)
        assert fmt.symbol == "€"
        assert fmt.direction == DirectionMode.FORWARD

        wage = build_wage_config(config)
        assert wage.period == WagePeriod.YEARLY
        assert wage.hourly_rate == pytest.approx(20.0)

    @pytest.mark.parametrize("value", [-1, "fast", None, True])
    def test_invalid_debounce_falls_back(self, value) -> None:
        """Test that an unusable debounce interval uses the default."""
        params = build_scanner_params({"scanner": {"debounce_interval_ms": value}})
        assert params.debounce_interval_ms == 200

    def test_numeric_string_debounce(self) -> None:
        """Test that a digit string debounce interval is accepted."""
        params = build_scanner_params({"scanner": {"debounce_interval_ms": " 300 "}})
        assert params.debounce_interval_ms == 300

    def test_exchange_rates(self) -> None:
        """Test that rates are only built when present."""
        assert build_exchange_rates({"exchange": {"base": "USD", "rates": {}}}) is None
        rates = build_exchange_rates({"exchange": {"base": "USD", "rates": {"EUR": 0.9}}})
        assert rates.rate_for("EUR") == 0.9


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_format_params(self) -> None:
        """Test validation of valid format parameters."""
        params = {"symbol": "$", "iso_code": "USD", "thousands": "commas", "decimal": "dot"}
        assert ConfigValidator.validate_format_params(params) == []

    def test_overlapping_delimiters(self) -> None:
        """Test that overlapping delimiters are reported."""
        errors = ConfigValidator.validate_format_params({"thousands": "commas", "decimal": "comma", "symbol": "$"})
        assert len(errors) == 1
        assert errors[0].field == "decimal"
        assert "overlap" in errors[0].message

    def test_invalid_iso_code(self) -> None:
        """Test validation of a malformed ISO code."""
        errors = ConfigValidator.validate_format_params({"symbol": "$", "iso_code": "usd"})
        assert [e.field for e in errors] == ["iso_code"]

    def test_missing_unit(self) -> None:
        """Test that a symbol or code is required."""
        errors = ConfigValidator.validate_format_params({"symbol": "", "iso_code": ""})
        assert errors[0].field == "symbol"

    def test_invalid_wage(self) -> None:
        """Test validation of invalid wage parameters."""
        errors = ConfigValidator.validate_wage_params({"amount": 0, "period": "monthly"})
        assert len(errors) == 2
        assert {e.field for e in errors} == {"amount", "period"}

    def test_invalid_scanner_params(self) -> None:
        """Test validation of invalid scanner parameters."""
        params = {
            "debounce_interval_ms": -5,
            "max_pending_nodes": 0,
            "max_text_length": "long",
            "initial_scan": "yes",
        }
        errors = ConfigValidator.validate_scanner_params(params)

        assert len(errors) == 4
        assert "Must be a boolean" in [e.message for e in errors if e.field == "initial_scan"][0]

    def test_invalid_extraction_params(self) -> None:
        """Test validation of extraction parameters."""
        errors = ConfigValidator.validate_extraction_params({"enable_structural": 1, "site_domain": " "})
        assert {e.field for e in errors} == {"enable_structural", "site_domain"}

    def test_invalid_rates(self) -> None:
        """Test validation of exchange rates."""
        errors = ConfigValidator.validate_exchange_params({"rates": {"EUR": -1, "GBP": 0.8}})
        assert [e.field for e in errors] == ["rates.EUR"]

    def test_multiple_sections(self) -> None:
        """Test validation across the whole merged config."""
        config = ConfigLoader.create(Path("/nonexistent")).merge_config({
            "wage": {"amount": -10},
            "scanner": {"max_pending_nodes": -1},
        })
        errors = ConfigValidator.validate_config(config)
        assert {e.field for e in errors} == {"amount", "max_pending_nodes"}

    def test_invalid_logging_params(self) -> None:
        """Test validation of the logging section."""
        errors = ConfigValidator.validate_logging_params({"level": "LOUD", "format_json": "no"})
        assert {e.field for e in errors} == {"level", "format_json"}
        assert ConfigValidator.validate_logging_params({"level": "debug"}) == []
