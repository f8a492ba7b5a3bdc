"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..conversion.rates import ExchangeRates
from ..data.models import CurrencyFormatConfig, WageConfig
from .defaults import DefaultConfig, ExtractionParams, ScannerParams, get_default_config

logger = structlog.get_logger(__name__)

SETTINGS_FILE = "settings.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_settings(self) -> dict[str, Any]:
        """Load user settings from the settings file."""
        settings_file = self.config_dir / SETTINGS_FILE

        if not settings_file.exists():
            return {}

        with open(settings_file, encoding="utf-8") as f:
            settings = yaml.safe_load(f)

        return settings or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Settings file
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_settings())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                elif isinstance(value, dict):
                    result[field_name] = dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def build_format_config(config: dict[str, Any]) -> CurrencyFormatConfig:
    """Currency format snapshot from a merged configuration."""
    return CurrencyFormatConfig.from_settings(config.get("format", {}))


def build_wage_config(config: dict[str, Any]) -> WageConfig:
    """Wage snapshot from a merged configuration."""
    return WageConfig.from_settings(config.get("wage", {}))


def build_scanner_params(config: dict[str, Any]) -> ScannerParams:
    """
    Scanner parameters from a merged configuration.

    An unusable debounce interval falls back to the default instead of
    failing, matching how a stored setting may have been hand-edited.
    """
    section = config.get("scanner", {})
    defaults = ScannerParams()

    debounce = section.get("debounce_interval_ms", defaults.debounce_interval_ms)
    if isinstance(debounce, str) and debounce.strip().isdigit():
        debounce = int(debounce.strip())
    if not isinstance(debounce, int) or isinstance(debounce, bool) or debounce < 0:
        logger.warning(
            "Invalid debounce interval, using default",
            value=debounce,
            default=defaults.debounce_interval_ms,
        )
        debounce = defaults.debounce_interval_ms

    return ScannerParams(
        debounce_interval_ms=debounce,
        max_pending_nodes=section.get("max_pending_nodes", defaults.max_pending_nodes),
        max_text_length=section.get("max_text_length", defaults.max_text_length),
        initial_scan=section.get("initial_scan", defaults.initial_scan),
    )


def build_extraction_params(config: dict[str, Any]) -> ExtractionParams:
    """Extraction parameters from a merged configuration."""
    section = config.get("extraction", {})
    defaults = ExtractionParams()
    return ExtractionParams(
        enable_site_handlers=section.get("enable_site_handlers", defaults.enable_site_handlers),
        enable_structural=section.get("enable_structural", defaults.enable_structural),
        site_domain=section.get("site_domain", defaults.site_domain),
    )


def build_exchange_rates(config: dict[str, Any]) -> Optional[ExchangeRates]:
    """Exchange rate table from a merged configuration, None when empty."""
    return ExchangeRates.from_settings(config.get("exchange"))
