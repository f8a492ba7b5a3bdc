"""Default configuration parameters for the price scanner."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class FormatParams:
    """Currency and number-format parameters."""
    symbol: str = "$"                                # Currency symbol as written on pages
    iso_code: str = "USD"                            # ISO 4217 code
    thousands: str = "commas"                        # "commas" | "spacesAndDots"
    decimal: str = "dot"                             # "dot" | "comma"
    direction: str = "forward"                       # "forward" | "reverse"


@dataclass(frozen=True)
class WageParams:
    """Wage parameters."""
    amount: float = 30.0
    currency: str = "USD"
    period: str = "hourly"                           # "hourly" | "yearly"


@dataclass(frozen=True)
class ScannerParams:
    """Incremental scanner parameters."""
    debounce_interval_ms: int = 200                  # Quiet period before a pass
    max_pending_nodes: int = 2000                    # Backpressure limit per cycle
    max_text_length: int = 10000                     # Longer text nodes are skipped
    initial_scan: bool = True                        # Scan the loaded document on start

    @property
    def debounce_interval_s(self) -> float:
        return self.debounce_interval_ms / 1000.0


@dataclass(frozen=True)
class ExtractionParams:
    """Extraction strategy parameters."""
    enable_site_handlers: bool = True
    enable_structural: bool = True
    site_domain: Optional[str] = None                # Narrows built-in site handlers


@dataclass(frozen=True)
class ExchangeParams:
    """Static exchange rates; empty means currencies must match the wage."""
    base: str = "USD"
    rates: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class LoggingParams:
    """Log output parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_caller: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    format: FormatParams
    wage: WageParams
    scanner: ScannerParams
    extraction: ExtractionParams
    exchange: ExchangeParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        format=FormatParams(),
        wage=WageParams(),
        scanner=ScannerParams(),
        extraction=ExtractionParams(),
        exchange=ExchangeParams(),
        logging=LoggingParams(),
    )
