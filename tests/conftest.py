"""Pytest configuration and shared fixtures."""

from typing import Callable

import pytest
from bs4 import BeautifulSoup

from tim_app.config.defaults import ScannerParams
from tim_app.data.models import CurrencyFormatConfig, WageConfig
from tim_app.host.notifier import SoupNotifier
from tim_app.host.scheduler import ManualScheduler
from tim_app.patterns.cache import PatternCache


@pytest.fixture
def usd_config() -> CurrencyFormatConfig:
    """US dollar format: "$1,234.56"."""
    return CurrencyFormatConfig(symbol="$", iso_code="USD", thousands="commas", decimal="dot")


@pytest.fixture
def eur_config() -> CurrencyFormatConfig:
    """Euro format: "1.234,56 €"."""
    return CurrencyFormatConfig(symbol="€", iso_code="EUR", thousands="spacesAndDots", decimal="comma")


@pytest.fixture
def wage() -> WageConfig:
    """Hourly wage of 10 USD."""
    return WageConfig(amount=10.0, currency="USD")


@pytest.fixture
def pattern_cache() -> PatternCache:
    """Fresh pattern cache."""
    return PatternCache()


@pytest.fixture
def make_soup() -> Callable[[str], BeautifulSoup]:
    """Parse an HTML snippet with the standard library parser."""
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")
    return _make


@pytest.fixture
def notifier() -> SoupNotifier:
    """Synthetic mutation notifier."""
    return SoupNotifier()


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock scheduler starting at zero."""
    return ManualScheduler()


@pytest.fixture
def scanner_params() -> ScannerParams:
    """Scanner parameters with the default debounce interval and no initial scan."""
    return ScannerParams(debounce_interval_ms=200, initial_scan=False)
