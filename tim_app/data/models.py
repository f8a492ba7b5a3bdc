"""
Core data models for price extraction and work-time conversion.

All models are immutable snapshots. Configuration objects are taken once
when a scanner starts; tokens and breakdowns are transient values handed
from one stage of the pipeline to the next.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

THOUSANDS_COMMAS = "commas"
THOUSANDS_SPACES_AND_DOTS = "spacesAndDots"
DECIMAL_DOT = "dot"
DECIMAL_COMMA = "comma"

VALID_THOUSANDS = (THOUSANDS_COMMAS, THOUSANDS_SPACES_AND_DOTS)
VALID_DECIMALS = (DECIMAL_DOT, DECIMAL_COMMA)

# 52 weeks x 40 hours
HOURS_PER_YEAR = 2080


class DirectionMode(str, Enum):
    """Whether patterns look for fresh prices or already annotated ones."""
    FORWARD = "forward"
    REVERSE = "reverse"


class ExtractionStrategyName(str, Enum):
    """Extraction strategies in priority order."""
    SITE_SPECIFIC = "site-specific"
    STRUCTURAL = "dom-analyzer"
    TEXT_PATTERN = "pattern-matching"


class WagePeriod(str, Enum):
    """Period the configured wage amount is expressed in."""
    HOURLY = "hourly"
    YEARLY = "yearly"


class FailureReason(str, Enum):
    """Reasons a price could not be converted into work time."""
    ZERO_WAGE = "zero_wage"
    INVALID_WAGE = "invalid_wage"
    INVALID_AMOUNT = "invalid_amount"
    INCOMMENSURABLE_CURRENCY = "incommensurable_currency"


@dataclass(frozen=True)
class CurrencyFormatConfig:
    """User currency and number-format preferences."""

    symbol: str = "$"
    iso_code: str = "USD"
    thousands: str = THOUSANDS_COMMAS               # "commas" | "spacesAndDots"
    decimal: str = DECIMAL_DOT                      # "dot" | "comma"
    direction: DirectionMode = DirectionMode.FORWARD

    @property
    def cache_key(self) -> str:
        """Concatenation of every field; equal configs share one key."""
        return "|".join((
            self.symbol,
            self.iso_code,
            self.thousands,
            self.decimal,
            self.direction.value,
        ))

    def with_direction(self, direction: DirectionMode) -> 'CurrencyFormatConfig':
        """Copy of this config looking in the given direction."""
        return replace(self, direction=direction)

    def with_separators(self, thousands: str, decimal: str) -> 'CurrencyFormatConfig':
        """Copy of this config with explicit separators."""
        return replace(self, thousands=thousands, decimal=decimal)

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> 'CurrencyFormatConfig':
        """Build from a merged ``format`` configuration section."""
        return cls(
            symbol=settings.get("symbol", "$"),
            iso_code=settings.get("iso_code", "USD"),
            thousands=settings.get("thousands", THOUSANDS_COMMAS),
            decimal=settings.get("decimal", DECIMAL_DOT),
            direction=DirectionMode(settings.get("direction", DirectionMode.FORWARD.value)),
        )


@dataclass(frozen=True)
class PriceToken:
    """A price extracted from one document node."""

    raw_text: str
    numeric_value: float
    currency_unit: str
    strategy_used: ExtractionStrategyName
    # Back-reference only; the token never owns the node
    source_node: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class WageConfig:
    """User wage snapshot."""

    amount: float = 30.0
    currency: str = "USD"
    period: WagePeriod = WagePeriod.HOURLY

    @property
    def hourly_rate(self) -> float:
        """Wage expressed per hour of work."""
        if self.period == WagePeriod.YEARLY:
            return self.amount / HOURS_PER_YEAR
        return self.amount

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> 'WageConfig':
        """Build from a merged ``wage`` configuration section."""
        return cls(
            amount=float(settings.get("amount", 30.0)),
            currency=settings.get("currency", "USD"),
            period=WagePeriod(settings.get("period", WagePeriod.HOURLY.value)),
        )


@dataclass(frozen=True)
class TimeBreakdown:
    """Work time equivalent of a price."""

    hours: int
    minutes: int

    def __post_init__(self):
        if self.hours < 0:
            raise ValueError(f"hours must be non-negative, got {self.hours}")
        if not 0 <= self.minutes <= 59:
            raise ValueError(f"minutes must be within [0, 59], got {self.minutes}")

    @property
    def success(self) -> bool:
        return True

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes


@dataclass(frozen=True)
class ConversionFailure:
    """Typed reason a conversion could not be performed."""

    reason: FailureReason
    message: str
    context: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def success(self) -> bool:
        return False

    @classmethod
    def zero_wage(cls) -> 'ConversionFailure':
        """Create failure for a wage of zero."""
        return cls(reason=FailureReason.ZERO_WAGE, message="Wage amount is zero")

    @classmethod
    def invalid_wage(cls, wage_amount: float) -> 'ConversionFailure':
        """Create failure for a negative or non-finite wage."""
        return cls(
            reason=FailureReason.INVALID_WAGE,
            message="Wage amount must be a positive finite number",
            context={"wage_amount": wage_amount},
        )

    @classmethod
    def invalid_amount(cls, amount: float) -> 'ConversionFailure':
        """Create failure for a negative or non-finite price."""
        return cls(
            reason=FailureReason.INVALID_AMOUNT,
            message="Price amount must be a non-negative finite number",
            context={"amount": amount},
        )

    @classmethod
    def incommensurable(cls, amount_currency: str, wage_currency: str) -> 'ConversionFailure':
        """Create failure for currencies with no known exchange rate."""
        return cls(
            reason=FailureReason.INCOMMENSURABLE_CURRENCY,
            message=f"No exchange rate from {amount_currency} to {wage_currency}",
            context={"amount_currency": amount_currency, "wage_currency": wage_currency},
        )


ConversionResult = Union[TimeBreakdown, ConversionFailure]


def is_finite_number(value: Optional[float]) -> bool:
    """True for real numbers that are neither NaN nor infinite."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
