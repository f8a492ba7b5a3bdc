"""Shared plumbing for extraction strategies."""

import re
from typing import Any, Optional, Protocol

from ..data.models import CurrencyFormatConfig, ExtractionStrategyName, PriceToken
from ..data.normalizer import normalize_number, parse_amount
from ..patterns.cache import (
    PatternCache,
    build_decimal_token,
    build_number_pattern,
    build_thousands_token,
)
from ..patterns.finder import find_prices
from ..patterns.locales import (
    CODE_TO_GROUP,
    KNOWN_CODES,
    KNOWN_SYMBOLS,
    SYMBOL_TO_GROUP,
    currency_for_symbol,
    get_locale_format,
)


class ExtractionStrategy(Protocol):
    name: ExtractionStrategyName

    def applies_to(self, node: Any) -> bool: ...

    def extract(self, node: Any) -> Optional[PriceToken]: ...


class BaseStrategy:
    """Holds the active format and pattern cache shared by every strategy."""

    name: ExtractionStrategyName

    def __init__(self, config: CurrencyFormatConfig, cache: PatternCache):
        self.config = config
        self.cache = cache

    def is_unit(self, text: str) -> bool:
        """True when text is exactly a currency symbol or ISO code."""
        text = text.strip()
        if not text:
            return False
        if text in (self.config.symbol, self.config.iso_code):
            return True
        return text in KNOWN_SYMBOLS or text in KNOWN_CODES

    def resolve_currency(self, unit: Optional[str]) -> str:
        """ISO code for a matched unit, defaulting to the configured currency."""
        if not unit:
            return self.config.iso_code
        unit = unit.strip()
        if unit in (self.config.symbol, self.config.iso_code):
            return self.config.iso_code
        return currency_for_symbol(unit, self.config.iso_code)

    def parse_number(self, number_text: str, unit: Optional[str] = None) -> Optional[float]:
        """
        Parse a bare amount.

        Uses the separators of the unit's locale group when the unit is a
        foreign currency, the configured separators otherwise.
        """
        thousands, decimal = self.config.thousands, self.config.decimal
        if unit and unit.strip() not in (self.config.symbol, self.config.iso_code):
            unit = unit.strip()
            if unit in SYMBOL_TO_GROUP or unit in CODE_TO_GROUP:
                fmt = get_locale_format(unit, unit)
                thousands, decimal = fmt.thousands, fmt.decimal

        if not thousands or not decimal:
            fmt = get_locale_format(self.config.symbol, self.config.iso_code)
            thousands, decimal = thousands or fmt.thousands, decimal or fmt.decimal

        thousands_token = build_thousands_token(thousands)
        decimal_token = build_decimal_token(decimal)
        match = re.search(build_number_pattern(thousands_token, decimal_token), number_text)
        if match is None:
            return None
        return normalize_number(match.group(0), thousands_token, decimal_token)

    def token_from_text(self, text: str, node: Any) -> Optional[PriceToken]:
        """First configured-currency price in text, as a token of this strategy."""
        search = find_prices(text, self.config, self.cache)
        if not search.has_potential_price:
            return None

        match = search.pattern.regex.search(text)
        if match is None:
            return None

        raw = match.group(0)
        return PriceToken(
            raw_text=raw,
            numeric_value=parse_amount(raw, search.pattern),
            currency_unit=self.config.iso_code,
            strategy_used=self.name,
            source_node=node,
        )

    def token_from_unit_and_amount(self, raw_text: str, unit: Optional[str], amount_text: str,
                                   node: Any) -> Optional[PriceToken]:
        """Token for an amount whose currency unit was found separately."""
        value = self.parse_number(amount_text, unit)
        if value is None:
            return None
        return PriceToken(
            raw_text=raw_text,
            numeric_value=value,
            currency_unit=self.resolve_currency(unit),
            strategy_used=self.name,
            source_node=node,
        )
