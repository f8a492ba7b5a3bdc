"""
Price detection over plain text.

``might_contain_price`` is the cheap gate run on every candidate text
region; ``find_prices`` pairs that verdict with the compiled pattern for
the active currency format so callers can enumerate matches themselves.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from ..data.models import CurrencyFormatConfig
from .cache import CompiledPattern, PatternCache, get_default_cache
from .locales import KNOWN_CODES, KNOWN_SYMBOLS, detect_format_from_text, get_locale_format

_DIGIT = re.compile(r"\d")

# Symbols outside the locale table that still signal money
_EXTRA_SYMBOLS = ("¢", "₽", "₺", "₪", "₫", "₱", "฿", "₦", "₴")

_SINGLE_CHAR_SYMBOLS = tuple(s for s in KNOWN_SYMBOLS if len(s) == 1) + _EXTRA_SYMBOLS
_LETTER_SYMBOLS = tuple(re.escape(s) for s in KNOWN_SYMBOLS if len(s) > 1)

_CODE_WORD = re.compile(r"\b(?:" + "|".join(KNOWN_CODES) + r")\b")

# "kr 12" or "12 kr", never the bare word
_LETTER_SYMBOL_NEAR_DIGIT = re.compile(
    r"\d\s?(?:{0})\b|\b(?:{0})\.?\s?\d".format("|".join(_LETTER_SYMBOLS))
)

_LONG_DIGIT_RUN = re.compile(r"\d{10,}")

# Decimal money shape; rejects dotted dates, versions and ranges
_MONEY_NUMBER = re.compile(r"(?<![\d.,/-])\d+(?:[,.\s]\d{3})*[.,]\d{2}(?!\d|[.,/-]\d)")


@dataclass(frozen=True)
class PriceSearch:
    """Outcome of a price search over one text."""
    has_potential_price: bool
    pattern: CompiledPattern
    thousands_token: str
    decimal_token: str


def _mentions_unit(text: str, config: CurrencyFormatConfig) -> bool:
    if config.symbol and config.symbol in text:
        return True
    return bool(config.iso_code) and config.iso_code in text


def might_contain_price(text: Optional[str], config: Optional[CurrencyFormatConfig] = None) -> bool:
    """
    Cheap pre-filter deciding whether text is worth pattern matching.

    True when the text holds digits together with a currency symbol, an ISO
    code, the configured unit, or a decimal money-shaped number. Bare years,
    phone numbers, dates and long digit runs do not count.
    """
    if not text or not _DIGIT.search(text):
        return False

    if config is not None and _mentions_unit(text, config):
        return True

    if any(symbol in text for symbol in _SINGLE_CHAR_SYMBOLS):
        return True

    if _CODE_WORD.search(text) or _LETTER_SYMBOL_NEAR_DIGIT.search(text):
        return True

    return _MONEY_NUMBER.search(_LONG_DIGIT_RUN.sub(" ", text)) is not None


def resolve_format(text: str, config: CurrencyFormatConfig) -> CurrencyFormatConfig:
    """Fill missing separators from the text, then from the currency's locale group."""
    if config.thousands and config.decimal:
        return config

    detected = detect_format_from_text(text) or get_locale_format(config.symbol, config.iso_code)
    return config.with_separators(
        config.thousands or detected.thousands,
        config.decimal or detected.decimal,
    )


def find_prices(
    text: Optional[str],
    config: CurrencyFormatConfig,
    cache: Optional[PatternCache] = None,
) -> PriceSearch:
    """
    Look for prices in text under a currency format.

    Args:
        text: Text to inspect
        config: Active currency format
        cache: Pattern cache to build through; the process default otherwise

    Returns:
        PriceSearch holding the pre-filter verdict and the compiled pattern
    """
    text = text or ""
    cache = cache if cache is not None else get_default_cache()
    pattern = cache.build_pattern(resolve_format(text, config))

    return PriceSearch(
        has_potential_price=might_contain_price(text, config),
        pattern=pattern,
        thousands_token=pattern.thousands_token,
        decimal_token=pattern.decimal_token,
    )


class PriceFinder:
    """Price search bound to one currency format and one pattern cache."""

    def __init__(self, config: CurrencyFormatConfig, cache: Optional[PatternCache] = None):
        self.config = config
        self.cache = cache if cache is not None else PatternCache()

    def find(self, text: Optional[str]) -> PriceSearch:
        return find_prices(text, self.config, self.cache)

    def iter_matches(self, text: Optional[str]) -> Iterator[re.Match]:
        """Yield every price match in text, skipping texts the pre-filter rejects."""
        search = self.find(text)
        if not search.has_potential_price:
            return
        yield from search.pattern.regex.finditer(text)
