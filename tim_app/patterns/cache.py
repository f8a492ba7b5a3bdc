"""
Compiled price pattern cache.

Turns a CurrencyFormatConfig into a compiled regular expression matching
prices written in that format, and keeps exactly one compiled instance per
distinct configuration. Entries are immutable and only leave the cache
through an explicit ``clear()``.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..data.models import CurrencyFormatConfig, DirectionMode
from ..errors import PatternBuildError
from .locales import TIME_ANNOTATION_PATTERN, get_locale_format

logger = structlog.get_logger(__name__)

THOUSANDS_TOKENS = {
    "commas": ",",
    "spacesAndDots": r"(?:\s|\.)",
}

DECIMAL_TOKENS = {
    "dot": r"\.",
    "comma": ",",
}

# Separator pairs where one character could be read both ways
AMBIGUOUS_SEPARATORS = {
    ("commas", "comma"),
    ("spacesAndDots", "dot"),
}


@dataclass(frozen=True)
class CompiledPattern:
    """Compiled matcher for one currency format configuration."""
    regex: re.Pattern
    amount_regex: re.Pattern                         # numeric part only
    thousands_token: str
    decimal_token: str
    config: CurrencyFormatConfig


def build_thousands_token(thousands: str) -> str:
    """Regex fragment for a thousands delimiter name."""
    token = THOUSANDS_TOKENS.get(thousands)
    if token is None:
        raise PatternBuildError("Not a recognized delimiter", field="thousands", value=thousands)
    return token


def build_decimal_token(decimal: str) -> str:
    """Regex fragment for a decimal delimiter name."""
    token = DECIMAL_TOKENS.get(decimal)
    if token is None:
        raise PatternBuildError("Not a recognized delimiter", field="decimal", value=decimal)
    return token


def build_number_pattern(thousands_token: str, decimal_token: str) -> str:
    """Digits, optional thousands groups of three, optional one or two decimals."""
    return rf"\d+(?:{thousands_token}\d{{3}})*(?:{decimal_token}\d{{1,2}})?"


def build_match_pattern(config: CurrencyFormatConfig, thousands_token: str, decimal_token: str) -> str:
    """
    Alternation of every accepted placement of the currency unit.

    Unit-before-amount is only offered when the currency's locale group
    writes symbols first. Amount-before-unit and the code forms are always
    offered.
    """
    units = []
    for unit in (config.symbol, config.iso_code):
        if unit and re.escape(unit) not in units:
            units.append(re.escape(unit))
    if not units:
        raise PatternBuildError("Currency symbol or ISO code is required", field="symbol",
                                value=config.symbol)

    number = build_number_pattern(thousands_token, decimal_token)
    unit = f"(?:{'|'.join(units)})"
    locale = get_locale_format(config.symbol, config.iso_code)

    alternatives = []
    if locale.symbol_first:
        alternatives.append(rf"{unit}\s?{number}")
    # a unit directly followed by digits belongs to the next price
    alternatives.append(rf"{number}\s?{unit}(?!\d)")
    if config.iso_code:
        code = re.escape(config.iso_code)
        alternatives.append(rf"{code}\s{number}")
        alternatives.append(rf"{number}\s{code}(?!\d)")

    return "|".join(alternatives)


def compile_pattern(config: CurrencyFormatConfig) -> CompiledPattern:
    """Compile a config without consulting any cache."""
    if (config.thousands, config.decimal) in AMBIGUOUS_SEPARATORS:
        raise PatternBuildError(
            "Thousands and decimal delimiters overlap",
            field="decimal",
            value=config.decimal,
            context={"thousands": config.thousands},
        )

    thousands_token = build_thousands_token(config.thousands)
    decimal_token = build_decimal_token(config.decimal)
    match_pattern = build_match_pattern(config, thousands_token, decimal_token)

    if config.direction == DirectionMode.REVERSE:
        source = f"(?P<price>{match_pattern}){TIME_ANNOTATION_PATTERN}"
    else:
        source = f"(?:{match_pattern})"

    try:
        regex = re.compile(source)
        amount_regex = re.compile(build_number_pattern(thousands_token, decimal_token))
    except re.error as e:
        raise PatternBuildError(
            f"Price pattern does not compile: {e}",
            context={"cache_key": config.cache_key},
        ) from e

    return CompiledPattern(
        regex=regex,
        amount_regex=amount_regex,
        thousands_token=thousands_token,
        decimal_token=decimal_token,
        config=config,
    )


class PatternCache:
    """Get-or-build store of compiled patterns keyed by ``config.cache_key``."""

    def __init__(self):
        self._patterns: dict[str, CompiledPattern] = {}
        self.hits = 0
        self.misses = 0

    def build_pattern(self, config: CurrencyFormatConfig) -> CompiledPattern:
        """Return the cached pattern for ``config``, compiling it on first use."""
        key = config.cache_key
        cached = self._patterns.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        compiled = compile_pattern(config)
        self._patterns[key] = compiled

        logger.debug(
            "Compiled price pattern",
            cache_key=key,
            cache_size=len(self._patterns),
        )
        return compiled

    def get(self, config: CurrencyFormatConfig) -> Optional[CompiledPattern]:
        """Cached pattern for ``config`` without building one."""
        return self._patterns.get(config.cache_key)

    def clear(self) -> None:
        """Evict every compiled pattern."""
        self._patterns.clear()

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, config: object) -> bool:
        return isinstance(config, CurrencyFormatConfig) and config.cache_key in self._patterns

    def get_stats(self) -> dict[str, Any]:
        """Get current cache metrics."""
        lookups = self.hits + self.misses
        return {
            "size": len(self._patterns),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / max(lookups, 1),
        }


# Backs the module-level convenience functions only
_default_cache = PatternCache()


def get_default_cache() -> PatternCache:
    """Get the process default pattern cache."""
    return _default_cache


def reset_default_cache() -> None:
    """Reset the process default pattern cache."""
    global _default_cache
    _default_cache = PatternCache()
