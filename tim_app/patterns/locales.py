"""Locale groups of currency symbols, ISO codes and number separators."""

from dataclasses import dataclass
from typing import Optional

from ..data.models import (
    DECIMAL_COMMA,
    DECIMAL_DOT,
    THOUSANDS_COMMAS,
    THOUSANDS_SPACES_AND_DOTS,
)

# Appended by annotation: "$10.00 (1h 26m)"
TIME_ANNOTATION_PATTERN = r"\s\(\d+h\s\d+m\)"

DEFAULT_LOCALE_GROUP = "US"


@dataclass(frozen=True)
class LocaleFormat:
    """Separator and symbol conventions shared by a group of currencies."""
    group: str
    locale: str
    thousands: str
    decimal: str
    symbols: tuple[str, ...]
    codes: tuple[str, ...]
    symbol_first: bool                               # "$10" rather than "10 $"


LOCALE_FORMATS: dict[str, LocaleFormat] = {
    "US": LocaleFormat(
        group="US",
        locale="en-US",
        thousands=THOUSANDS_COMMAS,
        decimal=DECIMAL_DOT,
        symbols=("$", "£", "₹"),
        codes=("USD", "GBP", "INR"),
        symbol_first=True,
    ),
    "EU": LocaleFormat(
        group="EU",
        locale="de-DE",
        thousands=THOUSANDS_SPACES_AND_DOTS,
        decimal=DECIMAL_COMMA,
        symbols=("€", "Fr", "kr", "zł"),
        codes=("EUR", "CHF", "SEK", "DKK", "NOK", "PLN"),
        symbol_first=False,
    ),
    "JP": LocaleFormat(
        group="JP",
        locale="ja-JP",
        thousands=THOUSANDS_COMMAS,
        decimal=DECIMAL_DOT,
        symbols=("¥", "₩", "元", "￥", "円"),
        codes=("JPY", "KRW", "CNY"),
        symbol_first=True,
    ),
}

SYMBOL_TO_GROUP: dict[str, str] = {
    symbol: fmt.group for fmt in LOCALE_FORMATS.values() for symbol in fmt.symbols
}

CODE_TO_GROUP: dict[str, str] = {
    code: fmt.group for fmt in LOCALE_FORMATS.values() for code in fmt.codes
}

# Best guess for symbols shared by several currencies ("$", "kr", "¥")
SYMBOL_TO_CODE: dict[str, str] = {
    "$": "USD",
    "£": "GBP",
    "₹": "INR",
    "€": "EUR",
    "Fr": "CHF",
    "kr": "SEK",
    "zł": "PLN",
    "¥": "JPY",
    "￥": "JPY",
    "円": "JPY",
    "₩": "KRW",
    "元": "CNY",
}

KNOWN_SYMBOLS: tuple[str, ...] = tuple(SYMBOL_TO_GROUP)
KNOWN_CODES: tuple[str, ...] = tuple(CODE_TO_GROUP)


def get_locale_format(symbol: Optional[str] = None, code: Optional[str] = None) -> LocaleFormat:
    """Locale group for a symbol, falling back to the code and then to US."""
    group = SYMBOL_TO_GROUP.get(symbol) if symbol else None
    if group is None and code:
        group = CODE_TO_GROUP.get(code)
    return LOCALE_FORMATS[group or DEFAULT_LOCALE_GROUP]


def detect_format_from_text(text: str) -> Optional[LocaleFormat]:
    """
    Guess the locale group of a piece of text.

    Symbols are checked before codes; the first hit wins. Returns None when
    the text carries neither.
    """
    if not text:
        return None

    for symbol, group in SYMBOL_TO_GROUP.items():
        if symbol in text:
            return LOCALE_FORMATS[group]

    for code, group in CODE_TO_GROUP.items():
        if code in text:
            return LOCALE_FORMATS[group]

    return None


def currency_for_symbol(symbol: str, default: str) -> str:
    """ISO code conventionally written with ``symbol``."""
    if symbol in CODE_TO_GROUP:
        return symbol
    return SYMBOL_TO_CODE.get(symbol, default)
