"""
Numeric normalization of matched price text.

Converts locale-formatted amounts ("1.234,56", "1,234.56") into floats
using the separator tokens of the pattern that produced the match.
"""

import math
import re
from typing import TYPE_CHECKING

from ..errors import MalformedNumericError

if TYPE_CHECKING:
    from ..patterns.cache import CompiledPattern


def normalize_number(number_text: str, thousands_token: str, decimal_token: str) -> float:
    """
    Parse a locale-formatted number.

    Args:
        number_text: Digits with locale separators, e.g. "1 234,56"
        thousands_token: Regex fragment matching the thousands delimiter
        decimal_token: Regex fragment matching the decimal delimiter

    Returns:
        Parsed value

    Raises:
        MalformedNumericError: If the cleaned text is not a finite number
    """
    cleaned = re.sub(thousands_token, "", number_text.strip())
    cleaned = re.sub(decimal_token, ".", cleaned)

    try:
        value = float(cleaned)
    except ValueError as e:
        raise MalformedNumericError(
            f"Cannot parse amount '{number_text}'",
            raw_text=number_text,
            thousands_token=thousands_token,
            decimal_token=decimal_token,
        ) from e

    if not math.isfinite(value):
        raise MalformedNumericError(
            f"Amount '{number_text}' is not finite",
            raw_text=number_text,
            thousands_token=thousands_token,
            decimal_token=decimal_token,
        )

    return value


def parse_amount(raw_text: str, pattern: "CompiledPattern") -> float:
    """Extract and parse the numeric part of a matched price string."""
    match = pattern.amount_regex.search(raw_text)
    if match is None:
        raise MalformedNumericError(
            "No numeric amount in price text",
            raw_text=raw_text,
            thousands_token=pattern.thousands_token,
            decimal_token=pattern.decimal_token,
        )
    return normalize_number(match.group(0), pattern.thousands_token, pattern.decimal_token)
