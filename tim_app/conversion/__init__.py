"""
Money to work-time conversion.

Pure functions turning a price and a wage into hours and minutes, plus the
formatting helpers used by annotations.
"""

from .converter import convert, convert_token, hourly_rate
from .formatting import format_price_with_time, format_time_compact, format_time_verbose
from .rates import ExchangeRates

__all__ = [
    "convert",
    "convert_token",
    "hourly_rate",
    "format_price_with_time",
    "format_time_compact",
    "format_time_verbose",
    "ExchangeRates",
]
