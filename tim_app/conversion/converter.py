"""
Converter from monetary amounts to work time.

Conversion never raises for bad inputs. Every rejected combination comes
back as a ConversionFailure carrying the reason, so a single odd price
cannot abort a scanning pass.
"""

import math
from typing import Optional

from ..data.models import (
    ConversionFailure,
    ConversionResult,
    PriceToken,
    TimeBreakdown,
    WageConfig,
    WagePeriod,
    is_finite_number,
)
from .rates import ExchangeRates


def _round_half_up(value: float) -> int:
    # round() rounds half to even
    return math.floor(value + 0.5)


def hourly_rate(amount: float, period: WagePeriod) -> float:
    """Hourly equivalent of a wage amount."""
    return WageConfig(amount=amount, period=period).hourly_rate


def convert(
    amount: float,
    wage_amount: float,
    *,
    amount_currency: Optional[str] = None,
    wage_currency: Optional[str] = None,
    rates: Optional[ExchangeRates] = None,
) -> ConversionResult:
    """
    Convert a price into the hours and minutes of work it costs.

    Args:
        amount: Price value
        wage_amount: Hourly wage
        amount_currency: ISO code of the price, if known
        wage_currency: ISO code of the wage, if known
        rates: Exchange rates used when the two currencies differ

    Returns:
        TimeBreakdown on success, ConversionFailure otherwise
    """
    if not is_finite_number(wage_amount) or wage_amount < 0:
        return ConversionFailure.invalid_wage(wage_amount)
    if wage_amount == 0:
        return ConversionFailure.zero_wage()
    if not is_finite_number(amount) or amount < 0:
        return ConversionFailure.invalid_amount(amount)

    if amount_currency and wage_currency and amount_currency != wage_currency:
        converted = rates.convert(amount, amount_currency, wage_currency) if rates else None
        if converted is None:
            return ConversionFailure.incommensurable(amount_currency, wage_currency)
        amount = converted

    total_hours = amount / wage_amount
    hours = math.floor(total_hours)
    minutes = _round_half_up((total_hours - hours) * 60)

    if minutes == 60:
        hours += 1
        minutes = 0

    return TimeBreakdown(hours=hours, minutes=minutes)


def convert_token(
    token: PriceToken,
    wage: WageConfig,
    rates: Optional[ExchangeRates] = None,
) -> ConversionResult:
    """Convert an extracted price against a wage snapshot."""
    return convert(
        token.numeric_value,
        wage.hourly_rate,
        amount_currency=token.currency_unit,
        wage_currency=wage.currency,
        rates=rates,
    )
