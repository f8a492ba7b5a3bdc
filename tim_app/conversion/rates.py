"""Static exchange rate table used to make price and wage currencies commensurable."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ExchangeRates:
    """
    Rates relative to a base currency.

    ``rates["EUR"] == 0.9`` means one unit of the base currency buys 0.9 EUR.
    The base currency itself is implicitly 1.0.
    """
    base: str = "USD"
    rates: dict[str, float] = field(default_factory=dict)

    def rate_for(self, currency: str) -> Optional[float]:
        """Units of ``currency`` per base unit, or None when unknown."""
        if currency == self.base:
            return 1.0
        rate = self.rates.get(currency)
        if rate is None or rate <= 0:
            return None
        return rate

    def supports(self, *currencies: str) -> bool:
        return all(self.rate_for(c) is not None for c in currencies)

    def convert(self, amount: float, from_currency: str, to_currency: str) -> Optional[float]:
        """Convert ``amount``; None when either currency has no rate."""
        if from_currency == to_currency:
            return amount

        from_rate = self.rate_for(from_currency)
        to_rate = self.rate_for(to_currency)
        if from_rate is None or to_rate is None:
            return None

        return amount / from_rate * to_rate

    @classmethod
    def from_settings(cls, settings: Optional[dict[str, Any]]) -> Optional['ExchangeRates']:
        """Build from a ``rates`` configuration section; None when it is empty."""
        if not settings or not settings.get("rates"):
            return None
        return cls(
            base=settings.get("base", "USD"),
            rates={code: float(value) for code, value in settings["rates"].items()},
        )
