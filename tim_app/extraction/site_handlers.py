"""
Site-specific price handlers.

Handlers know the markup of one storefront family and reassemble prices
the generic strategies would miss. They are kept in an ordered registry;
the first handler that targets a node and returns a match wins.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Protocol

import structlog
from bs4 import Tag

from ..data.models import ExtractionStrategyName, PriceToken
from ..errors import SiteHandlerError
from ..host.tree import class_list, is_element
from ..patterns.cache import PatternCache
from ..patterns.locales import KNOWN_SYMBOLS
from .base import BaseStrategy

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SiteMatch:
    """Price text assembled by a handler, with its value when the handler knows it."""
    raw_text: str
    value: Optional[float] = None
    unit: Optional[str] = None


class SiteHandler(Protocol):
    name: str
    domains: tuple[str, ...]

    def is_target_node(self, node: Any) -> bool: ...

    def extract(self, node: Any) -> Optional[SiteMatch]: ...


def _text(element: Optional[Tag]) -> str:
    return element.get_text(strip=True) if element is not None else ""


def _has_any_class(element: Any, names: Iterable[str]) -> bool:
    if not is_element(element):
        return False
    classes = class_list(element)
    return any(name in classes for name in names)


class AmazonPriceHandler:
    """Amazon's split symbol / whole / fraction price markup."""

    name = "amazon"
    domains = (
        "amazon.com",
        "amazon.co.uk",
        "amazon.de",
        "amazon.fr",
        "amazon.it",
        "amazon.es",
        "amazon.ca",
        "amazon.co.jp",
        "amazon.in",
    )

    CONTAINER_CLASSES = ("a-price", "sx-price")

    def is_target_node(self, node: Any) -> bool:
        return _has_any_class(node, self.CONTAINER_CLASSES)

    def extract(self, node: Any) -> Optional[SiteMatch]:
        offscreen = _text(node.select_one(".a-offscreen"))
        if any(c.isdigit() for c in offscreen):
            return SiteMatch(raw_text=offscreen)

        whole = _text(node.select_one(".a-price-whole, .sx-price-whole")).rstrip(".,")
        if not whole or not whole.replace(",", "").replace(".", "").isdigit():
            return None

        fraction = _text(node.select_one(".a-price-fraction, .sx-price-fractional")) or "00"
        if not fraction.isdigit():
            return None

        symbol = _text(node.select_one(".a-price-symbol, .sx-price-currency")) or None
        digits = re.sub(r"\D", "", whole)
        return SiteMatch(
            raw_text=f"{symbol or ''}{whole}.{fraction}",
            value=int(digits) + int(fraction[:2]) / 10 ** len(fraction[:2]),
            unit=symbol,
        )


class EbayPriceHandler:
    """eBay listing and item page price elements."""

    name = "ebay"
    domains = ("ebay.com", "ebay.co.uk", "ebay.de", "ebay.fr", "ebay.it", "ebay.ca", "ebay.com.au")

    PRICE_CLASSES = (
        "s-item__price",
        "x-price-primary",
        "x-bin-price",
        "x-buybox__price-element",
        "display-price",
        "ux-price-display",
    )
    PRICE_ATTRIBUTES = ("data-price", "data-item-price")

    def is_target_node(self, node: Any) -> bool:
        if _has_any_class(node, self.PRICE_CLASSES):
            return True
        return is_element(node) and any(node.has_attr(a) for a in self.PRICE_ATTRIBUTES)

    def extract(self, node: Any) -> Optional[SiteMatch]:
        text = node.get_text(" ", strip=True)
        if not any(c.isdigit() for c in text):
            return None
        # "US $12.99" reads as dollars
        return SiteMatch(raw_text=text.replace("US $", "$"))


class CdiscountPriceHandler:
    """Cdiscount "449€ 00" and superscript cents layouts."""

    name = "cdiscount"
    domains = ("cdiscount.com", "cdiscount.fr")

    PRICE_CLASSES = ("price", "fpPrice", "c-price")
    SPLIT_EURO = re.compile(r"(\d+)\s?€\s*(\d{2})\b")

    def is_target_node(self, node: Any) -> bool:
        return _has_any_class(node, self.PRICE_CLASSES)

    def extract(self, node: Any) -> Optional[SiteMatch]:
        split = self.SPLIT_EURO.search(node.get_text())
        if split:
            whole, cents = split.groups()
            return SiteMatch(raw_text=f"{whole}€ {cents}", value=int(whole) + int(cents) / 100, unit="€")

        parts = [_text(span) for span in node.find_all("span")]
        if len(parts) == 3 and parts[0].isdigit() and parts[1] in ("€", "£", "$") \
                and len(parts[2]) == 2 and parts[2].isdigit():
            return SiteMatch(
                raw_text="".join(parts),
                value=int(parts[0]) + int(parts[2]) / 100,
                unit=parts[1],
            )

        text = node.get_text(strip=True)
        if "€" in text and any(c.isdigit() for c in text):
            return SiteMatch(raw_text=text, unit="€")
        return None


class GearbestPriceHandler:
    """Gearbest and WooCommerce nested currency markup."""

    name = "gearbest"
    domains = ("gearbest.com", "gearbest.ma")

    PRICE_CLASSES = ("goods-price", "my-shop-price", "woocommerce-Price-amount")

    def is_target_node(self, node: Any) -> bool:
        return _has_any_class(node, self.PRICE_CLASSES)

    def extract(self, node: Any) -> Optional[SiteMatch]:
        currency = _text(node.select_one(".currency"))
        value = _text(node.select_one(".value"))
        if currency and value:
            return SiteMatch(raw_text=f"{currency}{value}", unit=currency)

        bdi = node.find("bdi")
        if bdi is not None:
            text = _text(bdi)
            if any(c.isdigit() for c in text):
                symbol = _text(bdi.select_one(".woocommerce-Price-currencySymbol")) or None
                return SiteMatch(raw_text=text, unit=symbol)

        text = node.get_text(strip=True)
        if "$" in text and any(c.isdigit() for c in text):
            return SiteMatch(raw_text=text.replace("US$", "$"), unit="$")
        return None


BUILTIN_HANDLERS = (
    AmazonPriceHandler,
    EbayPriceHandler,
    CdiscountPriceHandler,
    GearbestPriceHandler,
)


class SiteHandlerRegistry:
    """Ordered collection of site handlers."""

    def __init__(self, handlers: Iterable[Any] = ()):
        self._handlers: list[Any] = []
        for handler in handlers:
            self.register(handler)

    def register(self, handler: Any) -> None:
        """Append a handler; it must expose ``is_target_node`` and ``extract``."""
        if not callable(getattr(handler, "is_target_node", None)) \
                or not callable(getattr(handler, "extract", None)):
            raise SiteHandlerError(
                "Invalid handler registration",
                handler_name=getattr(handler, "name", type(handler).__name__),
            )
        self._handlers.append(handler)

    def clear(self) -> None:
        self._handlers.clear()

    def for_domain(self, domain: str) -> 'SiteHandlerRegistry':
        """Handlers serving ``domain``; handlers without domains serve every site."""
        domain = domain.lower()
        if domain.startswith("www."):
            domain = domain[4:]

        def serves(handler: Any) -> bool:
            domains = getattr(handler, "domains", ())
            if not domains:
                return True
            return any(domain == d or domain.endswith("." + d) for d in domains)

        return SiteHandlerRegistry(h for h in self._handlers if serves(h))

    def __iter__(self) -> Iterator[Any]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


def default_registry(domain: Optional[str] = None) -> SiteHandlerRegistry:
    """Registry of the built-in handlers, narrowed to ``domain`` when given."""
    registry = SiteHandlerRegistry(handler() for handler in BUILTIN_HANDLERS)
    if domain:
        return registry.for_domain(domain)
    return registry


class SiteHandlerStrategy(BaseStrategy):
    """Runs registered site handlers; highest extraction priority."""

    name = ExtractionStrategyName.SITE_SPECIFIC

    def __init__(self, config, cache: PatternCache, registry: SiteHandlerRegistry):
        super().__init__(config, cache)
        self.registry = registry

    def _targets(self, handler: Any, node: Any) -> bool:
        try:
            return bool(handler.is_target_node(node))
        except Exception as e:
            logger.warning(
                "Site handler target check failed",
                handler=getattr(handler, "name", type(handler).__name__),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    def applies_to(self, node: Any) -> bool:
        return is_element(node) and any(self._targets(h, node) for h in self.registry)

    def extract(self, node: Any) -> Optional[PriceToken]:
        for handler in self.registry:
            if not self._targets(handler, node):
                continue

            try:
                match = handler.extract(node)
            except Exception as e:
                logger.warning(
                    "Site handler failed",
                    handler=getattr(handler, "name", type(handler).__name__),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if match is None:
                continue

            token = self._token_from_match(match, node)
            if token is not None:
                return token
        return None

    def _token_from_match(self, match: SiteMatch, node: Any) -> Optional[PriceToken]:
        if match.value is not None:
            return PriceToken(
                raw_text=match.raw_text,
                numeric_value=match.value,
                currency_unit=self.resolve_currency(match.unit),
                strategy_used=self.name,
                source_node=node,
            )

        token = self.token_from_text(match.raw_text, node)
        if token is not None:
            return token

        unit = match.unit or next((s for s in KNOWN_SYMBOLS if s in match.raw_text), None)
        if unit is None:
            return None
        return self.token_from_unit_and_amount(
            match.raw_text, unit, match.raw_text.replace(unit, " "), node
        )
