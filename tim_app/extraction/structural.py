"""
Structural and attribute price analysis.

Many storefronts do not write a price as one piece of text. They split it
over sibling elements, keep the machine value in a data attribute, or only
spell it out for screen readers. This strategy reads those structures off
an element.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog
from bs4 import Tag

from ..data.models import ExtractionStrategyName, PriceToken
from ..host.tree import class_list, is_element
from ..patterns.finder import might_contain_price
from .base import BaseStrategy

logger = structlog.get_logger(__name__)

PRICE_ATTRIBUTES = (
    "data-price",
    "data-amount",
    "data-value",
    "data-cost",
    "data-currency-value",
    "data-price-value",
    "data-product-price",
    "data-sale-price",
    "data-regular-price",
    "data-current-price",
    "data-raw-price",
)

PRICE_CLASSES = frozenset({
    "price",
    "product-price",
    "sale-price",
    "current-price",
    "discounted-price",
    "regular-price",
    "original-price",
    "final-price",
    "amount",
    "cost",
    "pricenow",
    "price--withoutTax",
    "price--withTax",
    "price-money",
    "money",
})

PRICE_CONTAINERS = frozenset({
    "prices",
    "price-container",
    "product-prices",
    "pricing",
    "price-box",
    "price-info",
    "price-wrapper",
    "price-section",
})

OFFSCREEN_SELECTOR = ".a-offscreen, .sr-only, .visually-hidden"

CURRENCY_ATTRIBUTES = ("data-currency", "data-currency-code")

_WHOLE = re.compile(r"\d{1,3}(?:[.,\s ]\d{3})+|\d+")
_FRACTION = re.compile(r"\d{2}")
_WHOLE_WITH_UNIT = re.compile(r"(\d+)\s?(\D{1,3})")


@dataclass(frozen=True)
class SplitPrice:
    """A price reassembled from separate components."""
    unit: str
    value: float
    raw_text: str


def _whole_value(text: str) -> int:
    return int(re.sub(r"\D", "", text))


def _assemble(unit: str, whole: str, fraction: str, unit_first: bool) -> SplitPrice:
    value = _whole_value(whole) + int(fraction) / 100
    if unit_first:
        raw = f"{unit}{whole}.{fraction}"
    else:
        raw = f"{whole},{fraction} {unit}"
    return SplitPrice(unit=unit, value=value, raw_text=raw)


def match_split_components(
    parts: list[str],
    is_unit: Callable[[str], bool],
    parse_amount: Callable[[str, str], Optional[float]],
) -> Optional[SplitPrice]:
    """
    Recognize a price spread over two or three text components.

    Accepted layouts: ``[$, 12, 99]``, ``[129, €, 95]``, ``[$, 12.99]``,
    ``[12,99, €]`` and ``[449€, 00]``.
    """
    parts = [p.strip() for p in parts if p and p.strip()]

    if len(parts) == 3:
        first, second, third = parts
        if is_unit(first) and _WHOLE.fullmatch(second) and _FRACTION.fullmatch(third):
            return _assemble(first, second, third, unit_first=True)
        if _WHOLE.fullmatch(first) and is_unit(second) and _FRACTION.fullmatch(third):
            return _assemble(second, first, third, unit_first=False)
        return None

    if len(parts) == 2:
        first, second = parts
        if is_unit(first) and second[:1].isdigit():
            value = parse_amount(second, first)
            if value is not None:
                return SplitPrice(unit=first, value=value, raw_text=f"{first}{second}")
        if is_unit(second) and first[:1].isdigit():
            value = parse_amount(first, second)
            if value is not None:
                return SplitPrice(unit=second, value=value, raw_text=f"{first} {second}")
        with_unit = _WHOLE_WITH_UNIT.fullmatch(first)
        if with_unit and is_unit(with_unit.group(2)) and _FRACTION.fullmatch(second):
            return _assemble(with_unit.group(2), with_unit.group(1), second, unit_first=False)

    return None


def is_price_element(element: Any) -> bool:
    """True when markup alone suggests the element holds a price."""
    if not is_element(element):
        return False

    if any(element.has_attr(attribute) for attribute in PRICE_ATTRIBUTES):
        return True

    itemprop = element.get("itemprop")
    if isinstance(itemprop, str) and "price" in itemprop.lower():
        return True

    classes = class_list(element)
    if any(c in PRICE_CLASSES or c in PRICE_CONTAINERS for c in classes):
        return True

    label = element.get("aria-label")
    return isinstance(label, str) and might_contain_price(label)


class StructuralStrategy(BaseStrategy):
    """Reads prices from attributes, offscreen text and split layouts."""

    name = ExtractionStrategyName.STRUCTURAL

    def applies_to(self, node: Any) -> bool:
        return is_price_element(node)

    def extract(self, node: Any) -> Optional[PriceToken]:
        if not is_element(node):
            return None

        for method in (
            self._from_aria_label,
            self._from_data_attributes,
            self._from_offscreen_text,
            self._from_split_components,
        ):
            token = method(node)
            if token is not None:
                logger.debug("Structural price found", method=method.__name__, value=token.numeric_value)
                return token
        return None

    def _from_aria_label(self, element: Tag) -> Optional[PriceToken]:
        label = element.get("aria-label")
        if not isinstance(label, str) or not might_contain_price(label, self.config):
            return None
        return self.token_from_text(label, element)

    def _from_data_attributes(self, element: Tag) -> Optional[PriceToken]:
        value = None
        for attribute in PRICE_ATTRIBUTES:
            if element.has_attr(attribute):
                value = str(element[attribute]).strip()
                break

        if not value and "price" in str(element.get("itemprop", "")).lower():
            value = str(element.get("content", "")).strip()

        if not value:
            return None

        unit = next(
            (str(element[a]).strip() for a in CURRENCY_ATTRIBUTES if element.has_attr(a)),
            None,
        )
        visible = element.get_text(" ", strip=True)
        raw_text = visible if visible and any(c.isdigit() for c in visible) else value

        # data attributes usually carry a plain machine number
        try:
            amount = float(value)
        except ValueError:
            return self.token_from_text(value, element) or self.token_from_unit_and_amount(
                raw_text, unit, value, element
            )

        return PriceToken(
            raw_text=raw_text,
            numeric_value=amount,
            currency_unit=self.resolve_currency(unit),
            strategy_used=self.name,
            source_node=element,
        )

    def _from_offscreen_text(self, element: Tag) -> Optional[PriceToken]:
        offscreen = element.select_one(OFFSCREEN_SELECTOR)
        if offscreen is None:
            return None
        return self.token_from_text(offscreen.get_text(strip=True), element)

    def _from_split_components(self, element: Tag) -> Optional[PriceToken]:
        children = element.find_all(True, recursive=False)
        if not 2 <= len(children) <= 3:
            return None

        split = match_split_components(
            [child.get_text(strip=True) for child in children],
            self.is_unit,
            lambda amount, unit: self.parse_number(amount, unit),
        )
        if split is None:
            return None

        return PriceToken(
            raw_text=split.raw_text,
            numeric_value=split.value,
            currency_unit=self.resolve_currency(split.unit),
            strategy_used=self.name,
            source_node=element,
        )
