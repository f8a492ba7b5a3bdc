"""Plain-text price matching; the only strategy usable on bare text nodes."""

import re
from typing import Any, Optional

from bs4 import Tag

from ..data.models import ExtractionStrategyName, PriceToken
from ..data.normalizer import parse_amount
from ..host.tree import is_element, is_text
from ..patterns.finder import find_prices
from ..patterns.locales import TIME_ANNOTATION_PATTERN
from .base import BaseStrategy

_ANNOTATION = re.compile(TIME_ANNOTATION_PATTERN)


def node_text(node: Any) -> str:
    """Flattened text of a text node or element."""
    if is_text(node):
        return str(node)
    if isinstance(node, Tag):
        return node.get_text()
    return ""


class TextPatternStrategy(BaseStrategy):
    """Matches the configured currency pattern against node text."""

    name = ExtractionStrategyName.TEXT_PATTERN

    def applies_to(self, node: Any) -> bool:
        return is_text(node) or is_element(node)

    def extract(self, node: Any) -> Optional[PriceToken]:
        text = node_text(node)
        search = find_prices(text, self.config, self.cache)
        if not search.has_potential_price:
            return None

        for match in search.pattern.regex.finditer(text):
            # already carries a "(1h 26m)" annotation
            if _ANNOTATION.match(text, match.end()):
                continue

            raw = match.group(0)
            return PriceToken(
                raw_text=raw,
                numeric_value=parse_amount(raw, search.pattern),
                currency_unit=self.config.iso_code,
                strategy_used=self.name,
                source_node=node,
            )
        return None
