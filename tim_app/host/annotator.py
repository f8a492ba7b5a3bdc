"""
Default annotation callback for BeautifulSoup documents.

Text prices are wrapped in a marked span that shows the price followed by
its work time; element prices are marked and receive a badge child. Every
structural change goes through the notifier so observers see it, and the
marker keeps the scanner from picking the result up again.
"""

import re
from typing import Any, Optional

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from ..conversion.formatting import format_price_with_time, format_time_compact, format_time_verbose
from ..data.models import CurrencyFormatConfig, DirectionMode, TimeBreakdown
from ..patterns.cache import PatternCache, get_default_cache
from ..patterns.finder import resolve_format
from ..patterns.locales import TIME_ANNOTATION_PATTERN
from .notifier import SoupNotifier
from .tree import (
    BADGE_CLASS,
    MARK_ELEMENT,
    MARK_TEXT,
    MARKER_ATTRIBUTE,
    MARKER_CLASS,
    ORIGINAL_PRICE_ATTRIBUTE,
    has_class,
    is_element,
    is_text,
    mark,
    unmark,
)

logger = structlog.get_logger(__name__)

_ANNOTATION = re.compile(TIME_ANNOTATION_PATTERN)


def locate_price(text: str, original_text: str) -> Optional[int]:
    """Offset of the first occurrence of a price that is not yet annotated."""
    start = text.find(original_text)
    while start != -1:
        if not _ANNOTATION.match(text, start + len(original_text)):
            return start
        start = text.find(original_text, start + 1)
    return None


class BadgeAnnotator:
    """Annotation callback writing work-time badges into a soup."""

    def __init__(self, notifier: SoupNotifier, soup: BeautifulSoup, verbose: bool = False):
        self.notifier = notifier
        self.soup = soup
        self.verbose = verbose
        self.annotated = 0

    def __call__(self, original_text: str, breakdown: TimeBreakdown, source_node: Any) -> None:
        if is_text(source_node):
            self.annotate_text(source_node, original_text, breakdown)
        elif is_element(source_node):
            self.annotate_element(source_node, original_text, breakdown)
        else:
            raise TypeError(f"Cannot annotate {type(source_node).__name__}")
        self.annotated += 1

    def _title(self, breakdown: TimeBreakdown) -> str:
        return f"{format_time_verbose(breakdown)} of work"

    def annotate_text(self, text_node: NavigableString, original_text: str, breakdown: TimeBreakdown) -> Tag:
        """Split the text node around the price and wrap the price in a marked span."""
        text = str(text_node)
        start = locate_price(text, original_text)
        if start is None:
            raise ValueError(f"Price '{original_text}' not found in text node")
        end = start + len(original_text)

        span = self.soup.new_tag("span")
        mark(span, MARK_TEXT, original_text)
        span["title"] = self._title(breakdown)
        span.string = format_price_with_time(original_text, breakdown)

        nodes = []
        if start:
            nodes.append(NavigableString(text[:start]))
        nodes.append(span)
        if end < len(text):
            # the remainder is reported as added and gets its own pass
            nodes.append(NavigableString(text[end:]))

        with self.notifier.batch():
            self.notifier.replace_with(text_node, *nodes)

        logger.debug("Text price annotated", original_text=original_text, minutes=breakdown.total_minutes)
        return span

    def annotate_element(self, element: Tag, original_text: str, breakdown: TimeBreakdown) -> Tag:
        """Mark the element and append a work-time badge to it."""
        mark(element, MARK_ELEMENT, original_text)

        badge = self.soup.new_tag("span")
        badge["class"] = [MARKER_CLASS, BADGE_CLASS]
        badge["title"] = self._title(breakdown)
        text = format_time_verbose(breakdown) if self.verbose else format_time_compact(breakdown)
        badge.string = f" ({text})"

        self.notifier.append(element, badge)

        logger.debug("Element price annotated", original_text=original_text, minutes=breakdown.total_minutes)
        return badge


def revert_annotations(root: Tag, notifier: Optional[SoupNotifier] = None) -> int:
    """
    Restore every annotated price below ``root``.

    With a notifier the restored text is reported as added nodes; without
    one, adjacent strings are merged back together.

    Returns:
        Number of annotations removed
    """
    reverted = 0
    for element in root.find_all(attrs={MARKER_ATTRIBUTE: True}):
        if element.parent is None:
            continue

        if element[MARKER_ATTRIBUTE] == MARK_TEXT:
            original = NavigableString(element.get(ORIGINAL_PRICE_ATTRIBUTE, element.get_text()))
            parent = element.parent
            if notifier is not None:
                notifier.replace_with(element, original)
            else:
                element.replace_with(original)
                parent.smooth()
        else:
            for badge in element.find_all(lambda tag: has_class(tag, BADGE_CLASS)):
                badge.decompose()
            unmark(element)
        reverted += 1

    logger.info("Annotations reverted", count=reverted)
    return reverted


def strip_time_annotations(
    text: str,
    config: CurrencyFormatConfig,
    cache: Optional[PatternCache] = None,
) -> str:
    """Remove ``" (1h 26m)"`` annotations that follow prices in plain text."""
    cache = cache if cache is not None else get_default_cache()
    reverse = resolve_format(text, config).with_direction(DirectionMode.REVERSE)
    pattern = cache.build_pattern(reverse)
    return pattern.regex.sub(lambda match: match.group("price"), text)
