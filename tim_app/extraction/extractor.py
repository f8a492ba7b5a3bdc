"""
Price extractor coordinating the extraction strategies.

Strategies are tried in priority order and the first token wins. A failing
strategy never aborts extraction: malformed amounts are demoted to a
no-match and any other error is logged before the next strategy runs.
"""

from typing import Any, Optional, Sequence

from ..data.models import CurrencyFormatConfig, ExtractionStrategyName, PriceToken
from ..errors import MalformedNumericError, PriceExtractionError
from ..logging.config import get_extraction_logger
from ..patterns.cache import PatternCache
from .base import ExtractionStrategy
from .site_handlers import SiteHandlerRegistry, SiteHandlerStrategy
from .structural import StructuralStrategy
from .text_match import TextPatternStrategy

extraction_logger = get_extraction_logger(__name__)


class ExtractionStats:
    """Simple metrics collection for extraction attempts."""

    def __init__(self):
        self.attempts = 0
        self.no_matches = 0
        self.malformed_numerics = 0
        self.strategy_errors = 0
        self.hits_by_strategy: dict[str, int] = {}

    def record_hit(self, strategy: ExtractionStrategyName):
        self.hits_by_strategy[strategy.value] = self.hits_by_strategy.get(strategy.value, 0) + 1

    def get_stats(self) -> dict[str, Any]:
        """Get current metrics."""
        return {
            "attempts": self.attempts,
            "no_matches": self.no_matches,
            "malformed_numerics": self.malformed_numerics,
            "strategy_errors": self.strategy_errors,
            "hits_by_strategy": dict(self.hits_by_strategy),
        }


class PriceExtractor:
    """
    Turns a document node into at most one PriceToken.

    Priority order:
    Site-specific handlers → Structural/attribute analysis → Plain-text pattern
    """

    def __init__(
        self,
        config: CurrencyFormatConfig,
        *,
        cache: Optional[PatternCache] = None,
        site_handlers: Optional[SiteHandlerRegistry] = None,
        enable_structural: bool = True,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else PatternCache()
        self.logger = extraction_logger
        self.stats = ExtractionStats()

        if strategies is None:
            strategies = []
            if site_handlers is not None and len(site_handlers):
                strategies.append(SiteHandlerStrategy(config, self.cache, site_handlers))
            if enable_structural:
                strategies.append(StructuralStrategy(config, self.cache))
            strategies.append(TextPatternStrategy(config, self.cache))

        self.strategies = list(strategies)

    def _applies(self, strategy: ExtractionStrategy, node: Any) -> bool:
        try:
            return strategy.applies_to(node)
        except Exception as e:
            self.stats.strategy_errors += 1
            self.logger.warning(
                "Strategy applicability check failed",
                strategy=strategy.name.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    def is_element_candidate(self, element: Any) -> bool:
        """True when a site or structural strategy may read a price off the element."""
        return any(
            strategy.name != ExtractionStrategyName.TEXT_PATTERN and self._applies(strategy, element)
            for strategy in self.strategies
        )

    def extract(self, node: Any, *, include_text: bool = True) -> Optional[PriceToken]:
        """
        Extract the first price from a node.

        Args:
            node: Element or text node
            include_text: Whether the plain-text strategy may run

        Returns:
            PriceToken from the first successful strategy, None otherwise
        """
        self.stats.attempts += 1

        for strategy in self.strategies:
            if not include_text and strategy.name == ExtractionStrategyName.TEXT_PATTERN:
                continue
            if not self._applies(strategy, node):
                continue

            try:
                token = strategy.extract(node)
            except MalformedNumericError as e:
                self.stats.malformed_numerics += 1
                self.logger.debug(
                    "Malformed amount treated as no match",
                    strategy=strategy.name.value,
                    raw_text=e.raw_text,
                    error=str(e),
                )
                continue
            except PriceExtractionError as e:
                self.stats.strategy_errors += 1
                self.logger.warning(
                    "Extraction strategy failed",
                    strategy=strategy.name.value,
                    error=str(e),
                    error_type=type(e).__name__,
                    context=e.context,
                )
                continue
            except Exception as e:
                self.stats.strategy_errors += 1
                self.logger.error(
                    "Unexpected error in extraction strategy",
                    strategy=strategy.name.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if token is not None:
                self.stats.record_hit(token.strategy_used)
                return token

        self.stats.no_matches += 1
        return None
