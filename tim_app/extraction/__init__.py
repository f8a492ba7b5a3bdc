"""
Multi-strategy price extraction.

Strategies run in fixed priority order (site-specific handlers, structural
and attribute analysis, plain-text pattern matching) and the first one to
produce a price wins.
"""

from .extractor import PriceExtractor
from .site_handlers import SiteHandlerRegistry, SiteMatch, default_registry

__all__ = [
    "PriceExtractor",
    "SiteHandlerRegistry",
    "SiteMatch",
    "default_registry",
]
