"""
Price extraction error classifications.

These exceptions describe why a candidate node or a currency format could
not be turned into a price. Apart from pattern build failures they are
recoverable: the extractor demotes them to a no-match and moves on.
"""

from typing import Optional, Dict, Any


class PriceExtractionError(Exception):
    """Base class for extraction issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedNumericError(PriceExtractionError):
    """Matched price text whose amount does not parse as a number."""

    def __init__(self, message: str, raw_text: Optional[str] = None,
                 thousands_token: Optional[str] = None,
                 decimal_token: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_text = raw_text
        self.thousands_token = thousands_token
        self.decimal_token = decimal_token


class PatternBuildError(PriceExtractionError):
    """Currency format settings that cannot be compiled into a price pattern."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.recoverable = False


class SiteHandlerError(PriceExtractionError):
    """A site-specific handler failed while inspecting a node."""

    def __init__(self, message: str, handler_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.handler_name = handler_name
