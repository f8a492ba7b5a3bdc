"""
Error classification system for price scanning.

This module provides the structured exception hierarchy for the failures
encountered while extracting prices from document nodes and while driving
the incremental scanner against its host facilities.
"""

from .extraction import (
    PriceExtractionError,
    MalformedNumericError,
    PatternBuildError,
    SiteHandlerError,
)
from .system_failures import (
    SystemFailureError,
    HostFacilityError,
    ScannerStateError,
    ConfigurationError,
)
from .recovery import (
    GracefulDegradationError,
    QueueOverflowError,
)

__all__ = [
    # Extraction Errors
    "PriceExtractionError",
    "MalformedNumericError",
    "PatternBuildError",
    "SiteHandlerError",
    # System Failures
    "SystemFailureError",
    "HostFacilityError",
    "ScannerStateError",
    "ConfigurationError",
    # Recovery Categories
    "GracefulDegradationError",
    "QueueOverflowError",
]
