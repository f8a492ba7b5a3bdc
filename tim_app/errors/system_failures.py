"""
System failure error classifications for unrecoverable errors.

These exceptions represent failures of the scanner's host environment or of
its own lifecycle bookkeeping. They are propagated to the embedder.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class HostFacilityError(SystemFailureError):
    """The host's mutation notification or timer facility refused an operation."""

    def __init__(self, message: str, facility: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.facility = facility
        self.operation = operation


class ScannerStateError(SystemFailureError):
    """Invalid scanner lifecycle or debounce transition."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class ConfigurationError(SystemFailureError):
    """Merged configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
