"""
Recovery strategy classifications for error handling.

These errors allow the scanner to keep running with reduced coverage
instead of failing outright.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class QueueOverflowError(GracefulDegradationError):
    """Pending node queues reached their limit during a mutation batch."""

    def __init__(self, message: str, limit: int = 0, pending_size: int = 0, **kwargs):
        kwargs.setdefault("degraded_functionality", "node_admission")
        kwargs.setdefault("fallback_strategy", "drop_remaining_batch")
        super().__init__(message, **kwargs)
        self.limit = limit
        self.pending_size = pending_size
