"""
Scanner state data models.

``ScannerState`` is the only mutable structure in the package. One
instance belongs to one scanner and is only touched from the notifier and
timer callbacks, which the host runs one at a time.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional


class ObserverPhase(str, Enum):
    """Observer lifecycle states."""
    STOPPED = "stopped"
    OBSERVING = "observing"


class DebouncePhase(str, Enum):
    """Debounce cycle states."""
    IDLE = "idle"
    TIMER_ARMED = "timer_armed"
    PROCESSING = "processing"


class NodeQueue:
    """
    Insertion-ordered set of document nodes keyed by identity.

    Soup text nodes are ``str`` subclasses and tags compare structurally,
    so two distinct nodes can be equal; membership here means "this very
    node".
    """

    def __init__(self):
        self._nodes: dict[int, Any] = {}

    def add(self, node: Any) -> bool:
        """Add a node; False when it is already queued."""
        key = id(node)
        if key in self._nodes:
            return False
        self._nodes[key] = node
        return True

    def drain(self) -> list[Any]:
        """Return queued nodes in insertion order and empty the queue."""
        nodes = list(self._nodes.values())
        self._nodes.clear()
        return nodes

    def clear(self) -> None:
        self._nodes.clear()

    def __contains__(self, node: object) -> bool:
        return id(node) in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._nodes.values()))


@dataclass
class ScannerState:
    """Runtime state of one incremental scanner."""

    phase: ObserverPhase = ObserverPhase.STOPPED
    debounce: DebouncePhase = DebouncePhase.IDLE
    pending_nodes: NodeQueue = field(default_factory=NodeQueue)
    pending_text_nodes: NodeQueue = field(default_factory=NodeQueue)
    debounce_timer: Optional[Any] = None             # scheduler TimerHandle
    observer_handle: Optional[Any] = None            # notifier registration

    @property
    def is_processing(self) -> bool:
        return self.debounce == DebouncePhase.PROCESSING

    @property
    def pending_size(self) -> int:
        return len(self.pending_nodes) + len(self.pending_text_nodes)

    def clear_queues(self) -> None:
        self.pending_nodes.clear()
        self.pending_text_nodes.clear()

    def reset(self) -> None:
        """Clear both queues and release the timer and observer handles."""
        self.clear_queues()
        self.debounce_timer = None
        self.observer_handle = None
        self.debounce = DebouncePhase.IDLE
        self.phase = ObserverPhase.STOPPED


@dataclass(frozen=True)
class OverflowReport:
    """Describes one batch that hit the pending queue limit."""
    scanner_id: str
    limit: int
    pending_size: int
    dropped: int


@dataclass(frozen=True)
class PassReport:
    """Summary of one processing pass."""
    pass_number: int
    elements: int
    text_nodes: int
    candidates: int
    annotated: int
    conversion_failures: int
    node_errors: int
    duration_ms: float


class ScanMetrics:
    """Simple metrics collection for scanner activity."""

    def __init__(self):
        self.batches = 0
        self.nodes_admitted = 0
        self.nodes_dropped = 0
        self.overflow_events = 0
        self.passes = 0
        self.candidates = 0
        self.annotations = 0
        self.no_matches = 0
        self.conversion_failures = 0
        self.annotation_failures = 0
        self.node_errors = 0
        self.scheduling_failures = 0
        self.total_pass_time = 0.0
        self.last_pass: Optional[PassReport] = None

    def record_pass_start(self) -> float:
        """Record the start of a processing pass."""
        self.passes += 1
        return time.perf_counter()

    def record_pass_end(self, start_time: float, report_fields: dict[str, int]) -> PassReport:
        """Record the end of a pass and build its report."""
        duration = time.perf_counter() - start_time
        self.total_pass_time += duration
        self.last_pass = PassReport(
            pass_number=self.passes,
            duration_ms=duration * 1000,
            **report_fields,
        )
        return self.last_pass

    def get_stats(self) -> dict[str, Any]:
        """Get current metrics."""
        avg_pass_time = self.total_pass_time / max(self.passes, 1)

        return {
            "batches": self.batches,
            "nodes_admitted": self.nodes_admitted,
            "nodes_dropped": self.nodes_dropped,
            "overflow_events": self.overflow_events,
            "passes": self.passes,
            "candidates": self.candidates,
            "annotations": self.annotations,
            "no_matches": self.no_matches,
            "conversion_failures": self.conversion_failures,
            "annotation_failures": self.annotation_failures,
            "node_errors": self.node_errors,
            "scheduling_failures": self.scheduling_failures,
            "avg_pass_time_ms": avg_pass_time * 1000,
        }
