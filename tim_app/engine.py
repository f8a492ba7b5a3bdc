"""
Incremental price scanner.

Coordinates the pipeline that keeps a live document annotated:
Mutation batch → Pending queues → Debounce timer → Extraction → Conversion → Annotation

The scanner is single-threaded and cooperative. The notifier callback and
the timer callback are its only entry points; a processing pass runs to
completion before the next one can start.
"""

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from .config.defaults import ScannerParams
from .config.loader import (
    build_exchange_rates,
    build_extraction_params,
    build_format_config,
    build_scanner_params,
    build_wage_config,
)
from .config.validation import ConfigValidator
from .conversion.converter import convert_token
from .conversion.rates import ExchangeRates
from .data.models import CurrencyFormatConfig, DirectionMode, TimeBreakdown, WageConfig
from .errors import (
    ConfigurationError,
    HostFacilityError,
    PriceExtractionError,
    QueueOverflowError,
    ScannerStateError,
)
from .extraction.extractor import PriceExtractor
from .extraction.site_handlers import SiteHandlerRegistry, default_registry
from .host.notifier import MutationKind, MutationNotifier, MutationRecord, ObserveOptions
from .host.scheduler import Scheduler
from .host.tree import (
    has_ignored_ancestor,
    has_marked_ancestor,
    has_marker,
    is_attached,
    is_element,
    is_ignored,
    is_text,
    is_within_marked,
)
from .logging.config import get_scanner_logger, log_pass_summary
from .patterns.cache import PatternCache
from .patterns.finder import find_prices, might_contain_price
from .state.machine import transition_debounce, transition_observer
from .state.models import (
    DebouncePhase,
    NodeQueue,
    ObserverPhase,
    OverflowReport,
    PassReport,
    ScanMetrics,
    ScannerState,
)

logger = get_scanner_logger(__name__)

AnnotateCallback = Callable[[str, TimeBreakdown, Any], None]
OverflowCallback = Callable[[OverflowReport], None]

_scanner_ids = itertools.count(1)


class IncrementalScanner:
    """
    Watches a document subtree and annotates prices as they appear.

    Observer lifecycle: STOPPED → OBSERVING → STOPPED.
    Debounce cycle: IDLE → TIMER_ARMED → PROCESSING → IDLE.
    """

    def __init__(
        self,
        config: CurrencyFormatConfig,
        wage: WageConfig,
        annotate: AnnotateCallback,
        *,
        notifier: MutationNotifier,
        scheduler: Scheduler,
        params: Optional[ScannerParams] = None,
        extractor: Optional[PriceExtractor] = None,
        site_handlers: Optional[SiteHandlerRegistry] = None,
        enable_structural: bool = True,
        rates: Optional[ExchangeRates] = None,
        on_overflow: Optional[OverflowCallback] = None,
        scanner_id: Optional[str] = None,
    ) -> None:
        """Initialize the scanner; nothing is observed until ``start``."""
        self.config = config
        self.wage = wage
        self.annotate = annotate
        self.notifier = notifier
        self.scheduler = scheduler
        self.params = params or ScannerParams()
        self.rates = rates
        self.on_overflow = on_overflow
        self.scanner_id = scanner_id or f"scanner-{next(_scanner_ids)}"

        if extractor is None:
            extractor = PriceExtractor(
                config,
                cache=PatternCache(),
                site_handlers=site_handlers,
                enable_structural=enable_structural,
            )
        self.extractor = extractor
        self.cache = extractor.cache

        self.state = ScannerState()
        self.metrics = ScanMetrics()
        self.target: Optional[Any] = None
        self.logger = logger.bind(scanner_id=self.scanner_id)

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        annotate: AnnotateCallback,
        *,
        notifier: MutationNotifier,
        scheduler: Scheduler,
        **kwargs: Any,
    ) -> "IncrementalScanner":
        """
        Build a scanner from a merged configuration dictionary.

        Raises:
            ConfigurationError: If the configuration fails validation
        """
        errors = ConfigValidator.validate_config(config)
        if errors:
            raise ConfigurationError(
                "Scanner configuration is invalid",
                errors=[f"{err.field}: {err.message} (got: {err.value})" for err in errors],
            )

        extraction = build_extraction_params(config)
        site_handlers = None
        if extraction.enable_site_handlers:
            site_handlers = default_registry(extraction.site_domain)

        kwargs.setdefault("site_handlers", site_handlers)
        kwargs.setdefault("enable_structural", extraction.enable_structural)
        kwargs.setdefault("rates", build_exchange_rates(config))

        return cls(
            build_format_config(config),
            build_wage_config(config),
            annotate,
            notifier=notifier,
            scheduler=scheduler,
            params=build_scanner_params(config),
            **kwargs,
        )

    # Lifecycle

    @property
    def is_observing(self) -> bool:
        return self.state.phase == ObserverPhase.OBSERVING

    def start(self, target: Any) -> "ScannerHandle":
        """
        Begin observing ``target`` and its subtree.

        Raises:
            ScannerStateError: If the scanner is already observing
            PatternBuildError: If the currency format cannot be compiled
            HostFacilityError: If the notifier refuses the registration
        """
        if self.state.phase != ObserverPhase.STOPPED:
            raise ScannerStateError(
                "Scanner is already observing",
                current_state=self.state.phase.value,
                attempted_transition=ObserverPhase.OBSERVING.value,
            )
        if self.config.direction != DirectionMode.FORWARD:
            raise ValueError("Scanning requires a forward currency format; reverse formats only revert annotations")

        # Fail fast on unusable formats instead of once per node
        find_prices("", self.config, self.cache)

        try:
            handle = self.notifier.register(target, ObserveOptions(), self._on_mutations)
        except HostFacilityError as e:
            self.logger.error("Mutation observer registration refused", error=str(e), context=e.context)
            raise
        except Exception as e:
            self.logger.error(
                "Mutation observer registration failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise HostFacilityError(
                "Mutation observer registration failed",
                facility="mutation_notifier",
                operation="register",
            ) from e

        self.target = target
        self.state.observer_handle = handle
        transition_observer(self.state, ObserverPhase.OBSERVING, self.scanner_id, trigger="start")

        self.logger.info(
            "Scanner started",
            target=getattr(target, "name", type(target).__name__),
            currency=self.config.iso_code,
            debounce_interval_ms=self.params.debounce_interval_ms,
            max_pending_nodes=self.params.max_pending_nodes,
        )

        if self.params.initial_scan and not is_within_marked(target):
            self.state.pending_nodes.add(target)
            self.metrics.nodes_admitted += 1
            try:
                self._arm_timer(trigger="initial_scan")
            except HostFacilityError:
                self._teardown(trigger="start_failed")
                raise

        return ScannerHandle(scanner=self)

    def stop(self) -> bool:
        """
        Stop observing and release every resource.

        A pass already running finishes; nothing new is scheduled.

        Returns:
            True if the scanner was observing, False if there was nothing to do
        """
        if self.state.phase == ObserverPhase.STOPPED:
            return False

        self._teardown(trigger="stop")
        self.logger.info("Scanner stopped", **self.metrics.get_stats())
        return True

    def _teardown(self, trigger: str) -> None:
        if self.state.debounce_timer is not None:
            self.state.debounce_timer.cancel()
            self.state.debounce_timer = None

        handle = self.state.observer_handle
        if handle is not None:
            try:
                self.notifier.unregister(handle)
            except Exception as e:
                self.logger.warning(
                    "Observer unregistration failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

        self.state.clear_queues()
        self.state.observer_handle = None
        transition_observer(self.state, ObserverPhase.STOPPED, self.scanner_id, trigger=trigger)

        # an in-flight pass resets the debounce cycle when it ends
        if not self.state.is_processing and self.state.debounce != DebouncePhase.IDLE:
            transition_debounce(self.state, DebouncePhase.IDLE, self.scanner_id, trigger=trigger)

    def flush(self) -> Optional[PassReport]:
        """Run the pending pass now instead of waiting for the debounce timer."""
        if self.state.is_processing or self.state.phase != ObserverPhase.OBSERVING:
            return None
        if self.state.debounce_timer is None and self.state.pending_size == 0:
            return None
        if self.state.debounce_timer is not None:
            self.state.debounce_timer.cancel()
            self.state.debounce_timer = None
        return self._run_pass(trigger="flush")

    # Admission

    def _on_mutations(self, records: list[MutationRecord]) -> None:
        """Notifier callback: admit the batch and (re)arm the debounce timer."""
        if self.state.phase != ObserverPhase.OBSERVING:
            self.logger.debug("Mutation batch after stop ignored", records=len(records))
            return

        self.metrics.batches += 1
        admitted = 0
        candidates = self._admission_candidates(records)

        try:
            for queue, node in candidates:
                if node in queue:
                    continue
                if self.state.pending_size >= self.params.max_pending_nodes:
                    raise QueueOverflowError(
                        "Pending node limit reached",
                        limit=self.params.max_pending_nodes,
                        pending_size=self.state.pending_size,
                    )
                if queue.add(node):
                    admitted += 1
        except QueueOverflowError as e:
            # the node that hit the limit plus the rest of the batch
            dropped = 1 + sum(1 for q, n in candidates if n not in q)
            self._report_overflow(e, dropped)

        self.metrics.nodes_admitted += admitted
        self._rearm_after_batch(trigger="mutation_batch")

    def _admission_candidates(self, records: list[MutationRecord]) -> Iterator[tuple[NodeQueue, Any]]:
        for record in records:
            if record.kind == MutationKind.ELEMENT_ADDED:
                for node in record.added_nodes:
                    if is_element(node):
                        if self._admits_element(node):
                            yield self.state.pending_nodes, node
                    elif is_text(node) and self._admits_text(node):
                        yield self.state.pending_text_nodes, node
            elif record.kind == MutationKind.TEXT_CHANGED:
                if is_text(record.target) and self._admits_text(record.target):
                    yield self.state.pending_text_nodes, record.target

    def _admits_element(self, element: Any) -> bool:
        if has_marker(element) or is_ignored(element):
            return False
        if has_marked_ancestor(element) or has_ignored_ancestor(element):
            return False
        return not self._covered_by_pending(element)

    def _admits_text(self, text_node: Any) -> bool:
        if has_marked_ancestor(text_node) or has_ignored_ancestor(text_node):
            return False
        return not self._covered_by_pending(text_node)

    def _covered_by_pending(self, node: Any) -> bool:
        """True when an ancestor is already queued; its pass will reach the node."""
        parent = node.parent
        while parent is not None:
            if parent in self.state.pending_nodes:
                return True
            parent = parent.parent
        return False

    def _report_overflow(self, error: QueueOverflowError, dropped: int) -> None:
        self.metrics.overflow_events += 1
        self.metrics.nodes_dropped += dropped

        self.logger.warning(
            "Pending node queue full, dropping rest of batch",
            limit=error.limit,
            pending_size=error.pending_size,
            dropped=dropped,
            fallback_strategy=error.fallback_strategy,
        )

        if self.on_overflow is not None:
            self.on_overflow(OverflowReport(
                scanner_id=self.scanner_id,
                limit=error.limit,
                pending_size=error.pending_size,
                dropped=dropped,
            ))

    # Debounce

    def _arm_timer(self, trigger: str) -> None:
        if self.state.debounce_timer is not None:
            self.state.debounce_timer.cancel()
            self.state.debounce_timer = None

        try:
            timer = self.scheduler.call_later(self.params.debounce_interval_s, self._on_timer)
        except HostFacilityError:
            raise
        except Exception as e:
            raise HostFacilityError(
                "Debounce timer scheduling failed",
                facility="scheduler",
                operation="call_later",
            ) from e

        self.state.debounce_timer = timer
        next_phase = DebouncePhase.PROCESSING if self.state.is_processing else DebouncePhase.TIMER_ARMED
        transition_debounce(self.state, next_phase, self.scanner_id, trigger=trigger)

    def _rearm_after_batch(self, trigger: str) -> None:
        """
        Arm the debounce timer from a host callback.

        A scheduling failure must not reach the code that mutated the
        document. Admitted nodes stay queued for the next batch or flush().
        """
        try:
            self._arm_timer(trigger=trigger)
        except HostFacilityError as e:
            self.metrics.scheduling_failures += 1
            self.logger.error(
                "Debounce timer could not be armed, pending nodes wait for the next batch",
                error=str(e),
                facility=e.facility,
                operation=e.operation,
                pending_size=self.state.pending_size,
            )
            if not self.state.is_processing and self.state.debounce == DebouncePhase.TIMER_ARMED:
                transition_debounce(self.state, DebouncePhase.IDLE, self.scanner_id, trigger="schedule_failed")

    def _on_timer(self) -> None:
        """Timer callback: run one processing pass over everything queued so far."""
        self.state.debounce_timer = None

        if self.state.phase != ObserverPhase.OBSERVING:
            return

        if self.state.is_processing:
            self._rearm_after_batch(trigger="timer_during_pass")
            return

        self._run_pass(trigger="timer_fired")

    # Processing

    def _run_pass(self, trigger: str) -> PassReport:
        # queues are emptied before extraction so mutations made by
        # annotation land in the next cycle
        elements = self.state.pending_nodes.drain()
        text_nodes = self.state.pending_text_nodes.drain()
        transition_debounce(self.state, DebouncePhase.PROCESSING, self.scanner_id, trigger=trigger)

        try:
            report = self._process(elements, text_nodes)
        finally:
            if self.state.phase == ObserverPhase.STOPPED:
                self.state.debounce_timer = None
            next_phase = DebouncePhase.TIMER_ARMED if self.state.debounce_timer is not None else DebouncePhase.IDLE
            transition_debounce(self.state, next_phase, self.scanner_id, trigger="pass_complete")

        return report

    def _process(self, elements: list[Any], text_nodes: list[Any]) -> PassReport:
        start_time = self.metrics.record_pass_start()
        visited = NodeQueue()
        counts = {
            "elements": len(elements),
            "text_nodes": len(text_nodes),
            "candidates": 0,
            "annotated": 0,
            "conversion_failures": 0,
            "node_errors": 0,
        }

        for element in elements:
            if self._is_live(element):
                self._process_subtree(element, visited, counts)

        for text_node in text_nodes:
            if self._is_live(text_node) and visited.add(text_node):
                self._process_text(text_node, counts)

        report = self.metrics.record_pass_end(start_time, counts)
        log_pass_summary(self.logger, self.scanner_id, report)
        return report

    def _is_live(self, node: Any) -> bool:
        if self.target is None or not is_attached(node, self.target):
            return False
        return not is_within_marked(node) and not has_ignored_ancestor(node)

    def _process_subtree(self, root: Any, visited: NodeQueue, counts: dict[str, int]) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if not visited.add(node):
                continue

            if is_element(node):
                if has_marker(node) or is_ignored(node):
                    continue
                if self.extractor.is_element_candidate(node) and \
                        self._process_candidate(node, counts, include_text=False):
                    continue
                stack.extend(reversed(list(node.contents)))
            elif is_text(node):
                self._process_text(node, counts)

    def _process_text(self, text_node: Any, counts: dict[str, int]) -> None:
        text = str(text_node)
        if len(text) > self.params.max_text_length:
            self.logger.debug("Skipping oversized text node", length=len(text))
            return
        if not might_contain_price(text, self.config):
            return
        self._process_candidate(text_node, counts, include_text=True)

    def _process_candidate(self, node: Any, counts: dict[str, int], include_text: bool) -> bool:
        """
        Extract, convert and annotate one candidate.

        Returns:
            True if the candidate held a price, converted or not
        """
        counts["candidates"] += 1
        self.metrics.candidates += 1

        try:
            token = self.extractor.extract(node, include_text=include_text)
            if token is None:
                self.metrics.no_matches += 1
                return False

            result = convert_token(token, self.wage, self.rates)
            if not result.success:
                counts["conversion_failures"] += 1
                self.metrics.conversion_failures += 1
                self.logger.debug(
                    "Price not converted",
                    reason=result.reason.value,
                    raw_text=token.raw_text,
                    currency=token.currency_unit,
                )
                return True

            try:
                self.annotate(token.raw_text, result, token.source_node)
            except Exception:
                self.metrics.annotation_failures += 1
                raise

            counts["annotated"] += 1
            self.metrics.annotations += 1
            return True

        except PriceExtractionError as e:
            counts["node_errors"] += 1
            self.metrics.node_errors += 1
            self.logger.warning(
                "Price extraction failed for node",
                error=str(e),
                error_type=type(e).__name__,
                context=e.context,
            )
            return False
        except Exception as e:
            counts["node_errors"] += 1
            self.metrics.node_errors += 1
            self.logger.warning(
                "Failed to process node",
                error=str(e),
                error_type=type(e).__name__,
                node_kind="element" if is_element(node) else "text",
            )
            return False

    def get_stats(self) -> dict[str, Any]:
        """Scanner, extractor and pattern cache metrics."""
        return {
            "scanner_id": self.scanner_id,
            "phase": self.state.phase.value,
            "debounce": self.state.debounce.value,
            "pending": self.state.pending_size,
            **self.metrics.get_stats(),
            "extraction": self.extractor.stats.get_stats(),
            "pattern_cache": self.cache.get_stats(),
        }


@dataclass(frozen=True)
class ScannerHandle:
    """Handle returned by ``start``; stopping it stops the scanner."""

    scanner: IncrementalScanner

    @property
    def scanner_id(self) -> str:
        return self.scanner.scanner_id

    @property
    def is_active(self) -> bool:
        return self.scanner.is_observing

    def stop(self) -> bool:
        return self.scanner.stop()


def start(
    target: Any,
    config: CurrencyFormatConfig,
    callback: AnnotateCallback,
    *,
    wage: WageConfig,
    notifier: MutationNotifier,
    scheduler: Scheduler,
    **kwargs: Any,
) -> ScannerHandle:
    """
    Start an incremental scanner over ``target``.

    Args:
        target: Root element to observe
        config: Currency format snapshot
        callback: Annotation callback ``(original_text, breakdown, source_node)``
        wage: Wage snapshot
        notifier: Host mutation notification facility
        scheduler: Host timer facility
        **kwargs: Further IncrementalScanner options

    Returns:
        Handle for stopping the scanner
    """
    scanner = IncrementalScanner(
        config,
        wage,
        callback,
        notifier=notifier,
        scheduler=scheduler,
        **kwargs,
    )
    return scanner.start(target)


def stop(handle: ScannerHandle) -> bool:
    """Stop the scanner behind ``handle``; False if it was already stopped."""
    return handle.stop()
