"""
Structured logging setup for the price scanner.

Every module logs through structlog on top of the stdlib ``logging``
backend. Call ``configure_logging`` (or ``configure_from_settings`` with a
merged configuration) once at startup; module loggers obtained before that
pick up the configuration on first use.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor


def _build_processors(
    format_json: bool,
    include_timestamp: bool,
    include_caller: bool,
    extra_processors: Optional[list[Processor]],
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ))
    processors.extend(extra_processors or ())

    renderer: Processor
    if format_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    processors.append(renderer)
    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Configure structlog for the whole package.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render events as JSON lines instead of console output
        include_timestamp: Add an ISO timestamp to every event
        include_caller: Add the emitting file name and line number
        extra_processors: Processors run before rendering
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s",
    )

    structlog.configure(
        processors=_build_processors(format_json, include_timestamp, include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(config: dict[str, Any]) -> None:
    """Configure logging from the ``logging`` section of a merged config."""
    section = config.get("logging") or {}
    configure_logging(
        level=str(section.get("level", "INFO")),
        format_json=bool(section.get("format_json", False)),
        include_caller=bool(section.get("include_caller", False)),
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Module logger; pass ``__name__``."""
    return structlog.get_logger(name)


def get_scanner_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for the incremental scanner.

    Scanner events (lifecycle transitions, batches, passes, overflow)
    carry the ``scanner`` subsystem tag so they can be filtered together.
    """
    return get_logger(name).bind(subsystem="scanner")


def get_extraction_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound for price extraction and conversion events."""
    return get_logger(name).bind(subsystem="extraction")


def log_state_transition(
    logger: FilteringBoundLogger,
    scanner_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a scanner state transition with standardized format.

    Args:
        logger: Structlog logger instance
        scanner_id: ID of the scanner transitioning
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        scanner_id=scanner_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("State transition")


def log_pass_summary(
    logger: FilteringBoundLogger,
    scanner_id: str,
    report: Any,
) -> None:
    """
    Log the outcome of one processing pass.

    Args:
        logger: Structlog logger instance
        scanner_id: ID of the scanner that ran the pass
        report: PassReport produced by the pass
    """
    bound_logger = logger.bind(
        scanner_id=scanner_id,
        pass_number=report.pass_number,
        elements=report.elements,
        text_nodes=report.text_nodes,
        candidates=report.candidates,
        annotated=report.annotated,
        conversion_failures=report.conversion_failures,
        node_errors=report.node_errors,
        duration_ms=round(report.duration_ms, 3),
    )

    if report.node_errors:
        bound_logger.warning("Processing pass completed with node errors")
    else:
        bound_logger.info("Processing pass completed")
