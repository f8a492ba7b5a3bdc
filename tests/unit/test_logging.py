"""Tests for the structured logging helpers."""

from unittest.mock import Mock

from tim_app.logging import configure_from_settings, configure_logging, get_logger
from tim_app.logging.config import log_pass_summary, log_state_transition
from tim_app.state.models import PassReport


def _report(node_errors: int = 0) -> PassReport:
    return PassReport(
        pass_number=3,
        elements=2,
        text_nodes=5,
        candidates=4,
        annotated=3,
        conversion_failures=1,
        node_errors=node_errors,
        duration_ms=1.23456,
    )


class TestLoggingHelpers:
    """Test standardized log events."""

    def setup_method(self):
        """Set up a mock logger whose bind() returns a capturing logger."""
        configure_logging(level="DEBUG", format_json=True)
        self.bound = Mock()
        self.logger = Mock()
        self.logger.bind.return_value = self.bound
        self.bound.bind.return_value = self.bound

    def test_state_transition(self):
        """Test that transitions are logged at debug level with their fields."""
        log_state_transition(self.logger, "scanner-1", "idle", "timer_armed", trigger="mutation_batch")

        self.logger.bind.assert_called_once_with(
            scanner_id="scanner-1",
            from_state="idle",
            to_state="timer_armed",
            trigger="mutation_batch",
        )
        self.bound.debug.assert_called_once_with("State transition")

    def test_state_transition_context(self):
        """Test that extra context is bound when given."""
        log_state_transition(self.logger, "scanner-1", "stopped", "observing", "start", context={"x": 1})
        self.bound.bind.assert_called_once_with(context={"x": 1})

    def test_pass_summary_info(self):
        """Test that clean passes are logged at info level."""
        log_pass_summary(self.logger, "scanner-1", _report())

        kwargs = self.logger.bind.call_args.kwargs
        assert kwargs["annotated"] == 3
        assert kwargs["duration_ms"] == 1.235
        self.bound.info.assert_called_once_with("Processing pass completed")
        self.bound.warning.assert_not_called()

    def test_pass_summary_warning(self):
        """Test that passes with node errors are logged as warnings."""
        log_pass_summary(self.logger, "scanner-1", _report(node_errors=2))
        self.bound.warning.assert_called_once_with("Processing pass completed with node errors")

    def test_configure_from_settings(self):
        """Test that the logging section of a merged config is applied."""
        configure_from_settings({"logging": {"level": "warning", "format_json": True}})
        configure_from_settings({})

    def test_get_logger(self):
        """Test that module loggers can be created and used."""
        logger = get_logger("tim_app.test")
        logger.info("Logger works", component="test")
