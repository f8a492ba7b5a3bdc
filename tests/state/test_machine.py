"""Tests for the scanner state machines."""

import pytest

from tim_app.errors import ScannerStateError
from tim_app.state.machine import transition_debounce, transition_observer
from tim_app.state.models import DebouncePhase, ObserverPhase, ScannerState


class TestObserverTransitions:
    """Test observer lifecycle transitions."""

    def test_start_and_stop(self):
        """Test STOPPED → OBSERVING → STOPPED."""
        state = ScannerState()
        transition_observer(state, ObserverPhase.OBSERVING, "scanner-test", trigger="start")
        assert state.phase == ObserverPhase.OBSERVING

        transition_observer(state, ObserverPhase.STOPPED, "scanner-test", trigger="stop")
        assert state.phase == ObserverPhase.STOPPED

    def test_double_start_rejected(self):
        """Test that OBSERVING → OBSERVING is invalid."""
        state = ScannerState(phase=ObserverPhase.OBSERVING)
        with pytest.raises(ScannerStateError) as exc_info:
            transition_observer(state, ObserverPhase.OBSERVING, "scanner-test", trigger="start")

        error = exc_info.value
        assert error.current_state == "observing"
        assert error.attempted_transition == "observing"
        assert error.context["scanner_id"] == "scanner-test"
        assert error.recoverable is False


class TestDebounceTransitions:
    """Test debounce cycle transitions."""

    def test_full_cycle(self):
        """Test IDLE → TIMER_ARMED → PROCESSING → IDLE."""
        state = ScannerState()
        for phase in (DebouncePhase.TIMER_ARMED, DebouncePhase.PROCESSING, DebouncePhase.IDLE):
            transition_debounce(state, phase, "scanner-test", trigger="test")
            assert state.debounce == phase

    def test_rearm_while_armed(self):
        """Test that a later batch may re-arm an armed timer."""
        state = ScannerState(debounce=DebouncePhase.TIMER_ARMED)
        transition_debounce(state, DebouncePhase.TIMER_ARMED, "scanner-test", trigger="batch")
        assert state.debounce == DebouncePhase.TIMER_ARMED

    def test_batch_during_pass(self):
        """Test that a pass ending with a pending timer continues in TIMER_ARMED."""
        state = ScannerState(debounce=DebouncePhase.PROCESSING)
        transition_debounce(state, DebouncePhase.PROCESSING, "scanner-test", trigger="batch")
        transition_debounce(state, DebouncePhase.TIMER_ARMED, "scanner-test", trigger="pass_complete")
        assert state.debounce == DebouncePhase.TIMER_ARMED

    def test_flush_from_idle(self):
        """Test that a flushed pass may start without an armed timer."""
        state = ScannerState()
        transition_debounce(state, DebouncePhase.PROCESSING, "scanner-test", trigger="flush")
        assert state.debounce == DebouncePhase.PROCESSING

    def test_idle_cannot_stay_idle(self):
        """Test that an idle cycle cannot be reset again."""
        state = ScannerState()
        with pytest.raises(ScannerStateError):
            transition_debounce(state, DebouncePhase.IDLE, "scanner-test", trigger="test")
        assert state.debounce == DebouncePhase.IDLE
