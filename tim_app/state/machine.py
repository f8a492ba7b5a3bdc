"""
Explicit state machines for the scanner.

Observer lifecycle:  STOPPED → OBSERVING → STOPPED
Debounce cycle:      IDLE → TIMER_ARMED → PROCESSING → IDLE

A batch arriving during a pass re-arms the timer without leaving
PROCESSING; when the pass ends the cycle continues in TIMER_ARMED.
flush() may start a pass from IDLE when nodes were queued but the timer
could not be armed.
"""

from typing import Any, Optional

from ..errors import ScannerStateError
from ..logging.config import get_scanner_logger, log_state_transition
from .models import DebouncePhase, ObserverPhase, ScannerState

state_logger = get_scanner_logger(__name__)

OBSERVER_TRANSITIONS: dict[ObserverPhase, frozenset] = {
    ObserverPhase.STOPPED: frozenset({ObserverPhase.OBSERVING}),
    ObserverPhase.OBSERVING: frozenset({ObserverPhase.STOPPED}),
}

DEBOUNCE_TRANSITIONS: dict[DebouncePhase, frozenset] = {
    DebouncePhase.IDLE: frozenset({
        DebouncePhase.TIMER_ARMED,
        DebouncePhase.PROCESSING,                    # flush of nodes queued without a timer
    }),
    DebouncePhase.TIMER_ARMED: frozenset({
        DebouncePhase.TIMER_ARMED,                   # re-armed by a later batch
        DebouncePhase.PROCESSING,
        DebouncePhase.IDLE,                          # cancelled by stop
    }),
    DebouncePhase.PROCESSING: frozenset({
        DebouncePhase.PROCESSING,                    # batch arrived mid-pass
        DebouncePhase.IDLE,
        DebouncePhase.TIMER_ARMED,
    }),
}


def transition_observer(
    state: ScannerState,
    to_phase: ObserverPhase,
    scanner_id: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """Move the observer lifecycle, rejecting transitions outside the table."""
    if to_phase not in OBSERVER_TRANSITIONS[state.phase]:
        raise ScannerStateError(
            f"Cannot move scanner from {state.phase.value} to {to_phase.value}",
            current_state=state.phase.value,
            attempted_transition=to_phase.value,
            context={"scanner_id": scanner_id, "trigger": trigger},
        )

    log_state_transition(
        state_logger,
        scanner_id=scanner_id,
        from_state=state.phase.value,
        to_state=to_phase.value,
        trigger=trigger,
        context=context,
    )
    state.phase = to_phase


def transition_debounce(
    state: ScannerState,
    to_phase: DebouncePhase,
    scanner_id: str,
    trigger: str,
) -> None:
    """Move the debounce cycle, rejecting transitions outside the table."""
    if to_phase not in DEBOUNCE_TRANSITIONS[state.debounce]:
        raise ScannerStateError(
            f"Cannot move debounce cycle from {state.debounce.value} to {to_phase.value}",
            current_state=state.debounce.value,
            attempted_transition=to_phase.value,
            context={"scanner_id": scanner_id, "trigger": trigger},
        )

    if to_phase != state.debounce:
        log_state_transition(
            state_logger,
            scanner_id=scanner_id,
            from_state=state.debounce.value,
            to_state=to_phase.value,
            trigger=trigger,
        )
    state.debounce = to_phase
