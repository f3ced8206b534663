"""Submission state machine for the form engine.

This module implements the lifecycle that governs whether the external submit
handler may run:

    IDLE -> SUBMITTING -> SUCCESS
                 |
                 +-----> IDLE      (handler failed)

SUCCESS may move on to SUBMITTING (the next valid submit) or back to IDLE
(an invalid submit, or an explicit reset).

The state machine:
- Enforces valid transitions between states
- Records an audit trail of transitions and other engine events
- Dispatches every recorded event to an optional EventEmitter

Usage:
    >>> from formengine.state_machine import SubmissionStateMachine
    >>> sm = SubmissionStateMachine()
    >>> sm.state
    <SubmissionState.IDLE: 'idle'>
    >>> sm.transition_to(SubmissionState.SUBMITTING)
    >>> sm.state
    <SubmissionState.SUBMITTING: 'submitting'>
    >>> len(sm.get_events())
    1
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Set
import uuid

from formengine.events import EventEmitter, FormEvent
from formengine.types import EventType, FieldName, SubmissionState


class InvalidStateTransitionError(Exception):
    """Raised when attempting an invalid state transition.

    Attributes:
        current_state: The current state before the attempted transition
        target_state: The target state that was attempted
    """

    def __init__(self, current_state: SubmissionState, target_state: SubmissionState, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


# Default event type recorded when entering each state
STATE_TO_EVENT_TYPE: Dict[SubmissionState, EventType] = {
    SubmissionState.SUBMITTING: EventType.SUBMISSION_STARTED,
    SubmissionState.SUCCESS: EventType.SUBMISSION_SUCCEEDED,
    SubmissionState.IDLE: EventType.FORM_RESET,
}

# Events kept per session; the oldest are dropped first
DEFAULT_MAX_EVENTS = 1000


VALID_TRANSITIONS: Dict[SubmissionState, Set[SubmissionState]] = {
    SubmissionState.IDLE: {
        SubmissionState.SUBMITTING,
    },
    SubmissionState.SUBMITTING: {
        SubmissionState.SUCCESS,
        SubmissionState.IDLE,
    },
    SubmissionState.SUCCESS: {
        SubmissionState.SUBMITTING,
        SubmissionState.IDLE,
    },
}


@dataclass
class SubmissionStateMachine:
    """State machine for one form session's submission lifecycle.

    Attributes:
        state: Current submission state
        emitter: Optional emitter that receives every recorded event
        max_events: Capacity of the in-memory event log. Once full, the
            oldest event is discarded; the emitter still sees every event.

    Examples:
        >>> sm = SubmissionStateMachine()
        >>> sm.can_transition_to(SubmissionState.SUCCESS)
        False
        >>> sm.can_transition_to(SubmissionState.SUBMITTING)
        True
    """

    state: SubmissionState = SubmissionState.IDLE
    emitter: Optional[EventEmitter] = field(default=None, repr=False)
    max_events: int = DEFAULT_MAX_EVENTS
    _events: Deque[FormEvent] = field(init=False, repr=False)

    def __post_init__(self):
        if self.max_events < 1:
            raise ValueError(f"max_events must be positive, got {self.max_events}")
        self._events = deque(maxlen=self.max_events)

    def can_transition_to(self, target_state: SubmissionState) -> bool:
        """Check if transition to target state is valid."""
        return target_state in VALID_TRANSITIONS.get(self.state, set())

    def transition_to(
        self,
        target_state: SubmissionState,
        event_type: Optional[EventType] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Transition to a new state and record a transition event.

        Args:
            target_state: The state to transition to
            event_type: Event to record; defaults to STATE_TO_EVENT_TYPE[target_state]
            payload: Extra payload merged into the from/to transition payload

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            raise InvalidStateTransitionError(
                current_state=self.state,
                target_state=target_state,
                message=(
                    f"Invalid state transition: cannot transition from "
                    f"'{self.state.value}' to '{target_state.value}'. "
                    f"Valid transitions from '{self.state.value}' are: "
                    f"{', '.join(sorted(s.value for s in VALID_TRANSITIONS[self.state]))}"
                ),
            )

        old_state = self.state
        self.state = target_state

        body: Dict[str, Any] = {"from_state": old_state.value, "to_state": target_state.value}
        if payload:
            body.update(payload)
        self.record(event_type or STATE_TO_EVENT_TYPE[target_state], payload=body)

    def record(
        self,
        event_type: EventType,
        field: Optional[FieldName] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> FormEvent:
        """Record a non-transition event at the current state.

        Returns:
            The recorded event
        """
        event = FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            ts=datetime.now(timezone.utc),
            state=self.state,
            field=field,
            payload=payload,
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)
        return event

    def get_events(self) -> List[FormEvent]:
        """Get the retained events in chronological order."""
        return list(self._events)


__all__ = [
    "SubmissionStateMachine",
    "InvalidStateTransitionError",
    "STATE_TO_EVENT_TYPE",
    "DEFAULT_MAX_EVENTS",
    "VALID_TRANSITIONS",
]
