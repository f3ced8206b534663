"""Unit tests for the submission state machine.

Tests cover:
- Initialization
- Valid and invalid transitions
- Event recording and dispatch
- Event log capacity
"""

import pytest

from formengine.events import EventEmitter
from formengine.state_machine import (
    DEFAULT_MAX_EVENTS,
    InvalidStateTransitionError,
    SubmissionStateMachine,
    VALID_TRANSITIONS,
)
from formengine.types import EventType, FieldName, SubmissionState


class TestStateMachineInitialization:
    """Test state machine initialization and defaults."""

    def test_defaults_to_idle(self):
        """Should start in IDLE with no events."""
        sm = SubmissionStateMachine()
        assert sm.state == SubmissionState.IDLE
        assert sm.get_events() == []

    def test_init_with_custom_state(self):
        """Should accept an explicit starting state."""
        sm = SubmissionStateMachine(state=SubmissionState.SUCCESS)
        assert sm.state == SubmissionState.SUCCESS


class TestValidTransitions:
    """Test the allowed lifecycle paths."""

    def test_idle_to_submitting_to_success(self):
        """Should follow the happy path."""
        sm = SubmissionStateMachine()
        sm.transition_to(SubmissionState.SUBMITTING)
        sm.transition_to(SubmissionState.SUCCESS)
        assert sm.state == SubmissionState.SUCCESS

    def test_submitting_back_to_idle(self):
        """Should allow a failed submission to return to IDLE."""
        sm = SubmissionStateMachine(state=SubmissionState.SUBMITTING)
        sm.transition_to(SubmissionState.IDLE, EventType.SUBMISSION_FAILED)
        assert sm.state == SubmissionState.IDLE

    def test_success_to_submitting_and_idle(self):
        """Should allow leaving SUCCESS for a new submit or a reset."""
        assert SubmissionStateMachine(state=SubmissionState.SUCCESS).can_transition_to(
            SubmissionState.SUBMITTING
        )
        assert SubmissionStateMachine(state=SubmissionState.SUCCESS).can_transition_to(
            SubmissionState.IDLE
        )


class TestInvalidTransitions:
    """Test that illegal transitions are refused."""

    @pytest.mark.parametrize(
        "current, target",
        [
            (SubmissionState.IDLE, SubmissionState.SUCCESS),
            (SubmissionState.IDLE, SubmissionState.IDLE),
            (SubmissionState.SUBMITTING, SubmissionState.SUBMITTING),
            (SubmissionState.SUCCESS, SubmissionState.SUCCESS),
        ],
    )
    def test_rejected(self, current, target):
        """Should raise and leave the state unchanged."""
        sm = SubmissionStateMachine(state=current)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            sm.transition_to(target)
        assert sm.state == current
        assert exc_info.value.current_state == current
        assert exc_info.value.target_state == target
        assert current.value in str(exc_info.value)

    def test_every_state_has_an_exit(self):
        """Should never leave the form stuck in a terminal state."""
        for state, targets in VALID_TRANSITIONS.items():
            assert targets, f"{state} has no outgoing transitions"


class TestEventRecording:
    """Test events produced by the state machine."""

    def test_transition_events_use_default_types(self):
        """Should map target states to their default event types."""
        sm = SubmissionStateMachine()
        sm.transition_to(SubmissionState.SUBMITTING)
        sm.transition_to(SubmissionState.SUCCESS)
        events = sm.get_events()
        assert [e.type for e in events] == [
            EventType.SUBMISSION_STARTED,
            EventType.SUBMISSION_SUCCEEDED,
        ]
        assert events[0].payload == {"from_state": "idle", "to_state": "submitting"}
        assert events[1].state == SubmissionState.SUCCESS

    def test_explicit_event_type_and_payload(self):
        """Should record the supplied event type and merge the payload."""
        sm = SubmissionStateMachine(state=SubmissionState.SUBMITTING)
        sm.transition_to(SubmissionState.IDLE, EventType.SUBMISSION_FAILED, {"reason": "IOError"})
        event = sm.get_events()[-1]
        assert event.type == EventType.SUBMISSION_FAILED
        assert event.payload["reason"] == "IOError"
        assert event.payload["to_state"] == "idle"

    def test_record_keeps_state(self):
        """Should record non-transition events at the current state."""
        sm = SubmissionStateMachine()
        event = sm.record(EventType.FIELD_BLURRED, field=FieldName.EMAIL)
        assert sm.state == SubmissionState.IDLE
        assert event.field == FieldName.EMAIL
        assert sm.get_events() == [event]

    def test_events_dispatched_to_emitter(self):
        """Should forward each recorded event to the emitter."""
        emitter = EventEmitter()
        seen = []
        emitter.on_any(seen.append)
        sm = SubmissionStateMachine(emitter=emitter)
        sm.record(EventType.FORM_RESET)
        sm.transition_to(SubmissionState.SUBMITTING)
        assert [e.type for e in seen] == [EventType.FORM_RESET, EventType.SUBMISSION_STARTED]

    def test_get_events_returns_copy(self):
        """Should not expose the internal list."""
        sm = SubmissionStateMachine()
        sm.get_events().append("junk")
        assert sm.get_events() == []

    def test_event_ids_unique(self):
        """Should give each event its own id."""
        sm = SubmissionStateMachine()
        for _ in range(5):
            sm.record(EventType.FIELD_EDITED)
        assert len({e.event_id for e in sm.get_events()}) == 5


class TestEventLogCapacity:
    """Test the bounded event log."""

    def test_oldest_events_dropped(self):
        """Should keep only the newest max_events events."""
        sm = SubmissionStateMachine(max_events=3)
        for name in [FieldName.FIRST_NAME, FieldName.LAST_NAME, FieldName.EMAIL, FieldName.PHONE]:
            sm.record(EventType.FIELD_EDITED, field=name)

        events = sm.get_events()
        assert [e.field for e in events] == [FieldName.LAST_NAME, FieldName.EMAIL, FieldName.PHONE]

    def test_emitter_sees_dropped_events(self):
        """Should dispatch every event even when the log discards it."""
        emitter = EventEmitter()
        seen = []
        emitter.on_any(seen.append)
        sm = SubmissionStateMachine(emitter=emitter, max_events=1)

        sm.record(EventType.FIELD_BLURRED, field=FieldName.EMAIL)
        sm.transition_to(SubmissionState.SUBMITTING)

        assert len(seen) == 2
        assert sm.get_events() == [seen[-1]]

    def test_default_capacity(self):
        """Should default to DEFAULT_MAX_EVENTS."""
        sm = SubmissionStateMachine()
        for _ in range(DEFAULT_MAX_EVENTS + 5):
            sm.record(EventType.FIELD_BLURRED, field=FieldName.PHONE)
        assert len(sm.get_events()) == DEFAULT_MAX_EVENTS

    @pytest.mark.parametrize("max_events", [0, -1])
    def test_rejects_non_positive_capacity(self, max_events):
        """Should reject a capacity below one."""
        with pytest.raises(ValueError, match="max_events must be positive"):
            SubmissionStateMachine(max_events=max_events)
