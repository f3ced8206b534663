"""FormEngine orchestrator.

This module provides the FormEngine class, the stateful core that ties the
rule set, the field validator and the submission state machine together. It
owns the current FormState and SubmissionState for one form session and
exposes a narrow mutation API:

- edit_field: the user changed a value
- blur_field: the user left a field
- attempt_submit: the user pressed submit
- reset: start a fresh form

Everything else is read-only: the presentation layer renders from
``form_state``, ``submission_state`` and ``is_form_valid``.

Usage:
    >>> import asyncio
    >>> submitted = []
    >>> engine = FormEngine(on_submit=submitted.append)
    >>> engine.edit_field("firstName", "J").error
    'First name must be at least 2 characters long'
    >>> engine.is_form_valid
    False
    >>> result = asyncio.run(engine.attempt_submit())
    >>> result.outcome
    <SubmitOutcome.INVALID: 'invalid'>
    >>> submitted
    []
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from formengine.config import default_rule_set
from formengine.errors import coerce_field_name
from formengine.events import EventEmitter, FormEvent
from formengine.rules import RuleSet
from formengine.state import FieldState, FormState, initial_form_state
from formengine.state_machine import (
    DEFAULT_MAX_EVENTS,
    InvalidStateTransitionError,
    SubmissionStateMachine,
)
from formengine.strength import PasswordStrength, score_password
from formengine.types import EventType, FieldName, SubmissionState, SubmitOutcome
from formengine.validation import (
    FormValidationResult,
    FormValidator,
    evaluate_field,
    is_submittable,
)

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[Dict[str, str]], Union[Awaitable[Any], Any]]
"""Receives {field wire name: raw value}. May be sync or async; raising means failure."""


@dataclass(frozen=True)
class SubmitResult:
    """What a single attempt_submit call did.

    Attributes:
        outcome: INVALID, SUCCEEDED, FAILED or IN_FLIGHT
        state: Submission state after the call
        validation: Revalidation summary (None when the call was rejected in flight)
    """
    outcome: SubmitOutcome
    state: SubmissionState
    validation: Optional[FormValidationResult] = None

    @property
    def ok(self) -> bool:
        return self.outcome is SubmitOutcome.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "ok": self.ok,
            "outcome": self.outcome.value,
            "state": self.state.value,
        }
        if self.validation is not None:
            result["validation"] = self.validation.to_dict()
        return result


class FormEngine:
    """Stateful validation and submission core for one form session.

    Attributes:
        rule_set: Rules applied to each field, fixed at construction

    Examples:
        >>> engine = FormEngine()
        >>> _ = engine.edit_field(FieldName.PASSWORD, "Abc123!@")
        >>> engine.edit_field(FieldName.CONFIRM_PASSWORD, "Abc123!").error
        'Passwords do not match'
        >>> engine.edit_field(FieldName.CONFIRM_PASSWORD, "Abc123!@").valid
        True
    """

    def __init__(
        self,
        rule_set: Optional[RuleSet] = None,
        on_submit: Optional[SubmitHandler] = None,
        *,
        emitter: Optional[EventEmitter] = None,
        diagnostic_logger: Optional[logging.Logger] = None,
        max_events: int = DEFAULT_MAX_EVENTS,
    ):
        """Initialize the engine.

        Args:
            rule_set: Field rules; defaults to config.default_rule_set()
            on_submit: Handler invoked with flattened values on a valid submit
            emitter: Optional emitter receiving every engine event
            diagnostic_logger: Logger for handler failures; defaults to this module's
            max_events: How many recent events get_events() retains
        """
        self.rule_set = rule_set if rule_set is not None else default_rule_set()
        self._on_submit = on_submit
        self._log = diagnostic_logger if diagnostic_logger is not None else logger
        self._validator = FormValidator(self.rule_set)
        self._machine = SubmissionStateMachine(emitter=emitter, max_events=max_events)
        self._form_state: FormState = initial_form_state()

    # Read-only views

    @property
    def form_state(self) -> FormState:
        """Current snapshot of every field."""
        return self._form_state

    @property
    def submission_state(self) -> SubmissionState:
        return self._machine.state

    @property
    def is_submitting(self) -> bool:
        return self._machine.state is SubmissionState.SUBMITTING

    @property
    def is_form_valid(self) -> bool:
        """Whether the current snapshot would pass the submit-time check."""
        return is_submittable(self._form_state)

    def field(self, name: Union[FieldName, str]) -> FieldState:
        """Current state of one field."""
        return self._form_state[name]

    def values(self) -> Dict[str, str]:
        """Current raw values keyed by wire name."""
        return self._form_state.flatten()

    def password_strength(self) -> PasswordStrength:
        """Strength score of the current password value."""
        return score_password(self._form_state[FieldName.PASSWORD].value)

    def get_events(self) -> List[FormEvent]:
        """The most recent events of this session (up to max_events), oldest first."""
        return self._machine.get_events()

    # Mutations

    def edit_field(self, name: Union[FieldName, str], value: str) -> FieldState:
        """Apply a new value to a field and revalidate it.

        A password edit also re-runs the confirmation check when the
        confirmation already holds a value. No other field is affected.

        Args:
            name: Field being edited
            value: New raw value

        Returns:
            The field's new state

        Raises:
            UnknownFieldError: If name is not part of the form
        """
        name = coerce_field_name(name)
        state = self._form_state
        password_value = value if name is FieldName.PASSWORD else state[FieldName.PASSWORD].value

        error = evaluate_field(name, value, password_value, self.rule_set)
        updated = FieldState.evaluated(value, error, touched=True)
        state = state.replace(name, updated)

        if name is FieldName.PASSWORD:
            confirm = state[FieldName.CONFIRM_PASSWORD]
            if confirm.value:
                confirm_error = evaluate_field(
                    FieldName.CONFIRM_PASSWORD, confirm.value, value, self.rule_set
                )
                state = state.replace(FieldName.CONFIRM_PASSWORD, confirm.with_error(confirm_error))

        self._form_state = state
        self._log.debug("Edited %s (valid=%s)", name.value, updated.valid)
        self._machine.record(
            EventType.FIELD_EDITED,
            field=name,
            payload={"valid": updated.valid, "error": updated.error},
        )
        return updated

    def blur_field(self, name: Union[FieldName, str]) -> FieldState:
        """Mark a field as touched without revalidating it.

        Raises:
            UnknownFieldError: If name is not part of the form
        """
        name = coerce_field_name(name)
        updated = self._form_state[name].mark_touched()
        self._form_state = self._form_state.replace(name, updated)
        self._log.debug("Blurred %s", name.value)
        self._machine.record(EventType.FIELD_BLURRED, field=name)
        return updated

    async def attempt_submit(self) -> SubmitResult:
        """Validate every field and, if the form is valid, run the submit handler.

        While a handler call is pending the engine is SUBMITTING and further
        calls return IN_FLIGHT without touching any state.

        On success the form resets to its initial snapshot and the state is
        SUCCESS. On handler failure the validated snapshot is kept, the state
        returns to IDLE and the failure goes to the diagnostic logger only.

        Returns:
            SubmitResult describing the outcome
        """
        if self.is_submitting:
            self._log.warning("Submit ignored: a submission is already in flight")
            self._machine.record(EventType.SUBMISSION_REJECTED)
            return SubmitResult(outcome=SubmitOutcome.IN_FLIGHT, state=self._machine.state)

        self._form_state, validation = self._validator.validate(self._form_state)

        if not validation.is_valid:
            if self._machine.state is not SubmissionState.IDLE:
                self._machine.transition_to(
                    SubmissionState.IDLE, EventType.VALIDATION_FAILED, validation.to_dict()
                )
            else:
                self._machine.record(EventType.VALIDATION_FAILED, payload=validation.to_dict())
            self._log.debug("Submit blocked by invalid fields: %s", ", ".join(validation.errors))
            return SubmitResult(
                outcome=SubmitOutcome.INVALID,
                state=self._machine.state,
                validation=validation,
            )

        self._machine.record(EventType.VALIDATION_PASSED)
        self._machine.transition_to(SubmissionState.SUBMITTING)
        values = self._form_state.flatten()
        self._log.info("Submitting form")

        try:
            if self._on_submit is not None:
                outcome = self._on_submit(values)
                if inspect.isawaitable(outcome):
                    await outcome
        except asyncio.CancelledError:
            self._machine.transition_to(
                SubmissionState.IDLE, EventType.SUBMISSION_FAILED, {"reason": "cancelled"}
            )
            raise
        except Exception as exc:
            self._log.error("Form submission error: %s", exc, exc_info=True)
            self._machine.transition_to(
                SubmissionState.IDLE,
                EventType.SUBMISSION_FAILED,
                {"reason": type(exc).__name__},
            )
            return SubmitResult(
                outcome=SubmitOutcome.FAILED,
                state=self._machine.state,
                validation=validation,
            )

        self._machine.transition_to(SubmissionState.SUCCESS)
        self._form_state = initial_form_state()
        self._log.info("Form submitted")
        return SubmitResult(
            outcome=SubmitOutcome.SUCCEEDED,
            state=self._machine.state,
            validation=validation,
        )

    def reset(self) -> None:
        """Discard all input and return to IDLE with the initial snapshot.

        Resetting while a submission is in flight is not allowed; the
        handler outcome decides what happens to the form.

        Raises:
            InvalidStateTransitionError: If called while SUBMITTING
        """
        if self.is_submitting:
            # SUBMITTING -> IDLE is reserved for handler failure
            raise InvalidStateTransitionError(
                current_state=SubmissionState.SUBMITTING,
                target_state=SubmissionState.IDLE,
                message="Cannot reset the form while a submission is in flight",
            )
        self._form_state = initial_form_state()
        if self._machine.state is SubmissionState.IDLE:
            self._machine.record(EventType.FORM_RESET)
        else:
            self._machine.transition_to(SubmissionState.IDLE, EventType.FORM_RESET)
        self._log.info("Form reset")


__all__ = [
    "FormEngine",
    "SubmitHandler",
    "SubmitResult",
]
