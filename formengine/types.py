"""Core type definitions for the form engine.

This module defines the closed vocabularies used throughout the engine:
- FieldName: The fixed set of fields a form instance tracks
- SubmissionState: Lifecycle states for a submit attempt
- RuleCode: Classification of validation rule failures
- EventType: Audit event types for the event stream
- SubmitOutcome: Result categories returned by FormEngine.attempt_submit

Field names are an enumeration rather than free-form strings so that a typo
in a caller surfaces immediately instead of silently creating a new field.
"""

from enum import Enum
from typing import FrozenSet, Tuple


class FieldName(str, Enum):
    """Named input slots of the form, in display order.

    Values are the wire names used in flattened submit payloads.
    """
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    EMAIL = "email"
    PASSWORD = "password"
    CONFIRM_PASSWORD = "confirmPassword"
    PHONE = "phone"
    WEBSITE = "website"


# Declaration order of FieldName is the snapshot order
FIELD_ORDER: Tuple[FieldName, ...] = tuple(FieldName)

REQUIRED_FIELDS: FrozenSet[FieldName] = frozenset({
    FieldName.FIRST_NAME,
    FieldName.LAST_NAME,
    FieldName.EMAIL,
    FieldName.PASSWORD,
    FieldName.CONFIRM_PASSWORD,
    FieldName.PHONE,
})

OPTIONAL_FIELDS: FrozenSet[FieldName] = frozenset({FieldName.WEBSITE})


class SubmissionState(str, Enum):
    """Submission lifecycle states.

    IDLE is initial. SUBMITTING is held while the external submit handler
    is pending. SUCCESS is entered once the handler resolves. A failed
    handler returns the form to IDLE; there is no retained error state.
    """
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"


class RuleCode(str, Enum):
    """Failure codes carried by validation rules."""
    REQUIRED = "required"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_FORMAT = "invalid_format"
    MISMATCH = "mismatch"


class EventType(str, Enum):
    """Audit event types for the event stream."""
    FIELD_EDITED = "field.edited"
    FIELD_BLURRED = "field.blurred"
    VALIDATION_PASSED = "validation.passed"
    VALIDATION_FAILED = "validation.failed"
    SUBMISSION_STARTED = "submission.started"
    SUBMISSION_SUCCEEDED = "submission.succeeded"
    SUBMISSION_FAILED = "submission.failed"
    SUBMISSION_REJECTED = "submission.rejected"
    FORM_RESET = "form.reset"


class SubmitOutcome(str, Enum):
    """What happened during a single attempt_submit call."""
    INVALID = "invalid"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IN_FLIGHT = "in_flight"


__all__ = [
    "FieldName",
    "FIELD_ORDER",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    "SubmissionState",
    "RuleCode",
    "EventType",
    "SubmitOutcome",
]
