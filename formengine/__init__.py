"""Interactive form validation engine.

formengine is the state core behind an interactive registration form. It
provides:
- A catalog of validation rules with first-failing-rule-wins evaluation
- Cross-field validation between password and confirm-password
- A submission state machine (idle, submitting, success) with a
  single-flight guard around the submit handler
- Password strength scoring
- An audit event stream for observers

Rendering is left to the caller, which reads snapshots from the engine and
calls its mutation operations.

Basic usage:
    >>> from formengine import FormEngine
    >>> engine = FormEngine()
    >>> engine.edit_field("email", "not-an-email").error
    'Please enter a valid email address'
    >>> engine.submission_state.value
    'idle'
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formengine.config import default_rule_set, load_rule_set
from formengine.engine import FormEngine, SubmitResult
from formengine.errors import RuleConfigError, UnknownFieldError
from formengine.rules import Rule, RuleSet
from formengine.state import FieldState, FormState
from formengine.strength import score_password
from formengine.types import FieldName, SubmissionState, SubmitOutcome
from formengine.validation import validate_field

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "FormEngine",
    "SubmitResult",
    "FieldName",
    "SubmissionState",
    "SubmitOutcome",
    "FieldState",
    "FormState",
    "Rule",
    "RuleSet",
    "validate_field",
    "score_password",
    "default_rule_set",
    "load_rule_set",
    "RuleConfigError",
    "UnknownFieldError",
]
