"""Field and form validation for the form engine.

This module holds the pure validation logic the engine is built on:

- validate_field: first-failing-rule evaluation for a single value
- password_mismatch: the one cross-field check (confirm vs. password)
- evaluate_field: rule evaluation plus the cross-field override
- is_submittable: the one form-level validity predicate
- FormValidator: submit-time revalidation of every field

Each field reports at most one error, the message of its first failing rule.
Rules are never all evaluated to collect multiple messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from formengine.errors import coerce_field_name
from formengine.rules import Rule, RuleSet
from formengine.state import FieldState, FormState
from formengine.types import FIELD_ORDER, OPTIONAL_FIELDS, REQUIRED_FIELDS, FieldName, RuleCode

PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"


def first_failing_rule(value: str, rules: Sequence[Rule]) -> Optional[Rule]:
    """Return the first rule in declared order that rejects *value*, or None."""
    for rule in rules:
        if not rule.validate(value):
            return rule
    return None


def validate_field(value: str, rules: Sequence[Rule]) -> str:
    """Return the message of the first failing rule, or "" if all pass.

    Examples:
        >>> from formengine.rules import required, min_length
        >>> validate_field("", [required("Name"), min_length(2, "Name")])
        'Name is required'
        >>> validate_field("J", [required("Name"), min_length(2, "Name")])
        'Name must be at least 2 characters long'
        >>> validate_field("anything", [])
        ''
    """
    rule = first_failing_rule(value, rules)
    return rule.message if rule is not None else ""


def password_mismatch(confirm_value: str, password_value: str) -> str:
    """Cross-field check between confirmPassword and password.

    An empty confirmation is left to its own rules; only a non-empty value
    that differs from the password is a mismatch.

    Examples:
        >>> password_mismatch("Abc123!", "Abc123!@")
        'Passwords do not match'
        >>> password_mismatch("", "Abc123!@")
        ''
    """
    if confirm_value and confirm_value != password_value:
        return PASSWORD_MISMATCH_MESSAGE
    return ""


def evaluate_field(
    name: Union[FieldName, str],
    value: str,
    password_value: str,
    rule_set: RuleSet,
) -> str:
    """Compute a field's error from its rules and, for confirmPassword, the mismatch check.

    The mismatch message takes precedence over any rule error on
    confirmPassword.

    Args:
        name: Field being evaluated
        value: Candidate value for that field
        password_value: Current value of the password field
        rule_set: Rules to apply

    Returns:
        The error message, or "" if the value is acceptable
    """
    name = coerce_field_name(name)
    error = validate_field(value, rule_set.rules_for(name))
    if name is FieldName.CONFIRM_PASSWORD:
        mismatch = password_mismatch(value, password_value)
        if mismatch:
            return mismatch
    return error


def is_submittable(form_state: FormState) -> bool:
    """Whether the form as given may be submitted.

    Every required field must be valid and hold a non-blank value. Optional
    fields must be empty or valid. Used both for the continuously derived
    FormEngine.is_form_valid and for the check made during attempt_submit.
    """
    for name in REQUIRED_FIELDS:
        state = form_state[name]
        if not state.valid or not state.value.strip():
            return False
    for name in OPTIONAL_FIELDS:
        state = form_state[name]
        if state.value and not state.valid:
            return False
    return True


@dataclass(frozen=True)
class FormValidationResult:
    """Result of revalidating every field of a form.

    Attributes:
        is_valid: Outcome of is_submittable on the revalidated snapshot
        errors: Field wire name -> error message, for fields in error
        missing_fields: Fields whose failing rule was "required"
        invalid_fields: Fields failing any other rule or the mismatch check

    Examples:
        >>> from formengine.config import default_rule_set
        >>> _, result = FormValidator(default_rule_set()).validate(FormState())
        >>> result.is_valid
        False
        >>> result.missing_fields[:2]
        ['firstName', 'lastName']
    """
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    missing_fields: List[str] = field(default_factory=list)
    invalid_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "errors": dict(self.errors),
            "missingFields": list(self.missing_fields),
            "invalidFields": list(self.invalid_fields),
        }


class FormValidator:
    """Revalidates a whole form snapshot against a rule set.

    Used on submit: every field is evaluated from its current value and
    marked touched, whether or not the user ever visited it.

    Attributes:
        rule_set: Rules applied to each field
    """

    def __init__(self, rule_set: RuleSet) -> None:
        self.rule_set = rule_set

    def validate(self, form_state: FormState) -> Tuple[FormState, FormValidationResult]:
        """Revalidate every field.

        Args:
            form_state: Snapshot whose values are checked

        Returns:
            The revalidated, fully touched snapshot and a summary result
        """
        password_value = form_state[FieldName.PASSWORD].value
        fields: Dict[FieldName, FieldState] = {}
        errors: Dict[str, str] = {}
        missing: List[str] = []
        invalid: List[str] = []

        for name in FIELD_ORDER:
            value = form_state[name].value
            error = evaluate_field(name, value, password_value, self.rule_set)
            fields[name] = FieldState.evaluated(value, error, touched=True)
            if error:
                errors[name.value] = error
                if self._classify(name, value, error) is RuleCode.REQUIRED:
                    missing.append(name.value)
                else:
                    invalid.append(name.value)

        revalidated = FormState(fields)
        result = FormValidationResult(
            is_valid=is_submittable(revalidated),
            errors=errors,
            missing_fields=missing,
            invalid_fields=invalid,
        )
        return revalidated, result

    def _classify(self, name: FieldName, value: str, error: str) -> RuleCode:
        """Map a field error back to the code of the rule that produced it."""
        if error == PASSWORD_MISMATCH_MESSAGE and name is FieldName.CONFIRM_PASSWORD:
            return RuleCode.MISMATCH
        rule = first_failing_rule(value, self.rule_set.rules_for(name))
        return rule.code if rule is not None else RuleCode.INVALID_FORMAT


__all__ = [
    "PASSWORD_MISMATCH_MESSAGE",
    "first_failing_rule",
    "validate_field",
    "password_mismatch",
    "evaluate_field",
    "is_submittable",
    "FormValidationResult",
    "FormValidator",
]
