"""Exception types raised by the form engine.

Validation failures are never raised: they live in FieldState.error. The
exceptions here signal caller contract violations (unknown fields, malformed
rule definitions) and fail fast.
"""

from typing import Any, List, Optional, Tuple

from formengine.types import FieldName


class FormEngineError(Exception):
    """Base class for all form engine errors."""


class UnknownFieldError(FormEngineError, KeyError):
    """Raised when a field name is not part of the fixed field set.

    Attributes:
        name: The offending name as supplied by the caller

    Examples:
        >>> err = UnknownFieldError("middleName")
        >>> err.name
        'middleName'
    """

    def __init__(self, name: Any):
        self.name = name
        known = ", ".join(f.value for f in FieldName)
        super().__init__(f"Unknown field {name!r}. Known fields are: {known}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class RuleConfigError(FormEngineError, ValueError):
    """Raised when a rule-set definition is malformed.

    Attributes:
        problems: List of (path, message) pairs, one per violation. Paths use
            dot notation, e.g. "fields.firstName.1.min".
    """

    def __init__(self, problems: List[Tuple[str, str]], message: Optional[str] = None):
        self.problems = problems
        if message is None:
            details = "; ".join(f"{path or '<root>'}: {msg}" for path, msg in problems)
            message = f"Invalid rule-set definition: {details}"
        super().__init__(message)


def coerce_field_name(name: Any) -> FieldName:
    """Resolve a FieldName or its wire string to a FieldName.

    Raises:
        UnknownFieldError: If the name is not in the fixed field set

    Examples:
        >>> coerce_field_name("email")
        <FieldName.EMAIL: 'email'>
    """
    if isinstance(name, FieldName):
        return name
    try:
        return FieldName(name)
    except ValueError:
        raise UnknownFieldError(name) from None


__all__ = [
    "FormEngineError",
    "UnknownFieldError",
    "RuleConfigError",
    "coerce_field_name",
]
