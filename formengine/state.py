"""Field and form state snapshots.

FieldState records one field's value and validation outcome. FormState is an
ordered, immutable mapping from FieldName to FieldState covering the whole
fixed field set. The engine never mutates a snapshot in place; every change
produces a new FormState, so a snapshot handed to the presentation layer
stays consistent while it renders.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace as _replace
from typing import Any, Dict, Iterator, Optional, Union

from formengine.errors import coerce_field_name
from formengine.types import FIELD_ORDER, FieldName


@dataclass(frozen=True)
class FieldState:
    """State of a single form field.

    Once a field has been evaluated, ``valid == (error == "")``. The initial
    state is the only exception: nothing has been evaluated yet, so it is
    neither in error nor valid.

    Attributes:
        value: Raw value as typed
        error: Message of the failing rule, empty when valid
        touched: Whether the field received an edit or blur since the last reset
        valid: Whether the last evaluation passed

    Examples:
        >>> FieldState()
        FieldState(value='', error='', touched=False, valid=False)
        >>> FieldState.evaluated("Jo", "", touched=True).valid
        True
    """
    value: str = ""
    error: str = ""
    touched: bool = False
    valid: bool = False

    @classmethod
    def evaluated(cls, value: str, error: str, touched: bool) -> "FieldState":
        """Build a state whose validity is derived from *error*."""
        return cls(value=value, error=error, touched=touched, valid=not error)

    def with_error(self, error: str) -> "FieldState":
        """Return a copy with a new error and matching validity, value and touched kept."""
        return _replace(self, error=error, valid=not error)

    def mark_touched(self) -> "FieldState":
        """Return a copy with touched set."""
        if self.touched:
            return self
        return _replace(self, touched=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "value": self.value,
            "error": self.error,
            "touched": self.touched,
            "valid": self.valid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldState":
        """Create FieldState from dict."""
        return cls(
            value=data.get("value", ""),
            error=data.get("error", ""),
            touched=bool(data.get("touched", False)),
            valid=bool(data.get("valid", False)),
        )


class FormState(Mapping):
    """Immutable snapshot of every field in the form.

    Iteration follows the fixed field order. Lookup accepts FieldName members
    or their wire strings.

    Examples:
        >>> state = initial_form_state()
        >>> len(state)
        7
        >>> state["email"].touched
        False
        >>> updated = state.replace("email", FieldState.evaluated("a@b.co", "", True))
        >>> updated[FieldName.EMAIL].value, state[FieldName.EMAIL].value
        ('a@b.co', '')
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Optional[Mapping[Union[FieldName, str], FieldState]] = None):
        given: Dict[FieldName, FieldState] = {}
        for name, field_state in (fields or {}).items():
            given[coerce_field_name(name)] = field_state
        self._fields: Dict[FieldName, FieldState] = {
            name: given.get(name, FieldState()) for name in FIELD_ORDER
        }

    def __getitem__(self, name: Union[FieldName, str]) -> FieldState:
        return self._fields[coerce_field_name(name)]

    def __iter__(self) -> Iterator[FieldName]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FormState):
            return self._fields == other._fields
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._fields.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{name.value}={state!r}" for name, state in self._fields.items())
        return f"FormState({inner})"

    def replace(self, name: Union[FieldName, str], field_state: FieldState) -> "FormState":
        """Return a new snapshot with one field swapped out."""
        updated = dict(self._fields)
        updated[coerce_field_name(name)] = field_state
        return FormState(updated)

    def flatten(self) -> Dict[str, str]:
        """Return {wire name: raw value} for every field, in field order."""
        return {name.value: state.value for name, state in self._fields.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {name.value: state.to_dict() for name, state in self._fields.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormState":
        """Create FormState from dict. Missing fields take the initial state."""
        return cls({name: FieldState.from_dict(value) for name, value in data.items()})


def initial_form_state() -> FormState:
    """The all-empty, untouched snapshot a form starts from and resets to."""
    return FormState()


__all__ = [
    "FieldState",
    "FormState",
    "initial_form_state",
]
