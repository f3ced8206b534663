"""Rule catalog for the form engine.

A Rule is a pass/fail predicate over a raw string value plus the message
shown when it fails. Constructors in this module are pure: they build Rule
values and have no side effects.

    >>> rule = required("First name")
    >>> rule.validate("  ")
    False
    >>> rule.message
    'First name is required'

Rules for a field are grouped into a RuleSet, which is immutable once built.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from formengine.errors import coerce_field_name
from formengine.types import FieldName, RuleCode


@dataclass(frozen=True)
class Rule:
    """A single validation unit.

    Attributes:
        validate: Predicate returning True when the value passes
        message: Human-readable failure message
        code: Failure classification
        name: Catalog name of the rule (e.g. "minLength"), "custom" otherwise
    """
    validate: Callable[[str], bool]
    message: str
    code: RuleCode = RuleCode.INVALID_FORMAT
    name: str = "custom"


_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Lookaheads for each character class, then the whole string restricted to
# letters, digits and the special set
_PASSWORD_RE = re.compile(
    r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}",
    re.ASCII,
)

_PHONE_RE = re.compile(r"\+?[0-9\s\-()]{10,}")

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

# Schemes whose URLs are meaningless without a host
_HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})

# Forbidden domain code points (WHATWG URL), C0 controls checked separately
_FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|\x7f")

_IPV6_RE = re.compile(r"[0-9A-Fa-f:.]+")


def required(label: str) -> Rule:
    """Value must contain at least one non-whitespace character."""
    return Rule(
        validate=lambda value: len(value.strip()) > 0,
        message=f"{label} is required",
        code=RuleCode.REQUIRED,
        name="required",
    )


def min_length(n: int, label: str = "Field") -> Rule:
    """Value must be at least *n* characters long."""
    return Rule(
        validate=lambda value: len(value) >= n,
        message=f"{label} must be at least {n} characters long",
        code=RuleCode.TOO_SHORT,
        name="minLength",
    )


def max_length(n: int, label: str = "Field") -> Rule:
    """Value must be at most *n* characters long."""
    return Rule(
        validate=lambda value: len(value) <= n,
        message=f"{label} must be no more than {n} characters long",
        code=RuleCode.TOO_LONG,
        name="maxLength",
    )


def email() -> Rule:
    """Single @ with a dot in the domain part. Not RFC 5322."""
    return Rule(
        validate=lambda value: _EMAIL_RE.fullmatch(value) is not None,
        message="Please enter a valid email address",
        name="email",
    )


def password() -> Rule:
    """Eight or more characters mixing lowercase, uppercase, digit and one of @$!%*?&."""
    return Rule(
        validate=lambda value: _PASSWORD_RE.fullmatch(value) is not None,
        message=(
            "Password must contain at least 8 characters, including uppercase, "
            "lowercase, number, and special character"
        ),
        name="password",
    )


def phone() -> Rule:
    """Optional leading +, then ten or more digits, spaces, hyphens or parentheses."""
    return Rule(
        validate=lambda value: _PHONE_RE.fullmatch(value) is not None,
        message="Please enter a valid phone number",
        name="phone",
    )


def is_absolute_url(value: str) -> bool:
    """Check that *value* parses as an absolute URL.

    Surrounding whitespace is ignored. A syntactically valid scheme is
    mandatory, web schemes need a host, and an explicit port must be numeric
    and in range.

    Examples:
        >>> is_absolute_url("https://example.com")
        True
        >>> is_absolute_url("not a url")
        False
        >>> is_absolute_url("mailto:someone@example.com")
        True
    """
    candidate = value.strip()
    scheme, sep, rest = candidate.partition(":")
    if not sep or not _SCHEME_RE.fullmatch(scheme):
        return False

    if scheme.lower() in _HOST_SCHEMES:
        return _is_valid_authority(rest)

    try:
        parts = urlsplit(candidate)
        parts.port  # raises ValueError when out of range or non-numeric
    except ValueError:
        return False

    if parts.netloc and any(ch.isspace() for ch in parts.netloc):
        return False
    return True


def _is_valid_authority(rest: str) -> bool:
    """Check the host and port of a web URL given everything after ``scheme:``.

    Slashes after the scheme are optional, so ``http:example.com`` names the
    host ``example.com``.
    """
    rest = rest.lstrip("/\\")
    end = len(rest)
    for delimiter in "/?#\\":
        index = rest.find(delimiter)
        if index != -1:
            end = min(end, index)
    hostport = rest[:end].rpartition("@")[2]

    if hostport.startswith("["):
        close = hostport.find("]")
        if close == -1 or not _IPV6_RE.fullmatch(hostport[1:close]):
            return False
        tail = hostport[close + 1:]
        if tail and not tail.startswith(":"):
            return False
        port = tail[1:]
    else:
        host, _, port = hostport.partition(":")
        if not host or any(ch in _FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 for ch in host):
            return False

    if port and not (port.isascii() and port.isdigit() and int(port) <= 65535):
        return False
    return True


def url() -> Rule:
    """Empty (optional field) or an absolute URL."""
    return Rule(
        validate=lambda value: not value or is_absolute_url(value),
        message="Please enter a valid URL",
        name="url",
    )


class RuleSet:
    """Immutable mapping of field name to its ordered rules.

    Fields without an entry have no rules. Keys may be FieldName members or
    their wire strings; anything else raises UnknownFieldError.

    Examples:
        >>> rules = RuleSet({"email": [required("Email"), email()]})
        >>> [r.name for r in rules.rules_for(FieldName.EMAIL)]
        ['required', 'email']
        >>> rules.rules_for("website")
        ()
    """

    def __init__(self, rules: Optional[Mapping[Union[FieldName, str], Iterable[Rule]]] = None):
        self._rules: Dict[FieldName, Tuple[Rule, ...]] = {}
        for name, field_rules in (rules or {}).items():
            self._rules[coerce_field_name(name)] = tuple(field_rules)

    def rules_for(self, name: Union[FieldName, str]) -> Tuple[Rule, ...]:
        """Return the ordered rules for a field (empty tuple if none)."""
        return self._rules.get(coerce_field_name(name), ())

    @property
    def fields(self) -> Tuple[FieldName, ...]:
        """Fields that have an explicit rule entry, in field order."""
        return tuple(f for f in FieldName if f in self._rules)

    def __contains__(self, name: object) -> bool:
        # FieldName is a str enum, so wire strings hash to the same key
        return name in self._rules

    def __repr__(self) -> str:
        summary = ", ".join(
            f"{f.value}=[{', '.join(r.name for r in self._rules[f])}]" for f in self.fields
        )
        return f"RuleSet({summary})"


__all__ = [
    "Rule",
    "RuleSet",
    "required",
    "min_length",
    "max_length",
    "email",
    "password",
    "phone",
    "url",
    "is_absolute_url",
]
