"""Password strength scoring.

Scores a raw password from 0 to 5 by counting satisfied criteria. The score
is informational only: it is computed independently of the password() rule
and has no bearing on whether the field validates.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"\d", re.ASCII)
_SPECIAL_RE = re.compile(r"[@$!%*?&]")

# (checklist text, predicate), in display order
_CRITERIA: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("At least 8 characters", lambda pw: len(pw) >= 8),
    ("One lowercase letter", lambda pw: _LOWER_RE.search(pw) is not None),
    ("One uppercase letter", lambda pw: _UPPER_RE.search(pw) is not None),
    ("One number", lambda pw: _DIGIT_RE.search(pw) is not None),
    ("One special character", lambda pw: _SPECIAL_RE.search(pw) is not None),
)

MAX_STRENGTH = len(_CRITERIA)

STRENGTH_LEVELS: Dict[int, Tuple[str, str]] = {
    0: ("Very Weak", "red-500"),
    1: ("Weak", "red-400"),
    2: ("Fair", "amber-400"),
    3: ("Good", "amber-300"),
    4: ("Strong", "green-400"),
    5: ("Very Strong", "green-500"),
}


@dataclass(frozen=True)
class Requirement:
    """One line of the strength checklist."""
    text: str
    met: bool


@dataclass(frozen=True)
class PasswordStrength:
    """Strength score with its display label and colour token.

    Attributes:
        strength: Number of satisfied criteria, 0..5
        label: Human-readable level ("Very Weak" .. "Very Strong")
        color: Colour token for the level
        requirements: Per-criterion checklist in display order
    """
    strength: int
    label: str
    color: str
    requirements: Tuple[Requirement, ...] = ()

    @property
    def percentage(self) -> float:
        return self.strength / MAX_STRENGTH * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "strength": self.strength,
            "label": self.label,
            "color": self.color,
            "requirements": [{"text": r.text, "met": r.met} for r in self.requirements],
        }


def score_password(password: str) -> PasswordStrength:
    """Score *password* against the five strength criteria.

    Examples:
        >>> score_password("").label
        'Very Weak'
        >>> result = score_password("abc12345")
        >>> result.strength, result.label
        (3, 'Good')
        >>> score_password("Abc123!@").strength
        5
    """
    requirements = tuple(Requirement(text, check(password)) for text, check in _CRITERIA)
    strength = sum(1 for r in requirements if r.met)
    label, color = STRENGTH_LEVELS[strength]
    return PasswordStrength(strength=strength, label=label, color=color, requirements=requirements)


__all__ = [
    "MAX_STRENGTH",
    "STRENGTH_LEVELS",
    "Requirement",
    "PasswordStrength",
    "score_password",
]
