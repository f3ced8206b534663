"""Declarative rule-set configuration.

Rule sets can be written as plain data (a dict, or a JSON file) instead of
Python calls to the rule catalog:

    {
        "fields": {
            "firstName": [
                {"rule": "required", "label": "First name"},
                {"rule": "minLength", "min": 2, "label": "First name"}
            ],
            "website": [{"rule": "url"}]
        }
    }

Definitions are checked against RULE_SET_SCHEMA (JSON Schema Draft 7) before
any rule is built, and every violation is reported in one RuleConfigError.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

import jsonschema
from jsonschema import Draft7Validator
from typing_extensions import NotRequired, Required, TypeAlias, TypedDict

from formengine import rules as catalog
from formengine.errors import RuleConfigError
from formengine.rules import Rule, RuleSet
from formengine.types import FieldName

logger = logging.getLogger(__name__)


class RuleSpec(TypedDict, total=False):
    """One rule entry in a definition."""
    rule: Required[str]
    label: NotRequired[str]
    min: NotRequired[int]
    max: NotRequired[int]


RuleSetDefinition: TypeAlias = Dict[str, Any]


_LABELLED = {"type": "string", "minLength": 1}
_BOUND = {"type": "integer", "minimum": 0}

RULE_SET_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["fields"],
    "additionalProperties": False,
    "properties": {
        "fields": {
            "type": "object",
            "propertyNames": {"enum": [f.value for f in FieldName]},
            "additionalProperties": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["rule"],
                    "properties": {
                        "rule": {
                            "enum": [
                                "required", "minLength", "maxLength",
                                "email", "password", "phone", "url",
                            ],
                        },
                        "label": _LABELLED,
                        "min": _BOUND,
                        "max": _BOUND,
                    },
                    "additionalProperties": False,
                    "allOf": [
                        {
                            "if": {"properties": {"rule": {"const": "required"}}},
                            "then": {"required": ["label"]},
                        },
                        {
                            "if": {"properties": {"rule": {"const": "minLength"}}},
                            "then": {"required": ["min"]},
                        },
                        {
                            "if": {"properties": {"rule": {"const": "maxLength"}}},
                            "then": {"required": ["max"]},
                        },
                    ],
                },
            },
        },
    },
}

# Rule name -> builder taking the validated spec
_BUILDERS: Dict[str, Callable[[RuleSpec], Rule]] = {
    "required": lambda spec: catalog.required(spec["label"]),
    "minLength": lambda spec: catalog.min_length(spec["min"], spec.get("label", "Field")),
    "maxLength": lambda spec: catalog.max_length(spec["max"], spec.get("label", "Field")),
    "email": lambda spec: catalog.email(),
    "password": lambda spec: catalog.password(),
    "phone": lambda spec: catalog.phone(),
    "url": lambda spec: catalog.url(),
}

_VALIDATOR = Draft7Validator(RULE_SET_SCHEMA)


# Rules of the registration form this engine was built for
DEFAULT_DEFINITION: RuleSetDefinition = {
    "fields": {
        "firstName": [
            {"rule": "required", "label": "First name"},
            {"rule": "minLength", "min": 2, "label": "First name"},
        ],
        "lastName": [
            {"rule": "required", "label": "Last name"},
            {"rule": "minLength", "min": 2, "label": "Last name"},
        ],
        "email": [
            {"rule": "required", "label": "Email"},
            {"rule": "email"},
        ],
        "password": [
            {"rule": "required", "label": "Password"},
            {"rule": "password"},
        ],
        "confirmPassword": [
            {"rule": "required", "label": "Confirm password"},
        ],
        "phone": [
            {"rule": "required", "label": "Phone number"},
            {"rule": "phone"},
        ],
        "website": [
            {"rule": "url"},
        ],
    },
}


def _translate_error(error: jsonschema.ValidationError) -> Tuple[str, str]:
    """Turn a jsonschema error into a (dot path, message) pair."""
    path = ".".join(str(p) for p in error.absolute_path)

    if error.validator == "required":
        missing = error.message.split("'")[1] if "'" in error.message else "property"
        return path, f"missing required key '{missing}'"
    # propertyNames failures surface as the inner "enum" keyword
    if "propertyNames" in error.absolute_schema_path:
        return path, f"unknown field {error.instance!r}"
    if error.validator == "enum" and error.absolute_path and error.absolute_path[-1] == "rule":
        return path, f"unknown rule {error.instance!r}"
    return path, error.message


def validate_definition(definition: RuleSetDefinition) -> List[Tuple[str, str]]:
    """Check a definition against RULE_SET_SCHEMA.

    Returns:
        List of (path, message) problems, empty when the definition is valid

    Examples:
        >>> validate_definition(DEFAULT_DEFINITION)
        []
        >>> validate_definition({"fields": {"email": [{"rule": "zip"}]}})
        [('fields.email.0.rule', "unknown rule 'zip'")]
    """
    errors = sorted(_VALIDATOR.iter_errors(definition), key=lambda e: list(map(str, e.absolute_path)))
    return [_translate_error(e) for e in errors]


def load_rule_set(definition: RuleSetDefinition) -> RuleSet:
    """Build a RuleSet from a declarative definition.

    Args:
        definition: Mapping with a "fields" key, see module docstring

    Returns:
        Immutable RuleSet

    Raises:
        RuleConfigError: If the definition does not match RULE_SET_SCHEMA
    """
    problems = validate_definition(definition)
    if problems:
        raise RuleConfigError(problems)

    built: Dict[str, List[Rule]] = {}
    for name, specs in definition["fields"].items():
        built[name] = [_BUILDERS[spec["rule"]](spec) for spec in specs]

    rule_set = RuleSet(built)
    logger.debug("Loaded rule set: %r", rule_set)
    return rule_set


def load_rule_set_file(path: Union[str, Path]) -> RuleSet:
    """Build a RuleSet from a JSON file.

    Raises:
        RuleConfigError: If the file is not valid JSON or not a valid definition
        OSError: If the file cannot be read
    """
    path = Path(path)
    try:
        definition = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuleConfigError(
            [("", f"{path}: invalid JSON at line {exc.lineno}, column {exc.colno}")]
        ) from exc
    return load_rule_set(definition)


def default_rule_set() -> RuleSet:
    """Rule set of the standard registration form."""
    return load_rule_set(DEFAULT_DEFINITION)


__all__ = [
    "RuleSpec",
    "RuleSetDefinition",
    "RULE_SET_SCHEMA",
    "DEFAULT_DEFINITION",
    "validate_definition",
    "load_rule_set",
    "load_rule_set_file",
    "default_rule_set",
]
