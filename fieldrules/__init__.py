"""
fieldrules: declarative validation of flat key/value payloads.

    >>> from fieldrules import validate
    >>> result = validate(
    ...     {"name": "lisi"},
    ...     {"name": "required|in:zhangsan,lisi,wangwu"},
    ...     {"in": "Unknown :attribute"},
    ... )
    >>> result.passed
    True
"""

from collections.abc import Mapping
from typing import Any

from fieldrules.core.errors import (
    ConfigurationError,
    FieldRulesError,
    InsufficientParametersError,
    MalformedRuleError,
    MissingPresenceVerifierError,
    PresenceVerifierError,
    UndefinedMessageError,
    UnknownRuleError,
)
from fieldrules.core.models import Failure, RuleSet, RuleSpec, UploadedFile, ValidationResult
from fieldrules.core.rules import RuleConfigBuilder, RuleConfigLoader, Validator, parse_rule
from fieldrules.core.validators import PredicateRegistry, default_registry

__version__ = "1.0.0"


def validate(
    data: Mapping[str, Any],
    rules: Mapping[str, Any],
    messages: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> ValidationResult:
    """
    Validate data against rules in one call.

    Args:
        data: Input values
        rules: Attribute -> "rule|rule:param" string or list of rule tokens
        messages: Message catalogue
        **kwargs: Further Validator options (attributes, presence_verifier, registry, ...)

    Returns:
        ValidationResult of the pass
    """
    return Validator(data, rules, messages, **kwargs).validate()


__all__ = [
    "validate",
    "Validator",
    "RuleSet",
    "RuleSpec",
    "Failure",
    "ValidationResult",
    "UploadedFile",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "PredicateRegistry",
    "default_registry",
    "parse_rule",
    "FieldRulesError",
    "ConfigurationError",
    "MalformedRuleError",
    "InsufficientParametersError",
    "UnknownRuleError",
    "UndefinedMessageError",
    "MissingPresenceVerifierError",
    "PresenceVerifierError",
]
