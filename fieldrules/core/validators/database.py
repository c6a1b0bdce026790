"""
Presence predicates: unique and exists.

Both delegate counting to the engine's presence verifier. A verifier failure
is re-raised as PresenceVerifierError; the predicates never guess an answer.
"""

from typing import Any

from fieldrules.core.errors import (
    FieldRulesError,
    MalformedRuleError,
    MissingPresenceVerifierError,
    PresenceVerifierError,
)
from fieldrules.observability.logger import get_logger

from .base_validator import Predicate, ValidationContext, stringify

logger = get_logger(__name__)


def extra_conditions(segments: tuple[str, ...], rule: str) -> dict[str, str]:
    """
    Pair up trailing rule parameters as column/value conditions.

    Raises:
        MalformedRuleError: If a column has no value
    """
    if len(segments) % 2:
        raise MalformedRuleError(rule, f"Extra conditions must be column,value pairs, got {list(segments)}")
    return dict(zip(segments[::2], segments[1::2]))


def _verifier(validator: ValidationContext) -> Any:
    verifier = validator.presence_verifier
    if verifier is None:
        raise MissingPresenceVerifierError()
    return verifier


def _count(call, *args) -> int:
    try:
        return int(call(*args))
    except FieldRulesError:
        raise
    except Exception as e:
        logger.error(f"Presence verifier failed: {e}", exc_info=True)
        raise PresenceVerifierError(f"Presence verifier failed: {e}") from e


def validate_unique(attribute: str, value: Any, parameters: tuple[str, ...],
                    validator: ValidationContext) -> bool:
    """
    No record holds the value.

    Parameters are table, column (defaults to the attribute), an id to
    ignore ("NULL" for none), the id column (defaults to "id") and then
    column,value pairs narrowing the query.
    """
    verifier = _verifier(validator)
    table = parameters[0]
    column = parameters[1] if len(parameters) > 1 and parameters[1] else attribute

    exclude_id = id_column = None
    if len(parameters) > 2:
        exclude_id = parameters[2]
        id_column = parameters[3] if len(parameters) > 3 and parameters[3] else "id"
        if exclude_id.lower() == "null":
            exclude_id = None

    extra = extra_conditions(parameters[4:], "unique")
    count = _count(verifier.get_count, table, column, stringify(value), exclude_id, id_column, extra)
    return count == 0


def validate_exists(attribute: str, value: Any, parameters: tuple[str, ...],
                    validator: ValidationContext) -> bool:
    """
    A record holds the value, or every element of a list value.

    Parameters are table, column (defaults to the attribute) and then
    column,value pairs narrowing the query.
    """
    verifier = _verifier(validator)
    table = parameters[0]
    column = parameters[1] if len(parameters) > 1 and parameters[1] else attribute
    extra = extra_conditions(parameters[2:], "exists")

    if isinstance(value, (list, tuple)):
        values = [stringify(item) for item in value]
        count = _count(verifier.get_multi_count, table, column, values, extra)
        return count >= len(values)

    count = _count(verifier.get_count, table, column, stringify(value), None, None, extra)
    return count >= 1


PREDICATES = (
    Predicate("unique", validate_unique, 1),
    Predicate("exists", validate_exists, 1),
)
