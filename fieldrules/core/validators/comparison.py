"""
Predicates comparing a value with sibling attributes or literal lists.
"""

from typing import Any

from fieldrules.core.absent import ABSENT

from .base_validator import Predicate, ValidationContext, loose_equals, stringify


def _is_set(value: Any) -> bool:
    return value is not ABSENT and value is not None


def validate_same(attribute: str, value: Any, parameters: tuple[str, ...],
                  validator: ValidationContext) -> bool:
    """The other attribute is set and loosely equal to this value."""
    other = validator.get_data_value(parameters[0])
    return _is_set(other) and loose_equals(value, other)


def validate_different(attribute: str, value: Any, parameters: tuple[str, ...],
                       validator: ValidationContext) -> bool:
    """The other attribute is set and not loosely equal to this value."""
    other = validator.get_data_value(parameters[0])
    return _is_set(other) and not loose_equals(value, other)


def validate_confirmed(attribute: str, value: Any, parameters: tuple[str, ...],
                       validator: ValidationContext) -> bool:
    """Matches "{attribute}_confirmation"."""
    return validate_same(attribute, value, (f"{attribute}_confirmation",), validator)


def validate_in(attribute: str, value: Any, parameters: tuple[str, ...],
                validator: ValidationContext) -> bool:
    return stringify(value) in parameters


def validate_not_in(attribute: str, value: Any, parameters: tuple[str, ...],
                    validator: ValidationContext) -> bool:
    return stringify(value) not in parameters


PREDICATES = (
    Predicate("same", validate_same, 1),
    Predicate("different", validate_different, 1),
    Predicate("confirmed", validate_confirmed),
    Predicate("in", validate_in),
    Predicate("not_in", validate_not_in),
)
