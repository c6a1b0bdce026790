"""
Numeric, digit and size predicates.

size, between, min and max all compare against the engine's size classifier,
so a numeric value, a list, a file and a string are each measured the right
way without the predicates knowing about shapes.
"""

import re
from decimal import Decimal
from typing import Any

from .base_validator import (
    Predicate,
    ValidationContext,
    is_numeric,
    numeric_parameter,
    stringify,
)

_INTEGER_STRING = re.compile(r"^\s*[+-]?(0|[1-9]\d*)\s*$", re.ASCII)


def validate_numeric(attribute: str, value: Any, parameters: tuple[str, ...],
                     validator: ValidationContext) -> bool:
    return is_numeric(value)


def validate_integer(attribute: str, value: Any, parameters: tuple[str, ...],
                     validator: ValidationContext) -> bool:
    """Integers, integral floats and integer strings without leading zeros."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, (float, Decimal)):
        return float(value).is_integer()
    if isinstance(value, str):
        return bool(_INTEGER_STRING.match(value))
    return False


def validate_array(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    return isinstance(value, (list, tuple, dict))


def validate_digits(attribute: str, value: Any, parameters: tuple[str, ...],
                    validator: ValidationContext) -> bool:
    """Numeric with exactly n characters."""
    length = numeric_parameter(parameters[0], "digits")
    return is_numeric(value) and len(stringify(value)) == length


def validate_digits_between(attribute: str, value: Any, parameters: tuple[str, ...],
                            validator: ValidationContext) -> bool:
    """String length between min and max inclusive, numeric or not."""
    lower = numeric_parameter(parameters[0], "digits_between")
    upper = numeric_parameter(parameters[1], "digits_between")
    length = len(stringify(value))
    return lower <= length <= upper


def validate_size(attribute: str, value: Any, parameters: tuple[str, ...],
                  validator: ValidationContext) -> bool:
    return validator.get_size(attribute, value) == numeric_parameter(parameters[0], "size")


def validate_between(attribute: str, value: Any, parameters: tuple[str, ...],
                     validator: ValidationContext) -> bool:
    size = validator.get_size(attribute, value)
    lower = numeric_parameter(parameters[0], "between")
    upper = numeric_parameter(parameters[1], "between")
    return lower <= size <= upper


def validate_min(attribute: str, value: Any, parameters: tuple[str, ...],
                 validator: ValidationContext) -> bool:
    return validator.get_size(attribute, value) >= numeric_parameter(parameters[0], "min")


def validate_max(attribute: str, value: Any, parameters: tuple[str, ...],
                 validator: ValidationContext) -> bool:
    if validator.is_file(value) and not value.is_valid():
        return False
    return validator.get_size(attribute, value) <= numeric_parameter(parameters[0], "max")


PREDICATES = (
    Predicate("numeric", validate_numeric),
    Predicate("integer", validate_integer),
    Predicate("array", validate_array),
    Predicate("digits", validate_digits, 1),
    Predicate("digits_between", validate_digits_between, 2),
    Predicate("size", validate_size, 1),
    Predicate("between", validate_between, 2),
    Predicate("min", validate_min, 1),
    Predicate("max", validate_max, 1),
)
