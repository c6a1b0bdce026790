"""
Required-family predicates.

These rules are implicit: the engine runs them even when the attribute is
missing, because their whole purpose is to react to missingness.
"""

from typing import Any

from .base_validator import Predicate, ValidationContext, is_present, loose_equals

ACCEPTABLE = ("yes", "on", "1", 1, True, "true")


def validate_required(attribute: str, value: Any, parameters: tuple[str, ...],
                      validator: ValidationContext) -> bool:
    return is_present(attribute, value)


def validate_accepted(attribute: str, value: Any, parameters: tuple[str, ...],
                      validator: ValidationContext) -> bool:
    """Required, and one of yes / on / 1 / true, compared type-strictly."""
    if not is_present(attribute, value):
        return False
    return any(type(value) is type(token) and value == token for token in ACCEPTABLE)


def validate_sometimes(attribute: str, value: Any, parameters: tuple[str, ...],
                       validator: ValidationContext) -> bool:
    # Marker rule, read by the applicability policy.
    return True


def validate_required_if(attribute: str, value: Any, parameters: tuple[str, ...],
                         validator: ValidationContext) -> bool:
    """Required when another attribute equals one of the given values."""
    other = validator.get_data_value(parameters[0])
    if any(loose_equals(expected, other) for expected in parameters[1:]):
        return is_present(attribute, value)
    return True


def validate_required_with(attribute: str, value: Any, parameters: tuple[str, ...],
                           validator: ValidationContext) -> bool:
    """Required when any of the other attributes is present."""
    if not _all_failing_required(parameters, validator):
        return is_present(attribute, value)
    return True


def validate_required_with_all(attribute: str, value: Any, parameters: tuple[str, ...],
                               validator: ValidationContext) -> bool:
    """Required when all of the other attributes are present."""
    if not _any_failing_required(parameters, validator):
        return is_present(attribute, value)
    return True


def validate_required_without(attribute: str, value: Any, parameters: tuple[str, ...],
                              validator: ValidationContext) -> bool:
    """Required when any of the other attributes is missing."""
    if _any_failing_required(parameters, validator):
        return is_present(attribute, value)
    return True


def validate_required_without_all(attribute: str, value: Any, parameters: tuple[str, ...],
                                  validator: ValidationContext) -> bool:
    """Required when all of the other attributes are missing."""
    if _all_failing_required(parameters, validator):
        return is_present(attribute, value)
    return True


def _all_failing_required(attributes: tuple[str, ...], validator: ValidationContext) -> bool:
    return all(not is_present(key, validator.get_value(key)) for key in attributes)


def _any_failing_required(attributes: tuple[str, ...], validator: ValidationContext) -> bool:
    return any(not is_present(key, validator.get_value(key)) for key in attributes)


PREDICATES = (
    Predicate("required", validate_required),
    Predicate("accepted", validate_accepted),
    Predicate("sometimes", validate_sometimes),
    Predicate("required_if", validate_required_if, 2),
    Predicate("required_with", validate_required_with, 1),
    Predicate("required_with_all", validate_required_with_all, 1),
    Predicate("required_without", validate_required_without, 1),
    Predicate("required_without_all", validate_required_without_all, 1),
)
