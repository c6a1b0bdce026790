"""
Predicate library.

Each module contributes a PREDICATES tuple; default_registry() combines them
into the catalogue every engine starts from.
"""

from . import comparison, database, dates, files, numeric, pattern, presence
from .base_validator import (
    Predicate,
    PredicateFunc,
    PredicateRegistry,
    ValidationContext,
    is_numeric,
    is_present,
    loose_equals,
    normalize_rule_name,
    require_parameter_count,
    stringify,
)

CATALOGUE_MODULES = (presence, comparison, numeric, pattern, dates, files, database)


def default_registry() -> PredicateRegistry:
    """Fresh registry holding the full built-in rule catalogue."""
    return PredicateRegistry(
        predicate for module in CATALOGUE_MODULES for predicate in module.PREDICATES
    )


__all__ = [
    "Predicate",
    "PredicateFunc",
    "PredicateRegistry",
    "ValidationContext",
    "default_registry",
    "is_numeric",
    "is_present",
    "loose_equals",
    "normalize_rule_name",
    "require_parameter_count",
    "stringify",
]
