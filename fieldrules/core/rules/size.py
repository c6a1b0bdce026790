"""
Size classification for the size, between, min and max rules.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from fieldrules.core.models import RuleSpec, is_file_like
from fieldrules.core.validators.base_validator import (
    is_numeric,
    normalize_rule_name,
    stringify,
    to_number,
)

# Rules that make a numeric value measure as a number instead of a length
NUMERIC_RULES = frozenset(normalize_rule_name(name) for name in ("numeric", "integer", "max", "min", "size"))


class SizeClassifier:
    """
    Computes a rule-comparable size for a value.

    - numeric value on an attribute carrying a numeric rule: the number
    - list, tuple, set or mapping: number of elements
    - file-like value: size in kilobytes
    - anything else: character length of its string form
    """

    def __init__(self, file_classifier: Callable[[Any], bool] | None = None):
        self.file_classifier = file_classifier or is_file_like

    @staticmethod
    def has_numeric_rule(attribute_rules: Sequence[RuleSpec]) -> bool:
        return any(rule.key in NUMERIC_RULES for rule in attribute_rules)

    def size_of(self, attribute: str, value: Any, attribute_rules: Sequence[RuleSpec]) -> int | float:
        if is_numeric(value) and self.has_numeric_rule(attribute_rules):
            return to_number(value)
        if isinstance(value, (list, tuple, set, frozenset, Mapping)):
            return len(value)
        if self.file_classifier(value):
            return value.size / 1024
        return len(stringify(value))
