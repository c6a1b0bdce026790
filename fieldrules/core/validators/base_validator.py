"""
Predicate registry and the helpers every predicate shares.

A predicate is a plain function

    def validate_max(attribute, value, parameters, validator) -> bool

registered under a rule identifier with the number of parameters it needs.
The dispatcher enforces that arity before calling it.
"""

import math
import re
from collections.abc import Callable, Iterable, Iterator, Mapping, Sized
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Protocol

from fieldrules.core.absent import ABSENT
from fieldrules.core.errors import InsufficientParametersError, MalformedRuleError
from fieldrules.core.models import UploadedFile
from fieldrules.utils.strings import snake, studly

_NUMERIC_STRING = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$", re.ASCII)


class ValidationContext(Protocol):
    """What predicates may use from the engine running them."""

    @property
    def data(self) -> Mapping[str, Any]: ...

    @property
    def files(self) -> Mapping[str, Any]: ...

    @property
    def presence_verifier(self) -> Any: ...

    def get_value(self, attribute: str) -> Any: ...

    def get_data_value(self, attribute: str) -> Any: ...

    def get_size(self, attribute: str, value: Any) -> float: ...

    def is_file(self, value: Any) -> bool: ...


PredicateFunc = Callable[[str, Any, tuple[str, ...], ValidationContext], bool]


@dataclass(frozen=True)
class Predicate:
    """A rule implementation and the parameters it requires."""

    name: str
    func: PredicateFunc
    arity: int = 0

    @property
    def key(self) -> str:
        return normalize_rule_name(self.name)

    def __call__(self, attribute: str, value: Any, parameters: tuple[str, ...],
                 validator: ValidationContext) -> bool:
        return bool(self.func(attribute, value, parameters, validator))


def normalize_rule_name(name: str) -> str:
    """Lookup key for a rule name: "digits_between", "DigitsBetween" -> "digitsbetween"."""
    return studly(name).lower()


class PredicateRegistry(Mapping[str, Predicate]):
    """
    Immutable map from rule identifier to predicate.

    Lookups are case-insensitive and ignore "_" / "-" separators. Use
    extend() to derive a registry with custom or overriding predicates.
    """

    def __init__(self, predicates: Iterable[Predicate] = ()):
        self._predicates: Mapping[str, Predicate] = MappingProxyType(
            {predicate.key: predicate for predicate in predicates}
        )

    def __getitem__(self, name: str) -> Predicate:
        return self._predicates[normalize_rule_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_rule_name(name) in self._predicates

    def __iter__(self) -> Iterator[str]:
        return iter(self._predicates)

    def __len__(self) -> int:
        return len(self._predicates)

    def extend(
        self,
        predicates: Mapping[str, PredicateFunc | tuple[PredicateFunc, int]] | Iterable[Predicate],
    ) -> "PredicateRegistry":
        """
        Return a new registry with additional predicates.

        Args:
            predicates: Predicate objects, or a mapping of rule name to a
                function or a (function, arity) pair
        """
        if isinstance(predicates, Mapping):
            extra = []
            for name, entry in predicates.items():
                func, arity = entry if isinstance(entry, tuple) else (entry, 0)
                extra.append(Predicate(snake(studly(name)), func, arity))
        else:
            extra = list(predicates)
        return PredicateRegistry([*self._predicates.values(), *extra])

    def describe(self) -> list[tuple[str, int]]:
        """Sorted (rule name, arity) pairs."""
        return sorted((p.name, p.arity) for p in self._predicates.values())


def require_parameter_count(count: int, parameters: tuple[str, ...] | list[str], rule: str) -> None:
    """
    Require a certain number of parameters to be present.

    Raises:
        InsufficientParametersError: If fewer than count parameters were given
    """
    if len(parameters) < count:
        raise InsufficientParametersError(rule, count, len(parameters))


def numeric_parameter(parameter: str, rule: str) -> int | float:
    """
    Read a numeric rule parameter ("10" in "max:10").

    Raises:
        MalformedRuleError: If the parameter is not a number
    """
    if not is_numeric(parameter):
        raise MalformedRuleError(rule, f"Parameter '{parameter}' must be numeric")
    return to_number(parameter)


# =======================
# VALUE HELPERS
# =======================

def is_present(attribute: str, value: Any) -> bool:
    """
    The "required" check.

    Missing: no attribute name, ABSENT, None, blank strings, empty
    collections, and uploads that produced no file. 0 and False are present.
    """
    if not attribute or value is None or value is ABSENT:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, UploadedFile):
        return value.path != ""
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def is_numeric(value: Any) -> bool:
    """Numbers (not booleans) and numeric strings, like PHP's is_numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_STRING.match(value))
    return False


def to_number(value: Any) -> int | float:
    """Numeric value of a number or numeric string."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, Decimal):
        return float(value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def stringify(value: Any) -> str:
    """String form of a scalar, as the rule catalogue compares it."""
    if value is None or value is ABSENT or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _truthy(value: Any) -> bool:
    # "0" is false, as submitted form values are
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def loose_equals(left: Any, right: Any) -> bool:
    """
    Loose equality between submitted values.

    Numeric strings compare numerically with numbers and each other, and a
    boolean compares with the truthiness of the other side, where "" and "0"
    are false.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return _truthy(left) == _truthy(right)
    if is_numeric(left) and is_numeric(right):
        return to_number(left) == to_number(right)
    if isinstance(left, (int, float)) or isinstance(right, (int, float)):
        return stringify(left) == stringify(right)
    return left == right
