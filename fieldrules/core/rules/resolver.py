"""
Value resolution against the data and file bags.
"""

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from fieldrules.core.absent import ABSENT
from fieldrules.core.models import is_file_like


def array_get(source: Any, key: str) -> Any:
    """
    Get a value from a nested structure using dot notation.

    The full key is tried first, so flat keys containing dots still resolve.
    Numeric segments index into sequences. Any missing segment yields ABSENT.

    Examples:
        >>> array_get({"user": {"name": "heming"}}, "user.name")
        'heming'
        >>> array_get({"user": {}}, "user.name")
        ABSENT
    """
    if isinstance(source, Mapping) and key in source:
        return source[key]

    current = source
    for segment in key.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        elif (
            isinstance(current, Sequence)
            and not isinstance(current, (str, bytes))
            and segment.lstrip("-").isdigit()
            and -len(current) <= int(segment) < len(current)
        ):
            current = current[int(segment)]
        else:
            return ABSENT
    return current


class ValueResolver:
    """
    Holds the partitioned input and resolves attribute values.

    Every value the file classifier accepts moves into the file bag. The
    partition happens once, here, and both bags are read-only afterwards.
    """

    def __init__(self, data: Mapping[str, Any], file_classifier: Callable[[Any], bool] | None = None):
        self.file_classifier = file_classifier or is_file_like

        scalars: dict[str, Any] = {}
        files: dict[str, Any] = {}
        for key, value in data.items():
            if self.file_classifier(value):
                files[key] = value
            else:
                scalars[key] = value

        self.data: Mapping[str, Any] = MappingProxyType(scalars)
        self.files: Mapping[str, Any] = MappingProxyType(files)

    def resolve(self, attribute: str) -> Any:
        """Value from the data bag, then the file bag, else ABSENT."""
        value = array_get(self.data, attribute)
        if value is not ABSENT:
            return value
        return array_get(self.files, attribute)

    def resolve_data(self, attribute: str) -> Any:
        """Value from the data bag only."""
        return array_get(self.data, attribute)

    def is_submitted(self, attribute: str) -> bool:
        """Whether the attribute was present in the input, whatever its value."""
        return array_get(self.data, attribute) is not ABSENT or array_get(self.files, attribute) is not ABSENT
