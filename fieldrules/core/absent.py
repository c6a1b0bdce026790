"""
The ABSENT sentinel for attributes missing from the input.
"""

from typing import Any


class _Absent:
    """Marker for an attribute missing from both bags."""

    _instance: "_Absent | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_Absent, ())


ABSENT: Any = _Absent()
