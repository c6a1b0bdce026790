"""
Identifier case conversions shared by the rule parser and message lookup.
"""

import re

_WORD_SEPARATORS = re.compile(r"[-_\s]+")
_BEFORE_UPPER = re.compile(r"(.)(?=[A-Z])")


def studly(value: str) -> str:
    """
    Convert a rule name to StudlyCase.

    Examples:
        >>> studly("digits_between")
        'DigitsBetween'
        >>> studly("max")
        'Max'
        >>> studly("digitsbetween")
        'Digitsbetween'
    """
    words = _WORD_SEPARATORS.split(value.strip())
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def snake(value: str, delimiter: str = "_") -> str:
    """
    Convert a StudlyCase identifier to snake_case.

    Examples:
        >>> snake("DigitsBetween")
        'digits_between'
        >>> snake("Digitsbetween")
        'digitsbetween'
    """
    if value.islower():
        return value
    return _BEFORE_UPPER.sub(r"\1" + delimiter, value).lower()
