"""
Date predicates: date, date_format, before, after.
"""

import operator
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from fieldrules.core.errors import MalformedRuleError

from .base_validator import Predicate, ValidationContext, stringify

# Formats tried, in order, after ISO 8601
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

# Date format characters understood by date_format, mapped to strptime
FORMAT_CHARACTERS = {
    "d": "%d", "j": "%d", "D": "%a", "l": "%A", "N": "%u", "w": "%w",
    "m": "%m", "n": "%m", "M": "%b", "F": "%B",
    "Y": "%Y", "y": "%y",
    "a": "%p", "A": "%p", "g": "%I", "h": "%I", "G": "%H", "H": "%H",
    "i": "%M", "s": "%S", "u": "%f",
    "O": "%z", "P": "%z", "T": "%Z",
}


def _relative_date(word: str) -> datetime | None:
    today = datetime.combine(date.today(), datetime.min.time())
    return {
        "now": datetime.now(),
        "today": today,
        "tomorrow": today + timedelta(days=1),
        "yesterday": today - timedelta(days=1),
    }.get(word)


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any) -> datetime | None:
    """
    Read a date from a datetime, a date or a date string.

    Returns None when the value is not a recognisable date. Timezone-aware
    results are converted to naive UTC so any two parsed dates compare.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    relative = _relative_date(text.lower())
    if relative is not None:
        return relative

    try:
        return _naive_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


@lru_cache(maxsize=128)
def translate_format(fmt: str) -> str:
    """
    Translate a date_format parameter into a strptime format.

    "Y-m-d H:i:s" becomes "%Y-%m-%d %H:%M:%S". A backslash escapes the next
    character. A format that already contains "%" is taken as strptime syntax.

    Raises:
        MalformedRuleError: If the format uses an unsupported character
    """
    if "%" in fmt:
        return fmt

    translated = []
    escaped = False
    for char in fmt:
        if escaped:
            translated.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in FORMAT_CHARACTERS:
            translated.append(FORMAT_CHARACTERS[char])
        elif char.isalpha():
            raise MalformedRuleError("date_format", f"Unsupported format character '{char}' in {fmt!r}")
        else:
            translated.append(char)
    return "".join(translated)


def validate_date(attribute: str, value: Any, parameters: tuple[str, ...],
                  validator: ValidationContext) -> bool:
    return parse_date(value) is not None


def validate_date_format(attribute: str, value: Any, parameters: tuple[str, ...],
                         validator: ValidationContext) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, translate_format(parameters[0]))
    except ValueError:
        return False
    return True


def _compare(value: Any, reference: str, validator: ValidationContext,
             compare: Callable[[datetime, datetime], bool]) -> bool:
    current = parse_date(value)
    if current is None:
        return False

    # A reference that is not a date names another attribute
    target = parse_date(reference)
    if target is None:
        target = parse_date(validator.get_value(reference))
    if target is None:
        return False

    return compare(current, target)


def validate_before(attribute: str, value: Any, parameters: tuple[str, ...],
                    validator: ValidationContext) -> bool:
    return _compare(value, stringify(parameters[0]), validator, operator.lt)


def validate_after(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    return _compare(value, stringify(parameters[0]), validator, operator.gt)


PREDICATES = (
    Predicate("date", validate_date),
    Predicate("date_format", validate_date_format, 1),
    Predicate("before", validate_before, 1),
    Predicate("after", validate_after, 1),
)
