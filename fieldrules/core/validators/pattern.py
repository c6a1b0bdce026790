"""
Format predicates: regex, email, URL, IP address and character classes.
"""

import ipaddress
import re
import socket
from functools import lru_cache
from re import Pattern
from typing import Any
from urllib.parse import urlsplit

from email_validator import EmailNotValidError, validate_email as email_validate

from fieldrules.core.errors import MalformedRuleError

from .base_validator import Predicate, ValidationContext, stringify

_DELIMITED = re.compile(r"^([/#~%@!;`])(.*)\1([a-zA-Z]*)$", re.DOTALL)
_MODIFIER_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE, "u": 0, "D": 0}

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")
_HOSTLESS_SCHEMES = {"mailto", "news", "file"}

_ALPHA = re.compile(r"^[^\W\d_]+$")
_ALPHA_NUM = re.compile(r"^[^\W_]+$")
_ALPHA_DASH = re.compile(r"^[\w-]+$")


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern:
    """
    Compile a rule pattern.

    Delimited patterns ("/^[a-z]+$/i") are unwrapped and their trailing
    modifiers (i, m, s, x, u, D) become re flags. A pattern whose trailing
    letters are not all modifiers ("/usr/bin") is not delimited. Anything
    else is compiled as a plain Python pattern.

    Raises:
        MalformedRuleError: If the pattern is invalid
    """
    flags = 0
    body = pattern

    delimited = _DELIMITED.match(pattern)
    if delimited and all(modifier in _MODIFIER_FLAGS for modifier in delimited.group(3)):
        body = delimited.group(2)
        for modifier in delimited.group(3):
            flags |= _MODIFIER_FLAGS[modifier]

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise MalformedRuleError("regex", f"Invalid regex pattern {pattern!r}: {e}") from e


def validate_regex(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    if not isinstance(value, (str, int, float)):
        return False
    return compile_pattern(parameters[0]).search(stringify(value)) is not None


def validate_email(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    if not isinstance(value, str):
        return False
    try:
        email_validate(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_url(attribute: str, value: Any, parameters: tuple[str, ...],
                 validator: ValidationContext) -> bool:
    """Absolute URL with a scheme and, for network schemes, a host."""
    if not isinstance(value, str) or not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HOSTLESS_SCHEMES:
        return bool(parts.netloc or parts.path)
    return bool(parts.hostname)


def validate_active_url(attribute: str, value: Any, parameters: tuple[str, ...],
                        validator: ValidationContext) -> bool:
    """URL whose host resolves in DNS."""
    if not isinstance(value, str):
        return False
    host = urlsplit(value if "://" in value else f"//{value}").hostname
    if not host:
        return False
    try:
        return len(socket.getaddrinfo(host, None)) > 0
    except (OSError, UnicodeError):
        return False


def validate_ip(attribute: str, value: Any, parameters: tuple[str, ...],
                validator: ValidationContext) -> bool:
    try:
        ipaddress.ip_address(stringify(value))
    except ValueError:
        return False
    return True


def validate_alpha(attribute: str, value: Any, parameters: tuple[str, ...],
                   validator: ValidationContext) -> bool:
    return isinstance(value, str) and bool(_ALPHA.match(value))


def validate_alpha_num(attribute: str, value: Any, parameters: tuple[str, ...],
                       validator: ValidationContext) -> bool:
    return isinstance(value, (str, int)) and bool(_ALPHA_NUM.match(stringify(value)))


def validate_alpha_dash(attribute: str, value: Any, parameters: tuple[str, ...],
                        validator: ValidationContext) -> bool:
    return isinstance(value, (str, int)) and bool(_ALPHA_DASH.match(stringify(value)))


PREDICATES = (
    Predicate("regex", validate_regex, 1),
    Predicate("email", validate_email),
    Predicate("url", validate_url),
    Predicate("active_url", validate_active_url),
    Predicate("ip", validate_ip),
    Predicate("alpha", validate_alpha),
    Predicate("alpha_num", validate_alpha_num),
    Predicate("alpha_dash", validate_alpha_dash),
)
