"""
Rule token parsing.

The format for rules follows an easy {rule}:{parameters} convention. For
instance "max:3" states that the value may be at most three, and
"digits_between:2,5" carries two parameters.
"""

import csv
from collections.abc import Iterable, Mapping

from fieldrules.core.errors import MalformedRuleError
from fieldrules.core.models import RuleSpec
from fieldrules.utils.strings import studly

RULE_SEPARATOR = "|"


def parse_parameters(rule: str, parameter: str) -> list[str]:
    """
    Split a raw parameter string.

    The regex rule keeps its pattern whole since patterns may contain commas.
    Every other rule is split as one CSV row, so a quoted parameter may hold a
    literal comma.

    Raises:
        MalformedRuleError: If the parameters are not a single CSV row
    """
    if rule.strip().lower() == "regex":
        return [parameter]

    try:
        return next(csv.reader([parameter]), [])
    except csv.Error as e:
        raise MalformedRuleError(rule, f"Cannot split parameters {parameter!r}: {e}") from e


def parse_rule(token: str) -> RuleSpec | None:
    """
    Parse one rule token into a RuleSpec.

    Args:
        token: Rule token such as "max:10" or "required"

    Returns:
        The parsed RuleSpec, or None for a blank token
    """
    if not token.strip():
        return None

    parameters: list[str] = []
    name = token

    if ":" in token:
        name, parameter = token.split(":", 1)
        parameters = parse_parameters(name, parameter)

    rule_name = studly(name)
    if not rule_name:
        raise MalformedRuleError(token, "Rule token has no rule name")

    return RuleSpec(rule_name=rule_name, parameters=tuple(parameters))


def parse_rule_list(rules: str | RuleSpec | Iterable[str | RuleSpec]) -> list[RuleSpec]:
    """Parse one attribute's rules, skipping blank tokens."""
    if isinstance(rules, (str, RuleSpec)):
        rules = rules.split(RULE_SEPARATOR) if isinstance(rules, str) else [rules]

    parsed: list[RuleSpec] = []
    for rule in rules:
        if isinstance(rule, RuleSpec):
            parsed.append(rule)
        elif isinstance(rule, str):
            spec = parse_rule(rule)
            if spec is not None:
                parsed.append(spec)
        else:
            raise MalformedRuleError(
                repr(rule),
                f"Rules must be strings or RuleSpec objects, got {type(rule).__name__}",
            )
    return parsed


def explode_rules(rules: Mapping[str, str | RuleSpec | Iterable[str | RuleSpec]]) -> dict[str, list[RuleSpec]]:
    """
    Parse a whole rule map once.

    Args:
        rules: Attribute -> "required|max:10" string or list of tokens/RuleSpecs

    Returns:
        Attribute -> ordered list of RuleSpec
    """
    return {attribute: parse_rule_list(attribute_rules) for attribute, attribute_rules in rules.items()}
