"""
Message resolution and failure aggregation.

A failing rule's message is looked up under "{attribute}.{rule}" first, then
under "{rule}". Rule keys are the snake_case rule names ("digits_between").
Templates may use placeholders such as :attribute, :min, :max or :values;
a template without placeholders is returned as written.
"""

import re
from collections.abc import Callable, Mapping

from fieldrules.core.errors import UndefinedMessageError
from fieldrules.core.models import Failure, RuleSpec
from fieldrules.core.validators.base_validator import normalize_rule_name

_PLACEHOLDER = re.compile(r":(attribute|values|value|min|max|size|digits|other|date|format)\b")

Replacer = Callable[[tuple[str, ...], Callable[[str], str]], dict[str, str]]


def _first_as(name: str) -> Replacer:
    return lambda params, display: {name: params[0]} if params else {}


def _bounds(params, display) -> dict[str, str]:
    return {"min": params[0], "max": params[1]} if len(params) > 1 else {}


def _other(params, display) -> dict[str, str]:
    return {"other": display(params[0])} if params else {}


def _other_value(params, display) -> dict[str, str]:
    replacements = _other(params, display)
    if len(params) > 1:
        replacements["value"] = ", ".join(params[1:])
    return replacements


def _listed_values(params, display) -> dict[str, str]:
    return {"values": ", ".join(params)}


def _listed_attributes(params, display) -> dict[str, str]:
    return {"values": ", ".join(display(name) for name in params)}


REPLACERS: dict[str, Replacer] = {
    normalize_rule_name(name): replacer
    for name, replacer in (
        ("size", _first_as("size")),
        ("min", _first_as("min")),
        ("max", _first_as("max")),
        ("digits", _first_as("digits")),
        ("between", _bounds),
        ("digits_between", _bounds),
        ("same", _other),
        ("different", _other),
        ("required_if", _other_value),
        ("in", _listed_values),
        ("not_in", _listed_values),
        ("mimes", _listed_values),
        ("required_with", _listed_attributes),
        ("required_with_all", _listed_attributes),
        ("required_without", _listed_attributes),
        ("required_without_all", _listed_attributes),
        ("before", _first_as("date")),
        ("after", _first_as("date")),
        ("date_format", _first_as("format")),
    )
}


class MessageResolver:
    """
    Turns a failing (attribute, rule) into message text.

    Args:
        messages: Message catalogue keyed by "attribute.rule" or "rule"
        attributes: Display names substituted for :attribute and :other
    """

    def __init__(self, messages: Mapping[str, str] | None = None, attributes: Mapping[str, str] | None = None):
        self.messages = dict(messages or {})
        self.attributes = dict(attributes or {})

    def display_name(self, attribute: str) -> str:
        return self.attributes.get(attribute, attribute)

    def template(self, attribute: str, rule: RuleSpec) -> str:
        """
        Raises:
            UndefinedMessageError: If neither key is in the catalogue
        """
        specific = f"{attribute}.{rule.message_key}"
        if specific in self.messages:
            return self.messages[specific]
        if rule.message_key in self.messages:
            return self.messages[rule.message_key]
        raise UndefinedMessageError(attribute, rule.message_key)

    def resolve(self, attribute: str, rule: RuleSpec) -> str:
        template = self.template(attribute, rule)
        if ":" not in template:
            return template

        replacements = {"attribute": self.display_name(attribute)}
        replacer = REPLACERS.get(rule.key)
        if replacer is not None:
            replacements.update(replacer(rule.parameters, self.display_name))

        return _PLACEHOLDER.sub(lambda m: replacements.get(m.group(1), m.group(0)), template)


class FailureAggregator:
    """
    Append-only record of one pass's failures and their messages.

    The message list keeps one {attribute: message} entry per failure in
    evaluation order, so an attribute failing twice appears twice.
    """

    def __init__(self, resolver: MessageResolver):
        self.resolver = resolver
        self.failures: list[Failure] = []
        self.messages: list[dict[str, str]] = []

    def add(self, attribute: str, rule: RuleSpec) -> Failure:
        """
        Record a failure.

        The message is resolved first, so an undefined message aborts the
        pass without leaving a half-recorded failure behind.
        """
        message = self.resolver.resolve(attribute, rule)
        failure = Failure(attribute=attribute, rule=rule.rule_name, parameters=rule.parameters)
        self.failures.append(failure)
        self.messages.append({attribute: message})
        return failure

    def __len__(self) -> int:
        return len(self.failures)
