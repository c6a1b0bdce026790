"""
Predicate dispatch from parsed rules to registry entries.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from fieldrules.core.errors import UnknownRuleError
from fieldrules.core.models import RuleSpec
from fieldrules.core.validators import (
    Predicate,
    PredicateRegistry,
    ValidationContext,
    default_registry,
    require_parameter_count,
)


class PredicateDispatcher:
    """
    Looks rules up in a registry and invokes their predicates.

    Args:
        registry: Rule catalogue, the built-in one by default
    """

    def __init__(self, registry: PredicateRegistry | None = None):
        self.registry = registry if registry is not None else default_registry()

    def lookup(self, rule: RuleSpec, attribute: str | None = None) -> Predicate:
        """
        Raises:
            UnknownRuleError: If no predicate is registered for the rule
        """
        try:
            return self.registry[rule.rule_name]
        except KeyError:
            raise UnknownRuleError(rule.message_key, attribute) from None

    def check_known(self, rules: Mapping[str, Sequence[RuleSpec]]) -> None:
        """
        Fail fast on the first rule the registry does not know.

        Raises:
            UnknownRuleError: For the first unknown rule
        """
        for attribute, attribute_rules in rules.items():
            for rule in attribute_rules:
                self.lookup(rule, attribute)

    def dispatch(self, attribute: str, value: Any, rule: RuleSpec, validator: ValidationContext) -> bool:
        """
        Run a rule's predicate.

        Returns:
            Whether the value satisfies the rule

        Raises:
            UnknownRuleError: If no predicate is registered for the rule
            InsufficientParametersError: If the rule has fewer parameters than its predicate needs
        """
        predicate = self.lookup(rule, attribute)
        require_parameter_count(predicate.arity, rule.parameters, rule.message_key)
        return predicate(attribute, value, rule.parameters, validator)
