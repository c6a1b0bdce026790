"""
Applicability policy deciding whether a rule runs for an attribute.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from fieldrules.core.models import RuleSpec
from fieldrules.core.validators.base_validator import is_present, normalize_rule_name
from fieldrules.observability.logger import get_logger

logger = get_logger(__name__)

# Rules that run even when the value is missing
IMPLICIT_RULES = frozenset(
    normalize_rule_name(name)
    for name in (
        "required",
        "required_with",
        "required_with_all",
        "required_without",
        "required_without_all",
        "required_if",
        "accepted",
    )
)

SOMETIMES = normalize_rule_name("sometimes")


class RuleState(str, Enum):
    """Per (attribute, rule) state within one validation pass."""

    NOT_EVALUATED = "not_evaluated"
    APPLICABLE = "applicable"
    SKIPPED = "skipped"


class ApplicabilityPolicy:
    """
    A rule applies when the value is present or the rule is implicit, and the
    attribute is either unconditional or was actually submitted.
    """

    def __init__(self, implicit_rules: frozenset[str] = IMPLICIT_RULES):
        self.implicit_rules = implicit_rules

    def is_implicit(self, rule: RuleSpec) -> bool:
        return rule.key in self.implicit_rules

    def decide(
        self,
        rule: RuleSpec,
        attribute: str,
        value: Any,
        attribute_rules: Sequence[RuleSpec],
        submitted: bool,
    ) -> RuleState:
        """
        Decide whether a rule runs for an attribute this pass.

        Args:
            rule: The rule about to run
            attribute: Attribute name
            value: Resolved value (possibly ABSENT)
            attribute_rules: Every rule declared on the attribute
            submitted: Whether the attribute key was present in the input

        Returns:
            RuleState.APPLICABLE or RuleState.SKIPPED
        """
        present_or_implicit = is_present(attribute, value) or self.is_implicit(rule)
        optional_check = submitted or not any(r.key == SOMETIMES for r in attribute_rules)

        if present_or_implicit and optional_check:
            return RuleState.APPLICABLE

        logger.debug(
            f"Skipping rule '{rule.message_key}' for '{attribute}'",
            extra={"attribute": attribute, "rule": rule.message_key,
                   "reason": "not submitted" if not optional_check else "value missing"},
        )
        return RuleState.SKIPPED
