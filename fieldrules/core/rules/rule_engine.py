"""
Rule engine running one validation pass over a data bag.

A Validator is built for one input. Construction parses every rule, moves
file-like values into the file bag and checks every rule against the
registry, so configuration mistakes surface before any data is looked at.
validate() then walks attributes and their rules in declaration order and
records a Failure for each predicate that returns False.
"""

import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from fieldrules.core.errors import ConfigurationError
from fieldrules.core.models import RuleSpec, ValidationResult
from fieldrules.core.validators import PredicateRegistry
from fieldrules.observability.logger import get_logger
from fieldrules.observability.metrics import (
    record_configuration_error,
    record_rule_evaluation,
    record_rule_failure,
    record_validation_pass,
)

from .applicability import ApplicabilityPolicy, RuleState
from .dispatcher import PredicateDispatcher
from .messages import FailureAggregator, MessageResolver
from .parser import explode_rules
from .resolver import ValueResolver
from .size import SizeClassifier

logger = get_logger(__name__)

RuleMap = Mapping[str, str | RuleSpec | Iterable[str | RuleSpec]]


class Validator:
    """
    Validates a data bag against per-attribute rules.

    Example:
        >>> validator = Validator(
        ...     {"mobile": "1234"},
        ...     {"mobile": "required|digits:11"},
        ...     {"mobile.digits": "Mobile number must be 11 digits"},
        ... )
        >>> validator.fails()
        True
        >>> validator.messages()
        [{'mobile': 'Mobile number must be 11 digits'}]
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        rules: RuleMap,
        messages: Mapping[str, str] | None = None,
        *,
        attributes: Mapping[str, str] | None = None,
        presence_verifier: Any = None,
        registry: PredicateRegistry | None = None,
        file_classifier: Callable[[Any], bool] | None = None,
        name: str = "adhoc",
    ):
        """
        Initialize the engine.

        Args:
            data: Input values; file-like values move to the file bag
            rules: Attribute -> "rule|rule:param" string or list of tokens/RuleSpecs
            messages: Message catalogue ("attribute.rule" or "rule" keys)
            attributes: Display names for :attribute placeholders
            presence_verifier: Backend for the unique and exists rules
            registry: Rule catalogue, the built-in one by default
            file_classifier: Predicate recognising file-like values
            name: Rule set name used in logs and metrics

        Raises:
            MalformedRuleError: If a rule token cannot be parsed
            UnknownRuleError: If a rule has no registered predicate
        """
        self.name = name
        try:
            self.rules: dict[str, list[RuleSpec]] = explode_rules(rules)
            self.dispatcher = PredicateDispatcher(registry)
            self.dispatcher.check_known(self.rules)
        except ConfigurationError as e:
            record_configuration_error(self.name, e)
            logger.error(f"Invalid rule configuration for '{self.name}': {e}")
            raise

        self.resolver = ValueResolver(data, file_classifier)
        self.policy = ApplicabilityPolicy()
        self.sizes = SizeClassifier(self.resolver.file_classifier)
        self.message_resolver = MessageResolver(messages, attributes)

        self._presence_verifier = presence_verifier
        self._result: ValidationResult | None = None

    # =======================
    # ENGINE CONTEXT
    # =======================

    @property
    def data(self) -> Mapping[str, Any]:
        return self.resolver.data

    @property
    def files(self) -> Mapping[str, Any]:
        return self.resolver.files

    @property
    def presence_verifier(self) -> Any:
        return self._presence_verifier

    def set_presence_verifier(self, verifier: Any) -> "Validator":
        self._presence_verifier = verifier
        return self

    def rules_for(self, attribute: str) -> list[RuleSpec]:
        return self.rules.get(attribute, [])

    def get_value(self, attribute: str) -> Any:
        return self.resolver.resolve(attribute)

    def get_data_value(self, attribute: str) -> Any:
        return self.resolver.resolve_data(attribute)

    def get_size(self, attribute: str, value: Any) -> int | float:
        return self.sizes.size_of(attribute, value, self.rules_for(attribute))

    def is_file(self, value: Any) -> bool:
        return self.resolver.file_classifier(value)

    # =======================
    # VALIDATION PASS
    # =======================

    def validate(self) -> ValidationResult:
        """
        Run the validation pass, once.

        Later calls return the same result.

        Returns:
            ValidationResult with failures and messages in evaluation order

        Raises:
            ConfigurationError: On insufficient parameters or an undefined message
            PresenceVerifierError: If the presence verifier fails
        """
        if self._result is not None:
            return self._result

        aggregator = FailureAggregator(self.message_resolver)
        start = time.perf_counter()

        try:
            for attribute, attribute_rules in self.rules.items():
                for rule in attribute_rules:
                    self._evaluate(attribute, rule, attribute_rules, aggregator)
        except ConfigurationError as e:
            record_configuration_error(self.name, e)
            logger.error(f"Validation pass '{self.name}' aborted: {e}")
            raise

        duration = time.perf_counter() - start
        passed = len(aggregator) == 0
        self._result = ValidationResult(
            passed=passed,
            failures=aggregator.failures,
            messages=aggregator.messages,
        )

        record_validation_pass(self.name, passed, len(aggregator), duration)
        logger.info(
            f"Validation pass '{self.name}' {'passed' if passed else 'failed'}",
            extra={
                "rule_set": self.name,
                "attributes": len(self.rules),
                "failures": len(aggregator),
                "duration_seconds": round(duration, 6),
            },
        )
        return self._result

    def _evaluate(
        self,
        attribute: str,
        rule: RuleSpec,
        attribute_rules: list[RuleSpec],
        aggregator: FailureAggregator,
    ) -> None:
        value = self.get_value(attribute)
        state = self.policy.decide(
            rule, attribute, value, attribute_rules, self.resolver.is_submitted(attribute)
        )
        record_rule_evaluation(rule.message_key, state is RuleState.APPLICABLE)
        if state is not RuleState.APPLICABLE:
            return

        if not self.dispatcher.dispatch(attribute, value, rule, self):
            aggregator.add(attribute, rule)
            record_rule_failure(self.name, rule.message_key)

    def passes(self) -> bool:
        return self.validate().passed

    def fails(self) -> bool:
        return not self.passes()

    def messages(self) -> list[dict[str, str]]:
        return list(self.validate().messages)

    def failures(self) -> list:
        return list(self.validate().failures)

    def failed_rules(self) -> dict[str, dict[str, tuple[str, ...]]]:
        return self.validate().failed_rules()

    def __repr__(self) -> str:
        return f"Validator(name={self.name!r}, attributes={list(self.rules)})"
