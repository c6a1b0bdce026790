"""
Error taxonomy for the rule engine.

Configuration errors mean the rules, messages or wiring were declared wrongly
and abort the validation pass. Bad input data is never raised: it is recorded
as a Failure on the ValidationResult.
"""


class FieldRulesError(Exception):
    """Base class for every error raised by fieldrules."""


class ConfigurationError(FieldRulesError):
    """A rule set, message catalogue or engine wiring problem."""


class MalformedRuleError(ConfigurationError):
    """A rule token or its parameters cannot be interpreted."""

    def __init__(self, rule_name: str, message: str):
        self.rule_name = rule_name
        self.message = message
        super().__init__(f"[{rule_name}] {message}")


class InsufficientParametersError(MalformedRuleError):
    """A rule received fewer parameters than its predicate needs."""

    def __init__(self, rule_name: str, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            rule_name,
            f"Validation rule {rule_name} requires at least {expected} parameters, got {received}.",
        )


class UnknownRuleError(ConfigurationError):
    """No predicate is registered under the rule identifier."""

    def __init__(self, rule_name: str, attribute: str | None = None):
        self.rule_name = rule_name
        self.attribute = attribute
        where = f" (attribute '{attribute}')" if attribute else ""
        super().__init__(f"Unknown validation rule: {rule_name}{where}")


class UndefinedMessageError(ConfigurationError):
    """Neither the attribute-specific nor the general message key exists."""

    def __init__(self, attribute: str, rule: str):
        self.attribute = attribute
        self.rule = rule
        super().__init__(f"{attribute}'s message undefined for rule '{rule}'")


class MissingPresenceVerifierError(ConfigurationError):
    """A database rule ran on an engine without a presence verifier."""

    def __init__(self):
        super().__init__("Presence verifier has not been set.")


class PresenceVerifierError(FieldRulesError):
    """The external presence verifier failed to answer a count query."""
