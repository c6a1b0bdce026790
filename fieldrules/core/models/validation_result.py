"""
ValidationResult model representing the outcome of one validation pass.
"""

from pydantic import BaseModel, Field, field_validator

from .failure import Failure


class ValidationResult(BaseModel):
    """
    Outcome of validating a data bag against a rule set.

    The message list is flat and ordered: one single-entry mapping per
    failure, in attribute-then-rule evaluation order. An attribute that fails
    several rules appears several times. Use grouped() for an
    attribute-keyed view.

    Attributes:
        passed: True when no failure was recorded
        failures: Failing (attribute, rule, parameters) triples
        messages: Resolved {attribute: message} entries, one per failure
    """

    passed: bool
    failures: list[Failure] = Field(default_factory=list)
    messages: list[dict[str, str]] = Field(default_factory=list)

    @field_validator("failures")
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failures is empty."""
        if info.data.get("passed") and len(v) > 0:
            raise ValueError("passed=True but failures is not empty")
        return v

    def grouped(self) -> dict[str, list[str]]:
        """Messages keyed by attribute, keeping evaluation order."""
        grouped: dict[str, list[str]] = {}
        for entry in self.messages:
            for attribute, message in entry.items():
                grouped.setdefault(attribute, []).append(message)
        return grouped

    def failed_rules(self) -> dict[str, dict[str, tuple[str, ...]]]:
        """Failed rules per attribute mapped to the parameters they ran with."""
        failed: dict[str, dict[str, tuple[str, ...]]] = {}
        for failure in self.failures:
            failed.setdefault(failure.attribute, {})[failure.rule] = failure.parameters
        return failed

    def outcome(self) -> bool | list[dict[str, str]]:
        """True on success, otherwise the flat message list."""
        if self.passed:
            return True
        return list(self.messages)

    def __bool__(self) -> bool:
        return self.passed
