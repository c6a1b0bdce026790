"""
RuleSet model bundling a named rule map with its message catalogue.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from .rule_spec import RuleSpec
from .validation_result import ValidationResult

if TYPE_CHECKING:
    from fieldrules.core.rules.rule_engine import Validator
    from fieldrules.verifiers.base import PresenceVerifier


class RuleSet(BaseModel):
    """
    A named, reusable set of validation rules and messages.

    Attributes:
        name: Rule set name ("signup_form")
        rules: Attribute -> "rule|rule:param" string or list of rule tokens
        messages: Message catalogue ("mobile.digits" or "digits" keys)
        attributes: Optional display names substituted for :attribute
    """

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "signup_form",
                "rules": {
                    "mobile": "required|digits:11",
                    "email": ["required", "email"],
                },
                "messages": {
                    "mobile.digits": "Mobile number must be 11 digits",
                    "required": "The :attribute field is required",
                    "email": "Must be a valid email address",
                },
            }
        },
    }

    name: str = Field(..., min_length=1)
    rules: dict[str, str | list[str | RuleSpec]]
    messages: dict[str, str] = Field(default_factory=dict)
    attributes: dict[str, str] = Field(default_factory=dict)

    def merge(self, other: "RuleSet", name: str | None = None) -> "RuleSet":
        """
        Combine two rule sets.

        Rules of the other set are appended after this set's rules for the
        same attribute. Messages and display names of the other set win.
        """
        rules: dict[str, list[str | RuleSpec]] = {
            attribute: _as_list(tokens) for attribute, tokens in self.rules.items()
        }
        for attribute, tokens in other.rules.items():
            rules.setdefault(attribute, []).extend(_as_list(tokens))

        return RuleSet(
            name=name or f"{self.name}+{other.name}",
            rules=rules,
            messages={**self.messages, **other.messages},
            attributes={**self.attributes, **other.attributes},
        )

    def validator(
        self,
        data: dict[str, Any],
        presence_verifier: "PresenceVerifier | None" = None,
        **kwargs: Any,
    ) -> "Validator":
        """Build a single-use engine for this rule set."""
        from fieldrules.core.rules.rule_engine import Validator

        kwargs.setdefault("name", self.name)
        return Validator(
            data,
            self.rules,
            self.messages,
            attributes=self.attributes,
            presence_verifier=presence_verifier,
            **kwargs,
        )

    def validate(
        self,
        data: dict[str, Any],
        presence_verifier: "PresenceVerifier | None" = None,
        **kwargs: Any,
    ) -> ValidationResult:
        return self.validator(data, presence_verifier, **kwargs).validate()


def _as_list(tokens: str | list[str | RuleSpec]) -> list[str | RuleSpec]:
    if isinstance(tokens, str):
        return tokens.split("|")
    return list(tokens)
