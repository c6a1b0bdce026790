"""
Rule set configuration.

Loads rule sets from YAML files and builds them programmatically.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from fieldrules.core.errors import ConfigurationError
from fieldrules.core.models import RuleSet, RuleSpec
from fieldrules.observability.logger import get_logger
from fieldrules.utils.strings import studly

logger = get_logger(__name__)


class RuleConfigLoader:
    """
    Loads a rule set from a YAML configuration file.

    Expected YAML format:
    ```yaml
    name: signup_form
    rules:
      mobile: required|digits:11
      email:
        - required
        - email
      nickname:
        - rule: regex
          params: "/^[a-z,]+$/"
        - rule: digits_between
          params: [1, 6]
    messages:
      mobile.digits: "Mobile number must be 11 digits"
      required: "The :attribute field is required"
    attributes:
      mobile: mobile number
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load(self) -> RuleSet:
        """
        Load and parse the rule set.

        Returns:
            RuleSet named after the "name" key, or the file stem

        Raises:
            ConfigurationError: If the YAML is invalid or the rule set is malformed
        """
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict) or "rules" not in config:
            raise ConfigurationError("Configuration file must contain 'rules' section")

        return self.parse(config, default_name=self.config_path.stem)

    @classmethod
    def parse(cls, config: dict[str, Any], default_name: str = "rules") -> RuleSet:
        """
        Build a RuleSet from an already-loaded mapping.

        Raises:
            ConfigurationError: If the mapping does not describe a valid rule set
        """
        rules_section = config.get("rules")
        if not isinstance(rules_section, dict):
            raise ConfigurationError("'rules' must map attribute names to rules")

        rules = {
            str(attribute): cls._parse_attribute_rules(str(attribute), attribute_rules)
            for attribute, attribute_rules in rules_section.items()
        }

        try:
            rule_set = RuleSet(
                name=str(config.get("name") or default_name),
                rules=rules,
                messages={str(k): str(v) for k, v in (config.get("messages") or {}).items()},
                attributes={str(k): str(v) for k, v in (config.get("attributes") or {}).items()},
            )
        except (ValidationError, AttributeError) as e:
            raise ConfigurationError(f"Invalid rule set configuration: {e}") from e

        logger.debug(f"Loaded rule set '{rule_set.name}' with {len(rule_set.rules)} attributes")
        return rule_set

    @classmethod
    def _parse_attribute_rules(cls, attribute: str, attribute_rules: Any) -> str | list[str | RuleSpec]:
        if isinstance(attribute_rules, str):
            return attribute_rules
        if not isinstance(attribute_rules, list):
            raise ConfigurationError(f"Rules for attribute '{attribute}' must be a string or a list")
        return [cls._parse_rule(attribute, rule_def) for rule_def in attribute_rules]

    @staticmethod
    def _parse_rule(attribute: str, rule_def: Any) -> str | RuleSpec:
        """
        Parse one list entry: a rule token, or a mapping with "rule" and "params".

        Mapping parameters are taken as given, so they may contain commas.
        """
        if isinstance(rule_def, str):
            return rule_def
        if not isinstance(rule_def, dict):
            raise ConfigurationError(
                f"Rule for attribute '{attribute}' must be a string or a mapping, got {rule_def!r}"
            )
        if "rule" not in rule_def:
            raise ConfigurationError(f"Rule for attribute '{attribute}' is missing 'rule'")

        params = rule_def.get("params", rule_def.get("parameters", []))
        if not isinstance(params, list):
            params = [params]

        return RuleSpec(
            rule_name=studly(str(rule_def["rule"])),
            parameters=tuple(str(param) for param in params),
        )


class RuleConfigBuilder:
    """
    Programmatically build rule sets (for testing or dynamic rules).

    Example:
        >>> rule_set = (
        ...     RuleConfigBuilder("signup")
        ...     .add_required("email")
        ...     .add_rule("email", "email")
        ...     .add_message("required", "The :attribute field is required")
        ...     .build()
        ... )
    """

    def __init__(self, name: str = "rules"):
        self.name = name
        self.rules: dict[str, list[str | RuleSpec]] = {}
        self.messages: dict[str, str] = {}
        self.attributes: dict[str, str] = {}

    def add_rule(self, attribute: str, rule: str | RuleSpec, *parameters: Any) -> "RuleConfigBuilder":
        """Append a rule token, or a rule name with separate parameters."""
        if parameters:
            rule = RuleSpec(rule_name=studly(str(rule)), parameters=tuple(str(p) for p in parameters))
        self.rules.setdefault(attribute, []).append(rule)
        return self

    def add_required(self, attribute: str) -> "RuleConfigBuilder":
        return self.add_rule(attribute, "required")

    def add_between(
        self,
        attribute: str,
        min_value: float | None = None,
        max_value: float | None = None,
    ) -> "RuleConfigBuilder":
        """Add between, min or max depending on which bounds are given."""
        if min_value is not None and max_value is not None:
            return self.add_rule(attribute, "between", min_value, max_value)
        if min_value is not None:
            return self.add_rule(attribute, "min", min_value)
        if max_value is not None:
            return self.add_rule(attribute, "max", max_value)
        return self

    def add_regex(self, attribute: str, pattern: str) -> "RuleConfigBuilder":
        return self.add_rule(attribute, "regex", pattern)

    def add_message(self, key: str, message: str) -> "RuleConfigBuilder":
        """Add a message under "rule" or "attribute.rule"."""
        self.messages[key] = message
        return self

    def add_attribute_name(self, attribute: str, display_name: str) -> "RuleConfigBuilder":
        self.attributes[attribute] = display_name
        return self

    def build(self) -> RuleSet:
        return RuleSet(
            name=self.name,
            rules={attribute: list(rules) for attribute, rules in self.rules.items()},
            messages=dict(self.messages),
            attributes=dict(self.attributes),
        )
