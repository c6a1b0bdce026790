"""
Unit tests for the rule engine and rule configuration.
"""

import pytest

import fieldrules
from fieldrules.core.errors import (
    ConfigurationError,
    InsufficientParametersError,
    MalformedRuleError,
    UndefinedMessageError,
    UnknownRuleError,
)
from fieldrules.core.models import Failure, RuleSet, RuleSpec, UploadedFile
from fieldrules.core.rules import RuleConfigBuilder, RuleConfigLoader, Validator
from fieldrules.core.validators import default_registry

GENERIC = {
    "required": "The :attribute field is required",
    "digits": "The :attribute must be :digits digits",
    "max": "The :attribute may not be greater than :max",
    "in": "The :attribute must be one of :values",
    "email": "The :attribute must be a valid email address",
}


class TestValidator:
    """Tests for Validator"""

    def test_all_rules_pass(self):
        """Test validation passes when no rule is violated"""
        validator = Validator(
            {"mobile": "12345678901", "email": "a@b.com"},
            {"mobile": "required|digits:11", "email": "required|email"},
            GENERIC,
        )

        result = validator.validate()

        assert result.passed is True
        assert result.failures == []
        assert result.messages == []
        assert result.outcome() is True

    def test_specific_message_wins(self):
        """Message lookup tries attribute.rule before rule"""
        validator = Validator(
            {"mobile": "1234"},
            {"mobile": "required|digits:11"},
            {"mobile.digits": "bad mobile", "digits": "generic"},
        )

        assert validator.messages() == [{"mobile": "bad mobile"}]

    def test_undefined_message_raises(self):
        validator = Validator({"mobile": "1234"}, {"mobile": "digits:11"}, {})

        with pytest.raises(UndefinedMessageError) as exc_info:
            validator.validate()

        assert exc_info.value.attribute == "mobile"
        assert exc_info.value.rule == "digits"

    def test_undefined_message_not_needed_when_passing(self):
        validator = Validator({"mobile": "12345678901"}, {"mobile": "digits:11"}, {})

        assert validator.passes() is True

    def test_all_rules_evaluated_without_short_circuit(self):
        """Every failing rule on an attribute is recorded, in order"""
        validator = Validator(
            {"name": "wanger-the-long"},
            {"name": "max:5|in:zhangsan,lisi"},
            GENERIC,
        )

        result = validator.validate()

        assert [f.rule for f in result.failures] == ["Max", "In"]
        assert result.messages == [
            {"name": "The name may not be greater than 5"},
            {"name": "The name must be one of zhangsan, lisi"},
        ]
        assert result.grouped() == {"name": [
            "The name may not be greater than 5",
            "The name must be one of zhangsan, lisi",
        ]}

    def test_message_order_follows_declaration(self):
        validator = Validator(
            {},
            {"b": "required", "a": "required"},
            GENERIC,
        )

        assert validator.messages() == [
            {"b": "The b field is required"},
            {"a": "The a field is required"},
        ]

    def test_missing_attribute_skips_non_implicit_rules(self):
        """Only the implicit rule fails for a missing attribute"""
        validator = Validator({}, {"mobile": "required|digits:11|max:3"}, GENERIC)

        result = validator.validate()

        assert [f.rule for f in result.failures] == ["Required"]

    def test_optional_attribute_not_validated_when_missing(self):
        validator = Validator({}, {"mobile": "digits:11"}, GENERIC)

        assert validator.passes() is True

    def test_implicit_rules_each_fail_once(self):
        validator = Validator(
            {"status": "active"},
            {"note": "required|required_if:status,active|required_without:other"},
            {"required": "r", "required_if": "ri", "required_without": "rw"},
        )

        assert validator.messages() == [{"note": "r"}, {"note": "ri"}, {"note": "rw"}]

    def test_required_if_scenarios(self):
        rules = {"note": "required_if:status,active"}
        messages = {"required_if": "The :attribute field is required when :other is :value"}

        failing = Validator({"status": "active"}, rules, messages)
        passing = Validator({"status": "inactive"}, rules, messages)

        assert failing.messages() == [{"note": "The note field is required when status is active"}]
        assert passing.passes() is True

    def test_sometimes_skips_unsubmitted(self):
        validator = Validator({}, {"email": "sometimes|email"}, GENERIC)

        assert validator.passes() is True

    def test_sometimes_validates_submitted(self):
        validator = Validator({"email": "a.b.com"}, {"email": "sometimes|email"}, GENERIC)

        assert validator.fails() is True

    def test_sometimes_does_not_stop_implicit_rules_when_submitted(self):
        validator = Validator({"email": ""}, {"email": "sometimes|required"}, GENERIC)

        assert validator.messages() == [{"email": "The email field is required"}]

    def test_unknown_rule_fails_at_construction(self):
        with pytest.raises(UnknownRuleError) as exc_info:
            Validator({"name": "x"}, {"name": "required|shiny"}, GENERIC)

        assert exc_info.value.rule_name == "shiny"
        assert exc_info.value.attribute == "name"

    def test_unknown_rule_fails_even_for_missing_value(self):
        with pytest.raises(UnknownRuleError):
            Validator({}, {"name": "shiny"}, GENERIC)

    def test_insufficient_parameters_during_pass(self):
        validator = Validator({"mobile": "123"}, {"mobile": "digits"}, GENERIC)

        with pytest.raises(InsufficientParametersError) as exc_info:
            validator.validate()

        assert exc_info.value.expected == 1
        assert exc_info.value.received == 0
        assert "requires at least 1 parameters" in str(exc_info.value)

    def test_configuration_errors_are_configuration_errors(self):
        assert issubclass(InsufficientParametersError, MalformedRuleError)
        assert issubclass(UndefinedMessageError, ConfigurationError)
        assert issubclass(UnknownRuleError, ConfigurationError)

    def test_validate_is_memoized(self):
        validator = Validator({}, {"name": "required"}, GENERIC)

        first = validator.validate()
        second = validator.validate()

        assert first is second
        assert len(second.failures) == 1

    def test_failed_rules(self):
        validator = Validator({"name": "toolong"}, {"name": "max:3"}, GENERIC)

        assert validator.failed_rules() == {"name": {"Max": ("3",)}}
        assert validator.failures() == [Failure(attribute="name", rule="Max", parameters=("3",))]

    def test_case_folded_rule_name_uses_written_message_key(self):
        """digitsbetween dispatches like digits_between but keeps its own message key"""
        validator = Validator(
            {"mobile": "1234567"},
            {"mobile": "digitsbetween:1,6"},
            {"mobile.digitsbetween": "bad mobile"},
        )

        assert validator.messages() == [{"mobile": "bad mobile"}]

    def test_custom_display_names(self):
        validator = Validator(
            {},
            {"mobile": "required"},
            GENERIC,
            attributes={"mobile": "mobile number"},
        )

        assert validator.messages() == [{"mobile": "The mobile number field is required"}]

    def test_custom_registry(self):
        registry = default_registry().extend({
            "even": lambda attribute, value, parameters, validator: int(value) % 2 == 0,
        })
        validator = Validator({"n": "3"}, {"n": "even"}, {"even": "odd"}, registry=registry)

        assert validator.messages() == [{"n": "odd"}]

    def test_rule_spec_objects_accepted(self):
        validator = Validator(
            {"name": "abc,def"},
            {"name": [RuleSpec(rule_name="In", parameters=("abc,def",))]},
            GENERIC,
        )

        assert validator.passes() is True

    def test_files_partitioned(self):
        upload = UploadedFile(path="/tmp/a.png", size=10)
        validator = Validator({"avatar": upload, "name": "x"}, {"avatar": "required"}, GENERIC)

        assert dict(validator.files) == {"avatar": upload}
        assert dict(validator.data) == {"name": "x"}
        assert validator.passes() is True

    def test_get_size_is_idempotent(self):
        validator = Validator({"n": "42"}, {"n": "numeric"}, GENERIC)

        assert validator.get_size("n", "42") == validator.get_size("n", "42") == 42

    def test_module_level_validate(self):
        result = fieldrules.validate({"name": "lisi"}, {"name": "in:zhangsan,lisi,wangwu"}, GENERIC)

        assert result.passed is True
        assert bool(result) is True


class TestRuleSet:
    """Tests for RuleSet"""

    def test_validate(self):
        rule_set = RuleSet(
            name="signup",
            rules={"mobile": "required|digits:11"},
            messages={"mobile.digits": "bad mobile", "required": "missing"},
        )

        result = rule_set.validate({"mobile": "1234"})

        assert result.outcome() == [{"mobile": "bad mobile"}]

    def test_validator_carries_name(self):
        rule_set = RuleSet(name="signup", rules={"mobile": "required"})

        assert rule_set.validator({}).name == "signup"

    def test_merge(self):
        base = RuleSet(name="base", rules={"name": "required"}, messages={"required": "a"})
        extra = RuleSet(name="extra", rules={"name": ["max:3"], "age": "numeric"}, messages={"required": "b"})

        merged = base.merge(extra)

        assert merged.name == "base+extra"
        assert merged.rules == {"name": ["required", "max:3"], "age": ["numeric"]}
        assert merged.messages == {"required": "b"}


class TestRuleConfigLoader:
    """Tests for RuleConfigLoader"""

    def test_load_yaml(self, write_file):
        path = write_file("signup.yaml", """
name: signup_form
rules:
  mobile: required|digits:11
  nickname:
    - required
    - rule: regex
      params: "/^[a-z,]+$/"
    - rule: digits_between
      params: [1, 6]
messages:
  mobile.digits: bad mobile
  required: The :attribute field is required
  regex: bad nickname
  digits_between: bad length
attributes:
  mobile: mobile number
""")

        rule_set = RuleConfigLoader(path).load()

        assert rule_set.name == "signup_form"
        assert rule_set.attributes == {"mobile": "mobile number"}
        nickname_rules = rule_set.rules["nickname"]
        assert nickname_rules[1] == RuleSpec(rule_name="Regex")
        assert nickname_rules[1].parameters == ("/^[a-z,]+$/",)
        assert nickname_rules[2].parameters == ("1", "6")

        result = rule_set.validate({"mobile": "1234", "nickname": "ab,c"})
        assert result.messages == [{"mobile": "bad mobile"}]

    def test_name_defaults_to_file_stem(self, write_file):
        path = write_file("checkout.yaml", "rules:\n  total: required|numeric\n")

        assert RuleConfigLoader(path).load().name == "checkout"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuleConfigLoader(tmp_path / "missing.yaml")

    def test_missing_rules_section(self, write_file):
        path = write_file("bad.yaml", "messages:\n  required: x\n")

        with pytest.raises(ConfigurationError):
            RuleConfigLoader(path).load()

    def test_invalid_yaml(self, write_file):
        path = write_file("bad.yaml", "rules: [unclosed\n")

        with pytest.raises(ConfigurationError):
            RuleConfigLoader(path).load()

    def test_rule_mapping_without_name(self, write_file):
        path = write_file("bad.yaml", "rules:\n  name:\n    - params: [1]\n")

        with pytest.raises(ConfigurationError):
            RuleConfigLoader(path).load()


class TestRuleConfigBuilder:
    """Tests for RuleConfigBuilder"""

    def test_build(self):
        rule_set = RuleConfigBuilder("signup") \
            .add_required("email") \
            .add_rule("email", "email") \
            .add_rule("age", "numeric") \
            .add_between("age", min_value=18, max_value=99) \
            .add_regex("code", "/^[A-Z]{3},[0-9]+$/") \
            .add_message("required", "The :attribute field is required") \
            .add_attribute_name("email", "email address") \
            .build()

        assert rule_set.name == "signup"
        assert rule_set.rules["email"] == ["required", "email"]
        assert rule_set.rules["age"][1].parameters == ("18", "99")
        assert rule_set.rules["code"][0].parameters == ("/^[A-Z]{3},[0-9]+$/",)

        validator = rule_set.validator({"age": "20", "code": "ABC,12"})
        assert validator.messages() == [{"email": "The email address field is required"}]

    def test_single_bound(self):
        rule_set = RuleConfigBuilder().add_between("age", max_value=10).build()

        assert rule_set.rules["age"][0].rule_name == "Max"
