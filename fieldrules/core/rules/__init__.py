"""
Rule parsing, evaluation and configuration.
"""

from .applicability import ApplicabilityPolicy, RuleState
from .dispatcher import PredicateDispatcher
from .messages import FailureAggregator, MessageResolver
from .parser import explode_rules, parse_rule
from .resolver import ValueResolver, array_get
from .rule_config import RuleConfigBuilder, RuleConfigLoader
from .rule_engine import Validator
from .size import SizeClassifier

__all__ = [
    "Validator",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "parse_rule",
    "explode_rules",
    "ValueResolver",
    "array_get",
    "ApplicabilityPolicy",
    "RuleState",
    "PredicateDispatcher",
    "SizeClassifier",
    "MessageResolver",
    "FailureAggregator",
]
