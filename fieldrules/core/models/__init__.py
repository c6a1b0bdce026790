"""
Core data models for the rule engine.

All models use Pydantic for runtime validation and type safety.
"""

from .failure import Failure
from .rule_set import RuleSet
from .rule_spec import RuleSpec
from .uploaded_file import UploadedFile, is_file_like
from .validation_result import ValidationResult

__all__ = [
    "RuleSpec",
    "Failure",
    "ValidationResult",
    "UploadedFile",
    "is_file_like",
    "RuleSet",
]
