"""
Failure model representing one failing (attribute, rule) evaluation.
"""

from pydantic import BaseModel, ConfigDict


class Failure(BaseModel):
    """
    A rule that returned False for an attribute during a validation pass.

    Attributes:
        attribute: Attribute name the rule was declared on
        rule: StudlyCase rule identifier ("Digits")
        parameters: Parameters the rule was invoked with
    """

    model_config = ConfigDict(frozen=True)

    attribute: str
    rule: str
    parameters: tuple[str, ...] = ()
