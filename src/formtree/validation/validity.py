"""
External validity signal reported by a bound input control.

A field adapter may attach a ``ValidityState`` to a binder node when the
control itself rejects the input, for example text that cannot be parsed as
a date. While that state is invalid the node's value cannot be meaningfully
validated, so the node reports the control's error instead of running its
configured validators.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from formtree.validation.core import Validator

if TYPE_CHECKING:
    from formtree.binder.node import BinderNode


@dataclass(frozen=True)
class ValidityState:
    """
    Validity as reported by an input control.

    Params:
        valid: False when the control rejects its current input
        message: Control-provided description of the problem
        bad_input: The input could not be converted to a value
        value_missing: A required input is empty
        type_mismatch: The input does not match the control type
        pattern_mismatch: The input does not match the control pattern
    """

    valid: bool = True
    message: str = ""
    bad_input: bool = False
    value_missing: bool = False
    type_mismatch: bool = False
    pattern_mismatch: bool = False


class ValidityStateValidator(Validator):
    """Synthetic validator standing in for an invalid ``ValidityState``."""

    default_message = "invalid value"
    skip_when_empty = False

    def __init__(self, node: "BinderNode"):
        super().__init__()
        self.node = node

    @property
    def message(self) -> str:
        validity = self.node.validity
        if validity is not None and validity.message:
            return validity.message
        return self.default_message

    def validate(self, value, binder=None):
        validity = self.node.validity
        return validity is None or validity.valid
