"""
formtree validation components.

This package provides the validator protocol, the field error record,
built-in constraint validators and the external validity signal.
"""

from formtree.validation.core import (
    FieldError,
    FunctionValidator,
    Validator,
    run_validator,
    to_field_errors,
)
from formtree.validation.validators import (
    AssertFalse,
    AssertTrue,
    Email,
    IsNumber,
    Max,
    Min,
    Negative,
    NegativeOrZero,
    NotBlank,
    NotEmpty,
    NotNull,
    Null,
    Pattern,
    Positive,
    PositiveOrZero,
    Required,
    Size,
)
from formtree.validation.validity import ValidityState, ValidityStateValidator

__all__ = [
    "FieldError",
    "FunctionValidator",
    "Validator",
    "run_validator",
    "to_field_errors",
    "ValidityState",
    "ValidityStateValidator",
    "AssertFalse",
    "AssertTrue",
    "Email",
    "IsNumber",
    "Max",
    "Min",
    "Negative",
    "NegativeOrZero",
    "NotBlank",
    "NotEmpty",
    "NotNull",
    "Null",
    "Pattern",
    "Positive",
    "PositiveOrZero",
    "Required",
    "Size",
]
