"""
Built-in constraint validators.

Each validator carries a default message that can be overridden through the
``message`` keyword. Validators that make a field mandatory set
``implies_required``.
"""

import math
import re
from numbers import Number
from typing import Any

from formtree.core.values import is_empty_value
from formtree.validation.core import Validator

# Same shape the HTML email input accepts
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class Required(Validator):
    """Value must be filled in: non-empty text or array, finite number, not None."""

    message = "must not be empty"
    implies_required = True

    def validate(self, value, binder=None):
        return not is_empty_value(value)


class NotNull(Validator):
    message = "must not be null"
    implies_required = True

    def validate(self, value, binder=None):
        return value is not None


class NotEmpty(Validator):
    message = "must not be empty"
    implies_required = True

    def validate(self, value, binder=None):
        return value is not None and len(value) > 0


class NotBlank(Validator):
    message = "must not be blank"
    implies_required = True

    def validate(self, value, binder=None):
        return value is not None and len(str(value).strip()) > 0


class Null(Validator):
    message = "must be null"

    def validate(self, value, binder=None):
        return value is None


class AssertTrue(Validator):
    message = "must be true"

    def validate(self, value, binder=None):
        return value is True


class AssertFalse(Validator):
    message = "must be false"

    def validate(self, value, binder=None):
        return value is False


class IsNumber(Validator):
    """Value must be a finite number; None is accepted for optional fields."""

    message = "must be a number"

    def __init__(self, optional: bool = False, message: str | None = None):
        super().__init__(message)
        self.optional = optional

    def validate(self, value, binder=None):
        if value is None:
            return self.optional
        return _is_number(value) and math.isfinite(value)


class Min(Validator):
    """Value must be greater than (or equal to, when inclusive) a bound."""

    def __init__(
        self, value: float, inclusive: bool = True, message: str | None = None
    ):
        self.value = value
        self.inclusive = inclusive
        comparison = "greater than or equal to" if inclusive else "greater than"
        self.message = f"must be {comparison} {value}"
        super().__init__(message)

    def validate(self, value, binder=None):
        if not _is_number(value):
            return False
        return value >= self.value if self.inclusive else value > self.value


class Max(Validator):
    """Value must be less than (or equal to, when inclusive) a bound."""

    def __init__(
        self, value: float, inclusive: bool = True, message: str | None = None
    ):
        self.value = value
        self.inclusive = inclusive
        comparison = "less than or equal to" if inclusive else "less than"
        self.message = f"must be {comparison} {value}"
        super().__init__(message)

    def validate(self, value, binder=None):
        if not _is_number(value):
            return False
        return value <= self.value if self.inclusive else value < self.value


class Positive(Min):
    def __init__(self, message: str | None = None):
        super().__init__(0, inclusive=False, message=message)


class PositiveOrZero(Min):
    def __init__(self, message: str | None = None):
        super().__init__(0, inclusive=True, message=message)


class Negative(Max):
    def __init__(self, message: str | None = None):
        super().__init__(0, inclusive=False, message=message)


class NegativeOrZero(Max):
    def __init__(self, message: str | None = None):
        super().__init__(0, inclusive=True, message=message)


class Size(Validator):
    """Length of a text or array must lie within ``min`` and ``max``."""

    def __init__(
        self, min: int = 0, max: int | None = None, message: str | None = None
    ):
        self.min = min
        self.max = max
        self.implies_required = min > 0
        upper = "unbounded" if max is None else max
        self.message = f"size must be between {min} and {upper}"
        super().__init__(message)

    def validate(self, value, binder=None):
        if value is None:
            return self.min == 0
        size = len(value)
        if size < self.min:
            return False
        return self.max is None or size <= self.max


class Pattern(Validator):
    """Text must fully match a regular expression."""

    def __init__(self, pattern: str | re.Pattern, message: str | None = None):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.message = f'must match "{self.pattern.pattern}"'
        super().__init__(message)

    def validate(self, value, binder=None):
        return isinstance(value, str) and self.pattern.fullmatch(value) is not None


class Email(Pattern):
    def __init__(self, message: str | None = None):
        super().__init__(EMAIL_PATTERN, message)
        if message is None:
            self.message = "must be a well-formed email address"
