"""
Validator protocol, error records and validator execution.

A validator checks one value and answers with ``True``/``None`` (valid),
``False`` (invalid at the validated field), or one or more error reports
naming the field they apply to. Any answer may be awaitable.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formtree.core.types import ValidationResult
from formtree.core.values import is_empty_value

if TYPE_CHECKING:
    from formtree.binder.binder import Binder
    from formtree.binder.node import BinderNode

logger = logging.getLogger(__name__)


class Validator(ABC):
    """
    Base class for field validators.

    Subclasses implement ``validate``. ``message`` is used for every error
    the validator reports without a message of its own; ``implies_required``
    marks the field as mandatory. Validators with ``skip_when_empty`` are not
    run for empty values of optional fields.
    """

    message: str = "invalid"
    implies_required: bool = False
    skip_when_empty: bool = True

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message

    @abstractmethod
    def validate(self, value: Any, binder: "Binder") -> ValidationResult:
        """
        Check a value.

        Params:
            value: Current value of the validated node
            binder: Binder owning the node, for cross-field lookups

        Returns:
            Validation outcome, possibly awaitable
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class FunctionValidator(Validator):
    """Validator backed by a plain or async callable ``(value, binder)``."""

    def __init__(
        self,
        function: Callable[[Any, "Binder"], ValidationResult],
        message: str | None = None,
        implies_required: bool = False,
    ):
        super().__init__(message)
        self.function = function
        self.implies_required = implies_required

    def validate(self, value: Any, binder: "Binder") -> ValidationResult:
        return self.function(value, binder)


@dataclass(frozen=True)
class FieldError:
    """
    A validation failure attributed to a field.

    Params:
        property: Field the error applies to: a dotted path, a model or a binder node
        message: Human readable description
        value: Value that was validated
        validator: Validator that reported the error, if any
    """

    property: Any
    message: str
    value: Any = None
    validator: Validator | None = None


def to_field_errors(
    outcome: Any, node_name: str, value: Any, validator: Validator
) -> list[FieldError]:
    """
    Normalize a validator outcome into field errors.

    Params:
        outcome: Awaited result of ``Validator.validate``
        node_name: Path of the validated node, used when no property is given
        value: Validated value
        validator: Validator that produced the outcome

    Returns:
        List of field errors, empty when the value passed
    """
    if outcome is True or outcome is None:
        return []
    if outcome is False:
        return [FieldError(node_name, validator.message, value, validator)]

    reports = outcome if isinstance(outcome, (list, tuple)) else [outcome]
    errors = []
    for report in reports:
        if isinstance(report, FieldError):
            errors.append(report)
        elif isinstance(report, dict):
            errors.append(
                FieldError(
                    property=report.get("property", node_name),
                    message=report.get("message", validator.message),
                    value=value,
                    validator=validator,
                )
            )
        else:
            raise TypeError(
                f"Validator {validator!r} returned unsupported result {report!r}"
            )
    return errors


async def run_validator(
    node: "BinderNode", validator: Validator, validate_empty: bool = False
) -> list[FieldError]:
    """
    Run one validator against the current value of a node.

    Validators of fields that are not required are skipped while the value
    is empty, unless ``validate_empty`` is set. A validator that raises, or
    answers with an unsupported result, is reported as an error on the node
    instead of failing the caller.

    Params:
        node: Binder node whose value is validated
        validator: Validator to run
        validate_empty: Run the validator even for empty optional values

    Returns:
        Field errors reported by the validator
    """
    value = node.value
    if (
        not validate_empty
        and validator.skip_when_empty
        and not node.required
        and is_empty_value(value)
    ):
        return []

    try:
        outcome = validator.validate(value, node.binder)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return to_field_errors(outcome, node.name, value, validator)
    except Exception as e:
        logger.warning("Validator %r failed for '%s': %s", validator, node.name, e)
        return [FieldError(node.name, str(e) or validator.message, value, validator)]
