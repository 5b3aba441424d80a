"""
The binder: root of a binder node tree and coordinator of its validation.

The binder stores the only copy of the bound value and its pristine default.
All nodes of the tree project their values out of it. It also executes
validator runs requested by the nodes, sharing one in-flight run between all
requests for the same model and validator.
"""

import asyncio
import logging
from collections.abc import Iterable
from functools import partial
from typing import Any

from formtree.binder.configuration import BinderConfiguration
from formtree.binder.node import BinderNode, get_binder_node, validate_nodes
from formtree.core.values import is_same_value
from formtree.exceptions import UndefinedValueError
from formtree.models import AbstractModel, ModelSpec, ModelType, as_spec
from formtree.validation.core import FieldError, Validator, run_validator

logger = logging.getLogger(__name__)


class Binder(BinderNode):
    """
    Binding of a model to a value, with validation state for every field.

    Usage:
        binder = Binder(PersonModel)
        email = binder.for_(binder.model.email)
        email.value = "jane@example.com"
        errors = await binder.validate()

    Validation triggered by state changes (a field becoming visited, a new
    root value) runs as a task when an event loop is running and can be
    awaited with ``wait_for_validation()``; without a running loop it runs to
    completion before the triggering assignment returns.
    """

    def __init__(
        self,
        model: ModelSpec | ModelType,
        configuration: BinderConfiguration | None = None,
    ):
        """
        Bind a model to a fresh empty value.

        Params:
            model: Model class (or declaration) of the root value
            configuration: Change callback and validation options
        """
        self.configuration = configuration or BinderConfiguration()
        self._value: Any = None
        self._default_value: Any = None
        self._validations: dict[
            AbstractModel, dict[Validator, "asyncio.Future[list[FieldError]]"]
        ] = {}
        self._scheduled: set[asyncio.Task] = set()
        self._scheduling = False
        self._initialized = False
        super().__init__(as_spec(model).create(self, "value"))
        self._initialized = True

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        if value is None:
            raise UndefinedValueError("")
        if is_same_value(value, self._value):
            return
        old_value = self._value
        self._value = value
        self.update(old_value)
        self._schedule_validation(self)

    @property
    def default_value(self) -> Any:
        return self._default_value

    @default_value.setter
    def default_value(self, value: Any) -> None:
        self._default_value = value

    @property
    def validating(self) -> bool:
        """True while validator runs are in flight."""
        return bool(self._validations)

    def set_validators(self, validators: Iterable[Validator]) -> None:
        """Replace the validators of the root value."""
        self.validators = validators

    def read(self, value: Any) -> None:
        """
        Replace the value and the default value, leaving the tree pristine.

        Validation state is cleared. Reading None clears the binder.

        Params:
            value: New root value
        """
        if value is None:
            self.clear()
            return

        self.default_value = value
        if (
            self._value is not None
            and self.clear_validation()
            # A changed value notifies through the setter below
            and self._value is value
        ):
            self.update(self._value)
        self.value = self._default_value

    def clear(self) -> None:
        """Reset the tree to the model's empty value and clear validation state."""
        self.read(self._model.create_empty_value())

    def reset(self) -> None:
        """Restore the default value and clear validation state."""
        self.read(self._default_value)

    def update(self, old_value: Any = None) -> None:
        on_change = self.configuration.on_change
        if on_change is not None:
            on_change(old_value)

    def request_validation(
        self, model: AbstractModel, validator: Validator
    ) -> "asyncio.Future[list[FieldError]]":
        """
        Run a validator for a model, sharing runs already in flight.

        Must be called while an event loop is running.

        Params:
            model: Model instance whose value is validated
            validator: Validator to run

        Returns:
            Future resolving to the errors the validator reported
        """
        model_validations = self._validations.setdefault(model, {})
        pending = model_validations.get(validator)
        if pending is not None:
            logger.debug("Joining in-flight validation %r of %r", validator, model)
            return pending

        task = asyncio.ensure_future(
            run_validator(
                get_binder_node(model),
                validator,
                self.configuration.validate_empty_values,
            )
        )
        model_validations[validator] = task
        task.add_done_callback(partial(self._complete_request, model, validator))
        return task

    async def wait_for_validation(self) -> None:
        """Wait for validation scheduled by state changes to finish."""
        while self._scheduled:
            await asyncio.gather(*list(self._scheduled))

    def _complete_request(
        self, model: AbstractModel, validator: Validator, task: asyncio.Future
    ) -> None:
        model_validations = self._validations.get(model)
        if model_validations is None or model_validations.get(validator) is not task:
            return
        del model_validations[validator]
        if not model_validations:
            del self._validations[model]
        if not self._validations:
            logger.debug("All validator runs of %r completed", self)

    def _schedule_validation(self, node: BinderNode) -> None:
        # Writes made while the affected nodes are being collected are
        # covered by the collection in progress.
        if not self._initialized or self._scheduling:
            return
        self._scheduling = True
        try:
            nodes = node._nodes_to_revalidate()
        finally:
            self._scheduling = False
        if not nodes:
            return

        logger.debug("Revalidating %d node(s) after change of %r", len(nodes), node)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(validate_nodes(nodes))
            return
        task = loop.create_task(validate_nodes(nodes))
        self._scheduled.add(task)
        task.add_done_callback(self._scheduled.discard)
