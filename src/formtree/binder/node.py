"""
Binder nodes: per-model binding state over a shared value graph.

Every model instance bound to a binder gets exactly one ``BinderNode``,
created on first access and cached on the model instance. A node owns the
visited flag, its validators and its own errors. It does not own a value:
``node.value`` is always ``parent.value[key]``, and writes replace the
containers along the path up to the binder instead of mutating them.
"""

import asyncio
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from formtree.core.path_utils import is_within_path, join_path
from formtree.core.values import (
    is_same_value,
    project,
    with_index,
    with_key,
    without_index,
)
from formtree.exceptions import (
    NotAnArrayError,
    NotAnArrayItemError,
    UndefinedValueError,
    UnknownBinderError,
)
from formtree.models import AbstractModel, ArrayModel, ObjectModel, model_keys
from formtree.validation.core import FieldError, Validator
from formtree.validation.validity import ValidityState, ValidityStateValidator

if TYPE_CHECKING:
    from formtree.binder.binder import Binder


def get_binder_node(model: AbstractModel) -> "BinderNode":
    """
    Return the binder node of a model instance, creating it on first access.

    Params:
        model: Model instance bound to a binder

    Returns:
        The node cached on the model instance
    """
    node = model._binder_node
    if node is None:
        node = BinderNode(model)
    return node


def error_path(error: FieldError) -> str:
    """
    Resolve the dotted path a field error is attributed to.

    Params:
        error: Field error whose property is a path, a model or a binder node

    Returns:
        Dotted field path

    Raises:
        TypeError: If the property has an unsupported type
    """
    target = error.property
    if isinstance(target, str):
        return target
    if isinstance(target, AbstractModel):
        return get_binder_node(target).name
    if isinstance(target, BinderNode):
        return target.name
    raise TypeError(f"Unsupported error property: {target!r}")


async def validate_nodes(nodes: Iterable["BinderNode"]) -> None:
    """Validate several nodes concurrently."""
    await asyncio.gather(*(node.validate() for node in nodes))


class BinderNode:
    """
    Binding state and operations for one model instance.

    Structurally, model instances form a tree in which object and array
    models have child nodes for their fields and items. The root of the tree
    is the ``Binder``, which stores the value the whole tree projects from.
    """

    def __init__(self, model: AbstractModel):
        self._model = model
        model._binder_node = self
        self._visited = False
        self._validators: tuple[Validator, ...] = tuple(model._validators)
        self._own_errors: tuple[FieldError, ...] = ()
        self._default_array_item_value: Any = None
        self.validity: ValidityState | None = None
        self._validity_state_validator = ValidityStateValidator(self)
        self.initialize_value()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @property
    def model(self) -> AbstractModel:
        return self._model

    @property
    def parent(self) -> "BinderNode | None":
        """The node of the parent model, None for the binder itself."""
        model_parent = self._model._parent
        if not isinstance(model_parent, AbstractModel):
            return None
        return get_binder_node(model_parent)

    @property
    def binder(self) -> "Binder":
        """The binder owning the tree this node belongs to."""
        parent = self.parent
        return parent.binder if parent is not None else self

    @property
    def name(self) -> str:
        """Dotted path from the binder to this node, e.g. ``contacts.0.email``."""
        return join_path(model_keys(self._model))

    @property
    def value(self) -> Any:
        """The current value, projected from the parent value."""
        parent = self.parent
        if parent.value is None:
            parent.initialize_value(True)
        return project(parent.value, self._model._key)

    @value.setter
    def value(self, value: Any) -> None:
        if not is_same_value(value, self.value):
            self._set_value_state(value)

    @property
    def default_value(self) -> Any:
        """
        The pristine value, projected from the parent default value.

        All items of an array share one empty item as their default.
        """
        parent = self.parent
        if isinstance(parent.model, ArrayModel):
            if parent._default_array_item_value is None:
                parent._default_array_item_value = (
                    parent.model._item_spec.create_empty_value()
                )
            return parent._default_array_item_value
        return project(parent.default_value, self._model._key)

    @property
    def dirty(self) -> bool:
        """True if the current value differs from the default value."""
        return not is_same_value(self.value, self.default_value)

    @property
    def validators(self) -> tuple[Validator, ...]:
        return self._validators

    @validators.setter
    def validators(self, validators: Iterable[Validator]) -> None:
        self._validators = tuple(validators)

    def add_validator(self, validator: Validator) -> None:
        self._validators = (*self._validators, validator)

    @property
    def visited(self) -> bool:
        """True once the bound field was focused and left by the user."""
        return self._visited

    @visited.setter
    def visited(self, visited: bool) -> None:
        if self._visited != visited:
            self._visited = visited
            self.binder._schedule_validation(self)

    @property
    def errors(self) -> list[FieldError]:
        """Errors of all nested nodes followed by this node's own errors."""
        errors: list[FieldError] = []
        for child in list(self._child_nodes()):
            errors.extend(child.errors)
        errors.extend(self._own_errors)
        return errors

    @property
    def own_errors(self) -> list[FieldError]:
        """Errors attributed directly to this node."""
        return list(self._own_errors)

    @property
    def invalid(self) -> bool:
        return len(self.errors) > 0

    @property
    def required(self) -> bool:
        return any(validator.implies_required for validator in self._validators)

    def for_(self, model: AbstractModel) -> "BinderNode":
        """
        Return the node of a nested model instance.

        Params:
            model: Model instance reached from this binder's model

        Returns:
            The node bound to the model instance

        Raises:
            UnknownBinderError: If the model belongs to another binder
        """
        node = get_binder_node(model)
        if node.binder is not self.binder:
            raise UnknownBinderError(node.name)
        return node

    async def validate(self) -> list[FieldError]:
        """
        Run every validator that may affect this node or its descendants.

        Validators of all descendants and of this node and its ancestors run
        concurrently. Their errors replace the own errors of every node in
        this subtree and of the ancestors.

        Returns:
            Combined errors reported by the validators
        """
        requests = [
            *self._request_validation_of_descendants(),
            *self._request_validation_with_ancestors(),
        ]
        results = await asyncio.gather(*requests)

        errors: list[FieldError] = []
        for result in results:
            for error in result:
                if error not in errors:
                    errors.append(error)

        self._set_errors_with_descendants(errors)
        self._set_errors_of_ancestors(errors)
        self.update()
        return errors

    async def update_validation(self) -> None:
        """Revalidate visited nodes in this subtree that may be affected by a change."""
        await validate_nodes(self._nodes_to_revalidate())

    def clear_validation(self) -> bool:
        """
        Reset visited flags and own errors in this subtree.

        Returns:
            True if any node changed
        """
        needs_update = False
        if self._visited:
            self._visited = False
            needs_update = True
        if self._own_errors:
            self._own_errors = ()
            needs_update = True
        for child in list(self._child_nodes()):
            if child.clear_validation():
                needs_update = True
        return needs_update

    def update(self, old_value: Any = None) -> None:
        """Notify the binder that state in this subtree changed."""
        parent = self.parent
        if parent is not None:
            parent.update()

    def append_item(self, item_value: Any = None) -> None:
        """
        Append an item to the array value.

        Params:
            item_value: New item; an empty item is created when omitted

        Raises:
            NotAnArrayError: If this node is not an array node
        """
        if not isinstance(self._model, ArrayModel):
            raise NotAnArrayError(self.name)
        if item_value is None:
            item_value = self._model._item_spec.create_empty_value()
        self.value = [*(self.value or []), item_value]

    def prepend_item(self, item_value: Any = None) -> None:
        """
        Prepend an item to the array value.

        Params:
            item_value: New item; an empty item is created when omitted

        Raises:
            NotAnArrayError: If this node is not an array node
        """
        if not isinstance(self._model, ArrayModel):
            raise NotAnArrayError(self.name)
        if item_value is None:
            item_value = self._model._item_spec.create_empty_value()
        self.value = [item_value, *(self.value or [])]

    def remove_self(self) -> None:
        """
        Remove this item from the parent array value.

        Raises:
            NotAnArrayItemError: If this node is not an array item
        """
        if not isinstance(self._model._parent, ArrayModel):
            raise NotAnArrayItemError(self.name)
        parent = self.parent
        parent.value = without_index(parent.value or [], self._model._key)

    def initialize_value(self, required_by_child_node: bool = False) -> None:
        """
        Make sure the value this node projects from exists.

        Parents are initialized first. An undefined value is replaced by the
        model's empty value when a child node needs it or for the binder
        itself; an optional field missing from its parent object is recorded
        as an explicit None. Writes made while the default value is still
        undefined also seed the default value.

        Params:
            required_by_child_node: A child node needs this value to exist
        """
        parent = self.parent
        if parent is not None and (
            parent.value is None or parent.default_value is None
        ):
            parent.initialize_value(True)

        key = self._model._key
        value = project(parent.value, key) if parent is not None else self.value
        if value is not None:
            return

        if required_by_child_node or parent is None:
            self._set_value_state(
                self._model.create_empty_value(),
                keep_pristine=self.default_value is None,
            )
        elif isinstance(parent.model, ObjectModel) and key not in parent.value:
            self._set_value_state(None, keep_pristine=self.default_value is None)

    def _set_value_state(self, value: Any, keep_pristine: bool = False) -> None:
        model_parent = self._model._parent
        key = self._model._key

        if isinstance(self._model, ArrayModel) and value is not None:
            self._model._truncate_items(len(value))

        if isinstance(model_parent, ObjectModel):
            # Value contained in object - replace object in parent
            parent = self.parent
            parent._set_value_state(with_key(parent.value, key, value), keep_pristine)
            return

        if value is None:
            raise UndefinedValueError(self.name)

        if isinstance(model_parent, ArrayModel):
            # Value contained in array - replace array in parent
            parent = self.parent
            parent._set_value_state(with_index(parent.value, key, value), keep_pristine)
            return

        # Value stored by the binder itself
        binder = model_parent
        if keep_pristine and not binder.dirty:
            binder.default_value = value
        binder.value = value

    def _child_nodes(self) -> Iterator["BinderNode"]:
        value = self.value
        if value is None:
            # Undefined value cannot have child properties and items.
            return

        model = self._model
        if isinstance(model, ObjectModel):
            # Optional fields that were never set get no node. This is what
            # stops the recursion for self-referential models.
            default_value = self.default_value or {}
            for name, spec in model.model_fields().items():
                if spec.optional and name not in value and name not in default_value:
                    continue
                yield get_binder_node(model._child(name))
        elif isinstance(model, ArrayModel):
            # Items removed since the last enumeration must not come back
            # with their visited flag and errors when the array grows again.
            model._truncate_items(len(value))
            for index in range(len(value)):
                yield get_binder_node(model._item(index))

    def _nodes_to_revalidate(self) -> list["BinderNode"]:
        if self._visited:
            return [self]
        if self.dirty or self.invalid:
            return [
                node
                for child in list(self._child_nodes())
                for node in child._nodes_to_revalidate()
            ]
        return []

    def _run_own_validators(self) -> list["asyncio.Future[list[FieldError]]"]:
        binder = self.binder
        if self.validity is not None and not self.validity.valid:
            # The control rejected its input, so the value may not even be
            # parseable. Report the control's error instead of running the
            # configured validators.
            return [
                binder.request_validation(self._model, self._validity_state_validator)
            ]
        return [
            binder.request_validation(self._model, validator)
            for validator in self._validators
        ]

    def _request_validation_of_descendants(
        self,
    ) -> list["asyncio.Future[list[FieldError]]"]:
        requests = []
        for child in list(self._child_nodes()):
            requests.extend(child._run_own_validators())
            requests.extend(child._request_validation_of_descendants())
        return requests

    def _request_validation_with_ancestors(
        self,
    ) -> list["asyncio.Future[list[FieldError]]"]:
        requests = self._run_own_validators()
        parent = self.parent
        if parent is not None:
            requests.extend(parent._request_validation_with_ancestors())
        return requests

    def _set_errors_with_descendants(self, errors: list[FieldError]) -> None:
        name = self.name
        self._own_errors = tuple(error for error in errors if error_path(error) == name)
        related = [error for error in errors if is_within_path(error_path(error), name)]
        for child in list(self._child_nodes()):
            child._set_errors_with_descendants(related)

    def _set_errors_of_ancestors(self, errors: list[FieldError]) -> None:
        parent = self.parent
        while parent is not None:
            name = parent.name
            parent._own_errors = tuple(
                error for error in errors if error_path(error) == name
            )
            parent = parent.parent
