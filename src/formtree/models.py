"""
Structural descriptors (models) for bound values.

A model class declares the shape of a value: scalar, object with named
fields, or array of items. Declarations are made once per class with
``field()`` and shared by every instance of that shape:

    class AddressModel(ObjectModel):
        street = field(StringModel)
        city = field(StringModel, validators=[Required()])

    class PersonModel(ObjectModel):
        name = field(StringModel)
        address = field(AddressModel)
        emails = field(ArrayModel, item=StringModel)
        manager = field(lambda: PersonModel, optional=True)

Model instances are materialized lazily per position in a bound value. Each
instance knows its parent (another model, or the binder for the root model)
and the key the parent reaches it by. Accessing a field on an object model
instance returns the child model instance; ``array_model[i]`` returns the
item model at index ``i``.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Union

from formtree.core.types import ModelKey
from formtree.exceptions import FieldTypeError
from formtree.validation.core import Validator
from formtree.validation.validators import IsNumber

if TYPE_CHECKING:
    from formtree.binder.node import BinderNode

ModelType = Union[type["AbstractModel"], Callable[[], type["AbstractModel"]]]


class AbstractModel:
    """
    Base class for all model instances.

    Internal state is kept in underscore attributes so object models can
    declare fields with any public name.
    """

    def __init__(
        self,
        parent: Any,
        key: ModelKey,
        *,
        optional: bool = False,
        validators: Iterable[Validator] = (),
    ):
        self._parent = parent
        self._key = key
        self._optional = optional
        self._validators = (*self.default_validators(optional), *validators)
        self._binder_node: "BinderNode | None" = None

    @classmethod
    def default_validators(cls, optional: bool) -> tuple[Validator, ...]:
        """Validators every instance of this model class starts with."""
        return ()

    @classmethod
    def create_empty_value(cls) -> Any:
        """Create the value a freshly initialized field of this model holds."""
        raise NotImplementedError(f"{cls.__name__} does not define an empty value")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._key!r})"


class ModelSpec:
    """
    Declaration of a child model: its class, optionality and validators.

    A spec is shared by every instance of the declaring model. Used as a
    class attribute of an ``ObjectModel`` it acts as a descriptor returning
    the child model instance for the accessed object model instance.
    """

    def __init__(
        self,
        model_type: ModelType,
        *,
        optional: bool = False,
        validators: Iterable[Validator] = (),
        item: "ModelSpec | ModelType | None" = None,
    ):
        self._model_type = model_type
        self.optional = optional
        self.validators = tuple(validators)
        self.item = as_spec(item) if item is not None else None
        self.name: str | None = None

    @property
    def model_class(self) -> type[AbstractModel]:
        """The declared model class, resolving lazy references."""
        model_type = self._model_type
        if not _is_model_class(model_type):
            model_type = model_type()
            if not _is_model_class(model_type):
                raise FieldTypeError(
                    self.name or "<item>", f"resolves to non-model type {model_type!r}"
                )
        return model_type

    def create(self, parent: Any, key: ModelKey) -> AbstractModel:
        """
        Materialize a model instance for this declaration.

        Params:
            parent: Parent model instance, or the binder for a root model
            key: Field name or array index the parent reaches the instance by

        Returns:
            New model instance
        """
        model_class = self.model_class
        if issubclass(model_class, ArrayModel):
            return model_class(
                parent,
                key,
                optional=self.optional,
                validators=self.validators,
                item=self.item,
            )
        return model_class(
            parent, key, optional=self.optional, validators=self.validators
        )

    def create_empty_value(self) -> Any:
        return self.model_class.create_empty_value()

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if isinstance(instance, ObjectModel):
            return instance._child(self.name)
        return self

    def __repr__(self) -> str:
        return f"ModelSpec(name={self.name!r}, optional={self.optional})"


def field(
    model_type: ModelType,
    *,
    optional: bool = False,
    validators: Iterable[Validator] = (),
    item: ModelSpec | ModelType | None = None,
) -> ModelSpec:
    """
    Declare a field of an object model.

    Params:
        model_type: Model class, or a zero-argument callable returning it for
            references to classes not defined yet (self-referential shapes)
        optional: Field may be absent; its empty value is not created eagerly
        validators: Validators added to the model class defaults
        item: Item declaration, required when ``model_type`` is an array model

    Returns:
        Field declaration to assign as a class attribute
    """
    return ModelSpec(model_type, optional=optional, validators=validators, item=item)


def as_spec(model: ModelSpec | ModelType) -> ModelSpec:
    """Wrap a bare model class (or lazy reference) in a declaration."""
    return model if isinstance(model, ModelSpec) else ModelSpec(model)


def model_keys(model: AbstractModel) -> list[ModelKey]:
    """
    Collect the keys leading from the root model to ``model``.

    Params:
        model: Model instance

    Returns:
        Keys root first; empty for the root model
    """
    keys = []
    while isinstance(model._parent, AbstractModel):
        keys.append(model._key)
        model = model._parent
    keys.reverse()
    return keys


def _is_model_class(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, AbstractModel)


class StringModel(AbstractModel):
    @classmethod
    def create_empty_value(cls) -> str:
        return ""


class NumberModel(AbstractModel):
    @classmethod
    def default_validators(cls, optional: bool) -> tuple[Validator, ...]:
        return (IsNumber(optional),)

    @classmethod
    def create_empty_value(cls) -> int:
        return 0


class BooleanModel(AbstractModel):
    @classmethod
    def create_empty_value(cls) -> bool:
        return False


class ObjectModel(AbstractModel):
    """Model of a dict value with declared fields."""

    def __init__(self, parent, key, **options):
        super().__init__(parent, key, **options)
        self._children: dict[str, AbstractModel] = {}

    @classmethod
    def model_fields(cls) -> dict[str, ModelSpec]:
        """
        Collect the field declarations of this class and its bases.

        Returns:
            Mapping of field name to declaration, base class fields first
        """
        fields: dict[str, ModelSpec] = {}
        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, ModelSpec):
                    fields[name] = attribute
        return fields

    @classmethod
    def create_empty_value(cls) -> dict:
        # Optional fields are left out, which also keeps self-referential
        # shapes finite.
        return {
            name: spec.create_empty_value()
            for name, spec in cls.model_fields().items()
            if not spec.optional
        }

    def _child(self, name: str) -> AbstractModel:
        child = self._children.get(name)
        if child is None:
            spec = type(self).model_fields()[name]
            child = self._children[name] = spec.create(self, name)
        return child


class ArrayModel(AbstractModel):
    """
    Model of a list value.

    The item declaration is the single template every element shares; item
    model instances are created per index on first access.
    """

    item: ModelSpec | None = None

    def __init__(self, parent, key, *, item: ModelSpec | ModelType | None = None, **options):
        super().__init__(parent, key, **options)
        item_spec = as_spec(item) if item is not None else type(self).item
        if item_spec is None:
            raise FieldTypeError(str(key), "is an array without item type")
        self._item_spec = item_spec
        self._items: dict[int, AbstractModel] = {}

    @classmethod
    def create_empty_value(cls) -> list:
        return []

    def _item(self, index: int) -> AbstractModel:
        item = self._items.get(index)
        if item is None:
            item = self._items[index] = self._item_spec.create(self, index)
        return item

    def _truncate_items(self, length: int) -> None:
        """Forget item models (and their nodes) at indices ``>= length``."""
        for index in [index for index in self._items if index >= length]:
            del self._items[index]

    def __getitem__(self, index: int) -> AbstractModel:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise IndexError(f"Invalid array item index: {index!r}")
        return self._item(index)

    def __iter__(self) -> Iterator[AbstractModel]:
        # Import here to avoid circular imports
        from formtree.binder.node import get_binder_node

        items = get_binder_node(self).value or []
        self._truncate_items(len(items))
        for index in range(len(items)):
            yield self._item(index)
