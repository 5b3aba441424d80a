"""
Model classes derived from pydantic models.

``build_model`` walks the fields of a pydantic ``BaseModel`` and produces an
``ObjectModel`` subclass with the same shape, translating field constraints
into validators. Built classes are cached per pydantic class, which also
resolves self-referential and mutually recursive pydantic models.
"""

import types
from collections.abc import Iterator, Sequence
from collections.abc import Set as AbstractSet
from decimal import Decimal
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from formtree.exceptions import FieldTypeError
from formtree.models import (
    ArrayModel,
    BooleanModel,
    ModelSpec,
    NumberModel,
    ObjectModel,
    StringModel,
    field,
)
from formtree.validation.core import Validator
from formtree.validation.validators import Max, Min, Pattern, Required, Size

SCALAR_MODELS = (
    (bool, BooleanModel),
    (str, StringModel),
    (int, NumberModel),
    (float, NumberModel),
    (Decimal, NumberModel),
)

CONSTRAINT_ATTRIBUTES = ("min_length", "max_length", "ge", "gt", "le", "lt", "pattern")

_built_models: dict[type[BaseModel], type[ObjectModel]] = {}


def build_model(source: type[BaseModel]) -> type[ObjectModel]:
    """
    Build (or fetch the cached) object model class for a pydantic model.

    Params:
        source: pydantic model class

    Returns:
        ObjectModel subclass with one field declaration per pydantic field

    Raises:
        FieldTypeError: If a field annotation cannot be mapped to a model
    """
    model_class = _built_models.get(source)
    if model_class is not None:
        return model_class

    model_class = type(
        f"{source.__name__}Model",
        (ObjectModel,),
        {"__module__": source.__module__, "__doc__": f"Model of {source.__qualname__}."},
    )
    # Registered before the fields are built so recursive references resolve
    _built_models[source] = model_class
    try:
        for field_name, field_def in source.model_fields.items():
            spec = _build_field(f"{source.__name__}.{field_name}", field_def)
            setattr(model_class, field_name, spec)
            spec.__set_name__(model_class, field_name)
    except FieldTypeError:
        del _built_models[source]
        raise
    return model_class


def _build_field(field_tag: str, field_def: FieldInfo) -> ModelSpec:
    if field_def.annotation is None:
        raise FieldTypeError(field_tag, "is missing type annotation")

    annotation, optional = _unwrap_optional(field_def.annotation)
    validators = list(_constraint_validators(field_def.metadata))
    if field_def.is_required() and not optional and _scalar_model(annotation):
        validators.insert(0, Required())
    return _build_spec(field_tag, annotation, optional, validators)


def _build_spec(
    field_tag: str,
    annotation: Any,
    optional: bool = False,
    validators: list[Validator] | None = None,
) -> ModelSpec:
    validators = validators or []
    origin = get_origin(annotation)

    if origin is Annotated:
        return _build_spec(field_tag, get_args(annotation)[0], optional, validators)

    if origin is not None:
        if _is_collection(origin):
            args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
            if not args:
                raise FieldTypeError(field_tag, f"has untyped collection type: {annotation}")
            item_annotation, item_optional = _unwrap_optional(args[0])
            item = _build_spec(f"{field_tag}[]", item_annotation, item_optional)
            return field(ArrayModel, optional=optional, validators=validators, item=item)
        raise FieldTypeError(field_tag, f"has unsupported field type: {annotation}")

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return field(build_model(annotation), optional=optional, validators=validators)

    if _is_collection(annotation):
        type_name = getattr(annotation, "__name__", str(annotation))
        raise FieldTypeError(
            field_tag,
            f"uses bare collection type '{type_name}'; use '{type_name}[ElementType]'",
        )

    scalar_model = _scalar_model(annotation)
    if scalar_model is None:
        raise FieldTypeError(field_tag, f"has unsupported field type: {annotation}")
    return field(scalar_model, optional=optional, validators=validators)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``; other annotations pass through."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = get_args(annotation)
        non_null = [arg for arg in args if arg is not type(None)]
        if len(non_null) == 1 and len(args) == 2:
            return non_null[0], True
    return annotation, False


def _is_collection(candidate: Any) -> bool:
    return (
        isinstance(candidate, type)
        and issubclass(candidate, (Sequence, AbstractSet))
        and not issubclass(candidate, (str, bytes))
    )


def _scalar_model(annotation: Any) -> type | None:
    if not isinstance(annotation, type):
        return None
    for python_type, model_class in SCALAR_MODELS:
        if issubclass(annotation, python_type):
            return model_class
    return None


def _constraint_validators(metadata: list[Any]) -> Iterator[Validator]:
    bounds = {}
    for constraint in metadata:
        for attribute in CONSTRAINT_ATTRIBUTES:
            bound = getattr(constraint, attribute, None)
            if bound is not None:
                bounds[attribute] = bound

    if "min_length" in bounds or "max_length" in bounds:
        yield Size(bounds.get("min_length", 0), bounds.get("max_length"))
    if "ge" in bounds:
        yield Min(bounds["ge"])
    if "gt" in bounds:
        yield Min(bounds["gt"], inclusive=False)
    if "le" in bounds:
        yield Max(bounds["le"])
    if "lt" in bounds:
        yield Max(bounds["lt"], inclusive=False)
    if "pattern" in bounds:
        yield Pattern(bounds["pattern"])
