"""
formtree - hierarchical data binding and validation for structured values

formtree mirrors a structured value (objects, nested objects, arrays) with a
tree of binder nodes tracking value, default value, dirty and visited state,
validators and validation errors for every field.
"""

from importlib.metadata import version

from formtree.binder import Binder, BinderConfiguration, BinderNode
from formtree.models import (
    ArrayModel,
    BooleanModel,
    NumberModel,
    ObjectModel,
    StringModel,
    field,
)
from formtree.structure import build_model
from formtree.validation import (
    FieldError,
    FunctionValidator,
    Validator,
    ValidityState,
)

__version__ = version("formtree")

__all__ = [
    "__version__",
    "Binder",
    "BinderConfiguration",
    "BinderNode",
    "ArrayModel",
    "BooleanModel",
    "NumberModel",
    "ObjectModel",
    "StringModel",
    "field",
    "build_model",
    "FieldError",
    "FunctionValidator",
    "Validator",
    "ValidityState",
]
