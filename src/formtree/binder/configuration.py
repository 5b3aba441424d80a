"""
Binder configuration.
"""

from collections.abc import Callable
from typing import Any

from attrs import frozen


@frozen
class BinderConfiguration:
    """
    Options of a ``Binder``.

    Params:
        on_change: Called with the previous root value whenever the value or
            the validation state of the tree changes (None for validation-only
            updates). Field adapters use it to re-render.
        validate_empty_values: Run validators of optional fields even while
            the field is empty
    """

    on_change: Callable[[Any], None] | None = None
    validate_empty_values: bool = False
