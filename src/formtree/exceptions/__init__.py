"""
formtree exception classes.

This package provides the configuration error types raised by the binding
engine for consistent error handling and reporting.
"""

from formtree.exceptions.core import (
    FieldTypeError,
    FormTreeError,
    NotAnArrayError,
    NotAnArrayItemError,
    UndefinedValueError,
    UnknownBinderError,
)

__all__ = [
    "FormTreeError",
    "FieldTypeError",
    "NotAnArrayError",
    "NotAnArrayItemError",
    "UndefinedValueError",
    "UnknownBinderError",
]
