"""
Core formtree components.

This package provides the type definitions, value-graph helpers and path
utilities shared by the models, validation and binder packages.
"""

from formtree.core.path_utils import PATH_SEPARATOR, is_within_path, join_path
from formtree.core.types import (
    ErrorReport,
    ModelKey,
    ValidationOutcome,
    ValidationResult,
)
from formtree.core.values import (
    is_empty_value,
    is_same_value,
    project,
    with_index,
    with_key,
    without_index,
)

__all__ = [
    "ErrorReport",
    "ModelKey",
    "ValidationOutcome",
    "ValidationResult",
    "PATH_SEPARATOR",
    "is_within_path",
    "join_path",
    "is_empty_value",
    "is_same_value",
    "project",
    "with_index",
    "with_key",
    "without_index",
]
