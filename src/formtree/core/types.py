"""
Core type definitions for the formtree binding engine.

This module contains type aliases shared by the model, validation and
binder modules.
"""

from collections.abc import Awaitable
from typing import Any, TypedDict

ModelKey = str | int


class ErrorReport(TypedDict, total=False):
    """Error entry a validator may return instead of a plain ``False``."""

    property: Any
    message: str


ValidationOutcome = bool | None | ErrorReport | list[Any]

ValidationResult = ValidationOutcome | Awaitable[ValidationOutcome]
