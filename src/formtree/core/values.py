"""
Copy-on-write helpers for the shared value graph.

Binder nodes never own their values: each node projects ``parent.value[key]``
out of a single root value. All writes build new containers with these
helpers so that snapshots handed out earlier are never modified.
"""

import math
from typing import Any

from formtree.core.types import ModelKey

CONTAINER_TYPES = (dict, list, tuple)


def is_same_value(first: Any, second: Any) -> bool:
    """
    Compare two values the way dirty tracking needs.

    Containers compare by identity, so a replaced container counts as a
    change even when its contents are equal. Scalars compare by equality,
    restricted to values of the same type (``1`` and ``True`` differ).

    Params:
        first: Current value
        second: Value to compare against

    Returns:
        True when the values are considered the same
    """
    if first is second:
        return True
    if isinstance(first, CONTAINER_TYPES) or isinstance(second, CONTAINER_TYPES):
        return False
    if type(first) is not type(second):
        return False
    return first == second


def project(container: Any, key: ModelKey) -> Any:
    """
    Read ``container[key]``, treating missing entries as undefined.

    Params:
        container: Parent value (dict, list or None)
        key: Field name or array index

    Returns:
        The entry, or None when the container or the entry is missing
    """
    if container is None:
        return None
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, (list, tuple)):
        if isinstance(key, int) and 0 <= key < len(container):
            return container[key]
        return None
    return getattr(container, str(key), None)


def with_key(container: dict | None, key: str, value: Any) -> dict:
    """Return a shallow copy of ``container`` with ``key`` set to ``value``."""
    return {**(container or {}), key: value}


def with_index(container: list | tuple | None, index: int, value: Any) -> list:
    """
    Return a shallow copy of ``container`` with ``index`` replaced.

    Indices past the end pad the copy with None.
    """
    items = list(container or [])
    if index >= len(items):
        items.extend([None] * (index + 1 - len(items)))
    items[index] = value
    return items


def without_index(container: list | tuple, index: int) -> list:
    """Return a copy of ``container`` without the item at ``index``."""
    return [item for position, item in enumerate(container) if position != index]


def is_empty_value(value: Any) -> bool:
    """
    Check whether a value counts as "not filled in".

    None, empty strings, empty arrays and non-finite numbers are empty.
    Objects and booleans never are.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (str, list, tuple)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return not math.isfinite(value)
    return False
