"""
Field path utilities for the formtree binding engine.

Node names are dotted paths built from the chain of model keys between the
root and a node (``address.city``, ``contacts.0.email``). Validation errors
are routed through the tree by comparing these paths.
"""

from collections.abc import Iterable

from formtree.core.types import ModelKey

PATH_SEPARATOR = "."


def join_path(keys: Iterable[ModelKey]) -> str:
    """
    Build a dotted path from model keys, root first.

    Params:
        keys: Field names and array indices from the root down

    Returns:
        Dotted path; the empty string for the root
    """
    return PATH_SEPARATOR.join(str(key) for key in keys)


def is_within_path(path: str, prefix: str) -> bool:
    """
    Check whether ``path`` addresses ``prefix`` or something below it.

    Matching is segment-wise: "address.city" is within "address" but
    "addressLine" is not. Every path is within the root path "".

    Params:
        path: Path an error is attributed to
        prefix: Name of the node receiving errors

    Returns:
        True when the path equals the prefix or descends from it
    """
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + PATH_SEPARATOR)
