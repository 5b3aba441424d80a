"""
formtree binder components.

This package provides the binder node tree, the binder coordinating its
validation, and the binder configuration.
"""

from formtree.binder.binder import Binder
from formtree.binder.configuration import BinderConfiguration
from formtree.binder.node import BinderNode, error_path, get_binder_node

__all__ = [
    "Binder",
    "BinderConfiguration",
    "BinderNode",
    "error_path",
    "get_binder_node",
]
