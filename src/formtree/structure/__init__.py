"""
formtree structure components.

This package builds model classes from existing type declarations.
"""

from formtree.structure.builder import build_model

__all__ = [
    "build_model",
]
