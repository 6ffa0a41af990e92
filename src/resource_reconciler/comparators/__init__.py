"""
Comparators Package.

This package contains explicit, per-structure comparison functions used to
decide whether a desired value differs from the observed one.
"""

from .base import Change, ComparisonResult

__all__ = [
    "Change",
    "ComparisonResult",
]
