"""
Region module.

Splits a file into user code and the previously generated suffix, and
writes regenerated files back atomically.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .splitter import GENERATED_END_MARKER, GENERATED_WARNING_PREFIX, GeneratedRegion, RegionSplitter, SplitResult

__all__ = [
    "AtomicWriter",
    "GeneratedRegion",
    "RegionSplitter",
    "SplitResult",
    "GENERATED_END_MARKER",
    "GENERATED_WARNING_PREFIX",
]
