"""
Formatters for post-processing generated code.
"""

from __future__ import annotations

from .base import Formatter
from .whitespace_formatter import WhitespaceFormatter

__all__ = [
    "Formatter",
    "WhitespaceFormatter",
]
