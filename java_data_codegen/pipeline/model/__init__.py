"""
Model module.

Extracts the structural model of the processed class.
"""

from __future__ import annotations

from .extractor import ModelExtractor
from .nodes import ClassModel, FieldHooks, FieldModel, MemberSignature, Nullability, TypeKind, TypeRef

__all__ = [
    "ModelExtractor",
    "ClassModel",
    "FieldHooks",
    "FieldModel",
    "MemberSignature",
    "Nullability",
    "TypeKind",
    "TypeRef",
]
