"""
Feature generators.

``GENERATORS`` lists every generator in output order: the header first,
then one generator per feature in ``FeatureFlag`` order, then the
metadata footer.
"""

from __future__ import annotations

from .accessors import GettersGenerator, SettersGenerator
from .aidl import AidlGenerator
from .base import FeatureGenerator, GenerationContext, create_environment
from .builder import BuilderGenerator, BuildUponGenerator
from .constructor import ConstructorGenerator, CopyConstructorGenerator
from .object_methods import EqualsHashCodeGenerator, ForEachFieldGenerator, ToStringGenerator
from .parcelable import ParcelableGenerator
from .region_markers import HeaderGenerator, MetadataGenerator
from .withers import WithersGenerator

GENERATORS: tuple[type[FeatureGenerator], ...] = (
    HeaderGenerator,
    ConstructorGenerator,
    CopyConstructorGenerator,
    GettersGenerator,
    SettersGenerator,
    ToStringGenerator,
    EqualsHashCodeGenerator,
    ForEachFieldGenerator,
    WithersGenerator,
    ParcelableGenerator,
    BuildUponGenerator,
    BuilderGenerator,
    AidlGenerator,
    MetadataGenerator,
)

__all__ = [
    "GENERATORS",
    "FeatureGenerator",
    "GenerationContext",
    "create_environment",
    "AidlGenerator",
    "BuilderGenerator",
    "BuildUponGenerator",
    "ConstructorGenerator",
    "CopyConstructorGenerator",
    "EqualsHashCodeGenerator",
    "ForEachFieldGenerator",
    "GettersGenerator",
    "HeaderGenerator",
    "MetadataGenerator",
    "ParcelableGenerator",
    "SettersGenerator",
    "ToStringGenerator",
    "WithersGenerator",
]
