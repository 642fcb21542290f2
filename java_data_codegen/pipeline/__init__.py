"""
Pipeline - tree-sitter based regeneration of Java data classes.

This module provides the phases of one regeneration run:

1. Region (splitter): Separate user code from the previously generated region
2. Model (extractor): Parse the user code into a class model
3. Features (resolver): Merge flag tokens, recovered flags and annotations
4. Generators: Render one chunk of Java per enabled feature
5. Formatter: Normalize whitespace of the generated region
6. Region (writer): Write the result back atomically
"""

from __future__ import annotations

from .config import CodeGeneratorConfig, OutputConfig
from .errors import CodegenError, ConfigurationError, GenerationError, ModelError, RegionError
from .features import FeatureFlag, FlagResolver, ResolvedFlags, Resolution
from .generator import PipelineGenerator
from .region import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "OutputConfig",
    "CodegenError",
    "ConfigurationError",
    "GenerationError",
    "ModelError",
    "RegionError",
    "FeatureFlag",
    "FlagResolver",
    "ResolvedFlags",
    "Resolution",
    "AtomicWriter",
]
