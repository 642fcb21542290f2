"""Java Data Class Code Generator

A Python package that regenerates the boilerplate of Java data classes
(constructors, accessors, equals/hashCode, builders, Parcelable support)
in a generated region at the end of the class, leaving hand-written code
untouched.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    CodegenError,
    FeatureFlag,
    OutputConfig,
    PipelineGenerator,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "OutputConfig",
    "CodegenError",
    "FeatureFlag",
    "AtomicWriter",
]
