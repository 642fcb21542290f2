"""
Configuration for the code generator pipeline.

Generation features themselves are chosen with flag tokens (see
``features.py``); this configuration covers how fields are interpreted
and how the output file is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        validate_before_write: Whether to re-parse the result before writing
        atomic_write: Whether to write through a temporary file and rename
    """

    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Field names to ignore in every class, in addition to transient fields
    ignore_fields: list[str] = field(default_factory=list)

    # Annotation simple names meaning "must not be null"
    non_null_annotations: list[str] = field(default_factory=lambda: ["NonNull", "NotNull", "Nonnull"])

    # Annotation simple names meaning "may be null"
    nullable_annotations: list[str] = field(default_factory=lambda: ["Nullable"])

    # Add the generation time to the metadata comment
    add_generation_time: bool = True

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                config.output = OutputConfig(
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "ignore_fields": self.ignore_fields,
            "non_null_annotations": self.non_null_annotations,
            "nullable_annotations": self.nullable_annotations,
            "add_generation_time": self.add_generation_time,
            "output": {
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
