"""
Header and metadata comments framing the generated region.

The header opens the region with the sentinel and the command that
regenerates the file; update-only runs read their flags back from it. The
metadata footer always comes last and closes the region with the end
terminator.
"""

from __future__ import annotations

from typing import Any

from ... import __version__
from ...cli_utils import CODEGEN_NAME, COMMAND_PREFIX, format_command_line
from ..region.splitter import GENERATED_END_MARKER, GENERATED_WARNING_PREFIX
from .base import FeatureGenerator, GenerationContext


class HeaderGenerator(FeatureGenerator):
    """Sentinel, warning and regenerate command line."""

    template_name = "header.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        return {
            "sentinel": f"{GENERATED_WARNING_PREFIX} v{__version__}.",
            "command_line": COMMAND_PREFIX + format_command_line(ctx.flags.to_tokens(), ctx.file_name),
        }


class MetadataGenerator(FeatureGenerator):
    """Version, time, source file and input signatures, then the end terminator."""

    template_name = "metadata.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        stamp = f"Generated by {CODEGEN_NAME} v{__version__}"
        if ctx.config.add_generation_time and ctx.generated_at is not None:
            stamp += f" at {ctx.generated_at.isoformat(timespec='seconds')}"
        signatures = [field.signature for field in model.fields]
        signatures.extend(sorted(str(member) for member in model.members))
        return {
            "stamp": stamp,
            "source_file": ctx.file_name,
            "features": [feature.kebab_case for feature in ctx.flags.enabled_features()],
            "signatures": signatures,
            "end_marker": GENERATED_END_MARKER,
        }
