"""
Pipeline generator - main entry point for regenerating a Java file.

Orchestrates the phases of one run:
1. Split the file into the preserved prefix and the previous region
2. Extract the class model from the prefix
3. Resolve the feature flags
4. Run every generator in output order
5. Clean up whitespace and reassemble the file
6. Write it back atomically (``run`` only)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from .config import CodeGeneratorConfig
from .errors import ConfigurationError
from .features import FlagResolver, parse_token
from .formatters import WhitespaceFormatter
from .generators import GENERATORS, GenerationContext, create_environment
from .model import ModelExtractor
from .region import GENERATED_WARNING_PREFIX, AtomicWriter, RegionSplitter

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Regenerates the generated region of a Java data class."""

    def __init__(self, config: CodeGeneratorConfig | None = None, now: Callable[[], datetime] | None = None):
        """
        Initialize the pipeline.

        Args:
            config: Code generation configuration
            now: Clock used for the generation time in the metadata comment
        """
        self.config = config or CodeGeneratorConfig()
        self.now = now or datetime.now
        self.splitter = RegionSplitter()
        self.extractor = ModelExtractor(self.config)
        self.resolver = FlagResolver()
        self.formatter = WhitespaceFormatter()
        env = create_environment()
        self.generators = [generator_class(env) for generator_class in GENERATORS]

    def generate(self, source: str, tokens: Sequence[str], file_name: str, update_only: bool = False) -> str | None:
        """
        Generate the new content of a file.

        Args:
            source: Current file content, read without newline translation
            tokens: Explicit flag tokens
            file_name: Name of the file, recorded in the regenerate command
            update_only: Only refresh a file that was generated before,
                reusing the flags recorded in its region

        Returns:
            The new file content, or None when an update-only run finds
            nothing to update

        Raises:
            ConfigurationError: On unknown or contradictory tokens
            ModelError: If the class cannot be modeled
            RegionError: If the previous region is corrupt
            GenerationError: If consistent code cannot be produced
        """
        file_name = Path(file_name).name
        if update_only and not self._opted_in(source, tokens):
            logger.info("%s: nothing to update", file_name)
            return None

        split = self.splitter.split(source, file_name)
        model = self.extractor.extract(split.prefix, file_name)
        flags = self.resolver.resolve(
            tokens,
            previous_tokens=split.previous_tokens if update_only else None,
            annotation_flags=model.annotation_flags,
        )

        ctx = GenerationContext(
            model=model,
            flags=flags,
            config=self.config,
            file_name=file_name,
            generated_at=self.now() if self.config.add_generation_time else None,
        )
        region = self.formatter.format("".join(generator.generate(ctx) for generator in self.generators))
        logger.info("%s: generated %s", file_name, ", ".join(feature.kebab_case for feature in flags.enabled_features()) or "no features")
        return split.prefix + "\n" + region + "\n}\n"

    def _opted_in(self, source: str, tokens: Sequence[str]) -> bool:
        """Whether an update-only run should touch this file at all.

        Runs before any strict splitting or modeling, so files that were
        never opted in (interfaces, enums, unusual closing lines) are
        skipped rather than reported as broken.
        """
        if any(GENERATED_WARNING_PREFIX in line for line in source.splitlines()):
            return True
        if any(not isinstance(parse_token(token), str) for token in tokens):
            return True
        return self.extractor.has_data_class_annotation(source)

    def run(self, path: str | Path, tokens: Sequence[str], update_only: bool = False) -> bool:
        """
        Regenerate a file in place.

        Args:
            path: The Java file to process
            tokens: Explicit flag tokens
            update_only: See ``generate``

        Returns:
            Whether the file was rewritten

        Raises:
            ConfigurationError: If the file does not exist
            CodegenError: If generation fails; the file is left untouched
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"File not found: {path}")

        with open(path, encoding="utf-8", newline="") as f:
            source = f.read()

        content = self.generate(source, tokens, path.name, update_only=update_only)
        if content is None:
            return False

        output = self.config.output
        writer = AtomicWriter()
        if output.atomic_write:
            writer.write(path, content, validate=output.validate_before_write)
        else:
            writer.write_direct(path, content, validate=output.validate_before_write)
        logger.info("Wrote %s", path)
        return True
