"""
Atomic file writer for safe code generation.

Ensures that a file is either fully regenerated or left exactly as it was,
even if validation fails or the process is interrupted mid-write.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

import tree_sitter_java as ts_java
from tree_sitter import Language, Parser

from ..errors import GenerationError

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Writes regenerated Java files in two phases.

    1. Write to a temporary file next to the target
    2. Check that the new content still parses as Java
    3. Rename the temporary file over the target

    The source file is only ever replaced by a complete, parseable file.
    """

    def __init__(self, validate_java: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_java: Optional validation function for Java code
        """
        self._validate_java = validate_java or self._default_validate_java
        self._parser: Parser | None = None

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write, written without newline translation
            validate: Whether to validate before finalizing

        Raises:
            GenerationError: If validation fails
            OSError: If file operations fail
        """
        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)

            if validate:
                self._validate_java(content)

            if path.exists():
                temp_path.chmod(path.stat().st_mode)

            # On POSIX systems, rename() is atomic if source and dest are on same filesystem
            temp_path.replace(path)
            logger.debug("Wrote %s", path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.warning("Could not remove temporary file %s", temp_path)
            raise

    def write_direct(self, path: Path, content: str, validate: bool = True) -> None:
        """Validate, then overwrite the file in place (non-atomic mode)."""
        if validate:
            self._validate_java(content)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def _default_validate_java(self, content: str) -> None:
        """Default Java validation: the result must parse without errors.

        Args:
            content: Java code to validate

        Raises:
            GenerationError: If validation fails
        """
        if self._parser is None:
            self._parser = Parser(Language(ts_java.language()))
        tree = self._parser.parse(content.encode("utf-8"))
        if tree.root_node.has_error:
            raise GenerationError("Generated Java code is not valid; the file was left untouched")
