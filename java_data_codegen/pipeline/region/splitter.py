"""
Generated-region splitting.

A processed file consists of the user's code followed by a region owned by
this tool, delimited by a sentinel comment and an end terminator, and then
the closing brace of the top-level class:

    ...user code...

        // Code below generated by java_data_codegen v1.0.0.
        ...
        // $ java_data_codegen --builder Person.java
        ...
        // End of generated code
    }

The splitter returns the byte-exact user prefix and what it could recover
about the previous region.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ... import __version__
from ...cli_utils import CODEGEN_NAME, parse_command_line
from ..errors import RegionError

logger = logging.getLogger(__name__)

GENERATED_WARNING_PREFIX = f"Code below generated by {CODEGEN_NAME}"
GENERATED_END_MARKER = "// End of generated code"

_VERSION_PATTERN = re.compile(re.escape(GENERATED_WARNING_PREFIX) + r" v([0-9][\w.\-]*?)\.?\s*$")


@dataclass(frozen=True)
class GeneratedRegion:
    """A previously generated region found in a file.

    Attributes:
        start_line: 0-based index of the sentinel line
        end_line: 0-based index of the end terminator line
        tokens: Flag tokens recovered from the regenerate command line
        version: Tool version that wrote the region
    """

    start_line: int
    end_line: int
    tokens: tuple[str, ...]
    version: str | None = None


@dataclass(frozen=True)
class SplitResult:
    """Result of splitting a file.

    Attributes:
        prefix: User code, byte-exact, without trailing blank lines and
            without the closing brace of the top-level class
        region: The previous generated region, if any
    """

    prefix: str
    region: GeneratedRegion | None = None

    @property
    def previous_tokens(self) -> tuple[str, ...] | None:
        return self.region.tokens if self.region is not None else None


class RegionSplitter:
    """Separates user code from the previously generated suffix."""

    def split(self, text: str, file_name: str | None = None) -> SplitResult:
        """Split file content into preserved prefix and previous region.

        Args:
            text: Full file content, read without newline translation
            file_name: Used in error messages

        Returns:
            The split result

        Raises:
            RegionError: If the file does not end with a closing brace, or
                the generated region is duplicated, truncated or not the
                suffix of the class
        """
        lines = text.splitlines(keepends=True)

        end = self._skip_blank_backwards(lines, len(lines))
        if end == 0:
            raise RegionError("File is empty", file_name=file_name)
        if lines[end - 1].strip() != "}":
            raise RegionError(f"Expected the closing brace of the top-level class on the last line (line {end})", file_name=file_name)
        body = lines[: end - 1]

        sentinels = [i for i, line in enumerate(body) if GENERATED_WARNING_PREFIX in line]
        terminators = [i for i, line in enumerate(body) if GENERATED_END_MARKER in line]

        if len(sentinels) > 1:
            raise RegionError(
                f"Generated region is duplicated (sentinel at lines {', '.join(str(i + 1) for i in sentinels)}); remove all but the last generated region by hand",
                file_name=file_name,
            )

        if not sentinels:
            if terminators:
                raise RegionError(f"Found '{GENERATED_END_MARKER}' at line {terminators[0] + 1} without a generated region header", file_name=file_name)
            prefix_end = self._skip_blank_backwards(body, len(body))
            return SplitResult(prefix="".join(body[:prefix_end]))

        start = sentinels[0]
        last_content = self._skip_blank_backwards(body, len(body)) - 1
        if len(terminators) != 1 or terminators[0] < start or terminators[0] != last_content:
            raise RegionError(
                f"Generated region starting at line {start + 1} is not the suffix of the class; it is corrupt and must be repaired by hand",
                file_name=file_name,
            )

        tokens = next((parsed for parsed in (parse_command_line(line) for line in body[start : terminators[0]]) if parsed is not None), None)
        if tokens is None:
            raise RegionError(f"Generated region starting at line {start + 1} has no regenerate command line", file_name=file_name)

        match = _VERSION_PATTERN.search(body[start].rstrip())
        region = GeneratedRegion(
            start_line=start,
            end_line=terminators[0],
            tokens=tuple(tokens),
            version=match.group(1) if match else None,
        )
        logger.debug("Found generated region at lines %d-%d (version %s, flags %s)", start + 1, terminators[0] + 1, region.version, " ".join(tokens))
        if region.version is not None and region.version != __version__:
            logger.info("Region of %s was generated by v%s; regenerating with v%s", file_name or "file", region.version, __version__)

        prefix_end = self._skip_blank_backwards(body, start)
        return SplitResult(prefix="".join(body[:prefix_end]), region=region)

    @staticmethod
    def _skip_blank_backwards(lines: list[str], end: int) -> int:
        """Return the index after the last non-blank line before ``end``."""
        while end > 0 and not lines[end - 1].strip():
            end -= 1
        return end
