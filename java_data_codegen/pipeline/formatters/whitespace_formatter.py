"""
Whitespace formatter for generated regions.

Makes output stable across runs: the same generated chunks always collapse
to the same text regardless of how templates space them.
"""

from __future__ import annotations

from .base import Formatter


class WhitespaceFormatter(Formatter):
    """Strips trailing whitespace and collapses runs of blank lines."""

    def __init__(self, max_blank_lines: int = 1):
        self.max_blank_lines = max_blank_lines

    def format(self, code: str) -> str:
        """
        Normalize whitespace in generated code.

        Args:
            code: Generated code

        Returns:
            Code with trailing whitespace removed from every line, at most
            ``max_blank_lines`` consecutive blank lines, and no leading or
            trailing blank lines
        """
        result: list[str] = []
        blank_run = 0
        for line in code.split("\n"):
            line = line.rstrip()
            if not line:
                blank_run += 1
                if blank_run > self.max_blank_lines or not result:
                    continue
            else:
                blank_run = 0
            result.append(line)
        while result and not result[-1]:
            result.pop()
        return "\n".join(result)
