"""
CLI utilities for rendering and parsing the regenerate command line.

The generated region of every file embeds the command that produced it,
e.g. ``$ java_data_codegen --builder --no-setters Person.java``. The same
line is parsed back by update-only runs, so both directions live here.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from pathlib import Path

CODEGEN_NAME = "java_data_codegen"

COMMAND_PREFIX = "$ "


def format_command_line(tokens: Sequence[str], file_name: str | Path) -> str:
    """
    Render the command line that regenerates a file.

    Args:
        tokens: Flag tokens, e.g. ["--builder", "--no-setters"]
        file_name: Target file (only its name is kept, for stable output)

    Returns:
        Command line string, e.g. "java_data_codegen --builder Person.java"
    """
    parts = [CODEGEN_NAME, *tokens, Path(file_name).name]
    return shlex.join(parts)


def parse_command_line(line: str) -> list[str] | None:
    """
    Recover flag tokens from a rendered command line.

    Args:
        line: A comment line such as "// $ java_data_codegen --builder Person.java"

    Returns:
        The flag tokens between program name and file name, or None when the
        line is not a command line written by this tool
    """
    text = line.strip()
    if text.startswith("//"):
        text = text[2:].strip()
    if not text.startswith(COMMAND_PREFIX):
        return None
    try:
        parts = shlex.split(text[len(COMMAND_PREFIX) :])
    except ValueError:
        return None
    if len(parts) < 2 or Path(parts[0]).name != CODEGEN_NAME:
        return None
    return parts[1:-1]
