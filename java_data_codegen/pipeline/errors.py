"""
Error taxonomy for the code generator.

Every error is terminal for the run: the target file is either fully
regenerated or left exactly as it was.
"""

from __future__ import annotations


class CodegenError(Exception):
    """Base class for all code generator errors."""

    pass


class ConfigurationError(CodegenError):
    """Raised for invalid invocations.

    This can happen when:
    - A flag token names an unknown feature or modifier
    - The same feature is requested with conflicting prefixes
    - The target file is missing
    """

    pass


class ModelError(CodegenError):
    """Raised when the class model cannot be extracted unambiguously.

    Carries the file and, where relevant, the field that needs to be
    fixed by hand.
    """

    def __init__(self, message: str, file_name: str | None = None, field_name: str | None = None):
        self.message = message
        self.file_name = file_name
        self.field_name = field_name
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.file_name:
            location.append(self.file_name)
        if self.field_name:
            location.append(f"field '{self.field_name}'")
        if not location:
            return self.message
        return f"{': '.join(location)}: {self.message}"


class RegionError(ModelError):
    """Raised when the generated region of a file is corrupt.

    Examples are a duplicated sentinel, a sentinel that is not part of the
    file's suffix, or a missing end terminator.
    """

    pass


class GenerationError(CodegenError):
    """Raised when a generator cannot produce consistent code."""

    pass
