"""
Base class for feature generators.

Every generator turns the class model and the resolved flags into one chunk
of Java source. Python code decides *what* to emit (including which members
are suppressed because the user already wrote them); a Jinja2 template
decides how it reads.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import jinja2

from ...utils import simple_name
from ..config import CodeGeneratorConfig
from ..features import FeatureFlag, ResolvedFlags
from ..model.nodes import ClassModel, FieldModel

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates" / "java"


@dataclass
class GenerationContext:
    """Everything a generator may look at during one run."""

    model: ClassModel
    flags: ResolvedFlags
    config: CodeGeneratorConfig
    file_name: str
    generated_at: datetime | None = None

    def qualify(self, qualified_name: str) -> str:
        """Refer to a library class, fully qualified unless disabled."""
        return qualified_name if self.flags.full_qualifiers else simple_name(qualified_name)

    def is_hidden(self, feature: FeatureFlag, field: FieldModel | None = None) -> bool:
        """Whether a generated member must carry ``@hide``."""
        return self.flags.is_restricted(feature) or (field is not None and field.hidden)

    def require_non_null(self, field: FieldModel, target: str | None = None) -> str | None:
        """Null check statement for a non-null field, or None."""
        if not field.is_non_null:
            return None
        return f'{self.qualify("java.util.Objects")}.requireNonNull({target or "this." + field.name}, "{field.property_name}");'


def format_javadoc(lines: Sequence[str], indent: int = 4) -> str:
    """Render javadoc body lines as a comment block."""
    if not lines:
        return ""
    pad = " " * indent
    body = [f"{pad} *" + (f" {line}" if line else "") for line in lines]
    return "\n".join([f"{pad}/**", *body, f"{pad} */"])


def format_parameters(parameters: Sequence[str], indent: int = 4) -> str:
    """Render a parameter list, one parameter per line."""
    if not parameters:
        return "()"
    pad = " " * (indent + 8)
    return "(\n" + ",\n".join(pad + parameter for parameter in parameters) + ")"


def field_doc(field: FieldModel, hidden: bool, extra: Sequence[str] = ()) -> list[str]:
    """Javadoc lines for a member derived from one field."""
    lines = list(field.javadoc) if field.javadoc else []
    if extra:
        if lines:
            lines.append("")
        lines.extend(extra)
    if hidden and not any("@hide" in line for line in lines):
        lines.append("@hide")
    return lines


def create_environment() -> jinja2.Environment:
    """Set up the Jinja2 environment shared by all generators."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        lstrip_blocks=True,
        trim_blocks=True,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["javadoc"] = format_javadoc
    env.filters["parameters"] = format_parameters
    return env


class FeatureGenerator(ABC):
    """Abstract base class for generators of one feature."""

    # Feature controlling this generator; None means always generated
    feature: FeatureFlag | None = None

    template_name: str = ""

    def __init__(self, env: jinja2.Environment):
        self.env = env
        self.template = env.get_template(self.template_name)

    def is_enabled(self, ctx: GenerationContext) -> bool:
        return self.feature is None or ctx.flags(self.feature)

    def generate(self, ctx: GenerationContext) -> str:
        """
        Generate this feature's chunk of source.

        Args:
            ctx: The generation context

        Returns:
            Java source text, empty if nothing needs generating

        Raises:
            GenerationError: If consistent code cannot be produced
        """
        if not self.is_enabled(ctx):
            return ""
        template_ctx = self.prepare_context(ctx)
        if template_ctx is None:
            return ""
        return self.template.render(class_name=ctx.model.name, type_name=ctx.model.type_name, **template_ctx)

    @abstractmethod
    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        """
        Prepare the template variables.

        Args:
            ctx: The generation context

        Returns:
            Dictionary of template variables, or None to emit nothing
        """

    def skip(self, member: str) -> None:
        """Log a member suppressed because the user already defined it."""
        logger.info("Not generating %s: already defined", member)
