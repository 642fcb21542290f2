"""
Constructor and copy-constructor generation.
"""

from __future__ import annotations

from typing import Any

from ..features import FeatureFlag
from .base import FeatureGenerator, GenerationContext, field_doc


def construction_statements(ctx: GenerationContext, values: dict[str, str]) -> list[str]:
    """Assign every constructed field from ``values`` and validate it.

    Shared by every generated constructor so that all of them enforce the
    same null checks and call ``onConstructed()`` the same way.
    """
    statements = []
    for field in ctx.model.constructed_fields:
        statements.append(f"this.{field.name} = {values[field.name]};")
        check = ctx.require_non_null(field)
        if check:
            statements.append(check)
    if ctx.model.has_member("onConstructed"):
        statements.append("")
        statements.append("onConstructed();")
    return statements


class ConstructorGenerator(FeatureGenerator):
    """All-argument constructor, in field declaration order."""

    feature = FeatureFlag.CONSTRUCTOR
    template_name = "constructor.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        fields = model.constructed_fields
        if model.has_member(model.name, *(field.type.name for field in fields)):
            self.skip(f"constructor {model.name}")
            return None

        doc = [f"Creates a new {model.name}."]
        for field in fields:
            doc.append("")
            doc.append(f"@param {field.property_name}")
            doc.extend(f"  {line}" if line else "" for line in field_doc(field, hidden=False))
        if ctx.flags.is_restricted(self.feature):
            doc.extend(["", "@hide"])

        return {
            "doc": doc,
            # A constructor nobody asked for stays out of the public API
            "visibility": "/* package-private */" if ctx.flags.is_promoted(self.feature) else "public",
            "parameters": [f"{field.annotated_type} {field.property_name}" for field in fields],
            "statements": construction_statements(ctx, {field.name: field.property_name for field in fields}),
        }


class CopyConstructorGenerator(FeatureGenerator):
    """``Foo(Foo orig)`` delegating to the all-argument constructor."""

    feature = FeatureFlag.COPY_CONSTRUCTOR
    template_name = "copy_constructor.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        if model.has_member(model.name, model.name):
            self.skip(f"copy constructor {model.name}({model.name})")
            return None

        doc = ["Copy constructor"]
        if ctx.flags.is_restricted(self.feature):
            doc.append("@hide")

        return {
            "doc": doc,
            "arguments": [f"orig.{field.name}" for field in model.constructed_fields],
            "lazy_fields": [field.name for field in model.fields if field.is_lazy],
        }
