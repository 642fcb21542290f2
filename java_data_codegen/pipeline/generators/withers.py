"""
Wither generation: ``withFoo(value)`` returns a copy with one field replaced.
"""

from __future__ import annotations

from typing import Any

from ..features import FeatureFlag
from .base import FeatureGenerator, GenerationContext, field_doc


class WithersGenerator(FeatureGenerator):
    """One wither per constructed field, built on the constructor's parameter order."""

    feature = FeatureFlag.WITHERS
    template_name = "withers.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        fields = model.constructed_fields
        withers = []
        for field in fields:
            name = "with" + field.upper_name
            if model.has_member(name, field.type.name):
                self.skip(f"{name}({field.type.erased})")
                continue
            withers.append(
                {
                    "doc": field_doc(field, ctx.is_hidden(self.feature, field)),
                    "name": name,
                    "parameter": f"{field.annotated_type} value",
                    "arguments": ["value" if other is field else f"this.{other.name}" for other in fields],
                }
            )
        if not withers:
            return None
        return {"withers": withers, "diamond": model.diamond}
