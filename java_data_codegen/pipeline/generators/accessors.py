"""
Getter and setter generation.
"""

from __future__ import annotations

from typing import Any

from ..features import FeatureFlag
from ..model.nodes import FieldModel
from .base import FeatureGenerator, GenerationContext, field_doc


def lazy_getter_body(field: FieldModel) -> list[str]:
    """Getter body initializing the field on first access.

    Volatile fields get double-checked locking, others a plain null check.
    """
    local = f"_{field.property_name}"
    init = [
        f"{local} = lazyInit{field.upper_name}();",
        f"this.{field.name} = {local};",
    ]
    if field.is_volatile:
        body = [
            f"{field.type.name} {local} = this.{field.name};",
            f"if ({local} == null) {{",
            "    synchronized (this) {",
            f"        {local} = this.{field.name};",
            f"        if ({local} == null) {{",
            *("            " + line for line in init),
            "        }",
            "    }",
            "}",
        ]
    else:
        body = [
            f"{field.type.name} {local} = this.{field.name};",
            f"if ({local} == null) {{",
            *("    " + line for line in init),
            "}",
        ]
    return body + [f"return {local};"]


class GettersGenerator(FeatureGenerator):
    """One getter per field; ``isFoo()`` for primitive booleans."""

    feature = FeatureFlag.GETTERS
    template_name = "getters.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        getters = []
        for field in ctx.model.fields:
            if ctx.model.has_member(field.getter_name):
                self.skip(f"{field.getter_name}()")
                continue
            getters.append(
                {
                    "doc": field_doc(field, ctx.is_hidden(self.feature, field)),
                    "return_type": field.annotated_type,
                    "name": field.getter_name,
                    "body": lazy_getter_body(field) if field.is_lazy else [f"return this.{field.name};"],
                }
            )
        if not getters:
            return None
        return {"getters": getters}


class SettersGenerator(FeatureGenerator):
    """Chainable setters for every non-final field."""

    feature = FeatureFlag.SETTERS
    template_name = "setters.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        setters = []
        for field in ctx.model.fields:
            if field.is_final:
                continue
            name = "set" + field.upper_name
            if ctx.model.has_member(name, field.type.name):
                self.skip(f"{name}({field.type.erased})")
                continue
            body = [f"this.{field.name} = value;"]
            check = ctx.require_non_null(field)
            if check:
                body.append(check)
            body.append("return this;")
            setters.append(
                {
                    "doc": field_doc(field, ctx.is_hidden(self.feature, field)),
                    "name": name,
                    "parameter": f"{field.annotated_type} value",
                    "body": body,
                }
            )
        if not setters:
            return None
        return {"setters": setters}
