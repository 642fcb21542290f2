"""
toString(), equals(Object)/hashCode() and forEachField(..) generation.

Lazily initialized fields are computed values and take no part in these.
"""

from __future__ import annotations

from typing import Any

from ..features import FeatureFlag
from ..model.nodes import FieldModel
from .base import FeatureGenerator, GenerationContext


def to_string_expression(ctx: GenerationContext, field: FieldModel) -> str:
    if field.hooks.to_string:
        return f"{field.property_name}ToString()"
    if field.type.is_array:
        return f"{ctx.qualify('java.util.Arrays')}.toString(this.{field.name})"
    return f"this.{field.name}"


def equals_expression(ctx: GenerationContext, field: FieldModel) -> str:
    this_value = f"this.{field.name}"
    that_value = f"that.{field.name}"
    if field.type.is_primitive:
        if field.type.name in ("float", "double"):
            return f"{field.type.boxed}.compare({this_value}, {that_value}) == 0"
        return f"{this_value} == {that_value}"
    if field.type.is_array:
        return f"{ctx.qualify('java.util.Arrays')}.equals({this_value}, {that_value})"
    return f"{ctx.qualify('java.util.Objects')}.equals({this_value}, {that_value})"


def hash_code_expression(ctx: GenerationContext, field: FieldModel) -> str:
    if field.type.is_primitive:
        return f"{field.type.boxed}.hashCode(this.{field.name})"
    if field.type.is_array:
        return f"{ctx.qualify('java.util.Arrays')}.hashCode(this.{field.name})"
    return f"{ctx.qualify('java.util.Objects')}.hashCode(this.{field.name})"


class ToStringGenerator(FeatureGenerator):
    """``toString()`` listing every field; ``fooToString()`` hooks win."""

    feature = FeatureFlag.TO_STRING
    template_name = "to_string.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        if ctx.model.has_member("toString"):
            self.skip("toString()")
            return None
        fields = ctx.model.constructed_fields
        parts = []
        for index, field in enumerate(fields):
            part = f'"{field.property_name} = " + {to_string_expression(ctx, field)}'
            if index < len(fields) - 1:
                part += ' + ", "'
            parts.append(part)
        return {"parts": parts, "hidden": ctx.flags.is_restricted(self.feature)}


class EqualsHashCodeGenerator(FeatureGenerator):
    """``equals(Object)`` and ``hashCode()``, each suppressible on its own."""

    feature = FeatureFlag.EQUALS_HASH_CODE
    template_name = "equals_hash_code.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        generate_equals = not model.has_member("equals", "Object")
        generate_hash_code = not model.has_member("hashCode")
        if not generate_equals:
            self.skip("equals(Object)")
        if not generate_hash_code:
            self.skip("hashCode()")
        if not generate_equals and not generate_hash_code:
            return None
        fields = model.constructed_fields
        return {
            "generate_equals": generate_equals,
            "generate_hash_code": generate_hash_code,
            "that_type": model.name + ("<?>" if model.type_parameters else ""),
            "comparisons": [equals_expression(ctx, field) for field in fields],
            "hashes": [hash_code_expression(ctx, field) for field in fields],
            "hidden": ctx.flags.is_restricted(self.feature),
        }


class ForEachFieldGenerator(FeatureGenerator):
    """``forEachField(action)`` passing each field's name and value."""

    feature = FeatureFlag.FOR_EACH_FIELD
    template_name = "for_each_field.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        if ctx.model.has_member("forEachField", "BiConsumer"):
            self.skip("forEachField(BiConsumer)")
            return None
        return {
            "consumer_type": ctx.qualify("java.util.function.BiConsumer") + "<String, Object>",
            "fields": [(field.property_name, field.name) for field in ctx.model.constructed_fields],
            "hidden": ctx.flags.is_restricted(self.feature),
        }
