"""
Builder and buildUpon() generation.

The builder tracks which fields were set in a ``long`` bit-set: bit ``i``
for the i-th constructed field, and one more bit marking the builder as
used once ``build()`` ran.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import GenerationError
from ..features import FeatureFlag
from ..model.nodes import BASE_BUILDER_CLASS, BUILDER_CLASS, ClassModel, FieldModel, MemberSignature
from .base import FeatureGenerator, GenerationContext, field_doc
from .parcelable import concrete_collection

logger = logging.getLogger(__name__)

# One bit per field plus the "used" bit must fit in a long
MAX_BUILDER_FIELDS = 63


def builder_type(model: ClassModel) -> str:
    """Builder type as referenced from code, e.g. "Builder<T>"."""
    return BUILDER_CLASS + model.type_name[len(model.name) :]


class BuilderGenerator(FeatureGenerator):
    """Nested ``Builder`` class with required fields as constructor parameters.

    When the user writes ``static class Builder extends BaseBuilder``, the
    generated class becomes the abstract ``BaseBuilder`` with package-private
    constructors, and its setters return the user's ``Builder``.
    """

    feature = FeatureFlag.BUILDER
    template_name = "builder.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        if model.replaces_builder:
            self.skip(f"class {BUILDER_CLASS}")
            return None
        extended = model.extends_base_builder
        class_name = BASE_BUILDER_CLASS if extended else BUILDER_CLASS
        return_this = f"({builder_type(model)}) this" if extended else "this"
        fields = model.constructed_fields
        if len(fields) > MAX_BUILDER_FIELDS:
            raise GenerationError(f"Cannot generate a builder for more than {MAX_BUILDER_FIELDS} fields, found {len(fields)}")

        masks = {field.name: f"0x{1 << index:x}L" for index, field in enumerate(fields)}
        used_mask = f"0x{1 << len(fields):x}L"
        required = [field for field in fields if field.is_required]
        visibility = "protected" if ctx.flags.builder_protected_setters else "public"

        constructor_doc = [f"Creates a new {BUILDER_CLASS}."]
        for field in required:
            constructor_doc.append("")
            constructor_doc.append(f"@param {field.property_name}")
            constructor_doc.extend(f"  {line}" if line else "" for line in field_doc(field, hidden=False))

        constructor_statements = []
        for field in required:
            constructor_statements.append(f"this.{field.name} = {field.property_name};")
            check = ctx.require_non_null(field)
            if check:
                constructor_statements.append(check)

        doc = [f"A builder for {{@link {model.name}}}"]
        if ctx.flags.is_restricted(self.feature):
            doc.append("@hide")

        return {
            "doc": doc,
            "builder_class": class_name,
            "builder_declaration": class_name + model.type_parameters,
            "builder_modifier": "abstract" if extended else "final",
            "constructor_visibility": "/* package-private */" if extended else "public",
            "builder_type": builder_type(model),
            "diamond": model.diamond,
            "fields": [{"type": field.type.name, "name": field.name} for field in fields],
            "constructor_doc": constructor_doc,
            "constructor_parameters": [f"{field.annotated_type} {field.property_name}" for field in required],
            "constructor_statements": constructor_statements,
            "setters": [self._setter(ctx, field, masks[field.name], visibility, return_this) for field in fields],
            "adders": [adder for adder in (self._adder(ctx, field, visibility, return_this) for field in fields) if adder is not None],
            "defaults": [{"name": field.name, "mask": masks[field.name], "value": field.default_value} for field in fields if field.has_default],
            "arguments": [f"this.{field.name}" for field in fields],
            "used_mask": used_mask,
        }

    def _setter(self, ctx: GenerationContext, field: FieldModel, mask: str, visibility: str, return_this: str) -> dict[str, Any]:
        body = [
            "checkNotUsed();",
            f"this.mBuilderFieldsSet |= {mask};",
            f"this.{field.name} = value;",
        ]
        check = ctx.require_non_null(field)
        if check:
            body.append(check)
        body.append(f"return {return_this};")
        return {
            "doc": field_doc(field, ctx.is_hidden(self.feature, field)),
            "visibility": visibility,
            "name": "set" + field.upper_name,
            "parameter": f"{field.annotated_type} value",
            "body": body,
        }

    def _adder(self, ctx: GenerationContext, field: FieldModel, visibility: str, return_this: str) -> dict[str, Any] | None:
        """``addFoo(..)`` for list, set and map fields."""
        type_ref = field.type
        if not (type_ref.is_list or type_ref.is_set or type_ref.is_map):
            return None
        arguments = list(type_ref.type_arguments)
        if type_ref.is_map:
            key_type, value_type = arguments if len(arguments) == 2 else ["Object", "Object"]
            parameters = [f"{key_type} key", f"{value_type} value"]
            add = f"this.{field.name}.put(key, value);"
        else:
            element_type = arguments[0] if arguments else "Object"
            parameters = [f"{element_type} value"]
            add = f"this.{field.name}.add(value);"
        hidden = ctx.is_hidden(self.feature, field)
        return {
            "doc": [f"@see #set{field.upper_name}"] + (["@hide"] if hidden else []),
            "visibility": visibility,
            "name": "add" + field.singular_name[:1].upper() + field.singular_name[1:],
            "parameters": parameters,
            "body": [
                f"if (this.{field.name} == null) set{field.upper_name}(new {concrete_collection(ctx, field)}<>());",
                add,
                f"return {return_this};",
            ],
        }


class BuildUponGenerator(FeatureGenerator):
    """``buildUpon()`` returning a Builder pre-filled with this instance's values."""

    feature = FeatureFlag.BUILD_UPON
    template_name = "build_upon.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        if model.has_member("buildUpon"):
            self.skip("buildUpon()")
            return None
        if model.replaces_builder:
            self.skip(f"buildUpon() for the hand-written {BUILDER_CLASS}")
            return None
        fields = model.constructed_fields
        required = [field for field in fields if field.is_required]
        if model.extends_base_builder and MemberSignature.of(BUILDER_CLASS, *(field.type.name for field in required)) not in model.builder_members:
            logger.warning("Not generating buildUpon(): %s has no constructor taking the required fields", BUILDER_CLASS)
            return None
        doc = [f"Creates a {BUILDER_CLASS} initialized with the values of this instance."]
        if ctx.flags.is_restricted(self.feature):
            doc.append("@hide")
        return {
            "doc": doc,
            "builder_type": builder_type(model),
            "builder_diamond": BUILDER_CLASS + ("<>" if model.type_parameters else ""),
            "required_arguments": [f"this.{field.name}" for field in required],
            "setters": [(f"set{field.upper_name}", f"this.{field.name}") for field in fields if not field.is_required],
        }
