"""
Parcelable serialization codec generation.

Layout written by ``writeToParcel`` and read back by the ``Foo(Parcel)``
constructor, in field declaration order:

1. one ``int`` (or ``long``) bit-set holding every primitive boolean and
   the non-null bit of every nullable field, when there are any;
2. each remaining field's value, skipped when its null bit is clear.

``parcelFoo``/``unparcelFoo`` hooks take over a field entirely. A field
annotated ``@DataClass.ParcelWith(Foo.class)`` is handed to a cached
``Parcelling`` instance of that class instead of the built-in codecs.
"""

from __future__ import annotations

from typing import Any

from ..errors import GenerationError
from ..features import FeatureFlag
from ..model.nodes import FieldModel, TypeKind
from .base import FeatureGenerator, GenerationContext
from .constructor import construction_statements

PARCEL = "android.os.Parcel"
PARCELABLE = "android.os.Parcelable"
PARCELLING = "com.android.internal.util.Parcelling"

MAX_INT_BITS = 32
MAX_LONG_BITS = 64

PRIMITIVE_CODECS = {
    "int": ("writeInt({})", "in.readInt()"),
    "long": ("writeLong({})", "in.readLong()"),
    "float": ("writeFloat({})", "in.readFloat()"),
    "double": ("writeDouble({})", "in.readDouble()"),
    "byte": ("writeByte({})", "in.readByte()"),
    "short": ("writeInt({})", "(short) in.readInt()"),
    "char": ("writeInt({})", "(char) in.readInt()"),
}

ARRAY_CODECS = {
    "int[]": ("writeIntArray({})", "in.createIntArray()"),
    "long[]": ("writeLongArray({})", "in.createLongArray()"),
    "float[]": ("writeFloatArray({})", "in.createFloatArray()"),
    "double[]": ("writeDoubleArray({})", "in.createDoubleArray()"),
    "boolean[]": ("writeBooleanArray({})", "in.createBooleanArray()"),
    "byte[]": ("writeByteArray({})", "in.createByteArray()"),
    "char[]": ("writeCharArray({})", "in.createCharArray()"),
    "String[]": ("writeStringArray({})", "in.createStringArray()"),
}

STRING_LIST_TYPES = ("List", "ArrayList", "Collection")

CONCRETE_COLLECTIONS = {
    "List": "java.util.ArrayList",
    "Collection": "java.util.ArrayList",
    "ArrayList": "java.util.ArrayList",
    "LinkedList": "java.util.LinkedList",
    "Set": "java.util.LinkedHashSet",
    "HashSet": "java.util.HashSet",
    "LinkedHashSet": "java.util.LinkedHashSet",
    "ArraySet": "android.util.ArraySet",
    "Map": "java.util.LinkedHashMap",
    "HashMap": "java.util.HashMap",
    "LinkedHashMap": "java.util.LinkedHashMap",
    "ArrayMap": "android.util.ArrayMap",
}


def concrete_collection(ctx: GenerationContext, field: FieldModel) -> str:
    """Instantiable class for a collection field, e.g. "java.util.ArrayList"."""
    return ctx.qualify(CONCRETE_COLLECTIONS[field.type.erased])


def parcelling_field(field: FieldModel) -> str:
    """Name of the static Parcelling cache field, e.g. "sParcellingForPattern"."""
    return "sParcellingFor" + field.upper_name


class ParcelableGenerator(FeatureGenerator):
    """``writeToParcel``, ``describeContents``, ``Foo(Parcel)`` and ``CREATOR``."""

    feature = FeatureFlag.PARCELABLE
    template_name = "parcelable.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        fields = model.constructed_fields
        parcel = ctx.qualify(PARCEL)

        generate_write = not model.has_member("writeToParcel", "Parcel", "int")
        generate_describe = not model.has_member("describeContents")
        generate_constructor = not model.has_member(model.name, "Parcel")
        generate_creator = "CREATOR" not in model.static_fields
        for generated, member in (
            (generate_write, "writeToParcel(Parcel, int)"),
            (generate_describe, "describeContents()"),
            (generate_constructor, f"{model.name}(Parcel)"),
            (generate_creator, "CREATOR"),
        ):
            if not generated:
                self.skip(member)
        if not (generate_write or generate_describe or generate_constructor or generate_creator):
            return None

        bits = self._assign_bits(fields)
        flag_type = "int" if len(bits) <= MAX_INT_BITS else "long"
        suffix = "" if flag_type == "int" else "L"
        masks = {name: f"0x{1 << index:x}{suffix}" for index, name in enumerate(bits)}

        write_lines = []
        read_lines = []
        if bits:
            write_lines.append(f"{flag_type} flg = 0;")
            for field in fields:
                if field.name not in masks:
                    continue
                condition = f"this.{field.name}" if field.type.is_boolean else f"this.{field.name} != null"
                write_lines.append(f"if ({condition}) flg |= {masks[field.name]};")
            write_lines.append(f"dest.write{flag_type.capitalize()}(flg);")
            read_lines.append(f"{flag_type} flg = in.read{flag_type.capitalize()}();")

        for field in fields:
            write_lines.extend(self._write_statements(ctx, field, masks.get(field.name)))
            read_lines.extend(self._read_statements(ctx, field, masks.get(field.name)))

        parcellings = [self._parcelling(ctx, field) for field in fields if self._uses_parcelling(field) and parcelling_field(field) not in model.static_fields]

        hidden = ctx.flags.is_restricted(self.feature)
        return {
            "parcellings": parcellings,
            "parcel": parcel,
            "creator_type": ctx.qualify(PARCELABLE) + ".Creator",
            "generate_write": generate_write,
            "generate_describe": generate_describe,
            "generate_constructor": generate_constructor,
            "generate_creator": generate_creator,
            "write_lines": write_lines,
            "read_lines": read_lines,
            "assignments": construction_statements(ctx, {field.name: self._local(field) for field in fields}),
            "hidden": hidden,
        }

    def _assign_bits(self, fields: tuple[FieldModel, ...]) -> list[str]:
        """Names of fields packed into the leading bit-set, in bit order."""
        bits = [field.name for field in fields if not (field.hooks.parcel or field.hooks.unparcel) and (field.type.is_boolean or field.is_nullable)]
        if len(bits) > MAX_LONG_BITS:
            raise GenerationError(f"Cannot parcel more than {MAX_LONG_BITS} boolean or nullable fields, found {len(bits)}")
        return bits

    @staticmethod
    def _uses_parcelling(field: FieldModel) -> bool:
        return field.parcel_with is not None and not (field.hooks.parcel and field.hooks.unparcel)

    def _parcelling(self, ctx: GenerationContext, field: FieldModel) -> dict[str, str]:
        """Static field caching the Parcelling instance of one field."""
        return {
            "type": f"{ctx.qualify(PARCELLING)}<{field.type.boxed}>",
            "name": parcelling_field(field),
            "cache": ctx.qualify(PARCELLING) + ".Cache",
            "parcelling_class": field.parcel_with,
        }

    @staticmethod
    def _local(field: FieldModel) -> str:
        return f"_{field.property_name}"

    def _write_statements(self, ctx: GenerationContext, field: FieldModel, mask: str | None) -> list[str]:
        if field.hooks.parcel:
            return [f"parcel{field.upper_name}(dest, flags);"]
        if field.type.is_boolean:
            return [] if mask is not None else [f"dest.writeInt(this.{field.name} ? 1 : 0);"]
        value = f"this.{field.name}"
        if field.parcel_with is not None:
            statement = f"{parcelling_field(field)}.parcel({value}, dest, flags);"
        else:
            statement = "dest." + self._write_call(ctx, field).format(value) + ";"
        if mask is not None:
            return [f"if ({value} != null) {statement}"]
        return [statement]

    def _read_statements(self, ctx: GenerationContext, field: FieldModel, mask: str | None) -> list[str]:
        local = self._local(field)
        declared = field.type.name
        if field.hooks.unparcel:
            return [f"{declared} {local} = unparcel{field.upper_name}(in);"]
        if field.type.is_boolean:
            if mask is None:
                return [f"boolean {local} = in.readInt() != 0;"]
            return [f"boolean {local} = (flg & {mask}) != 0;"]
        if field.parcel_with is not None:
            init, extra = f"{parcelling_field(field)}.unparcel(in)", []
        else:
            init, extra = self._read_expression(ctx, field, local)
        if mask is None:
            return [f"{declared} {local} = {init};", *extra]
        return [
            f"{declared} {local} = null;",
            f"if ((flg & {mask}) != 0) {{",
            f"    {local} = {init};",
            *("    " + line for line in extra),
            "}",
        ]

    def _write_call(self, ctx: GenerationContext, field: FieldModel) -> str:
        """Parcel write call template with one ``{}`` slot for the value."""
        type_ref = field.type
        if type_ref.kind is TypeKind.PRIMITIVE:
            return PRIMITIVE_CODECS[type_ref.name][0]
        if type_ref.kind is TypeKind.ENUM:
            return "writeInt({}.ordinal())"
        if type_ref.is_array:
            return ARRAY_CODECS.get(type_ref.erased, ("writeValue({})", None))[0]
        if type_ref.kind is TypeKind.COLLECTION:
            if type_ref.is_map:
                return "writeMap({})"
            if type_ref.erased in STRING_LIST_TYPES and type_ref.type_arguments == ("String",):
                return "writeStringList({})"
            if type_ref.is_set:
                return f"writeList(new {ctx.qualify('java.util.ArrayList')}<>({{}}))"
            return "writeList({})"
        if type_ref.kind is TypeKind.REFERENCE:
            if type_ref.erased == "String":
                return "writeString({})"
            return "writeValue({})"
        raise GenerationError(f"Cannot parcel field '{field.name}' of type '{type_ref.name}'")

    def _read_expression(self, ctx: GenerationContext, field: FieldModel, local: str) -> tuple[str, list[str]]:
        """Initializer expression for the local variable, plus follow-up statements."""
        type_ref = field.type
        loader = f"{ctx.model.name}.class.getClassLoader()"
        if type_ref.kind is TypeKind.PRIMITIVE:
            return PRIMITIVE_CODECS[type_ref.name][1], []
        if type_ref.kind is TypeKind.ENUM:
            return f"{type_ref.raw_name}.values()[in.readInt()]", []
        if type_ref.is_array:
            codec = ARRAY_CODECS.get(type_ref.erased)
            if codec is not None:
                return codec[1], []
            return f"({type_ref.name}) in.readValue({loader})", []
        if type_ref.kind is TypeKind.COLLECTION:
            concrete = concrete_collection(ctx, field)
            if type_ref.is_map:
                return f"new {concrete}<>()", [f"in.readMap({local}, {loader});"]
            if type_ref.erased in STRING_LIST_TYPES and type_ref.type_arguments == ("String",):
                return "in.createStringArrayList()", []
            if type_ref.is_set:
                return f"new {concrete}<>()", self._read_set(ctx, field, local, loader)
            return f"new {concrete}<>()", [f"in.readList({local}, {loader});"]
        if type_ref.kind is TypeKind.REFERENCE:
            if type_ref.erased == "String":
                return "in.readString()", []
            return f"({type_ref.name}) in.readValue({loader})", []
        raise GenerationError(f"Cannot unparcel field '{field.name}' of type '{type_ref.name}'")

    def _read_set(self, ctx: GenerationContext, field: FieldModel, local: str, loader: str) -> list[str]:
        """Sets travel as lists; read the list, then fill the set."""
        element = field.type.type_arguments[0] if field.type.type_arguments else "Object"
        array_list = ctx.qualify("java.util.ArrayList")
        items = f"{local}Items"
        return [
            f"{array_list}<{element}> {items} = new {array_list}<>();",
            f"in.readList({items}, {loader});",
            f"{local}.addAll({items});",
        ]
