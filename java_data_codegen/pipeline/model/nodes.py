"""
Structural model of the class being augmented.

These nodes are built fresh on every run from the preserved prefix of the
source file and are immutable once extracted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...utils import erase_type, upper_camel

PRIMITIVE_TYPES = ("byte", "short", "int", "long", "char", "float", "double", "boolean")

BOXED_TYPES = {
    "byte": "Byte",
    "short": "Short",
    "int": "Integer",
    "long": "Long",
    "char": "Character",
    "float": "Float",
    "double": "Double",
    "boolean": "Boolean",
}

LIST_TYPES = ("List", "ArrayList", "LinkedList", "Collection")
SET_TYPES = ("Set", "HashSet", "LinkedHashSet", "ArraySet")
MAP_TYPES = ("Map", "HashMap", "LinkedHashMap", "ArrayMap")
COLLECTION_TYPES = LIST_TYPES + SET_TYPES + MAP_TYPES

BUILDER_CLASS = "Builder"
BASE_BUILDER_CLASS = "BaseBuilder"


class TypeKind(str, Enum):
    """Classification of a field's declared type."""

    PRIMITIVE = "primitive"
    REFERENCE = "reference"
    COLLECTION = "collection"
    ENUM = "enum"


class Nullability(str, Enum):
    NON_NULL = "non_null"
    NULLABLE = "nullable"
    NOT_APPLICABLE = "not_applicable"  # Primitives


@dataclass(frozen=True)
class TypeRef:
    """A classified Java type.

    Attributes:
        kind: Classification used by every generator
        name: Declared type text, e.g. "List<String>"
        type_arguments: Generic argument texts, e.g. ("String",)
        is_array: Whether the declared type is an array
    """

    kind: TypeKind
    name: str
    type_arguments: tuple[str, ...] = ()
    is_array: bool = False

    @property
    def erased(self) -> str:
        """Erased simple name used for signature matching."""
        return erase_type(self.name)

    @property
    def raw_name(self) -> str:
        """Type name without generic arguments."""
        return self.name.split("<", 1)[0].strip()

    @property
    def is_primitive(self) -> bool:
        return self.kind is TypeKind.PRIMITIVE

    @property
    def is_boolean(self) -> bool:
        return self.kind is TypeKind.PRIMITIVE and self.name == "boolean"

    @property
    def is_list(self) -> bool:
        return self.kind is TypeKind.COLLECTION and self.erased in LIST_TYPES

    @property
    def is_set(self) -> bool:
        return self.kind is TypeKind.COLLECTION and self.erased in SET_TYPES

    @property
    def is_map(self) -> bool:
        return self.kind is TypeKind.COLLECTION and self.erased in MAP_TYPES

    @property
    def boxed(self) -> str:
        """Boxed name for primitives, the declared name otherwise."""
        return BOXED_TYPES.get(self.name, self.name)


@dataclass(frozen=True)
class MemberSignature:
    """A method or constructor already present in the user's code.

    Only the name and erased parameter types are kept: that is all
    override suppression needs.
    """

    name: str
    parameter_types: tuple[str, ...] = ()

    @staticmethod
    def of(name: str, *parameter_types: str) -> MemberSignature:
        """Build a signature, erasing the given parameter types."""
        return MemberSignature(name, tuple(erase_type(t) for t in parameter_types))

    def __str__(self) -> str:
        return f"{self.name}({', '.join(self.parameter_types)})"


@dataclass(frozen=True)
class FieldHooks:
    """Per-field customization slots the user may define.

    For a field ``mFoo`` of type ``T``:
        parcel: ``void parcelFoo(Parcel dest, int flags)``
        unparcel: ``static T unparcelFoo(Parcel in)``
        to_string: ``String fooToString()``
        lazy_init: ``T lazyInitFoo()``
        default: ``static T defaultFoo()``
    """

    parcel: bool = False
    unparcel: bool = False
    to_string: bool = False
    lazy_init: bool = False
    default: bool = False


@dataclass(frozen=True)
class FieldModel:
    """A field declaration taking part in generation."""

    # Declared field name, e.g. "mName"
    name: str

    type: TypeRef

    nullability: Nullability

    # Name used in accessors and parameters, e.g. "name"
    property_name: str = ""

    # Initializer expression or default-provider call
    default_value: str | None = None

    has_initializer: bool = False
    is_final: bool = False
    is_volatile: bool = False

    # Annotation texts to copy onto generated parameters and return types
    annotations: tuple[str, ...] = ()

    # Javadoc body lines without comment delimiters
    javadoc: tuple[str, ...] = ()

    # "@hide" present in the javadoc
    hidden: bool = False

    # Used for builder "addFoo(..)" methods on collections
    singular_name: str = ""

    hooks: FieldHooks = field(default_factory=FieldHooks)

    # Parcelling class from @DataClass.ParcelWith, e.g. "Parcelling.BuiltIn.ForPattern"
    parcel_with: str | None = None

    # Declaration text used in the metadata comment
    signature: str = ""

    @property
    def upper_name(self) -> str:
        return upper_camel(self.property_name)

    @property
    def is_nullable(self) -> bool:
        return self.nullability is Nullability.NULLABLE

    @property
    def is_non_null(self) -> bool:
        return self.nullability is Nullability.NON_NULL

    @property
    def is_lazy(self) -> bool:
        return self.hooks.lazy_init

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def is_required(self) -> bool:
        """Must be supplied explicitly when building."""
        return not self.has_default and not self.is_nullable

    @property
    def annotated_type(self) -> str:
        """Type with its nullability annotations, e.g. "@NonNull String"."""
        return " ".join(self.annotations + (self.type.name,))

    @property
    def getter_name(self) -> str:
        prefix = "is" if self.type.is_boolean else "get"
        return prefix + self.upper_name


@dataclass(frozen=True)
class ClassModel:
    """The top-level class of the processed file."""

    name: str

    fields: tuple[FieldModel, ...] = ()

    # Methods and constructors written by hand
    members: frozenset[MemberSignature] = frozenset()

    package: str | None = None

    # e.g. "<T extends Parcelable>"
    type_parameters: str = ""

    # Names of static fields, e.g. "CREATOR"
    static_fields: frozenset[str] = frozenset()

    # Names of nested classes, interfaces and enums
    nested_types: frozenset[str] = frozenset()

    # Erased superclass of a hand-written nested Builder, e.g. "BaseBuilder"
    builder_superclass: str | None = None

    # Constructors and methods of a hand-written nested Builder
    builder_members: frozenset[MemberSignature] = frozenset()

    # Whether the class carries a @DataClass annotation
    has_data_class_annotation: bool = False

    # Boolean genX parameters of the @DataClass annotation
    annotation_flags: dict[str, bool] = field(default_factory=dict, hash=False)

    @property
    def type_name(self) -> str:
        """Class name with type variables, e.g. "Box<T>"."""
        if not self.type_parameters:
            return self.name
        return self.name + "<" + ", ".join(_type_variable_names(self.type_parameters)) + ">"

    @property
    def diamond(self) -> str:
        """Instantiation name, e.g. "Box<>" for generic classes."""
        return self.name + "<>" if self.type_parameters else self.name

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def constructed_fields(self) -> tuple[FieldModel, ...]:
        """Fields passed through the constructor, in declaration order."""
        return tuple(f for f in self.fields if not f.is_lazy)

    def has_member(self, name: str, *parameter_types: str) -> bool:
        """Whether the user already wrote a member with this signature."""
        return MemberSignature.of(name, *parameter_types) in self.members

    @property
    def extends_base_builder(self) -> bool:
        """Whether the user wrote ``class Builder extends BaseBuilder``."""
        return BUILDER_CLASS in self.nested_types and self.builder_superclass == BASE_BUILDER_CLASS

    @property
    def replaces_builder(self) -> bool:
        """Whether a hand-written Builder takes the place of the generated one."""
        return BUILDER_CLASS in self.nested_types and not self.extends_base_builder


def _type_variable_names(type_parameters: str) -> list[str]:
    """Extract variable names from "<K extends Foo<K>, V>" -> ["K", "V"]."""
    inner = type_parameters.strip()[1:-1]
    names = []
    depth = 0
    current = ""
    for char in inner:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            names.append(current)
            current = ""
        else:
            current += char
    names.append(current)
    return [name.split()[0] for name in (n.strip() for n in names) if name]
