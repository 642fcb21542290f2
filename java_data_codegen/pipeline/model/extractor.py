"""
Class model extraction.

Uses tree-sitter and tree-sitter-java to parse the user-written part of a
source file and build a ``ClassModel``: the top-level class, its fields
with their classified types, and the signatures of hand-written members.
"""

from __future__ import annotations

import logging
from typing import Any

import tree_sitter_java as ts_java
from tree_sitter import Language, Parser

from ...utils import erase_type, property_name, simple_name, singularize, upper_camel
from ..config import CodeGeneratorConfig
from ..errors import ModelError
from .nodes import BUILDER_CLASS, COLLECTION_TYPES, ClassModel, FieldHooks, FieldModel, MemberSignature, Nullability, TypeKind, TypeRef

logger = logging.getLogger(__name__)

DATA_CLASS_ANNOTATION = "DataClass"
ENUM_ANNOTATION = "DataClass.Enum"
PLURAL_OF_ANNOTATION = "DataClass.PluralOf"
PARCEL_WITH_ANNOTATION = "DataClass.ParcelWith"

PRIMITIVE_NODE_TYPES = ("integral_type", "floating_point_type", "boolean_type")
NAMED_TYPE_NODE_TYPES = ("type_identifier", "scoped_type_identifier")
ANNOTATION_NODE_TYPES = ("marker_annotation", "annotation")
COMMENT_NODE_TYPES = ("block_comment", "comment")
NESTED_TYPE_NODE_TYPES = ("class_declaration", "interface_declaration", "enum_declaration", "record_declaration", "annotation_type_declaration")


class ModelExtractor:
    """Builds a ``ClassModel`` from Java source code."""

    def __init__(self, config: CodeGeneratorConfig | None = None):
        self.config = config or CodeGeneratorConfig()
        self._parser = Parser(Language(ts_java.language()))

    def parse(self, code: str, file_name: str | None = None) -> Any:
        """Parse Java source code into a tree-sitter tree.

        Args:
            code: Java source code string
            file_name: Used in error messages

        Returns:
            tree-sitter Tree object

        Raises:
            ModelError: If the code cannot be parsed
        """
        tree = self._parser.parse(code.encode("utf-8"))
        if tree.root_node.has_error:
            errors = self._find_errors(tree.root_node)
            line = errors[0].start_point[0] + 1 if errors else "?"
            raise ModelError(f"Failed to parse Java code: syntax error at line {line}", file_name=file_name)
        return tree

    def extract(self, source: str, file_name: str | None = None) -> ClassModel:
        """Extract the class model from the preserved prefix of a file.

        Args:
            source: File content up to (excluding) the generated region and
                the closing brace of the top-level class
            file_name: Used in error messages

        Returns:
            The class model

        Raises:
            ModelError: If the source has no class, does not parse, or a
                field is ambiguous
        """
        root, class_node = self._top_level_class(source, file_name)

        class_name = self._text(class_node.child_by_field_name("name"))
        type_parameters_node = class_node.child_by_field_name("type_parameters")
        body = class_node.child_by_field_name("body")

        enum_names = {self._text(node.child_by_field_name("name")) for node in self._find_nodes(root, "enum_declaration")}

        members = set()
        static_fields = set()
        nested_types = set()
        builder_superclass = None
        builder_members = frozenset()
        for member in body.named_children:
            if member.type == "method_declaration":
                members.add(self._member_signature(self._text(member.child_by_field_name("name")), member))
            elif member.type == "constructor_declaration":
                members.add(self._member_signature(class_name, member))
            elif member.type in NESTED_TYPE_NODE_TYPES:
                nested_name = self._text(member.child_by_field_name("name"))
                nested_types.add(nested_name)
                if nested_name == BUILDER_CLASS and member.type == "class_declaration":
                    builder_superclass, builder_members = self._nested_builder(member)
            elif member.type == "field_declaration":
                keywords, _ = self._modifiers(member)
                if "static" in keywords:
                    static_fields.update(self._declarator_names(member))

        members = frozenset(members)
        fields = []
        for member in body.named_children:
            if member.type != "field_declaration":
                continue
            keywords, annotations = self._modifiers(member)
            if "static" in keywords or "transient" in keywords:
                continue
            for declarator in member.children_by_field_name("declarator"):
                name = self._text(declarator.child_by_field_name("name"))
                if name in self.config.ignore_fields:
                    logger.debug("Ignoring field %s", name)
                    continue
                fields.append(self._field_model(member, declarator, keywords, annotations, enum_names, members))

        data_class = self._data_class_annotation(class_node)

        model = ClassModel(
            name=class_name,
            fields=tuple(fields),
            members=members,
            package=self._package_name(root),
            type_parameters=self._text(type_parameters_node) if type_parameters_node is not None else "",
            static_fields=frozenset(static_fields),
            nested_types=frozenset(nested_types),
            builder_superclass=builder_superclass,
            builder_members=builder_members,
            has_data_class_annotation=data_class is not None,
            annotation_flags=self._annotation_flags(data_class) if data_class is not None else {},
        )
        logger.debug("Extracted class %s with %d fields and %d members", model.name, len(model.fields), len(model.members))
        return model

    def has_data_class_annotation(self, source: str) -> bool:
        """Whether the top-level class of a whole file carries a @DataClass annotation.

        Unlike ``extract``, this never raises: a file whose top-level type is
        not a class, or that does not parse cleanly, is simply not annotated.
        """
        self._code = source.encode("utf-8")
        root = self._parser.parse(self._code).root_node
        class_node = next((child for child in root.named_children if child.type == "class_declaration"), None)
        return class_node is not None and self._data_class_annotation(class_node) is not None

    def _top_level_class(self, source: str, file_name: str | None) -> tuple[Any, Any]:
        code = source.rstrip() + "\n}\n"
        self._code = code.encode("utf-8")
        self._file_name = file_name
        root = self.parse(code, file_name).root_node
        class_node = next((child for child in root.named_children if child.type == "class_declaration"), None)
        if class_node is None:
            raise ModelError("No top-level class declaration found", file_name=file_name)
        return root, class_node

    def _data_class_annotation(self, class_node: Any) -> Any:
        _, class_annotations = self._modifiers(class_node)
        return next((node for name, node in class_annotations if simple_name(name) == DATA_CLASS_ANNOTATION), None)

    def _field_model(
        self,
        member: Any,
        declarator: Any,
        keywords: set[str],
        annotations: list[tuple[str, Any]],
        enum_names: set[str],
        members: frozenset[MemberSignature],
    ) -> FieldModel:
        name = self._text(declarator.child_by_field_name("name"))
        prop = property_name(name)
        upper = upper_camel(prop)
        annotation_names = [annotation_name for annotation_name, _ in annotations]

        def has(method: str, *parameter_types: str) -> bool:
            return MemberSignature.of(method, *parameter_types) in members

        hooks = FieldHooks(
            parcel=has(f"parcel{upper}", "Parcel", "int"),
            unparcel=has(f"unparcel{upper}", "Parcel"),
            to_string=has(f"{prop}ToString"),
            lazy_init=has(f"lazyInit{upper}"),
            default=has(f"default{upper}"),
        )

        type_node = member.child_by_field_name("type")
        type_ref = self._classify(type_node, annotation_names, enum_names, name)
        if hooks.lazy_init and type_ref.kind is TypeKind.PRIMITIVE:
            # Lazy getters use null as "not yet initialized"
            raise ModelError(f"Primitive field cannot be lazily initialized; use {type_ref.boxed} instead", self._file_name, name)

        value_node = declarator.child_by_field_name("value")
        initializer = self._text(value_node) if value_node is not None else None
        is_final = "final" in keywords
        if is_final and initializer is not None:
            raise ModelError(f"Final field cannot have an initializer; define default{upper}() instead", self._file_name, name)
        if is_final and hooks.lazy_init:
            raise ModelError(f"Final field cannot be lazily initialized by lazyInit{upper}()", self._file_name, name)
        default_value = initializer if initializer is not None else (f"default{upper}()" if hooks.default else None)

        nullability_annotations = [
            self._text(node)
            for annotation_name, node in annotations
            if simple_name(annotation_name) in self.config.non_null_annotations or simple_name(annotation_name) in self.config.nullable_annotations
        ]
        nullability = self._nullability(type_ref, annotation_names, default_value, hooks, name)

        javadoc = self._javadoc(member)
        plural_of = next((node for annotation_name, node in annotations if annotation_name == PLURAL_OF_ANNOTATION), None)
        singular = self._string_argument(plural_of) if plural_of is not None else singularize(prop)
        parcel_with = next((node for annotation_name, node in annotations if annotation_name == PARCEL_WITH_ANNOTATION), None)

        return FieldModel(
            name=name,
            type=type_ref,
            nullability=nullability,
            property_name=prop,
            default_value=default_value,
            has_initializer=initializer is not None,
            is_final=is_final,
            is_volatile="volatile" in keywords,
            annotations=tuple(nullability_annotations) if type_ref.kind is not TypeKind.PRIMITIVE else (),
            javadoc=javadoc,
            hidden=any("@hide" in line for line in javadoc),
            singular_name=singular,
            hooks=hooks,
            parcel_with=self._class_argument(parcel_with) if parcel_with is not None else None,
            signature=" ".join(self._text(member).split()),
        )

    def _classify(self, type_node: Any, annotation_names: list[str], enum_names: set[str], field_name: str) -> TypeRef:
        """Classify a declared type into primitive, reference, collection or enum.

        Raises:
            ModelError: If the type cannot be classified
        """
        if type_node is None:
            raise ModelError("Field has no declared type", self._file_name, field_name)
        text = self._text(type_node)
        if type_node.type in PRIMITIVE_NODE_TYPES:
            return TypeRef(TypeKind.PRIMITIVE, text)
        if type_node.type == "array_type":
            return TypeRef(TypeKind.REFERENCE, text, is_array=True)
        if type_node.type == "generic_type":
            arguments = next((child for child in type_node.named_children if child.type == "type_arguments"), None)
            type_arguments = tuple(self._text(child) for child in arguments.named_children) if arguments is not None else ()
            kind = TypeKind.COLLECTION if erase_type(text) in COLLECTION_TYPES else TypeKind.REFERENCE
            return TypeRef(kind, text, type_arguments)
        if type_node.type in NAMED_TYPE_NODE_TYPES and text != "var":
            if ENUM_ANNOTATION in annotation_names or erase_type(text) in enum_names:
                return TypeRef(TypeKind.ENUM, text)
            return TypeRef(TypeKind.REFERENCE, text)
        raise ModelError(f"Cannot classify field type '{text}'", self._file_name, field_name)

    def _nullability(
        self,
        type_ref: TypeRef,
        annotation_names: list[str],
        default_value: str | None,
        hooks: FieldHooks,
        field_name: str,
    ) -> Nullability:
        if type_ref.kind is TypeKind.PRIMITIVE:
            return Nullability.NOT_APPLICABLE
        simple_names = {simple_name(name) for name in annotation_names}
        non_null = bool(simple_names.intersection(self.config.non_null_annotations))
        nullable = bool(simple_names.intersection(self.config.nullable_annotations))
        if non_null and nullable:
            raise ModelError("Field is annotated both non-null and nullable", self._file_name, field_name)
        if nullable:
            return Nullability.NULLABLE
        if non_null or default_value is not None or hooks.lazy_init:
            return Nullability.NON_NULL
        raise ModelError(
            f"Cannot tell whether the field may be null: annotate it with @{self.config.non_null_annotations[0]} or @{self.config.nullable_annotations[0]}, or give it a default value",
            self._file_name,
            field_name,
        )

    def _member_signature(self, name: str, node: Any) -> MemberSignature:
        parameters = node.child_by_field_name("parameters")
        types = []
        for parameter in parameters.named_children if parameters is not None else ():
            if parameter.type == "formal_parameter":
                types.append(self._text(parameter.child_by_field_name("type")))
            elif parameter.type == "spread_parameter":
                type_node = next(child for child in parameter.named_children if child.type not in ("modifiers", "variable_declarator"))
                types.append(self._text(type_node) + "[]")
        return MemberSignature.of(name, *types)

    def _modifiers(self, node: Any) -> tuple[set[str], list[tuple[str, Any]]]:
        """Return modifier keywords and (annotation name, node) pairs."""
        keywords: set[str] = set()
        annotations: list[tuple[str, Any]] = []
        modifiers = next((child for child in node.children if child.type == "modifiers"), None)
        if modifiers is None:
            return keywords, annotations
        for child in modifiers.children:
            if child.type in ANNOTATION_NODE_TYPES:
                annotations.append((self._text(child.child_by_field_name("name")), child))
            elif not child.is_named:
                keywords.add(child.type)
        return keywords, annotations

    def _annotation_flags(self, annotation: Any) -> dict[str, bool]:
        """Read boolean ``genX = true|false`` parameters of an annotation."""
        flags = {}
        arguments = annotation.child_by_field_name("arguments")
        if arguments is None:
            return flags
        for pair in arguments.named_children:
            if pair.type != "element_value_pair":
                continue
            key = self._text(pair.child_by_field_name("key"))
            value = self._text(pair.child_by_field_name("value"))
            if value in ("true", "false"):
                flags[key] = value == "true"
        return flags

    def _string_argument(self, annotation: Any) -> str:
        arguments = annotation.child_by_field_name("arguments")
        if arguments is None or not arguments.named_children:
            raise ModelError(f"@{PLURAL_OF_ANNOTATION} requires a name argument", self._file_name)
        return self._text(arguments.named_children[0]).strip('"')

    def _class_argument(self, annotation: Any) -> str:
        """Class named by an annotation argument, "Foo.class" -> "Foo"."""
        arguments = annotation.child_by_field_name("arguments")
        if arguments is None or not arguments.named_children:
            raise ModelError(f"@{PARCEL_WITH_ANNOTATION} requires a class argument", self._file_name)
        text = self._text(arguments.named_children[0])
        return text[: -len(".class")] if text.endswith(".class") else text

    def _nested_builder(self, node: Any) -> tuple[str | None, frozenset[MemberSignature]]:
        """Erased superclass and member signatures of a hand-written Builder."""
        superclass = node.child_by_field_name("superclass")
        superclass_name = None
        if superclass is not None and superclass.named_children:
            superclass_name = erase_type(self._text(superclass.named_children[0]))
        members = set()
        for member in node.child_by_field_name("body").named_children:
            if member.type == "method_declaration":
                members.add(self._member_signature(self._text(member.child_by_field_name("name")), member))
            elif member.type == "constructor_declaration":
                members.add(self._member_signature(BUILDER_CLASS, member))
        return superclass_name, frozenset(members)

    def _javadoc(self, member: Any) -> tuple[str, ...]:
        """Body lines of the javadoc comment right before a declaration."""
        comment = member.prev_sibling
        if comment is None or comment.type not in COMMENT_NODE_TYPES:
            return ()
        text = self._text(comment)
        if not text.startswith("/**"):
            return ()
        lines = []
        for line in text[3:-2].split("\n"):
            line = line.strip()
            if line.startswith("*"):
                line = line[1:]
                if line.startswith(" "):
                    line = line[1:]
            lines.append(line.rstrip())
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        return tuple(lines)

    def _declarator_names(self, member: Any) -> list[str]:
        return [self._text(declarator.child_by_field_name("name")) for declarator in member.children_by_field_name("declarator")]

    def _package_name(self, root: Any) -> str | None:
        for node in root.named_children:
            if node.type == "package_declaration":
                for child in node.named_children:
                    if child.type in ("scoped_identifier", "identifier"):
                        return self._text(child)
        return None

    def _find_errors(self, node: Any) -> list[Any]:
        """Find all ERROR and MISSING nodes in the tree."""
        errors = []
        if node.type == "ERROR" or node.is_missing:
            errors.append(node)
        for child in node.children:
            errors.extend(self._find_errors(child))
        return errors

    def _find_nodes(self, node: Any, node_type: str) -> list[Any]:
        """Find all nodes of a given type in the tree."""
        results = []
        if node.type == node_type:
            results.append(node)
        for child in node.children:
            results.extend(self._find_nodes(child, node_type))
        return results

    def _text(self, node: Any) -> str:
        """Get the source text for a node."""
        return self._code[node.start_byte : node.end_byte].decode("utf-8")
