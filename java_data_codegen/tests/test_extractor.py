#!/usr/bin/env python3

import pytest

from java_data_codegen.pipeline.config import CodeGeneratorConfig
from java_data_codegen.pipeline.errors import ModelError
from java_data_codegen.pipeline.model import MemberSignature, ModelExtractor, Nullability, TypeKind


def extract(body: str, header: str = "public class Person {", config: CodeGeneratorConfig | None = None):
    """Helper to extract the model of a class; the closing brace is implied."""
    source = f"package com.example;\n\nimport android.annotation.NonNull;\n\n{header}\n{body}"
    return ModelExtractor(config).extract(source, "Person.java")


class TestClassExtraction:
    """Test cases for class-level information"""

    def test_class_name_and_package(self):
        model = extract("    private int mCount;\n")
        assert model.name == "Person"
        assert model.package == "com.example"
        assert model.qualified_name == "com.example.Person"
        assert model.type_name == "Person"
        assert model.diamond == "Person"

    def test_generic_class(self):
        model = extract("    private @NonNull T mValue;\n", header="public class Box<T extends Comparable<T>> {")
        assert model.type_parameters == "<T extends Comparable<T>>"
        assert model.type_name == "Box<T>"
        assert model.diamond == "Box<>"

    def test_no_class(self):
        with pytest.raises(ModelError, match="No top-level class"):
            ModelExtractor().extract("package com.example;\n\ninterface Foo {\n", "Foo.java")

    def test_syntax_error(self):
        with pytest.raises(ModelError, match="syntax error"):
            extract("    private int mCount = ;\n")

    def test_members(self):
        model = extract(
            """    private int mCount;

    public Person(int count) { mCount = count; }

    public int getCount() { return mCount; }

    public void merge(java.util.List<Person> others, String... names) {}
"""
        )
        assert model.has_member("Person", "int")
        assert model.has_member("getCount")
        assert model.has_member("merge", "List<Person>", "String[]")
        assert not model.has_member("getCount", "int")
        assert MemberSignature("merge", ("List", "String[]")) in model.members

    def test_static_fields_and_nested_types(self):
        model = extract(
            """    private int mCount;
    public static final Object CREATOR = null;

    public static class Builder {}
"""
        )
        assert "CREATOR" in model.static_fields
        assert "Builder" in model.nested_types
        assert [field.name for field in model.fields] == ["mCount"]

    def test_builder_extending_base_builder(self):
        model = extract(
            """    private @NonNull String mName;

    public static class Builder extends BaseBuilder {
        public Builder(@NonNull String name) {
            super(name);
        }

        public Builder setNameUpperCase(String name) {
            return setName(name.toUpperCase());
        }
    }
"""
        )
        assert model.builder_superclass == "BaseBuilder"
        assert model.extends_base_builder
        assert not model.replaces_builder
        assert MemberSignature("Builder", ("String",)) in model.builder_members
        assert MemberSignature("setNameUpperCase", ("String",)) in model.builder_members
        assert not model.has_member("setNameUpperCase", "String")

    def test_plain_builder_replaces_generated_one(self):
        model = extract("    private int mCount;\n\n    public static class Builder {}\n")
        assert model.builder_superclass is None
        assert model.replaces_builder

    def test_data_class_annotation(self):
        model = extract("    private int mCount;\n", header="@DataClass(genBuilder = true, genSetters = false)\npublic class Person {")
        assert model.has_data_class_annotation
        assert model.annotation_flags == {"genBuilder": True, "genSetters": False}

    def test_qualified_data_class_annotation(self):
        model = extract("    private int mCount;\n", header="@com.android.internal.util.DataClass\npublic class Person {")
        assert model.has_data_class_annotation
        assert model.annotation_flags == {}

    def test_has_data_class_annotation_ignores_fields(self):
        """The quick check does not fail on fields of unprocessed classes"""
        source = "public class Person {\n    private String mName;\n}\n"
        assert not ModelExtractor().has_data_class_annotation(source)

    def test_has_data_class_annotation_on_other_types(self):
        extractor = ModelExtractor()
        assert not extractor.has_data_class_annotation("public interface Runner {\n    void run();\n}\n")
        assert not extractor.has_data_class_annotation("public enum Color { RED }\n")
        assert extractor.has_data_class_annotation("@DataClass\npublic class Person {\n    private int mCount;\n} // Person\n")


class TestFieldExtraction:
    """Test cases for field classification"""

    def test_skipped_fields(self):
        model = extract(
            """    private static int sCounter;
    private transient int mCache;
    private int mCount;
    private int mIgnored;
""",
            config=CodeGeneratorConfig(ignore_fields=["mIgnored"]),
        )
        assert [field.name for field in model.fields] == ["mCount"]

    def test_multiple_declarators(self):
        model = extract("    private int mX, mY;\n")
        assert [field.property_name for field in model.fields] == ["x", "y"]

    def test_primitive(self):
        (field,) = extract("    private boolean mActive;\n").fields
        assert field.type.kind is TypeKind.PRIMITIVE
        assert field.type.is_boolean
        assert field.nullability is Nullability.NOT_APPLICABLE
        assert field.getter_name == "isActive"
        assert field.is_required

    def test_reference_needs_nullability(self):
        with pytest.raises(ModelError, match="field 'mName'"):
            extract("    private String mName;\n")

    def test_non_null_reference(self):
        (field,) = extract("    private @NonNull String mName;\n").fields
        assert field.type.kind is TypeKind.REFERENCE
        assert field.is_non_null
        assert field.annotations == ("@NonNull",)
        assert field.annotated_type == "@NonNull String"
        assert field.getter_name == "getName"

    def test_nullable_reference(self):
        (field,) = extract("    private @android.annotation.Nullable String mNote;\n").fields
        assert field.is_nullable
        assert not field.is_required

    def test_both_nullability_annotations(self):
        with pytest.raises(ModelError, match="both"):
            extract("    private @NonNull @Nullable String mName;\n")

    def test_initializer_implies_non_null(self):
        (field,) = extract('    private String mName = "anonymous";\n').fields
        assert field.is_non_null
        assert field.default_value == '"anonymous"'
        assert field.has_initializer
        assert not field.is_required

    def test_collections(self):
        fields = extract(
            """    private @NonNull java.util.List<String> mTags;
    private @NonNull Set<Integer> mIds;
    private @NonNull Map<String, Long> mCounts;
    private @NonNull Optional<String> mMaybe;
"""
        ).fields
        tags, ids, counts, maybe = fields
        assert tags.type.kind is TypeKind.COLLECTION and tags.type.is_list
        assert tags.type.type_arguments == ("String",)
        assert ids.type.is_set
        assert counts.type.is_map
        assert counts.type.type_arguments == ("String", "Long")
        assert maybe.type.kind is TypeKind.REFERENCE

    def test_array(self):
        (field,) = extract("    private @NonNull int[] mValues;\n").fields
        assert field.type.is_array
        assert field.type.erased == "int[]"

    def test_enum_declared_in_file(self):
        (field,) = extract(
            """    enum Color { RED, GREEN }

    private @NonNull Color mColor;
"""
        ).fields
        assert field.type.kind is TypeKind.ENUM

    def test_enum_marked_by_annotation(self):
        (field,) = extract("    private @NonNull @DataClass.Enum Shade mShade;\n").fields
        assert field.type.kind is TypeKind.ENUM

    def test_final_field_with_initializer(self):
        with pytest.raises(ModelError, match="Final field cannot have an initializer"):
            extract("    private final int mCount = 3;\n")

    def test_javadoc(self):
        (field,) = extract(
            """    /**
     * The display name.
     *
     * @hide
     */
    private @NonNull String mName;
"""
        ).fields
        assert field.javadoc == ("The display name.", "", "@hide")
        assert field.hidden

    def test_single_line_javadoc(self):
        (field,) = extract("    /** How many. */\n    private int mCount;\n").fields
        assert field.javadoc == ("How many.",)
        assert not field.hidden

    def test_plural_of(self):
        fields = extract(
            """    @DataClass.PluralOf("child")
    private @NonNull java.util.List<String> mChildren;
    private @NonNull java.util.List<String> mEntries;
"""
        ).fields
        assert [field.singular_name for field in fields] == ["child", "entry"]

    def test_parcel_with(self):
        (field,) = extract(
            """    @DataClass.ParcelWith(Parcelling.BuiltIn.ForPattern.class)
    private @NonNull java.util.regex.Pattern mPattern;
"""
        ).fields
        assert field.parcel_with == "Parcelling.BuiltIn.ForPattern"

    def test_parcel_with_requires_a_class(self):
        with pytest.raises(ModelError, match="requires a class argument"):
            extract("    @DataClass.ParcelWith\n    private @NonNull String mName;\n")

    def test_signature(self):
        (field,) = extract("    private   @NonNull\n        String   mName;\n").fields
        assert field.signature == "private @NonNull String mName;"


class TestFieldHooks:
    """Test cases for per-field customization methods"""

    def test_default_provider(self):
        (field,) = extract(
            """    private @NonNull String mName;

    private static String defaultName() { return "x"; }
"""
        ).fields
        assert field.hooks.default
        assert field.default_value == "defaultName()"
        assert not field.is_required

    def test_default_provider_implies_non_null(self):
        (field,) = extract(
            """    private String mName;

    private static String defaultName() { return "x"; }
"""
        ).fields
        assert field.is_non_null

    def test_lazy_init(self):
        model = extract(
            """    private int mCount;
    private @NonNull String mLabel;

    private String lazyInitLabel() { return "n=" + mCount; }
"""
        )
        count, label = model.fields
        assert label.is_lazy
        assert model.constructed_fields == (count,)

    def test_lazy_init_primitive(self):
        with pytest.raises(ModelError, match="Primitive field cannot be lazily initialized"):
            extract("    private int mCount;\n\n    private int lazyInitCount() { return 1; }\n")

    def test_parcelling_and_to_string_hooks(self):
        (field,) = extract(
            """    private @NonNull String mName;

    private void parcelName(android.os.Parcel dest, int flags) {}
    private static String unparcelName(android.os.Parcel in) { return ""; }
    private String nameToString() { return ""; }
"""
        ).fields
        assert field.hooks.parcel
        assert field.hooks.unparcel
        assert field.hooks.to_string
        assert not field.hooks.lazy_init


if __name__ == "__main__":
    pytest.main([__file__])
