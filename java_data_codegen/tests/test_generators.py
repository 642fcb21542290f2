#!/usr/bin/env python3

from datetime import datetime

import pytest

from java_data_codegen.pipeline import CodeGeneratorConfig, PipelineGenerator
from java_data_codegen.pipeline.errors import GenerationError

PERSON = """package com.example;

public class Person {
    private @NonNull String mName;
    private int mCount;
}
"""


def make_class(body: str, header: str = "public class Person {") -> str:
    return f"package com.example;\n\n{header}\n{body}}}\n"


def generate(source: str, *tokens: str, config: CodeGeneratorConfig | None = None) -> str:
    generator = PipelineGenerator(config, now=lambda: datetime(2024, 5, 6, 7, 8, 9))
    return generator.generate(source, list(tokens), "Person.java")


class TestConstructor:
    """Test cases for constructor generation"""

    def test_all_argument_constructor(self):
        output = generate(PERSON, "--constructor")
        assert "    public Person(\n            @NonNull String name,\n            int count) {\n" in output
        assert "        this.mName = name;\n" in output
        assert '        java.util.Objects.requireNonNull(this.mName, "name");\n' in output
        assert "        this.mCount = count;\n" in output

    def test_hand_written_constructor_wins(self):
        source = make_class(
            """    private @NonNull String mName;
    private int mCount;

    public Person(String name, int count) { mName = name; mCount = count; }
"""
        )
        output = generate(source, "--constructor")
        assert "    public Person(\n" not in output

    def test_on_constructed_hook(self):
        source = make_class("    private int mCount;\n\n    private void onConstructed() {}\n")
        output = generate(source, "--constructor")
        assert "        this.mCount = count;\n\n        onConstructed();\n" in output

    def test_copy_constructor(self):
        output = generate(PERSON, "--copy-constructor")
        assert "    public Person(Person orig) {\n        this(orig.mName, orig.mCount);\n    }" in output
        # Promoted prerequisite
        assert "/* package-private */ Person(" in output


class TestAccessors:
    """Test cases for getters and setters"""

    def test_getters(self):
        output = generate(PERSON, "--getters")
        assert "    public @NonNull String getName() {\n        return this.mName;\n    }" in output
        assert "    public int getCount() {\n        return this.mCount;\n    }" in output

    def test_boolean_getter(self):
        output = generate(make_class("    private boolean mActive;\n"), "--getters")
        assert "public boolean isActive()" in output

    def test_hand_written_getter_wins(self):
        source = make_class(
            """    private @NonNull String mName;
    private int mCount;

    public int getCount() { return mCount + 1; }
"""
        )
        output = generate(source, "--getters")
        assert output.count("getCount() {") == 1
        assert "public @NonNull String getName()" in output

    def test_hidden_getters(self):
        output = generate(PERSON, "--hidden-getters")
        assert "    /**\n     * @hide\n     */\n    public int getCount()" in output

    def test_hidden_field(self):
        source = make_class("    /** @hide */\n    private int mCount;\n")
        output = generate(source, "--getters")
        assert "    /**\n     * @hide\n     */\n    public int getCount()" in output

    def test_field_javadoc_is_copied(self):
        source = make_class("    /** How many. */\n    private int mCount;\n")
        output = generate(source, "--getters")
        assert "    /**\n     * How many.\n     */\n    public int getCount()" in output

    def test_lazy_getter(self):
        source = make_class(
            """    private @NonNull String mName;
    private volatile @NonNull String mLabel;

    private String lazyInitLabel() { return "label"; }
"""
        )
        output = generate(source, "--getters", "--constructor")
        assert "        String _label = this.mLabel;\n        if (_label == null) {\n            synchronized (this) {" in output
        assert "_label = lazyInitLabel();" in output
        # Lazy fields are not constructor parameters
        assert "    public Person(\n            @NonNull String name) {\n" in output

    def test_setters(self):
        output = generate(PERSON, "--setters")
        assert "    public Person setName(@NonNull String value) {\n" in output
        assert '        java.util.Objects.requireNonNull(this.mName, "name");\n        return this;\n' in output
        assert "    public Person setCount(int value) {\n        this.mCount = value;\n        return this;\n    }" in output

    def test_no_setters_for_final_fields(self):
        source = make_class("    private final int mCount;\n    private int mOther;\n")
        output = generate(source, "--setters")
        assert "setCount" not in output
        assert "setOther" in output


class TestObjectMethods:
    """Test cases for toString, equals/hashCode and forEachField"""

    def test_to_string(self):
        output = generate(PERSON, "--to-string")
        assert '        return "Person { " +\n                "name = " + this.mName + ", " +\n                "count = " + this.mCount +\n        " }";' in output

    def test_to_string_hook_and_arrays(self):
        source = make_class(
            """    private @NonNull String mName;
    private @NonNull int[] mValues;

    private String nameToString() { return "?"; }
"""
        )
        output = generate(source, "--to-string")
        assert '"name = " + nameToString()' in output
        assert '"values = " + java.util.Arrays.toString(this.mValues)' in output

    def test_equals_and_hash_code(self):
        output = generate(PERSON, "--equals-hash-code")
        assert "    public boolean equals(Object o) {" in output
        assert "        Person that = (Person) o;" in output
        assert "                && java.util.Objects.equals(this.mName, that.mName)\n                && this.mCount == that.mCount;" in output
        assert "        _hash = 31 * _hash + java.util.Objects.hashCode(this.mName);" in output
        assert "        _hash = 31 * _hash + Integer.hashCode(this.mCount);" in output

    def test_floating_point_equality(self):
        output = generate(make_class("    private double mRatio;\n"), "--equals-hash-code")
        assert "Double.compare(this.mRatio, that.mRatio) == 0" in output

    def test_hand_written_equals_keeps_hash_code(self):
        source = make_class(
            """    private int mCount;

    @Override
    public boolean equals(Object other) { return false; }
"""
        )
        output = generate(source, "--equals-hash-code")
        assert output.count("public boolean equals(") == 1
        assert "public int hashCode()" in output

    def test_generic_equals(self):
        source = make_class("    private @NonNull T mValue;\n", header="public class Box<T> {")
        output = generate(source, "--equals-hash-code")
        assert "        Box<?> that = (Box<?>) o;" in output

    def test_for_each_field(self):
        output = generate(PERSON, "--for-each-field")
        assert "            java.util.function.BiConsumer<String, Object> action) {" in output
        assert '        action.accept("name", this.mName);\n        action.accept("count", this.mCount);' in output


class TestWithers:
    """Test cases for immutable-update methods"""

    def test_withers(self):
        output = generate(PERSON, "--withers")
        assert "    public Person withName(@NonNull String value) {\n        return new Person(value, this.mCount);\n    }" in output
        assert "    public Person withCount(int value) {\n        return new Person(this.mName, value);\n    }" in output

    def test_generic_withers(self):
        source = make_class("    private @NonNull T mValue;\n", header="public class Box<T> {")
        output = generate(source, "--withers")
        assert "    public Box<T> withValue(@NonNull T value) {\n        return new Box<>(value);\n    }" in output


class TestParcelable:
    """Test cases for Parcelable generation"""

    SOURCE = make_class(
        """    private boolean mActive;
    private @Nullable String mNote;
    private int mCount;
    private @NonNull java.util.List<String> mTags;
""",
        header="public class Person implements android.os.Parcelable {",
    )

    def test_write_to_parcel(self):
        output = generate(self.SOURCE, "--parcelable")
        assert "    public void writeToParcel(android.os.Parcel dest, int flags) {" in output
        assert (
            "        int flg = 0;\n"
            "        if (this.mActive) flg |= 0x1;\n"
            "        if (this.mNote != null) flg |= 0x2;\n"
            "        dest.writeInt(flg);\n"
            "        if (this.mNote != null) dest.writeString(this.mNote);\n"
            "        dest.writeInt(this.mCount);\n"
            "        dest.writeStringList(this.mTags);\n"
        ) in output

    def test_parcel_constructor(self):
        output = generate(self.SOURCE, "--parcelable")
        assert "    protected Person(android.os.Parcel in) {" in output
        assert "        int flg = in.readInt();\n        boolean _active = (flg & 0x1) != 0;\n" in output
        assert "        String _note = null;\n        if ((flg & 0x2) != 0) {\n            _note = in.readString();\n        }\n" in output
        assert "        int _count = in.readInt();\n" in output
        assert "        java.util.List<String> _tags = in.createStringArrayList();\n" in output
        assert "        this.mActive = _active;\n" in output

    def test_creator(self):
        output = generate(self.SOURCE, "--parcelable")
        assert "    public static final android.os.Parcelable.Creator<Person> CREATOR" in output
        assert "            return new Person(in);" in output
        assert "public int describeContents() { return 0; }" in output

    def test_hand_written_creator_wins(self):
        source = make_class(
            "    private int mCount;\n    public static final Object CREATOR = null;\n",
            header="public class Person implements android.os.Parcelable {",
        )
        output = generate(source, "--parcelable")
        assert output.count("CREATOR") == 1
        assert "writeToParcel" in output

    def test_parcel_hooks(self):
        source = make_class(
            """    private @NonNull String mName;

    private void parcelName(android.os.Parcel dest, int flags) {}
    private static String unparcelName(android.os.Parcel in) { return ""; }
"""
        )
        output = generate(source, "--parcelable")
        assert "        parcelName(dest, flags);\n" in output
        assert "        String _name = unparcelName(in);\n" in output

    def test_parcel_with(self):
        source = make_class(
            """    @DataClass.ParcelWith(Parcelling.BuiltIn.ForPattern.class)
    private @NonNull java.util.regex.Pattern mPattern;
    private @Nullable java.util.regex.Pattern mFilter;
    @DataClass.ParcelWith(Parcelling.BuiltIn.ForPattern.class)
    private @Nullable java.util.regex.Pattern mOther;
"""
        )
        output = generate(source, "--parcelable")
        assert (
            "    static com.android.internal.util.Parcelling<java.util.regex.Pattern> sParcellingForPattern =\n"
            "            com.android.internal.util.Parcelling.Cache.get(\n"
            "                    Parcelling.BuiltIn.ForPattern.class);\n"
            "    static {\n"
            "        if (sParcellingForPattern == null) {\n"
            "            sParcellingForPattern = com.android.internal.util.Parcelling.Cache.put(\n"
            "                    new Parcelling.BuiltIn.ForPattern());\n"
            "        }\n"
            "    }\n"
        ) in output
        assert "sParcellingForFilter" not in output
        assert "        sParcellingForPattern.parcel(this.mPattern, dest, flags);\n" in output
        assert "        if (this.mOther != null) sParcellingForOther.parcel(this.mOther, dest, flags);\n" in output
        assert "        java.util.regex.Pattern _pattern = sParcellingForPattern.unparcel(in);\n" in output
        assert "            _other = sParcellingForOther.unparcel(in);\n" in output

    def test_parcel_hooks_win_over_parcel_with(self):
        source = make_class(
            """    @DataClass.ParcelWith(Parcelling.BuiltIn.ForPattern.class)
    private @NonNull java.util.regex.Pattern mPattern;

    private void parcelPattern(android.os.Parcel dest, int flags) {}
    private static java.util.regex.Pattern unparcelPattern(android.os.Parcel in) { return null; }
"""
        )
        output = generate(source, "--parcelable")
        assert "sParcellingForPattern" not in output
        assert "        parcelPattern(dest, flags);\n" in output

    def test_enum_field(self):
        source = make_class("    enum Color { RED }\n\n    private @NonNull Color mColor;\n")
        output = generate(source, "--parcelable")
        assert "dest.writeInt(this.mColor.ordinal());" in output
        assert "Color _color = Color.values()[in.readInt()];" in output

    def test_too_many_packed_fields(self):
        body = "".join(f"    private boolean mFlag{i};\n" for i in range(65))
        with pytest.raises(GenerationError, match="more than 64"):
            generate(make_class(body), "--parcelable")

    def test_long_bit_set(self):
        body = "".join(f"    private boolean mFlag{i};\n" for i in range(33))
        output = generate(make_class(body), "--parcelable")
        assert "        long flg = 0;\n" in output
        assert "if (this.mFlag32) flg |= 0x100000000L;" in output


class TestBuilder:
    """Test cases for Builder and buildUpon generation"""

    SOURCE = make_class(
        """    private @NonNull String mName;
    private @Nullable String mNote;
    private int mCount = 1;
    private @NonNull java.util.List<String> mTags;
"""
    )

    def test_builder_constructor_takes_required_fields(self):
        output = generate(self.SOURCE, "--builder")
        assert "    public static final class Builder {" in output
        assert "        public Builder(\n                @NonNull String name,\n                @NonNull java.util.List<String> tags) {\n" in output

    def test_builder_setters(self):
        output = generate(self.SOURCE, "--builder")
        assert (
            "        public Builder setCount(int value) {\n"
            "            checkNotUsed();\n"
            "            this.mBuilderFieldsSet |= 0x4L;\n"
            "            this.mCount = value;\n"
            "            return this;\n"
            "        }"
        ) in output

    def test_protected_setters(self):
        output = generate(self.SOURCE, "--builder", "--builder-protected-setters")
        assert "        protected Builder setCount(int value) {" in output

    def test_builder_adder(self):
        output = generate(self.SOURCE, "--builder")
        assert "        public Builder addTag(String value) {\n" in output
        assert "            if (this.mTags == null) setTags(new java.util.ArrayList<>());\n            this.mTags.add(value);\n" in output

    def test_build_applies_defaults(self):
        output = generate(self.SOURCE, "--builder")
        assert "            this.mBuilderFieldsSet |= 0x10L; // Mark builder used\n" in output
        assert "            if ((this.mBuilderFieldsSet & 0x4L) == 0) {\n                this.mCount = 1;\n            }\n" in output
        assert "            Person o = new Person(\n                    this.mName,\n                    this.mNote,\n                    this.mCount,\n                    this.mTags);\n" in output

    def test_builder_promotes_package_private_constructor(self):
        output = generate(self.SOURCE, "--builder")
        assert "    /* package-private */ Person(\n" in output

    def test_build_upon(self):
        output = generate(self.SOURCE, "--build-upon")
        assert "    public Builder buildUpon() {\n        Builder builder = new Builder(this.mName, this.mTags);\n" in output
        assert "        builder.setNote(this.mNote);\n        builder.setCount(this.mCount);\n        return builder;\n" in output
        assert "public static final class Builder {" in output

    def test_hand_written_builder_wins(self):
        source = make_class("    private int mCount;\n\n    public static class Builder {}\n")
        output = generate(source, "--build-upon")
        assert "final class Builder" not in output
        assert "buildUpon()" not in output

    def test_base_builder_for_hand_written_subclass(self):
        source = self.SOURCE[: -len("}\n")] + "\n    public static class Builder extends BaseBuilder {}\n}\n"
        output = generate(source, "--builder")
        assert "final class Builder" not in output
        assert "    public static abstract class BaseBuilder {" in output
        assert "        /* package-private */ BaseBuilder(\n                @NonNull String name,\n" in output
        assert (
            "        public Builder setCount(int value) {\n"
            "            checkNotUsed();\n"
            "            this.mBuilderFieldsSet |= 0x4L;\n"
            "            this.mCount = value;\n"
            "            return (Builder) this;\n"
            "        }"
        ) in output
        assert "            return (Builder) this;\n        }\n" in output.split("public Builder addTag(String value)", 1)[1]

    def test_build_upon_with_hand_written_subclass(self):
        builder = """
    public static class Builder extends BaseBuilder {
        public Builder(@NonNull String name, @NonNull java.util.List<String> tags) {
            super(name, tags);
        }
    }
"""
        source = self.SOURCE[: -len("}\n")] + builder + "}\n"
        output = generate(source, "--build-upon")
        assert "    public Builder buildUpon() {\n        Builder builder = new Builder(this.mName, this.mTags);\n" in output
        assert "public static abstract class BaseBuilder {" in output

    def test_build_upon_needs_subclass_constructor(self):
        source = self.SOURCE[: -len("}\n")] + "\n    public static class Builder extends BaseBuilder {}\n}\n"
        output = generate(source, "--build-upon")
        assert "buildUpon()" not in output
        assert "public static abstract class BaseBuilder {" in output

    def test_too_many_fields(self):
        body = "".join(f"    private int mValue{i};\n" for i in range(64))
        with pytest.raises(GenerationError, match="more than 63"):
            generate(make_class(body), "--builder")


class TestRegionMarkers:
    """Test cases for the header, AIDL and metadata comments"""

    def test_header(self):
        output = generate(PERSON, "--getters", "--no-setters")
        assert (
            "    // Code below generated by java_data_codegen v1.0.0.\n"
            "    //\n"
            "    // DO NOT MODIFY!\n"
            "    //\n"
            "    // To regenerate run:\n"
            "    // $ java_data_codegen --getters --no-setters Person.java\n"
            "    //\n"
            "    //@formatter:off\n"
        ) in output

    def test_metadata_is_last(self):
        output = generate(PERSON, "--getters")
        assert output.endswith("    //@formatter:on\n    // End of generated code\n}\n")
        assert "    // Generated by java_data_codegen v1.0.0 at 2024-05-06T07:08:09\n" in output
        assert "    // Source file: Person.java\n" in output
        assert "    // Features: getters\n" in output
        assert "    //   private @NonNull String mName;\n    //   private int mCount;\n" in output

    def test_metadata_lists_existing_members(self):
        source = make_class("    private int mCount;\n\n    public int getCount() { return mCount; }\n")
        output = generate(source, "--getters")
        assert "    //   getCount()\n" in output

    def test_generation_time_can_be_disabled(self):
        output = generate(PERSON, "--getters", config=CodeGeneratorConfig(add_generation_time=False))
        assert "    // Generated by java_data_codegen v1.0.0\n" in output

    def test_aidl(self):
        output = generate(PERSON, "--aidl")
        assert "     * Person.aidl:\n     *\n     * package com.example;\n     *\n     * parcelable Person;\n" in output
        assert "writeToParcel" in output

    def test_no_full_qualifiers(self):
        output = generate(PERSON, "--constructor", "--no-full-qualifiers")
        assert 'Objects.requireNonNull(this.mName, "name");' in output
        assert "java.util.Objects" not in output
        assert "// $ java_data_codegen --constructor --no-full-qualifiers Person.java" in output


if __name__ == "__main__":
    pytest.main([__file__])
