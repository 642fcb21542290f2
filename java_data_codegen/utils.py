"""
Utility functions for the Java data class code generator.
"""

import re

# Matches Android-style member names such as "mFooBar"
_MEMBER_PREFIX_PATTERN = re.compile(r"^m[A-Z]")

# Innermost generic argument list, e.g. "<String>" in "Map<String, List<String>>"
_TYPE_ARGUMENTS_PATTERN = re.compile(r"<[^<>]*>")

# Type annotations inside a type expression, e.g. "@NonNull String"
_TYPE_ANNOTATION_PATTERN = re.compile(r"@[\w.]+(\([^)]*\))?\s*")


def upper_camel(text: str) -> str:
    """Capitalize the first character, keeping the rest untouched.

    Examples:
        "fooBar" -> "FooBar"
        "x" -> "X"
    """
    if not text:
        return ""
    return text[0].upper() + text[1:]


def lower_camel(text: str) -> str:
    """Lowercase the first character, keeping the rest untouched."""
    if not text:
        return ""
    return text[0].lower() + text[1:]


def property_name(field_name: str) -> str:
    """Strip the "m" member prefix from a field name.

    Examples:
        "mFooBar" -> "fooBar"
        "fooBar" -> "fooBar"
        "m" -> "m"
    """
    if _MEMBER_PREFIX_PATTERN.match(field_name):
        return lower_camel(field_name[1:])
    return field_name


def singularize(name: str) -> str:
    """Derive a singular name from a plural collection field name.

    Examples:
        "entries" -> "entry"
        "items" -> "item"
        "boxes" -> "box"
        "address" -> "address"
    """
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith(("xes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def erase_type(type_text: str) -> str:
    """Reduce a Java type expression to its erased simple form.

    Used to compare parameter shapes of user-written members with the ones
    a generator would emit.

    Examples:
        "java.util.List<String>" -> "List"
        "@NonNull Map<String, List<Integer>>" -> "Map"
        "int[]" -> "int[]"
        "String..." -> "String[]"
    """
    text = _TYPE_ANNOTATION_PATTERN.sub("", type_text)
    previous = None
    while previous != text:
        previous = text
        text = _TYPE_ARGUMENTS_PATTERN.sub("", text)
    text = "".join(text.split())
    text = text.replace("...", "[]")
    dims = ""
    while text.endswith("[]"):
        dims += "[]"
        text = text[:-2]
    return text.rsplit(".", 1)[-1] + dims


def simple_name(qualified_name: str) -> str:
    """Return the last segment of a dotted name."""
    return qualified_name.rsplit(".", 1)[-1]
