"""Tests for descriptor → JSON Schema lowering and root wrapping."""

import pytest

from toolshape.errors import UnsupportedTypeError
from toolshape.schema import ToolSchema, generate_json_schema, generate_schema, unwrap_root
from toolshape.types import (
    annotate,
    array,
    boolean,
    enum_,
    ignore,
    integer,
    literal,
    null,
    number,
    object_,
    string,
    union,
)


def test_primitives():
    assert generate_json_schema(string) == {"type": "string"}
    assert generate_json_schema(number) == {"type": "number"}
    assert generate_json_schema(integer) == {"type": "integer"}
    assert generate_json_schema(boolean) == {"type": "boolean"}
    assert generate_json_schema(null) == {"type": "null"}


def test_object_and_array():
    node = object_(name=string, tags=array(string))
    assert generate_json_schema(node) == {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "tags": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["name", "tags"],
    }


def test_union_literal_enum():
    assert generate_json_schema(union(string, number)) == {"oneOf": [{"type": "string"}, {"type": "number"}]}
    assert generate_json_schema(literal("light")) == {"const": "light"}
    assert generate_json_schema(enum_("a", "b")) == {"type": "string", "enum": ["a", "b"]}


def test_annotations_merge_over_base_and_reserved_keys_are_stripped():
    node = annotate(string, description="The mood", type="string", default="calm", transform=str.strip)
    assert generate_json_schema(node) == {"type": "string", "description": "The mood"}


def test_annotation_keys_win_on_conflict():
    node = annotate(number, type="integer")
    assert generate_json_schema(node) == {"type": "integer"}


def test_annotated_object_keeps_structure():
    node = annotate(object_(id=number), description="A record")
    schema = generate_json_schema(node)
    assert schema["type"] == "object"
    assert schema["required"] == ["id"]
    assert schema["description"] == "A record"


def test_required_excludes_ignorable_properties():
    node = object_(id=number, note=ignore(string), name=string, extra=ignore(annotate(boolean, default=True)))
    schema = generate_json_schema(node)

    assert schema["required"] == ["id", "name"]
    assert schema["properties"]["note"] == {"type": "string"}
    assert list(schema["properties"]) == ["id", "note", "name", "extra"]


def test_required_is_emitted_when_empty():
    schema = generate_json_schema(object_(note=ignore(string)))
    assert schema["required"] == []


def test_ignorable_nested_in_annotation_is_still_required():
    # Only the property's immediate node decides whether it is required.
    node = object_(a=annotate(ignore(string), description="x"))
    assert generate_json_schema(node)["required"] == ["a"]


def test_unsupported_node():
    with pytest.raises(UnsupportedTypeError):
        generate_json_schema("not a node")  # type: ignore[arg-type]


# ---- Tool schema and root wrapping ----


def test_generate_schema_object_root_is_not_wrapped():
    schema = generate_schema(object_(emotion=string), "testTool", "A test tool")

    assert isinstance(schema, ToolSchema)
    assert schema.wrapped is False
    assert schema.to_schema() == {
        "name": "testTool",
        "description": "A test tool",
        "parameters": {
            "type": "object",
            "properties": {"emotion": {"type": "string"}},
            "required": ["emotion"],
        },
    }


def test_generate_schema_wraps_array_root():
    schema = generate_schema(array(string), "testFunction", "A test function")

    assert schema.wrapped is True
    assert schema.parameters == {
        "type": "object",
        "properties": {"items": {"type": "array", "items": {"type": "string"}}},
        "required": ["items"],
    }


@pytest.mark.parametrize("root", [string, union(string, number), enum_("a", "b"), annotate(array(number))])
def test_generate_schema_wraps_any_non_object_root(root):
    schema = generate_schema(root, "f", "d")
    assert schema.wrapped is True
    assert schema.parameters["required"] == ["items"]


def test_annotated_object_root_is_not_wrapped():
    schema = generate_schema(annotate(object_(a=string), description="x"), "f", "d")
    assert schema.wrapped is False


def test_unwrap_root():
    wrapped = generate_schema(array(string), "f", "d")
    plain = generate_schema(object_(items=array(string)), "f", "d")

    assert unwrap_root({"items": ["a"]}, wrapped) == ["a"]
    assert unwrap_root({"items": ["a"]}, plain) == {"items": ["a"]}
    # Nothing to unwrap: leave it for the decoder to report.
    assert unwrap_root({"other": 1}, wrapped) == {"other": 1}
