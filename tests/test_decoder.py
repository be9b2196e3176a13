"""Tests for structural decoding and issue reporting."""

import pytest

from toolshape.decoder import DecodeResult, decode, is_valid
from toolshape.errors import ParameterValidationError
from toolshape.types import (
    ABSENT,
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

COMPLEX = object_(
    id=number,
    name=string,
    details=object_(
        age=number,
        hobbies=array(string),
        address=object_(street=string, city=string, zipCode=string),
    ),
)


def _valid_complex():
    return {
        "id": 1,
        "name": "John",
        "details": {
            "age": 30,
            "hobbies": ["reading", "cycling"],
            "address": {"street": "Main St", "city": "New York", "zipCode": "10001"},
        },
    }


def test_valid_data_decodes():
    result = decode(_valid_complex(), COMPLEX)
    assert isinstance(result, DecodeResult)
    assert result.ok
    assert result.value == _valid_complex()
    assert result.unwrap() == _valid_complex()


def test_all_issues_are_collected():
    data = _valid_complex()
    data["id"] = "123"
    data["details"]["hobbies"] = ["reading", 42]
    data["details"]["address"]["zipCode"] = 10001

    result = decode(data, COMPLEX)

    assert not result.ok
    assert [(i.path, i.expected, i.received) for i in result.issues] == [
        (("id",), "number", "123"),
        (("details", "hobbies", 1), "string", 42),
        (("details", "address", "zipCode"), "string", 10001),
    ]


def test_two_mismatches_give_two_issues():
    result = decode({"a": "x", "b": 1}, object_(a=number, b=string))
    assert len(result.issues) == 2


def test_missing_property():
    result = decode({"name": "x"}, object_(name=string, age=number))
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.path == ("age",)
    assert issue.expected == "number"
    assert issue.received is ABSENT


def test_non_object_root_uses_root_label():
    result = decode("nope", object_(a=number))
    assert result.issues[0].path == ()
    assert result.issues[0].expected == "{ a: number }"


def test_unwrap_raises_with_issues():
    result = decode({"age": "thirty"}, object_(age=number))
    with pytest.raises(ParameterValidationError) as excinfo:
        result.unwrap()
    assert excinfo.value.issues == result.issues
    assert "$.age" in str(excinfo.value)
    assert '"thirty"' in str(excinfo.value)


def test_objects_are_narrowed_to_declared_properties():
    result = decode({"a": 1, "extra": True}, object_(a=number))
    assert result.value == {"a": 1}


def test_ignorable_properties():
    node = object_(name=string, email=ignore(string))
    assert decode({"name": "Alice"}, node).ok
    assert decode({"name": "Bob", "email": "bob@example.com"}, node).ok
    assert decode({"name": "Charlie", "email": None}, node).ok
    assert not decode({"name": "David", "email": 3}, node).ok


def test_primitive_kinds():
    assert is_valid(1.5, number)
    assert is_valid(2, number)
    assert not is_valid(True, number)
    assert is_valid(2, integer)
    assert not is_valid(2.5, integer)
    assert is_valid(False, boolean)
    assert not is_valid(0, boolean)
    assert is_valid(None, null)
    assert not is_valid("", null)


def test_literal_and_enum():
    assert is_valid("light", literal("light"))
    assert not is_valid("dark", literal("light"))
    assert not is_valid(1, literal(True))
    assert is_valid("b", enum_("a", "b"))
    result = decode("c", enum_("a", "b"))
    assert result.issues[0].expected == '"a" | "b"'


def test_annotated_is_transparent():
    node = object_(age=annotate(number, description="Age in years", default=0))
    assert decode({"age": 3}, node).ok
    result = decode({"age": None}, node)
    assert result.issues[0].expected == "number"


# ---- Unions ----


def test_union_first_match_wins():
    first = object_(a=number)
    second = object_(a=number, b=ignore(string))
    result = decode({"a": 1, "b": "x"}, union(first, second))
    # Typed by the first variant: narrowed to its declared properties.
    assert result.value == {"a": 1}


def test_union_reports_first_variant_issues_only():
    node = object_(value=union(object_(x=number), object_(y=string)))
    result = decode({"value": {"x": "1", "y": 2}}, node)

    assert len(result.issues) == 1
    assert result.issues[0].path == ("value", "x")
    assert result.issues[0].expected == "number"


def test_union_scalar_mismatch_label():
    result = decode({"v": []}, object_(v=union(string, number)))
    assert result.issues[0].path == ("v",)
    assert result.issues[0].expected == "(string | number)"


def test_issue_message():
    result = decode({"details": {"age": "30"}}, object_(details=object_(age=number)))
    assert result.issues[0].message == '$.details.age: expected number, got "30"'
