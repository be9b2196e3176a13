"""Tests for tool definitions, the registry, and schema generation from functions."""

import enum
from typing import Dict, List, Literal, Optional, Tuple, Union

import pytest
from pydantic import BaseModel

from toolshape.errors import UnsupportedTypeError
from toolshape.tools import Tool, ToolCall, ToolRegistry, tool, tool_from_function
from toolshape.types import array, object_, string


def test_tool_decorator_attaches_definition():
    @tool
    def greet(name: str) -> str:
        """Say hello."""
        return f"Hello, {name}!"

    assert hasattr(greet, "_tool_definition")
    defn = greet._tool_definition
    assert isinstance(defn, Tool)
    assert defn.name == "greet"
    assert defn.description == "Say hello."


def test_tool_decorator_preserves_function():
    @tool
    def add(a: int, b: int) -> int:
        """Add two numbers."""
        return a + b

    assert add(2, 3) == 5


def test_schema_generation_types():
    @tool
    def process(name: str, count: int, rate: float, active: bool) -> str:
        """Process something."""
        return "done"

    schema = process._tool_definition.to_schema()
    props = schema["parameters"]["properties"]
    assert props["name"]["type"] == "string"
    assert props["count"]["type"] == "integer"
    assert props["rate"]["type"] == "number"
    assert props["active"]["type"] == "boolean"
    assert list(props) == ["name", "count", "rate", "active"]


def test_defaulted_params_are_still_required():
    @tool
    def required_and_optional(name: str, greeting: str = "hello") -> str:
        """Test required vs optional."""
        return f"{greeting}, {name}"

    defn = required_and_optional._tool_definition
    schema = defn.to_schema()
    # Every declared parameter is required; the default only backfills.
    assert schema["parameters"]["required"] == ["name", "greeting"]
    assert "default" not in schema["parameters"]["properties"]["greeting"]
    assert defn.parameters.property_map()["greeting"].default == "hello"


def test_tool_registry():
    registry = ToolRegistry()

    def my_tool(x: int) -> int:
        """Double a number."""
        return x * 2

    defn = registry.register(my_tool)
    assert defn.name == "my_tool"
    assert registry.get("my_tool") is defn
    assert registry.get("missing") is None
    assert len(registry.list_tools()) == 1
    assert len(registry.schemas()) == 1


def test_registry_accepts_tools_and_decorated_functions():
    @tool
    def ping(host: str) -> str:
        """Ping a host."""
        return host

    explicit = Tool(name="tags", description="Pick tags", parameters=array(string))
    registry = ToolRegistry()

    assert registry.register(ping) is ping._tool_definition
    assert registry.register(explicit) is explicit
    assert [t.name for t in registry.list_tools()] == ["ping", "tags"]


def test_decoded_parameters_call_the_function():
    @tool
    def multiply(a: int, b: int) -> int:
        """Multiply two numbers."""
        return a * b

    call = ToolCall(tool=multiply._tool_definition, parameters={"a": 3, "b": 4})
    assert multiply(**call.parameters) == 12
    assert call.tool_index == 0


def test_tool_schema_wraps_non_object_parameters():
    wrapped = Tool(name="tags", description="Pick tags", parameters=array(string))
    plain = Tool(name="mood", description="Set mood", parameters=object_(emotion=string))

    assert wrapped.schema().wrapped is True
    assert wrapped.to_schema()["parameters"]["properties"]["items"]["type"] == "array"
    assert plain.schema().wrapped is False


def test_tool_from_function_without_docstring():
    def bare(x: str):
        return x

    assert tool_from_function(bare).description == ""


# ---- Richer type mapping tests ----


def test_optional_str_parameter():
    @tool
    def greet(name: str, title: Optional[str] = None) -> str:
        """Greet someone."""
        return f"Hello, {title or ''} {name}"

    schema = greet._tool_definition.to_schema()
    props = schema["parameters"]["properties"]
    assert props["title"] == {"oneOf": [{"type": "string"}, {"type": "null"}]}
    assert props["name"] == {"type": "string"}


def test_list_str_parameter():
    @tool
    def process(items: List[str], pairs: Tuple[int, ...]) -> str:
        """Process items."""
        return ", ".join(items)

    props = process._tool_definition.to_schema()["parameters"]["properties"]
    assert props["items"] == {"type": "array", "items": {"type": "string"}}
    assert props["pairs"] == {"type": "array", "items": {"type": "integer"}}


def test_dict_parameter_is_unsupported():
    def count(scores: Dict[str, int]) -> int:
        """Count scores."""
        return sum(scores.values())

    with pytest.raises(UnsupportedTypeError):
        tool(count)


def test_literal_parameter():
    @tool
    def set_mode(mode: Literal["fast", "slow"], level: Literal[1, 2]) -> str:
        """Set mode."""
        return mode

    props = set_mode._tool_definition.to_schema()["parameters"]["properties"]
    assert props["mode"] == {"type": "string", "enum": ["fast", "slow"]}
    assert props["level"] == {"oneOf": [{"const": 1}, {"const": 2}]}


def test_enum_parameter():
    class Color(enum.Enum):
        RED = "red"
        GREEN = "green"
        BLUE = "blue"

    @tool
    def paint(color: Color) -> str:
        """Paint."""
        return color.value

    props = paint._tool_definition.to_schema()["parameters"]["properties"]
    assert props["color"]["type"] == "string"
    assert props["color"]["enum"] == ["red", "green", "blue"]


def test_pydantic_model_parameter():
    class Address(BaseModel):
        street: str
        city: str

    @tool
    def ship(address: Address) -> str:
        """Ship to address."""
        return f"Shipped to {address.city}"

    addr_schema = ship._tool_definition.to_schema()["parameters"]["properties"]["address"]
    assert addr_schema["type"] == "object"
    assert list(addr_schema["properties"]) == ["street", "city"]
    assert addr_schema["required"] == ["street", "city"]


def test_union_parameter():
    @tool
    def process(value: Union[str, int]) -> str:
        """Process a value."""
        return str(value)

    props = process._tool_definition.to_schema()["parameters"]["properties"]
    assert props["value"] == {"oneOf": [{"type": "string"}, {"type": "integer"}]}
